from dogdoor_detector.detection.config import door_config
from dogdoor_detector.detection.reading import Reading


def door_open(
    reading: Reading,
    axis: int = door_config.axis,
    closed_value: float = door_config.closed_field_strength,
    closed_range: float = door_config.closed_field_range,
) -> bool:
    """Return whether the dog door is open for a reading.

    The door is closed only while the monitored axis lies strictly within
    ``closed_range`` of ``closed_value``; a reading exactly on the edge counts
    as open.
    """
    return not abs(reading[axis] - closed_value) < closed_range
