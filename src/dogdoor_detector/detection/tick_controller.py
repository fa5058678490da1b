import logging

from dogdoor_detector.detection.config import (
    door_config,
    notification_config,
    sensor_config,
    torch_config,
    DoorConfig,
    NotificationConfig,
    SensorConfig,
    TorchConfig,
)
from dogdoor_detector.detection.effects import Effect, Notify, SetLight
from dogdoor_detector.detection.reading import Reading
from dogdoor_detector.detection.torch_window import use_torch

logger = logging.getLogger(__name__)

LIGHT_DISABLED = -1


class TickController:
    """Turns one door state per poll into notification and torch requests.

    Owns the open and light counters; it must be called sequentially, once
    per reading, and never performs I/O itself.
    """

    def __init__(
        self,
        door: DoorConfig = door_config,
        torch: TorchConfig = torch_config,
        notifications: NotificationConfig = notification_config,
        sensor: SensorConfig = sensor_config,
    ):
        self.door = door
        self.torch = torch
        self.door_used_message = notifications.door_used_message
        # The blocked alert fires on the blocked_ticks-th open poll
        open_seconds = int(sensor.poll_interval_ms * (door.blocked_ticks - 1) / 1000)
        self.door_blocked_message = notifications.door_blocked_message(open_seconds)

        # Consecutive polls with the door open
        self.open_count = 0
        # Polls since the torch was switched on, LIGHT_DISABLED when off
        self.light_count = LIGHT_DISABLED
        self.has_received_data = False

    def on_tick(self, reading: Reading, is_open: bool, hour: int) -> list[Effect]:
        """
        Process one poll of the sensor.

        Args:
            reading: The raw magnetometer reading (used for logging)
            is_open: Door state evaluated from the reading
            hour: Current hour in the local time zone, for the torch window

        Returns:
            Effects to dispatch, in the order they were decided
        """
        effects: list[Effect] = []

        if not self.has_received_data:
            logger.info("Ready")
            self.has_received_data = True

        if self.light_count >= 0:
            self.light_count += 1
        if self.light_count >= self.torch.safety_off_ticks:
            # Torch has been on for safety_off_ticks polls, whatever the door does
            effects.append(self._light_off())

        if is_open:
            effects.extend(self._open_tick(reading, hour))
        else:
            effects.extend(self._closed_tick())

        return effects

    def _closed_tick(self) -> list[Effect]:
        self.open_count = 0
        if self.light_count >= self.torch.closed_off_ticks:
            return [self._light_off()]
        return []

    def _open_tick(self, reading: Reading, hour: int) -> list[Effect]:
        effects: list[Effect] = []
        self.open_count += 1
        logger.info(f"  OPEN: [{self.open_count}, {self.light_count}] {reading}")

        if self.open_count == 1:
            effects.append(Notify(self.door_used_message))
            if use_torch(self.torch.enabled, self.torch.hour_min, self.torch.hour_max, hour):
                self.light_count = 0
                effects.append(SetLight(True))

        if self.open_count == self.door.blocked_ticks:
            logger.warning(f"Door open for {self.open_count=} polls, it may be blocked")
            effects.append(Notify(self.door_blocked_message))

        return effects

    def _light_off(self) -> SetLight:
        self.light_count = LIGHT_DISABLED
        return SetLight(False)
