"""
Magnetometer reading and parsing of termux-sensor output blocks.
"""
from dataclasses import dataclass

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, ValidationError

from dogdoor_detector.core.errors import SensorParseError


@dataclass(frozen=True)
class Reading:
    """
    One magnetometer sample: field strength on the x, y and z axes.
    """
    x: float
    y: float
    z: float

    def __getitem__(self, axis: int) -> float:
        return (self.x, self.y, self.z)[axis]

    @classmethod
    def from_values(cls, values: tuple[float, float, float]) -> 'Reading':
        x, y, z = values
        return cls(x=x, y=y, z=z)

    def __str__(self) -> str:
        return f"[{self.x}, {self.y}, {self.z}]"


class SensorValues(BaseModel):
    values: tuple[float, float, float] = Field(validation_alias=AliasChoices("values", "Values"))


_block_adapter = TypeAdapter(dict[str, SensorValues])


def parse_block(block: str | bytes, sensor_key: str) -> Reading:
    """Parse one JSON block printed by termux-sensor.

    The block looks like ``{"AK8963 Magnetometer": {"values": [x, y, z]}}``.

    Raises:
        SensorParseError: the block is not valid JSON, lacks the sensor or
            does not carry exactly three values.
    """
    try:
        sensors = _block_adapter.validate_json(block)
    except ValidationError as e:
        raise SensorParseError(f"Invalid sensor block: {e}") from e

    if sensor_key not in sensors:
        raise SensorParseError(f"Sensor {sensor_key!r} missing from block, got {list(sensors)}")
    return Reading.from_values(sensors[sensor_key].values)
