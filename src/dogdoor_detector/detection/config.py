"""Configuration management for the dog door detector."""
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from telegram.helpers import escape_markdown


class SensorConfig(BaseSettings):
    """Magnetometer feed settings (termux-sensor)."""
    model_config = SettingsConfigDict(env_prefix="DETECTOR_SENSOR_")

    command: str = Field(default="termux-sensor", description="Executable used to stream and clean up sensors")
    sensor_name: str = Field(default="magnet", description="Sensor name passed to termux-sensor -s")
    block_key: str = Field(default="AK8963 Magnetometer", description="Key of the sensor object in each JSON block")
    block_lines: int = Field(default=9, description="Number of stdout lines making up one JSON reading block")
    poll_interval_ms: int = Field(default=3500, description="Interval between sensor polls in milliseconds")

    @field_validator('block_lines', 'poll_interval_ms')
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Value must be a positive integer")
        return v


class DoorConfig(BaseSettings):
    """Calibration of the door state evaluation."""
    model_config = SettingsConfigDict(env_prefix="DETECTOR_DOOR_")

    axis: int = Field(default=1, description="Magnetometer axis (0-2: x, y, z) used to decide whether the door is open")
    closed_field_strength: float = Field(default=-270.0, description="Expected value on the axis when the door is closed")
    closed_field_range: float = Field(default=70.0, description="Range around closed_field_strength considered closed")
    blocked_ticks: int = Field(default=14, description="Consecutive open polls before the door is reported as blocked")

    @field_validator('axis')
    @classmethod
    def validate_axis(cls, v: int) -> int:
        if not 0 <= v <= 2:
            raise ValueError("Axis must be 0, 1 or 2")
        return v

    @field_validator('closed_field_range')
    @classmethod
    def validate_range(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Closed field range must be positive")
        return v

    @field_validator('blocked_ticks')
    @classmethod
    def validate_blocked_ticks(cls, v: int) -> int:
        if v < 2:
            raise ValueError("blocked_ticks must be at least 2")
        return v


class TorchConfig(BaseSettings):
    """Configuration for the torch used while the door is open at night."""
    model_config = SettingsConfigDict(env_prefix="DETECTOR_TORCH_")

    enabled: bool = Field(default=True, description="Whether the torch is switched on when the door opens")
    command: str = Field(default="termux-torch", description="Executable used to switch the torch")
    timezone: str = Field(default="Australia/Melbourne", description="IANA time zone used for the torch hours")
    hour_min: int = Field(default=18, description="First local hour when the torch is used")
    hour_max: int = Field(default=6, description="Local hour when the torch stops being used (exclusive)")
    safety_off_ticks: int = Field(default=7, description="Polls after which the torch is switched off regardless of the door")
    closed_off_ticks: int = Field(default=4, description="Polls after which the torch is switched off once the door is closed")

    @field_validator('hour_min', 'hour_max')
    @classmethod
    def validate_hour(cls, v: int) -> int:
        if not 0 <= v <= 23:
            raise ValueError("Hour must be between 0 and 23")
        return v


class NotificationConfig(BaseSettings):
    """Configuration for Telegram notifications."""
    # Credentials are read from DETECTOR_TG_KEY, DETECTOR_TG_CHAT and DETECTOR_MSG_PREFIX
    model_config = SettingsConfigDict(env_prefix="DETECTOR_TELEGRAM_", populate_by_name=True)

    enabled: bool = Field(default=True, description="Whether Telegram notifications are sent")
    bot_token: str | None = Field(
        default=None,
        validation_alias="DETECTOR_TG_KEY",
        description="Bot API token assigned by Telegram",
    )
    chat_id: str | None = Field(
        default=None,
        validation_alias="DETECTOR_TG_CHAT",
        description="Chat receiving the messages, negative for groups",
    )
    message_prefix: str = Field(
        default="",
        validation_alias="DETECTOR_MSG_PREFIX",
        description="Text prepended to every message, useful when testing",
    )
    dog_name_possessive: str = Field(default="Puppy's", description="Dog's name used in messages")
    max_attempts: int = Field(default=5, description="Maximum attempts for sending a message")
    backoff_base: float = Field(default=2.0, description="Initial retry delay in seconds, doubled after each attempt")

    def _prefixed(self, text: str) -> str:
        if self.message_prefix:
            text = f"{self.message_prefix} {text}"
        return escape_markdown(text, version=2)

    @property
    def door_used_message(self) -> str:
        """MarkdownV2 message sent when the door is used."""
        return self._prefixed(f"{self.dog_name_possessive} dog door was used!")

    def door_blocked_message(self, open_seconds: int) -> str:
        """MarkdownV2 message sent when the door has stayed open for open_seconds."""
        return self._prefixed(
            f"{self.dog_name_possessive} dog door has been open for over {open_seconds} seconds. "
            "It may be blocked or the detector may have malfunctioned."
        )


class RuntimeConfig(BaseSettings):
    """Configuration for logging and process lifecycle."""
    model_config = SettingsConfigDict(env_prefix="DETECTOR_")

    log_level: str = Field(default="INFO", description="Logging level")
    log_to_file: bool = Field(default=True, description="Also write the log to log_file; stdout is always used")
    log_dir: str = Field(default="runtime/logs", description="Logging directory")
    log_file: str = Field(default="runtime/logs/dogdoor_detector.log", description="Logging file")
    settle_delay: float = Field(default=5.0, description="Seconds to wait before polling, to allow positioning the phone")
    drain_timeout: float = Field(default=10.0, description="Seconds to wait for in-flight notifications at shutdown")


sensor_config = SensorConfig()
door_config = DoorConfig()
torch_config = TorchConfig()
notification_config = NotificationConfig()
runtime_config = RuntimeConfig()
