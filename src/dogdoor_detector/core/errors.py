"""Exceptions raised by the dog door detector."""


class DetectorError(Exception):
    """Base class for all detector errors."""


class ConfigurationError(DetectorError):
    """Invalid or missing configuration, fatal at startup."""


class SensorError(DetectorError):
    """The sensor feed could not be started, stopped or cleaned up."""


class SensorParseError(SensorError):
    """A block of sensor output could not be parsed into a reading."""


class LightError(DetectorError):
    """The torch could not be switched."""


class NotificationError(DetectorError):
    """A Telegram message could not be delivered."""


class ShutdownError(DetectorError):
    """Final torch-off or sensor cleanup failed; physical state may be left dirty."""
