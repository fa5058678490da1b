from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dogdoor_detector.core.errors import ConfigurationError


def use_torch(enabled: bool, hour_min: int, hour_max: int, hour: int) -> bool:
    """Return whether the torch may be used at the given local hour.

    The window is [hour_min, hour_max) and wraps past midnight when
    hour_max <= hour_min, e.g. 18 to 6.
    """
    if not enabled:
        return False
    if hour_max > hour_min:
        return hour_min <= hour < hour_max
    return hour < hour_max or hour >= hour_min


def load_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Unknown time zone {name!r}") from e


def current_hour(tz: ZoneInfo) -> int:
    return datetime.now(tz).hour
