"""
Side effects requested by the tick controller and carried out by the dispatcher.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class Notify:
    """Send a Telegram message."""
    message: str
    silent: bool = False


@dataclass(frozen=True)
class SetLight:
    """Switch the torch on or off."""
    on: bool


Effect = Notify | SetLight
