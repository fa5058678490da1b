import asyncio
import logging

from dogdoor_detector.core.errors import LightError
from dogdoor_detector.detection.config import torch_config

logger = logging.getLogger(__name__)


class TermuxTorch:
    """Switches the phone torch through termux-torch."""

    def __init__(self, command: str = torch_config.command):
        self.command = command
        self.is_on = False
        self._lock = asyncio.Lock()  # Keep on/off requests in the order they were issued

    async def set_state(self, on: bool) -> None:
        """
        Switch the torch on or off.

        Raises:
            LightError: termux-torch could not be run or exited with an error
        """
        arg = "on" if on else "off"
        async with self._lock:
            try:
                process = await asyncio.create_subprocess_exec(
                    self.command, arg,
                    stdout=asyncio.subprocess.DEVNULL,
                    stderr=asyncio.subprocess.PIPE,
                )
                _, stderr = await process.communicate()
            except OSError as e:
                raise LightError(f"exec `{self.command} {arg}`: {e}") from e

            if process.returncode != 0:
                detail = stderr.decode(errors="replace").strip() if stderr else ""
                raise LightError(f"`{self.command} {arg}` exited with {process.returncode}: {detail}")

            self.is_on = on
            logger.info(f"Torch switched {arg}")
