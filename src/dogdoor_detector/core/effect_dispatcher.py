import logging
import asyncio
from collections.abc import Iterable

from dogdoor_detector.detection.effects import Effect, Notify, SetLight
from dogdoor_detector.hardware.torch import TermuxTorch
from dogdoor_detector.notifications.telegram_bot import TelegramNotifier

logger = logging.getLogger(__name__)


class EffectDispatcher:
    """Runs requested effects as independent background tasks.

    Failures are logged and never reach the control loop.
    """

    def __init__(self, notifier: TelegramNotifier | None, torch: TermuxTorch):
        self.notifier = notifier
        self.torch = torch
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, effects: Iterable[Effect]) -> None:
        """Schedule each effect without waiting for it."""
        for effect in effects:
            task = asyncio.create_task(self._run(effect))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _run(self, effect: Effect) -> None:
        try:
            match effect:
                case Notify(message=message, silent=silent):
                    if self.notifier is None:
                        logger.info(f"Telegram disabled, not sending {message=}")
                        return
                    await self.notifier.send(message, silent=silent)
                case SetLight(on=on):
                    await self.torch.set_state(on)
        except asyncio.CancelledError:
            logger.warning(f"Effect cancelled before completion: {effect=}")
            raise
        except Exception as e:
            logger.error(f"Failed to carry out {effect=}: {type(e).__name__}: {e}", exc_info=True)

    async def drain(self, timeout: float) -> None:
        """Wait for in-flight effects, cancelling whatever is left after timeout."""
        if not self._tasks:
            return
        logger.info(f"Waiting up to {timeout}s for {len(self._tasks)} in-flight effects")
        _, still_running = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)
            logger.warning(f"Cancelled {len(still_running)} effects still running at shutdown")
