import asyncio
import threading
import signal
import sys
import logging
import os

from dogdoor_detector.core.logging import setup_logging
from dogdoor_detector.core.errors import DetectorError
from dogdoor_detector.core.effect_dispatcher import EffectDispatcher
from dogdoor_detector.detection.config import notification_config
from dogdoor_detector.detection.control_loop import ControlLoop
from dogdoor_detector.detection.tick_controller import TickController
from dogdoor_detector.hardware.sensor_feed import TermuxSensorFeed
from dogdoor_detector.hardware.torch import TermuxTorch
from dogdoor_detector.notifications.telegram_bot import TelegramNotifier

VERSION = "0.1"

logger = logging.getLogger(__name__)


def watch_stdin(loop: asyncio.AbstractEventLoop, stop_event: asyncio.Event) -> None:
    """Block until stdin reaches end of input, then request a stop."""
    for _ in sys.stdin:
        pass
    logger.info("EOF received, process ending")
    loop.call_soon_threadsafe(stop_event.set)


def install_signal_handlers(loop: asyncio.AbstractEventLoop, stop_event: asyncio.Event) -> None:
    """Turn SIGINT/SIGTERM into a stop request so the torch still gets switched off"""
    def signal_handler(signum, frame):
        logger.info(f"Shutdown signal {signal.Signals(signum).name} received, stopping...")
        loop.call_soon_threadsafe(stop_event.set)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


async def app() -> None:
    setup_logging()

    logger.info(f"=== Dog Door Detector version {VERSION} - starting ===")
    logger.info(f"Process ID: {os.getpid()=}")
    logger.info("Press Ctrl+D to exit")

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()
    install_signal_handlers(loop, stop_event)
    threading.Thread(target=watch_stdin, args=(loop, stop_event), daemon=True).start()

    notifier = None
    if notification_config.enabled:
        notifier = TelegramNotifier(notification_config)
        await notifier.initialize()
    else:
        logger.info("Telegram notifications are disabled")

    torch = TermuxTorch()
    control_loop = ControlLoop(
        feed=TermuxSensorFeed(),
        controller=TickController(),
        dispatcher=EffectDispatcher(notifier, torch),
        torch=torch,
        stop_event=stop_event,
    )
    try:
        await control_loop.run()
    finally:
        if notifier is not None:
            await notifier.shutdown()
    logger.info("Process completed")


def main():
    """Entry point for the CLI command"""
    try:
        asyncio.run(app())
    except DetectorError as e:
        logger.critical(f"Fatal error: {type(e).__name__}: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
