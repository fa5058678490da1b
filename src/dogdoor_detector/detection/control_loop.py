import asyncio
import logging
from contextlib import aclosing
from enum import Enum

from dogdoor_detector.core.effect_dispatcher import EffectDispatcher
from dogdoor_detector.core.errors import ShutdownError
from dogdoor_detector.detection.config import runtime_config, torch_config
from dogdoor_detector.detection.door_state import door_open
from dogdoor_detector.detection.tick_controller import TickController
from dogdoor_detector.detection.torch_window import current_hour, load_timezone
from dogdoor_detector.hardware.sensor_feed import TermuxSensorFeed
from dogdoor_detector.hardware.torch import TermuxTorch

logger = logging.getLogger(__name__)


class LoopState(Enum):
    STARTING = "starting"
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class ControlLoop:
    """Polls the sensor, feeds the tick controller and dispatches its effects.

    Whatever way the loop ends, the torch is switched off and the sensors are
    cleaned up; a failure in either raises ShutdownError.
    """

    def __init__(
        self,
        feed: TermuxSensorFeed,
        controller: TickController,
        dispatcher: EffectDispatcher,
        torch: TermuxTorch,
        stop_event: asyncio.Event,
        timezone: str = torch_config.timezone,
        settle_delay: float = runtime_config.settle_delay,
        drain_timeout: float = runtime_config.drain_timeout,
    ):
        self.feed = feed
        self.controller = controller
        self.dispatcher = dispatcher
        self.torch = torch
        self.stop_event = stop_event
        self.timezone = timezone
        self.settle_delay = settle_delay
        self.drain_timeout = drain_timeout
        self.state = LoopState.STARTING
        self.ticks = 0

    def _set_state(self, state: LoopState) -> None:
        logger.debug(f"Control loop {self.state.value} -> {state.value}")
        self.state = state

    async def run(self) -> None:
        # Must fail before termux-sensor is spawned
        tz = load_timezone(self.timezone)

        logger.info(f"Waiting {self.settle_delay}s to allow time for positioning...")
        await asyncio.sleep(self.settle_delay)
        logger.info("Starting")

        door = self.controller.door
        try:
            await self.feed.start()
            self._set_state(LoopState.RUNNING)
            async with aclosing(self.feed.readings(self.stop_event)) as readings:
                async for reading in readings:
                    is_open = door_open(reading, door.axis, door.closed_field_strength, door.closed_field_range)
                    effects = self.controller.on_tick(reading, is_open, current_hour(tz))
                    self.dispatcher.dispatch(effects)
                    self.ticks += 1
            self._set_state(LoopState.DRAINING)
            logger.info(f"Sensor feed ended after {self.ticks} readings")
            await self.dispatcher.drain(self.drain_timeout)
        finally:
            await self._shutdown()

    async def _shutdown(self) -> None:
        """Switch the torch off and release the sensors, reporting any failure."""
        failures: list[str] = []

        logger.info("Making sure the torch is off...")
        try:
            await self.torch.set_state(False)
        except Exception as e:
            logger.error(f"Failed to switch the torch off: {e}", exc_info=True)
            failures.append(f"torch off: {e}")

        try:
            await self.feed.stop()
        except Exception as e:
            logger.error(f"Failed to stop the sensor stream: {e}", exc_info=True)
            failures.append(f"sensor stop: {e}")

        try:
            await self.feed.cleanup()
        except Exception as e:
            logger.error(f"Failed to clean up sensors: {e}", exc_info=True)
            failures.append(f"sensor cleanup: {e}")

        self._set_state(LoopState.STOPPED)
        if failures:
            raise ShutdownError("; ".join(failures))
        logger.info("Shutdown complete")
