import asyncio
import logging
from collections.abc import AsyncIterator

from dogdoor_detector.core.errors import SensorError
from dogdoor_detector.detection.config import sensor_config, SensorConfig
from dogdoor_detector.detection.reading import Reading, parse_block

logger = logging.getLogger(__name__)


class TermuxSensorFeed:
    """Streams magnetometer readings from termux-sensor.

    termux-sensor cannot be asked to exit cleanly, so stopping kills the
    process and ``cleanup()`` detaches the sensors afterwards.
    """

    def __init__(self, config: SensorConfig = sensor_config):
        self.config = config
        self.process: asyncio.subprocess.Process | None = None

    async def start(self) -> None:
        """
        Spawn termux-sensor with the configured polling interval.

        Raises:
            SensorError: termux-sensor could not be started
        """
        if self.process is not None:
            return
        args = ["-s", self.config.sensor_name, "-d", str(self.config.poll_interval_ms)]
        try:
            self.process = await asyncio.create_subprocess_exec(
                self.config.command, *args,
                stdout=asyncio.subprocess.PIPE,
                stdin=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            raise SensorError(f"Could not start {self.config.command}: {e}") from e
        logger.info(f"Started {self.config.command} {' '.join(args)} ({self.process.pid=})")

    async def readings(self, stop_event: asyncio.Event) -> AsyncIterator[Reading]:
        """
        Yield one reading per polling interval until stopped or the stream ends.

        The stop event is checked between lines; once set, the process is
        killed and any partly read block is dropped.

        Raises:
            SensorError: the feed was not started
            SensorParseError: a block could not be parsed
        """
        if self.process is None or self.process.stdout is None:
            raise SensorError("Sensor feed not started. Call start() first.")

        stdout = self.process.stdout
        buffer: list[bytes] = []
        try:
            while not stop_event.is_set():
                line = await stdout.readline()
                if not line:
                    logger.warning(f"{self.config.command} closed its output")
                    break
                buffer.append(line)
                if len(buffer) != self.config.block_lines:
                    continue

                block = b"".join(buffer)
                buffer = []
                if stop_event.is_set():
                    break
                yield parse_block(block, self.config.block_key)
        finally:
            if buffer:
                logger.info(f"Discarding {len(buffer)} buffered lines of a partial block")
            await self.stop()

    async def stop(self) -> None:
        """Kill termux-sensor if it is still running."""
        process = self.process
        if process is None or process.returncode is not None:
            return
        logger.info(f"Killing {self.config.command} ({process.pid=})")
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()

    async def cleanup(self) -> None:
        """
        Run ``termux-sensor -c`` to release the sensors.

        Raises:
            SensorError: the cleanup command failed
        """
        logger.info("Cleaning up sensors...")
        try:
            process = await asyncio.create_subprocess_exec(
                self.config.command, "-c",
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
            returncode = await process.wait()
        except OSError as e:
            raise SensorError(f"exec `{self.config.command} -c`: {e}") from e
        if returncode != 0:
            raise SensorError(f"`{self.config.command} -c` exited with {returncode}")
