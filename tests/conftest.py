"""Pytest configuration for dog door detector tests."""
import pytest
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from dogdoor_detector.detection.config import NotificationConfig, TorchConfig  # noqa: E402
from dogdoor_detector.hardware.torch import TermuxTorch  # noqa: E402

CLOSED_Y = -270.0
OPEN_Y = 120.0


def sensor_block(x: float, y: float, z: float, key: str = "AK8963 Magnetometer") -> list[bytes]:
    """Return the nine lines termux-sensor prints for one reading."""
    text = (
        "{\n"
        f'  "{key}": {{\n'
        '    "values": [\n'
        f"      {x},\n"
        f"      {y},\n"
        f"      {z}\n"
        "    ]\n"
        "  }\n"
        "}\n"
    )
    return [line.encode() for line in text.splitlines(keepends=True)]


class FakeStdout:
    """Stand-in for a subprocess stdout stream, returning one queued line per readline()."""

    def __init__(self, lines, on_line=None):
        self._lines = list(lines)
        self.read_count = 0
        self.on_line = on_line

    async def readline(self) -> bytes:
        if not self._lines:
            return b""
        line = self._lines.pop(0)
        self.read_count += 1
        if self.on_line is not None:
            self.on_line(self.read_count)
        return line


class FakeProcess:
    """Stand-in for asyncio.subprocess.Process."""

    def __init__(self, stdout=None, returncode=None, stderr: bytes = b""):
        self.stdout = stdout
        self.returncode = returncode
        self.pid = 4242
        self.kill_calls = 0
        self._stderr = stderr

    def kill(self) -> None:
        self.kill_calls += 1
        self.returncode = -9

    async def wait(self) -> int:
        return self.returncode

    async def communicate(self):
        return b"", self._stderr


class ScriptedFeed:
    """Sensor feed yielding a fixed list of readings."""

    def __init__(self, readings):
        self._readings = list(readings)
        self.started = False
        self.stop_calls = 0
        self.cleanup_calls = 0
        self.cleanup_error: Exception | None = None

    async def start(self) -> None:
        self.started = True

    async def readings(self, stop_event):
        for reading in self._readings:
            if stop_event.is_set():
                break
            yield reading

    async def stop(self) -> None:
        self.stop_calls += 1

    async def cleanup(self) -> None:
        self.cleanup_calls += 1
        if self.cleanup_error is not None:
            raise self.cleanup_error


@pytest.fixture
def notification_settings():
    return NotificationConfig(bot_token="123456:TEST", chat_id="-1001234", backoff_base=0)


@pytest.fixture
def night_torch_settings():
    return TorchConfig(enabled=True, hour_min=18, hour_max=6)


@pytest.fixture
def mock_torch():
    """TermuxTorch double whose set_state is an AsyncMock."""
    return MagicMock(spec=TermuxTorch)


@pytest.fixture
def mock_notifier():
    notifier = MagicMock()
    notifier.send = AsyncMock()
    return notifier
