import pytest
from unittest.mock import AsyncMock, patch
from conftest import FakeProcess
from dogdoor_detector.core.errors import LightError
from dogdoor_detector.hardware.torch import TermuxTorch


@pytest.mark.asyncio
async def test_set_state_on():
    with patch('dogdoor_detector.hardware.torch.asyncio.create_subprocess_exec', new_callable=AsyncMock) as mock_exec:
        mock_exec.return_value = FakeProcess(returncode=0)
        torch = TermuxTorch()

        await torch.set_state(True)

        assert mock_exec.call_args.args == ("termux-torch", "on")
        assert torch.is_on is True


@pytest.mark.asyncio
async def test_set_state_off():
    with patch('dogdoor_detector.hardware.torch.asyncio.create_subprocess_exec', new_callable=AsyncMock) as mock_exec:
        mock_exec.return_value = FakeProcess(returncode=0)
        torch = TermuxTorch(command="/data/bin/termux-torch")
        torch.is_on = True

        await torch.set_state(False)

        assert mock_exec.call_args.args == ("/data/bin/termux-torch", "off")
        assert torch.is_on is False


@pytest.mark.asyncio
async def test_set_state_non_zero_exit():
    with patch('dogdoor_detector.hardware.torch.asyncio.create_subprocess_exec', new_callable=AsyncMock) as mock_exec:
        mock_exec.return_value = FakeProcess(returncode=1, stderr=b"Torch unavailable")
        torch = TermuxTorch()

        with pytest.raises(LightError, match="Torch unavailable"):
            await torch.set_state(True)

        assert torch.is_on is False


@pytest.mark.asyncio
async def test_set_state_missing_command():
    with patch('dogdoor_detector.hardware.torch.asyncio.create_subprocess_exec', new_callable=AsyncMock) as mock_exec:
        mock_exec.side_effect = FileNotFoundError("termux-torch")
        torch = TermuxTorch()

        with pytest.raises(LightError):
            await torch.set_state(True)
