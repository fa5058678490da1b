import asyncio
import logging
import pytest
from dogdoor_detector.core.effect_dispatcher import EffectDispatcher
from dogdoor_detector.core.errors import LightError, NotificationError
from dogdoor_detector.detection.effects import Notify, SetLight


@pytest.mark.asyncio
async def test_dispatch_runs_effects(mock_notifier, mock_torch):
    dispatcher = EffectDispatcher(mock_notifier, mock_torch)

    dispatcher.dispatch([Notify("door used"), SetLight(True)])
    await dispatcher.drain(timeout=1.0)

    mock_notifier.send.assert_awaited_once_with("door used", silent=False)
    mock_torch.set_state.assert_awaited_once_with(True)
    assert dispatcher.pending == 0


@pytest.mark.asyncio
async def test_dispatch_does_not_wait_for_effects(mock_notifier, mock_torch):
    release = asyncio.Event()

    async def slow_send(message, silent=False):
        await release.wait()

    mock_notifier.send.side_effect = slow_send
    dispatcher = EffectDispatcher(mock_notifier, mock_torch)

    dispatcher.dispatch([Notify("door used")])

    expected_pending = 1
    assert dispatcher.pending == expected_pending

    release.set()
    await dispatcher.drain(timeout=1.0)
    assert dispatcher.pending == 0


@pytest.mark.asyncio
async def test_failures_are_logged_not_raised(mock_notifier, mock_torch, caplog):
    mock_notifier.send.side_effect = NotificationError("telegram down")
    mock_torch.set_state.side_effect = LightError("torch busy")
    dispatcher = EffectDispatcher(mock_notifier, mock_torch)

    with caplog.at_level(logging.ERROR):
        dispatcher.dispatch([Notify("door used"), SetLight(True), SetLight(False)])
        await dispatcher.drain(timeout=1.0)

    expected_light_calls = 2
    assert mock_torch.set_state.await_count == expected_light_calls
    assert "telegram down" in caplog.text
    assert "torch busy" in caplog.text


@pytest.mark.asyncio
async def test_notifications_skipped_without_notifier(mock_torch):
    dispatcher = EffectDispatcher(None, mock_torch)

    dispatcher.dispatch([Notify("door used"), SetLight(True)])
    await dispatcher.drain(timeout=1.0)

    mock_torch.set_state.assert_awaited_once_with(True)


@pytest.mark.asyncio
async def test_drain_cancels_stuck_effects(mock_notifier, mock_torch):
    async def never_returns(message, silent=False):
        await asyncio.Event().wait()

    mock_notifier.send.side_effect = never_returns
    dispatcher = EffectDispatcher(mock_notifier, mock_torch)

    dispatcher.dispatch([Notify("door used")])
    await dispatcher.drain(timeout=0.05)

    assert dispatcher.pending == 0
