import asyncio
import os
import signal
import threading

import pytest
from unittest.mock import MagicMock

from composecli.core.command_handler import CommandHandler
from composecli.core.project_action import with_project
from composecli.core.up_coordinator import UpCoordinator, UpOutcome
from composecli.domain.errors import ProjectOperationError


@pytest.fixture
def release():
    """Unblocks log streams that tests leave following."""
    event = threading.Event()
    yield event
    event.set()


@pytest.fixture
def following(mock_log_stream, release):
    """A log stream that keeps following until cancelled."""
    mock_log_stream.wait.side_effect = lambda: release.wait(5)
    mock_log_stream.cancel.side_effect = release.set
    return mock_log_stream


@pytest.fixture
def graceful_stop():
    return MagicMock(return_value=None)


@pytest.fixture
def make_coordinator(mock_project, mock_ui, graceful_stop):
    def factory(signals=()):
        return UpCoordinator(mock_project, ["web"], graceful_stop, mock_ui, signals=signals)
    return factory


def test_interrupt_before_log_result_stops_once(mock_project, mock_ui, graceful_stop, make_coordinator, following):
    """A signal while logs are still following triggers exactly one graceful stop."""
    coordinator = make_coordinator()

    async def scenario():
        task = asyncio.create_task(coordinator.attach())
        await asyncio.sleep(0.05)
        coordinator.interrupt()
        return await task

    outcome = asyncio.run(scenario())

    assert outcome is UpOutcome.STOPPED
    graceful_stop.assert_called_once_with()
    mock_ui.display_info.assert_called_once_with("Gracefully stopping...")
    mock_project.open_log_stream.assert_called_once_with(True, ["web"])
    following.cancel.assert_called_once_with()


def test_log_error_after_interrupt_is_not_fatal(mock_log_stream, graceful_stop, make_coordinator, release):
    """Stopping ends the log stream with an error; that must not take the fatal path."""

    def wait():
        release.wait(5)
        raise RuntimeError("stream closed")

    mock_log_stream.wait.side_effect = wait
    graceful_stop.side_effect = release.set
    coordinator = make_coordinator()
    coordinator.interrupt()

    outcome = asyncio.run(coordinator.attach())

    assert outcome is UpOutcome.STOPPED
    graceful_stop.assert_called_once_with()


def test_logs_finishing_first_completes_without_stop(mock_log_stream, mock_ui, graceful_stop, make_coordinator):
    mock_log_stream.wait.return_value = None

    outcome = asyncio.run(make_coordinator().attach())

    assert outcome is UpOutcome.LOGS_FINISHED
    graceful_stop.assert_not_called()
    mock_ui.display_info.assert_not_called()
    mock_log_stream.cancel.assert_called_once_with()


def test_log_error_first_is_fatal(mock_log_stream, graceful_stop, make_coordinator):
    cause = RuntimeError("connection reset")
    mock_log_stream.wait.side_effect = cause

    with pytest.raises(ProjectOperationError, match="connection reset") as excinfo:
        asyncio.run(make_coordinator().attach())

    assert excinfo.value.__cause__ is cause
    graceful_stop.assert_not_called()
    mock_log_stream.cancel.assert_called_once_with()


def test_log_stream_that_cannot_start_is_fatal(mock_project, graceful_stop, make_coordinator):
    mock_project.open_log_stream.side_effect = OSError("docker: not found")

    with pytest.raises(ProjectOperationError, match="docker: not found"):
        asyncio.run(make_coordinator().attach())
    graceful_stop.assert_not_called()


def test_graceful_stop_failure_cancels_log_stream(graceful_stop, make_coordinator, following):
    """A failed stop is fatal, and the still-following stream is not left behind."""
    graceful_stop.side_effect = ProjectOperationError("stop failed")
    coordinator = make_coordinator()
    coordinator.interrupt()

    with pytest.raises(ProjectOperationError, match="stop failed"):
        asyncio.run(coordinator.attach())

    graceful_stop.assert_called_once_with()
    following.cancel.assert_called_once_with()


@pytest.mark.skipif(not hasattr(signal, "SIGUSR1"), reason="needs POSIX signals")
def test_process_signal_triggers_graceful_stop(graceful_stop, make_coordinator, following):
    coordinator = make_coordinator(signals=(signal.SIGUSR1,))

    async def scenario():
        task = asyncio.create_task(coordinator.attach())
        await asyncio.sleep(0.05)
        os.kill(os.getpid(), signal.SIGUSR1)
        return await task

    assert asyncio.run(scenario()) is UpOutcome.STOPPED
    graceful_stop.assert_called_once_with()


def test_attached_up_through_adapter(mock_factory, mock_project, mock_log_stream, mock_ui, context_factory):
    """Full path: adapter -> handle_up -> coordinator, logs ending on their own."""
    mock_log_stream.wait.return_value = None
    handler = CommandHandler(
        ui=mock_ui,
        coordinator_factory=lambda **kwargs: UpCoordinator(signals=(), **kwargs),
    )

    result = with_project(mock_factory, handler.handle_up)(context_factory("up", ["web"], timeout=10))

    assert result is UpOutcome.LOGS_FINISHED
    mock_project.up.assert_called_once()
    mock_project.open_log_stream.assert_called_once_with(True, ["web"])
    mock_project.stop.assert_not_called()
