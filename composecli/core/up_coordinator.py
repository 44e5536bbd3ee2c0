"""Attached `up` lifecycle: follow logs until they end or the user interrupts.

Once services are up, two things run at the same time:

- a log task that waits on the followed log stream in a background thread
  and reports its outcome (an exception or None) into a single-slot future;
- a signal watch that turns SIGINT/SIGTERM into an asyncio event.

A watcher task waits for whichever comes first. An interrupt triggers a
graceful stop of the project; a log error is fatal; a clean end of the log
stream simply finishes. The watcher's completion is the only point `attach`
waits on, and the log stream is cancelled however the session ends.
"""

import asyncio
import enum
import logging
import signal
import threading
from typing import Callable, List, Optional, Sequence, Tuple

from composecli.domain.errors import ProjectOperationError
from composecli.domain.interfaces.log_stream import LogStream
from composecli.domain.interfaces.project import Project
from composecli.domain.interfaces.user_interface import UserInterface

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS: Tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


class UpOutcome(enum.Enum):
    """How an attached `up` ended."""
    LOGS_FINISHED = "logs_finished"
    STOPPED = "stopped"


class UpCoordinator:
    """Races the log stream against termination signals for one `up` call."""

    def __init__(
        self,
        project: Project,
        services: Sequence[str],
        graceful_stop: Callable[[], None],
        ui: UserInterface,
        signals: Sequence[signal.Signals] = DEFAULT_SIGNALS,
    ):
        """Initializes the coordinator.

        Args:
            project: The project the services were brought up in.
            services: Services whose logs are followed.
            graceful_stop: Stops the project; called at most once, on interrupt.
            ui: Where the stopping notice goes.
            signals: Signals treated as an interrupt. Empty disables signal
                handling, leaving `interrupt()` as the only trigger.
        """
        self.project = project
        self.services = list(services)
        self.graceful_stop = graceful_stop
        self.ui = ui
        self.signals = tuple(signals)
        self._interrupted = asyncio.Event()

    def interrupt(self) -> None:
        """Requests a graceful stop. Must be called on the event loop thread."""
        logger.debug("Interrupt received")
        self._interrupted.set()

    async def attach(self) -> UpOutcome:
        """Follows logs until they end or an interrupt arrives.

        Returns:
            The outcome that finished the attached session.

        Raises:
            ProjectOperationError: If the log stream cannot be opened, fails
                before any interrupt, or if the graceful stop fails.
        """
        loop = asyncio.get_running_loop()
        log_result: asyncio.Future = loop.create_future()
        installed = self._install_signal_handlers(loop)
        stream: Optional[LogStream] = None
        try:
            try:
                stream = self.project.open_log_stream(True, self.services)
            except Exception as e:
                raise ProjectOperationError(str(e)) from e
            self._start_log_stream(loop, stream, log_result)
            watcher = asyncio.create_task(self._watch(log_result))
            return await watcher
        finally:
            if stream is not None:
                stream.cancel()
            self._remove_signal_handlers(loop, installed)

    def _start_log_stream(
        self, loop: asyncio.AbstractEventLoop, stream: LogStream, log_result: asyncio.Future
    ) -> None:
        def report(error: Optional[BaseException]) -> None:
            if not log_result.done():
                log_result.set_result(error)

        def follow() -> None:
            error: Optional[BaseException] = None
            try:
                stream.wait()
            except Exception as e:
                error = e
            try:
                loop.call_soon_threadsafe(report, error)
            except RuntimeError:
                # Loop already closed: the session is over.
                logger.debug(f"Log stream ended after detach (error={error!r})")

        # Daemon: a wait still blocked after the stream is cancelled must not
        # keep the process alive.
        thread = threading.Thread(target=follow, name="compose-logs", daemon=True)
        thread.start()

    async def _watch(self, log_result: asyncio.Future) -> UpOutcome:
        interrupted = asyncio.ensure_future(self._interrupted.wait())
        try:
            done, _ = await asyncio.wait({interrupted, log_result}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            interrupted.cancel()

        if interrupted in done:
            self.ui.display_info("Gracefully stopping...")
            await asyncio.to_thread(self.graceful_stop)
            return UpOutcome.STOPPED

        error = log_result.result()
        if error is not None:
            raise ProjectOperationError(str(error)) from error
        logger.debug("Log stream finished")
        return UpOutcome.LOGS_FINISHED

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> List[Tuple[signal.Signals, bool, object]]:
        installed = []
        for sig in self.signals:
            try:
                loop.add_signal_handler(sig, self.interrupt)
                installed.append((sig, True, None))
            except NotImplementedError:
                # Windows event loops do not support add_signal_handler
                previous = signal.signal(sig, lambda s, f: loop.call_soon_threadsafe(self.interrupt))
                installed.append((sig, False, previous))
        return installed

    def _remove_signal_handlers(
        self, loop: asyncio.AbstractEventLoop, installed: List[Tuple[signal.Signals, bool, object]]
    ) -> None:
        for sig, via_loop, previous in installed:
            if via_loop:
                loop.remove_signal_handler(sig)
            else:
                signal.signal(sig, previous if previous is not None else signal.SIG_DFL)
