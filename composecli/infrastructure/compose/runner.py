"""Subprocess execution for `docker compose` invocations.

Captured runs return a structured result; attached runs inherit the
terminal so log streams and one-off commands behave interactively.
"""

import logging
import os
import signal
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


class ComposeCommandError(Exception):
    """A docker compose invocation could not start or exited non-zero."""

    def __init__(self, command: Sequence[str], return_code: Optional[int], stderr: str = ""):
        self.command = list(command)
        self.return_code = return_code
        self.stderr = stderr.strip()
        detail = self.stderr or f"exit status {return_code}"
        super().__init__(f"`{' '.join(self.command)}` failed: {detail}")


@dataclass
class CommandResult:
    """Structured result from a captured command."""
    command: List[str]
    return_code: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.return_code == 0


def run_captured(command: Sequence[str], cwd: Optional[str] = None) -> CommandResult:
    """Runs a command, capturing stdout and stderr.

    Raises:
        ComposeCommandError: If the executable cannot be started.
    """
    logger.debug(f"Running: {' '.join(command)} (cwd={cwd})")
    try:
        completed = subprocess.run(list(command), cwd=cwd, capture_output=True, text=True)
    except OSError as e:
        raise ComposeCommandError(command, None, str(e)) from e
    return CommandResult(
        command=list(command),
        return_code=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )


def run_attached(command: Sequence[str], cwd: Optional[str] = None) -> int:
    """Runs a command with the current terminal as stdin/stdout/stderr.

    Returns:
        The command's exit code.

    Raises:
        ComposeCommandError: If the executable cannot be started.
    """
    logger.debug(f"Running attached: {' '.join(command)} (cwd={cwd})")
    try:
        return subprocess.run(list(command), cwd=cwd).returncode
    except OSError as e:
        raise ComposeCommandError(command, None, str(e)) from e


class AttachedProcess:
    """A command started attached to the terminal, owned until terminated.

    With `new_session` the child leads its own process group and
    `terminate()` signals the whole group, so helpers it spawned end too.
    """

    def __init__(self, command: Sequence[str], cwd: Optional[str] = None, new_session: bool = False):
        self.command = list(command)
        self.new_session = new_session
        logger.debug(f"Starting attached: {' '.join(self.command)} (cwd={cwd})")
        try:
            self._process = subprocess.Popen(self.command, cwd=cwd, start_new_session=new_session)
        except OSError as e:
            raise ComposeCommandError(command, None, str(e)) from e

    @property
    def pid(self) -> int:
        return self._process.pid

    def wait(self) -> int:
        """Blocks until the command exits and returns its exit code."""
        return self._process.wait()

    def terminate(self, timeout: float = 5.0) -> None:
        """Sends SIGTERM, then SIGKILL after `timeout` seconds, and reaps the child."""
        if self._process.poll() is not None:
            return
        logger.debug(f"Terminating pid {self._process.pid}: {' '.join(self.command)}")
        self._signal(signal.SIGTERM)
        try:
            self._process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            self._signal(signal.SIGKILL if hasattr(signal, "SIGKILL") else signal.SIGTERM)
            self._process.wait()

    def _signal(self, sig: int) -> None:
        try:
            if self.new_session and hasattr(os, "killpg"):
                os.killpg(self._process.pid, sig)
            else:
                self._process.send_signal(sig)
        except ProcessLookupError:
            # Exited between poll() and the signal.
            pass
