import os
import shutil
import sys

import pytest

from composecli.infrastructure.compose.runner import AttachedProcess, ComposeCommandError, run_captured

posix_only = pytest.mark.skipif(not hasattr(os, "killpg") or shutil.which("sleep") is None, reason="needs POSIX")


def _alive(pid):
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    return True


def test_run_captured_collects_output():
    result = run_captured([sys.executable, "-c", "print('hello')"])

    assert result.success
    assert result.stdout.strip() == "hello"


def test_missing_executable_raises():
    with pytest.raises(ComposeCommandError):
        run_captured(["composecli-no-such-binary"])
    with pytest.raises(ComposeCommandError):
        AttachedProcess(["composecli-no-such-binary"])


@posix_only
def test_terminate_ends_own_session_child():
    process = AttachedProcess(["sleep", "30"], new_session=True)

    process.terminate(timeout=5)

    assert process.wait() < 0
    assert not _alive(process.pid)


@posix_only
def test_terminate_after_exit_is_noop():
    process = AttachedProcess(["sleep", "0"], new_session=True)
    assert process.wait() == 0

    process.terminate()

    assert process.wait() == 0
