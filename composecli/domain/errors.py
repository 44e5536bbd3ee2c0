"""Error types raised by composecli.

Every error below is fatal to the current invocation. Handlers raise them and
the top-level dispatcher in main.py turns them into a non-zero exit.
"""


class ComposeCliError(Exception):
    """Base class for all errors that end a command."""

    exit_code: int = 1


class ProjectResolutionError(ComposeCliError):
    """The project factory could not produce a project (bad files, bad definitions)."""


class ArgumentValidationError(ComposeCliError):
    """Malformed command line input: wrong argument count, non-numeric values."""


class ProjectOperationError(ComposeCliError):
    """An orchestration call on the project failed."""


class ConfirmationError(ComposeCliError):
    """The interactive confirmation prompt could not be read."""
