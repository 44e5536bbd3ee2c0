"""Interface for interacting with the user (input/output).

Defines the contract for displaying results, information, warnings and
errors, and for reading a line of input, allowing different UI
implementations (console, captured output in tests).
"""

import abc
from typing import Any, Sequence


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_output(self, output: str, **kwargs: Any) -> None:
        """Writes command results to standard output, unstyled.

        Args:
            output: The text to print, as-is.
        """
        pass

    @abc.abstractmethod
    def display_table(self, rows: Sequence[Sequence[str]], header: bool = True) -> None:
        """Writes tabular results to standard output.

        Args:
            rows: Table rows. When `header` is set the first row holds the titles.
            header: Whether the first row is a header row.
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def read_line(self, prompt_message: str = "") -> str:
        """Reads one line from standard input, without its line ending.

        Raises:
            EOFError: If input is exhausted.
            OSError: If reading fails.
        """
        pass
