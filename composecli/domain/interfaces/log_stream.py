"""Interface for a running log stream that its owner can end early."""

import abc


class LogStream(abc.ABC):
    """A log stream already started by a Project."""

    @abc.abstractmethod
    def wait(self) -> None:
        """Blocks until the stream ends.

        Raises:
            Exception: If the stream breaks. A stream ended through
                `cancel()` returns normally instead.
        """

    @abc.abstractmethod
    def cancel(self) -> None:
        """Ends the stream and releases what backs it. Safe to call repeatedly."""
