import logging
from typing import Any, Optional, Sequence

from rich.box import SIMPLE
from rich.console import Console
from rich.measure import Measurement
from rich.table import Table
from rich.text import Text

from composecli.domain.interfaces.user_interface import UserInterface

logger = logging.getLogger(__name__)

# Upper bound used when measuring a table at its natural width.
MEASURE_WIDTH = 10_000


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output.

    Command results go to stdout without markup or highlighting so that
    `port` and `ps -q` stay usable in scripts. Notices go to stderr.
    """

    def __init__(self, console: Optional[Console] = None, err_console: Optional[Console] = None):
        self._console = console or Console(highlight=False, soft_wrap=True)
        self._err_console = err_console or Console(stderr=True, highlight=False)

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_output(self, output: str, **kwargs: Any) -> None:
        self.console.print(Text(str(output)))

    def display_table(self, rows: Sequence[Sequence[str]], header: bool = True) -> None:
        """Renders rows as a borderless table, first row as titles when `header`."""
        rows = list(rows)
        if not rows:
            return
        titles = rows[0] if header else [""] * len(rows[0])
        body = rows[1:] if header else rows
        table = Table(box=SIMPLE, show_header=header, show_edge=False, pad_edge=False)
        for title in titles:
            table.add_column(str(title), no_wrap=True)
        for row in body:
            table.add_row(*(str(cell) for cell in row))
        # Never shrink columns to the terminal: cells stay whole for grep and scripts.
        natural = Measurement.get(self.console, self.console.options.update_width(MEASURE_WIDTH), table).maximum
        if natural > self.console.width:
            table.width = natural
        self.console.print(table, crop=False)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        self._err_console.print(Text("ERROR: ", style="bold red") + Text(error_message))

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        self._err_console.print(Text("WARNING: ", style="bold yellow") + Text(warning_message))

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Prints a notice on its own line (e.g. the graceful stop message)."""
        self.console.print()
        self.console.print(Text(info_message, style="bold blue"))

    def read_line(self, prompt_message: str = "") -> str:
        """Reads one line via the rich console; EOFError propagates on end of input."""
        line = self.console.input(prompt_message)
        logger.debug(f"Read input line: {line!r}")
        return line
