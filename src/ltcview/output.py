"""Output sink shared by the views and the cursor protocol."""

from rich.console import Console, RenderableType

from ltcview.cursor import Directive


class Output:
    """
    Thin wrapper around a Rich console.

    Text is written with Rich markup and never soft-wrapped by Rich, so one
    ``say``/``new_line`` pair always maps to one terminal line. Every write
    is flushed before returning, which keeps cursor directives in order with
    the text around them.
    """

    def __init__(self, console: Console | None = None) -> None:
        """
        Initialize the Output.

        Args:
            console: Console to write to. Defaults to a stdout console.
        """
        self._console = console or Console(highlight=False)

    @property
    def console(self) -> Console:
        """Get the underlying console."""
        return self._console

    @property
    def width(self) -> int:
        """Get the width of the console in cells."""
        return self._console.width

    def say(self, markup: str) -> None:
        """Write markup without a trailing newline."""
        self._console.print(markup, end="", soft_wrap=True, highlight=False)

    def new_line(self) -> None:
        self._console.print()

    def print(self, renderable: RenderableType) -> None:
        """Print a renderable (table, rule...) followed by a newline."""
        self._console.print(renderable, highlight=False)

    def directive(self, directive: Directive) -> None:
        """
        Write a cursor directive.

        Directives are dropped when the console is not a terminal, so piped
        output receives plain frames.
        """
        if not self._console.is_terminal:
            return
        control = directive.control
        if control is not None:
            self._console.control(control)
            return
        sequence = directive.ansi
        if sequence:
            self._console.out(sequence, end="", highlight=False)
