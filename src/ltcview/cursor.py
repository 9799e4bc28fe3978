"""Terminal cursor directives used to redraw a frame in place."""

from dataclasses import dataclass
from enum import Enum

from rich.control import Control, ControlType

CSI = "\x1b["  # Control Sequence Introducer


class DirectiveKind(Enum):
    """Kinds of cursor directives."""

    HIDE = "hide"
    SHOW = "show"
    UP = "up"
    CLEAR_TO_END_OF_LINE = "clear_to_end_of_line"
    CLEAR_TO_END_OF_DISPLAY = "clear_to_end_of_display"


@dataclass(slots=True, frozen=True)
class Directive:
    """A single cursor directive. ``count`` is only meaningful for UP."""

    kind: DirectiveKind
    count: int = 0

    @property
    def ansi(self) -> str:
        """Get the ANSI control sequence for this directive."""
        if self.kind is DirectiveKind.HIDE:
            return f"{CSI}?25l"
        if self.kind is DirectiveKind.SHOW:
            return f"{CSI}?25h"
        if self.kind is DirectiveKind.UP:
            # CSI 0A still moves one line on most terminals
            return f"{CSI}{self.count}A" if self.count > 0 else ""
        if self.kind is DirectiveKind.CLEAR_TO_END_OF_LINE:
            return f"{CSI}0K"
        return f"{CSI}J"

    @property
    def control(self) -> Control | None:
        """
        Get the Rich control for this directive.

        Rich has no erase-in-display control, so clear to end of display
        (and moving up zero lines) resolve to None.
        """
        if self.kind is DirectiveKind.HIDE:
            return Control.show_cursor(False)
        if self.kind is DirectiveKind.SHOW:
            return Control.show_cursor(True)
        if self.kind is DirectiveKind.UP:
            return Control.move(0, -self.count) if self.count > 0 else None
        if self.kind is DirectiveKind.CLEAR_TO_END_OF_LINE:
            return Control((ControlType.ERASE_IN_LINE, 0))
        return None


def hide() -> Directive:
    return Directive(DirectiveKind.HIDE)


def show() -> Directive:
    return Directive(DirectiveKind.SHOW)


def up(lines: int) -> Directive:
    """Move the cursor up ``lines`` lines."""
    if lines < 0:
        raise ValueError("cannot move the cursor up a negative number of lines")
    return Directive(DirectiveKind.UP, lines)


def clear_to_end_of_line() -> Directive:
    return Directive(DirectiveKind.CLEAR_TO_END_OF_LINE)


def clear_to_end_of_display() -> Directive:
    return Directive(DirectiveKind.CLEAR_TO_END_OF_DISPLAY)
