"""Cell distribution rendering and the live refresh loop."""

import logging
import threading
import time

from rich.markup import escape

from ltcview import cursor
from ltcview.config import RefreshConfig
from ltcview.examiner import AppExaminer, DataSourceError
from ltcview.exit_handler import ExitHandler
from ltcview.models import CellSnapshot
from ltcview.output import Output

logger = logging.getLogger(__name__)

GLYPH = "•"
MISSING_MARKER = " [MISSING]"


def _fit_bars(running: int, claimed: int, room: int | None) -> tuple[int, int, int]:
    """
    Fit the running and claimed bars into ``room`` cells.

    Returns the number of running and claimed glyphs to draw and the number
    of glyphs hidden. Running glyphs win over claimed ones.
    """
    total = running + claimed
    if room is None or total <= room:
        return running, claimed, 0

    room = max(room - len(f" +{total}"), 0)
    shown_running = min(running, room)
    shown_claimed = min(claimed, room - shown_running)
    return shown_running, shown_claimed, total - shown_running - shown_claimed


def format_cell_line(cell: CellSnapshot, width: int | None = None) -> str:
    """
    Format one cell as a line of Rich markup.

    With a ``width``, the bars are truncated so the line never wraps; the
    cell id itself is never cut.
    """
    prefix = escape(cell.cell_id)
    prefix_len = len(cell.cell_id)
    if cell.missing:
        prefix += " [red]\\[MISSING][/red]"
        prefix_len += len(MISSING_MARKER)
    prefix += ": "
    prefix_len += 2

    # Leave the last column free so the cursor never autowraps
    room = None if width is None else width - prefix_len - 1
    running, claimed, hidden = _fit_bars(cell.running_instances, cell.claimed_instances, room)

    line = prefix
    if running:
        line += f"[green]{GLYPH * running}[/green]"
    if claimed:
        line += f"[yellow]{GLYPH * claimed}[/yellow]"
    if hidden:
        line += f" [dim]+{hidden}[/dim]"
    return line


def format_distribution(cells: list[CellSnapshot], width: int | None = None) -> list[str]:
    """Format a cluster snapshot as one markup line per cell, in order."""
    return [format_cell_line(cell, width) for cell in cells]


def print_distribution(output: Output, examiner: AppExaminer) -> int:
    """
    Render one frame of the cell distribution.

    Returns the number of lines written. A failed lookup is rendered as a
    single error line and counts as one line.
    """
    try:
        try:
            cells = examiner.list_cells()
        except DataSourceError as exc:
            logger.debug("Listing cells failed: %s", exc)
            # one physical line, or the next frame moves up too few lines
            message = " ".join(f"Error visualizing: {exc}".split())
            message = message[: max(output.width - 1, 1)]
            output.say(escape(message))
            output.directive(cursor.clear_to_end_of_line())
            output.new_line()
            return 1

        for line in format_distribution(cells, output.width):
            output.say(line)
            output.directive(cursor.clear_to_end_of_line())
            output.new_line()
        return len(cells)
    finally:
        output.directive(cursor.clear_to_end_of_display())


class RefreshLoop:
    """
    Live, in-place refreshing cell distribution.

    Renders one frame right away. With a positive interval it then hides
    the cursor and redraws on every tick, moving the cursor back up over
    the previous frame, until the exit handler fires ``cancel``.
    Cancellation always wins over a pending tick.
    """

    def __init__(
        self,
        output: Output,
        examiner: AppExaminer,
        exit_handler: ExitHandler,
        config: RefreshConfig | None = None,
    ) -> None:
        """
        Initialize the RefreshLoop.

        Args:
            output: Sink that frames and cursor directives are written to.
            examiner: Source of cluster snapshots.
            exit_handler: Notifier that ``cancel`` is registered with.
            config: Refresh settings. Defaults to rendering once.
        """
        self._output = output
        self._examiner = examiner
        self._exit_handler = exit_handler
        self._config = config or RefreshConfig()
        self._stop_event = threading.Event()
        self._show_once = threading.Lock()
        self._cursor_hidden = False
        self._lines_written = 0
        self._frames_rendered = 0

    @property
    def interval(self) -> float:
        """Get the refresh interval in seconds."""
        return self._config.interval

    @property
    def frames_rendered(self) -> int:
        return self._frames_rendered

    @property
    def lines_written(self) -> int:
        """Get the line count of the last rendered frame."""
        return self._lines_written

    @property
    def is_cancelled(self) -> bool:
        return self._stop_event.is_set()

    def run(self) -> int:
        """
        Run the loop until cancelled, or once if the interval is zero.

        Returns the number of frames rendered.
        """
        self._render()
        if not self._config.is_live:
            return self._frames_rendered

        self._output.directive(cursor.hide())
        self._cursor_hidden = True
        self._exit_handler.on_exit(self.cancel)
        logger.debug("Refreshing every %.3fs", self.interval)

        try:
            self._poll_loop()
        finally:
            self._restore_cursor()

        logger.debug("Stopped after %d frame(s)", self._frames_rendered)
        return self._frames_rendered

    def cancel(self) -> None:
        """
        Stop the loop. Safe to call from any thread or a signal handler.

        The cursor is shown immediately in case the process ends before the
        loop gets to do it.
        """
        self._stop_event.set()
        self._restore_cursor()

    def _poll_loop(self) -> None:
        """Wait for ticks on a monotonic schedule and redraw on each one."""
        deadline = time.monotonic()
        while True:
            deadline += self._config.interval
            timeout = max(0.0, deadline - time.monotonic())
            if self._stop_event.wait(timeout=timeout):
                return
            # Tick and cancellation both ready: cancellation wins
            if self._stop_event.is_set():
                return

            self._output.directive(cursor.up(self._lines_written))
            self._render()

            # Skip ticks missed by a slow frame instead of bursting
            now = time.monotonic()
            if deadline < now:
                deadline = now

    def _render(self) -> None:
        self._lines_written = print_distribution(self._output, self._examiner)
        self._frames_rendered += 1

    def _restore_cursor(self) -> None:
        """Show the cursor, at most once per loop."""
        if not self._cursor_hidden:
            return
        if self._show_once.acquire(blocking=False):
            self._output.directive(cursor.show())
