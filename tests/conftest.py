"""Shared fakes for ltcview tests."""

from collections.abc import Callable
from io import StringIO

import pytest
from rich.console import Console

from ltcview.examiner import AppNotFoundError
from ltcview.models import AppInfo, CellSnapshot
from ltcview.output import Output


class FakeExaminer:
    """
    AppExaminer that replays scripted responses.

    Each ``list_cells`` call takes the next entry of ``cells``; an entry
    that is an exception is raised instead of returned. The last entry is
    repeated once the script runs out.
    """

    def __init__(
        self,
        cells: list | None = None,
        apps: list[AppInfo] | None = None,
        on_list_cells: Callable[[int], None] | None = None,
    ) -> None:
        self._cells = list(cells) if cells is not None else [[]]
        self._apps = apps or []
        self._on_list_cells = on_list_cells
        self.list_cells_calls = 0
        self.list_apps_error: Exception | None = None

    def list_apps(self) -> list[AppInfo]:
        if self.list_apps_error is not None:
            raise self.list_apps_error
        return list(self._apps)

    def app_status(self, app_name: str) -> AppInfo:
        for app in self._apps:
            if app.process_guid == app_name:
                return app
        raise AppNotFoundError("App not found.")

    def list_cells(self) -> list[CellSnapshot]:
        self.list_cells_calls += 1
        index = min(self.list_cells_calls, len(self._cells)) - 1
        response = self._cells[index]
        if self._on_list_cells is not None:
            self._on_list_cells(self.list_cells_calls)
        if isinstance(response, Exception):
            raise response
        return list(response)


class FakeExitHandler:
    """ExitHandler that fires only when told to."""

    def __init__(self) -> None:
        self.callbacks: list[Callable[[], None]] = []

    def on_exit(self, callback: Callable[[], None]) -> None:
        self.callbacks.append(callback)

    def fire(self) -> None:
        for callback in self.callbacks:
            callback()


def _make_output(width: int = 80, terminal: bool = True) -> tuple[Output, StringIO]:
    buf = StringIO()
    console = Console(
        file=buf,
        force_terminal=terminal,
        color_system=None,
        width=width,
        highlight=False,
    )
    return Output(console), buf


@pytest.fixture()
def make_output() -> Callable[..., tuple[Output, StringIO]]:
    """Factory for an Output over a StringIO, forced to act as a terminal."""
    return _make_output


@pytest.fixture()
def fake_examiner() -> type[FakeExaminer]:
    return FakeExaminer


@pytest.fixture()
def exit_handler() -> FakeExitHandler:
    return FakeExitHandler()


@pytest.fixture()
def two_cells() -> list[CellSnapshot]:
    return [
        CellSnapshot(cell_id="cell-1", missing=False, running_instances=3, claimed_instances=1),
        CellSnapshot(cell_id="cell-2", missing=True, running_instances=0, claimed_instances=0),
    ]
