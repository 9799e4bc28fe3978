"""Exit notification: turns interrupt signals into one-shot callbacks."""

import logging
import signal
import threading
from collections.abc import Callable, Iterable
from typing import Protocol

logger = logging.getLogger(__name__)


class ExitHandler(Protocol):
    """Something that calls back when the process is asked to stop."""

    def on_exit(self, callback: Callable[[], None]) -> None: ...


class SignalExitHandler:
    """
    ExitHandler driven by POSIX signals.

    Handlers are installed on the first registration, which must happen on
    the main thread. The first signal runs every registered callback once,
    in registration order, on a separate thread; later signals are ignored.
    The signal handler itself never blocks, so a callback may take locks the
    interrupted main thread is holding.
    """

    def __init__(
        self,
        signals: Iterable[signal.Signals] = (signal.SIGINT, signal.SIGTERM),
    ) -> None:
        self._signals = tuple(signals)
        self._callbacks: list[Callable[[], None]] = []
        self._previous: dict[signal.Signals, object] = {}
        self._fired = False
        self._thread: threading.Thread | None = None

    @property
    def fired(self) -> bool:
        """Check if an exit signal has been received."""
        return self._fired

    def on_exit(self, callback: Callable[[], None]) -> None:
        """Register a callback. Does not block."""
        self._callbacks.append(callback)
        if not self._previous:
            self._install()

    def join(self, timeout: float | None = None) -> None:
        """Wait for the exit callbacks to finish, if a signal has fired."""
        if self._thread is not None:
            self._thread.join(timeout)

    def close(self) -> None:
        """Restore the signal handlers that were in place before."""
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous = {}

    def _install(self) -> None:
        for signum in self._signals:
            self._previous[signum] = signal.signal(signum, self._handle_signal)

    def _handle_signal(self, signum: int, frame: object) -> None:
        if self._fired:
            return
        self._fired = True
        self._thread = threading.Thread(
            target=self._run_callbacks,
            args=(signal.Signals(signum),),
            name="ExitHandler",
            daemon=True,
        )
        self._thread.start()

    def _run_callbacks(self, received: signal.Signals) -> None:
        logger.debug("Received %s, running %d exit callback(s)", received.name, len(self._callbacks))
        for callback in list(self._callbacks):
            callback()
