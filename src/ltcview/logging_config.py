"""Logging setup for the ltcview CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler

NOISY_LIBRARIES = ["httpx", "httpcore"]


def configure_logging(verbose: bool = False) -> None:
    """
    Route log records to stderr through Rich.

    Stdout is reserved for frames that get redrawn in place, so nothing is
    ever logged there.
    """
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    for name in NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)
