from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()
logger = logging.getLogger("icmpsweep")

FORMAT = "%(message)s"


def setup_logging(verbose: bool = False, *, target: Console | None = None) -> None:
    """Route icmpsweep logs through a :class:`RichHandler`."""
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=target or console,
        rich_tracebacks=True,
        markup=True,
        show_time=False,
    )
    handler.setFormatter(logging.Formatter(FORMAT, datefmt="[%X]"))
    for existing in list(logger.handlers):
        if isinstance(existing, RichHandler):
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
