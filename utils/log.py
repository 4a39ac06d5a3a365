"""Logging setup."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str = "INFO") -> None:
    """Route log records through a rich console handler.

    Safe to call more than once; the handler is only installed once.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(
            console=Console(stderr=True), rich_tracebacks=True, show_path=False
        )
        handler.setFormatter(logging.Formatter("[%(name)s] %(message)s", datefmt="%X"))
        root.addHandler(handler)
