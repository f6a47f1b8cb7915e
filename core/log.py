# core/log.py

import logging

from rich.logging import RichHandler


def setup_logging(level: str = "INFO") -> None:
    """Route every logger through rich, once per process."""
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
