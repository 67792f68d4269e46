# catalog/log.py
import logging

from rich.logging import RichHandler


def configure_logging(level: str = "INFO") -> None:
    """Route the catalog's log records through rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
