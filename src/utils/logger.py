import logging
import os

from rich.console import Console
from rich.logging import RichHandler


RELAY_LOGGER = "flight_relay"


def resolve_level(raw: str | None) -> int:
    """LOG_LEVEL name or number; unknown values fall back to INFO."""
    value = (raw or "INFO").strip().upper()
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value)
    return level if isinstance(level, int) else logging.INFO


def _relay_handler() -> RichHandler:
    # stderr keeps stdout clean for JSON printed by `src.main search`
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_time=True,
        show_level=True,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("[%(name)s] %(message)s"))
    return handler


def get_logger(name: str = RELAY_LOGGER) -> logging.Logger:
    """Named relay logger writing through Rich to stderr."""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(resolve_level(os.environ.get("LOG_LEVEL")))
    logger.addHandler(_relay_handler())
    logger.propagate = False
    return logger
