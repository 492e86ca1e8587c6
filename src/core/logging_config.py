"""Logging setup. Modules only do `logger = logging.getLogger(__name__)`, GameService calls configure_logging."""

import logging
from typing import Optional

from src.core.config import get_log_level

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a single stream handler to the `src` logger tree."""
    root = logging.getLogger("src")
    root.setLevel(level or get_log_level())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
