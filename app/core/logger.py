"""
app/core/logger.py

Centralised logging configuration.
Every module should obtain its logger via:

    from app.core.logger import get_logger
    logger = get_logger(__name__)
"""

import logging
import sys

from app.core.config import settings

#: Third-party loggers that chatter at INFO on every request.
_NOISY_LOGGERS = (
    "uvicorn.access",
    "httpx",
    "elastic_transport",
    "elastic_transport.transport",
    "pymongo",
)

_LEVEL = logging.DEBUG if settings.debug else logging.INFO


def _build_handler() -> logging.StreamHandler:
    """Return a stdout handler using the ``time | level | name | message`` layout."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(_LEVEL)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    return handler


def _configure_root_logger() -> None:
    """Configure the root logger once at import time."""
    root = logging.getLogger()
    if root.handlers:
        # Already configured (e.g. by uvicorn or pytest); leave it alone.
        return

    root.setLevel(_LEVEL)
    root.addHandler(_build_handler())

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


_configure_root_logger()


def get_logger(name: str) -> logging.Logger:
    """Return a named logger."""
    return logging.getLogger(name)


def clip(text: str, limit: int = 120) -> str:
    """Shorten user-supplied text before it goes into a log line."""
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"
