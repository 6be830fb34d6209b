"""
Logging setup for shopcart.

Modules log through ``logging.getLogger(__name__)``; call ``configure_logging``
once at startup to attach a console handler to the root logger.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_NOISY_LOGGERS = ("httpx", "httpcore", "httpcore.http11", "httpcore.connection")


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    resolved = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(resolved)

    # Only attach a handler if nobody else (pytest, uvicorn) already did.
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(resolved)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
