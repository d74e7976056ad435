"""Process-wide logging for the session server.

Uvicorn is started with ``log_config=None``, so its own loggers are routed
through the root handler installed here instead of their default handlers.
"""

from __future__ import annotations

import logging
import sys

from src.config import Environment

_DEV_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
_STRUCTURED_FORMAT = (
    '{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s",'
    '"process":%(process)d,"message":"%(message)s"}'
)

# Per-request access lines and websocket frame chatter
_QUIET_LOGGERS = ("uvicorn.access", "websockets", "httpx", "httpcore", "multipart")

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error")


def setup_logging(level: str = "INFO", environment: Environment | str = Environment.DEVELOPMENT) -> None:
    """Install a single stderr handler on the root logger.

    Args:
        level: Root log level name, case-insensitive.
        environment: Development gets a human-readable line; staging and
            production get one JSON-like object per line.
    """
    environment = Environment(environment)
    fmt = _DEV_FORMAT if environment == Environment.DEVELOPMENT else _STRUCTURED_FORMAT

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))

    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers.clear()
    root.addHandler(handler)

    for name in _UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
