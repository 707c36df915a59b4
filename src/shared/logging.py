"""Logging for the storefront.

stdlib logging owns the single stdout handler; structlog renders on top of it,
JSON in production/staging and a coloured console elsewhere. Request-scoped
fields (client, order) travel through structlog's contextvars, see
``log_context``.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from shared.settings import get_environment, is_production, log_level

# Library loggers that are too chatty below WARNING.
QUIET_LOGGERS = ("protean", "sqlalchemy.engine", "urllib3", "asyncio")

DEFAULT_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


def _renderer():
    if is_production():
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(level: str | None = None) -> None:
    """Route stdlib and structlog output to stdout at ``level``.

    The level falls back to ``LOG_LEVEL``, then to the environment default.
    """
    level = level or log_level() or DEFAULT_LEVELS.get(get_environment(), "INFO")

    handler = logging.StreamHandler(sys.stdout)
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            _renderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def log_context(**fields) -> Iterator[None]:
    """Attach ``fields`` to every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(**fields):
        yield
