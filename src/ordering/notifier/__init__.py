"""Notifier factory and best-effort dispatch.

Provides get_notifier() / set_notifier() to swap implementations:
- LoggingNotifier by default
- RecordingNotifier in tests
"""

from collections.abc import Callable

import structlog

from ordering.notifier.log_adapter import LoggingNotifier
from ordering.notifier.port import Notifier

logger = structlog.get_logger(__name__)

_current_notifier: Notifier | None = None


def get_notifier() -> Notifier:
    """Return the current notifier. Defaults to LoggingNotifier."""
    global _current_notifier
    if _current_notifier is None:
        _current_notifier = LoggingNotifier()
    return _current_notifier


def set_notifier(notifier: Notifier) -> None:
    """Override the active notifier (useful for tests)."""
    global _current_notifier
    _current_notifier = notifier


def reset_notifier() -> None:
    """Reset to default notifier."""
    global _current_notifier
    _current_notifier = None


def run_now(task: Callable, *args) -> None:
    """Default scheduler: run the task immediately in the caller's thread."""
    task(*args)


def best_effort(method: str, *args) -> None:
    """Call ``method`` on the active notifier, logging instead of raising."""
    try:
        getattr(get_notifier(), method)(*args)
    except Exception:
        logger.exception("Notification failed", method=method)
