"""Routing of failures that happen where no caller can catch them.

Cleanup hooks run from the collector's callback on whatever thread triggered
the collection.  An exception escaping there would surface as an
"unraisable" warning on an unrelated thread, so the pulse path hands it to
the process-wide :class:`ErrorHandler` instead.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from ..events.bus import Event, EventBus

LOGGER = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass(kw_only=True)
class ErrorOccurredEvent(Event):
    error: Exception
    severity: ErrorSeverity
    context: dict = field(default_factory=dict)


class ErrorHandler:
    def __init__(self, logger: Optional[logging.Logger] = None, event_bus: Optional[EventBus] = None):
        self._logger = logger or LOGGER
        self._events = event_bus
        self._callback: Optional[Callable[[Exception, ErrorSeverity], None]] = None

    def register_callback(self, callback: Callable[[Exception, ErrorSeverity], None]):
        self._callback = callback

    def handle(self, error: Exception, severity: ErrorSeverity = ErrorSeverity.ERROR, context: Optional[dict] = None):
        context = context or {}
        log_method = getattr(self._logger, severity.value, self._logger.error)
        log_method(
            "%s: %s", error.__class__.__name__, error,
            exc_info=(type(error), error, error.__traceback__),
            extra={"softrefs_context": context},
        )

        if self._events is not None:
            self._events.publish(ErrorOccurredEvent(error=error, severity=severity, context=context))

        if self._callback and severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL):
            try:
                self._callback(error, severity)
            except Exception:
                self._logger.exception("Error callback failed")


# Read from the collector's callback, so no lock: a plain global swap is
# atomic and the pulse path must never wait.
_DEFAULT_HANDLER = ErrorHandler()
_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Return the installed handler, or the logging-only default."""
    handler = _handler
    return handler if handler is not None else _DEFAULT_HANDLER


def set_error_handler(handler: Optional[ErrorHandler]) -> Optional[ErrorHandler]:
    """Install *handler* (``None`` restores the default) and return the previous one."""
    global _handler
    previous, _handler = _handler, handler
    return previous
