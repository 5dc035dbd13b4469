import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from secretgrid.events.bus import Event, EventBus


class ErrorSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def user_visible(self) -> bool:
        return self in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)


StatusCallback = Callable[[str, ErrorSeverity], None]


@dataclass(kw_only=True)
class ErrorOccurredEvent(Event):
    error: Exception
    severity: ErrorSeverity
    message: str = ""
    context: dict = field(default_factory=dict)


class ErrorHandler:
    """Route a failure to the log, the event bus and the status line.

    Only user-visible severities (``ERROR`` and ``CRITICAL``) reach the
    status callback; the rest are logged and published but never shown.
    """

    def __init__(self, logger: logging.Logger, event_bus: EventBus):
        self._logger = logger
        self._events = event_bus
        self._status_callback: Optional[StatusCallback] = None

    def register_ui_callback(self, callback: StatusCallback):
        self._status_callback = callback

    def handle(
        self,
        error: Exception,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: Optional[dict] = None,
        message: Optional[str] = None,
    ):
        details = dict(context or {})
        text = message or str(error)
        log = getattr(self._logger, severity.value)
        log("%s: %s", type(error).__name__, error, extra={"context": details})

        self._events.publish(
            ErrorOccurredEvent(error=error, severity=severity, message=text, context=details)
        )

        if self._status_callback is not None and severity.user_visible:
            self._status_callback(text, severity)
