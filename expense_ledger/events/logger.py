"""
Event Logger

Every change to the ledger and every persistence outcome is logged.

The event logger:
- Writes structured JSON lines through structlog
- Keeps a short in-memory history so the UI can surface warnings
  (e.g. "your last change was not saved")
- Never raises: a logging failure must not break a mutation
"""

import logging
from collections import deque
from typing import Optional

import structlog

from expense_ledger.models.event import EventSeverity, LedgerEvent, LedgerEventType


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


LOGGER_NAME = "expense_ledger"


def configure_logging(level: str = "INFO") -> None:
    """Route ledger logs to stderr at the given level."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)


class EventLogger:
    """
    Central ledger event logging.

    Logs events both to:
    1. Structured local log (for debugging)
    2. A bounded in-memory history (for the presentation layer)
    """

    def __init__(self, history_size: int = 100):
        self._logger = structlog.get_logger(LOGGER_NAME)
        self._history: deque[LedgerEvent] = deque(maxlen=history_size)

    def log(self, event: LedgerEvent) -> None:
        """Log a ledger event at its severity."""
        self._history.append(event)
        log_dict = event.to_log_dict()

        try:
            if event.severity == EventSeverity.ERROR:
                self._logger.error("ledger_event", **log_dict)
            elif event.severity == EventSeverity.WARNING:
                self._logger.warning("ledger_event", **log_dict)
            elif event.severity == EventSeverity.DEBUG:
                self._logger.debug("ledger_event", **log_dict)
            else:
                self._logger.info("ledger_event", **log_dict)
        except Exception as e:
            # Broken handlers must not break the caller
            logging.getLogger(LOGGER_NAME).debug("event logging failed: %s", e)

    def recent_events(
        self,
        limit: int = 20,
        event_type: Optional[LedgerEventType] = None,
    ) -> list[LedgerEvent]:
        """Most recent events, newest first."""
        events = [
            event for event in reversed(self._history)
            if event_type is None or event.event_type == event_type
        ]
        return events[:limit]

    def last_error(self) -> Optional[LedgerEvent]:
        """Most recent error-level event, if any."""
        for event in reversed(self._history):
            if event.severity == EventSeverity.ERROR:
                return event
        return None
