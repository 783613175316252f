"""Event recorders: one that logs and one that keeps events in memory."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone

EVENT_NORMAL = "Normal"
EVENT_WARNING = "Warning"

logger = logging.getLogger(__name__)


def _format(message: str, args: tuple) -> str:
    return message % args if args else message


@dataclass
class RecordedEvent:
    """An event held by an :class:`InMemoryRecorder`."""

    type: str
    reason: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class LoggingRecorder:
    """A recorder that only writes events to the log."""

    def __init__(self, component: str = ""):
        self.component = component

    def _log(self, level: int, message: str) -> None:
        if self.component:
            logger.log(level, "[%s] %s", self.component, message)
        else:
            logger.log(level, "%s", message)

    def event(self, reason: str, message: str, *args) -> None:
        """Log a normal event; ``args`` are %-formatted into ``message``."""
        self._log(logging.INFO, _format(message, args))

    def warning(self, reason: str, message: str, *args) -> None:
        """Log a warning event; ``args`` are %-formatted into ``message``."""
        self._log(logging.WARNING, _format(message, args))

    def for_component(self, component_name: str) -> LoggingRecorder:
        """Return a recorder that tags its log lines with ``component_name``."""
        return LoggingRecorder(component_name)

    def with_component_suffix(self, suffix: str) -> LoggingRecorder:
        """Return a recorder whose component name has ``suffix`` appended."""
        name = f"{self.component}-{suffix}" if self.component else suffix
        return LoggingRecorder(name)

    def shutdown(self) -> None:
        """Flush the log handlers."""
        for handler in logger.handlers:
            handler.flush()


class InMemoryRecorder:
    """A recorder that keeps every event it receives."""

    def __init__(self, name: str = ""):
        self.name = name
        self._lock = threading.Lock()
        self._events: list[RecordedEvent] = []

    def _add(self, event_type: str, reason: str, message: str) -> None:
        with self._lock:
            self._events.append(RecordedEvent(event_type, reason, message))

    def event(self, reason: str, message: str, *args) -> None:
        """Record a normal event."""
        self._add(EVENT_NORMAL, reason, _format(message, args))

    def warning(self, reason: str, message: str, *args) -> None:
        """Record a warning event."""
        self._add(EVENT_WARNING, reason, _format(message, args))

    def events(self) -> list[RecordedEvent]:
        """Return the recorded events in order."""
        with self._lock:
            return list(self._events)