"""InMemoryEventLog - Bounded activity log implementing EventSink.

Provides:
- Retention of the most recent entries (newest first)
- Subscription for live listeners (e.g. a log panel)
- Forwarding of every entry to the standard logging module
"""

from __future__ import annotations

import logging
import uuid
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from fundfolio.core.ports.event_port import EventLevel

logger = logging.getLogger("fundfolio.events")

# Default number of entries kept in memory
DEFAULT_MAX_ENTRIES = 100

_LOGGING_LEVELS = {
    EventLevel.INFO: logging.INFO,
    EventLevel.SUCCESS: logging.INFO,
    EventLevel.WARNING: logging.WARNING,
    EventLevel.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class LogEntry:
    """A single activity event.

    Attributes:
        id: Short unique identifier
        timestamp: When the event was recorded (UTC)
        level: Event severity
        message: Human-readable message
    """

    id: str
    timestamp: datetime
    level: EventLevel
    message: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.value,
            "message": self.message,
        }


Listener = Callable[[LogEntry], None]


class InMemoryEventLog:
    """Keeps the last ``max_entries`` events and notifies subscribers."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        """Initialize InMemoryEventLog.

        Args:
            max_entries: Number of entries retained (oldest are dropped)

        Raises:
            ValueError: If max_entries is not positive
        """
        if max_entries < 1:
            raise ValueError(f"max_entries must be positive. Got: {max_entries}")

        self._entries: deque[LogEntry] = deque(maxlen=max_entries)
        self._listeners: list[Listener] = []

    @property
    def max_entries(self) -> int:
        return self._entries.maxlen or 0

    def emit(self, level: EventLevel, message: str) -> None:
        """Record an event, forward it to logging and notify subscribers."""
        entry = LogEntry(
            id=uuid.uuid4().hex[:9],
            timestamp=datetime.now(timezone.utc),
            level=level,
            message=message,
        )
        self._entries.appendleft(entry)
        logger.log(_LOGGING_LEVELS[level], "[%s] %s", level.value, message)

        for listener in list(self._listeners):
            listener(entry)

    def info(self, message: str) -> None:
        self.emit(EventLevel.INFO, message)

    def warning(self, message: str) -> None:
        self.emit(EventLevel.WARNING, message)

    def error(self, message: str) -> None:
        self.emit(EventLevel.ERROR, message)

    def success(self, message: str) -> None:
        self.emit(EventLevel.SUCCESS, message)

    def history(self) -> list[LogEntry]:
        """Return retained entries, newest first."""
        return list(self._entries)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for new entries.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def clear(self) -> None:
        """Drop all retained entries."""
        self._entries.clear()
        self.emit(EventLevel.INFO, "Log history cleared.")
