"""EventSink Protocol - Abstract interface for user-facing activity events.

Services report progress, successes and failures through an injected
sink instead of a process-wide log.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol, runtime_checkable


class EventLevel(Enum):
    """Severity of an activity event."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


@runtime_checkable
class EventSink(Protocol):
    """Abstract interface for activity events.

    Implementations:
    - InMemoryEventLog: bounded in-memory log with subscribers
    """

    def emit(self, level: EventLevel, message: str) -> None:
        """Record an event.

        Args:
            level: Event severity
            message: Human-readable message
        """
        ...


class NullEventSink:
    """Event sink that discards everything."""

    def emit(self, level: EventLevel, message: str) -> None:
        return None
