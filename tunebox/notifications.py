"""
Notification sink for user-facing messages.

Playback errors from the renderer surface here as transient toasts; the
controller itself never reports through this channel.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

DEFAULT_MAX_PENDING = 20


class NotificationLevel(Enum):
    """Notification severity."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A single toast/banner message."""

    message: str
    level: NotificationLevel = NotificationLevel.INFO
    created_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "level": self.level.value,
            "createdAt": self.created_at,
        }


@runtime_checkable
class NotificationSink(Protocol):
    """Anything that can show a notification to the user."""

    def notify(self, message: str, level: NotificationLevel = NotificationLevel.INFO) -> None:
        ...


_LOG_LEVELS = {
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.WARNING: logging.WARNING,
    NotificationLevel.ERROR: logging.ERROR,
}


class LoggingNotificationSink:
    """Writes notifications to the log."""

    def notify(self, message: str, level: NotificationLevel = NotificationLevel.INFO) -> None:
        logger.log(_LOG_LEVELS[level], f"[{level.value}] {message}")


class QueuedNotificationSink:
    """
    Holds pending notifications until a UI view drains them.

    Bounded: when full, the oldest pending notification is dropped.
    Every notification is also logged.
    """

    def __init__(self, max_pending: int = DEFAULT_MAX_PENDING):
        self._pending: deque[Notification] = deque(maxlen=max_pending)
        self._log = LoggingNotificationSink()

    def notify(self, message: str, level: NotificationLevel = NotificationLevel.INFO) -> None:
        self._pending.append(Notification(message=message, level=level))
        self._log.notify(message, level)

    def error(self, message: str) -> None:
        self.notify(message, NotificationLevel.ERROR)

    def drain(self) -> list[Notification]:
        """Return and clear all pending notifications, oldest first."""
        items = list(self._pending)
        self._pending.clear()
        return items

    def __len__(self) -> int:
        return len(self._pending)
