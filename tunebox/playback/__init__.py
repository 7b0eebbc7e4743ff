"""Playback and queue control module."""

from .auto_advance import (
    DEFAULT_AUTO_ADVANCE_DELAY_SECONDS,
    DEFAULT_AUTO_ADVANCE_THRESHOLD,
    AutoAdvanceScheduler,
)
from .controller import DEFAULT_VOLUME, PlaybackController, StateListener
from .history import DEFAULT_HISTORY_LIMIT, PlayHistory
from .shuffle import IndexPicker, RandomIndexPicker
from .types import PlaybackSnapshot, PlaybackStatus, QueueContext, Track

__all__ = [
    # Types
    "PlaybackSnapshot",
    "PlaybackStatus",
    "QueueContext",
    "Track",
    # Controller
    "DEFAULT_VOLUME",
    "PlaybackController",
    "StateListener",
    # History
    "DEFAULT_HISTORY_LIMIT",
    "PlayHistory",
    # Shuffle
    "IndexPicker",
    "RandomIndexPicker",
    # Auto-advance
    "AutoAdvanceScheduler",
    "DEFAULT_AUTO_ADVANCE_DELAY_SECONDS",
    "DEFAULT_AUTO_ADVANCE_THRESHOLD",
]
