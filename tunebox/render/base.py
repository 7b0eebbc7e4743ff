"""
Abstract audio renderer interface.

A renderer turns controller directives (track, playing flag, volume) into
audio output and reports the real playback position back.
"""

import logging
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Callable, Optional

from tunebox.playback.types import Track

logger = logging.getLogger(__name__)


class RenderState(IntEnum):
    """Renderer output state."""

    STOPPED = 1
    PLAYING = 2
    PAUSED = 3
    ENDED = 4  # Held at the end of the track
    ERROR = 5


# Event callback types
StateChangeCallback = Callable[[RenderState], None]
PositionUpdateCallback = Callable[[float], None]  # progress fraction
PlaybackErrorCallback = Callable[[str], None]  # error_message


class AudioRenderer(ABC):
    """
    Abstract base class for audio renderers.

    Renderers must implement all abstract methods. Load and decode failures
    are reported through the playback error callback, never raised.
    """

    def __init__(self, name: str = "AudioRenderer"):
        """Initialize renderer."""
        self.name = name
        self._volume: float = 1.0
        self._state: RenderState = RenderState.STOPPED
        self._is_connected: bool = False
        self._track: Optional[Track] = None

        # Event callbacks
        self._on_state_change: Optional[StateChangeCallback] = None
        self._on_position_update: Optional[PositionUpdateCallback] = None
        self._on_playback_error: Optional[PlaybackErrorCallback] = None

    # =========================================================================
    # Playback Control - Required
    # =========================================================================

    @abstractmethod
    async def play(self, track: Track) -> None:
        """Start playback of a track from the beginning."""
        pass

    @abstractmethod
    async def pause(self) -> None:
        """Pause current playback."""
        pass

    @abstractmethod
    async def resume(self) -> None:
        """Resume paused playback."""
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Stop playback completely."""
        pass

    @abstractmethod
    async def seek(self, progress: float) -> None:
        """Move to a fraction of the current track."""
        pass

    # =========================================================================
    # Volume Control
    # =========================================================================

    async def set_volume(self, level: float) -> None:
        """Set output volume (0.0-1.0)."""
        self._volume = level

    @property
    def volume(self) -> float:
        return self._volume

    @property
    def state(self) -> RenderState:
        return self._state

    @property
    def track(self) -> Optional[Track]:
        """Track currently loaded, if any."""
        return self._track

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @abstractmethod
    async def connect(self) -> bool:
        """Open the output. Returns True if successful."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the output and clean up."""
        pass

    def is_connected(self) -> bool:
        return self._is_connected

    # =========================================================================
    # Event Callbacks
    # =========================================================================

    def on_state_change(self, callback: Optional[StateChangeCallback]) -> None:
        """Register callback for state changes."""
        self._on_state_change = callback

    def on_position_update(self, callback: Optional[PositionUpdateCallback]) -> None:
        """Register callback for position updates."""
        self._on_position_update = callback

    def on_playback_error(self, callback: Optional[PlaybackErrorCallback]) -> None:
        """Register callback for playback errors."""
        self._on_playback_error = callback

    # =========================================================================
    # Event Notification Helpers
    # =========================================================================

    def _notify_state_change(self, state: RenderState) -> None:
        """Notify listeners of state change."""
        old_state = self._state
        self._state = state
        if old_state != state and self._on_state_change:
            try:
                self._on_state_change(state)
            except Exception as e:
                logger.error(f"State change callback error: {e}")

    def _notify_position_update(self, progress: float) -> None:
        """Notify listeners of position update."""
        if self._on_position_update:
            try:
                self._on_position_update(progress)
            except Exception as e:
                logger.error(f"Position update callback error: {e}")

    def _notify_playback_error(self, message: str) -> None:
        """Notify listeners of playback error."""
        if self._on_playback_error:
            try:
                self._on_playback_error(message)
            except Exception as e:
                logger.error(f"Playback error callback error: {e}")
