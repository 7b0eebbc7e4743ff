"""
Simulated audio renderer.

Plays nothing audible: advances a timestamp-based position on the event
loop clock and reports progress like a real output would.
"""

import asyncio
import logging
import time
from typing import Optional

from tunebox.playback.types import Track

from .base import AudioRenderer, RenderState

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL_SECONDS = 0.25


class SimulatedRenderer(AudioRenderer):
    """
    Clock-driven renderer for headless runs and tests.

    Position is tracked as (value, timestamp) like a real device report,
    so it keeps moving between ticks while playing.
    """

    def __init__(
        self,
        tick_interval: float = DEFAULT_TICK_INTERVAL_SECONDS,
        name: str = "Simulated Output",
    ):
        super().__init__(name)
        self._tick_interval = tick_interval

        self._position_value: float = 0.0  # seconds
        self._position_timestamp: float = 0.0
        self._tick_task: Optional[asyncio.Task[None]] = None

    @property
    def position(self) -> float:
        """Current position in seconds."""
        if self._state != RenderState.PLAYING:
            return self._position_value
        elapsed = time.monotonic() - self._position_timestamp
        return self._position_value + elapsed

    def _set_position(self, seconds: float) -> None:
        self._position_value = seconds
        self._position_timestamp = time.monotonic()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def connect(self) -> bool:
        self._is_connected = True
        logger.info(f"Renderer connected: {self.name}")
        return True

    async def disconnect(self) -> None:
        await self._cancel_ticking()
        self._track = None
        self._is_connected = False
        self._notify_state_change(RenderState.STOPPED)
        logger.info(f"Renderer disconnected: {self.name}")

    # =========================================================================
    # Playback Control
    # =========================================================================

    async def play(self, track: Track) -> None:
        """Load track and start the playback clock."""
        await self._cancel_ticking()

        problem = self._validate(track)
        if problem:
            self._track = None
            self._set_position(0.0)
            logger.error(f"Cannot play track {track.id}: {problem}")
            self._notify_state_change(RenderState.ERROR)
            self._notify_playback_error(f"Cannot play \"{track.title}\": {problem}")
            return

        self._track = track
        self._set_position(0.0)
        self._notify_state_change(RenderState.PLAYING)
        self._tick_task = asyncio.create_task(self._tick_loop())
        logger.info(f"Rendering: {track.artist} - {track.title} ({track.duration:.1f}s)")

    async def pause(self) -> None:
        if self._state != RenderState.PLAYING:
            return
        self._set_position(self.position)
        await self._cancel_ticking()
        self._notify_state_change(RenderState.PAUSED)

    async def resume(self) -> None:
        if self._state != RenderState.PAUSED or self._track is None:
            return
        self._set_position(self._position_value)
        self._notify_state_change(RenderState.PLAYING)
        self._tick_task = asyncio.create_task(self._tick_loop())

    async def stop(self) -> None:
        await self._cancel_ticking()
        self._track = None
        self._set_position(0.0)
        self._notify_state_change(RenderState.STOPPED)

    async def seek(self, progress: float) -> None:
        if self._track is None:
            return
        self._set_position(progress * self._track.duration)
        if self._state == RenderState.ENDED and progress < 1.0:
            self._notify_state_change(RenderState.PAUSED)
        logger.debug(f"Seek to {self._position_value:.1f}s")

    # =========================================================================
    # Internal
    # =========================================================================

    @staticmethod
    def _validate(track: Track) -> Optional[str]:
        if not track.url:
            return "no audio URL"
        if track.duration <= 0:
            return f"invalid duration {track.duration}"
        return None

    async def _tick_loop(self) -> None:
        """Report progress until the track reaches its end."""
        while True:
            try:
                await asyncio.sleep(self._tick_interval)
                track = self._track
                if track is None:
                    break

                position = min(self.position, track.duration)
                self._notify_position_update(position / track.duration)

                if position >= track.duration:
                    # Hold at the end; the controller decides what plays next
                    self._set_position(track.duration)
                    self._notify_state_change(RenderState.ENDED)
                    logger.debug(f"Reached end of track {track.id}")
                    break

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Renderer tick error: {e}", exc_info=True)
                await asyncio.sleep(1.0)

    async def _cancel_ticking(self) -> None:
        task = self._tick_task
        self._tick_task = None
        if task is None or task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
