"""
Render bridge.

Connects the playback controller to an audio renderer: controller state
flows down as renderer directives, renderer reports flow back up.
"""

import asyncio
import logging
from typing import Optional

from tunebox.notifications import NotificationLevel, NotificationSink
from tunebox.playback.controller import PlaybackController
from tunebox.playback.types import PlaybackSnapshot, Track

from .base import AudioRenderer, RenderState

logger = logging.getLogger(__name__)

# Progress drift beyond this is treated as a user seek, not renderer reporting
SEEK_TOLERANCE = 0.001


class RenderBridge:
    """
    Keeps a renderer in step with the controller.

    Directives (applied in order by one background task, coalescing bursts):
    - Each play_track call (new play_count) -> renderer.play()
    - No current track -> renderer.stop()
    - Playing flag -> renderer.pause() / renderer.resume()
    - Progress moved by someone other than the renderer -> renderer.seek()
    - Volume -> renderer.set_volume()

    Reports:
    - Renderer position -> controller.set_progress()
    - Renderer errors -> notification sink. The controller keeps playing
      unless pause_on_error is set.
    """

    def __init__(
        self,
        controller: PlaybackController,
        renderer: AudioRenderer,
        notifier: NotificationSink,
        pause_on_error: bool = False,
    ):
        self._controller = controller
        self._renderer = renderer
        self._notifier = notifier
        self._pause_on_error = pause_on_error

        # What the renderer was last told / last reported
        self._track: Optional[Track] = None
        self._play_count: Optional[int] = None
        self._reported_progress: float = 0.0

        self._latest: Optional[PlaybackSnapshot] = None
        self._dirty = asyncio.Event()
        self._sync_task: Optional[asyncio.Task[None]] = None
        self._is_running = False

    @property
    def is_running(self) -> bool:
        return self._is_running

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Wire callbacks and start applying controller state."""
        if self._is_running:
            return

        if not self._renderer.is_connected():
            await self._renderer.connect()

        self._renderer.on_position_update(self._on_position_update)
        self._renderer.on_playback_error(self._on_playback_error)
        self._controller.add_listener(self._on_state)

        self._is_running = True
        self._sync_task = asyncio.create_task(self._sync_loop())

        # Bring the renderer up to date with whatever is already loaded
        self._on_state(self._controller.snapshot())
        logger.info(f"Render bridge started ({self._renderer.name})")

    async def stop(self) -> None:
        """Unwire callbacks, stop the renderer and the sync task."""
        self._is_running = False
        self._controller.remove_listener(self._on_state)
        self._renderer.on_position_update(None)
        self._renderer.on_playback_error(None)

        if self._sync_task:
            self._sync_task.cancel()
            try:
                await self._sync_task
            except asyncio.CancelledError:
                pass
            self._sync_task = None

        await self._renderer.stop()
        self._track = None
        self._play_count = None
        logger.info("Render bridge stopped")

    # =========================================================================
    # Controller -> Renderer
    # =========================================================================

    def _on_state(self, snapshot: PlaybackSnapshot) -> None:
        self._latest = snapshot
        self._dirty.set()

    async def _sync_loop(self) -> None:
        """Apply the latest controller snapshot whenever it changes."""
        while self._is_running:
            try:
                await self._dirty.wait()
                self._dirty.clear()
                snapshot = self._latest
                if snapshot is not None:
                    await self._apply(snapshot)

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Render sync error: {e}", exc_info=True)

    async def _apply(self, snapshot: PlaybackSnapshot) -> None:
        renderer = self._renderer
        track = snapshot.current_track

        if track is None:
            if self._track is not None:
                await renderer.stop()
                self._track = None
            return

        # Every play_track call restarts the renderer, even for the same track
        if snapshot.play_count != self._play_count:
            self._track = track
            self._play_count = snapshot.play_count
            self._reported_progress = 0.0
            await renderer.play(track)
            if renderer.state == RenderState.ERROR:
                return
        elif abs(snapshot.progress - self._reported_progress) > SEEK_TOLERANCE:
            logger.debug(f"Seeking renderer to {snapshot.progress:.3f}")
            self._reported_progress = snapshot.progress
            await renderer.seek(snapshot.progress)

        if snapshot.is_playing and renderer.state == RenderState.PAUSED:
            await renderer.resume()
        elif not snapshot.is_playing and renderer.state == RenderState.PLAYING:
            await renderer.pause()

        if renderer.volume != snapshot.volume:
            await renderer.set_volume(snapshot.volume)

    # =========================================================================
    # Renderer -> Controller / Notifications
    # =========================================================================

    def _on_position_update(self, progress: float) -> None:
        # Drop late reports for a track the controller already left
        current = self._controller.current_track
        if current is None or self._renderer.track is not current:
            return
        self._reported_progress = progress
        self._controller.set_progress(progress)

    def _on_playback_error(self, message: str) -> None:
        self._notifier.notify(message, NotificationLevel.ERROR)
        if self._pause_on_error:
            logger.info("Pausing after playback error")
            self._controller.pause_track()
