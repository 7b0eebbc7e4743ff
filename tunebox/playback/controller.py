"""
TuneBox Playback Controller.

Single source of truth for what is playing and what comes next.
"""

import logging
import math
from typing import Callable, Optional

from .auto_advance import (
    DEFAULT_AUTO_ADVANCE_DELAY_SECONDS,
    DEFAULT_AUTO_ADVANCE_THRESHOLD,
    AutoAdvanceScheduler,
)
from .history import DEFAULT_HISTORY_LIMIT, PlayHistory
from .shuffle import IndexPicker, RandomIndexPicker
from .types import PlaybackSnapshot, PlaybackStatus, QueueContext, Track

logger = logging.getLogger(__name__)

DEFAULT_VOLUME = 0.7

# Listener callback type
StateListener = Callable[[PlaybackSnapshot], None]


def _clamp_unit(value: float, name: str) -> float:
    """Clamp value into [0, 1]; non-finite values become 0."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric {name}: {value!r}")
        return 0.0
    if not math.isfinite(value):
        logger.warning(f"Non-finite {name} {value} reset to 0")
        return 0.0
    clamped = max(0.0, min(1.0, value))
    if clamped != value:
        logger.debug(f"{name.capitalize()} clamped: {value} -> {clamped}")
    return clamped


class PlaybackController:
    """
    Playback and queue controller.

    Owns:
    - Current track and transport state (playing/paused)
    - Volume and progress (fractions in [0, 1])
    - Loop and shuffle flags
    - Bounded play history
    - Active queue context

    State machine:
        STOPPED -> PLAYING (play_track)
        PLAYING -> PAUSED (pause_track, or next_track at end of queue)
        PAUSED -> PLAYING (resume_track, play_track)

    Loop and shuffle are flags that change how next_track moves, not states.
    Every command is synchronous and cannot fail; degenerate navigation is a
    silent no-op.

    Usage:
        controller = PlaybackController()
        controller.add_listener(view.render)
        controller.play_track(track, QueueContext(tracks, current_index=2))
        controller.next_track()
    """

    def __init__(
        self,
        default_volume: float = DEFAULT_VOLUME,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        auto_advance_delay: float = DEFAULT_AUTO_ADVANCE_DELAY_SECONDS,
        auto_advance_threshold: float = DEFAULT_AUTO_ADVANCE_THRESHOLD,
        index_picker: Optional[IndexPicker] = None,
    ):
        """
        Initialize an empty controller.

        Args:
            default_volume: Starting volume, also restored by unmute
            history_limit: Maximum play history entries
            auto_advance_delay: Seconds to wait before advancing at track end
            auto_advance_threshold: Progress at which a track counts as finished
            index_picker: Shuffle index source (random by default)
        """
        self._default_volume = _clamp_unit(default_volume, "volume")
        self._auto_advance_threshold = auto_advance_threshold
        self._pick_index: IndexPicker = index_picker or RandomIndexPicker()

        # Playback state
        self._current_track: Optional[Track] = None
        self._is_playing: bool = False
        self._volume: float = self._default_volume
        self._progress: float = 0.0
        self._is_looping: bool = False
        self._is_shuffling: bool = False
        self._history = PlayHistory(history_limit)
        self._current_playlist: Optional[QueueContext] = None
        self._play_count: int = 0

        # Volume to restore when unmuting
        self._unmuted_volume: float = self._default_volume or DEFAULT_VOLUME

        # Auto-advance
        self._auto_advance = AutoAdvanceScheduler(self._on_auto_advance, auto_advance_delay)
        self._armed_for: Optional[tuple[Track, float]] = None

        self._listeners: list[StateListener] = []
        self._disposed = False

        logger.debug("PlaybackController initialized")

    # =========================================================================
    # State Access
    # =========================================================================

    @property
    def current_track(self) -> Optional[Track]:
        return self._current_track

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    @property
    def volume(self) -> float:
        return self._volume

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def is_looping(self) -> bool:
        return self._is_looping

    @property
    def is_shuffling(self) -> bool:
        return self._is_shuffling

    @property
    def play_history(self) -> tuple[Track, ...]:
        return self._history.as_tuple()

    @property
    def current_playlist(self) -> Optional[QueueContext]:
        return self._current_playlist

    @property
    def status(self) -> PlaybackStatus:
        return self.snapshot().status

    @property
    def position(self) -> float:
        """Elapsed seconds in the current track."""
        return self.snapshot().position

    @property
    def auto_advance_pending(self) -> bool:
        return self._auto_advance.is_pending

    def snapshot(self) -> PlaybackSnapshot:
        """Get an immutable copy of the current state."""
        return PlaybackSnapshot(
            current_track=self._current_track,
            is_playing=self._is_playing,
            volume=self._volume,
            progress=self._progress,
            is_looping=self._is_looping,
            is_shuffling=self._is_shuffling,
            play_history=self._history.as_tuple(),
            current_playlist=self._current_playlist,
            play_count=self._play_count,
        )

    # =========================================================================
    # Listeners
    # =========================================================================

    def add_listener(self, listener: StateListener) -> None:
        """Register a callback invoked with a snapshot after each change."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _changed(self) -> None:
        """Re-evaluate auto-advance and notify listeners."""
        self._update_auto_advance()

        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"State listener error: {e}", exc_info=True)

    # =========================================================================
    # Transport Commands
    # =========================================================================

    def play_track(self, track: Track, queue_context: Optional[QueueContext] = None) -> None:
        """
        Make track current and start playing it from the beginning.

        Args:
            track: Track to play
            queue_context: Queue the track belongs to. When omitted the
                current queue is kept, so a queue can be resumed without
                supplying it again.
        """
        if queue_context is not None:
            if not queue_context.current_track.same_as(track):
                logger.warning(
                    f"Track {track.id} does not match queue position "
                    f"{queue_context.current_index} ({queue_context.current_track.id})"
                )
            self._current_playlist = queue_context

        self._current_track = track
        self._is_playing = True
        self._progress = 0.0
        self._play_count += 1
        self._history.record(track)

        if track.duration <= 0:
            logger.debug(f"Track {track.id} has no usable duration")

        logger.info(f"Playing: {track.artist} - {track.title} ({track.id})")
        self._changed()

    def pause_track(self) -> None:
        """Pause playback. No-op without a current track."""
        if self._current_track is None:
            logger.debug("Pause ignored: no current track")
            return
        if not self._is_playing:
            return

        self._is_playing = False
        logger.debug("Playback paused")
        self._changed()

    def resume_track(self) -> None:
        """Resume playback. No-op without a current track."""
        if self._current_track is None:
            logger.debug("Resume ignored: no current track")
            return
        if self._is_playing:
            return

        self._is_playing = True
        logger.debug("Playback resumed")
        self._changed()

    def toggle_play_pause(self) -> None:
        """Pause if playing, resume otherwise."""
        if self._is_playing:
            self.pause_track()
        else:
            self.resume_track()

    def play_or_toggle(self, track: Track, queue_context: Optional[QueueContext] = None) -> None:
        """
        Play track, or toggle play/pause when it is already current.

        This is what selecting a track in a list does.
        """
        if track.same_as(self._current_track):
            self.toggle_play_pause()
        else:
            self.play_track(track, queue_context)

    # =========================================================================
    # Navigation
    # =========================================================================

    def next_track(self) -> None:
        """
        Move to the next track of the current queue.

        - Shuffling: random track other than the current one
        - Otherwise the following track
        - At the end: wrap to the first track when looping, else pause
          and rewind the last track
        """
        queue = self._current_playlist
        if queue is None or self._current_track is None:
            logger.debug("Next ignored: no active queue")
            return

        if self._is_shuffling:
            index = self._pick_index(len(queue), queue.current_index)
            if index is None:
                logger.debug("Next ignored: nothing to shuffle to")
                return
            if not 0 <= index < len(queue) or index == queue.current_index:
                logger.warning(f"Shuffle picker returned invalid index {index}")
                return
            self._play_index(queue, index)
            return

        if queue.current_index < len(queue) - 1:
            self._play_index(queue, queue.current_index + 1)
        elif self._is_looping:
            logger.info("Queue wrapped to beginning (loop)")
            self._play_index(queue, 0)
        else:
            logger.info("End of queue reached")
            self._is_playing = False
            self._progress = 0.0
            self._changed()

    def previous_track(self) -> None:
        """
        Move to the previous track of the current queue.

        At the first track this only rewinds. Shuffle does not apply here.
        """
        queue = self._current_playlist
        if queue is None or self._current_track is None:
            logger.debug("Previous ignored: no active queue")
            return

        if queue.current_index == 0:
            self.set_progress(0.0)
            return

        self._play_index(queue, queue.current_index - 1)

    def _play_index(self, queue: QueueContext, index: int) -> None:
        logger.debug(f"Queue index: {queue.current_index} -> {index}")
        self.play_track(queue.tracks[index], queue.with_index(index))

    # =========================================================================
    # Volume, Progress, Flags
    # =========================================================================

    def set_volume(self, value: float) -> None:
        """Set volume, clamped to [0, 1]."""
        volume = _clamp_unit(value, "volume")
        if volume == self._volume:
            return
        self._volume = volume
        if volume > 0:
            self._unmuted_volume = volume
        self._changed()

    def toggle_mute(self) -> None:
        """Mute, or restore the last audible volume."""
        if self._volume > 0:
            self._unmuted_volume = self._volume
            self.set_volume(0.0)
        else:
            self.set_volume(self._unmuted_volume)

    def set_progress(self, value: float) -> None:
        """Set progress as a fraction of the current track, clamped to [0, 1]."""
        progress = _clamp_unit(value, "progress")
        if progress == self._progress:
            return
        self._progress = progress
        self._changed()

    def seek(self, seconds: float) -> None:
        """Set progress from an absolute position in seconds."""
        track = self._current_track
        if track is None:
            logger.debug("Seek ignored: no current track")
            return
        if track.duration <= 0:
            logger.warning(f"Cannot seek: track {track.id} has no usable duration")
            return
        self.set_progress(seconds / track.duration)

    def toggle_loop(self) -> None:
        self._is_looping = not self._is_looping
        logger.info(f"Loop: {self._is_looping}")
        self._changed()

    def toggle_shuffle(self) -> None:
        self._is_shuffling = not self._is_shuffling
        logger.info(f"Shuffle: {self._is_shuffling}")
        self._changed()

    # =========================================================================
    # Auto-advance
    # =========================================================================

    def _update_auto_advance(self) -> None:
        """
        Arm, keep, or cancel the pending advance for the current state.

        Only a playing track arms it: a paused track parked at its end stays
        put until resumed.
        """
        track = self._current_track
        finished = (
            not self._disposed
            and track is not None
            and self._is_playing
            and self._progress >= self._auto_advance_threshold
        )

        if not finished:
            if self._armed_for is not None:
                self._auto_advance.cancel()
                self._armed_for = None
            return

        armed = self._armed_for
        if (
            armed is not None
            and armed[0] is track
            and armed[1] == self._progress
            and self._auto_advance.is_pending
        ):
            return

        if self._auto_advance.schedule():
            self._armed_for = (track, self._progress)
        else:
            self._armed_for = None

    def _on_auto_advance(self) -> None:
        self._armed_for = None
        logger.info("Track finished, advancing")
        self.next_track()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def dispose(self) -> None:
        """Cancel pending auto-advance and drop listeners."""
        self._disposed = True
        self._auto_advance.close()
        self._armed_for = None
        self._listeners.clear()
        logger.debug("PlaybackController disposed")
