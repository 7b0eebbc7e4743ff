"""
Playback types and enumerations.
"""

import math
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any, Mapping, Optional


class PlaybackStatus(IntEnum):
    """
    Derived transport status.

    Loop and shuffle are flags, not states.
    """

    STOPPED = 1  # No current track
    PLAYING = 2  # Track loaded and playing
    PAUSED = 3  # Track loaded, not playing


@dataclass(frozen=True)
class Track:
    """
    A single playable audio item.

    Attributes:
        id: Opaque unique identifier
        title: Display title
        artist: Display artist
        duration: Length in seconds
        url: Audio resource location
        cover: Artwork URL (placeholder rendering when absent)
    """

    id: str
    title: str
    artist: str
    duration: float
    url: str
    cover: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Track":
        """
        Build a track from a mapping.

        Raises:
            ValueError: If a required key is missing or duration is not a finite number
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Track must be a mapping, got {type(data).__name__}")

        missing = [key for key in ("id", "title", "artist", "url") if key not in data]
        if missing:
            raise ValueError(f"Track is missing required fields: {', '.join(missing)}")

        try:
            duration = float(data.get("duration", 0))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid duration for track {data['id']}: {data.get('duration')!r}")
        if not math.isfinite(duration):
            raise ValueError(f"Invalid duration for track {data['id']}: {duration}")

        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            artist=str(data["artist"]),
            duration=duration,
            url=str(data["url"]),
            cover=data.get("cover") or None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "duration": self.duration,
            "cover": self.cover,
            "url": self.url,
        }

    def same_as(self, other: Optional["Track"]) -> bool:
        """Check whether other refers to the same track (by id)."""
        return other is not None and other.id == self.id


@dataclass(frozen=True)
class QueueContext:
    """
    An ordered track list plus the index of the current track within it.

    Order is caller-defined (library, playlist, search results).
    """

    tracks: tuple[Track, ...]
    current_index: int = 0

    def __post_init__(self) -> None:
        # Any sequence is accepted; stored as a tuple
        object.__setattr__(self, "tracks", tuple(self.tracks))
        if not self.tracks:
            raise ValueError("Queue context requires at least one track")
        if not 0 <= self.current_index < len(self.tracks):
            raise ValueError(
                f"Queue index {self.current_index} out of range for {len(self.tracks)} tracks"
            )

    @property
    def current_track(self) -> Track:
        return self.tracks[self.current_index]

    def __len__(self) -> int:
        return len(self.tracks)

    def with_index(self, index: int) -> "QueueContext":
        """Return a copy of this context positioned at index."""
        return replace(self, current_index=index)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "QueueContext":
        """
        Build a context from {"tracks": [...], "currentIndex": n}.

        Raises:
            ValueError: If the mapping is malformed
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Queue must be a mapping, got {type(data).__name__}")

        raw_tracks = data.get("tracks")
        if not isinstance(raw_tracks, list):
            raise ValueError("Queue 'tracks' must be a list")

        index = data.get("currentIndex", 0)
        if isinstance(index, bool) or not isinstance(index, int):
            raise ValueError(f"Queue 'currentIndex' must be an integer, got {index!r}")

        return cls(tracks=tuple(Track.from_dict(t) for t in raw_tracks), current_index=index)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "tracks": [track.to_dict() for track in self.tracks],
            "currentIndex": self.current_index,
        }


@dataclass(frozen=True)
class PlaybackSnapshot:
    """
    Immutable copy of the controller's playback state.

    Handed to listeners and serialized by the control server.
    """

    current_track: Optional[Track]
    is_playing: bool
    volume: float
    progress: float
    is_looping: bool
    is_shuffling: bool
    play_history: tuple[Track, ...] = field(default_factory=tuple)
    current_playlist: Optional[QueueContext] = None
    play_count: int = 0  # Incremented by every play_track call

    @property
    def status(self) -> PlaybackStatus:
        if self.current_track is None:
            return PlaybackStatus.STOPPED
        return PlaybackStatus.PLAYING if self.is_playing else PlaybackStatus.PAUSED

    @property
    def position(self) -> float:
        """Elapsed seconds in the current track."""
        if self.current_track is None:
            return 0.0
        return self.progress * max(0.0, self.current_track.duration)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON responses."""
        return {
            "status": self.status.name.lower(),
            "currentTrack": self.current_track.to_dict() if self.current_track else None,
            "isPlaying": self.is_playing,
            "volume": self.volume,
            "progress": self.progress,
            "position": self.position,
            "isLooping": self.is_looping,
            "isShuffling": self.is_shuffling,
            "historyLength": len(self.play_history),
            "currentIndex": (
                self.current_playlist.current_index if self.current_playlist else None
            ),
            "queueLength": len(self.current_playlist) if self.current_playlist else 0,
        }
