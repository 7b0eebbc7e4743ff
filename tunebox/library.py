"""
Track library.

Holds the Track records exported by the hosted backend, in library order.
"""

import logging
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml

from tunebox.playback.types import QueueContext, Track

logger = logging.getLogger(__name__)


class LibraryError(Exception):
    """Library file could not be loaded."""

    pass


def format_duration(seconds: float) -> str:
    """Format seconds as m:ss."""
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


class TrackLibrary:
    """
    Ordered, id-indexed collection of tracks.

    Usage:
        library = TrackLibrary.from_file(Path("library.yaml"))
        track = library.get("track-1")
        controller.play_track(track, library.context_for("track-1"))
    """

    def __init__(self, tracks: Iterable[Track] = ()):
        self._tracks: list[Track] = []
        self._by_id: dict[str, Track] = {}
        for track in tracks:
            if track.id in self._by_id:
                raise LibraryError(f"Duplicate track id: {track.id}")
            self._tracks.append(track)
            self._by_id[track.id] = track

    @classmethod
    def from_file(cls, path: Path) -> "TrackLibrary":
        """
        Load a library from a YAML (or JSON) file.

        Accepts a top-level list of tracks or a mapping with a "tracks" list.

        Raises:
            LibraryError: If the file cannot be read or is malformed
        """
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise LibraryError(f"Error parsing library file: {e}")
        except IOError as e:
            raise LibraryError(f"Error reading library file: {e}")

        library = cls.from_data(data)
        logger.info(f"Loaded {len(library)} tracks from {path}")
        return library

    @classmethod
    def from_data(cls, data: Any) -> "TrackLibrary":
        """Build a library from already-parsed data."""
        if data is None:
            return cls()
        if isinstance(data, dict):
            data = data.get("tracks", [])
        if not isinstance(data, list):
            raise LibraryError("Library must be a list of tracks or a mapping with 'tracks'")

        tracks = []
        for i, entry in enumerate(data):
            try:
                tracks.append(Track.from_dict(entry))
            except ValueError as e:
                raise LibraryError(f"Invalid track at position {i}: {e}")
        return cls(tracks)

    @property
    def tracks(self) -> tuple[Track, ...]:
        return tuple(self._tracks)

    def get(self, track_id: str) -> Optional[Track]:
        return self._by_id.get(track_id)

    def context_for(self, track_id: str) -> Optional[QueueContext]:
        """Queue context of the whole library positioned at track_id."""
        track = self._by_id.get(track_id)
        if track is None:
            return None
        return QueueContext(tracks=tuple(self._tracks), current_index=self._tracks.index(track))

    def __len__(self) -> int:
        return len(self._tracks)

    def __contains__(self, track_id: object) -> bool:
        return track_id in self._by_id
