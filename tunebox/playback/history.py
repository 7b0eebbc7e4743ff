"""
Bounded play history.

Keeps the most recently played tracks, oldest first.
"""

import logging
from typing import Iterator, Optional

from .types import Track

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


class PlayHistory:
    """
    Most recently played tracks, bounded to a fixed size.

    A track is only skipped when it equals the immediately preceding entry;
    non-adjacent repeats are recorded again.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError(f"History limit must be positive, got {limit}")
        self._limit = limit
        self._entries: list[Track] = []

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def last(self) -> Optional[Track]:
        return self._entries[-1] if self._entries else None

    def record(self, track: Track) -> bool:
        """
        Append a track unless it repeats the last entry.

        Returns:
            True if the track was appended
        """
        if track.same_as(self.last):
            return False

        self._entries.append(track)
        overflow = len(self._entries) - self._limit
        if overflow > 0:
            # Oldest entries go first
            del self._entries[:overflow]
            logger.debug(f"History trimmed by {overflow} entries")
        return True

    def clear(self) -> None:
        self._entries.clear()

    def as_tuple(self) -> tuple[Track, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Track]:
        return iter(self._entries)
