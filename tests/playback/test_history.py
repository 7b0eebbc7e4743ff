"""Tests for bounded play history."""

import pytest

from tunebox.playback.history import DEFAULT_HISTORY_LIMIT, PlayHistory
from tunebox.playback.types import Track


def _make_track(track_id: str) -> Track:
    return Track(id=track_id, title=track_id, artist="A", duration=100, url=f"u/{track_id}")


class TestPlayHistory:
    """Tests for PlayHistory."""

    def test_default_limit(self) -> None:
        assert PlayHistory().limit == DEFAULT_HISTORY_LIMIT == 50

    def test_invalid_limit(self) -> None:
        with pytest.raises(ValueError):
            PlayHistory(limit=0)

    def test_record_appends(self) -> None:
        history = PlayHistory()
        assert history.record(_make_track("a")) is True
        assert history.record(_make_track("b")) is True
        assert [t.id for t in history] == ["a", "b"]
        assert history.last is not None and history.last.id == "b"

    def test_adjacent_duplicate_skipped(self) -> None:
        """Test replaying the same track twice in a row does not grow history."""
        history = PlayHistory()
        history.record(_make_track("a"))
        assert history.record(_make_track("a")) is False
        assert len(history) == 1

    def test_non_adjacent_repeat_recorded(self) -> None:
        """Test non-adjacent repeats are recorded again."""
        history = PlayHistory()
        for track_id in ["a", "b", "a"]:
            history.record(_make_track(track_id))
        assert [t.id for t in history] == ["a", "b", "a"]

    def test_fifo_eviction(self) -> None:
        """Test oldest entries are dropped first once at capacity."""
        history = PlayHistory(limit=3)
        for track_id in ["a", "b", "c", "d"]:
            history.record(_make_track(track_id))
        assert [t.id for t in history] == ["b", "c", "d"]

    def test_never_exceeds_limit(self) -> None:
        history = PlayHistory()
        for i in range(120):
            history.record(_make_track(str(i)))
        assert len(history) == 50
        assert history.as_tuple()[0].id == "70"
        assert history.as_tuple()[-1].id == "119"

    def test_clear(self) -> None:
        history = PlayHistory()
        history.record(_make_track("a"))
        history.clear()
        assert len(history) == 0
        assert history.last is None
