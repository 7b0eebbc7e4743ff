"""Tests for playback types."""

import pytest

from tunebox.playback.types import (
    PlaybackSnapshot,
    PlaybackStatus,
    QueueContext,
    Track,
)


def _make_track(track_id: str = "t1", duration: float = 200.0) -> Track:
    return Track(
        id=track_id,
        title=f"Title {track_id}",
        artist="Artist",
        duration=duration,
        url=f"https://example.com/{track_id}.mp3",
    )


class TestTrack:
    """Tests for Track dataclass."""

    def test_defaults(self) -> None:
        """Test cover defaults to None."""
        track = _make_track()
        assert track.cover is None

    def test_from_dict(self) -> None:
        """Test parsing a full mapping."""
        track = Track.from_dict(
            {
                "id": 42,
                "title": "Song",
                "artist": "Band",
                "duration": "180.5",
                "cover": "https://example.com/c.jpg",
                "url": "https://example.com/a.mp3",
            }
        )
        assert track.id == "42"
        assert track.duration == 180.5
        assert track.cover == "https://example.com/c.jpg"

    def test_from_dict_empty_cover_is_none(self) -> None:
        """Test empty cover string means placeholder."""
        track = Track.from_dict(
            {"id": "a", "title": "T", "artist": "A", "duration": 1, "url": "u", "cover": ""}
        )
        assert track.cover is None

    def test_from_dict_missing_fields(self) -> None:
        """Test missing required keys are reported."""
        with pytest.raises(ValueError, match="title, artist"):
            Track.from_dict({"id": "a", "url": "u"})

    def test_from_dict_bad_duration(self) -> None:
        """Test non-numeric duration is rejected."""
        with pytest.raises(ValueError, match="Invalid duration"):
            Track.from_dict(
                {"id": "a", "title": "T", "artist": "A", "duration": "long", "url": "u"}
            )

    @pytest.mark.parametrize("duration", ["inf", float("-inf"), float("nan"), 1e400])
    def test_from_dict_non_finite_duration(self, duration) -> None:
        """Test infinite and NaN durations are rejected."""
        with pytest.raises(ValueError, match="Invalid duration"):
            Track.from_dict(
                {"id": "a", "title": "T", "artist": "A", "duration": duration, "url": "u"}
            )

    def test_from_dict_not_mapping(self) -> None:
        """Test non-mapping input is rejected."""
        with pytest.raises(ValueError, match="mapping"):
            Track.from_dict(["a"])  # type: ignore[arg-type]

    def test_to_dict(self) -> None:
        """Test conversion to dictionary."""
        result = _make_track("x").to_dict()
        assert result["id"] == "x"
        assert result["title"] == "Title x"
        assert result["cover"] is None
        assert result["url"] == "https://example.com/x.mp3"

    def test_same_as_uses_id(self) -> None:
        """Test tracks with equal ids are the same track."""
        a = _make_track("a")
        a_copy = Track(id="a", title="Other", artist="Other", duration=1, url="u")
        assert a.same_as(a_copy) is True
        assert a.same_as(_make_track("b")) is False
        assert a.same_as(None) is False


class TestQueueContext:
    """Tests for QueueContext dataclass."""

    def test_current_track(self) -> None:
        """Test current track follows index."""
        tracks = [_make_track("a"), _make_track("b")]
        queue = QueueContext(tracks, current_index=1)
        assert queue.current_track.id == "b"
        assert len(queue) == 2

    def test_tracks_stored_as_tuple(self) -> None:
        """Test list input is frozen into a tuple."""
        tracks = [_make_track("a")]
        queue = QueueContext(tracks)
        tracks.append(_make_track("b"))
        assert isinstance(queue.tracks, tuple)
        assert len(queue) == 1

    def test_index_out_of_range(self) -> None:
        """Test index must point into the list."""
        with pytest.raises(ValueError, match="out of range"):
            QueueContext((_make_track("a"),), current_index=1)
        with pytest.raises(ValueError, match="out of range"):
            QueueContext((_make_track("a"),), current_index=-1)

    def test_empty_rejected(self) -> None:
        """Test an empty queue is rejected."""
        with pytest.raises(ValueError, match="at least one"):
            QueueContext(())

    def test_with_index(self) -> None:
        """Test with_index returns a new context."""
        queue = QueueContext((_make_track("a"), _make_track("b")))
        moved = queue.with_index(1)
        assert moved.current_index == 1
        assert queue.current_index == 0
        assert moved.tracks is queue.tracks

    def test_from_dict(self) -> None:
        """Test parsing camelCase mapping."""
        queue = QueueContext.from_dict(
            {
                "tracks": [
                    {"id": "a", "title": "A", "artist": "X", "duration": 10, "url": "u1"},
                    {"id": "b", "title": "B", "artist": "X", "duration": 20, "url": "u2"},
                ],
                "currentIndex": 1,
            }
        )
        assert queue.current_track.id == "b"

    def test_from_dict_bad_index(self) -> None:
        """Test non-integer index is rejected."""
        with pytest.raises(ValueError, match="currentIndex"):
            QueueContext.from_dict({"tracks": [], "currentIndex": "1"})

    def test_from_dict_bad_tracks(self) -> None:
        """Test tracks must be a list."""
        with pytest.raises(ValueError, match="must be a list"):
            QueueContext.from_dict({"tracks": "abc"})

    def test_to_dict(self) -> None:
        """Test conversion to dictionary."""
        queue = QueueContext((_make_track("a"), _make_track("b")), current_index=1)
        result = queue.to_dict()
        assert result["currentIndex"] == 1
        assert [t["id"] for t in result["tracks"]] == ["a", "b"]


class TestPlaybackSnapshot:
    """Tests for PlaybackSnapshot."""

    def _snapshot(self, **kwargs) -> PlaybackSnapshot:
        values = dict(
            current_track=None,
            is_playing=False,
            volume=0.7,
            progress=0.0,
            is_looping=False,
            is_shuffling=False,
        )
        values.update(kwargs)
        return PlaybackSnapshot(**values)

    def test_status_stopped(self) -> None:
        assert self._snapshot().status == PlaybackStatus.STOPPED

    def test_status_playing_and_paused(self) -> None:
        track = _make_track()
        assert self._snapshot(current_track=track, is_playing=True).status == PlaybackStatus.PLAYING
        assert self._snapshot(current_track=track).status == PlaybackStatus.PAUSED

    def test_position(self) -> None:
        """Test position converts progress to seconds."""
        snapshot = self._snapshot(current_track=_make_track(duration=200.0), progress=0.25)
        assert snapshot.position == pytest.approx(50.0)

    def test_position_without_track(self) -> None:
        assert self._snapshot(progress=0.5).position == 0.0

    def test_to_dict(self) -> None:
        """Test conversion to dictionary."""
        track = _make_track("a")
        queue = QueueContext((track, _make_track("b")))
        snapshot = self._snapshot(
            current_track=track,
            is_playing=True,
            progress=0.5,
            play_history=(track,),
            current_playlist=queue,
        )

        result = snapshot.to_dict()

        assert result["status"] == "playing"
        assert result["currentTrack"]["id"] == "a"
        assert result["isPlaying"] is True
        assert result["position"] == pytest.approx(100.0)
        assert result["historyLength"] == 1
        assert result["currentIndex"] == 0
        assert result["queueLength"] == 2

    def test_to_dict_empty(self) -> None:
        result = self._snapshot().to_dict()
        assert result["status"] == "stopped"
        assert result["currentTrack"] is None
        assert result["currentIndex"] is None
        assert result["queueLength"] == 0
