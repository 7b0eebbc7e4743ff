"""Tests for shuffle index selection."""

from tunebox.playback.shuffle import RandomIndexPicker


class TestRandomIndexPicker:
    """Tests for RandomIndexPicker."""

    def test_single_track_has_no_alternative(self) -> None:
        picker = RandomIndexPicker(seed=1)
        assert picker(1, 0) is None
        assert picker(0, 0) is None

    def test_two_tracks_always_other(self) -> None:
        """Test a 2-track queue always yields the other index."""
        picker = RandomIndexPicker()
        for _ in range(50):
            assert picker(2, 0) == 1
            assert picker(2, 1) == 0

    def test_never_current(self) -> None:
        picker = RandomIndexPicker(seed=123)
        for current in range(5):
            for _ in range(100):
                index = picker(5, current)
                assert index is not None
                assert index != current
                assert 0 <= index < 5

    def test_covers_all_other_indexes(self) -> None:
        picker = RandomIndexPicker(seed=7)
        seen = {picker(4, 2) for _ in range(200)}
        assert seen == {0, 1, 3}

    def test_seed_is_deterministic(self) -> None:
        first = RandomIndexPicker(seed=99)
        second = RandomIndexPicker(seed=99)
        assert [first(10, 0) for _ in range(20)] == [second(10, 0) for _ in range(20)]
