"""
Test assertions for Track values.

Expressive asserts with failure messages that show where the track ended up:

    from railtrack import TrackAssertions

    def test_price_order():
        track = price_order(order)
        TrackAssertions.assert_ok_value(track, 42)

    def test_rejects_empty_order():
        track = price_order(empty)
        TrackAssertions.assert_error(track)
        TrackAssertions.assert_skipped(track, "priced")
"""

from __future__ import annotations

from typing import Any

from railtrack.track import Track


class TrackAssertions:
    """Expressive test assertions for Track values."""

    @staticmethod
    def assert_ok(track: Track, message: str = "") -> Any:
        """
        Assert the Track is on the OK track and return its value.

            value = TrackAssertions.assert_ok(track)
        """
        context = f": {message}" if message else ""
        assert track.is_ok(), f"Expected Ok but got Error({track.value!r}){context}"
        return track.value

    @staticmethod
    def assert_error(track: Track, message: str = "") -> Any:
        """Assert the Track is on the ERROR track and return its error value."""
        context = f": {message}" if message else ""
        assert track.is_error(), f"Expected Error but got Ok({track.value!r}){context}"
        return track.value

    @staticmethod
    def assert_ok_value(track: Track, expected_value: Any) -> None:
        value = TrackAssertions.assert_ok(track)
        assert value == expected_value, f"Expected ok value {expected_value!r} but got {value!r}"

    @staticmethod
    def assert_error_value(track: Track, expected_value: Any) -> None:
        value = TrackAssertions.assert_error(track)
        assert value == expected_value, f"Expected error value {expected_value!r} but got {value!r}"

    @staticmethod
    def assert_history_length(track: Track, expected_length: int) -> None:
        actual = len(track.history)
        assert actual == expected_length, (
            f"Expected {expected_length} history entries but got {actual}"
        )

    @staticmethod
    def assert_skipped(track: Track, name: str) -> None:
        """Assert the latest history entry named `name` is a skipped placeholder."""
        for result in reversed(track.history):
            if result.name == name:
                assert result.skip, f"Expected step {name!r} to be skipped but it ran: {result!r}"
                return
        raise AssertionError(f"No history entry named {name!r}")
