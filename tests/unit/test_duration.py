"""Unit tests for duration parsing."""

from __future__ import annotations

import pytest

from cluster_secret_operator.utils.duration import parse_duration


class TestParseDuration:
    """Test Go-style duration strings."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("1h", 3600.0),
            ("15m", 900.0),
            ("1h30m", 5400.0),
            ("90s", 90.0),
            ("1.5h", 5400.0),
            ("500ms", 0.5),
            ("0", 0.0),
            ("0s", 0.0),
            ("-2m", -120.0),
        ],
    )
    def test_valid(self, value: str, expected: float) -> None:
        """Test accepted durations."""
        assert parse_duration(value) == pytest.approx(expected)

    def test_numbers_are_seconds(self) -> None:
        """Test that plain numbers pass through as seconds."""
        assert parse_duration(30) == 30.0
        assert parse_duration(2.5) == 2.5

    @pytest.mark.parametrize("value", ["", "1", "1d", "h", "1h 30m", "abc", "-"])
    def test_invalid(self, value: str) -> None:
        """Test rejected durations."""
        with pytest.raises(ValueError):
            parse_duration(value)

    def test_bool_rejected(self) -> None:
        """Test that booleans are not taken as numbers."""
        with pytest.raises(ValueError):
            parse_duration(True)
