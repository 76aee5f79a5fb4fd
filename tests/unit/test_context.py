"""Tests for correlation ID propagation."""

from __future__ import annotations

from cluster_secret_operator.utils.context import get_context_dict, get_correlation_id, with_correlation_id


class TestCorrelationId:
    """Test the correlation ID context."""

    def test_generated_when_omitted(self):
        """Test that a random ID is set for the block."""
        with with_correlation_id() as corr_id:
            assert corr_id
            assert get_correlation_id() == corr_id

        assert get_correlation_id() is None

    def test_nested_blocks_restore(self):
        """Test that leaving a block restores the outer ID."""
        with with_correlation_id("outer"):
            with with_correlation_id("inner"):
                assert get_correlation_id() == "inner"
            assert get_correlation_id() == "outer"

    def test_context_dict(self):
        """Test merging extra fields."""
        assert get_context_dict({"a": 1}) == {"a": 1}
        with with_correlation_id("abc"):
            assert get_context_dict({"a": 1}) == {"correlation_id": "abc", "a": 1}
