"""Tests for tracing helpers."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from cluster_secret_operator import tracing


class TestTraceSpan:
    """Test span creation."""

    def test_noop_without_tracer(self):
        """Test that spans are skipped until tracing is initialized."""
        with patch.object(tracing, "_tracer", None):
            with tracing.trace_span("reconcile") as span:
                assert span is None

    def test_span_attributes(self):
        """Test that the resource kind is added to the attributes."""
        tracer = MagicMock()
        with patch.object(tracing, "_tracer", tracer):
            with tracing.trace_span("reconcile", kind="ClusterExternalSecret", attributes={"name": "p"}):
                pass

        tracer.start_as_current_span.assert_called_once_with(
            "reconcile", attributes={"name": "p", "resource.kind": "ClusterExternalSecret"}
        )


class TestInitializeTracing:
    """Test tracing setup."""

    def test_disabled_by_default(self, monkeypatch):
        """Test that nothing is configured unless enabled."""
        monkeypatch.delenv("OTEL_TRACES_ENABLED", raising=False)
        with patch.object(tracing, "_tracer", None), \
                patch.object(tracing.trace, "set_tracer_provider") as set_provider:
            tracing.initialize_tracing()
            assert tracing.get_tracer() is None

        set_provider.assert_not_called()
