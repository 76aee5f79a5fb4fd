"""Tests for base handler functionality."""

from __future__ import annotations

import json
import logging
from unittest.mock import Mock

import pytest
from kubernetes.client.exceptions import ApiException

from cluster_secret_operator.handlers.base import BaseHandler
from cluster_secret_operator.utils.context import with_correlation_id


@pytest.fixture
def base_handler() -> BaseHandler:
    return BaseHandler(kind="ClusterExternalSecret", metrics=Mock())


def last_record(caplog: pytest.LogCaptureFixture) -> dict:
    return json.loads(caplog.records[-1].getMessage())


class TestBaseHandler:
    """Test cases for BaseHandler class."""

    def test_init(self, base_handler):
        """Test handler initialization."""
        assert base_handler.kind == "ClusterExternalSecret"
        assert base_handler.logger is not None

    def test_resource_context_cluster_scoped(self, base_handler):
        """Test that a missing namespace becomes an empty string."""
        ctx = base_handler._get_resource_context({"name": "p", "uid": "u1"})
        assert ctx == {"name": "p", "namespace": "", "uid": "u1"}

    def test_log_info_is_structured(self, base_handler, caplog):
        """Test that info logs are JSON with resource fields."""
        with caplog.at_level(logging.INFO):
            base_handler.log_info({"name": "p", "uid": "u1"}, "ExternalSecret created", target_namespace="a")

        record = last_record(caplog)
        assert record["resource"] == "ClusterExternalSecret"
        assert record["name"] == "p"
        assert record["message"] == "ExternalSecret created"
        assert record["target_namespace"] == "a"
        assert record["controller"] == "cluster-external-secret-operator"

    def test_log_warning_level(self, base_handler, caplog):
        """Test warning logs."""
        with caplog.at_level(logging.WARNING):
            base_handler.log_warning({"name": "p"}, "careful")

        assert caplog.records[-1].levelno == logging.WARNING
        assert last_record(caplog)["event"] == "warning"

    def test_log_error_sanitizes_error(self, base_handler, caplog):
        """Test that error details are sanitized."""
        with caplog.at_level(logging.ERROR):
            base_handler.log_error({"name": "p"}, "failed", error=ApiException(status=500, reason="Internal Error"))

        record = last_record(caplog)
        assert record["error"] == "(500) Internal Error"
        assert record["error_type"] == "ApiException"

    def test_log_includes_correlation_id(self, base_handler, caplog):
        """Test that the cycle's correlation ID is attached."""
        with caplog.at_level(logging.INFO), with_correlation_id("abc123"):
            base_handler.log_info({"name": "p"}, "hello")

        assert last_record(caplog)["correlation_id"] == "abc123"

    def test_timed_cycle_records_on_error(self, base_handler):
        """Test that durations are recorded even when the cycle raises."""
        with pytest.raises(RuntimeError):
            with base_handler.timed_cycle("p", ""):
                raise RuntimeError("boom")

        base_handler.metrics.observe_cycle.assert_called_once()
        name, namespace, duration = base_handler.metrics.observe_cycle.call_args[0]
        assert (name, namespace) == ("p", "")
        assert duration >= 0
