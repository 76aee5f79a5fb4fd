"""Shared fixtures for unit tests."""

from __future__ import annotations

from unittest.mock import Mock

import pytest
from prometheus_client import CollectorRegistry

from cluster_secret_operator.handlers.cluster_external_secret import ClusterExternalSecretHandler
from cluster_secret_operator.metrics import ControllerMetrics
from fakes import FakeCluster


@pytest.fixture
def cluster() -> FakeCluster:
    fake = FakeCluster()
    fake.namespaces = {
        "a": {"env": "prod"},
        "b": {"env": "prod"},
        "dev": {"env": "dev"},
    }
    return fake


@pytest.fixture
def controller_metrics() -> ControllerMetrics:
    return ControllerMetrics(CollectorRegistry())


@pytest.fixture
def emit() -> Mock:
    return Mock()


@pytest.fixture
def handler(cluster: FakeCluster, controller_metrics: ControllerMetrics, emit: Mock) -> ClusterExternalSecretHandler:
    return ClusterExternalSecretHandler(cluster, controller_metrics, default_interval=3600.0, emit=emit)
