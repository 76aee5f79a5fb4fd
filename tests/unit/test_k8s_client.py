"""Tests for the Kubernetes client wrapper."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from cluster_secret_operator.constants import FIELD_MANAGER, PARTIAL_OBJECT_METADATA_ACCEPT
from cluster_secret_operator.services.k8s import client as client_module
from cluster_secret_operator.services.k8s.client import ClusterClient, build_cluster_client
from cluster_secret_operator.utils.namespaces import Namespace


@pytest.fixture
def custom_api() -> MagicMock:
    return MagicMock()


@pytest.fixture
def core_api() -> MagicMock:
    return MagicMock()


class TestClusterClient:
    """Test API call shapes."""

    def test_get_parent(self, custom_api, core_api):
        """Test fetching a ClusterExternalSecret."""
        ClusterClient(custom_api, core_api).get_parent("p")

        custom_api.get_cluster_custom_object.assert_called_once_with(
            group="external-secrets.io",
            version="v1beta1",
            plural="clusterexternalsecrets",
            name="p",
        )

    def test_request_timeout_forwarded(self, custom_api, core_api):
        """Test that the request timeout reaches the API call."""
        ClusterClient(custom_api, core_api, request_timeout=5).get_parent("p")

        assert custom_api.get_cluster_custom_object.call_args[1]["_request_timeout"] == 5

    def test_list_parents_with_continue(self, custom_api, core_api):
        """Test paging parameters."""
        ClusterClient(custom_api, core_api).list_parents(limit=100, continue_token="tok")

        kwargs = custom_api.list_cluster_custom_object.call_args[1]
        assert kwargs["limit"] == 100
        assert kwargs["_continue"] == "tok"

    def test_list_parents_first_page(self, custom_api, core_api):
        """Test that no continue token is sent for the first page."""
        ClusterClient(custom_api, core_api).list_parents(limit=100)

        assert "_continue" not in custom_api.list_cluster_custom_object.call_args[1]

    def test_patch_parent_status(self, custom_api, core_api):
        """Test that the patch is wrapped under status."""
        ClusterClient(custom_api, core_api).patch_parent_status("p", {"provisionedNamespaces": ["a"]})

        kwargs = custom_api.patch_cluster_custom_object_status.call_args[1]
        assert kwargs["name"] == "p"
        assert kwargs["body"] == {"status": {"provisionedNamespaces": ["a"]}}
        assert kwargs["field_manager"] == "cluster-external-secret-operator"

    def test_list_namespaces(self, custom_api, core_api):
        """Test selector forwarding and result conversion."""
        core_api.list_namespace.return_value = SimpleNamespace(items=[
            SimpleNamespace(metadata=SimpleNamespace(name="a", labels={"env": "prod"})),
            SimpleNamespace(metadata=SimpleNamespace(name="b", labels=None)),
        ])

        result = ClusterClient(custom_api, core_api).list_namespaces("env=prod")

        core_api.list_namespace.assert_called_once_with(label_selector="env=prod")
        assert result == [Namespace("a", {"env": "prod"}), Namespace("b", {})]

    def test_list_namespaces_without_selector(self, custom_api, core_api):
        """Test that an empty selector lists everything."""
        core_api.list_namespace.return_value = SimpleNamespace(items=[])

        ClusterClient(custom_api, core_api).list_namespaces("")

        core_api.list_namespace.assert_called_once_with()

    def test_get_child_metadata(self, custom_api, core_api):
        """Test the metadata-only read."""
        custom_api.api_client.call_api.return_value = {"metadata": {"name": "es", "ownerReferences": []}}

        meta = ClusterClient(custom_api, core_api).get_child_metadata("a", "es")

        assert meta == {"name": "es", "ownerReferences": []}
        kwargs = custom_api.api_client.call_api.call_args[1]
        assert kwargs["header_params"] == {"Accept": PARTIAL_OBJECT_METADATA_ACCEPT}
        assert kwargs["path_params"]["namespace"] == "a"
        assert kwargs["path_params"]["plural"] == "externalsecrets"

    def test_child_writes(self, custom_api, core_api):
        """Test create, replace and delete targets."""
        cluster = ClusterClient(custom_api, core_api)

        cluster.create_child("a", {"metadata": {"name": "es"}})
        cluster.replace_child("a", "es", {"metadata": {"name": "es"}})
        cluster.delete_child("a", "es")

        assert custom_api.create_namespaced_custom_object.call_args[1]["namespace"] == "a"
        assert custom_api.replace_namespaced_custom_object.call_args[1]["name"] == "es"
        assert custom_api.delete_namespaced_custom_object.call_args[1]["plural"] == "externalsecrets"

    def test_child_writes_use_field_manager(self, custom_api, core_api):
        """Test that writes identify the operator as field manager."""
        cluster = ClusterClient(custom_api, core_api)

        cluster.create_child("a", {"metadata": {"name": "es"}})
        cluster.replace_child("a", "es", {"metadata": {"name": "es"}})

        assert custom_api.create_namespaced_custom_object.call_args[1]["field_manager"] == FIELD_MANAGER
        assert custom_api.replace_namespaced_custom_object.call_args[1]["field_manager"] == FIELD_MANAGER


class TestBuildClusterClient:
    """Test configuration loading."""

    def test_falls_back_to_kubeconfig(self):
        """Test that kubeconfig is used outside a cluster."""
        with patch.object(client_module.config, "load_incluster_config",
                          side_effect=client_module.config.ConfigException("no")), \
                patch.object(client_module.config, "load_kube_config") as load_kube, \
                patch.object(client_module.client, "CustomObjectsApi"), \
                patch.object(client_module.client, "CoreV1Api"):
            cluster = build_cluster_client(request_timeout=10)

        load_kube.assert_called_once()
        assert cluster.request_timeout == 10
