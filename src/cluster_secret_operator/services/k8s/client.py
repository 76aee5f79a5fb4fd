"""Kubernetes API access for ClusterExternalSecrets, ExternalSecrets and namespaces."""

from __future__ import annotations

import logging
from typing import Any

from kubernetes import client, config

from ...constants import (
    API_GROUP,
    API_VERSION,
    FIELD_MANAGER,
    PARTIAL_OBJECT_METADATA_ACCEPT,
    PLURAL_CLUSTER_EXTERNAL_SECRETS,
    PLURAL_EXTERNAL_SECRETS,
)
from ...utils.namespaces import Namespace

logger = logging.getLogger(__name__)


class ClusterClient:
    """Thin wrapper over the generated Kubernetes clients.

    Every call may raise ``kubernetes.client.exceptions.ApiException``;
    callers decide what a failure means for their cycle.
    """

    def __init__(
        self,
        custom_api: client.CustomObjectsApi,
        core_api: client.CoreV1Api,
        request_timeout: float | None = None,
    ):
        self.custom_api = custom_api
        self.core_api = core_api
        self.request_timeout = request_timeout

    def _timeout_kwargs(self) -> dict[str, Any]:
        if self.request_timeout is None:
            return {}
        return {"_request_timeout": self.request_timeout}

    # ClusterExternalSecret

    def get_parent(self, name: str) -> dict[str, Any]:
        return self.custom_api.get_cluster_custom_object(
            group=API_GROUP,
            version=API_VERSION,
            plural=PLURAL_CLUSTER_EXTERNAL_SECRETS,
            name=name,
            **self._timeout_kwargs(),
        )

    def list_parents(self, limit: int, continue_token: str | None = None) -> dict[str, Any]:
        """List one page of ClusterExternalSecrets."""
        kwargs: dict[str, Any] = {"limit": limit}
        if continue_token:
            kwargs["_continue"] = continue_token
        return self.custom_api.list_cluster_custom_object(
            group=API_GROUP,
            version=API_VERSION,
            plural=PLURAL_CLUSTER_EXTERNAL_SECRETS,
            **kwargs,
            **self._timeout_kwargs(),
        )

    def patch_parent_status(self, name: str, status_patch: dict[str, Any]) -> dict[str, Any]:
        """Merge-patch the status subresource."""
        return self.custom_api.patch_cluster_custom_object_status(
            group=API_GROUP,
            version=API_VERSION,
            plural=PLURAL_CLUSTER_EXTERNAL_SECRETS,
            name=name,
            body={"status": status_patch},
            field_manager=FIELD_MANAGER,
            **self._timeout_kwargs(),
        )

    # Namespaces

    def list_namespaces(self, label_selector: str = "") -> list[Namespace]:
        kwargs: dict[str, Any] = {}
        if label_selector:
            kwargs["label_selector"] = label_selector
        result = self.core_api.list_namespace(**kwargs, **self._timeout_kwargs())
        return [
            Namespace(name=item.metadata.name, labels=dict(item.metadata.labels or {}))
            for item in result.items
        ]

    # ExternalSecret

    def get_child_metadata(self, namespace: str, name: str) -> dict[str, Any]:
        """Fetch only the metadata of an ExternalSecret.

        Asks the API server for a ``PartialObjectMetadata`` rendering so the
        spec is never transferred.
        """
        response = self.custom_api.api_client.call_api(
            "/apis/{group}/{version}/namespaces/{namespace}/{plural}/{name}",
            "GET",
            path_params={
                "group": API_GROUP,
                "version": API_VERSION,
                "namespace": namespace,
                "plural": PLURAL_EXTERNAL_SECRETS,
                "name": name,
            },
            header_params={"Accept": PARTIAL_OBJECT_METADATA_ACCEPT},
            response_type="object",
            auth_settings=["BearerToken"],
            _return_http_data_only=True,
            **self._timeout_kwargs(),
        )
        return (response or {}).get("metadata", {})

    def get_child(self, namespace: str, name: str) -> dict[str, Any]:
        return self.custom_api.get_namespaced_custom_object(
            group=API_GROUP,
            version=API_VERSION,
            namespace=namespace,
            plural=PLURAL_EXTERNAL_SECRETS,
            name=name,
            **self._timeout_kwargs(),
        )

    def create_child(self, namespace: str, body: dict[str, Any]) -> dict[str, Any]:
        return self.custom_api.create_namespaced_custom_object(
            group=API_GROUP,
            version=API_VERSION,
            namespace=namespace,
            plural=PLURAL_EXTERNAL_SECRETS,
            body=body,
            field_manager=FIELD_MANAGER,
            **self._timeout_kwargs(),
        )

    def replace_child(self, namespace: str, name: str, body: dict[str, Any]) -> dict[str, Any]:
        return self.custom_api.replace_namespaced_custom_object(
            group=API_GROUP,
            version=API_VERSION,
            namespace=namespace,
            plural=PLURAL_EXTERNAL_SECRETS,
            name=name,
            body=body,
            field_manager=FIELD_MANAGER,
            **self._timeout_kwargs(),
        )

    def delete_child(self, namespace: str, name: str) -> None:
        self.custom_api.delete_namespaced_custom_object(
            group=API_GROUP,
            version=API_VERSION,
            namespace=namespace,
            plural=PLURAL_EXTERNAL_SECRETS,
            name=name,
            **self._timeout_kwargs(),
        )


def build_cluster_client(request_timeout: float | None = None) -> ClusterClient:
    """Load kube configuration and return a ClusterClient.

    In-cluster configuration is tried first, then the local kubeconfig.
    """
    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        config.load_kube_config()
        logger.info("Loaded local kubeconfig")

    return ClusterClient(client.CustomObjectsApi(), client.CoreV1Api(), request_timeout)
