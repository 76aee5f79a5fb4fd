"""Per-namespace ExternalSecret synchronization."""

from __future__ import annotations

import copy
from typing import Any

from ..builders.external_secret import create_external_secret_from_spec
from ..constants import (
    ERR_CREATING_OR_UPDATING,
    ERR_FAILED_TO_DELETE,
    ERR_GET_EXISTING_ES,
    ERR_SECRET_ALREADY_EXISTS,
    ERR_SET_CTRL_REFERENCE,
    KIND_EXTERNAL_SECRET,
)
from ..tracing import trace_span
from ..utils.errors import is_not_found
from ..utils.ownership import AlreadyOwnedError, set_controller_reference
from .k8s.client import ClusterClient


class NamespaceSyncError(Exception):
    """A failure confined to one namespace.

    ``reason`` is the text recorded in ``status.failedNamespaces``; the
    underlying error, if any, is chained as ``__cause__``.
    """

    def __init__(self, namespace: str, reason: str):
        self.namespace = namespace
        self.reason = reason
        super().__init__(f"{namespace}: {reason}")


class ExternalSecretSynchronizer:
    """Creates, updates and deletes the ExternalSecret a parent owns in a namespace."""

    def __init__(self, cluster: ClusterClient):
        self.cluster = cluster

    def get_existing(self, namespace: str, name: str) -> dict[str, Any] | None:
        """Fetch the metadata of an existing ExternalSecret.

        Returns:
            Metadata dict, or None if there is no such ExternalSecret

        Raises:
            NamespaceSyncError: On any error other than not-found, or when the
                object exists without any owner reference
        """
        try:
            existing = self.cluster.get_child_metadata(namespace, name)
        except Exception as e:
            if is_not_found(e):
                return None
            raise NamespaceSyncError(namespace, ERR_GET_EXISTING_ES) from e

        # Nobody owns it, so it was not created by this controller
        if not existing.get("ownerReferences"):
            raise NamespaceSyncError(namespace, ERR_SECRET_ALREADY_EXISTS)
        return existing

    def _check_controller(self, parent: dict[str, Any], namespace: str, meta: dict[str, Any]) -> None:
        try:
            set_controller_reference(parent, copy.deepcopy(meta))
        except AlreadyOwnedError as e:
            raise NamespaceSyncError(namespace, ERR_SET_CTRL_REFERENCE) from e

    def resolve(
        self,
        parent: dict[str, Any],
        existing: dict[str, Any] | None,
        namespace: str,
        name: str,
    ) -> str:
        """Create or overwrite the ExternalSecret after the existence check.

        Args:
            parent: ClusterExternalSecret object
            existing: Metadata from ``get_existing`` (None if absent)
            namespace: Target namespace
            name: ExternalSecret name

        Returns:
            "created" or "updated"

        Raises:
            NamespaceSyncError: If ownership cannot be asserted or the write fails
        """
        if existing is not None:
            self._check_controller(parent, namespace, existing)

        desired = create_external_secret_from_spec(parent, namespace, name)
        try:
            set_controller_reference(parent, desired["metadata"])
        except AlreadyOwnedError as e:
            raise NamespaceSyncError(namespace, ERR_SET_CTRL_REFERENCE) from e

        try:
            return self._create_or_update(desired)
        except Exception as e:
            raise NamespaceSyncError(namespace, ERR_CREATING_OR_UPDATING) from e

    def _create_or_update(self, desired: dict[str, Any]) -> str:
        namespace = desired["metadata"]["namespace"]
        name = desired["metadata"]["name"]
        try:
            current = self.cluster.get_child(namespace, name)
        except Exception as e:
            if not is_not_found(e):
                raise
            self.cluster.create_child(namespace, desired)
            return "created"

        # Always overwrite so out-of-band edits converge back to the template
        current["spec"] = copy.deepcopy(desired["spec"])
        self.cluster.replace_child(namespace, name, current)
        return "updated"

    def upsert(self, parent: dict[str, Any], namespace: str, name: str) -> str:
        """Ensure the parent's ExternalSecret exists in *namespace* with the current template."""
        with trace_span("upsert_external_secret", kind=KIND_EXTERNAL_SECRET, attributes={"namespace": namespace}):
            existing = self.get_existing(namespace, name)
            return self.resolve(parent, existing, namespace, name)

    def delete(self, parent: dict[str, Any], namespace: str, name: str) -> bool:
        """Delete the parent's ExternalSecret from a namespace that stopped matching.

        Returns:
            True if an object was deleted, False if there was nothing to delete

        Raises:
            NamespaceSyncError: If the object is not ours or cannot be deleted
        """
        with trace_span("delete_external_secret", kind=KIND_EXTERNAL_SECRET, attributes={"namespace": namespace}):
            existing = self.get_existing(namespace, name)
            if existing is None:
                return False
            self._check_controller(parent, namespace, existing)

            try:
                self.cluster.delete_child(namespace, name)
            except Exception as e:
                if is_not_found(e):
                    return False
                raise NamespaceSyncError(namespace, ERR_FAILED_TO_DELETE) from e
            return True
