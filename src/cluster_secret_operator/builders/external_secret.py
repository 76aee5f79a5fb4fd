"""Builder for ExternalSecret objects derived from a ClusterExternalSecret."""

from __future__ import annotations

import copy
from typing import Any

from ..constants import API_GROUP_VERSION, KIND_EXTERNAL_SECRET


def external_secret_name(parent: dict[str, Any]) -> str:
    """Return the ExternalSecret name: ``spec.externalSecretName`` or the parent's name."""
    return parent.get("spec", {}).get("externalSecretName") or parent["metadata"]["name"]


def create_external_secret_from_spec(
    parent: dict[str, Any],
    namespace: str,
    name: str,
) -> dict[str, Any]:
    """Create the desired ExternalSecret for one namespace.

    Args:
        parent: ClusterExternalSecret object
        namespace: Target namespace
        name: ExternalSecret name

    Returns:
        ExternalSecret body without owner references
    """
    spec = parent.get("spec", {})
    es_metadata = spec.get("externalSecretMetadata") or {}

    metadata: dict[str, Any] = {"name": name, "namespace": namespace}
    if es_metadata.get("labels"):
        metadata["labels"] = dict(es_metadata["labels"])
    if es_metadata.get("annotations"):
        metadata["annotations"] = dict(es_metadata["annotations"])

    return {
        "apiVersion": API_GROUP_VERSION,
        "kind": KIND_EXTERNAL_SECRET,
        "metadata": metadata,
        "spec": copy.deepcopy(spec.get("externalSecretSpec") or {}),
    }
