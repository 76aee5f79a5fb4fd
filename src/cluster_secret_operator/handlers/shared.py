"""Shared state for handlers: the reconcile queue and the configured reconciler."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..services.k8s.client import ClusterClient
from ..utils.queue import ReconcileQueue

if TYPE_CHECKING:
    from .cluster_external_secret import ClusterExternalSecretHandler

QUEUE = ReconcileQueue()

_cluster_client: ClusterClient | None = None
_handler: ClusterExternalSecretHandler | None = None


def configure_handlers(cluster: ClusterClient, handler: ClusterExternalSecretHandler) -> None:
    """Install the client and reconciler built at operator startup."""
    global _cluster_client, _handler
    _cluster_client = cluster
    _handler = handler


def get_cluster_client() -> ClusterClient:
    """Return the ClusterClient installed at startup.

    Raises:
        RuntimeError: If the operator has not been configured yet
    """
    if _cluster_client is None:
        raise RuntimeError("handlers are not configured; the startup handler has not run")
    return _cluster_client


def get_handler() -> ClusterExternalSecretHandler:
    """Return the reconciler installed at startup.

    Raises:
        RuntimeError: If the operator has not been configured yet
    """
    if _handler is None:
        raise RuntimeError("handlers are not configured; the startup handler has not run")
    return _handler


def is_configured() -> bool:
    return _handler is not None
