"""Handler for ClusterExternalSecret CRD."""

from __future__ import annotations

import asyncio
import copy
from contextlib import contextmanager
from typing import Any, Callable, Iterator, NamedTuple

import kopf

from ..builders.external_secret import external_secret_name
from ..constants import (
    API_GROUP,
    API_VERSION,
    ERR_CONVERT_LABEL_SELECTOR,
    ERR_DELETE_EXTERNAL_SECRET,
    ERR_GET_CES,
    ERR_NAMESPACES,
    ERR_PATCH_STATUS,
    ERR_REFRESH_INTERVAL,
    EVENT_REASON_NAMESPACE_FAILED,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RECONCILED,
    KIND_CLUSTER_EXTERNAL_SECRET,
    PLURAL_CLUSTER_EXTERNAL_SECRETS,
)
from ..metrics import ControllerMetrics
from ..services.k8s.client import ClusterClient
from ..services.synchronizer import ExternalSecretSynchronizer, NamespaceSyncError
from ..tracing import trace_span
from ..utils.conditions import aggregate_status
from ..utils.context import with_correlation_id
from ..utils.duration import parse_duration
from ..utils.errors import is_not_found, sanitize_exception
from ..utils.events import emit_event
from ..utils.namespaces import match_namespaces, removed_namespaces
from ..utils.patch import create_merge_patch
from ..utils.queue import ParentKey
from ..utils.selectors import LabelSelector, SelectorError
from .base import BaseHandler
from .shared import QUEUE, get_handler


class ReconcileResult(NamedTuple):
    """Outcome of a cycle. ``requeue_after`` is None when nothing should follow."""

    requeue_after: float | None


class ClusterExternalSecretHandler(BaseHandler):
    """Projects a ClusterExternalSecret's template into every matching namespace."""

    def __init__(
        self,
        cluster: ClusterClient,
        metrics: ControllerMetrics,
        default_interval: float,
        emit: Callable[..., None] = emit_event,
    ):
        """Initialize the handler.

        Args:
            cluster: Kubernetes API access
            metrics: Metrics sink
            default_interval: Requeue interval in seconds when the parent sets none
            emit: Event poster, called as ``emit(body, reason, message, type_=...)``
        """
        super().__init__(KIND_CLUSTER_EXTERNAL_SECRET, metrics)
        self.cluster = cluster
        self.synchronizer = ExternalSecretSynchronizer(cluster)
        self.default_interval = default_interval
        self.emit = emit

    def reconcile(self, name: str, namespace: str = "") -> ReconcileResult:
        """Run one cycle for the parent named *name*.

        Returns:
            When to run again

        Raises:
            kopf.TemporaryError: On a fatal cycle error; ``delay`` holds the
                requeue interval. Status has been patched already.
        """
        with self.timed_cycle(name, namespace), with_correlation_id():
            with trace_span("reconcile_cluster_external_secret", kind=self.kind, attributes={"name": name}):
                return self._reconcile(name, namespace)

    def _reconcile(self, name: str, namespace: str) -> ReconcileResult:
        meta: dict[str, Any] = {"name": name, "namespace": namespace}
        try:
            parent = self.cluster.get_parent(name)
        except Exception as e:
            if is_not_found(e):
                self.metrics.record_result("not_found")
                return ReconcileResult(None)
            # Left to the next external trigger
            self.log_error(meta, ERR_GET_CES, error=e, reason="GetFailed")
            self.metrics.record_result("error")
            return ReconcileResult(None)

        meta = parent.get("metadata", {})
        spec = parent.get("spec", {})

        with self.status_patch(parent) as status:
            interval = self.default_interval
            if spec.get("refreshInterval") is not None:
                try:
                    interval = parse_duration(spec["refreshInterval"])
                except ValueError as e:
                    raise self._fatal(parent, ERR_REFRESH_INTERVAL, e, interval) from e

            try:
                selector = LabelSelector.from_dict(spec.get("namespaceSelector"))
            except SelectorError as e:
                raise self._fatal(parent, ERR_CONVERT_LABEL_SELECTOR, e, interval) from e

            try:
                namespaces = self.cluster.list_namespaces(str(selector))
            except Exception as e:
                raise self._fatal(parent, ERR_NAMESPACES, e, interval) from e

            matched = [ns.name for ns in match_namespaces(selector, namespaces)]
            es_name = external_secret_name(parent)

            failed = self.remove_old_namespaces(parent, matched, es_name, status.get("provisionedNamespaces"))
            provisioned: list[str] = []

            for ns_name in matched:
                try:
                    action = self.synchronizer.upsert(parent, ns_name, es_name)
                except NamespaceSyncError as e:
                    self.log_error(meta, e.reason, error=e.__cause__, reason="NamespaceFailed", target_namespace=ns_name)
                    self.metrics.record_namespace_operation("upsert", ok=False)
                    failed[ns_name] = e.reason
                    continue
                self.metrics.record_namespace_operation("upsert", ok=True)
                self.log_info(meta, f"ExternalSecret {action}", event=action, reason="Synchronized", target_namespace=ns_name)
                provisioned.append(ns_name)

            aggregate_status(status, provisioned, failed, matched, meta.get("generation"))
            self.metrics.set_provisioned(meta.get("name", name), len(status["provisionedNamespaces"]))

            for ns_name, reason in sorted(failed.items()):
                self.emit(parent, EVENT_REASON_NAMESPACE_FAILED, f"{ns_name}: {reason}", type_="Warning")
            if failed:
                self.metrics.record_result("partial")
            else:
                self.metrics.record_result("success")
                self.emit(
                    parent,
                    EVENT_REASON_RECONCILED,
                    f"ExternalSecret synchronized to {len(provisioned)} namespace(s)",
                )

            # A zero or negative interval disables the timed requeue
            return ReconcileResult(interval if interval > 0 else None)

    def remove_old_namespaces(
        self,
        parent: dict[str, Any],
        matched: list[str],
        es_name: str,
        provisioned: list[str] | None,
    ) -> dict[str, str]:
        """Delete the ExternalSecret from namespaces that no longer match.

        Returns:
            Namespace name to failure reason for deletions that failed
        """
        meta = parent.get("metadata", {})
        failed: dict[str, str] = {}
        for ns_name in removed_namespaces(provisioned, matched):
            try:
                deleted = self.synchronizer.delete(parent, ns_name, es_name)
            except NamespaceSyncError as e:
                self.log_error(
                    meta, ERR_DELETE_EXTERNAL_SECRET, error=e.__cause__, reason="DeleteFailed", target_namespace=ns_name
                )
                self.metrics.record_namespace_operation("delete", ok=False)
                failed[ns_name] = e.reason
                continue
            self.metrics.record_namespace_operation("delete", ok=True)
            if deleted:
                self.log_info(meta, "ExternalSecret deleted", event="deleted", reason="NamespaceRemoved", target_namespace=ns_name)
        return failed

    def _fatal(
        self,
        parent: dict[str, Any],
        message: str,
        error: Exception,
        interval: float,
    ) -> kopf.TemporaryError:
        """Report a fatal cycle error and build the exception that aborts the cycle.

        The status patch still runs while the exception propagates. The retry
        delay is *interval*, or the default interval when *interval* is not
        positive.
        """
        self.log_error(parent.get("metadata", {}), message, error=error, reason="ReconcileFailed")
        self.metrics.record_result("error")
        self.emit(parent, EVENT_REASON_RECONCILE_FAILED, f"{message}: {sanitize_exception(error)}", type_="Warning")
        delay = interval if interval > 0 else self.default_interval
        return kopf.TemporaryError(f"{message}: {sanitize_exception(error)}", delay=delay)

    @contextmanager
    def status_patch(self, parent: dict[str, Any]) -> Iterator[dict[str, Any]]:
        """Yield a working copy of the parent's status and patch it on exit.

        The merge patch is computed against the status as fetched at cycle
        start and is sent exactly once, on normal and exceptional exit alike.
        A failed patch is logged only.
        """
        meta = parent.get("metadata", {})
        snapshot = copy.deepcopy(parent.get("status") or {})
        status = copy.deepcopy(snapshot)
        try:
            yield status
        finally:
            try:
                self.cluster.patch_parent_status(meta["name"], create_merge_patch(snapshot, status))
            except Exception as e:
                self.log_error(meta, ERR_PATCH_STATUS, error=e, reason="PatchFailed")


@kopf.on.update(API_GROUP, API_VERSION, PLURAL_CLUSTER_EXTERNAL_SECRETS)
async def handle_cluster_external_secret_change(name: str, **kwargs: Any) -> None:
    """Wake the reconcile loop after the parent's spec, labels or annotations changed."""
    QUEUE.enqueue(ParentKey(name))


@kopf.daemon(API_GROUP, API_VERSION, PLURAL_CLUSTER_EXTERNAL_SECRETS, cancellation_timeout=1.0)
async def run_cluster_external_secret(name: str, stopped: kopf.DaemonStopped, **kwargs: Any) -> None:
    """Reconcile loop for one ClusterExternalSecret.

    This is the only place cycles run, so each parent has at most one cycle in
    flight. Triggers that arrive during a cycle collapse into one more cycle.
    Cycles run in a worker thread; kopf cancels the wait once the parent is
    deleted, and the parent's metric series are dropped with it.
    """
    handler = get_handler()
    key = ParentKey(name)
    try:
        while not stopped:
            try:
                result = await asyncio.to_thread(handler.reconcile, key.name, key.namespace)
            except kopf.TemporaryError as e:
                delay = e.delay if e.delay and e.delay > 0 else handler.default_interval
            else:
                # None: wait for the next trigger only
                delay = result.requeue_after
            await QUEUE.wait(key, delay)
    finally:
        QUEUE.forget(key)
        handler.metrics.forget_parent(key.name, key.namespace)
