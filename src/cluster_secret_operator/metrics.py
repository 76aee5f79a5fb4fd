"""Prometheus metrics for the ClusterExternalSecret Operator."""

from __future__ import annotations

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge


class ControllerMetrics:
    """Metrics sink handed to the reconciler.

    Tests pass a private ``CollectorRegistry`` so instances never collide on
    the process-wide default registry.
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        self.reconcile_duration = Gauge(
            "cluster_external_secret_reconcile_duration",
            "Duration in seconds of the last ClusterExternalSecret reconcile cycle",
            ["name", "namespace"],
            registry=registry,
        )
        self.reconcile_total = Counter(
            "cluster_external_secret_reconcile_total",
            "Total number of ClusterExternalSecret reconcile cycles",
            ["result"],
            registry=registry,
        )
        self.namespace_operations_total = Counter(
            "cluster_external_secret_namespace_operations_total",
            "Total number of per-namespace ExternalSecret operations",
            ["operation", "result"],
            registry=registry,
        )
        self.provisioned_namespaces = Gauge(
            "cluster_external_secret_provisioned_namespaces",
            "Number of namespaces provisioned by the last cycle",
            ["name"],
            registry=registry,
        )

    def observe_cycle(self, name: str, namespace: str, duration: float) -> None:
        self.reconcile_duration.labels(name=name, namespace=namespace).set(duration)

    def record_result(self, result: str) -> None:
        self.reconcile_total.labels(result=result).inc()

    def record_namespace_operation(self, operation: str, ok: bool) -> None:
        self.namespace_operations_total.labels(
            operation=operation, result="success" if ok else "error"
        ).inc()

    def set_provisioned(self, name: str, count: int) -> None:
        self.provisioned_namespaces.labels(name=name).set(count)

    def forget_parent(self, name: str, namespace: str = "") -> None:
        """Drop the per-parent series once its reconcile loop ends."""
        for gauge, labelvalues in (
            (self.reconcile_duration, (name, namespace)),
            (self.provisioned_namespaces, (name,)),
        ):
            try:
                gauge.remove(*labelvalues)
            except KeyError:
                # No cycle got far enough to create the series
                pass
