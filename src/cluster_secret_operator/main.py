"""Main entry point for the ClusterExternalSecret Operator."""

from __future__ import annotations

import os
import threading
from typing import Any

import kopf
from werkzeug.serving import make_server

from . import handlers  # noqa: F401
from . import health
from . import logging as structured_logging
from . import tracing
from .handlers.cluster_external_secret import ClusterExternalSecretHandler
from .handlers.shared import configure_handlers, is_configured
from .metrics import ControllerMetrics
from .services.k8s.client import build_cluster_client

METRICS = ControllerMetrics()


def start_metrics_server(port: int) -> None:
    """Serve /metrics, /healthz and /readyz from a background thread."""
    combined_app = health.create_combined_wsgi_app(is_ready=is_configured)
    server = make_server("", port, combined_app, threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    structured_logging.setup_structured_logging()
    tracing.initialize_tracing()

    # Use annotations so kopf bookkeeping never collides with our status patches
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = 0
    request_timeout = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))
    settings.networking.request_timeout = request_timeout
    settings.execution.max_workers = int(os.getenv("MAX_WORKERS", "4"))

    cluster = build_cluster_client(request_timeout=request_timeout)
    handler = ClusterExternalSecretHandler(
        cluster,
        METRICS,
        default_interval=float(os.getenv("REQUEUE_INTERVAL_SECONDS", "3600")),
    )
    configure_handlers(cluster, handler)

    start_metrics_server(int(os.getenv("METRICS_PORT", "8080")))


def main() -> None:
    """Run the operator cluster-wide."""
    kopf.run(clusterwide=True)


if __name__ == "__main__":
    main()
