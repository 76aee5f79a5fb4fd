"""Health check and metrics endpoints for the operator."""

from __future__ import annotations

from typing import Any, Callable

from prometheus_client import REGISTRY, CollectorRegistry, make_wsgi_app
from werkzeug.wrappers import Response


def create_combined_wsgi_app(
    is_ready: Callable[[], bool] = lambda: True,
    registry: CollectorRegistry = REGISTRY,
) -> Any:
    """Create a WSGI app that combines metrics and health check endpoints.

    Args:
        is_ready: Callable reporting whether the operator finished startup
        registry: Prometheus registry served on every other path

    Returns:
        Combined WSGI application
    """
    metrics_app = make_wsgi_app(registry)

    def combined_app(environ: dict[str, Any], start_response: Any) -> Any:
        """WSGI app that routes /healthz and /readyz, delegates /metrics to prometheus."""
        path = environ.get("PATH_INFO", "")

        if path == "/healthz":
            response = Response('{"status":"ok"}', mimetype="application/json", status=200)
            return response(environ, start_response)
        if path == "/readyz":
            if is_ready():
                response = Response('{"status":"ready"}', mimetype="application/json", status=200)
            else:
                response = Response('{"status":"starting"}', mimetype="application/json", status=503)
            return response(environ, start_response)
        return metrics_app(environ, start_response)

    return combined_app
