"""Metrics API endpoint for Prometheus scraping."""

from typing import Any

from flask import Blueprint, Response, current_app, request

from registry_exporter.config import METRICS_PATH
from registry_exporter.services.metrics_registry import MetricsRegistry

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

metrics_bp = Blueprint("metrics", __name__, url_prefix=METRICS_PATH)


def _get_metrics_registry() -> MetricsRegistry:
    """Get the metrics registry from the container."""
    return current_app.container.metrics_registry()  # type: ignore[attr-defined, no-any-return]


@metrics_bp.route("", methods=["GET"])
def get_metrics() -> Any:
    """Return metrics in Prometheus text format.

    Repeated ``name[]`` query parameters restrict the output to those sample
    names; names that match nothing produce an empty body.

    Returns:
        Response with metrics data in Prometheus exposition format
    """
    names = request.args.getlist("name[]") or None
    metrics_text = _get_metrics_registry().generate_text(names)

    return Response(metrics_text, content_type=CONTENT_TYPE)
