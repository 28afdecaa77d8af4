"""Shared metrics module for the Prompt Gateway Service."""

from __future__ import annotations

from typing import Any

from prometheus_client import REGISTRY, Counter, Histogram

from services.prompt_gateway_service.logging_utils import create_service_logger

logger = create_service_logger("prompt_gateway_service.metrics")

_metrics: dict[str, Any] | None = None


def get_metrics() -> dict[str, Any]:
    """Get or create shared metrics instances (Singleton Pattern)."""
    global _metrics
    if _metrics is None:
        logger.info("Initializing shared Prompt Gateway Service metrics registry.")
        _metrics = _create_metrics()
    return _metrics


def _create_metrics() -> dict[str, Any]:
    """Create all Prometheus metrics for the Prompt Gateway Service."""
    try:
        return {
            "http_requests_total": Counter(
                "prompt_gateway_http_requests_total",
                "Total HTTP requests to Prompt Gateway Service",
                ["method", "endpoint", "status_code"],
                registry=REGISTRY,
            ),
            "gateway_requests_total": Counter(
                "prompt_gateway_requests_total",
                "Total processing requests by provider, action and outcome",
                ["provider", "action", "status"],
                registry=REGISTRY,
            ),
            "upstream_duration_seconds": Histogram(
                "prompt_gateway_upstream_duration_seconds",
                "Upstream LLM call duration in seconds",
                ["provider", "model"],
                buckets=(0.1, 0.5, 1, 2.5, 5, 10, 20, 30, 60),
                registry=REGISTRY,
            ),
            "upstream_failures_total": Counter(
                "prompt_gateway_upstream_failures_total",
                "Upstream LLM failures by provider and failure kind",
                ["provider", "failure_kind"],
                registry=REGISTRY,
            ),
            "normalization_fallbacks_total": Counter(
                "prompt_gateway_normalization_fallbacks_total",
                "Structured responses replaced by a fallback payload",
                ["shape"],
                registry=REGISTRY,
            ),
            "uploads_total": Counter(
                "prompt_gateway_uploads_total",
                "Document uploads by content type and outcome",
                ["content_type", "status"],
                registry=REGISTRY,
            ),
        }
    except ValueError as e:
        if "Duplicated timeseries" in str(e):
            logger.warning(
                f"Metrics already registered in collector registry: {e}. "
                "Reusing existing collectors."
            )
            return _get_existing_metrics()
        raise


def _get_existing_metrics() -> dict[str, Any]:
    """Look up already-registered collectors after a module reload."""
    names = {
        "http_requests_total": "prompt_gateway_http_requests",
        "gateway_requests_total": "prompt_gateway_requests",
        "upstream_duration_seconds": "prompt_gateway_upstream_duration_seconds",
        "upstream_failures_total": "prompt_gateway_upstream_failures",
        "normalization_fallbacks_total": "prompt_gateway_normalization_fallbacks",
        "uploads_total": "prompt_gateway_uploads",
    }
    collectors = REGISTRY._names_to_collectors  # noqa: SLF001
    return {key: collectors[name] for key, name in names.items()}
