"""Request middleware: correlation IDs and Prometheus HTTP metrics."""

from __future__ import annotations

from uuid import UUID, uuid4

from quart import Quart, Response, g, request

from services.prompt_gateway_service.logging_utils import (
    bind_request_context,
    create_service_logger,
)
from services.prompt_gateway_service.metrics import get_metrics

logger = create_service_logger("prompt_gateway_service.middleware")

CORRELATION_ID_HEADER = "X-Correlation-ID"


def parse_correlation_id(raw_value: str | None) -> UUID:
    """Return the client-supplied correlation ID, or a fresh one when absent or invalid."""
    if raw_value:
        try:
            return UUID(raw_value)
        except ValueError:
            logger.debug(f"Ignoring malformed correlation ID header: {raw_value!r}")
    return uuid4()


def setup_request_middleware(app: Quart) -> None:
    """Bind a correlation ID per request and record request metrics.

    The correlation ID is stored on ``g.correlation_id``, bound into the structlog
    context and echoed back in the ``X-Correlation-ID`` response header.
    """

    @app.before_request
    async def before_request() -> None:
        g.correlation_id = parse_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        bind_request_context(g.correlation_id)

    @app.after_request
    async def after_request(response: Response) -> Response:
        correlation_id = getattr(g, "correlation_id", None)
        if correlation_id is not None:
            response.headers[CORRELATION_ID_HEADER] = str(correlation_id)

        get_metrics()["http_requests_total"].labels(
            method=request.method,
            endpoint=request.url_rule.rule if request.url_rule else "unmatched",
            status_code=str(response.status_code),
        ).inc()
        return response


def current_correlation_id() -> UUID:
    """Correlation ID of the current request, created on first use if middleware is absent."""
    correlation_id = getattr(g, "correlation_id", None)
    if correlation_id is None:
        correlation_id = uuid4()
        g.correlation_id = correlation_id
    return correlation_id
