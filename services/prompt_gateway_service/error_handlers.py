"""Prompt Gateway Service error handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Tuple

from quart import Response, jsonify
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from services.prompt_gateway_service.error_handling import GatewayError, create_error_response
from services.prompt_gateway_service.logging_utils import create_service_logger

if TYPE_CHECKING:
    from quart import Quart

logger = create_service_logger("prompt_gateway_service.error_handlers")


def register_error_handlers(app: Quart, max_upload_bytes: int) -> None:
    """Register structured error handlers.

    ``GatewayError`` escaping a route becomes the service's error body with the status
    derived from its error code. Unexpected exceptions become a generic 500 without
    leaking exception text to the client.

    Args:
        app: The Quart application instance
        max_upload_bytes: Upload size limit quoted when a request body is too large
    """
    too_large_message = (
        f"File too large. Maximum size is {max_upload_bytes // (1024 * 1024)}MB."
    )

    @app.errorhandler(GatewayError)
    async def handle_gateway_error(error: GatewayError) -> Tuple[Response, int]:
        provider = str(error.error_detail.details.get("provider", "unknown"))
        logger.error(
            f"GatewayError: {error.error_detail.message}",
            correlation_id=str(error.error_detail.correlation_id),
            error_code=error.error_detail.error_code.value,
            operation=error.error_detail.operation,
            provider=provider,
        )

        body, status_code = create_error_response(error.error_detail)
        return jsonify(body), status_code

    @app.errorhandler(RequestEntityTooLarge)
    async def handle_request_too_large(error: RequestEntityTooLarge) -> Tuple[Response, int]:
        return jsonify({"success": False, "error": too_large_message}), 400

    @app.errorhandler(HTTPException)
    async def handle_http_exception(error: HTTPException) -> Tuple[Response, int]:
        status_code = error.code or 500
        return jsonify({"success": False, "error": error.description}), status_code

    @app.errorhandler(Exception)
    async def handle_unexpected_error(error: Exception) -> Tuple[Response, int]:
        logger.error(f"Unhandled exception: {error}", exc_info=True)
        return jsonify({"success": False, "error": "Internal server error"}), 500
