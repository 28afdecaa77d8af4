"""Structured error handling for the Prompt Gateway Service.

Every failure raised inside the service carries an ``ErrorDetail`` so that routes,
error handlers and the orchestrator can inspect error codes instead of parsing
exception text. Errors are created through the ``raise_*`` factory functions below.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, NoReturn
from uuid import UUID

from pydantic import BaseModel, Field

from services.prompt_gateway_service.error_types import (
    ERROR_CODE_STATUS,
    FAILURE_KIND_ERROR_CODES,
    ErrorCode,
    ProviderFailureKind,
)

SERVICE_NAME = "prompt_gateway_service"


class ErrorDetail(BaseModel):
    """Structured description of a single failure."""

    error_code: ErrorCode
    message: str
    correlation_id: UUID
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    service: str = SERVICE_NAME
    operation: str
    details: dict[str, Any] = Field(default_factory=dict)


class GatewayError(Exception):
    """Exception wrapping an ``ErrorDetail``."""

    def __init__(self, error_detail: ErrorDetail):
        self.error_detail = error_detail
        super().__init__(f"[{error_detail.error_code.value}] {error_detail.message}")

    @property
    def error_code(self) -> str:
        return self.error_detail.error_code.value

    @property
    def correlation_id(self) -> str:
        return str(self.error_detail.correlation_id)

    @property
    def operation(self) -> str:
        return self.error_detail.operation


class ProviderCallError(GatewayError):
    """Failure of an upstream LLM call, tagged with a closed failure kind."""

    @property
    def failure_kind(self) -> ProviderFailureKind:
        return ProviderFailureKind(
            self.error_detail.details.get("failure_kind", ProviderFailureKind.UNKNOWN.value)
        )

    @property
    def status_code(self) -> int | None:
        status = self.error_detail.details.get("status_code")
        return status if isinstance(status, int) else None

    @property
    def upstream_error(self) -> Any:
        return self.error_detail.details.get("upstream_error")

    @property
    def provider(self) -> str:
        return str(self.error_detail.details.get("provider", "unknown"))


def _build_detail(
    *,
    error_code: ErrorCode,
    message: str,
    operation: str,
    correlation_id: UUID,
    details: dict[str, Any] | None = None,
    **extra: Any,
) -> ErrorDetail:
    merged = dict(details or {})
    merged.update(extra)
    return ErrorDetail(
        error_code=error_code,
        message=message,
        operation=operation,
        correlation_id=correlation_id,
        details=merged,
    )


def raise_validation_error(
    *,
    operation: str,
    field: str,
    message: str,
    correlation_id: UUID,
    **details: Any,
) -> NoReturn:
    """Raise an error for a missing or malformed request field."""
    raise GatewayError(
        _build_detail(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=message,
            operation=operation,
            correlation_id=correlation_id,
            field=field,
            **details,
        )
    )


def raise_configuration_error(
    *,
    operation: str,
    config_keys: list[str],
    message: str,
    correlation_id: UUID,
    details: dict[str, Any] | None = None,
) -> NoReturn:
    """Raise an error for a missing credential or other operator-side setting."""
    raise GatewayError(
        _build_detail(
            error_code=ErrorCode.CONFIGURATION_ERROR,
            message=message,
            operation=operation,
            correlation_id=correlation_id,
            details=details,
            config_keys=config_keys,
        )
    )


def raise_provider_call_error(
    *,
    provider: str,
    operation: str,
    failure_kind: ProviderFailureKind,
    message: str,
    correlation_id: UUID,
    status_code: int | None = None,
    upstream_error: Any = None,
) -> NoReturn:
    """Raise a tagged upstream failure.

    Args:
        provider: Provider that produced the failure
        operation: Operation being performed
        failure_kind: Closed failure category decided by the adapter
        message: Human readable description for logs
        correlation_id: Request correlation ID
        status_code: Upstream HTTP status, None for connection-level failures
        upstream_error: Upstream error envelope, passed through untouched
    """
    raise ProviderCallError(
        _build_detail(
            error_code=FAILURE_KIND_ERROR_CODES[failure_kind],
            message=message,
            operation=operation,
            correlation_id=correlation_id,
            provider=provider,
            failure_kind=failure_kind.value,
            status_code=status_code,
            upstream_error=upstream_error,
        )
    )


def raise_parsing_error(
    *,
    operation: str,
    parse_target: str,
    message: str,
    correlation_id: UUID,
    **details: Any,
) -> NoReturn:
    """Raise an error for an upstream body that could not be read."""
    raise GatewayError(
        _build_detail(
            error_code=ErrorCode.PARSING_ERROR,
            message=message,
            operation=operation,
            correlation_id=correlation_id,
            parse_target=parse_target,
            **details,
        )
    )


def raise_unsupported_format_error(
    *,
    operation: str,
    content_type: str,
    message: str,
    correlation_id: UUID,
    **details: Any,
) -> NoReturn:
    """Raise an error for a document format without a text extractor."""
    raise GatewayError(
        _build_detail(
            error_code=ErrorCode.UNSUPPORTED_FORMAT,
            message=message,
            operation=operation,
            correlation_id=correlation_id,
            content_type=content_type,
            **details,
        )
    )


def raise_processing_error(
    *,
    operation: str,
    message: str,
    correlation_id: UUID,
    **details: Any,
) -> NoReturn:
    """Raise an error for an internal processing failure."""
    raise GatewayError(
        _build_detail(
            error_code=ErrorCode.PROCESSING_ERROR,
            message=message,
            operation=operation,
            correlation_id=correlation_id,
            **details,
        )
    )


def status_code_for(error_detail: ErrorDetail) -> int:
    """Return the HTTP status for an error, preferring a recorded upstream status."""
    upstream_status = error_detail.details.get("status_code")
    if isinstance(upstream_status, int) and upstream_status >= 400:
        return upstream_status
    return ERROR_CODE_STATUS.get(error_detail.error_code, 500)


def create_error_response(error_detail: ErrorDetail) -> tuple[dict[str, Any], int]:
    """Build the client-facing error body and status for an ``ErrorDetail``."""
    body: dict[str, Any] = {
        "success": False,
        "error": error_detail.message,
        "error_code": error_detail.error_code.value,
        "correlation_id": str(error_detail.correlation_id),
    }
    return body, status_code_for(error_detail)
