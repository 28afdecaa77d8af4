"""Prompt Gateway Service specific error types."""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes carried by every structured gateway error."""

    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    RATE_LIMIT = "RATE_LIMIT"
    INVALID_API_KEY = "INVALID_API_KEY"
    CONTENT_BLOCKED = "CONTENT_BLOCKED"
    MODEL_NOT_AVAILABLE = "MODEL_NOT_AVAILABLE"
    PARSING_ERROR = "PARSING_ERROR"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    PROCESSING_ERROR = "PROCESSING_ERROR"


class ProviderFailureKind(str, Enum):
    """Closed set of upstream failure categories decided by each provider adapter."""

    RATE_LIMITED = "rate_limited"
    INVALID_CREDENTIAL = "invalid_credential"
    CONTENT_BLOCKED = "content_blocked"
    NETWORK_FAILURE = "network_failure"
    MODEL_UNAVAILABLE = "model_unavailable"
    UNKNOWN = "unknown"


FAILURE_KIND_ERROR_CODES: dict[ProviderFailureKind, ErrorCode] = {
    ProviderFailureKind.RATE_LIMITED: ErrorCode.RATE_LIMIT,
    ProviderFailureKind.INVALID_CREDENTIAL: ErrorCode.INVALID_API_KEY,
    ProviderFailureKind.CONTENT_BLOCKED: ErrorCode.CONTENT_BLOCKED,
    ProviderFailureKind.NETWORK_FAILURE: ErrorCode.CONNECTION_ERROR,
    ProviderFailureKind.MODEL_UNAVAILABLE: ErrorCode.MODEL_NOT_AVAILABLE,
    ProviderFailureKind.UNKNOWN: ErrorCode.EXTERNAL_SERVICE_ERROR,
}

# Statuses used when no upstream HTTP status is available
ERROR_CODE_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.MISSING_REQUIRED_FIELD: 400,
    ErrorCode.CONTENT_BLOCKED: 400,
    ErrorCode.UNSUPPORTED_FORMAT: 415,
    ErrorCode.CONNECTION_ERROR: 503,
    ErrorCode.RATE_LIMIT: 429,
    ErrorCode.INVALID_API_KEY: 401,
    ErrorCode.CONFIGURATION_ERROR: 500,
    ErrorCode.EXTERNAL_SERVICE_ERROR: 502,
    ErrorCode.MODEL_NOT_AVAILABLE: 500,
    ErrorCode.PARSING_ERROR: 500,
    ErrorCode.PROCESSING_ERROR: 500,
    ErrorCode.UNKNOWN_ERROR: 500,
}
