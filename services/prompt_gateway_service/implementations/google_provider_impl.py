"""Google Gemini provider implementation (generateContent API)."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from services.prompt_gateway_service.enums import ProviderName
from services.prompt_gateway_service.error_handling import raise_provider_call_error
from services.prompt_gateway_service.error_types import ProviderFailureKind
from services.prompt_gateway_service.implementations.http_provider_base import (
    HTTPProviderBase,
    error_object,
    token_counts,
)
from services.prompt_gateway_service.internal_models import ModelParams
from services.prompt_gateway_service.logging_utils import create_service_logger

logger = create_service_logger("prompt_gateway_service.google_provider")

_INVALID_KEY_REASONS = frozenset({"API_KEY_INVALID", "API_KEY_EXPIRED"})


class GoogleProviderImpl(HTTPProviderBase):
    """Google Gemini provider implementation.

    Gemini receives the system instruction and user content as one combined prompt.
    Safety rejections arrive inside a 200 envelope (``promptFeedback.blockReason`` or a
    ``SAFETY`` finish reason) and are raised as CONTENT_BLOCKED failures.
    """

    provider = ProviderName.GOOGLE

    def _build_request(
        self, content: str, system_instruction: str, model_params: ModelParams
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        url = (
            f"{self.settings.GOOGLE_BASE_URL.rstrip('/')}/models/"
            f"{model_params.model}:generateContent"
        )
        headers = {
            "x-goog-api-key": self.settings.GOOGLE_API_KEY.get_secret_value(),
            "Content-Type": "application/json",
        }
        payload = {
            "contents": [
                {"parts": [{"text": f"{system_instruction}\n\nUser Request: {content}"}]}
            ],
            "generationConfig": {
                "temperature": model_params.temperature,
                "maxOutputTokens": model_params.max_tokens,
            },
        }
        return url, headers, payload

    def _check_content_blocked(self, response_data: dict[str, Any], correlation_id: UUID) -> None:
        feedback = response_data.get("promptFeedback") or {}
        block_reason = feedback.get("blockReason") if isinstance(feedback, dict) else None

        finish_reason = None
        candidates = response_data.get("candidates")
        if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
            finish_reason = candidates[0].get("finishReason")

        if block_reason or finish_reason == "SAFETY":
            self._record_failure(ProviderFailureKind.CONTENT_BLOCKED)
            logger.warning(
                "Gemini response blocked by safety filters",
                block_reason=block_reason,
                finish_reason=finish_reason,
            )
            raise_provider_call_error(
                provider=self.provider.value,
                operation="google_api_request",
                failure_kind=ProviderFailureKind.CONTENT_BLOCKED,
                message=f"Blocked by safety filters: {block_reason or finish_reason}",
                correlation_id=correlation_id,
                upstream_error={"promptFeedback": feedback, "finishReason": finish_reason},
            )

    def _extract_text(self, response_data: dict[str, Any]) -> str | None:
        candidates = response_data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return None
        content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
        if not isinstance(content, dict):
            return None
        parts = content.get("parts")
        if not isinstance(parts, list):
            return None
        texts = [
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        ]
        return "".join(texts) or None

    def _extract_usage(self, response_data: dict[str, Any]) -> tuple[int, int]:
        return token_counts(
            response_data.get("usageMetadata"), "promptTokenCount", "candidatesTokenCount"
        )

    def _classify_http_failure(self, status: int, upstream_error: Any) -> ProviderFailureKind:
        """Classify from HTTP status and the google.rpc.Status error envelope."""
        error = error_object(upstream_error)
        rpc_status = str(error.get("status") or "")
        reasons = {
            str(detail.get("reason"))
            for detail in error.get("details") or []
            if isinstance(detail, dict) and detail.get("reason")
        }

        if status == 429 or rpc_status == "RESOURCE_EXHAUSTED":
            return ProviderFailureKind.RATE_LIMITED
        if (
            status in (401, 403)
            or rpc_status in ("UNAUTHENTICATED", "PERMISSION_DENIED")
            or reasons & _INVALID_KEY_REASONS
        ):
            return ProviderFailureKind.INVALID_CREDENTIAL
        if status == 404 or rpc_status == "NOT_FOUND":
            return ProviderFailureKind.MODEL_UNAVAILABLE
        return ProviderFailureKind.UNKNOWN
