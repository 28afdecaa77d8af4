"""Anthropic Claude provider implementation (messages API)."""

from __future__ import annotations

from typing import Any

from services.prompt_gateway_service.enums import ProviderName
from services.prompt_gateway_service.error_types import ProviderFailureKind
from services.prompt_gateway_service.implementations.http_provider_base import (
    HTTPProviderBase,
    error_object,
    token_counts,
)
from services.prompt_gateway_service.internal_models import ModelParams


class AnthropicProviderImpl(HTTPProviderBase):
    """Anthropic/Claude provider implementation."""

    provider = ProviderName.ANTHROPIC

    def _build_request(
        self, content: str, system_instruction: str, model_params: ModelParams
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        url = f"{self.settings.ANTHROPIC_BASE_URL.rstrip('/')}/messages"
        headers = {
            "x-api-key": self.settings.ANTHROPIC_API_KEY.get_secret_value(),
            "anthropic-version": self.settings.ANTHROPIC_API_VERSION,
            "content-type": "application/json",
        }
        payload = {
            "model": model_params.model,
            "max_tokens": model_params.max_tokens,
            "temperature": model_params.temperature,
            "system": system_instruction,
            "messages": [{"role": "user", "content": content}],
        }
        return url, headers, payload

    def _extract_text(self, response_data: dict[str, Any]) -> str | None:
        blocks = response_data.get("content")
        if not isinstance(blocks, list):
            return None
        texts = [
            block["text"]
            for block in blocks
            if isinstance(block, dict)
            and block.get("type") == "text"
            and isinstance(block.get("text"), str)
        ]
        return "".join(texts) or None

    def _extract_usage(self, response_data: dict[str, Any]) -> tuple[int, int]:
        return token_counts(response_data.get("usage"), "input_tokens", "output_tokens")

    def _classify_http_failure(self, status: int, upstream_error: Any) -> ProviderFailureKind:
        """Classify from HTTP status and the ``{"error": {"type": ...}}`` envelope."""
        error_type = str(error_object(upstream_error).get("type") or "")

        if status == 429 or error_type == "rate_limit_error":
            return ProviderFailureKind.RATE_LIMITED
        if status in (401, 403) or error_type in ("authentication_error", "permission_error"):
            return ProviderFailureKind.INVALID_CREDENTIAL
        if status == 404 or error_type == "not_found_error":
            return ProviderFailureKind.MODEL_UNAVAILABLE
        return ProviderFailureKind.UNKNOWN
