"""OpenAI-compatible chat-completions provider serving Groq and Azure OpenAI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import aiohttp

from services.prompt_gateway_service.config import Settings
from services.prompt_gateway_service.enums import ProviderName
from services.prompt_gateway_service.error_types import ProviderFailureKind
from services.prompt_gateway_service.implementations.http_provider_base import (
    HTTPProviderBase,
    error_object,
    token_counts,
)
from services.prompt_gateway_service.internal_models import ModelParams

_MODEL_UNAVAILABLE_CODES = frozenset(
    {"model_decommissioned", "model_not_found", "DeploymentNotFound"}
)
_RATE_LIMIT_CODES = frozenset({"rate_limit_exceeded", "insufficient_quota", "429"})
_INVALID_KEY_CODES = frozenset({"invalid_api_key", "401"})
_CONTENT_FILTER_CODES = frozenset({"content_filter", "content_policy_violation"})


@dataclass(frozen=True)
class ChatCompletionsEndpoint:
    """Where and how a chat-completions upstream is called."""

    url: str
    auth_header: str
    auth_value: str
    extra_payload: dict[str, Any]


def endpoint_for(provider: ProviderName, settings: Settings) -> ChatCompletionsEndpoint:
    """Build the endpoint description for a chat-completions provider."""
    if provider == ProviderName.AZURE_OPENAI:
        return ChatCompletionsEndpoint(
            url=(
                f"{settings.AZURE_OPENAI_ENDPOINT}/openai/deployments/"
                f"{settings.AZURE_OPENAI_DEPLOYMENT}/chat/completions"
                f"?api-version={settings.AZURE_OPENAI_API_VERSION}"
            ),
            auth_header="api-key",
            auth_value=settings.AZURE_OPENAI_API_KEY.get_secret_value(),
            extra_payload={"top_p": 1},
        )
    if provider == ProviderName.GROQ:
        return ChatCompletionsEndpoint(
            url=f"{settings.GROQ_BASE_URL.rstrip('/')}/chat/completions",
            auth_header="Authorization",
            auth_value=f"Bearer {settings.GROQ_API_KEY.get_secret_value()}",
            extra_payload={},
        )
    raise ValueError(f"{provider.value} is not a chat-completions provider")


class ChatCompletionsProviderImpl(HTTPProviderBase):
    """Provider for upstreams speaking the OpenAI chat-completions schema.

    Parameterized by endpoint URL, auth header shape and default model; the request and
    response envelopes are identical across these upstreams.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        settings: Settings,
        provider: ProviderName,
    ):
        super().__init__(session, settings)
        self.provider = provider

    def _build_request(
        self, content: str, system_instruction: str, model_params: ModelParams
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        endpoint = endpoint_for(self.provider, self.settings)
        headers = {
            endpoint.auth_header: endpoint.auth_value,
            "Content-Type": "application/json",
        }
        payload: dict[str, Any] = {
            "model": model_params.model,
            "messages": [
                {"role": "system", "content": system_instruction},
                {"role": "user", "content": content},
            ],
            "max_tokens": model_params.max_tokens,
            "temperature": model_params.temperature,
            **endpoint.extra_payload,
        }
        return endpoint.url, headers, payload

    def _extract_text(self, response_data: dict[str, Any]) -> str | None:
        choices = response_data.get("choices")
        if not isinstance(choices, list) or not choices:
            return None
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if not isinstance(message, dict):
            return None
        content = message.get("content")
        return content if isinstance(content, str) else None

    def _extract_usage(self, response_data: dict[str, Any]) -> tuple[int, int]:
        return token_counts(response_data.get("usage"), "prompt_tokens", "completion_tokens")

    def _classify_http_failure(self, status: int, upstream_error: Any) -> ProviderFailureKind:
        error = error_object(upstream_error)
        code = str(error.get("code") or "")
        error_type = str(error.get("type") or "")

        if status == 429 or code in _RATE_LIMIT_CODES or error_type == "insufficient_quota":
            return ProviderFailureKind.RATE_LIMITED
        if status in (401, 403) or code in _INVALID_KEY_CODES:
            return ProviderFailureKind.INVALID_CREDENTIAL
        if code in _MODEL_UNAVAILABLE_CODES:
            return ProviderFailureKind.MODEL_UNAVAILABLE
        if code in _CONTENT_FILTER_CODES:
            return ProviderFailureKind.CONTENT_BLOCKED
        return ProviderFailureKind.UNKNOWN
