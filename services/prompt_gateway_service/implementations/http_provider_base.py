"""Shared HTTP plumbing for upstream provider adapters."""

from __future__ import annotations

import asyncio
import json
import time
from typing import Any
from uuid import UUID

import aiohttp

from services.prompt_gateway_service.config import (
    PROVIDER_DISPLAY_NAMES,
    Settings,
    credentials_missing_message,
)
from services.prompt_gateway_service.enums import ProviderName
from services.prompt_gateway_service.error_handling import (
    raise_configuration_error,
    raise_parsing_error,
    raise_provider_call_error,
)
from services.prompt_gateway_service.error_types import ProviderFailureKind
from services.prompt_gateway_service.internal_models import ModelParams, ProviderTextResponse
from services.prompt_gateway_service.logging_utils import create_service_logger
from services.prompt_gateway_service.metrics import get_metrics

logger = create_service_logger("prompt_gateway_service.http_provider")

NO_RESPONSE_PLACEHOLDER = "No response generated"


class HTTPProviderBase:
    """Common request/response handling for JSON-over-HTTP LLM upstreams.

    Subclasses describe their upstream through ``_build_request``, ``_extract_text`` and
    ``_classify_http_failure``; this class owns credential checks, the bounded timeout,
    connection-failure handling, body parsing and metrics.
    """

    provider: ProviderName

    def __init__(self, session: aiohttp.ClientSession, settings: Settings):
        self.session = session
        self.settings = settings

    @property
    def display_name(self) -> str:
        return PROVIDER_DISPLAY_NAMES[self.provider]

    def missing_credentials(self) -> list[str]:
        return self.settings.missing_credentials(self.provider)

    async def send(
        self,
        content: str,
        system_instruction: str,
        model_params: ModelParams,
        correlation_id: UUID,
    ) -> ProviderTextResponse:
        missing = self.missing_credentials()
        if missing:
            raise_configuration_error(
                operation=f"{self.provider.value}_api_request",
                config_keys=missing,
                message=credentials_missing_message(self.provider, missing),
                correlation_id=correlation_id,
                details={"provider": self.provider.value},
            )

        url, headers, payload = self._build_request(content, system_instruction, model_params)
        response_data = await self._post_json(url, headers, payload, model_params, correlation_id)

        self._check_content_blocked(response_data, correlation_id)

        text = self._extract_text(response_data)
        if not text:
            logger.warning(
                f"{self.display_name} response carried no text, using placeholder",
                provider=self.provider.value,
            )
            text = NO_RESPONSE_PLACEHOLDER

        prompt_tokens, completion_tokens = self._extract_usage(response_data)
        return ProviderTextResponse(
            text=text,
            provider=self.provider,
            model=model_params.model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            raw_response=response_data,
        )

    async def _post_json(
        self,
        url: str,
        headers: dict[str, str],
        payload: dict[str, Any],
        model_params: ModelParams,
        correlation_id: UUID,
    ) -> dict[str, Any]:
        """POST the payload and return the decoded success envelope.

        Raises:
            ProviderCallError: Connection-level failure or non-success HTTP status
            GatewayError: PARSING_ERROR when a success body is not a JSON object
        """
        operation = f"{self.provider.value}_api_request"
        timeout = aiohttp.ClientTimeout(total=self.settings.PROVIDER_REQUEST_TIMEOUT_SECONDS)
        start_time = time.perf_counter()

        logger.info(
            f"Sending request to {self.display_name} API",
            provider=self.provider.value,
            model=model_params.model,
        )

        try:
            async with self.session.post(
                url, headers=headers, json=payload, timeout=timeout
            ) as response:
                status = response.status
                body_text = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._record_failure(ProviderFailureKind.NETWORK_FAILURE)
            logger.error(
                f"Connection to {self.display_name} API failed: {type(e).__name__}",
                provider=self.provider.value,
            )
            raise_provider_call_error(
                provider=self.provider.value,
                operation=operation,
                failure_kind=ProviderFailureKind.NETWORK_FAILURE,
                message=f"{type(e).__name__}: {e}",
                correlation_id=correlation_id,
            )
        finally:
            get_metrics()["upstream_duration_seconds"].labels(
                provider=self.provider.value, model=model_params.model
            ).observe(time.perf_counter() - start_time)

        if not 200 <= status < 300:
            upstream_error = _decode_error_body(body_text)
            failure_kind = self._classify_http_failure(status, upstream_error)
            self._record_failure(failure_kind)
            logger.error(
                f"{self.display_name} API error",
                provider=self.provider.value,
                status_code=status,
                failure_kind=failure_kind.value,
            )
            raise_provider_call_error(
                provider=self.provider.value,
                operation=operation,
                failure_kind=failure_kind,
                message=f"{self.display_name} API error: {status}",
                correlation_id=correlation_id,
                status_code=status,
                upstream_error=upstream_error,
            )

        try:
            response_data = json.loads(body_text)
        except json.JSONDecodeError as e:
            raise_parsing_error(
                operation=operation,
                parse_target="upstream_response",
                message=f"Failed to parse {self.display_name} response: {e.msg}",
                correlation_id=correlation_id,
                provider=self.provider.value,
            )

        if not isinstance(response_data, dict):
            raise_parsing_error(
                operation=operation,
                parse_target="upstream_response",
                message=f"Unexpected {self.display_name} response envelope",
                correlation_id=correlation_id,
                provider=self.provider.value,
            )
        return response_data

    def _record_failure(self, failure_kind: ProviderFailureKind) -> None:
        get_metrics()["upstream_failures_total"].labels(
            provider=self.provider.value, failure_kind=failure_kind.value
        ).inc()

    def _check_content_blocked(self, response_data: dict[str, Any], correlation_id: UUID) -> None:
        """Hook for providers that signal safety rejections inside a success envelope."""

    def _extract_usage(self, response_data: dict[str, Any]) -> tuple[int, int]:
        return 0, 0

    def _build_request(
        self, content: str, system_instruction: str, model_params: ModelParams
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        raise NotImplementedError

    def _extract_text(self, response_data: dict[str, Any]) -> str | None:
        raise NotImplementedError

    def _classify_http_failure(self, status: int, upstream_error: Any) -> ProviderFailureKind:
        raise NotImplementedError


def _decode_error_body(body_text: str) -> Any:
    """Return the upstream error envelope as JSON when possible, else the raw text."""
    try:
        return json.loads(body_text)
    except json.JSONDecodeError:
        return body_text


def error_object(upstream_error: Any) -> dict[str, Any]:
    """Return the nested ``error`` object of a JSON error envelope, or an empty dict."""
    if isinstance(upstream_error, dict):
        error = upstream_error.get("error")
        if isinstance(error, dict):
            return error
    return {}


def token_counts(usage: Any, prompt_key: str, completion_key: str) -> tuple[int, int]:
    """Read prompt and completion token counts, treating absent or malformed values as 0."""
    if not isinstance(usage, dict):
        return 0, 0

    def count(key: str) -> int:
        value = usage.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            return 0
        return value

    return count(prompt_key), count(completion_key)
