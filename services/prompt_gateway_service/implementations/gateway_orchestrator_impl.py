"""Gateway orchestrator: validation, credential check, dispatch and normalization."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from uuid import UUID

from services.prompt_gateway_service.config import Settings, credentials_missing_message
from services.prompt_gateway_service.enums import ActionKind, ProcessingStage, ProviderName
from services.prompt_gateway_service.error_handling import (
    GatewayError,
    ProviderCallError,
    raise_configuration_error,
    raise_validation_error,
    status_code_for,
)
from services.prompt_gateway_service.error_types import ErrorCode, ProviderFailureKind
from services.prompt_gateway_service.internal_models import (
    NormalizedError,
    NormalizedResult,
    ProcessingRequest,
    ResolvedPrompt,
)
from services.prompt_gateway_service.logging_utils import create_service_logger
from services.prompt_gateway_service.metrics import get_metrics
from services.prompt_gateway_service.prompt_resolver import (
    resolve_action_prompt,
    resolve_code_triple_prompt,
)
from services.prompt_gateway_service.protocols import (
    GatewayOrchestratorProtocol,
    LLMProviderProtocol,
    ProgressReporterProtocol,
)
from services.prompt_gateway_service.response_normalizer import normalize

logger = create_service_logger("prompt_gateway_service.orchestrator")

INTERNAL_ERROR_MESSAGE = "Internal server error"
MODEL_UNAVAILABLE_MESSAGE = "The requested model is not available. Please contact support."

_FAILURE_MESSAGES: dict[ProviderFailureKind, str] = {
    ProviderFailureKind.INVALID_CREDENTIAL: (
        "Invalid {provider} API key. Please check your configuration."
    ),
    ProviderFailureKind.RATE_LIMITED: "{provider} API quota exceeded. Please try again later.",
    ProviderFailureKind.CONTENT_BLOCKED: (
        "Content was blocked by {provider} safety filters. Please modify your request."
    ),
    ProviderFailureKind.NETWORK_FAILURE: (
        "Unable to connect to {provider} API. "
        "Please check your internet connection and try again."
    ),
    ProviderFailureKind.MODEL_UNAVAILABLE: MODEL_UNAVAILABLE_MESSAGE,
    ProviderFailureKind.UNKNOWN: "{provider} API request failed",
}

_KNOWN_ACTIONS = frozenset(action.value for action in ActionKind)
CODE_TRIPLE_LABEL = "code_triple"


def _action_label(action: str | None) -> str:
    return action if action is not None and action in _KNOWN_ACTIONS else "other"


class GatewayOrchestratorImpl(GatewayOrchestratorProtocol):
    """Runs one processing request through the gateway state machine.

    RECEIVED -> VALIDATED -> CREDENTIAL_CHECKED -> DISPATCHED ->
    NORMALIZED_SUCCESS | NORMALIZED_ERROR. Each transition is reported on the progress
    channel. Every outcome is returned as a NormalizedResult; nothing raises to the caller.
    """

    def __init__(
        self,
        providers: dict[ProviderName, LLMProviderProtocol],
        progress_reporter: ProgressReporterProtocol,
        settings: Settings,
    ):
        self.providers = providers
        self.progress_reporter = progress_reporter
        self.settings = settings

    async def handle(
        self,
        request: ProcessingRequest,
        provider: ProviderName,
        correlation_id: UUID,
    ) -> NormalizedResult:
        return await self._run(
            provider=provider,
            content=request.content,
            action=request.action,
            correlation_id=correlation_id,
            resolve=lambda p: resolve_action_prompt(p, request.action or "", self.settings),
            action_label=_action_label(request.action),
            missing_fields_message="Text and action are required",
        )

    async def generate_code_triple(
        self,
        prompt: str | None,
        correlation_id: UUID,
    ) -> NormalizedResult:
        return await self._run(
            provider=self.settings.CODE_GENERATION_PROVIDER,
            content=prompt,
            action=CODE_TRIPLE_LABEL,
            correlation_id=correlation_id,
            resolve=lambda p: resolve_code_triple_prompt(p, self.settings),
            action_label=CODE_TRIPLE_LABEL,
            missing_fields_message="Prompt is required",
        )

    async def _run(
        self,
        *,
        provider: ProviderName,
        content: str | None,
        action: str | None,
        correlation_id: UUID,
        resolve: Callable[[ProviderName], ResolvedPrompt],
        action_label: str,
        missing_fields_message: str,
    ) -> NormalizedResult:
        await self._stage(ProcessingStage.RECEIVED, correlation_id, provider=provider.value)

        try:
            result = await self._process(
                provider=provider,
                content=content,
                action=action,
                correlation_id=correlation_id,
                resolve=resolve,
                missing_fields_message=missing_fields_message,
            )
        except ProviderCallError as e:
            result = self._provider_failure_result(e, provider)
        except GatewayError as e:
            result = self._gateway_error_result(e)
        except Exception as e:
            logger.error(
                f"Unexpected error while processing request: {e}",
                provider=provider.value,
                exc_info=True,
            )
            result = NormalizedError(
                error=INTERNAL_ERROR_MESSAGE,
                status_code=500,
                error_code=ErrorCode.UNKNOWN_ERROR,
            )

        if result.success:
            await self._stage(ProcessingStage.NORMALIZED_SUCCESS, correlation_id)
        else:
            await self._stage(
                ProcessingStage.NORMALIZED_ERROR,
                correlation_id,
                error_code=result.error_code.value,
            )

        get_metrics()["gateway_requests_total"].labels(
            provider=provider.value,
            action=action_label,
            status="success" if result.success else "error",
        ).inc()
        return result

    async def _process(
        self,
        *,
        provider: ProviderName,
        content: str | None,
        action: str | None,
        correlation_id: UUID,
        resolve: Callable[[ProviderName], ResolvedPrompt],
        missing_fields_message: str,
    ) -> NormalizedResult:
        if not content or not content.strip() or not action:
            raise_validation_error(
                operation="validate_request",
                field="content" if action else "action",
                message=missing_fields_message,
                correlation_id=correlation_id,
                has_content=bool(content and content.strip()),
                has_action=bool(action),
            )
        await self._stage(ProcessingStage.VALIDATED, correlation_id, action=action)

        adapter = self.providers.get(provider)
        if adapter is None:
            raise_configuration_error(
                operation="select_provider",
                config_keys=["provider"],
                message=f"Provider '{provider.value}' is not available",
                correlation_id=correlation_id,
                details={"available_providers": [p.value for p in self.providers]},
            )

        missing = adapter.missing_credentials()
        logger.info(
            "Checked provider credentials",
            provider=provider.value,
            credentials_present=not missing,
        )
        if missing:
            raise_configuration_error(
                operation="check_credentials",
                config_keys=missing,
                message=credentials_missing_message(provider, missing),
                correlation_id=correlation_id,
                details={"provider": provider.value},
            )
        await self._stage(ProcessingStage.CREDENTIAL_CHECKED, correlation_id)

        resolved = resolve(provider)
        await self._stage(
            ProcessingStage.DISPATCHED,
            correlation_id,
            model=resolved.model_params.model,
            expected_shape=resolved.expected_shape.value,
        )

        response = await adapter.send(
            content=content,
            system_instruction=resolved.system_instruction,
            model_params=resolved.model_params,
            correlation_id=correlation_id,
        )
        logger.info(
            f"{adapter.display_name} returned {len(response.text)} characters",
            provider=provider.value,
            model=response.model,
            prompt_tokens=response.prompt_tokens,
            completion_tokens=response.completion_tokens,
        )
        return normalize(response.text, resolved.expected_shape)

    def _provider_failure_result(
        self, error: ProviderCallError, provider: ProviderName
    ) -> NormalizedError:
        display_name = self._display_name(provider)
        failure_kind = error.failure_kind

        status_code = status_code_for(error.error_detail)
        if failure_kind == ProviderFailureKind.UNKNOWN and error.status_code is None:
            message = INTERNAL_ERROR_MESSAGE
            status_code = 500
        else:
            message = _FAILURE_MESSAGES[failure_kind].format(provider=display_name)

        details: Any
        if failure_kind == ProviderFailureKind.NETWORK_FAILURE:
            details = error.error_detail.message
        else:
            details = error.upstream_error

        logger.warning(
            "Provider call failed",
            provider=provider.value,
            failure_kind=failure_kind.value,
            status_code=error.status_code,
        )
        return NormalizedError(
            error=message,
            details=details,
            status_code=status_code,
            error_code=error.error_detail.error_code,
        )

    def _gateway_error_result(self, error: GatewayError) -> NormalizedError:
        detail = error.error_detail
        if detail.error_code in (ErrorCode.VALIDATION_ERROR, ErrorCode.CONFIGURATION_ERROR):
            logger.info(f"Request rejected before dispatch: {detail.message}")
            return NormalizedError(
                error=detail.message,
                status_code=status_code_for(detail),
                error_code=detail.error_code,
            )

        logger.error(
            f"Gateway error during processing: {error}",
            error_code=detail.error_code.value,
        )
        return NormalizedError(
            error=INTERNAL_ERROR_MESSAGE,
            details=detail.message,
            status_code=status_code_for(detail),
            error_code=detail.error_code,
        )

    def _display_name(self, provider: ProviderName) -> str:
        adapter = self.providers.get(provider)
        if adapter is not None:
            return adapter.display_name
        return provider.value

    async def _stage(self, stage: ProcessingStage, correlation_id: UUID, **context: Any) -> None:
        await self.progress_reporter.stage_entered(stage, correlation_id, **context)
