"""Protocol definitions for the Prompt Gateway Service."""

from typing import Any, Protocol
from uuid import UUID

from services.prompt_gateway_service.enums import ProcessingStage, ProviderName
from services.prompt_gateway_service.internal_models import (
    ModelParams,
    NormalizedResult,
    ProcessingRequest,
    ProviderTextResponse,
)


class LLMProviderProtocol(Protocol):
    """Protocol for individual upstream provider adapters."""

    provider: ProviderName

    @property
    def display_name(self) -> str:
        """Human-readable provider name used in client-facing messages."""
        ...

    def missing_credentials(self) -> list[str]:
        """Return the environment variable names of absent credentials."""
        ...

    async def send(
        self,
        content: str,
        system_instruction: str,
        model_params: ModelParams,
        correlation_id: UUID,
    ) -> ProviderTextResponse:
        """Send one prompt to the upstream and extract the generated text.

        Args:
            content: User content to process
            system_instruction: Resolved system instruction for the action
            model_params: Model id, max tokens and temperature
            correlation_id: Request correlation ID for tracing

        Returns:
            Extracted text with model and usage information

        Raises:
            GatewayError: Configuration error when credentials are absent
            ProviderCallError: Typed upstream failure (HTTP, network, content blocked)
        """
        ...


class ProgressReporterProtocol(Protocol):
    """Observational channel receiving orchestrator stage transitions."""

    async def stage_entered(
        self,
        stage: ProcessingStage,
        correlation_id: UUID,
        **context: Any,
    ) -> None:
        ...


class GatewayOrchestratorProtocol(Protocol):
    """Protocol for the gateway orchestrator."""

    async def handle(
        self,
        request: ProcessingRequest,
        provider: ProviderName,
        correlation_id: UUID,
    ) -> NormalizedResult:
        """Validate, dispatch and normalize a processing request.

        Never raises for request, configuration or upstream failures; those are returned
        as NormalizedError.
        """
        ...

    async def generate_code_triple(
        self,
        prompt: str | None,
        correlation_id: UUID,
    ) -> NormalizedResult:
        """Generate an ``{html, css, js}`` artifact with the code generation provider."""
        ...


class TextExtractorProtocol(Protocol):
    """Protocol for extracting text from uploaded documents."""

    async def extract_text(
        self, file_content: bytes, content_type: str, file_name: str, correlation_id: UUID
    ) -> str:
        """Extract plain text from file content.

        Raises:
            GatewayError: UNSUPPORTED_FORMAT when no extractor exists for the content type
        """
        ...


class UploadStoreProtocol(Protocol):
    """Protocol for persisting uploaded files to the temporary upload directory."""

    async def save(self, file_name: str, file_content: bytes, correlation_id: UUID) -> str:
        """Write the file and return the stored path."""
        ...
