"""Dependency injection configuration for the Prompt Gateway Service using Dishka."""

from __future__ import annotations

from pathlib import Path
from typing import AsyncIterator

from aiohttp import ClientSession
from dishka import Provider, Scope, provide

from services.prompt_gateway_service.config import Settings
from services.prompt_gateway_service.enums import ProviderName
from services.prompt_gateway_service.implementations.anthropic_provider_impl import (
    AnthropicProviderImpl,
)
from services.prompt_gateway_service.implementations.chat_completions_provider_impl import (
    ChatCompletionsProviderImpl,
)
from services.prompt_gateway_service.implementations.gateway_orchestrator_impl import (
    GatewayOrchestratorImpl,
)
from services.prompt_gateway_service.implementations.google_provider_impl import (
    GoogleProviderImpl,
)
from services.prompt_gateway_service.implementations.progress_reporter_impl import (
    LoggingProgressReporter,
)
from services.prompt_gateway_service.implementations.text_extractor_impl import (
    StrategyBasedTextExtractor,
    default_strategies,
)
from services.prompt_gateway_service.implementations.upload_store_impl import (
    FileSystemUploadStore,
)
from services.prompt_gateway_service.logging_utils import create_service_logger
from services.prompt_gateway_service.protocols import (
    GatewayOrchestratorProtocol,
    LLMProviderProtocol,
    ProgressReporterProtocol,
    TextExtractorProtocol,
    UploadStoreProtocol,
)

logger = create_service_logger("prompt_gateway_service.di")


class PromptGatewayServiceProvider(Provider):
    """Dishka provider for Prompt Gateway Service dependencies."""

    @provide(scope=Scope.REQUEST)
    def provide_settings(self) -> Settings:
        """Provide settings read from the environment for this request."""
        return Settings()

    @provide(scope=Scope.APP)
    async def provide_http_session(self) -> AsyncIterator[ClientSession]:
        """Provide the shared HTTP client session, closed on container shutdown."""
        session = ClientSession()
        logger.info("HTTP client session created")
        try:
            yield session
        finally:
            await session.close()
            logger.info("HTTP client session closed")

    @provide(scope=Scope.REQUEST)
    def provide_llm_providers(
        self, session: ClientSession, settings: Settings
    ) -> dict[ProviderName, LLMProviderProtocol]:
        """Provide one adapter per upstream provider."""
        return {
            ProviderName.ANTHROPIC: AnthropicProviderImpl(session, settings),
            ProviderName.GOOGLE: GoogleProviderImpl(session, settings),
            ProviderName.GROQ: ChatCompletionsProviderImpl(
                session, settings, ProviderName.GROQ
            ),
            ProviderName.AZURE_OPENAI: ChatCompletionsProviderImpl(
                session, settings, ProviderName.AZURE_OPENAI
            ),
        }

    @provide(scope=Scope.APP)
    def provide_progress_reporter(self) -> ProgressReporterProtocol:
        return LoggingProgressReporter()

    @provide(scope=Scope.REQUEST)
    def provide_gateway_orchestrator(
        self,
        providers: dict[ProviderName, LLMProviderProtocol],
        progress_reporter: ProgressReporterProtocol,
        settings: Settings,
    ) -> GatewayOrchestratorProtocol:
        """Provide the gateway orchestrator."""
        return GatewayOrchestratorImpl(
            providers=providers,
            progress_reporter=progress_reporter,
            settings=settings,
        )

    @provide(scope=Scope.APP)
    def provide_text_extractor(self) -> TextExtractorProtocol:
        return StrategyBasedTextExtractor(strategies=default_strategies())

    @provide(scope=Scope.REQUEST)
    def provide_upload_store(self, settings: Settings) -> UploadStoreProtocol:
        return FileSystemUploadStore(upload_dir=Path(settings.UPLOAD_TMP_DIR))
