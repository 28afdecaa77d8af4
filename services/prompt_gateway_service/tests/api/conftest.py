"""Quart test application wired with a test Dishka provider."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from dishka import Provider, Scope, make_async_container
from quart import Quart
from quart_dishka import QuartDishka

from services.prompt_gateway_service.app import register_blueprints
from services.prompt_gateway_service.config import Settings
from services.prompt_gateway_service.enums import ProviderName
from services.prompt_gateway_service.error_handlers import register_error_handlers
from services.prompt_gateway_service.implementations.gateway_orchestrator_impl import (
    GatewayOrchestratorImpl,
)
from services.prompt_gateway_service.implementations.text_extractor_impl import (
    StrategyBasedTextExtractor,
    default_strategies,
)
from services.prompt_gateway_service.implementations.upload_store_impl import (
    FileSystemUploadStore,
)
from services.prompt_gateway_service.middleware import setup_request_middleware
from services.prompt_gateway_service.protocols import (
    GatewayOrchestratorProtocol,
    TextExtractorProtocol,
    UploadStoreProtocol,
)
from services.prompt_gateway_service.tests.provider_fakes import (
    RecordingProgressReporter,
    stub_providers,
)

AppFactory = Callable[..., Quart]


@pytest.fixture
def build_app(tmp_path: Path) -> AppFactory:
    """Return a factory building the full route table over stub collaborators.

    ``providers`` defaults to deterministic stubs for every upstream; the upload store
    writes into the test's temporary directory.
    """

    def _build(
        settings: Settings,
        providers: dict[ProviderName, Any] | None = None,
    ) -> Quart:
        app = Quart(__name__)
        app.config["MAX_CONTENT_LENGTH"] = settings.UPLOAD_MAX_BYTES + 1024 * 1024
        setup_request_middleware(app)
        register_error_handlers(app, settings.UPLOAD_MAX_BYTES)
        register_blueprints(app)

        adapters = providers if providers is not None else stub_providers(settings)
        orchestrator = GatewayOrchestratorImpl(adapters, RecordingProgressReporter(), settings)

        provider = Provider()
        provider.provide(lambda: settings, scope=Scope.APP, provides=Settings)
        provider.provide(
            lambda: orchestrator, scope=Scope.APP, provides=GatewayOrchestratorProtocol
        )
        provider.provide(
            lambda: StrategyBasedTextExtractor(default_strategies()),
            scope=Scope.APP,
            provides=TextExtractorProtocol,
        )
        provider.provide(
            lambda: FileSystemUploadStore(tmp_path / "uploads"),
            scope=Scope.APP,
            provides=UploadStoreProtocol,
        )

        container = make_async_container(provider)
        QuartDishka(app=app, container=container)
        return app

    return _build
