"""Startup and shutdown procedures for the Prompt Gateway Service."""

from __future__ import annotations

from dishka import make_async_container
from quart import Quart
from quart_dishka import QuartDishka

from services.prompt_gateway_service.config import Settings
from services.prompt_gateway_service.di import PromptGatewayServiceProvider
from services.prompt_gateway_service.enums import ProviderName
from services.prompt_gateway_service.logging_utils import (
    configure_service_logging,
    create_service_logger,
)
from services.prompt_gateway_service.metrics import get_metrics


def setup_dependency_injection(app: Quart) -> None:
    """Create the DI container and attach it to the app."""
    container = make_async_container(PromptGatewayServiceProvider())
    QuartDishka(app=app, container=container)
    app.extensions["dishka_container"] = container


async def initialize_services(app: Quart, settings: Settings) -> None:
    """Initialize logging, metrics and report provider configuration."""
    configure_service_logging(
        settings.SERVICE_NAME,
        environment=settings.ENVIRONMENT.value,
        log_level=settings.LOG_LEVEL,
    )
    logger = create_service_logger("prompt_gateway_service.startup")
    logger.info(f"Starting {settings.SERVICE_NAME} initialization...")

    _ = get_metrics()
    logger.info("Metrics initialized")

    # Credentials are re-read per request; this only reports what the process started with
    for provider in ProviderName:
        missing = settings.missing_credentials(provider)
        if missing:
            logger.warning(f"Provider {provider.value} not configured", missing=missing)
        else:
            logger.info(f"Provider {provider.value} configured")

    logger.info(f"{settings.SERVICE_NAME} initialization complete")


async def shutdown_services(app: Quart) -> None:
    """Gracefully shutdown all services."""
    logger = create_service_logger("prompt_gateway_service.startup")
    logger.info("Starting graceful shutdown...")

    if "dishka_container" in app.extensions:
        container = app.extensions["dishka_container"]
        # Closing the container closes the shared HTTP session
        await container.close()
        logger.info("DI container closed")

    logger.info("Graceful shutdown complete")
