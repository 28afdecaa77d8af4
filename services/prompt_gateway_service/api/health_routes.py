"""Health check routes for the Prompt Gateway Service."""

from typing import Any, Dict

from dishka import FromDishka
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from quart import Blueprint, Response, jsonify
from quart_dishka import inject

from services.prompt_gateway_service.api_models import HealthCheckResponse
from services.prompt_gateway_service.config import Settings
from services.prompt_gateway_service.enums import ProviderName
from services.prompt_gateway_service.logging_utils import create_service_logger

health_bp = Blueprint("health", __name__)

SERVICE_VERSION = "1.0.0"


@health_bp.route("/healthz", methods=["GET"])
@inject
async def health_check(settings: FromDishka[Settings]) -> tuple[Response, int]:
    """Health check endpoint; unhealthy when no provider has credentials configured."""
    logger = create_service_logger("prompt_gateway_service.api.health")
    logger.info("Health check requested")

    providers: Dict[str, Dict[str, Any]] = {}
    for provider in ProviderName:
        missing = settings.missing_credentials(provider)
        providers[provider.value] = {"configured": not missing, "missing": missing}

    health = HealthCheckResponse(
        status="healthy",
        service=settings.SERVICE_NAME,
        version=SERVICE_VERSION,
        environment=settings.ENVIRONMENT.value,
        providers=providers,
    )

    if not any(p["configured"] for p in providers.values()):
        health.status = "unhealthy"
        health.warnings.append("No LLM providers configured")

    status_code = 200 if health.status == "healthy" else 503
    return jsonify(health.model_dump()), status_code


@health_bp.route("/metrics", methods=["GET"])
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(generate_latest(), content_type=CONTENT_TYPE_LATEST)
