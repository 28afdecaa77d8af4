"""Content processing routes: one generic processor per upstream provider."""

from __future__ import annotations

from typing import Any

from dishka import FromDishka
from pydantic import ValidationError
from quart import Blueprint, Response, jsonify, request
from quart_dishka import inject

from services.prompt_gateway_service.api_models import (
    ProcessRequestBody,
    ProviderListResponse,
    ProviderStatus,
)
from services.prompt_gateway_service.config import PROVIDER_DISPLAY_NAMES, Settings
from services.prompt_gateway_service.enums import ProviderName
from services.prompt_gateway_service.internal_models import ProcessingRequest
from services.prompt_gateway_service.logging_utils import (
    bind_request_context,
    create_service_logger,
)
from services.prompt_gateway_service.middleware import current_correlation_id
from services.prompt_gateway_service.prompt_resolver import default_model_for
from services.prompt_gateway_service.protocols import GatewayOrchestratorProtocol

logger = create_service_logger("prompt_gateway_service.api.process")

process_bp = Blueprint("process", __name__)
legacy_process_bp = Blueprint("legacy_process", __name__)


async def read_json_body() -> dict[str, Any]:
    """Return the JSON object body, or an empty dict for absent or non-object bodies."""
    data = await request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


async def _process_with(
    orchestrator: GatewayOrchestratorProtocol, provider: ProviderName
) -> tuple[Response, int]:
    correlation_id = current_correlation_id()
    data = await read_json_body()

    try:
        body = ProcessRequestBody.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Invalid process request body: {e.error_count()} error(s)")
        return jsonify({"success": False, "error": "Text and action are required"}), 400

    bind_request_context(correlation_id, provider=provider.value, action=body.action)
    logger.info(
        "Processing request received",
        text_length=len(body.text or ""),
    )

    result = await orchestrator.handle(
        ProcessingRequest(content=body.text, action=body.action),
        provider,
        correlation_id,
    )

    if result.success:
        return jsonify(result.to_response_body()), 200
    return jsonify(result.to_response_body()), result.status_code


@process_bp.route("/process/<provider>", methods=["POST"])
@inject
async def process_content(
    provider: str,
    orchestrator: FromDishka[GatewayOrchestratorProtocol],
) -> tuple[Response, int]:
    """Process text through the named provider."""
    try:
        provider_name = ProviderName(provider)
    except ValueError:
        available = [p.value for p in ProviderName]
        return jsonify(
            {
                "success": False,
                "error": f"Unknown provider '{provider}'",
                "details": {"available_providers": available},
            }
        ), 404

    return await _process_with(orchestrator, provider_name)


@legacy_process_bp.route("/groq", methods=["POST"])
@inject
async def process_with_groq(
    orchestrator: FromDishka[GatewayOrchestratorProtocol],
) -> tuple[Response, int]:
    return await _process_with(orchestrator, ProviderName.GROQ)


@legacy_process_bp.route("/gemini", methods=["POST"])
@inject
async def process_with_gemini(
    orchestrator: FromDishka[GatewayOrchestratorProtocol],
) -> tuple[Response, int]:
    return await _process_with(orchestrator, ProviderName.GOOGLE)


@legacy_process_bp.route("/openai", methods=["POST"])
@inject
async def process_with_azure_openai(
    orchestrator: FromDishka[GatewayOrchestratorProtocol],
) -> tuple[Response, int]:
    return await _process_with(orchestrator, ProviderName.AZURE_OPENAI)


@process_bp.route("/providers", methods=["GET"])
@inject
async def list_providers(settings: FromDishka[Settings]) -> tuple[Response, int]:
    """List upstream providers and whether their credentials are configured."""
    providers = []
    for provider in ProviderName:
        missing = settings.missing_credentials(provider)
        providers.append(
            ProviderStatus(
                name=provider.value,
                display_name=PROVIDER_DISPLAY_NAMES[provider],
                configured=not missing,
                missing_credentials=missing,
                default_model=default_model_for(provider, settings),
            )
        )

    response = ProviderListResponse(
        providers=providers,
        code_generation_provider=settings.CODE_GENERATION_PROVIDER.value,
    )
    return jsonify(response.model_dump()), 200
