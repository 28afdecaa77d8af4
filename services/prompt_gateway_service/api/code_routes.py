"""HTML/CSS/JS code generation routes."""

from __future__ import annotations

from dishka import FromDishka
from pydantic import ValidationError
from quart import Blueprint, Response, jsonify
from quart_dishka import inject

from services.prompt_gateway_service.api.process_routes import read_json_body
from services.prompt_gateway_service.api_models import CodeRequestBody, CodeResponse
from services.prompt_gateway_service.logging_utils import create_service_logger
from services.prompt_gateway_service.middleware import current_correlation_id
from services.prompt_gateway_service.protocols import GatewayOrchestratorProtocol

logger = create_service_logger("prompt_gateway_service.api.code")

code_bp = Blueprint("code", __name__)
legacy_code_bp = Blueprint("legacy_code", __name__)


async def _generate_code(orchestrator: GatewayOrchestratorProtocol) -> tuple[Response, int]:
    correlation_id = current_correlation_id()

    try:
        body = CodeRequestBody.model_validate(await read_json_body())
    except ValidationError:
        return jsonify({"success": False, "error": "Prompt is required"}), 400

    result = await orchestrator.generate_code_triple(body.prompt, correlation_id)

    if not result.success:
        return jsonify(result.to_response_body()), result.status_code

    code = result.payload or {}
    logger.info(
        "Returning generated code",
        html_length=len(code.get("html", "")),
        css_length=len(code.get("css", "")),
        js_length=len(code.get("js", "")),
        degraded=result.degraded,
    )
    return jsonify(CodeResponse(code=code).model_dump()), 200


@code_bp.route("/code", methods=["POST"])
@inject
async def generate_code(
    orchestrator: FromDishka[GatewayOrchestratorProtocol],
) -> tuple[Response, int]:
    """Generate an html/css/js artifact from a prompt."""
    return await _generate_code(orchestrator)


@legacy_code_bp.route("/claude", methods=["POST"])
@inject
async def generate_code_with_claude(
    orchestrator: FromDishka[GatewayOrchestratorProtocol],
) -> tuple[Response, int]:
    return await _generate_code(orchestrator)
