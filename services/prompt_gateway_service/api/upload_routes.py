"""Document upload routes."""

from __future__ import annotations

from pathlib import Path

from dishka import FromDishka
from quart import Blueprint, Response, jsonify, request
from quart_dishka import inject

from services.prompt_gateway_service.api_models import UploadResponse
from services.prompt_gateway_service.config import Settings
from services.prompt_gateway_service.error_handling import GatewayError
from services.prompt_gateway_service.error_types import ErrorCode
from services.prompt_gateway_service.logging_utils import create_service_logger
from services.prompt_gateway_service.metrics import get_metrics
from services.prompt_gateway_service.middleware import current_correlation_id
from services.prompt_gateway_service.protocols import TextExtractorProtocol, UploadStoreProtocol

logger = create_service_logger("prompt_gateway_service.api.upload")

upload_bp = Blueprint("upload", __name__)
legacy_upload_bp = Blueprint("legacy_upload", __name__)

INVALID_TYPE_MESSAGE = "Invalid file type. Only PDF, Word, and text files are allowed."


def _record_upload(content_type: str, status: str) -> None:
    get_metrics()["uploads_total"].labels(content_type=content_type or "none", status=status).inc()


async def _handle_upload(
    settings: Settings,
    text_extractor: TextExtractorProtocol,
    upload_store: UploadStoreProtocol,
) -> tuple[Response, int]:
    correlation_id = current_correlation_id()
    files = await request.files
    file_storage = files.get("file")

    if file_storage is None or not file_storage.filename:
        logger.warning("Upload request without a file")
        _record_upload("", "rejected")
        return jsonify({"success": False, "error": "No file received"}), 400

    content_type = file_storage.mimetype or ""
    if content_type not in settings.UPLOAD_ALLOWED_CONTENT_TYPES:
        logger.warning(f"Rejected upload with content type {content_type!r}")
        _record_upload(content_type, "rejected")
        return jsonify({"success": False, "error": INVALID_TYPE_MESSAGE}), 400

    file_content = file_storage.read()
    if len(file_content) > settings.UPLOAD_MAX_BYTES:
        max_mb = settings.UPLOAD_MAX_BYTES // (1024 * 1024)
        logger.warning(f"Rejected upload of {len(file_content)} bytes")
        _record_upload(content_type, "rejected")
        return jsonify(
            {"success": False, "error": f"File too large. Maximum size is {max_mb}MB."}
        ), 400

    try:
        stored_path = await upload_store.save(file_storage.filename, file_content, correlation_id)
        extracted_text = await text_extractor.extract_text(
            file_content, content_type, file_storage.filename, correlation_id
        )
    except GatewayError as e:
        if e.error_detail.error_code == ErrorCode.UNSUPPORTED_FORMAT:
            _record_upload(content_type, "unsupported")
            return jsonify({"success": False, "error": e.error_detail.message}), 415
        _record_upload(content_type, "failed")
        return jsonify({"success": False, "error": "Upload failed"}), 500

    _record_upload(content_type, "success")
    response = UploadResponse(
        filename=Path(stored_path).name,
        extractedText=extracted_text,
        fileSize=len(file_content),
        fileType=content_type,
    )
    logger.info(
        "Upload processed",
        stored_name=response.filename,
        file_size=response.fileSize,
        extracted_length=len(extracted_text),
    )
    return jsonify(response.model_dump()), 200


@upload_bp.route("/upload", methods=["POST"])
@inject
async def upload_document(
    settings: FromDishka[Settings],
    text_extractor: FromDishka[TextExtractorProtocol],
    upload_store: FromDishka[UploadStoreProtocol],
) -> tuple[Response, int]:
    """Accept a document and return its extracted text."""
    return await _handle_upload(settings, text_extractor, upload_store)


@legacy_upload_bp.route("/upload", methods=["POST"])
@inject
async def upload_document_legacy(
    settings: FromDishka[Settings],
    text_extractor: FromDishka[TextExtractorProtocol],
    upload_store: FromDishka[UploadStoreProtocol],
) -> tuple[Response, int]:
    return await _handle_upload(settings, text_extractor, upload_store)
