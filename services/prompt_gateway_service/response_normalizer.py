"""Response normalization for the Prompt Gateway Service.

Converts raw upstream text into the single stable result shape. JSON output shapes are
parsed and validated against their pydantic schema; output that fails either step is
replaced by a degraded fallback payload. The fallback is logged and counted, and never
raises.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable

from pydantic import ValidationError

from services.prompt_gateway_service.enums import ExpectedShape
from services.prompt_gateway_service.fallback_payloads import (
    fallback_code_triple,
    fallback_edit_bundle,
    fallback_files_bundle,
)
from services.prompt_gateway_service.internal_models import SHAPE_SCHEMAS, NormalizedSuccess
from services.prompt_gateway_service.logging_utils import create_service_logger
from services.prompt_gateway_service.metrics import get_metrics

logger = create_service_logger("prompt_gateway_service.response_normalizer")

# Optional ```json ... ``` wrapper around the whole response
CODE_FENCE_PATTERN = re.compile(r"^\s*```[A-Za-z0-9_-]*\s*\n(.*?)\n?\s*```\s*$", re.DOTALL)

_FALLBACKS: dict[ExpectedShape, Callable[[str], dict[str, Any]]] = {
    ExpectedShape.JSON_FILES_BUNDLE: fallback_files_bundle,
    ExpectedShape.JSON_CODE_TRIPLE: fallback_code_triple,
    ExpectedShape.JSON_EDIT_BUNDLE: fallback_edit_bundle,
}


def strip_code_fence(raw_text: str) -> str:
    """Remove a markdown code fence wrapping the entire text, if present."""
    match = CODE_FENCE_PATTERN.match(raw_text)
    if match:
        return match.group(1)
    return raw_text.strip()


def normalize(raw_text: str, expected_shape: ExpectedShape) -> NormalizedSuccess:
    """Normalize upstream text for the expected output shape.

    Args:
        raw_text: Text extracted from the upstream envelope
        expected_shape: Output shape requested by the resolved prompt

    Returns:
        NormalizedSuccess; ``payload`` holds the parsed structure for JSON shapes and
        ``degraded`` marks a fallback substitution.
    """
    if expected_shape == ExpectedShape.PLAIN:
        return NormalizedSuccess(processed_text=raw_text)

    schema = SHAPE_SCHEMAS[expected_shape]
    try:
        parsed = json.loads(strip_code_fence(raw_text))
        validated = schema.model_validate(parsed)
    except json.JSONDecodeError as e:
        return _fallback(raw_text, expected_shape, reason=f"Invalid JSON: {e.msg}")
    except ValidationError as e:
        return _fallback(
            raw_text,
            expected_shape,
            reason=f"Schema mismatch: {e.error_count()} validation error(s)",
        )

    return NormalizedSuccess(
        processed_text=raw_text,
        payload=validated.model_dump(by_alias=True, exclude_none=True),
    )


def _fallback(raw_text: str, expected_shape: ExpectedShape, reason: str) -> NormalizedSuccess:
    logger.warning(
        "Structured response did not match expected shape, using fallback payload",
        expected_shape=expected_shape.value,
        reason=reason,
        raw_length=len(raw_text),
    )
    get_metrics()["normalization_fallbacks_total"].labels(shape=expected_shape.value).inc()

    payload = _FALLBACKS[expected_shape](raw_text)
    return NormalizedSuccess(
        processed_text=json.dumps(payload),
        payload=payload,
        degraded=True,
    )
