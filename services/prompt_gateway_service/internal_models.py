"""Internal Pydantic models for the Prompt Gateway Service."""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from services.prompt_gateway_service.enums import ExpectedShape, ProviderName
from services.prompt_gateway_service.error_types import ErrorCode


class ModelParams(BaseModel):
    """Generation parameters sent to an upstream provider."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model: str
    max_tokens: int = Field(gt=0)
    temperature: float = Field(ge=0.0, le=2.0)


class ResolvedPrompt(BaseModel):
    """Result of mapping an action onto a provider-specific instruction."""

    model_config = ConfigDict(frozen=True)

    system_instruction: str = Field(min_length=1)
    model_params: ModelParams
    expected_shape: ExpectedShape = ExpectedShape.PLAIN


class ProcessingRequest(BaseModel):
    """Abstract processing request accepted by the gateway orchestrator."""

    content: str | None = None
    action: str | None = None


class ProviderTextResponse(BaseModel):
    """Text extracted from a successful upstream response."""

    text: str
    provider: ProviderName
    model: str
    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)
    raw_response: dict[str, Any] = Field(default_factory=dict)


class NormalizedSuccess(BaseModel):
    """Successful gateway result."""

    success: Literal[True] = True
    processed_text: str
    payload: dict[str, Any] | None = None
    degraded: bool = False

    def to_response_body(self) -> dict[str, Any]:
        return {"success": True, "processedText": self.processed_text}


class NormalizedError(BaseModel):
    """Failed gateway result."""

    success: Literal[False] = False
    error: str
    details: Any = None
    status_code: int = 500
    error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR

    def to_response_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": False, "error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


NormalizedResult = Union[NormalizedSuccess, NormalizedError]


class FilesBundle(BaseModel):
    """Generated multi-file project: ``{files: {path: content}, description}``."""

    model_config = ConfigDict(populate_by_name=True)

    files: dict[str, str] = Field(min_length=1)
    description: str
    stackblitz_config: dict[str, Any] | None = Field(default=None, alias="stackblitzConfig")


class CodeTriple(BaseModel):
    """Generated single-page artifact: ``{html, css, js}``."""

    html: str
    css: str
    js: str


class EditBundle(BaseModel):
    """Result of an edit request: updated files plus an explanation of the changes."""

    files: dict[str, str]
    explanation: str
    changes: list[str] = Field(default_factory=list)


SHAPE_SCHEMAS: dict[ExpectedShape, type[BaseModel]] = {
    ExpectedShape.JSON_FILES_BUNDLE: FilesBundle,
    ExpectedShape.JSON_CODE_TRIPLE: CodeTriple,
    ExpectedShape.JSON_EDIT_BUNDLE: EditBundle,
}
