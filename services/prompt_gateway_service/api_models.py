"""API request/response models for the Prompt Gateway Service."""

from typing import Any

from pydantic import BaseModel, Field


class ProcessRequestBody(BaseModel):
    """Body of the generic content processor endpoints.

    Both fields are optional here; presence is checked by the orchestrator so that a
    missing field yields the gateway's own validation error.
    """

    text: str | None = None
    action: str | None = None


class CodeRequestBody(BaseModel):
    """Body of the html/css/js code endpoint."""

    prompt: str | None = None


class CodeResponse(BaseModel):
    """Successful code endpoint response."""

    success: bool = True
    code: dict[str, str]


class UploadResponse(BaseModel):
    """Successful document upload response."""

    success: bool = True
    filename: str
    extractedText: str
    fileSize: int
    fileType: str


class ProviderStatus(BaseModel):
    """Configuration status of a single provider."""

    name: str
    display_name: str
    configured: bool
    missing_credentials: list[str] = Field(default_factory=list)
    default_model: str


class ProviderListResponse(BaseModel):
    """Response model for listing providers."""

    providers: list[ProviderStatus]
    code_generation_provider: str


class HealthCheckResponse(BaseModel):
    """Health check response model."""

    status: str = Field(description="Service status")
    service: str = Field(description="Service name")
    version: str = Field(description="Service version")
    environment: str
    providers: dict[str, dict[str, Any]] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
