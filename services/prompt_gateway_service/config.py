"""Configuration module for the Prompt Gateway Service."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from services.prompt_gateway_service.enums import Environment, ProviderName

PROVIDER_DISPLAY_NAMES: dict[ProviderName, str] = {
    ProviderName.ANTHROPIC: "Claude",
    ProviderName.GOOGLE: "Gemini",
    ProviderName.GROQ: "Groq",
    ProviderName.AZURE_OPENAI: "Azure OpenAI",
}


class Settings(BaseSettings):
    """Configuration settings for the Prompt Gateway Service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PROMPT_GATEWAY_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Service Identity
    SERVICE_NAME: str = "prompt_gateway_service"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        validation_alias="ENVIRONMENT",  # Read from global ENVIRONMENT var
        description="Runtime environment for the service",
    )
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Global LLM Configuration (can be overridden per provider)
    PROVIDER_REQUEST_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        description="Timeout applied uniformly to every upstream provider call",
    )
    LLM_DEFAULT_TEMPERATURE: float = 0.7
    LLM_DEFAULT_MAX_TOKENS: int = 4000
    CODE_GENERATION_PROVIDER: ProviderName = Field(
        default=ProviderName.ANTHROPIC,
        description="Provider serving the html/css/js code endpoint",
    )

    # Provider-specific configurations
    ANTHROPIC_API_KEY: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices(
            "PROMPT_GATEWAY_ANTHROPIC_API_KEY",
            "ANTHROPIC_API_KEY",
            "CLAUDE_API_KEY",
        ),
        description="Anthropic API key for Claude models",
    )
    ANTHROPIC_BASE_URL: str = "https://api.anthropic.com/v1"
    ANTHROPIC_API_VERSION: str = "2023-06-01"
    ANTHROPIC_DEFAULT_MODEL: str = "claude-sonnet-4-20250514"

    GOOGLE_API_KEY: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices(
            "PROMPT_GATEWAY_GOOGLE_API_KEY",
            "GEMINI_API_KEY",
            "GOOGLE_API_KEY",
        ),
        description="Google API key for Gemini models",
    )
    GOOGLE_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GOOGLE_DEFAULT_MODEL: str = "gemini-2.5-flash"

    GROQ_API_KEY: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("PROMPT_GATEWAY_GROQ_API_KEY", "GROQ_API_KEY"),
        description="Groq API key for OpenAI-compatible chat completions",
    )
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"
    GROQ_DEFAULT_MODEL: str = "llama-3.1-8b-instant"

    AZURE_OPENAI_API_KEY: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices(
            "PROMPT_GATEWAY_AZURE_OPENAI_API_KEY", "AZURE_OPENAI_API_KEY"
        ),
        description="Azure OpenAI resource key",
    )
    AZURE_OPENAI_ENDPOINT: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "PROMPT_GATEWAY_AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_ENDPOINT"
        ),
        description="Azure OpenAI resource endpoint, e.g. https://<name>.openai.azure.com",
    )
    AZURE_OPENAI_DEPLOYMENT: str = "gpt-4.1"
    AZURE_OPENAI_API_VERSION: str = "2025-01-01-preview"
    AZURE_OPENAI_DEFAULT_MODEL: str = "gpt-4"

    # Document upload
    UPLOAD_MAX_BYTES: int = 10 * 1024 * 1024
    UPLOAD_TMP_DIR: str = "tmp"
    UPLOAD_ALLOWED_CONTENT_TYPES: list[str] = Field(
        default_factory=lambda: [
            "application/pdf",
            "application/msword",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "text/plain",
        ]
    )

    @field_validator("AZURE_OPENAI_ENDPOINT")
    @classmethod
    def strip_endpoint_slash(cls, v: Optional[str]) -> Optional[str]:
        """Normalize the Azure endpoint so paths can be appended."""
        if v is None:
            return None
        return v.strip().rstrip("/") or None

    def credential_env_names(self, provider: ProviderName) -> list[str]:
        """Environment variables a provider needs, in the order they are reported."""
        if provider == ProviderName.AZURE_OPENAI:
            return ["AZURE_OPENAI_API_KEY", "AZURE_OPENAI_ENDPOINT"]
        if provider == ProviderName.ANTHROPIC:
            return ["CLAUDE_API_KEY"]
        if provider == ProviderName.GOOGLE:
            return ["GEMINI_API_KEY"]
        return ["GROQ_API_KEY"]

    def missing_credentials(self, provider: ProviderName) -> list[str]:
        """Return the environment variable names of absent credentials for a provider."""
        present: dict[str, bool] = {
            "CLAUDE_API_KEY": bool(self.ANTHROPIC_API_KEY.get_secret_value()),
            "GEMINI_API_KEY": bool(self.GOOGLE_API_KEY.get_secret_value()),
            "GROQ_API_KEY": bool(self.GROQ_API_KEY.get_secret_value()),
            "AZURE_OPENAI_API_KEY": bool(self.AZURE_OPENAI_API_KEY.get_secret_value()),
            "AZURE_OPENAI_ENDPOINT": bool(self.AZURE_OPENAI_ENDPOINT),
        }
        return [name for name in self.credential_env_names(provider) if not present[name]]


def credentials_missing_message(provider: ProviderName, missing: list[str]) -> str:
    """Client-facing message for an unconfigured provider."""
    display_name = PROVIDER_DISPLAY_NAMES[provider]
    if provider == ProviderName.AZURE_OPENAI:
        # Key and endpoint are always reported together
        missing = ["AZURE_OPENAI_API_KEY", "AZURE_OPENAI_ENDPOINT"]
        noun = "credentials"
    else:
        noun = "API key"
    return (
        f"{display_name} {noun} not configured. "
        f"Please add {' and '.join(missing)} to your environment variables."
    )


# Process-level settings for server bootstrap; request handlers receive fresh instances
settings = Settings()
