"""Shared enumerations for the Prompt Gateway Service."""

from __future__ import annotations

from enum import StrEnum


class ProviderName(StrEnum):
    """Upstream LLM providers reachable through the gateway."""

    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    GROQ = "groq"
    AZURE_OPENAI = "azure_openai"


class ActionKind(StrEnum):
    """Named intents selecting the system instruction and output shape."""

    CHAT = "chat"
    SUMMARIZE = "summarize"
    ENHANCE = "enhance"
    GENERATE = "generate"
    EDIT = "edit"


class ExpectedShape(StrEnum):
    """Output shapes the response normalizer knows how to handle."""

    PLAIN = "plain"
    JSON_FILES_BUNDLE = "json_files_bundle"
    JSON_CODE_TRIPLE = "json_code_triple"
    JSON_EDIT_BUNDLE = "json_edit_bundle"


class ProcessingStage(StrEnum):
    """Lifecycle of a single gateway call, emitted on the progress channel."""

    RECEIVED = "received"
    VALIDATED = "validated"
    CREDENTIAL_CHECKED = "credential_checked"
    DISPATCHED = "dispatched"
    NORMALIZED_SUCCESS = "normalized_success"
    NORMALIZED_ERROR = "normalized_error"


class Environment(StrEnum):
    """Runtime environment for the service."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"
