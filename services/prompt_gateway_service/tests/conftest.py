"""Shared fixtures for Prompt Gateway Service tests."""

from __future__ import annotations

from uuid import UUID, uuid4

import pytest

from services.prompt_gateway_service.config import Settings
from services.prompt_gateway_service.tests.provider_fakes import make_settings


@pytest.fixture
def settings() -> Settings:
    """Settings with all provider credentials present."""
    return make_settings()


@pytest.fixture
def correlation_id() -> UUID:
    return uuid4()
