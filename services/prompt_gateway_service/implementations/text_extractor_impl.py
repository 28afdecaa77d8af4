"""Text extractor implementation using Strategy pattern."""

from __future__ import annotations

from typing import Protocol, runtime_checkable
from uuid import UUID

from services.prompt_gateway_service.error_handling import raise_unsupported_format_error
from services.prompt_gateway_service.logging_utils import create_service_logger
from services.prompt_gateway_service.protocols import TextExtractorProtocol

logger = create_service_logger("prompt_gateway_service.text_extractor")


@runtime_checkable
class ExtractionStrategy(Protocol):
    """Protocol for content-type extraction strategies."""

    async def extract(self, file_content: bytes, file_name: str, correlation_id: UUID) -> str:
        """Extract text from file content."""
        ...


class PlainTextExtractionStrategy:
    """Extract text from text/plain uploads."""

    async def extract(self, file_content: bytes, file_name: str, correlation_id: UUID) -> str:
        text = file_content.decode("utf-8", errors="replace")
        logger.info(
            f"Extracted {len(text)} characters from {file_name}",
            correlation_id=str(correlation_id),
        )
        return text


def default_strategies() -> dict[str, ExtractionStrategy]:
    """Strategies for the content types that have a real extractor."""
    return {"text/plain": PlainTextExtractionStrategy()}


class StrategyBasedTextExtractor(TextExtractorProtocol):
    """Selects an extraction strategy by content type.

    Accepted upload types without a strategy (PDF, Word) fail with UNSUPPORTED_FORMAT
    instead of producing placeholder text.
    """

    def __init__(self, strategies: dict[str, ExtractionStrategy]):
        self._strategies = strategies

    async def extract_text(
        self, file_content: bytes, content_type: str, file_name: str, correlation_id: UUID
    ) -> str:
        media_type = content_type.split(";", 1)[0].strip().lower()
        strategy = self._strategies.get(media_type)

        if strategy is None:
            raise_unsupported_format_error(
                operation="extract_text",
                content_type=media_type,
                message=f"Text extraction is not supported for file type '{media_type}'.",
                correlation_id=correlation_id,
                file_name=file_name,
            )

        return await strategy.extract(file_content, file_name, correlation_id)
