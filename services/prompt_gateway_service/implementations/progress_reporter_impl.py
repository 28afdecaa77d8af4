"""Progress reporter that logs orchestrator stage transitions."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from services.prompt_gateway_service.enums import ProcessingStage
from services.prompt_gateway_service.logging_utils import create_service_logger
from services.prompt_gateway_service.protocols import ProgressReporterProtocol

logger = create_service_logger("prompt_gateway_service.progress")


class LoggingProgressReporter(ProgressReporterProtocol):
    """Emit every orchestrator stage transition as a structured log line."""

    async def stage_entered(
        self,
        stage: ProcessingStage,
        correlation_id: UUID,
        **context: Any,
    ) -> None:
        logger.debug(
            f"Gateway stage: {stage.value}",
            stage=stage.value,
            correlation_id=str(correlation_id),
            **context,
        )
