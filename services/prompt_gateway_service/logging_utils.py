"""Structured logging for the Prompt Gateway Service using structlog.

Request-scoped fields (correlation ID, provider, action) live in contextvars and are merged
into every event. Output is a colored console in development and JSON in production, with an
optional rotating log file.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any
from uuid import UUID

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars
from structlog.typing import EventDict, Processor, WrappedLogger

DEFAULT_LOG_MAX_BYTES = 100 * 1024 * 1024
DEFAULT_LOG_BACKUP_COUNT = 10


def service_context_processor(service_name: str, environment: str) -> Processor:
    """Return a processor stamping service identity onto every event."""

    def add_service_context(
        logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict["service.name"] = service_name
        event_dict["deployment.environment"] = environment
        return event_dict

    return add_service_context


def _use_json_output(environment: str) -> bool:
    log_format = os.getenv("LOG_FORMAT", "").lower()
    if log_format:
        return log_format == "json"
    return environment == "production"


def _rotating_file_handler(service_name: str, log_file_path: str | None) -> logging.Handler:
    log_file = Path(log_file_path or os.getenv("LOG_FILE_PATH", f"logs/{service_name}.log"))
    log_file.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(log_file),
        maxBytes=int(os.getenv("LOG_MAX_BYTES", str(DEFAULT_LOG_MAX_BYTES))),
        backupCount=int(os.getenv("LOG_BACKUP_COUNT", str(DEFAULT_LOG_BACKUP_COUNT))),
        encoding="utf-8",
    )


def configure_service_logging(
    service_name: str,
    environment: str = "development",
    log_level: str = "INFO",
    log_to_file: bool | None = None,
    log_file_path: str | None = None,
) -> None:
    """
    Configure structlog and the stdlib root logger for the service.

    Args:
        service_name: Name stamped on every event as ``service.name``
        environment: Deployment environment; production defaults to JSON output
        log_level: Minimum level for emitted events
        log_to_file: Also write to a rotating file (defaults to the LOG_TO_FILE env var)
        log_file_path: Log file location (defaults to LOG_FILE_PATH or logs/<service>.log)

    Environment Variables:
        LOG_FORMAT: "json" or "console", overriding the environment default
        LOG_MAX_BYTES / LOG_BACKUP_COUNT: Rotation limits for the log file
    """
    if log_to_file is None:
        log_to_file = os.getenv("LOG_TO_FILE", "false").lower() in ("true", "1", "yes")

    processors: list[Processor] = [
        merge_contextvars,
        service_context_processor(service_name, environment),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
    ]
    if _use_json_output(environment):
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors += [structlog.dev.set_exc_info, structlog.dev.ConsoleRenderer(colors=True)]

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_to_file:
        handlers.append(_rotating_file_handler(service_name, log_file_path))

    logging.basicConfig(
        format="%(message)s",
        handlers=handlers,
        level=getattr(logging, log_level.upper(), logging.INFO),
        force=True,
    )
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def create_service_logger(name: str | None = None) -> Any:
    """Return a structlog logger, bound to ``logger_name`` when a name is given."""
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger_name=name)
    return logger


def bind_request_context(
    correlation_id: UUID,
    provider: str | None = None,
    action: str | None = None,
) -> None:
    """Bind per-request fields so every log line of the request carries them."""
    clear_contextvars()
    context: dict[str, Any] = {"correlation_id": str(correlation_id)}
    if provider:
        context["provider"] = provider
    if action:
        context["action"] = action
    bind_contextvars(**context)
