"""Filesystem storage for uploaded documents."""

from __future__ import annotations

import time
from pathlib import Path
from uuid import UUID

import aiofiles
import aiofiles.os
from werkzeug.utils import secure_filename

from services.prompt_gateway_service.error_handling import raise_processing_error
from services.prompt_gateway_service.logging_utils import create_service_logger
from services.prompt_gateway_service.protocols import UploadStoreProtocol

logger = create_service_logger("prompt_gateway_service.upload_store")


def stored_file_name(file_name: str, epoch_ms: int) -> str:
    """Return ``<epoch-ms>-<secure filename>``; unusable names become ``upload``."""
    return f"{epoch_ms}-{secure_filename(file_name) or 'upload'}"


class FileSystemUploadStore(UploadStoreProtocol):
    """Writes uploads into the temporary upload directory."""

    def __init__(self, upload_dir: Path) -> None:
        self.upload_dir = upload_dir

    async def save(self, file_name: str, file_content: bytes, correlation_id: UUID) -> str:
        """
        Save an uploaded file and return its path.

        Args:
            file_name: Client-supplied file name, sanitized before use
            file_content: Raw uploaded bytes
            correlation_id: Request correlation ID for tracing

        Raises:
            GatewayError: PROCESSING_ERROR if the file cannot be written
        """
        file_path = self.upload_dir / stored_file_name(file_name, int(time.time() * 1000))

        try:
            await aiofiles.os.makedirs(self.upload_dir, exist_ok=True)
            async with aiofiles.open(file_path, "wb") as f:
                await f.write(file_content)
        except OSError as e:
            logger.error(
                f"Failed to store upload: {e}",
                correlation_id=str(correlation_id),
                exc_info=True,
            )
            raise_processing_error(
                operation="save_upload",
                message=f"Failed to store upload: {e}",
                correlation_id=correlation_id,
                file_path=str(file_path),
            )

        logger.info(
            f"Stored upload at {file_path}",
            correlation_id=str(correlation_id),
            size=len(file_content),
        )
        return str(file_path)
