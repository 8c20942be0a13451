"""Document to text extraction through the remote parse-document service."""

from __future__ import annotations

from loguru import logger

from slidesmith.configs.config import config
from slidesmith.core.exceptions import ApplicationError, MalformedResponseError
from slidesmith.remote.client import EdgeFunctionClient
from slidesmith.schemas.presentation import validate_upload

PARSE_DOCUMENT_FUNCTION = "parse-document"


async def extract_document_text(
    client: EdgeFunctionClient,
    filename: str,
    data: bytes,
    content_type: str | None = None,
    timeout: float | None = None,
) -> str:
    """Validate an uploaded file and return its text (single attempt, no retry)."""
    validate_upload(filename, len(data), content_type)
    logger.info(f"Extracting text from {filename} ({len(data)} bytes)")

    payload = await client.upload(
        PARSE_DOCUMENT_FUNCTION,
        filename,
        data,
        content_type,
        timeout if timeout is not None else config.extract_timeout,
    )
    if payload.get("error"):
        raise ApplicationError(str(payload["error"]))

    text = payload.get("text")
    if not isinstance(text, str):
        raise MalformedResponseError("La respuesta no contiene texto extraído")
    return text
