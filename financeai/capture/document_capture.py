"""Document capture for chat attachments.

Reads user-selected files into CapturedDocument records. Text-like files are
decoded, everything else is carried as base64 so opaque formats (office
documents, PDFs) can still be sent without parsing their structure.
"""

import asyncio
import base64
import logging
from typing import Protocol

from fastapi import UploadFile
from pydantic import BaseModel, PositiveInt

from financeai.models.schemas import (
    CaptureBatch,
    CapturedDocument,
    CaptureFailure,
    CaptureFailureReason,
    DocumentEncoding,
)

logger = logging.getLogger(__name__)

# Constants
TEXT_EXTENSIONS = (".txt", ".csv", ".json")
TEXT_MEDIA_MARKER = "text"


class CaptureLimits(BaseModel):
    """Optional size ceiling for a single captured document.

    Attributes:
        max_document_bytes: Largest accepted file, or None for no limit.
    """

    max_document_bytes: PositiveInt | None = None


class DocumentCaptureError(Exception):
    """Raised when a single file cannot be captured."""

    def __init__(self, name: str, reason: CaptureFailureReason, detail: str) -> None:
        self.name = name
        self.reason = reason
        self.detail = detail
        super().__init__(f"Failed to capture {name}: {detail}")


class SourceFile(Protocol):
    """A file offered for capture."""

    name: str
    size_bytes: int
    media_type_hint: str

    async def read(self) -> bytes: ...


class BytesSource:
    """In-memory file content, as delivered by the UI upload widget."""

    def __init__(self, name: str, content: bytes, media_type_hint: str = "") -> None:
        self.name = name
        self.size_bytes = len(content)
        self.media_type_hint = media_type_hint
        self._content = content

    async def read(self) -> bytes:
        return self._content


class UploadSource:
    """Adapter for a FastAPI multipart upload."""

    def __init__(self, upload: UploadFile) -> None:
        self.name = upload.filename or ""
        self.size_bytes = upload.size or 0
        self.media_type_hint = upload.content_type or ""
        self._upload = upload

    async def read(self) -> bytes:
        return await self._upload.read()


def choose_encoding(name: str, media_type_hint: str) -> DocumentEncoding:
    """Decide whether a file is captured as text or base64.

    Args:
        name: Original file name.
        media_type_hint: Reported media type, may be empty.

    Returns:
        TEXT for text media types and .txt/.csv/.json names, else BINARY_BASE64.
    """
    if TEXT_MEDIA_MARKER in (media_type_hint or ""):
        return DocumentEncoding.TEXT
    if name.endswith(TEXT_EXTENSIONS):
        return DocumentEncoding.TEXT
    return DocumentEncoding.BINARY_BASE64


def _check_size(name: str, size: int, limits: CaptureLimits) -> None:
    """Raise TOO_LARGE when size exceeds the configured ceiling."""
    if limits.max_document_bytes is not None and size > limits.max_document_bytes:
        raise DocumentCaptureError(
            name,
            CaptureFailureReason.TOO_LARGE,
            f"File size ({size} bytes) exceeds maximum allowed "
            f"({limits.max_document_bytes} bytes)",
        )


def _encode_payload(content: bytes, encoding: DocumentEncoding) -> str:
    if encoding is DocumentEncoding.TEXT:
        return content.decode("utf-8", errors="replace")
    return base64.b64encode(content).decode("ascii")


async def capture_document(
    source: SourceFile,
    limits: CaptureLimits | None = None,
) -> CapturedDocument:
    """Read one file completely and wrap it as a CapturedDocument.

    Args:
        source: The file to read.
        limits: Optional size ceiling.

    Returns:
        CapturedDocument with a fully materialized payload.

    Raises:
        DocumentCaptureError: If the file cannot be read or is too large.
    """
    limits = limits or CaptureLimits()
    _check_size(source.name, source.size_bytes, limits)

    try:
        content = await source.read()
    except Exception as e:
        raise DocumentCaptureError(
            source.name, CaptureFailureReason.READ_ERROR, str(e) or type(e).__name__
        ) from e

    # Declared sizes from uploads are not always accurate
    _check_size(source.name, len(content), limits)

    encoding = choose_encoding(source.name, source.media_type_hint)
    return CapturedDocument(
        name=source.name,
        size_bytes=len(content),
        media_type_hint=source.media_type_hint or "",
        encoding=encoding,
        payload=_encode_payload(content, encoding),
    )


async def _capture_slot(
    source: SourceFile,
    limits: CaptureLimits,
) -> CapturedDocument | CaptureFailure:
    try:
        return await capture_document(source, limits)
    except DocumentCaptureError as e:
        logger.warning(f"Dropping {e.name} from capture batch: {e.detail}")
        return CaptureFailure(name=e.name, reason=e.reason, detail=e.detail)


async def capture_documents(
    sources: list[SourceFile],
    limits: CaptureLimits | None = None,
) -> CaptureBatch:
    """Capture a batch of files concurrently.

    Each file is read independently; a failing file is recorded as a
    CaptureFailure and never affects the others.

    Args:
        sources: Files selected by the user, in display order.
        limits: Optional size ceiling applied to each file.

    Returns:
        CaptureBatch with documents in input order plus the failures.
    """
    limits = limits or CaptureLimits()
    results = await asyncio.gather(*(_capture_slot(s, limits) for s in sources))

    batch = CaptureBatch()
    for result in results:
        if isinstance(result, CapturedDocument):
            batch.documents.append(result)
        else:
            batch.failures.append(result)

    logger.info(
        f"Captured {len(batch.documents)} of {len(sources)} documents "
        f"({len(batch.failures)} failed)"
    )
    return batch
