"""Document capture endpoint for chat attachments.

Reads uploaded files into CapturedDocument records that the client sends
back with its next chat message. Individual failures are reported, never
fatal to the batch.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from financeai.agent.config import get_agent_config
from financeai.capture.document_capture import CaptureLimits, UploadSource, capture_documents
from financeai.models.schemas import CaptureResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


def get_capture_limits() -> CaptureLimits:
    """Capture limits from the environment configuration."""
    return CaptureLimits(max_document_bytes=get_agent_config().max_document_bytes)


def _validate_filenames(files: list[UploadFile]) -> None:
    """Reject uploads without a filename.

    Raises:
        HTTPException: 400 if any file has no name.
    """
    if any(not file.filename for file in files):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Filename is required",
        )


@router.post("/capture", response_model=CaptureResponse)
async def capture_uploads(
    files: list[UploadFile],
    limits: CaptureLimits = Depends(get_capture_limits),
) -> CaptureResponse:
    """Capture uploaded files for attachment to a chat message.

    Text files (.txt, .csv, .json or text/* media types) are decoded; any
    other file is base64 encoded.

    Args:
        files: The uploaded files (multipart/form-data, field "files").

    Returns:
        CaptureResponse with captured documents and per-file failures.

    Raises:
        400: A file has no filename.
    """
    _validate_filenames(files)

    logger.info(f"Capturing {len(files)} uploaded files")
    batch = await capture_documents([UploadSource(file) for file in files], limits)

    return CaptureResponse(documents=batch.documents, failures=batch.failures)
