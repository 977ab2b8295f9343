"""Document capture for chat attachments.

Turns user-selected files into uniform in-memory records.

Responsibilities:
    - Text vs base64 decision from media type and file extension
    - Concurrent reads with per-file failure isolation
    - Optional per-document size ceiling

No structural parsing: office documents and PDFs travel as base64.
"""

from financeai.capture.document_capture import (
    BytesSource,
    CaptureLimits,
    DocumentCaptureError,
    SourceFile,
    UploadSource,
    capture_document,
    capture_documents,
    choose_encoding,
)

__all__ = [
    "BytesSource",
    "CaptureLimits",
    "DocumentCaptureError",
    "SourceFile",
    "UploadSource",
    "capture_document",
    "capture_documents",
    "choose_encoding",
]
