"""Prompt text and request assembly for the financial assistant."""

from financeai.prompting.assembler import (
    assemble_request,
    build_document_block,
    project_history,
    request_size,
)
from financeai.prompting.prompts import SYSTEM_PROMPT, WELCOME_MESSAGE

__all__ = [
    "SYSTEM_PROMPT",
    "WELCOME_MESSAGE",
    "assemble_request",
    "build_document_block",
    "project_history",
    "request_size",
]
