from __future__ import annotations
from typing import Optional
from solveme_app.config import MAX_UPLOAD_BYTES
from solveme_app.errors import InvalidInput
from solveme_app.models import AnswerLength, PendingFile, SubmissionRequest
from solveme_app.services.images import sniff_content_type


def build_request(file: Optional[PendingFile], language: Optional[str], size) -> SubmissionRequest:
    if file is None:
        raise InvalidInput("no file selected")
    if not file.data:
        raise InvalidInput(f"file {file.name!r} is empty")
    if file.size > MAX_UPLOAD_BYTES:
        raise InvalidInput(f"file {file.name!r} exceeds {MAX_UPLOAD_BYTES} bytes")
    if not language or not str(language).strip():
        raise InvalidInput("language is required")
    try:
        length = AnswerLength(size)
    except ValueError:
        raise InvalidInput(f"answer length must be one of short|medium|large, got {size!r}") from None

    content_type = file.content_type or sniff_content_type(file.data)
    if not content_type:
        raise InvalidInput(f"file {file.name!r} is not a recognizable image")

    return SubmissionRequest(file=file, language=str(language).strip(), size=length,
                             content_type=content_type)
