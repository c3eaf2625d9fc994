"""Validation and storage of recorded speaking answers."""

import re
import uuid

from fastapi import UploadFile

from pte_api.core.config import settings
from pte_api.services.storage_service import generate_access_url, store_bytes
from pte_api.utils.enums import QuestionType, SPEAKING_TYPES

_EXT_RE = re.compile(r"^[a-z0-9]{1,5}$")


class AudioUploadError(ValueError):
    """Raised when an uploaded recording is rejected."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        super().__init__(message)
        self.error_code = error_code
        self.status_code = status_code


def validate_audio(content_type: str | None, size: int) -> None:
    if size <= 0:
        raise AudioUploadError("No file provided", "EMPTY_FILE")
    if size > settings.AUDIO_MAX_BYTES:
        max_mb = settings.AUDIO_MAX_BYTES // (1024 * 1024)
        raise AudioUploadError(f"File too large (max {max_mb}MB)", "FILE_TOO_LARGE", 413)
    base_type = (content_type or "").split(";", 1)[0].strip().lower()
    if base_type not in settings.AUDIO_ALLOWED_MIME:
        raise AudioUploadError("Invalid file type", "INVALID_FILE_TYPE", 415)


async def read_upload(file: UploadFile) -> bytes:
    """Read the upload body, stopping one byte past AUDIO_MAX_BYTES."""
    if file.size is not None:
        validate_audio(file.content_type, file.size)
    return await file.read(settings.AUDIO_MAX_BYTES + 1)


def build_audio_key(task_type: str, question_id: uuid.UUID, ext: str = "webm") -> str:
    if task_type not in {t.value for t in SPEAKING_TYPES}:
        raise AudioUploadError(f"Unknown speaking task type: {task_type}", "INVALID_TASK_TYPE")
    ext = (ext or "webm").lower().lstrip(".")
    if not _EXT_RE.match(ext):
        raise AudioUploadError("Invalid file extension", "INVALID_EXTENSION")
    return f"pte/speaking/{QuestionType(task_type).value}/{question_id}/{uuid.uuid4()}.{ext}"


async def save_audio(
    *, data: bytes, content_type: str | None, task_type: str, question_id: uuid.UUID, ext: str = "webm"
) -> dict:
    validate_audio(content_type, len(data))
    key = build_audio_key(task_type, question_id, ext)
    await store_bytes(key=key, data=data, content_type=(content_type or "").split(";", 1)[0])
    return {
        "key": key,
        "url": await generate_access_url(key=key),
        "size": len(data),
        "content_type": content_type,
    }
