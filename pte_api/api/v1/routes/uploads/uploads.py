# pte_api/api/v1/routes/uploads/uploads.py

import logging
import uuid

from fastapi import APIRouter, Depends, File, Form, UploadFile

from pte_api.api.v1.routes.auth.auth import get_current_user
from pte_api.core.response import ResponseModel, error_response, success_response
from pte_api.models.user import User
from pte_api.services.audio_uploads import AudioUploadError, read_upload, save_audio
from pte_api.services.storage_service import StorageError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("/audio", response_model=ResponseModel)
async def upload_audio(
    file: UploadFile = File(...),
    type: str = Form(...),
    question_id: uuid.UUID = Form(...),
    ext: str = Form("webm"),
    current_user: User = Depends(get_current_user),
):
    """
    Store a recorded speaking answer.

    Method/Path: POST /api/v1/uploads/audio (multipart)
    Form: file, type, question_id, ext
    Returns 201 with { key, url, size, content_type }.
    """
    try:
        data = await read_upload(file)
        stored = await save_audio(
            data=data,
            content_type=file.content_type,
            task_type=type,
            question_id=question_id,
            ext=ext,
        )
    except AudioUploadError as e:
        return error_response(msg=str(e), status_code=e.status_code, error_code=e.error_code)
    except StorageError as e:
        logger.error(f"Audio upload failed for user {current_user.id}: {e}")
        return error_response(msg="Could not store the recording", status_code=502, error_code="STORAGE_ERROR")

    logger.info(f"User {current_user.id} uploaded {stored['size']} bytes to {stored['key']}")
    return success_response(msg="Audio uploaded", data=stored, status_code=201)
