import logging
import time
from typing import Optional
from urllib.parse import quote

import pydantic
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from filegate.core.config import MAX_PRESIGNED_EXPIRY, Settings, get_settings
from filegate.core.errors import StorageError, ValidationError
from filegate.core.security import get_bearer_token, get_current_user
from filegate.models.user import AuthenticatedUser
from filegate.schemas.files import (
    SignRequest, SignResponse,
    DeleteRequest, DeleteResponse,
    UploadResponse,
)
from filegate.services.access import verify_file_access
from filegate.services.documents import DocumentRepository, get_document_repository
from filegate.services.keys import attachment_disposition, build_file_key, is_well_formed
from filegate.services.storage import StorageService, get_storage

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = (
    "application/pdf",
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
)

UNSUPPORTED_TYPE_MESSAGE = (
    "File type not supported. Please upload PDF, DOC, DOCX, images, or text files."
)

router = APIRouter(dependencies=[Depends(get_bearer_token)])


def size_limit_message(max_size: int) -> str:
    return f"File size must be less than {max_size // (1024 * 1024)}MB"


def require_file_key(file_key: Optional[str]) -> str:
    if not file_key:
        raise ValidationError("Missing fileKey")
    if not is_well_formed(file_key):
        raise ValidationError("Invalid file key format")
    return file_key


async def read_body(request: Request, model):
    # Parsed here, after authentication, so a bad body never masks a 401.
    try:
        data = await request.json()
    except ValueError:
        raise ValidationError("Invalid JSON body")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(f"{location}: {first.get('msg')}" if location else str(first.get("msg")))


@router.post("/upload-file", response_model=UploadResponse)
async def upload_file(
    user: AuthenticatedUser = Depends(get_current_user),
    file: Optional[UploadFile] = File(None),
    user_id: Optional[str] = Form(None, alias="userId"),
    settings: Settings = Depends(get_settings),
    storage: StorageService = Depends(get_storage),
):
    if file is None or not file.filename:
        raise ValidationError("No file provided")

    if file.size is not None and file.size > settings.MAX_UPLOAD_SIZE:
        raise ValidationError(size_limit_message(settings.MAX_UPLOAD_SIZE))

    data = await file.read()
    file_size = len(data)
    if file_size > settings.MAX_UPLOAD_SIZE:
        raise ValidationError(size_limit_message(settings.MAX_UPLOAD_SIZE))

    content_type = file.content_type
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError(UNSUPPORTED_TYPE_MESSAGE)

    if user_id and user_id != user.id:
        logger.warning("Ignoring client-supplied userId %s for caller %s", user_id, user.id)

    timestamp = int(time.time() * 1000)
    file_key = build_file_key(user.id, file.filename, timestamp_ms=timestamp)

    await storage.upload_object(
        object_name=file_key,
        data=data,
        content_type=content_type,
        metadata={
            "original-name": quote(file.filename),
            "uploaded-by": user.id,
            "upload-timestamp": str(timestamp),
            "user-email": quote(user.email or "unknown", safe="@"),
        },
    )
    logger.info("File uploaded: %s (%d bytes)", file_key, file_size)

    return UploadResponse(
        file_key=file_key,
        file_name=file.filename,
        file_size=file_size,
        file_type=content_type,
        uploaded_by=user.id,
    )


@router.post("/get-signed-url", response_model=SignResponse)
async def get_signed_url(
    raw_request: Request,
    user: AuthenticatedUser = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
    documents: DocumentRepository = Depends(get_document_repository),
    storage: StorageService = Depends(get_storage),
):
    """Generate a temporary presigned URL to view or download a file"""
    request = await read_body(raw_request, SignRequest)
    file_key = require_file_key(request.file_key)

    if request.download and not request.file_name:
        raise ValidationError("Missing fileName for download")

    expires_in = request.expires_in if request.expires_in is not None else settings.PRESIGNED_EXPIRY
    if expires_in < 1 or expires_in > MAX_PRESIGNED_EXPIRY:
        raise ValidationError(f"expiresIn must be between 1 and {MAX_PRESIGNED_EXPIRY} seconds")

    if settings.SIGN_REQUIRE_OWNERSHIP:
        await verify_file_access(file_key, user, documents, action="view", allow_admin=True)

    disposition = attachment_disposition(request.file_name) if request.download else None
    signed_url = await storage.generate_presigned_url(
        object_name=file_key,
        expires_in=expires_in,
        content_disposition=disposition,
    )

    return SignResponse(signed_url=signed_url, expires_in=expires_in)


@router.post("/delete-file", response_model=DeleteResponse, response_model_exclude_none=True)
async def delete_file(
    raw_request: Request,
    user: AuthenticatedUser = Depends(get_current_user),
    documents: DocumentRepository = Depends(get_document_repository),
    storage: StorageService = Depends(get_storage),
):
    request = await read_body(raw_request, DeleteRequest)
    file_key = require_file_key(request.file_key)

    await verify_file_access(file_key, user, documents, action="delete")

    warning = None
    record_deleted = False
    try:
        await storage.delete_object(file_key)
    except StorageError as e:
        # Reported as success so the caller's own record cleanup still runs.
        logger.warning("Storage delete failed for %s: %s", file_key, e.message)
        warning = e.message
    else:
        logger.info("File deleted: %s", file_key)
        if request.purge_record:
            record_deleted = await documents.delete_by_file_key(file_key)

    return DeleteResponse(
        message="File deleted successfully",
        file_key=file_key,
        user_id=user.id,
        record_deleted=record_deleted,
        warning=warning,
    )
