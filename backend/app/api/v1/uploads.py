"""Upload registration — creates the project/image records and counts the upload.

The byte transfer to object storage happens elsewhere; this endpoint only
records what is about to be stored and enforces the plan's monthly quota.
"""

import logging
import mimetypes
import uuid
from pathlib import PurePosixPath

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import check_upload_quota, get_current_user, get_db
from app.config import settings
from app.errors import RequestValidationFailed
from app.models.project import Image, Project
from app.models.user import User
from app.schemas.project import UploadRequest, UploadResponse
from app.services import audit
from app.services.usage_service import UsageSummary, record_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/uploads", tags=["uploads"])

RAW_MIME_TYPES = {
    ".arw": "image/x-sony-arw",
    ".cr2": "image/x-canon-cr2",
    ".cr3": "image/x-canon-cr3",
    ".dng": "image/x-adobe-dng",
    ".nef": "image/x-nikon-nef",
    ".orf": "image/x-olympus-orf",
    ".raf": "image/x-fuji-raf",
    ".rw2": "image/x-panasonic-rw2",
}


def _detect_mime_type(filename: str, declared: str | None) -> str | None:
    if declared:
        return declared
    suffix = PurePosixPath(filename).suffix.lower()
    return RAW_MIME_TYPES.get(suffix) or mimetypes.guess_type(filename)[0]


@router.post("", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def register_upload(
    body: UploadRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    usage: UsageSummary = Depends(check_upload_quota),
) -> UploadResponse:
    """Register an upload: new pending project, original image row, usage +1."""
    mime_type = _detect_mime_type(body.filename, body.mime_type)
    if mime_type is None or not mime_type.startswith("image/"):
        raise RequestValidationFailed("Invalid file type. Only image files are allowed.")

    if body.file_size > settings.max_upload_bytes:
        raise RequestValidationFailed(
            f"File too large. Maximum size is {settings.max_upload_bytes // (1024 * 1024)}MB."
        )

    filename = PurePosixPath(body.filename).name
    project = Project(
        user_id=current_user.id,
        name=body.project_name or PurePosixPath(filename).stem or "Untitled Project",
        status="pending",
    )
    db.add(project)
    await db.flush()

    image_id = uuid.uuid4()
    image = Image(
        id=image_id,
        project_id=project.id,
        type="original",
        storage_key=f"uploads/{current_user.id}/{project.id}/{image_id}_{filename}",
        filename=filename,
        size_bytes=body.file_size,
        mime_type=mime_type,
    )
    db.add(image)
    await record_upload(db, current_user.id)

    logger.info(
        "Registered upload %s for user %s (%d/%d this period)",
        image.storage_key,
        current_user.id,
        usage.current_usage + 1,
        usage.monthly_limit,
    )
    audit.log_success("file_upload", "image", user_id=current_user.id, resource_id=image_id, size=body.file_size)
    return UploadResponse(project_id=project.id, image_id=image_id, storage_key=image.storage_key)
