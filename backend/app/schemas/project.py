"""Pydantic v2 request/response schemas for projects, uploads and export."""

import uuid
from datetime import datetime

from pydantic import Field, computed_field

from app.schemas.base import CamelModel
from app.services.project_service import image_url

EXPORT_FORMAT_PATTERN = "^(jpg|jpeg|png|tiff|webp)$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ProjectCreate(CamelModel):
    name: str | None = Field(None, max_length=255)


class ProjectUpdate(CamelModel):
    """Only the name can be changed; emptiness is checked by the route."""

    name: str | None = Field(None, max_length=255)


class ExportRequest(CamelModel):
    format: str = Field("jpg", pattern=EXPORT_FORMAT_PATTERN)
    quality: int = Field(100, ge=1, le=100)


class UploadRequest(CamelModel):
    """Metadata for a file the client is about to upload."""

    filename: str = Field(..., min_length=1, max_length=512)
    file_size: int = Field(..., ge=1)
    mime_type: str | None = None
    project_name: str | None = Field(None, min_length=1, max_length=255)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ProjectResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    status: str
    created_at: datetime
    updated_at: datetime


class ProjectSummaryResponse(CamelModel):
    """Dashboard listing entry."""

    id: uuid.UUID
    name: str
    status: str
    created_at: datetime
    thumbnail_url: str | None = None


class ImageResponse(CamelModel):
    id: uuid.UUID
    project_id: uuid.UUID
    type: str
    storage_key: str
    filename: str
    size_bytes: int
    mime_type: str
    width: int | None = None
    height: int | None = None
    created_at: datetime

    @computed_field
    @property
    def url(self) -> str:
        return image_url(self.storage_key)


class ProjectDetailResponse(ProjectResponse):
    """A project with its images and their access URLs."""

    images: list[ImageResponse]


class ExportResponse(CamelModel):
    success: bool
    download_url: str
    message: str


class UploadResponse(CamelModel):
    project_id: uuid.UUID
    image_id: uuid.UUID
    storage_key: str
