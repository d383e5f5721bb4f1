"""Project service — ownership-scoped lookups, dashboard counts and export descriptors."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import naive_utcnow
from app.errors import NotFoundError
from app.models.project import Image, Project

PLACEHOLDER_PROCESSED_KEY = "placeholder_processed.jpg"
IN_FLIGHT_STATUSES = ("pending", "processing")
RECENT_ACTIVITY_WINDOW = timedelta(hours=24)


async def get_owned_project(db: AsyncSession, project_id: uuid.UUID | str, user_id: uuid.UUID) -> Project:
    """Load a project by id *and* owner in one query.

    A malformed id is treated like any other unknown project.

    Raises:
        NotFoundError: The project does not exist or belongs to another user.
    """
    if not isinstance(project_id, uuid.UUID):
        try:
            project_id = uuid.UUID(project_id)
        except ValueError:
            raise NotFoundError("Project not found") from None

    result = await db.execute(
        select(Project).where(Project.id == project_id, Project.user_id == user_id).limit(1)
    )
    project = result.scalar_one_or_none()
    if project is None:
        raise NotFoundError("Project not found")
    return project


async def list_project_images(db: AsyncSession, project_id: uuid.UUID) -> list[Image]:
    result = await db.execute(
        select(Image).where(Image.project_id == project_id).order_by(Image.created_at)
    )
    return list(result.scalars().all())


def image_url(storage_key: str) -> str:
    return f"{settings.image_base_path.rstrip('/')}/{storage_key}"


async def build_export_url(db: AsyncSession, project: Project, fmt: str, quality: int) -> str:
    """Download URL for the project's processed image, or the placeholder."""
    result = await db.execute(
        select(Image.storage_key)
        .where(Image.project_id == project.id, Image.type == "processed")
        .limit(1)
    )
    storage_key = result.scalar_one_or_none() or PLACEHOLDER_PROCESSED_KEY
    return f"{image_url(storage_key)}?format={fmt}&q={quality}"


@dataclass(frozen=True)
class ProjectStats:
    total: int
    completed: int
    processing: int
    recent: int


async def get_project_stats(db: AsyncSession, user_id: uuid.UUID, now: datetime | None = None) -> ProjectStats:
    """Per-status project counts for one user, plus projects created in the last 24 hours."""
    since = (now or naive_utcnow()) - RECENT_ACTIVITY_WINDOW
    result = await db.execute(
        select(
            func.count(Project.id),
            func.count(case((Project.status == "completed", 1))),
            func.count(case((Project.status.in_(IN_FLIGHT_STATUSES), 1))),
            func.count(case((Project.created_at >= since, 1))),
        ).where(Project.user_id == user_id)
    )
    total, completed, processing, recent = result.one()
    return ProjectStats(total=total, completed=completed, processing=processing, recent=recent)
