"""Projects API routes — ownership-scoped read, rename, delete, and export."""

import uuid

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.database import naive_utcnow
from app.errors import RequestValidationFailed
from app.models.project import Image, Project
from app.models.user import User
from app.schemas.project import (
    ExportRequest,
    ExportResponse,
    ImageResponse,
    ProjectCreate,
    ProjectDetailResponse,
    ProjectResponse,
    ProjectSummaryResponse,
    ProjectUpdate,
)
from app.services import audit
from app.services.project_service import (
    build_export_url,
    get_owned_project,
    image_url,
    list_project_images,
)

router = APIRouter(prefix="/api/v1/projects", tags=["projects"])


@router.get("", response_model=list[ProjectSummaryResponse], summary="List the current user's projects")
async def list_projects(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[ProjectSummaryResponse]:
    """Newest first, with a thumbnail URL where a thumbnail exists."""
    result = await db.execute(
        select(Project, Image.storage_key)
        .outerjoin(Image, and_(Image.project_id == Project.id, Image.type == "thumbnail"))
        .where(Project.user_id == current_user.id)
        .order_by(Project.created_at.desc())
    )

    summaries: dict[uuid.UUID, ProjectSummaryResponse] = {}
    for project, thumbnail_key in result.all():
        if project.id in summaries:
            continue
        summaries[project.id] = ProjectSummaryResponse(
            id=project.id,
            name=project.name,
            status=project.status,
            created_at=project.created_at,
            thumbnail_url=image_url(thumbnail_key) if thumbnail_key else None,
        )
    return list(summaries.values())


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
)
async def create_project(
    body: ProjectCreate | None = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProjectResponse:
    name = body.name if body and body.name else "Untitled Project"
    project = Project(user_id=current_user.id, name=name, status="pending")
    db.add(project)
    await db.flush()
    await db.refresh(project)
    return ProjectResponse.model_validate(project)


@router.get("/{project_id}", response_model=ProjectDetailResponse, summary="Get a project and its images")
async def get_project(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProjectDetailResponse:
    """Returns 404 if not found or not owned."""
    project = await get_owned_project(db, project_id, current_user.id)
    images = await list_project_images(db, project.id)
    return ProjectDetailResponse(
        **ProjectResponse.model_validate(project).model_dump(),
        images=[ImageResponse.model_validate(img) for img in images],
    )


@router.patch("/{project_id}", response_model=ProjectResponse, summary="Rename a project")
async def update_project(
    project_id: str,
    body: ProjectUpdate | None = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProjectResponse:
    project = await get_owned_project(db, project_id, current_user.id)

    if body is None or not body.name:
        raise RequestValidationFailed("Name is required")

    project.name = body.name
    project.updated_at = naive_utcnow()
    await db.flush()
    await db.refresh(project)
    return ProjectResponse.model_validate(project)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a project",
)
async def delete_project(
    project_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Response:
    """Delete a project; its images go with it via ON DELETE CASCADE."""
    project = await get_owned_project(db, project_id, current_user.id)
    await db.delete(project)
    await db.flush()
    audit.log_success("project_deleted", "project", user_id=current_user.id, resource_id=project.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{project_id}/export", response_model=ExportResponse, summary="Prepare a project export")
async def export_project(
    project_id: str,
    body: ExportRequest | None = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ExportResponse:
    """Return a download URL for the processed image in the requested format.

    Format conversion happens downstream of the URL; nothing is transcoded here.
    """
    project = await get_owned_project(db, project_id, current_user.id)
    options = body or ExportRequest()
    download_url = await build_export_url(db, project, options.format, options.quality)
    return ExportResponse(success=True, download_url=download_url, message="Export ready")
