"""Presets API — public gallery and admin management."""

import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_admin_user, get_db
from app.errors import NotFoundError
from app.models.preset import Preset
from app.models.user import User
from app.schemas.preset import (
    AdminPresetListResponse,
    AdminPresetResponse,
    PresetCreate,
    PresetListResponse,
    PresetUpdate,
    PublicPresetResponse,
)

router = APIRouter(prefix="/api/v1/presets", tags=["presets"])
admin_router = APIRouter(prefix="/api/v1/admin/presets", tags=["admin"])


@router.get("", response_model=PresetListResponse)
async def list_presets(db: AsyncSession = Depends(get_db)) -> PresetListResponse:
    """Active presets in gallery order, without their prompts."""
    result = await db.execute(
        select(Preset).where(Preset.is_active.is_(True)).order_by(Preset.sort_order, Preset.name)
    )
    return PresetListResponse(
        presets=[PublicPresetResponse.model_validate(p) for p in result.scalars().all()]
    )


async def _get_preset(db: AsyncSession, preset_id: uuid.UUID) -> Preset:
    preset = await db.get(Preset, preset_id)
    if preset is None:
        raise NotFoundError("Preset not found")
    return preset


@admin_router.get("", response_model=AdminPresetListResponse)
async def admin_list_presets(
    include_inactive: bool = Query(False, alias="includeInactive"),
    search: str | None = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(get_admin_user),
) -> AdminPresetListResponse:
    filters = []
    if not include_inactive:
        filters.append(Preset.is_active.is_(True))
    if search:
        pattern = f"%{search.lower()}%"
        filters.append(
            or_(
                func.lower(Preset.name).like(pattern),
                func.lower(Preset.description).like(pattern),
            )
        )

    result = await db.execute(
        select(Preset).where(*filters).order_by(Preset.sort_order, Preset.created_at.desc())
    )
    return AdminPresetListResponse(
        presets=[AdminPresetResponse.model_validate(p) for p in result.scalars().all()]
    )


@admin_router.post("", response_model=AdminPresetResponse, status_code=status.HTTP_201_CREATED)
async def admin_create_preset(
    body: PresetCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(get_admin_user),
) -> AdminPresetResponse:
    preset = Preset(**body.model_dump(mode="json"))
    db.add(preset)
    await db.flush()
    await db.refresh(preset)
    return AdminPresetResponse.model_validate(preset)


@admin_router.patch("/{preset_id}", response_model=AdminPresetResponse)
async def admin_update_preset(
    preset_id: uuid.UUID,
    body: PresetUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(get_admin_user),
) -> AdminPresetResponse:
    """Partially update a preset. Only explicitly set fields are changed."""
    preset = await _get_preset(db, preset_id)
    for field, value in body.model_dump(exclude_unset=True, mode="json").items():
        setattr(preset, field, value)
    await db.flush()
    await db.refresh(preset)
    return AdminPresetResponse.model_validate(preset)


@admin_router.delete("/{preset_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def admin_delete_preset(
    preset_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(get_admin_user),
) -> Response:
    preset = await _get_preset(db, preset_id)
    await db.delete(preset)
    await db.flush()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
