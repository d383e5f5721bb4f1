"""User API routes — remembered editor preferences."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.models.preferences import DEFAULT_INTENSITY, DEFAULT_VIEW_MODE, UserPreferences
from app.models.user import User
from app.schemas.preferences import PreferencesEnvelope, PreferencesResponse, PreferencesUpdate
from app.schemas.preset import PublicPresetResponse
from app.services.preferences_service import get_preferences, update_preferences

router = APIRouter(prefix="/api/v1/user", tags=["user"])


def _envelope(prefs: UserPreferences | None) -> PreferencesEnvelope:
    if prefs is None:
        return PreferencesEnvelope(
            preferences=PreferencesResponse(
                preferred_intensity=DEFAULT_INTENSITY,
                preferred_view_mode=DEFAULT_VIEW_MODE,
                dismissed_what_next=False,
                preferences={},
            )
        )
    preset = prefs.last_used_preset
    return PreferencesEnvelope(
        preferences=PreferencesResponse(
            last_used_preset=PublicPresetResponse.model_validate(preset) if preset else None,
            last_used_preset_id=prefs.last_used_preset_id,
            preferred_intensity=prefs.preferred_intensity,
            preferred_view_mode=prefs.preferred_view_mode,
            dismissed_what_next=prefs.dismissed_what_next,
            preferences=prefs.preferences,
        )
    )


@router.get("/preferences", response_model=PreferencesEnvelope, summary="Get the current user's preferences")
async def read_preferences(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PreferencesEnvelope:
    """Defaults are returned until the user saves something."""
    return _envelope(await get_preferences(db, current_user.id))


@router.put("/preferences", response_model=PreferencesEnvelope, summary="Update the current user's preferences")
async def save_preferences(
    body: PreferencesUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PreferencesEnvelope:
    changes = body.model_dump(exclude_unset=True)
    prefs = await update_preferences(db, current_user.id, changes)
    return _envelope(prefs)
