"""Preferences service: the single remembered-settings row per user."""

import logging
import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import upsert_insert
from app.errors import RequestValidationFailed
from app.models.preferences import DEFAULT_INTENSITY, DEFAULT_VIEW_MODE, UserPreferences
from app.models.preset import Preset

logger = logging.getLogger(__name__)


async def get_preferences(db: AsyncSession, user_id: uuid.UUID) -> UserPreferences | None:
    result = await db.execute(
        select(UserPreferences)
        .where(UserPreferences.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def update_preferences(db: AsyncSession, user_id: uuid.UUID, changes: dict[str, Any]) -> UserPreferences:
    """Create or partially update the user's preferences in one statement.

    Fields absent from ``changes`` keep their stored values, or the defaults
    on first write.

    Raises:
        RequestValidationFailed: ``last_used_preset_id`` names no preset.
    """
    preset_id = changes.get("last_used_preset_id")
    if preset_id is not None and await db.get(Preset, preset_id) is None:
        raise RequestValidationFailed("Preset not found")

    insert = upsert_insert(db)
    stmt = insert(UserPreferences).values(
        id=uuid.uuid4(),
        user_id=user_id,
        **{
            "last_used_preset_id": None,
            "preferred_intensity": DEFAULT_INTENSITY,
            "preferred_view_mode": DEFAULT_VIEW_MODE,
            "dismissed_what_next": False,
            "preferences": {},
            **changes,
        },
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[UserPreferences.user_id],
        set_={
            **{field: stmt.excluded[field] for field in changes},
            "updated_at": func.now(),
        },
    )
    await db.execute(stmt)
    logger.info("Updated preferences for user %s: %s", user_id, sorted(changes))
    return await get_preferences(db, user_id)
