"""Pydantic v2 schemas for the remembered editor preferences."""

import uuid
from typing import Any

from pydantic import Field, field_validator

from app.schemas.base import CamelModel
from app.schemas.preset import PublicPresetResponse


class PreferencesUpdate(CamelModel):
    """Only explicitly sent fields change; ``lastUsedPresetId: null`` clears it."""

    last_used_preset_id: uuid.UUID | None = None
    preferred_intensity: float | None = Field(None, ge=0, le=1)
    preferred_view_mode: str | None = Field(None, min_length=1, max_length=20)
    dismissed_what_next: bool | None = None
    preferences: dict[str, Any] | None = None

    @field_validator("preferred_intensity", "preferred_view_mode", "dismissed_what_next", "preferences")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class PreferencesResponse(CamelModel):
    last_used_preset: PublicPresetResponse | None = None
    last_used_preset_id: uuid.UUID | None = None
    preferred_intensity: float
    preferred_view_mode: str
    dismissed_what_next: bool
    preferences: dict[str, Any]


class PreferencesEnvelope(CamelModel):
    success: bool = True
    preferences: PreferencesResponse
