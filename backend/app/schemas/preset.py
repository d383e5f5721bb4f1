"""Pydantic v2 schemas for the presets gallery and its admin endpoints."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import Field, HttpUrl, field_validator

from app.schemas.base import CamelModel


class PresetCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    ai_prompt: str = Field(..., min_length=1, max_length=2000)
    blending_params: dict[str, Any] = Field(default_factory=dict)
    example_image_url: HttpUrl | None = None
    category: str | None = Field(None, max_length=100)
    is_active: bool = True
    sort_order: int = Field(0, ge=0)


class PresetUpdate(CamelModel):
    """Partial update; only explicitly set fields change."""

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    ai_prompt: str | None = Field(None, min_length=1, max_length=2000)
    blending_params: dict[str, Any] | None = None
    example_image_url: HttpUrl | None = None
    category: str | None = Field(None, max_length=100)
    is_active: bool | None = None
    sort_order: int | None = Field(None, ge=0)

    @field_validator("name", "ai_prompt", "is_active", "sort_order")
    @classmethod
    def reject_null(cls, value):
        # Omit the field to leave it unchanged; these columns are NOT NULL.
        if value is None:
            raise ValueError("may not be null")
        return value


class PublicPresetResponse(CamelModel):
    """Gallery entry. The prompt used to drive the model is deliberately absent."""

    id: uuid.UUID
    name: str
    description: str | None = None
    example_image_url: str | None = None
    category: str | None = None
    blending_params: dict[str, Any] | None = None


class PresetListResponse(CamelModel):
    success: bool = True
    presets: list[PublicPresetResponse]


class AdminPresetResponse(PublicPresetResponse):
    ai_prompt: str
    is_active: bool
    sort_order: int
    created_at: datetime
    updated_at: datetime


class AdminPresetListResponse(CamelModel):
    success: bool = True
    presets: list[AdminPresetResponse]
