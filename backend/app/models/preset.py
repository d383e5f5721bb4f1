"""Preset model — stylistic editing presets (system styles)."""

from sqlalchemy import JSON, Boolean, Integer, String, Text, true
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Preset(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A curated editing style offered in the presets gallery."""

    __tablename__ = "presets"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), default=None)
    ai_prompt: Mapped[str] = mapped_column(Text, nullable=False)  # internal, never exposed publicly
    blending_params: Mapped[dict | None] = mapped_column(JSON, default=dict)
    example_image_url: Mapped[str | None] = mapped_column(String(1024), default=None)
    category: Mapped[str | None] = mapped_column(String(100), default=None)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default=true(), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)

    def __repr__(self) -> str:
        return f"<Preset(id={self.id}, name={self.name!r}, active={self.is_active})>"
