"""Per-user editor preferences."""

import uuid

from sqlalchemy import JSON, Boolean, Float, ForeignKey, String, UniqueConstraint, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, TimestampMixin, UUIDPrimaryKeyMixin
from app.models.preset import Preset

DEFAULT_INTENSITY = 0.70
DEFAULT_VIEW_MODE = "split"


class UserPreferences(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Editor settings remembered between sessions; at most one row per user."""

    __tablename__ = "user_preferences"
    __table_args__ = (UniqueConstraint("user_id", name="uq_user_preferences_user_id"),)

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    last_used_preset_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("presets.id", ondelete="SET NULL"),
        nullable=True,
    )
    preferred_intensity: Mapped[float] = mapped_column(
        Float, default=DEFAULT_INTENSITY, server_default=str(DEFAULT_INTENSITY), nullable=False
    )
    preferred_view_mode: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_VIEW_MODE, server_default=DEFAULT_VIEW_MODE, nullable=False
    )
    dismissed_what_next: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false(), nullable=False
    )
    preferences: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    last_used_preset: Mapped[Preset | None] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<UserPreferences(user_id={self.user_id}, view_mode={self.preferred_view_mode!r})>"
