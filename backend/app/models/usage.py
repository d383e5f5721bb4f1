"""Upload usage tracking model."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class UsageTracking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Uploads consumed by a user within one calendar-month billing period."""

    __tablename__ = "usage_tracking"
    __table_args__ = (
        UniqueConstraint("user_id", "period_start", name="uq_usage_user_period"),
        CheckConstraint("upload_count >= 0", name="ck_usage_upload_count_non_negative"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    period_start: Mapped[datetime] = mapped_column(nullable=False)
    period_end: Mapped[datetime] = mapped_column(nullable=False)
    upload_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)

    def __repr__(self) -> str:
        return f"<UsageTracking(user_id={self.user_id}, period_start={self.period_start}, uploads={self.upload_count})>"
