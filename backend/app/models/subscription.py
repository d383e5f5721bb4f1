"""Subscription models — plan catalog and Stripe subscription state per user."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, CheckConstraint, ForeignKey, Integer, String, true
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class SubscriptionPlan(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A subscription tier. Seeded once; only ``active`` changes afterwards."""

    __tablename__ = "subscription_plans"
    __table_args__ = (CheckConstraint("monthly_upload_limit >= 0", name="ck_plans_upload_limit_non_negative"),)

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    price_reference: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    monthly_upload_limit: Mapped[int] = mapped_column(Integer, nullable=False)
    features: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, server_default=true(), nullable=False)

    def __repr__(self) -> str:
        return f"<SubscriptionPlan(name={self.name!r}, limit={self.monthly_upload_limit}, active={self.active})>"


class UserSubscription(TimestampMixin, Base):
    """Local mirror of a Stripe subscription, keyed by the Stripe subscription id.

    Rows are written only by the webhook reconciler.
    """

    __tablename__ = "user_subscriptions"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Stripe price id of the subscribed item
    plan_id: Mapped[str] = mapped_column(String(255), nullable=False)

    # Stripe identifiers
    provider_subscription_id: Mapped[str] = mapped_column(String(255), nullable=False)
    provider_customer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # active, past_due, canceled, trialing, incomplete, ...
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    current_period_end: Mapped[datetime | None] = mapped_column(nullable=True)

    # Creation time of the newest Stripe event applied to this row
    last_event_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<UserSubscription(id={self.id!r}, user_id={self.user_id}, status={self.status!r})>"
