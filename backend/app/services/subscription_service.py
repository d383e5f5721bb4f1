"""Subscription service — single-statement writes to the local subscription mirror."""

import logging
import uuid
from datetime import datetime

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import upsert_insert
from app.models.subscription import SubscriptionPlan, UserSubscription

logger = logging.getLogger(__name__)


def _not_newer_than(event_at: datetime):
    """Row filter: the stored state is not newer than an event created at ``event_at``."""
    return or_(
        UserSubscription.last_event_at.is_(None),
        UserSubscription.last_event_at <= event_at,
    )


async def upsert_subscription(
    db: AsyncSession,
    *,
    subscription_id: str,
    user_id: uuid.UUID,
    plan_id: str,
    customer_id: str | None,
    status: str,
    current_period_end: datetime | None,
    event_at: datetime,
) -> None:
    """Insert or update the row for ``subscription_id`` in one statement.

    On conflict only ``status``, ``current_period_end`` and ``last_event_at``
    change; the remaining columns keep their first-insert values. The update
    is skipped when the stored row already reflects a newer event.
    """
    insert = upsert_insert(db)
    stmt = insert(UserSubscription).values(
        id=subscription_id,
        user_id=user_id,
        plan_id=plan_id,
        provider_subscription_id=subscription_id,
        provider_customer_id=customer_id,
        status=status,
        current_period_end=current_period_end,
        last_event_at=event_at,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[UserSubscription.id],
        set_={
            "status": stmt.excluded.status,
            "current_period_end": stmt.excluded.current_period_end,
            "last_event_at": stmt.excluded.last_event_at,
            "updated_at": func.now(),
        },
        where=_not_newer_than(stmt.excluded.last_event_at),
    )
    await db.execute(stmt)
    logger.info(
        "Upserted subscription %s for user %s: status=%s",
        subscription_id,
        user_id,
        status,
    )


async def cancel_subscription(db: AsyncSession, subscription_id: str, event_at: datetime) -> bool:
    """Mark the subscription canceled. Returns False when no row was changed."""
    result = await db.execute(
        update(UserSubscription)
        .where(UserSubscription.id == subscription_id, _not_newer_than(event_at))
        .values(status="canceled", last_event_at=event_at, updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount > 0


async def get_active_plan(db: AsyncSession, user_id: uuid.UUID) -> SubscriptionPlan | None:
    """Plan of the user's newest active subscription, if it maps onto the catalog."""
    result = await db.execute(
        select(SubscriptionPlan)
        .join(UserSubscription, UserSubscription.plan_id == SubscriptionPlan.price_reference)
        .where(
            UserSubscription.user_id == user_id,
            UserSubscription.status == "active",
        )
        .order_by(UserSubscription.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()
