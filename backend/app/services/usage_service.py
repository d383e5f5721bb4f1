"""Usage tracking service — monthly upload counters per user."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.billing.plans import FREE_PLAN
from app.database import naive_utcnow, upsert_insert
from app.models.usage import UsageTracking
from app.models.user import User
from app.services.subscription_service import get_active_plan

logger = logging.getLogger(__name__)


def current_billing_period(now: datetime | None = None) -> tuple[datetime, datetime]:
    """Calendar-month window containing ``now`` as (first instant, last instant), naive UTC."""
    now = now or naive_utcnow()
    start = datetime(now.year, now.month, 1)
    if now.month == 12:
        next_start = datetime(now.year + 1, 1, 1)
    else:
        next_start = datetime(now.year, now.month + 1, 1)
    return start, next_start - timedelta(microseconds=1)


async def get_current_usage(
    db: AsyncSession, user_id: uuid.UUID, now: datetime | None = None
) -> UsageTracking | None:
    """This month's usage row for the user, if one exists."""
    period_start, period_end = current_billing_period(now)
    result = await db.execute(
        select(UsageTracking)
        .where(
            UsageTracking.user_id == user_id,
            UsageTracking.period_start >= period_start,
            UsageTracking.period_end <= period_end,
        )
        .limit(1)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def record_upload(db: AsyncSession, user_id: uuid.UUID, now: datetime | None = None) -> UsageTracking:
    """Count one upload against the current period.

    The period row is created or incremented by a single upsert keyed on
    ``(user_id, period_start)``, so concurrent first uploads of a month
    both land on one row.
    """
    period_start, period_end = current_billing_period(now)
    insert = upsert_insert(db)
    stmt = insert(UsageTracking).values(
        id=uuid.uuid4(),
        user_id=user_id,
        period_start=period_start,
        period_end=period_end,
        upload_count=1,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[UsageTracking.user_id, UsageTracking.period_start],
        set_={
            "upload_count": UsageTracking.upload_count + 1,
            "updated_at": func.now(),
        },
    )
    await db.execute(stmt)
    return await get_current_usage(db, user_id, now)


@dataclass(frozen=True)
class UsageSummary:
    plan_name: str
    monthly_limit: int
    current_usage: int
    period_start: datetime
    period_end: datetime

    @property
    def remaining(self) -> int:
        return max(0, self.monthly_limit - self.current_usage)

    @property
    def can_upload(self) -> bool:
        return self.current_usage < self.monthly_limit


async def get_usage_summary(db: AsyncSession, user_id: uuid.UUID, now: datetime | None = None) -> UsageSummary:
    """Quota and consumption for the current period.

    Users without an active subscription on a catalog plan get the Free tier.
    """
    plan = await get_active_plan(db, user_id)
    usage = await get_current_usage(db, user_id, now)
    period_start, period_end = current_billing_period(now)

    return UsageSummary(
        plan_name=plan.name if plan else FREE_PLAN.name,
        monthly_limit=plan.monthly_upload_limit if plan else FREE_PLAN.monthly_upload_limit,
        current_usage=usage.upload_count if usage else 0,
        period_start=period_start,
        period_end=period_end,
    )


@dataclass(frozen=True)
class ResetOutcome:
    status: str  # reset, no_usage, user_not_found
    user_id: uuid.UUID | None = None
    previous_count: int | None = None


async def reset_usage_by_email(db: AsyncSession, email: str, now: datetime | None = None) -> ResetOutcome:
    """Zero the current month's upload count for the user with ``email``."""
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is None:
        return ResetOutcome(status="user_not_found")

    usage = await get_current_usage(db, user.id, now)
    if usage is None:
        logger.info("No usage tracking record for %s this period", email)
        return ResetOutcome(status="no_usage", user_id=user.id)

    previous = usage.upload_count
    usage.upload_count = 0
    usage.updated_at = naive_utcnow()
    await db.flush()
    logger.info("Reset upload count for %s (was %d)", email, previous)
    return ResetOutcome(status="reset", user_id=user.id, previous_count=previous)
