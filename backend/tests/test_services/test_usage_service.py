"""Tests for usage tracking: billing periods, counting, plan resolution and reset."""

import uuid
from datetime import datetime

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.billing.plans import PlanDefinition, seed_subscription_plans
from app.models.usage import UsageTracking
from app.models.user import User
from app.services.subscription_service import upsert_subscription
from app.services.usage_service import (
    current_billing_period,
    get_current_usage,
    get_usage_summary,
    record_upload,
    reset_usage_by_email,
)

PLANS = [
    PlanDefinition(name="Free", monthly_upload_limit=3, price_reference=None),
    PlanDefinition(name="Pro", monthly_upload_limit=50, price_reference="price_pro"),
]


async def _subscribe(db: AsyncSession, user: User, price_id: str, status: str = "active") -> None:
    await seed_subscription_plans(db, PLANS)
    await upsert_subscription(
        db,
        subscription_id=f"sub_{uuid.uuid4().hex[:8]}",
        user_id=user.id,
        plan_id=price_id,
        customer_id="cus_1",
        status=status,
        current_period_end=None,
        event_at=datetime(2026, 1, 1),
    )


class TestBillingPeriod:
    def test_mid_month(self):
        start, end = current_billing_period(datetime(2026, 3, 15, 12, 30))
        assert start == datetime(2026, 3, 1)
        assert end == datetime(2026, 3, 31, 23, 59, 59, 999999)

    def test_december_rolls_into_next_year(self):
        start, end = current_billing_period(datetime(2026, 12, 31, 23, 0))
        assert start == datetime(2026, 12, 1)
        assert end == datetime(2026, 12, 31, 23, 59, 59, 999999)

    def test_february_leap_year(self):
        _, end = current_billing_period(datetime(2028, 2, 10))
        assert end.day == 29


class TestRecordUpload:
    @pytest.mark.asyncio
    async def test_first_upload_creates_period_row(self, db_session: AsyncSession, test_user: User):
        assert await get_current_usage(db_session, test_user.id) is None

        usage = await record_upload(db_session, test_user.id)

        assert usage.upload_count == 1
        assert usage.period_start == current_billing_period()[0]

    @pytest.mark.asyncio
    async def test_uploads_accumulate_within_period(self, db_session: AsyncSession, test_user: User):
        for _ in range(3):
            usage = await record_upload(db_session, test_user.id)
        assert usage.upload_count == 3

    @pytest.mark.asyncio
    async def test_new_month_starts_from_zero(self, db_session: AsyncSession, test_user: User):
        await record_upload(db_session, test_user.id, now=datetime(2026, 1, 20))
        usage = await record_upload(db_session, test_user.id, now=datetime(2026, 2, 2))
        assert usage.upload_count == 1
        assert usage.period_start == datetime(2026, 2, 1)

    @pytest.mark.asyncio
    async def test_increments_existing_row_in_place(self, db_session: AsyncSession, test_user: User):
        period_start, period_end = current_billing_period()
        db_session.add(
            UsageTracking(
                user_id=test_user.id,
                period_start=period_start,
                period_end=period_end,
                upload_count=5,
            )
        )
        await db_session.flush()

        await record_upload(db_session, test_user.id)
        usage = await record_upload(db_session, test_user.id)

        assert usage.upload_count == 7
        rows = await db_session.execute(
            select(func.count()).select_from(UsageTracking).where(UsageTracking.user_id == test_user.id)
        )
        assert rows.scalar_one() == 1


class TestUsageSummary:
    @pytest.mark.asyncio
    async def test_no_subscription_falls_back_to_free(self, db_session: AsyncSession, test_user: User):
        summary = await get_usage_summary(db_session, test_user.id)
        assert summary.plan_name == "Free"
        assert summary.monthly_limit == 3
        assert summary.current_usage == 0
        assert summary.can_upload is True

    @pytest.mark.asyncio
    async def test_active_subscription_sets_limit(self, db_session: AsyncSession, test_user: User):
        await _subscribe(db_session, test_user, "price_pro")
        await record_upload(db_session, test_user.id)

        summary = await get_usage_summary(db_session, test_user.id)

        assert summary.plan_name == "Pro"
        assert summary.monthly_limit == 50
        assert summary.remaining == 49

    @pytest.mark.asyncio
    async def test_canceled_subscription_is_free(self, db_session: AsyncSession, test_user: User):
        await _subscribe(db_session, test_user, "price_pro", status="canceled")
        summary = await get_usage_summary(db_session, test_user.id)
        assert summary.plan_name == "Free"

    @pytest.mark.asyncio
    async def test_limit_reached(self, db_session: AsyncSession, test_user: User):
        for _ in range(3):
            await record_upload(db_session, test_user.id)
        summary = await get_usage_summary(db_session, test_user.id)
        assert summary.can_upload is False
        assert summary.remaining == 0


class TestResetUsage:
    @pytest.mark.asyncio
    async def test_reset_zeroes_current_period(self, db_session: AsyncSession, test_user: User):
        email = test_user.email
        for _ in range(2):
            await record_upload(db_session, test_user.id)

        outcome = await reset_usage_by_email(db_session, email)

        assert outcome.status == "reset"
        assert outcome.previous_count == 2
        usage = await get_current_usage(db_session, outcome.user_id)
        assert usage.upload_count == 0

    @pytest.mark.asyncio
    async def test_unknown_email(self, db_session: AsyncSession):
        outcome = await reset_usage_by_email(db_session, "nobody@test.com")
        assert outcome.status == "user_not_found"

    @pytest.mark.asyncio
    async def test_no_usage_this_period(self, db_session: AsyncSession, test_user: User):
        outcome = await reset_usage_by_email(db_session, test_user.email)
        assert outcome.status == "no_usage"
        assert outcome.user_id == test_user.id
