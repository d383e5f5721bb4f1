"""Tests for the plan catalog, seeding and GET /api/v1/billing/plans."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.billing.plans import (
    CATALOG,
    FREE_PLAN,
    PlanDefinition,
    get_plan_by_price_reference,
    list_active_plans,
    seed_subscription_plans,
)
from app.models.subscription import SubscriptionPlan

TEST_CATALOG = [
    FREE_PLAN,
    PlanDefinition(name="Pro", monthly_upload_limit=50, price_reference="price_pro"),
    PlanDefinition(name="Studio", monthly_upload_limit=200, price_reference="price_studio"),
]


class TestCatalog:
    def test_catalog_tiers(self):
        limits = {plan.name: plan.monthly_upload_limit for plan in CATALOG}
        assert limits == {"Free": 3, "Pro": 50, "Studio": 200}

    def test_free_plan_has_no_price(self):
        assert FREE_PLAN.price_reference is None


class TestSeeding:
    @pytest.mark.asyncio
    async def test_seed_creates_every_plan(self, db_session: AsyncSession):
        results = await seed_subscription_plans(db_session, TEST_CATALOG)
        assert [r.created for r in results] == [True, True, True]

        plans = await list_active_plans(db_session)
        assert [p.name for p in plans] == ["Free", "Pro", "Studio"]

    @pytest.mark.asyncio
    async def test_seed_twice_keeps_one_row_per_name(self, db_session: AsyncSession):
        await seed_subscription_plans(db_session, TEST_CATALOG)
        second = await seed_subscription_plans(db_session, TEST_CATALOG)

        assert [r.created for r in second] == [False, False, False]
        result = await db_session.execute(
            select(SubscriptionPlan.name, func.count()).group_by(SubscriptionPlan.name)
        )
        assert dict(result.all()) == {"Free": 1, "Pro": 1, "Studio": 1}

    @pytest.mark.asyncio
    async def test_seed_leaves_existing_plan_untouched(self, db_session: AsyncSession):
        db_session.add(SubscriptionPlan(name="Pro", price_reference="price_legacy", monthly_upload_limit=40))
        await db_session.flush()

        results = await seed_subscription_plans(db_session, TEST_CATALOG)

        assert {r.name: r.created for r in results} == {"Free": True, "Pro": False, "Studio": True}
        pro = await get_plan_by_price_reference(db_session, "price_legacy")
        assert pro is not None
        assert pro.monthly_upload_limit == 40

    @pytest.mark.asyncio
    async def test_price_reference_lookup_miss(self, db_session: AsyncSession):
        await seed_subscription_plans(db_session, TEST_CATALOG)
        assert await get_plan_by_price_reference(db_session, "price_unknown") is None
        studio = await get_plan_by_price_reference(db_session, "price_studio")
        assert studio.name == "Studio"


class TestListPlansEndpoint:
    @pytest.mark.asyncio
    async def test_public_and_excludes_inactive(self, client: AsyncClient, db_session: AsyncSession):
        await seed_subscription_plans(db_session, TEST_CATALOG)
        db_session.add(SubscriptionPlan(name="Legacy", monthly_upload_limit=10, active=False))
        await db_session.flush()

        response = await client.get("/api/v1/billing/plans")

        assert response.status_code == 200
        plans = response.json()["plans"]
        assert [p["name"] for p in plans] == ["Free", "Pro", "Studio"]
        assert plans[1]["priceReference"] == "price_pro"
        assert plans[1]["monthlyUploadLimit"] == 50
        assert plans[0]["features"]["uploadsPerMonth"] == 3
