"""Plan catalog — subscription tiers, upload quotas, and idempotent seeding."""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.subscription import SubscriptionPlan

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanDefinition:
    """Static definition of a subscription tier."""

    name: str
    monthly_upload_limit: int
    price_reference: str | None  # Stripe price id; None for the free tier
    features: dict[str, Any] = field(default_factory=dict)


FREE_PLAN = PlanDefinition(
    name="Free",
    monthly_upload_limit=3,
    price_reference=None,
    features={
        "uploadsPerMonth": 3,
        "maxFileSize": "100MB",
        "processing": "Standard quality",
        "exportFormats": ["JPEG", "PNG"],
        "support": "Community",
    },
)

CATALOG: list[PlanDefinition] = [
    FREE_PLAN,
    PlanDefinition(
        name="Pro",
        monthly_upload_limit=50,
        price_reference=settings.stripe_pro_price_id or None,
        features={
            "uploadsPerMonth": 50,
            "maxFileSize": "100MB",
            "processing": "High quality",
            "exportFormats": ["JPEG", "PNG", "TIFF"],
            "support": "Email",
        },
    ),
    PlanDefinition(
        name="Studio",
        monthly_upload_limit=200,
        price_reference=settings.stripe_studio_price_id or None,
        features={
            "uploadsPerMonth": 200,
            "maxFileSize": "100MB",
            "processing": "Ultra quality",
            "exportFormats": ["JPEG", "PNG", "TIFF", "RAW"],
            "support": "Priority",
        },
    ),
]


@dataclass(frozen=True)
class SeedResult:
    name: str
    created: bool


async def seed_subscription_plans(
    db: AsyncSession, catalog: list[PlanDefinition] | None = None
) -> list[SeedResult]:
    """Insert each catalog plan unless a plan with the same name already exists."""
    results: list[SeedResult] = []
    for plan in catalog if catalog is not None else CATALOG:
        existing = await db.execute(
            select(SubscriptionPlan.id).where(SubscriptionPlan.name == plan.name).limit(1)
        )
        if existing.first() is not None:
            logger.info("%s plan already exists", plan.name)
            results.append(SeedResult(name=plan.name, created=False))
            continue

        db.add(
            SubscriptionPlan(
                name=plan.name,
                price_reference=plan.price_reference,
                monthly_upload_limit=plan.monthly_upload_limit,
                features=plan.features,
                active=True,
            )
        )
        await db.flush()
        logger.info("Created %s plan", plan.name)
        results.append(SeedResult(name=plan.name, created=True))
    return results


async def list_active_plans(db: AsyncSession) -> list[SubscriptionPlan]:
    """Active plans, cheapest quota first."""
    result = await db.execute(
        select(SubscriptionPlan)
        .where(SubscriptionPlan.active.is_(True))
        .order_by(SubscriptionPlan.monthly_upload_limit)
    )
    return list(result.scalars().all())


async def get_plan_by_price_reference(db: AsyncSession, price_reference: str) -> SubscriptionPlan | None:
    """Reverse lookup: Stripe price id -> plan row."""
    result = await db.execute(
        select(SubscriptionPlan).where(SubscriptionPlan.price_reference == price_reference)
    )
    return result.scalar_one_or_none()
