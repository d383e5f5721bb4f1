"""Plan gating dependencies — enforce upload quotas from the subscription plan."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.database import get_db
from app.errors import QuotaExceededError
from app.models.user import User
from app.services.usage_service import UsageSummary, get_usage_summary


async def check_upload_quota(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
) -> UsageSummary:
    """Raise 402 if the user has used up this month's uploads; return the summary otherwise."""
    summary = await get_usage_summary(db, user.id)
    if not summary.can_upload:
        raise QuotaExceededError(
            f"Upload limit reached ({summary.current_usage}/{summary.monthly_limit}). "
            "Upgrade your plan for more uploads.",
            details={
                "limit": summary.monthly_limit,
                "current": summary.current_usage,
                "plan": summary.plan_name,
                "upgradeUrl": "/api/v1/billing/checkout",
            },
        )
    return summary
