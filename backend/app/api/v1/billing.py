"""Billing API endpoints — plan catalog, usage, and Stripe Checkout."""

import logging

import stripe
from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db, get_stripe_gateway
from app.billing.plans import list_active_plans
from app.billing.stripe_client import StripeGateway
from app.errors import RequestValidationFailed, UpstreamServiceError
from app.models.user import User
from app.schemas.billing import (
    CheckoutRequest,
    CheckoutResponse,
    PlanResponse,
    PlansListResponse,
    UsageResponse,
)
from app.services import audit
from app.services.usage_service import get_usage_summary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/billing", tags=["billing"])


@router.get("/plans", response_model=PlansListResponse)
async def list_plans(db: AsyncSession = Depends(get_db)) -> PlansListResponse:
    """List active plans (public — no auth required)."""
    plans = await list_active_plans(db)
    return PlansListResponse(plans=[PlanResponse.model_validate(p) for p in plans])


@router.get("/usage", response_model=UsageResponse)
async def get_usage(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UsageResponse:
    """Uploads used and remaining in the current billing period."""
    summary = await get_usage_summary(db, current_user.id)
    return UsageResponse(
        plan_name=summary.plan_name,
        monthly_limit=summary.monthly_limit,
        current_usage=summary.current_usage,
        remaining=summary.remaining,
        can_upload=summary.can_upload,
        period_start=summary.period_start,
        period_end=summary.period_end,
    )


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout(
    request: Request,
    current_user: User = Depends(get_current_user),
    gateway: StripeGateway = Depends(get_stripe_gateway),
) -> CheckoutResponse:
    """Open a Stripe Checkout session for a subscription price.

    The body is parsed here rather than by FastAPI so that an anonymous caller
    always gets 401, whatever it sent.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    try:
        body = CheckoutRequest.model_validate(payload)
    except ValidationError as e:
        raise RequestValidationFailed(
            details=e.errors(include_url=False, include_context=False)
        ) from None

    try:
        session = await gateway.create_checkout_session(
            user_id=str(current_user.id),
            email=current_user.email,
            price_id=body.price_id,
        )
    except stripe.StripeError as e:
        logger.error("Stripe checkout error for user %s: %s", current_user.id, e)
        audit.log_failure("checkout_started", "subscription", str(e), user_id=current_user.id, price_id=body.price_id)
        raise UpstreamServiceError() from e

    audit.log_success("checkout_started", "subscription", user_id=current_user.id, price_id=body.price_id)
    return CheckoutResponse(session_id=session.id)
