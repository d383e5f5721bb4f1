"""Pydantic v2 request/response schemas for billing endpoints."""

from datetime import datetime
from typing import Any

from pydantic import Field

from app.schemas.base import CamelModel

# --- Request schemas ---


class CheckoutRequest(CamelModel):
    """Request to open a Stripe Checkout session for a price."""

    price_id: str = Field(..., min_length=1)


# --- Response schemas ---


class CheckoutResponse(CamelModel):
    """Checkout session id the client redirects with."""

    session_id: str


class PlanResponse(CamelModel):
    """Plan details for display."""

    name: str
    price_reference: str | None
    monthly_upload_limit: int
    features: dict[str, Any] | None = None


class PlansListResponse(CamelModel):
    plans: list[PlanResponse]


class UsageResponse(CamelModel):
    """Upload usage for the current billing period."""

    plan_name: str
    monthly_limit: int
    current_usage: int
    remaining: int
    can_upload: bool
    period_start: datetime
    period_end: datetime
