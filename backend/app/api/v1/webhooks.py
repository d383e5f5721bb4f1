"""Stripe webhook endpoint — receives and reconciles Stripe events."""

import logging

import stripe
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, get_stripe_gateway
from app.billing.stripe_client import StripeGateway
from app.billing.webhooks import reconcile_event
from app.errors import WebhookProcessingError
from app.services import audit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/webhooks", tags=["webhooks"])


@router.post("/stripe", response_model=None)
async def stripe_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
    gateway: StripeGateway = Depends(get_stripe_gateway),
) -> Response | dict[str, bool]:
    """Receive and process Stripe webhook events."""
    # Raw bytes: the signature covers the exact payload
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature", "")

    try:
        event = gateway.construct_event(payload, sig_header)
    except (stripe.SignatureVerificationError, ValueError) as e:
        logger.warning("Webhook verification failed: %s", e)
        audit.log_failure("webhook_verification", "stripe_event", str(e))
        return PlainTextResponse(
            f"Webhook Error: {e}",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    try:
        await reconcile_event(db, event)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception("Error processing webhook event %s", event.id)
        raise WebhookProcessingError() from e

    return {"received": True}
