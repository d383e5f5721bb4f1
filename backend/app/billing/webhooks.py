"""Stripe webhook reconciliation — apply subscription lifecycle events locally."""

import logging
import uuid
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

import stripe
from sqlalchemy.ext.asyncio import AsyncSession

from app.services import audit
from app.services.subscription_service import cancel_subscription, upsert_subscription

logger = logging.getLogger(__name__)

USER_ID_METADATA_KEY = "user_id"


def _ts_to_naive(ts: int | None) -> datetime | None:
    """Convert Stripe Unix timestamp to naive UTC datetime."""
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).replace(tzinfo=None)


def _get_first_item(stripe_sub: stripe.Subscription):
    """Get the first subscription item, using bracket notation to avoid
    collision with Python dict .items() on Stripe objects.
    """
    sub_items = stripe_sub["items"]
    if sub_items and sub_items.data:
        return sub_items.data[0]
    return None


def _get_price_id(stripe_sub: stripe.Subscription) -> str | None:
    item = _get_first_item(stripe_sub)
    return item.price.id if item else None


def _get_period_end(stripe_sub: stripe.Subscription) -> datetime | None:
    """Current period end from the first item, falling back to the subscription.

    Since API version 2025-08-27 the billing period lives on subscription items.
    """
    item = _get_first_item(stripe_sub)
    ts = getattr(item, "current_period_end", None) if item else None
    if ts is None:
        ts = getattr(stripe_sub, "current_period_end", None)
    return _ts_to_naive(ts)


def _get_user_id(stripe_sub: stripe.Subscription) -> uuid.UUID | None:
    metadata = getattr(stripe_sub, "metadata", None)
    if not metadata or USER_ID_METADATA_KEY not in metadata:
        return None
    raw = metadata[USER_ID_METADATA_KEY]
    if not raw:
        return None
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        logger.warning("Subscription %s carries malformed user id %r", stripe_sub.id, raw)
        return None


async def handle_subscription_upsert(db: AsyncSession, event: stripe.Event) -> None:
    """Handle customer.subscription.created / .updated — mirror the subscription."""
    stripe_sub = event.data.object
    user_id = _get_user_id(stripe_sub)

    if user_id is None:
        logger.info(
            "Subscription %s (event %s) has no user id in metadata, ignoring",
            stripe_sub.id,
            event.id,
        )
        return

    price_id = _get_price_id(stripe_sub)
    if price_id is None:
        logger.warning("Subscription %s has no items, ignoring event %s", stripe_sub.id, event.id)
        return

    await upsert_subscription(
        db,
        subscription_id=stripe_sub.id,
        user_id=user_id,
        plan_id=price_id,
        customer_id=stripe_sub.customer,
        status=stripe_sub.status,
        current_period_end=_get_period_end(stripe_sub),
        event_at=_ts_to_naive(event.created),
    )


async def handle_invoice_payment_succeeded(db: AsyncSession, event: stripe.Event) -> None:
    """Handle invoice.payment_succeeded — audit only, no state change."""
    invoice = event.data.object
    audit.log_success(
        "payment_succeeded",
        "invoice",
        resource_id=invoice.id,
        subscription=getattr(invoice, "subscription", None),
        customer=getattr(invoice, "customer", None),
    )


async def handle_subscription_deleted(db: AsyncSession, event: stripe.Event) -> None:
    """Handle customer.subscription.deleted — mark the local row canceled."""
    subscription_id = event.data.object.id
    changed = await cancel_subscription(db, subscription_id, _ts_to_naive(event.created))
    if changed:
        logger.info("Subscription %s canceled", subscription_id)
    else:
        logger.info("No applicable local subscription for %s (delete event), nothing to do", subscription_id)


EventHandler = Callable[[AsyncSession, stripe.Event], Awaitable[None]]

EVENT_HANDLERS: dict[str, EventHandler] = {
    "customer.subscription.created": handle_subscription_upsert,
    "customer.subscription.updated": handle_subscription_upsert,
    "invoice.payment_succeeded": handle_invoice_payment_succeeded,
    "customer.subscription.deleted": handle_subscription_deleted,
}


async def reconcile_event(db: AsyncSession, event: stripe.Event) -> bool:
    """Dispatch a verified event. Returns False for event types we ignore."""
    handler = EVENT_HANDLERS.get(event.type)
    if handler is None:
        logger.debug("Unhandled webhook event type: %s", event.type)
        return False

    logger.info("Processing webhook event: %s (id=%s)", event.type, event.id)
    await handler(db, event)
    return True
