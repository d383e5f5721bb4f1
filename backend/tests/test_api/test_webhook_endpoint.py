"""Tests for POST /api/v1/webhooks/stripe with Stripe-signed payloads."""

import hashlib
import hmac
import json
import time

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.subscription import UserSubscription
from app.models.user import User

WEBHOOK_URL = "/api/v1/webhooks/stripe"


def _sign(payload: str, secret: str, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header the way Stripe does."""
    timestamp = timestamp or int(time.time())
    signature = hmac.new(
        secret.encode("utf-8"),
        f"{timestamp}.{payload}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


def _subscription_event(event_type: str, user_id: str | None, created: int, status: str = "active") -> str:
    now = int(time.time())
    return json.dumps({
        "id": f"evt_{event_type.replace('.', '_')}_{created}",
        "object": "event",
        "type": event_type,
        "created": created,
        "data": {
            "object": {
                "id": "sub_webhook_1",
                "object": "subscription",
                "customer": "cus_webhook_1",
                "status": status,
                "metadata": {"user_id": user_id} if user_id else {},
                "items": {
                    "object": "list",
                    "data": [{
                        "id": "si_1",
                        "object": "subscription_item",
                        "price": {"id": "price_pro", "object": "price"},
                        "current_period_end": now + 30 * 86400,
                    }],
                },
            }
        },
    })


async def _post(client: AsyncClient, payload: str, secret: str):
    return await client.post(
        WEBHOOK_URL,
        content=payload,
        headers={"Stripe-Signature": _sign(payload, secret), "Content-Type": "application/json"},
    )


async def _stored(db_session: AsyncSession) -> list[UserSubscription]:
    result = await db_session.execute(
        select(UserSubscription).execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


class TestSignatureVerification:
    @pytest.mark.asyncio
    async def test_bad_signature_returns_400(self, client: AsyncClient, db_session: AsyncSession):
        payload = _subscription_event("customer.subscription.created", None, int(time.time()))
        response = await _post(client, payload, "whsec_wrong")
        assert response.status_code == 400
        assert response.text.startswith("Webhook Error:")
        assert await _stored(db_session) == []

    @pytest.mark.asyncio
    async def test_missing_signature_returns_400(self, client: AsyncClient):
        response = await client.post(WEBHOOK_URL, content=b"{}")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_malformed_payload_returns_400(self, client: AsyncClient, webhook_secret: str):
        response = await _post(client, "not json", webhook_secret)
        assert response.status_code == 400


class TestEventProcessing:
    @pytest.mark.asyncio
    async def test_subscription_created_is_stored(
        self, client: AsyncClient, db_session: AsyncSession, webhook_secret: str, test_user: User
    ):
        user_id = str(test_user.id)
        payload = _subscription_event("customer.subscription.created", user_id, int(time.time()))

        response = await _post(client, payload, webhook_secret)

        assert response.status_code == 200
        assert response.json() == {"received": True}
        rows = await _stored(db_session)
        assert len(rows) == 1
        assert rows[0].id == "sub_webhook_1"
        assert str(rows[0].user_id) == user_id
        assert rows[0].plan_id == "price_pro"
        assert rows[0].status == "active"

    @pytest.mark.asyncio
    async def test_redelivery_keeps_one_row(
        self, client: AsyncClient, db_session: AsyncSession, webhook_secret: str, test_user: User
    ):
        payload = _subscription_event("customer.subscription.created", str(test_user.id), int(time.time()))

        first = await _post(client, payload, webhook_secret)
        second = await _post(client, payload, webhook_secret)

        assert first.status_code == second.status_code == 200
        assert len(await _stored(db_session)) == 1

    @pytest.mark.asyncio
    async def test_missing_user_id_is_acknowledged_without_write(
        self, client: AsyncClient, db_session: AsyncSession, webhook_secret: str
    ):
        payload = _subscription_event("customer.subscription.created", None, int(time.time()))
        response = await _post(client, payload, webhook_secret)
        assert response.status_code == 200
        assert await _stored(db_session) == []

    @pytest.mark.asyncio
    async def test_deleted_then_stale_created_stays_canceled(
        self, client: AsyncClient, db_session: AsyncSession, webhook_secret: str, test_user: User
    ):
        user_id = str(test_user.id)
        now = int(time.time())

        await _post(client, _subscription_event("customer.subscription.created", user_id, now - 120), webhook_secret)
        await _post(client, _subscription_event("customer.subscription.deleted", user_id, now - 60, status="canceled"), webhook_secret)
        await _post(client, _subscription_event("customer.subscription.updated", user_id, now - 90), webhook_secret)

        rows = await _stored(db_session)
        assert len(rows) == 1
        assert rows[0].status == "canceled"

    @pytest.mark.asyncio
    async def test_delete_for_unknown_subscription_is_acknowledged(
        self, client: AsyncClient, db_session: AsyncSession, webhook_secret: str
    ):
        payload = _subscription_event("customer.subscription.deleted", None, int(time.time()), status="canceled")
        response = await _post(client, payload, webhook_secret)
        assert response.status_code == 200
        assert await _stored(db_session) == []

    @pytest.mark.asyncio
    async def test_unhandled_event_type_is_acknowledged(self, client: AsyncClient, webhook_secret: str):
        payload = json.dumps({
            "id": "evt_refund",
            "object": "event",
            "type": "charge.refunded",
            "created": int(time.time()),
            "data": {"object": {"id": "ch_1", "object": "charge"}},
        })
        response = await _post(client, payload, webhook_secret)
        assert response.status_code == 200
        assert response.json() == {"received": True}
