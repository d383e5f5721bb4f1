"""Stripe gateway — the process-wide payment provider client for LuminaryLab."""

import logging

import stripe
from fastapi import Request
from stripe import StripeClient

from app.config import Settings

logger = logging.getLogger(__name__)


class StripeGateway:
    """Wraps the Stripe SDK calls the application makes.

    Built once by ``create_app`` and shared by every request. The underlying
    ``StripeClient`` is created on first use so that processes which never
    talk to Stripe (tests, maintenance scripts) do not need a secret key.
    """

    def __init__(self, secret_key: str, webhook_secret: str, app_url: str) -> None:
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret
        self._app_url = app_url.rstrip("/")
        self._client: StripeClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "StripeGateway":
        return cls(
            secret_key=settings.stripe_secret_key,
            webhook_secret=settings.stripe_webhook_secret,
            app_url=settings.app_url,
        )

    @property
    def client(self) -> StripeClient:
        """The lazily-constructed ``StripeClient``."""
        if self._client is None:
            if not self._secret_key:
                raise RuntimeError("STRIPE_SECRET_KEY is not set")
            self._client = StripeClient(
                self._secret_key,
                http_client=stripe.HTTPXClient(),
            )
        return self._client

    async def create_checkout_session(
        self, user_id: str, email: str, price_id: str
    ) -> stripe.checkout.Session:
        """Open a subscription-mode Checkout Session attributed to ``user_id``.

        The user id is attached to the subscription's metadata; that is what
        the subscription webhooks carry back to the reconciler.
        """
        logger.info("Creating checkout session for user %s, price %s", user_id, price_id)
        return await self.client.v1.checkout.sessions.create_async(
            params={
                "mode": "subscription",
                "payment_method_types": ["card"],
                "line_items": [{"price": price_id, "quantity": 1}],
                "success_url": f"{self._app_url}/dashboard?success=true",
                "cancel_url": f"{self._app_url}/pricing?canceled=true",
                "customer_email": email,
                "metadata": {"user_id": user_id},
                "subscription_data": {"metadata": {"user_id": user_id}},
            }
        )

    def construct_event(self, payload: bytes, sig_header: str) -> stripe.Event:
        """Verify the signature and parse a webhook payload.

        Raises:
            stripe.SignatureVerificationError: The signature does not match.
            ValueError: The payload is not valid JSON.
        """
        return stripe.Webhook.construct_event(payload, sig_header, self._webhook_secret)


def get_stripe_gateway(request: Request) -> StripeGateway:
    """FastAPI dependency returning the gateway built at startup."""
    return request.app.state.stripe
