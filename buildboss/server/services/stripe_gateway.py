"""Stripe gateway.

Purpose:
- Thin async wrapper over the ``stripe`` SDK for the few API calls the billing
  flow needs: customers, Checkout sessions and subscription updates.
- Verification of webhook signatures (``Stripe-Signature`` header).

Usage:
- Routers obtain a client through the ``get_stripe_gateway`` dependency so
  tests can substitute a fake.
- Catch ``StripeApiError`` for failed API calls and inspect ``status_code`` or
  ``details``.
- Catch ``stripe.SignatureVerificationError`` from ``verify_webhook_signature``.
"""

from __future__ import annotations

import json
from typing import Any, AsyncIterator, Dict, Optional

import stripe

from buildboss.core.logging_config import get_logger
from buildboss.server.core.config import StripeConfig, settings

logger = get_logger(__name__)

SIGNATURE_TOLERANCE_SECONDS = 300


class StripeApiError(Exception):
    """Stripe API call failed.

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP status code returned by Stripe.
        details: Optional error body returned by Stripe.
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class StripeGateway:
    """
    Async client for the Stripe API.

    Every call passes ``api_key`` explicitly so the process-wide ``stripe``
    module settings stay untouched.

    Responsibilities:
    - create_customer
    - create_checkout_session
    - update_subscription
    - retrieve_subscription
    """

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    async def _call(self, operation: str, method, *args, **params) -> Dict[str, Any]:
        logger.debug(f"StripeGateway: {operation}")
        try:
            return await method(*args, api_key=self.api_key, **params)
        except stripe.StripeError as e:
            raise StripeApiError(
                f"Stripe {operation} failed: {e.user_message or e}",
                status_code=e.http_status,
                details=e.json_body,
            ) from e

    async def create_customer(self, email: str, name: Optional[str] = None, metadata: Optional[Dict[str, str]] = None):
        return await self._call(
            "create customer", stripe.Customer.create_async, email=email, name=name, metadata=metadata or {}
        )

    async def create_checkout_session(
        self,
        *,
        customer_id: str,
        line_item: Dict[str, Any],
        success_url: str,
        cancel_url: str,
        metadata: Dict[str, str],
        trial_days: int = 0,
    ) -> Dict[str, Any]:
        """Create a subscription-mode Checkout session.

        Args:
            customer_id: Stripe customer the subscription is billed to
            line_item: Either ``{"price": id, "quantity": 1}`` or an inline ``price_data`` item
            success_url: Redirect after a successful payment
            cancel_url: Redirect when the user abandons Checkout
            metadata: Copied onto the session and the subscription
            trial_days: Trial length; 0 disables the trial

        Returns:
            The Checkout session object (``id``, ``url``, ...)
        """
        subscription_data: Dict[str, Any] = {"metadata": metadata}
        if trial_days > 0:
            subscription_data["trial_period_days"] = trial_days
        return await self._call(
            "create checkout session",
            stripe.checkout.Session.create_async,
            mode="subscription",
            customer=customer_id,
            payment_method_types=["card"],
            line_items=[line_item],
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=metadata,
            subscription_data=subscription_data,
        )

    async def update_subscription(self, subscription_id: str, *, cancel_at_period_end: bool) -> Dict[str, Any]:
        return await self._call(
            f"update subscription {subscription_id}",
            stripe.Subscription.modify_async,
            subscription_id,
            cancel_at_period_end=cancel_at_period_end,
        )

    async def retrieve_subscription(self, subscription_id: str) -> Dict[str, Any]:
        return await self._call(
            f"retrieve subscription {subscription_id}", stripe.Subscription.retrieve_async, subscription_id
        )


def verify_webhook_signature(
    payload: bytes,
    header: Optional[str],
    secret: str,
    *,
    tolerance: int = SIGNATURE_TOLERANCE_SECONDS,
) -> Dict[str, Any]:
    """
    Verify a webhook delivery and return the parsed event as a plain dict.

    Raises:
        stripe.SignatureVerificationError: Missing or malformed header, no
            matching ``v1`` signature, a timestamp outside ``tolerance``, or a
            signed body that is not a JSON object
    """
    if not header:
        raise stripe.SignatureVerificationError("Missing Stripe-Signature header", header, http_body=payload)
    body = payload.decode("utf-8", errors="replace")
    stripe.WebhookSignature.verify_header(body, header, secret, tolerance)

    try:
        event = json.loads(body)
    except ValueError as e:
        raise stripe.SignatureVerificationError("Webhook payload is not valid JSON", header, http_body=body) from e
    if not isinstance(event, dict):
        raise stripe.SignatureVerificationError("Webhook payload is not a JSON object", header, http_body=body)
    return event


async def get_stripe_gateway() -> AsyncIterator[Optional[StripeGateway]]:
    """FastAPI dependency: a gateway when Stripe is configured, otherwise ``None``."""
    config: StripeConfig = settings.stripe
    if not config.is_configured:
        yield None
        return
    yield StripeGateway(config.secret_key)
