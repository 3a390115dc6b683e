"""
Stripe Webhook Endpoint.

Receives signed events from Stripe. The raw body is verified against the
``Stripe-Signature`` header before anything is parsed or stored.
"""

from __future__ import annotations

from typing import Optional

import stripe
from fastapi import APIRouter, Depends, Header, Request

from buildboss.core.errors import BadRequestError
from buildboss.core.logging_config import get_logger, get_security_logger
from buildboss.core.monitoring import log_billing_event
from buildboss.server.core.config import settings
from buildboss.server.services.billing import handle_stripe_event
from buildboss.server.services.deps import SessionDep
from buildboss.server.services.stripe_gateway import StripeGateway, get_stripe_gateway, verify_webhook_signature

logger = get_logger(__name__)
security_logger = get_security_logger()

router = APIRouter(tags=["webhooks"])


@router.post(
    "/stripe",
    summary="Stripe Webhook",
    description="Verify and apply a Stripe event.",
    response_description="Acknowledgement once the signature is valid.",
    responses={400: {"description": "Webhook secret missing or signature invalid"}},
)
async def stripe_webhook(
    request: Request,
    session: SessionDep,
    stripe_signature: Optional[str] = Header(default=None, alias="Stripe-Signature"),
    gateway: Optional[StripeGateway] = Depends(get_stripe_gateway),
):
    secret = settings.stripe.webhook_secret
    if not secret:
        raise BadRequestError("Webhook secret is not configured")
    payload = await request.body()
    try:
        event = verify_webhook_signature(payload, stripe_signature, secret)
    except stripe.SignatureVerificationError as e:
        security_logger.warning(f"Rejected Stripe webhook: {e}")
        raise BadRequestError(f"Webhook signature verification failed: {e}")

    event_type = event.get("type", "")
    logger.info(f"Stripe event received: {event_type} ({event.get('id')})")
    log_billing_event(event_type, event_id=event.get("id"))
    await handle_stripe_event(session, event, gateway)
    return {"received": True}
