"""
Stripe webhook event handling.

Mirrors subscription and invoice events from Stripe into the local
``subscriptions`` and ``payments`` tables. Each handler receives the event's
``data.object`` and commits its own changes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from buildboss.core.database.base import utc_now
from buildboss.core.database.entities.subscriptions import Payment, Subscription
from buildboss.core.database.repositories import PaymentRepository, PlanRepository, SubscriptionRepository
from buildboss.core.logging_config import get_logger
from buildboss.core.models.domain.enums import PaymentStatus, SubscriptionStatus
from buildboss.core.monitoring import log_billing_event

from .stripe_gateway import StripeApiError, StripeGateway

logger = get_logger(__name__)

EventHandler = Callable[[AsyncSession, Dict[str, Any], Optional[StripeGateway]], Awaitable[None]]


def from_timestamp(value: Optional[int]) -> Optional[datetime]:
    """Stripe unix timestamp as naive UTC."""
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc).replace(tzinfo=None)


def map_status(stripe_status: Optional[str]) -> str:
    """Stripe subscription status to the local enum value (``trialing`` is ``TRIAL``)."""
    if not stripe_status:
        return SubscriptionStatus.ACTIVE.value
    if stripe_status == "trialing":
        return SubscriptionStatus.TRIAL.value
    status = stripe_status.upper()
    if status in SubscriptionStatus.__members__:
        return SubscriptionStatus[status].value
    logger.warning(f"Unknown Stripe subscription status: {stripe_status}")
    return SubscriptionStatus.INCOMPLETE.value


def _period_end(stripe_subscription: Dict[str, Any]) -> Optional[int]:
    if stripe_subscription.get("current_period_end"):
        return stripe_subscription["current_period_end"]
    items = (stripe_subscription.get("items") or {}).get("data") or []
    return items[0].get("current_period_end") if items else None


def _price_id(stripe_subscription: Dict[str, Any]) -> Optional[str]:
    items = (stripe_subscription.get("items") or {}).get("data") or []
    if not items:
        return None
    return (items[0].get("price") or {}).get("id")


async def handle_checkout_completed(
    session: AsyncSession, checkout: Dict[str, Any], gateway: Optional[StripeGateway]
) -> None:
    """Create or update the user's subscription from a completed Checkout session."""
    metadata = checkout.get("metadata") or {}
    user_id, plan_id = metadata.get("user_id"), metadata.get("plan_id")
    if not user_id or not plan_id:
        logger.warning(f"Checkout session {checkout.get('id')} has no user or plan metadata")
        return
    if await PlanRepository(session).get_by_id(plan_id) is None:
        logger.warning(f"Checkout session {checkout.get('id')} references unknown plan {plan_id}")
        return

    stripe_subscription: Dict[str, Any] = {}
    subscription_id = checkout.get("subscription")
    if gateway is not None and subscription_id:
        try:
            stripe_subscription = await gateway.retrieve_subscription(subscription_id)
        except StripeApiError as e:
            logger.error(f"Could not retrieve Stripe subscription {subscription_id}: {e}")

    values = {
        "plan_id": plan_id,
        "status": map_status(stripe_subscription.get("status")),
        "stripe_customer_id": checkout.get("customer"),
        "stripe_subscription_id": subscription_id,
        "stripe_price_id": _price_id(stripe_subscription),
        "trial_end_date": from_timestamp(stripe_subscription.get("trial_end")),
        "end_date": from_timestamp(_period_end(stripe_subscription)),
        "next_billing_date": from_timestamp(_period_end(stripe_subscription)),
        "cancel_at_period_end": False,
        "canceled_at": None,
        "cancel_reason": None,
    }
    subscriptions = SubscriptionRepository(session)
    existing = await subscriptions.get_for_user(user_id)
    if existing is None:
        await subscriptions.create(Subscription(user_id=user_id, start_date=utc_now(), **values))
    else:
        await subscriptions.apply_update(existing, {"start_date": utc_now(), **values})
    logger.info(f"Subscription of user {user_id} activated on plan {plan_id}")


async def handle_subscription_updated(
    session: AsyncSession, stripe_subscription: Dict[str, Any], gateway: Optional[StripeGateway]
) -> None:
    """Sync status, period and the cancellation flag of a known subscription."""
    subscriptions = SubscriptionRepository(session)
    subscription = await subscriptions.get_by_stripe_subscription_id(stripe_subscription.get("id", ""))
    if subscription is None:
        logger.info(f"Ignoring update of unknown Stripe subscription {stripe_subscription.get('id')}")
        return
    changes = {
        "status": map_status(stripe_subscription.get("status")),
        "cancel_at_period_end": bool(stripe_subscription.get("cancel_at_period_end")),
        "trial_end_date": from_timestamp(stripe_subscription.get("trial_end")),
    }
    period_end = from_timestamp(_period_end(stripe_subscription))
    if period_end is not None:
        changes["end_date"] = period_end
        changes["next_billing_date"] = period_end
    await subscriptions.apply_update(subscription, changes)


async def handle_subscription_deleted(
    session: AsyncSession, stripe_subscription: Dict[str, Any], gateway: Optional[StripeGateway]
) -> None:
    subscriptions = SubscriptionRepository(session)
    subscription = await subscriptions.get_by_stripe_subscription_id(stripe_subscription.get("id", ""))
    if subscription is None:
        return
    now = utc_now()
    await subscriptions.apply_update(
        subscription,
        {"status": SubscriptionStatus.CANCELED.value, "end_date": now, "canceled_at": now, "cancel_at_period_end": False},
    )
    log_billing_event("subscription.canceled", subscription.user_id)


async def _invoice_subscription(session: AsyncSession, invoice: Dict[str, Any]) -> Optional[Subscription]:
    stripe_subscription_id = invoice.get("subscription")
    if not stripe_subscription_id:
        return None
    return await SubscriptionRepository(session).get_by_stripe_subscription_id(stripe_subscription_id)


async def handle_payment_succeeded(
    session: AsyncSession, invoice: Dict[str, Any], gateway: Optional[StripeGateway]
) -> None:
    """Record the payment and mark the subscription ACTIVE until the invoiced period ends."""
    subscription = await _invoice_subscription(session, invoice)
    if subscription is None:
        logger.info(f"Invoice {invoice.get('id')} does not belong to a known subscription")
        return
    await PaymentRepository(session).create(
        Payment(
            subscription_id=subscription.id,
            amount=int(invoice.get("amount_paid") or 0),
            currency=str(invoice.get("currency") or "pln").upper(),
            status=PaymentStatus.SUCCEEDED.value,
            description=invoice.get("description") or "Subscription payment",
            stripe_invoice_id=invoice.get("id"),
            stripe_payment_intent_id=invoice.get("payment_intent"),
            paid_at=utc_now(),
        )
    )
    lines = (invoice.get("lines") or {}).get("data") or []
    period_end = from_timestamp((lines[0].get("period") or {}).get("end")) if lines else None
    changes: Dict[str, Any] = {"status": SubscriptionStatus.ACTIVE.value}
    if period_end is not None:
        changes["next_billing_date"] = period_end
    await SubscriptionRepository(session).apply_update(subscription, changes)
    log_billing_event("invoice.paid", subscription.user_id, amount=invoice.get("amount_paid"))


async def handle_payment_failed(
    session: AsyncSession, invoice: Dict[str, Any], gateway: Optional[StripeGateway]
) -> None:
    subscription = await _invoice_subscription(session, invoice)
    if subscription is None:
        return
    failure = (invoice.get("last_finalization_error") or {}).get("message") or "Payment failed"
    await PaymentRepository(session).create(
        Payment(
            subscription_id=subscription.id,
            amount=int(invoice.get("amount_due") or 0),
            currency=str(invoice.get("currency") or "pln").upper(),
            status=PaymentStatus.FAILED.value,
            description=invoice.get("description") or "Subscription payment",
            stripe_invoice_id=invoice.get("id"),
            stripe_payment_intent_id=invoice.get("payment_intent"),
            failure_reason=failure,
        )
    )
    await SubscriptionRepository(session).apply_update(subscription, {"status": SubscriptionStatus.PAST_DUE.value})
    log_billing_event("invoice.payment_failed", subscription.user_id)


async def handle_trial_will_end(
    session: AsyncSession, stripe_subscription: Dict[str, Any], gateway: Optional[StripeGateway]
) -> None:
    logger.info(f"Trial of Stripe subscription {stripe_subscription.get('id')} ends soon")


EVENT_HANDLERS: Dict[str, EventHandler] = {
    "checkout.session.completed": handle_checkout_completed,
    "customer.subscription.created": handle_subscription_updated,
    "customer.subscription.updated": handle_subscription_updated,
    "customer.subscription.deleted": handle_subscription_deleted,
    "invoice.payment_succeeded": handle_payment_succeeded,
    "invoice.payment_failed": handle_payment_failed,
    "customer.subscription.trial_will_end": handle_trial_will_end,
}


async def handle_stripe_event(
    session: AsyncSession, event: Dict[str, Any], gateway: Optional[StripeGateway] = None
) -> bool:
    """
    Dispatch a verified Stripe event to its handler.

    Args:
        session: Database session
        event: Parsed event (``type`` and ``data.object``)
        gateway: Stripe client used to look up subscription details, if configured

    Returns:
        Whether the event type has a handler
    """
    event_type = event.get("type", "")
    data_object = (event.get("data") or {}).get("object") or {}
    handler = EVENT_HANDLERS.get(event_type)
    if handler is None:
        logger.info(f"Unhandled Stripe event: {event_type}")
        return False
    await handler(session, data_object, gateway)
    return True
