"""
Subscriptions API Endpoints.

Plan catalogue, the caller's subscription and usage, and the Stripe Checkout
flow used to upgrade. Subscription state changes that happen in Stripe arrive
through the webhook endpoint.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from buildboss.core.database.base import utc_now
from buildboss.core.database.entities.subscriptions import SubscriptionPlan
from buildboss.core.database.repositories import PaymentRepository, PlanRepository, SubscriptionRepository
from buildboss.core.errors import BadRequestError, NotFoundError, ServiceUnavailableError
from buildboss.core.logging_config import get_logger
from buildboss.core.models.domain.enums import SubscriptionStatus
from buildboss.core.models.io import (
    CancelRequest,
    CheckoutRequest,
    CheckoutSession,
    PaymentRead,
    PlanRead,
    SubscriptionRead,
)
from buildboss.core.monitoring import log_billing_event
from buildboss.server.core.config import settings
from buildboss.server.services.deps import CurrentUserDep, SessionDep
from buildboss.server.services.stripe_gateway import StripeGateway, get_stripe_gateway
from buildboss.server.services.subscription_limits import (
    get_subscription_with_plan,
    get_usage_stats,
    is_subscription_active,
    plan_limits,
    usage_percentages,
)

logger = get_logger(__name__)

router = APIRouter(tags=["subscriptions"])

DEFAULT_CANCEL_REASON = "cancelled by user"


def _require_gateway(gateway: Optional[StripeGateway]) -> StripeGateway:
    if gateway is None:
        raise ServiceUnavailableError("Payments are not configured")
    return gateway


def _line_item(plan: SubscriptionPlan) -> Dict[str, Any]:
    """Checkout line item: the plan's Stripe price when set, otherwise an inline monthly price."""
    if plan.stripe_price_id:
        return {"price": plan.stripe_price_id, "quantity": 1}
    return {
        "price_data": {
            "currency": plan.currency.lower(),
            "product_data": {
                "name": plan.display_name,
                "description": plan.description or f"Subscription {plan.display_name}",
            },
            "unit_amount": plan.price,
            "recurring": {"interval": "month"},
        },
        "quantity": 1,
    }


@router.get(
    "/plans",
    summary="List Plans",
    description="Active subscription plans ordered by price.",
)
async def list_plans(session: SessionDep):
    plans = await PlanRepository(session).list_active()
    return {"plans": [PlanRead.model_validate(plan) for plan in plans]}


@router.get(
    "/current",
    summary="Current Subscription",
    description="The caller's subscription with plan, usage and the five most recent payments.",
)
async def current_subscription(user: CurrentUserDep, session: SessionDep):
    subscription, plan = await get_subscription_with_plan(session, user.id)
    if subscription is None:
        return {"subscription": None}
    read = SubscriptionRead.model_validate(subscription)
    read.plan = PlanRead.model_validate(plan) if plan else None
    payments = await PaymentRepository(session).recent_for_subscription(subscription.id)
    return {
        "subscription": read,
        "usage": await get_usage_stats(session, user.id),
        "recent_payments": [PaymentRead.model_validate(payment) for payment in payments],
    }


@router.post(
    "/create-checkout-session",
    response_model=CheckoutSession,
    summary="Start Checkout",
    description="Create a Stripe Checkout session for a plan.",
    responses={
        400: {"description": "Missing plan or paid subscription already active"},
        404: {"description": "Plan not found"},
        503: {"description": "Payments not configured"},
    },
)
async def create_checkout_session(
    payload: CheckoutRequest,
    user: CurrentUserDep,
    session: SessionDep,
    gateway: Optional[StripeGateway] = Depends(get_stripe_gateway),
) -> CheckoutSession:
    """
    Start a subscription-mode Checkout session.

    Users who never had a Stripe subscription get the configured trial. The
    Stripe customer is created once and kept on the subscription row.
    """
    gateway = _require_gateway(gateway)
    if not payload.plan_id:
        raise BadRequestError("Plan ID is required")
    plan = await PlanRepository(session).get_by_id(payload.plan_id)
    if plan is None or not plan.is_active:
        raise NotFoundError("Plan not found")

    subscriptions = SubscriptionRepository(session)
    existing = await subscriptions.get_for_user(user.id)
    if existing and existing.stripe_subscription_id and existing.status == SubscriptionStatus.ACTIVE.value:
        raise BadRequestError(
            "You already have an active subscription", extra={"message": "Cancel it before changing the plan."}
        )

    customer_id = existing.stripe_customer_id if existing else None
    if not customer_id:
        name = " ".join(filter(None, [user.first_name, user.last_name])) or None
        customer = await gateway.create_customer(user.email, name, {"user_id": user.id})
        customer_id = customer["id"]
        if existing is not None:
            await subscriptions.apply_update(existing, {"stripe_customer_id": customer_id})

    first_time = existing is None or not existing.stripe_subscription_id
    client_url = settings.client_url.rstrip("/")
    metadata = {"user_id": user.id, "plan_id": plan.id}
    checkout = await gateway.create_checkout_session(
        customer_id=customer_id,
        line_item=_line_item(plan),
        success_url=f"{client_url}/subscription/success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{client_url}/subscription/cancel",
        metadata=metadata,
        trial_days=settings.stripe.trial_days if first_time else 0,
    )
    log_billing_event("checkout.created", user.id, plan=plan.name)
    logger.info(f"Checkout session created for user {user.id} on plan {plan.name}")
    return CheckoutSession(session_id=checkout["id"], url=checkout.get("url"))


@router.post(
    "/cancel",
    summary="Cancel Subscription",
    description="Cancel at the end of the current billing period.",
    responses={400: {"description": "No active Stripe subscription"}, 503: {"description": "Payments not configured"}},
)
async def cancel_subscription(
    user: CurrentUserDep,
    session: SessionDep,
    payload: Optional[CancelRequest] = None,
    gateway: Optional[StripeGateway] = Depends(get_stripe_gateway),
):
    subscription, _ = await get_subscription_with_plan(session, user.id)
    if not is_subscription_active(subscription):
        raise BadRequestError("No active subscription to cancel")
    if not subscription.stripe_subscription_id:
        raise BadRequestError("This subscription is not billed through Stripe")
    gateway = _require_gateway(gateway)

    await gateway.update_subscription(subscription.stripe_subscription_id, cancel_at_period_end=True)
    reason = (payload.reason if payload else None) or DEFAULT_CANCEL_REASON
    subscription = await SubscriptionRepository(session).apply_update(
        subscription, {"cancel_at_period_end": True, "cancel_reason": reason, "canceled_at": utc_now()}
    )
    log_billing_event("subscription.cancel_requested", user.id, reason=reason)
    return {
        "success": True,
        "message": "Subscription will be cancelled at the end of the billing period",
        "subscription": SubscriptionRead.model_validate(subscription),
    }


@router.post(
    "/reactivate",
    summary="Reactivate Subscription",
    description="Undo a pending cancellation.",
    responses={400: {"description": "No pending cancellation"}, 503: {"description": "Payments not configured"}},
)
async def reactivate_subscription(
    user: CurrentUserDep,
    session: SessionDep,
    gateway: Optional[StripeGateway] = Depends(get_stripe_gateway),
):
    subscription, _ = await get_subscription_with_plan(session, user.id)
    if subscription is None or not subscription.cancel_at_period_end or not subscription.stripe_subscription_id:
        raise BadRequestError("Subscription is not scheduled for cancellation")
    gateway = _require_gateway(gateway)

    await gateway.update_subscription(subscription.stripe_subscription_id, cancel_at_period_end=False)
    subscription = await SubscriptionRepository(session).apply_update(
        subscription, {"cancel_at_period_end": False, "cancel_reason": None, "canceled_at": None}
    )
    log_billing_event("subscription.reactivated", user.id)
    return {
        "success": True,
        "message": "Subscription reactivated",
        "subscription": SubscriptionRead.model_validate(subscription),
    }


@router.get(
    "/usage",
    summary="Usage",
    description="Current resource usage against the plan limits.",
    responses={404: {"description": "No subscription"}},
)
async def usage(user: CurrentUserDep, session: SessionDep):
    subscription, plan = await get_subscription_with_plan(session, user.id)
    if subscription is None or plan is None:
        raise NotFoundError("No subscription found")
    stats = await get_usage_stats(session, user.id)
    return {
        "usage": stats,
        "limits": plan_limits(plan),
        "percentages": usage_percentages(stats, plan),
        "plan": PlanRead.model_validate(plan),
    }
