"""
Unit tests for the Stripe gateway.

Covers webhook signature verification and the SDK calls made by the gateway;
the ``stripe`` resource methods are replaced with ``AsyncMock`` objects.
"""

import hashlib
import hmac
import json
import time
from unittest.mock import AsyncMock

import pytest
import stripe

from buildboss.server.services.stripe_gateway import (
    StripeApiError,
    StripeGateway,
    get_stripe_gateway,
    verify_webhook_signature,
)

SECRET = "whsec_unit"


def _header(payload: bytes, timestamp: int, secret: str = SECRET) -> str:
    signed = f"{timestamp}.".encode("utf-8") + payload
    return f"t={timestamp},v1={hmac.new(secret.encode('utf-8'), signed, hashlib.sha256).hexdigest()}"


class TestVerifyWebhookSignature:
    """HMAC-SHA256 over ``timestamp.payload`` with a 300 second tolerance."""

    def test_valid(self):
        payload = json.dumps({"type": "invoice.paid"}).encode()
        event = verify_webhook_signature(payload, _header(payload, int(time.time())), SECRET)
        assert event == {"type": "invoice.paid"}
        assert type(event) is dict

    def test_any_matching_v1_is_accepted(self):
        payload = b"{}"
        now = int(time.time())
        valid = _header(payload, now).split("v1=")[1]
        header = f"t={now},v1=deadbeef,v1={valid}"
        assert verify_webhook_signature(payload, header, SECRET) == {}

    @pytest.mark.parametrize("header", [None, "", "v1=abc", "t=notanumber,v1=abc", "t=123"])
    def test_malformed_headers(self, header):
        with pytest.raises(stripe.SignatureVerificationError):
            verify_webhook_signature(b"{}", header, SECRET)

    def test_wrong_secret(self):
        with pytest.raises(stripe.SignatureVerificationError):
            verify_webhook_signature(b"{}", _header(b"{}", int(time.time()), "whsec_other"), SECRET)

    def test_tampered_payload(self):
        header = _header(b'{"amount": 1}', int(time.time()))
        with pytest.raises(stripe.SignatureVerificationError):
            verify_webhook_signature(b'{"amount": 1000}', header, SECRET)

    def test_stale_timestamp(self):
        stale = int(time.time()) - 301
        with pytest.raises(stripe.SignatureVerificationError):
            verify_webhook_signature(b"{}", _header(b"{}", stale), SECRET)

    def test_signed_body_not_json(self):
        with pytest.raises(stripe.SignatureVerificationError):
            verify_webhook_signature(b"not json", _header(b"not json", int(time.time())), SECRET)

    @pytest.mark.parametrize("payload", [b"[]", b'"x"', b"42", b"null"])
    def test_signed_body_not_an_object(self, payload):
        with pytest.raises(stripe.SignatureVerificationError):
            verify_webhook_signature(payload, _header(payload, int(time.time())), SECRET)


class TestStripeGateway:
    """Calls forwarded to the ``stripe`` SDK."""

    @pytest.mark.asyncio
    async def test_create_customer(self, monkeypatch):
        create = AsyncMock(return_value={"id": "cus_1"})
        monkeypatch.setattr(stripe.Customer, "create_async", create)

        customer = await StripeGateway("sk_test_unit").create_customer("owner@example.com", "Jan", {"user_id": "u1"})

        assert customer["id"] == "cus_1"
        create.assert_awaited_once_with(
            api_key="sk_test_unit", email="owner@example.com", name="Jan", metadata={"user_id": "u1"}
        )

    @pytest.mark.asyncio
    async def test_create_checkout_session(self, monkeypatch):
        create = AsyncMock(return_value={"id": "cs_1", "url": "https://checkout.stripe.com/c/pay/cs_1"})
        monkeypatch.setattr(stripe.checkout.Session, "create_async", create)

        session = await StripeGateway("sk_test_unit").create_checkout_session(
            customer_id="cus_1",
            line_item={"price": "price_1", "quantity": 1},
            success_url="http://localhost:3000/ok",
            cancel_url="http://localhost:3000/cancel",
            metadata={"user_id": "u1", "plan_id": "p1"},
            trial_days=14,
        )

        assert session["id"] == "cs_1"
        params = create.call_args.kwargs
        assert params["api_key"] == "sk_test_unit"
        assert params["mode"] == "subscription"
        assert params["customer"] == "cus_1"
        assert params["line_items"] == [{"price": "price_1", "quantity": 1}]
        assert params["subscription_data"] == {"metadata": {"user_id": "u1", "plan_id": "p1"}, "trial_period_days": 14}

    @pytest.mark.asyncio
    async def test_no_trial_field_without_trial(self, monkeypatch):
        create = AsyncMock(return_value={"id": "cs_2"})
        monkeypatch.setattr(stripe.checkout.Session, "create_async", create)

        await StripeGateway("sk_test_unit").create_checkout_session(
            customer_id="cus_1",
            line_item={"price": "price_1", "quantity": 1},
            success_url="s",
            cancel_url="c",
            metadata={},
        )
        assert "trial_period_days" not in create.call_args.kwargs["subscription_data"]

    @pytest.mark.asyncio
    async def test_update_and_retrieve_subscription(self, monkeypatch):
        modify = AsyncMock(return_value={"id": "sub_1", "cancel_at_period_end": True})
        retrieve = AsyncMock(return_value={"id": "sub_1", "status": "active"})
        monkeypatch.setattr(stripe.Subscription, "modify_async", modify)
        monkeypatch.setattr(stripe.Subscription, "retrieve_async", retrieve)

        gateway = StripeGateway("sk_test_unit")
        await gateway.update_subscription("sub_1", cancel_at_period_end=True)
        retrieved = await gateway.retrieve_subscription("sub_1")

        modify.assert_awaited_once_with("sub_1", api_key="sk_test_unit", cancel_at_period_end=True)
        retrieve.assert_awaited_once_with("sub_1", api_key="sk_test_unit")
        assert retrieved["status"] == "active"

    @pytest.mark.asyncio
    async def test_api_error(self, monkeypatch):
        error = stripe.CardError(
            "Your card was declined.",
            None,
            "card_declined",
            http_status=402,
            json_body={"error": {"message": "Your card was declined.", "code": "card_declined"}},
        )
        monkeypatch.setattr(stripe.Customer, "create_async", AsyncMock(side_effect=error))

        with pytest.raises(StripeApiError) as exc_info:
            await StripeGateway("sk_test_unit").create_customer("owner@example.com")
        assert exc_info.value.status_code == 402
        assert exc_info.value.details["error"]["code"] == "card_declined"

    @pytest.mark.asyncio
    async def test_connection_error(self, monkeypatch):
        error = stripe.APIConnectionError("connection refused")
        monkeypatch.setattr(stripe.Subscription, "retrieve_async", AsyncMock(side_effect=error))

        with pytest.raises(StripeApiError) as exc_info:
            await StripeGateway("sk_test_unit").retrieve_subscription("sub_1")
        assert exc_info.value.status_code is None


class TestDependency:
    @pytest.mark.asyncio
    async def test_none_when_not_configured(self, monkeypatch):
        from buildboss.server.core.config import settings

        monkeypatch.setattr(settings, "stripe_secret_key", None)
        gateways = [gateway async for gateway in get_stripe_gateway()]
        assert gateways == [None]

    @pytest.mark.asyncio
    async def test_gateway_when_configured(self, monkeypatch):
        from buildboss.server.core.config import settings

        monkeypatch.setattr(settings, "stripe_secret_key", "sk_test_dep")
        gateways = [gateway async for gateway in get_stripe_gateway()]
        assert isinstance(gateways[0], StripeGateway)
        assert gateways[0].api_key == "sk_test_dep"
