# =============================================================================
# tests/test_billing.py - Stripe Billing Tests
# =============================================================================
# Stripe API calls are mocked; account and claim updates run against the
# in-memory database.
# =============================================================================

from unittest.mock import patch

import pytest
import stripe

from app.config import settings
from app.exceptions import (
    BillingError,
    BillingNotConfiguredError,
    InvalidTokenError,
    NoBillingCustomerError,
)
from core.services.billing_service import BillingService

API = "/api/v1"


@pytest.fixture
def billing_on(monkeypatch):
    monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "sk_test_123")
    monkeypatch.setattr(settings, "STRIPE_WEBHOOK_SECRET", "whsec_test")


@pytest.fixture
def customer_account(fake_db, account):
    fake_db.get("accounts", account["id"])["stripe_customer_id"] = "cus_123"
    return fake_db.get("accounts", account["id"])


def _subscription(status, product="prod_pro", customer="cus_123"):
    return {
        "id": "sub_123",
        "customer": customer,
        "status": status,
        "items": {"data": [{"price": {"id": "price_pro", "product": product}}]},
    }


# =============================================================================
# Checkout / portal
# =============================================================================

class TestCheckout:

    def test_disabled_without_key(self, account):
        with pytest.raises(BillingNotConfiguredError):
            BillingService.create_checkout_session(account, "price_pro")

    def test_creates_subscription_session(self, billing_on, account):
        with patch.object(stripe.checkout.Session, "create") as create:
            create.return_value.url = "https://checkout.stripe.test/c/1"

            url = BillingService.create_checkout_session(account, "price_pro")

        assert url == "https://checkout.stripe.test/c/1"
        params = create.call_args.kwargs
        assert params["mode"] == "subscription"
        assert params["client_reference_id"] == account["id"]
        assert params["line_items"] == [{"price": "price_pro", "quantity": 1}]
        assert params["subscription_data"] == {"trial_period_days": 14}
        assert "customer" not in params

    def test_reuses_customer(self, billing_on, customer_account):
        with patch.object(stripe.checkout.Session, "create") as create:
            BillingService.create_checkout_session(customer_account, "price_pro")

        assert create.call_args.kwargs["customer"] == "cus_123"

    def test_stripe_error(self, billing_on, account):
        with patch.object(stripe.checkout.Session, "create", side_effect=stripe.StripeError("boom")):
            with pytest.raises(BillingError) as exc_info:
                BillingService.create_checkout_session(account, "price_pro")
        assert exc_info.value.status_code == 502

    def test_api_not_configured(self, signed_in_client):
        response = signed_in_client.post(f"{API}/billing/checkout", json={"price_id": "price_pro"})

        assert response.status_code == 503
        assert response.json()["code"] == "BILLING_NOT_CONFIGURED"


class TestPortal:

    def test_requires_customer(self, billing_on, account):
        with pytest.raises(NoBillingCustomerError):
            BillingService.create_portal_session(account)

    def test_portal_url(self, billing_on, customer_account):
        with patch.object(stripe.billing_portal.Session, "create") as create:
            create.return_value.url = "https://billing.stripe.test/p/1"

            assert BillingService.create_portal_session(customer_account) == "https://billing.stripe.test/p/1"

        assert create.call_args.kwargs["customer"] == "cus_123"


class TestListPrices:

    def test_flattens_prices(self, billing_on):
        prices = {"data": [{
            "id": "price_pro",
            "product": {"id": "prod_pro", "name": "Pro"},
            "unit_amount": 1900,
            "currency": "usd",
            "recurring": {"interval": "month", "trial_period_days": None},
        }]}

        with patch.object(stripe.Price, "list", return_value=prices):
            result = BillingService.list_prices()

        assert result == [{
            "id": "price_pro",
            "product_id": "prod_pro",
            "product_name": "Pro",
            "unit_amount": 1900,
            "currency": "usd",
            "interval": "month",
            "trial_period_days": None,
        }]


# =============================================================================
# Webhooks
# =============================================================================

class TestSubscriptionChange:

    def test_active_pro_subscription_upgrades(self, billing_on, fake_db, customer_account, user):
        with patch.object(stripe.Product, "retrieve", return_value={"id": "prod_pro", "name": "Pro"}):
            updated = BillingService.handle_subscription_change(_subscription("active"))

        assert updated["plan_name"] == "PRO"
        assert updated["subscription_status"] == "active"
        assert updated["stripe_subscription_id"] == "sub_123"
        assert updated["stripe_product_id"] == "prod_pro"
        assert fake_db.auth.admin.app_metadata[user["id"]]["plan_name"] == "PRO"

    def test_product_read_from_item_price(self, billing_on, customer_account, user):
        """Current API versions carry no "plan" on subscription items."""
        subscription = _subscription("active", product={"id": "prod_pro", "name": "Pro"})
        assert "plan" not in subscription["items"]["data"][0]

        with patch.object(stripe.Product, "retrieve", return_value={"id": "prod_pro", "name": "Pro"}):
            updated = BillingService.handle_subscription_change(subscription)

        assert updated["plan_name"] == "PRO"
        assert updated["stripe_product_id"] == "prod_pro"

    def test_other_product_is_free(self, billing_on, customer_account, user):
        with patch.object(stripe.Product, "retrieve", return_value={"id": "prod_x", "name": "Starter"}):
            updated = BillingService.handle_subscription_change(_subscription("trialing", "prod_x"))

        assert updated["plan_name"] == "FREE"

    def test_canceled_downgrades(self, billing_on, fake_db, customer_account, user):
        customer_account.update({"plan_name": "PRO", "stripe_subscription_id": "sub_123"})

        updated = BillingService.handle_subscription_change(_subscription("canceled"))

        assert updated["plan_name"] == "FREE"
        assert updated["stripe_subscription_id"] is None
        assert fake_db.auth.admin.app_metadata[user["id"]]["plan_name"] == "FREE"

    def test_past_due_only_records_status(self, billing_on, customer_account):
        customer_account["plan_name"] = "PRO"

        updated = BillingService.handle_subscription_change(_subscription("past_due"))

        assert updated["plan_name"] == "PRO"
        assert updated["subscription_status"] == "past_due"

    def test_unknown_customer(self, billing_on, fake_db):
        assert BillingService.handle_subscription_change(_subscription("active", customer="cus_x")) is None


class TestWebhookEndpoint:

    def test_bad_signature(self, billing_on, client):
        error = stripe.SignatureVerificationError("bad", "sig")
        with patch.object(stripe.Webhook, "construct_event", side_effect=error):
            response = client.post(
                f"{API}/billing/webhook",
                content=b"{}",
                headers={"Stripe-Signature": "sig"},
            )

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_TOKEN"

    def test_checkout_completed_links_customer_and_plan(self, billing_on, client, fake_db, account, user):
        event = {
            "type": "checkout.session.completed",
            "data": {"object": {
                "client_reference_id": account["id"],
                "customer": "cus_new",
                "subscription": "sub_123",
            }},
        }

        with patch.object(stripe.Webhook, "construct_event", return_value=event) as construct, \
                patch.object(stripe.Subscription, "retrieve",
                             return_value=_subscription("active", customer="cus_new")), \
                patch.object(stripe.Product, "retrieve", return_value={"name": "Pro"}):
            response = client.post(
                f"{API}/billing/webhook",
                content=b'{"id": "evt_1"}',
                headers={"Stripe-Signature": "t=1,v1=abc"},
            )

        assert response.status_code == 200
        assert response.json() == {"received": True, "type": "checkout.session.completed"}
        construct.assert_called_once_with(b'{"id": "evt_1"}', "t=1,v1=abc", "whsec_test")

        stored = fake_db.get("accounts", account["id"])
        assert stored["stripe_customer_id"] == "cus_new"
        assert stored["plan_name"] == "PRO"

    def test_unhandled_event_acknowledged(self, billing_on, client, fake_db):
        event = {"type": "invoice.paid", "data": {"object": {}}}
        with patch.object(stripe.Webhook, "construct_event", return_value=event):
            response = client.post(f"{API}/billing/webhook", content=b"{}")

        assert response.json()["type"] == "invoice.paid"

    def test_service_rejects_invalid_payload(self, billing_on):
        with patch.object(stripe.Webhook, "construct_event", side_effect=ValueError("bad json")):
            with pytest.raises(InvalidTokenError):
                BillingService.handle_webhook(b"not json", "sig")
