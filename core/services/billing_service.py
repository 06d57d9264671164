# =============================================================================
# core/services/billing_service.py - Stripe Subscriptions
# =============================================================================
# Checkout, customer portal and webhook handling for plan upgrades.
#
# The account is the billing entity: Stripe's client_reference_id is the
# account id, and the customer id is stored on the account after checkout.
# When a subscription changes, the account's plan_name is updated and every
# user of the account gets a fresh plan claim (picked up on next sign-in).
#
# Billing is disabled (BillingNotConfiguredError) when STRIPE_SECRET_KEY is
# not set.
# =============================================================================

import logging
from typing import Any

import stripe

from app.auth.claims import update_plan_claim
from app.config import settings
from app.exceptions import (
    BillingError,
    BillingNotConfiguredError,
    InvalidTokenError,
    NoBillingCustomerError,
)
from core.models.account import SubscriptionStatus
from core.services.account_service import AccountService
from core.services.user_service import UserService
from lib.feature_flags import Plan

logger = logging.getLogger(__name__)

PAID_STATUSES = {SubscriptionStatus.ACTIVE.value, SubscriptionStatus.TRIALING.value}
ENDED_STATUSES = {SubscriptionStatus.CANCELED.value, SubscriptionStatus.UNPAID.value}


def _configure() -> None:
    if not settings.billing_enabled:
        raise BillingNotConfiguredError()
    stripe.api_key = settings.STRIPE_SECRET_KEY


class BillingService:
    """Service for Stripe checkout, portal and webhooks."""

    @staticmethod
    def create_checkout_session(account: dict[str, Any], price_id: str) -> str:
        """
        Start a subscription checkout for the account.

        Returns:
            URL of the hosted checkout page

        Raises:
            BillingNotConfiguredError: If Stripe isn't configured
            BillingError: If Stripe rejects the request
        """
        _configure()

        params: dict[str, Any] = {
            "payment_method_types": ["card"],
            "line_items": [{"price": price_id, "quantity": 1}],
            "mode": "subscription",
            "success_url": f"{settings.BASE_URL}/dashboard?checkout=success",
            "cancel_url": f"{settings.BASE_URL}/settings",
            "client_reference_id": account["id"],
            "allow_promotion_codes": True,
        }
        if account.get("stripe_customer_id"):
            params["customer"] = account["stripe_customer_id"]
        if settings.STRIPE_TRIAL_DAYS:
            params["subscription_data"] = {"trial_period_days": settings.STRIPE_TRIAL_DAYS}

        try:
            session = stripe.checkout.Session.create(**params)
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout failed for account {account['id']}: {e}")
            raise BillingError(str(e))

        logger.info(f"Created checkout session for account {account['id']}")
        return session.url

    @staticmethod
    def create_portal_session(account: dict[str, Any]) -> str:
        """
        Open the Stripe customer portal for an already-subscribed account.

        Raises:
            NoBillingCustomerError: If the account never checked out
        """
        _configure()

        customer_id = account.get("stripe_customer_id")
        if not customer_id:
            raise NoBillingCustomerError(account["id"])

        try:
            session = stripe.billing_portal.Session.create(
                customer=customer_id,
                return_url=f"{settings.BASE_URL}/dashboard",
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe portal failed for account {account['id']}: {e}")
            raise BillingError(str(e))

        return session.url

    @staticmethod
    def list_prices() -> list[dict[str, Any]]:
        """Active recurring prices, for the upgrade page."""
        _configure()

        try:
            prices = stripe.Price.list(active=True, type="recurring", expand=["data.product"])
        except stripe.StripeError as e:
            raise BillingError(str(e))

        result = []
        for price in prices["data"]:
            product = price["product"]
            recurring = price.get("recurring") or {}
            result.append({
                "id": price["id"],
                "product_id": product if isinstance(product, str) else product["id"],
                "product_name": None if isinstance(product, str) else product.get("name"),
                "unit_amount": price.get("unit_amount"),
                "currency": price.get("currency"),
                "interval": recurring.get("interval"),
                "trial_period_days": recurring.get("trial_period_days"),
            })
        return result

    # -------------------------------------------------------------------------
    # Webhooks
    # -------------------------------------------------------------------------

    @staticmethod
    def _plan_for_product(product_id: str | None) -> Plan:
        """Plan granted by a Stripe product: PRO if the product is named "Pro"."""
        if not product_id:
            return Plan.FREE
        try:
            product = stripe.Product.retrieve(product_id)
        except stripe.StripeError as e:
            raise BillingError(str(e))
        name = (product.get("name") or "").upper()
        return Plan.PRO if name == Plan.PRO.value else Plan.FREE

    @staticmethod
    def _sync_plan_claims(account_id: str, plan: Plan) -> None:
        for user in UserService.list_account_users(account_id):
            update_plan_claim(user["id"], plan)

    @staticmethod
    def handle_subscription_change(subscription: dict[str, Any]) -> dict[str, Any] | None:
        """
        Apply a subscription created/updated/deleted event to its account.

        - active / trialing: plan from the subscribed product
        - canceled / unpaid: back to FREE, subscription detached
        - anything else: only the status is recorded

        Returns:
            Updated account, or None if no account matches the customer
        """
        customer_id = subscription["customer"]
        account = AccountService.get_account_by_stripe_customer(customer_id)
        if not account:
            logger.error(f"Account not found for Stripe customer: {customer_id}")
            return None

        status = subscription["status"]

        if status in PAID_STATUSES:
            items = subscription["items"]["data"]
            product = items[0]["price"]["product"] if items else None
            product_id = product if isinstance(product, str) or product is None else product["id"]
            plan = BillingService._plan_for_product(product_id)
            update = {
                "stripe_subscription_id": subscription["id"],
                "stripe_product_id": product_id,
                "plan_name": plan.value,
                "subscription_status": status,
            }
        elif status in ENDED_STATUSES:
            plan = Plan.FREE
            update = {
                "stripe_subscription_id": None,
                "stripe_product_id": None,
                "plan_name": plan.value,
                "subscription_status": status,
            }
        else:
            return AccountService.update_account(account["id"], {"subscription_status": status})

        updated = AccountService.update_account(account["id"], update)
        BillingService._sync_plan_claims(account["id"], plan)
        logger.info(f"Account {account['id']} is now on {plan.value} ({status})")
        return updated

    @staticmethod
    def handle_checkout_completed(session: dict[str, Any]) -> dict[str, Any] | None:
        """Link the Stripe customer created during checkout to the account."""
        account_id = session.get("client_reference_id")
        customer_id = session.get("customer")
        if not account_id or not customer_id:
            logger.warning("Checkout session without account reference or customer")
            return None

        account = AccountService.update_account(account_id, {"stripe_customer_id": customer_id})

        subscription_id = session.get("subscription")
        if subscription_id:
            try:
                subscription = stripe.Subscription.retrieve(subscription_id)
            except stripe.StripeError as e:
                raise BillingError(str(e))
            account = BillingService.handle_subscription_change(subscription) or account

        return account

    @staticmethod
    def handle_webhook(payload: bytes, signature: str | None) -> str:
        """
        Verify and dispatch a Stripe webhook.

        Returns:
            The event type (unhandled types are acknowledged and ignored)

        Raises:
            InvalidTokenError: If the signature doesn't verify
        """
        _configure()

        try:
            event = stripe.Webhook.construct_event(
                payload,
                signature or "",
                settings.STRIPE_WEBHOOK_SECRET,
            )
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning(f"Rejected Stripe webhook: {e}")
            raise InvalidTokenError("webhook signature verification failed")

        event_type = event["type"]
        data = event["data"]["object"]

        if event_type in (
            "customer.subscription.created",
            "customer.subscription.updated",
            "customer.subscription.deleted",
        ):
            BillingService.handle_subscription_change(data)
        elif event_type == "checkout.session.completed":
            BillingService.handle_checkout_completed(data)
        else:
            logger.debug(f"Ignoring Stripe event: {event_type}")

        return event_type
