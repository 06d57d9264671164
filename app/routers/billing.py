# =============================================================================
# app/routers/billing.py - Subscription Endpoints
# =============================================================================
# Stripe Checkout / Customer Portal redirects plus the webhook that keeps
# the account's plan in sync. All endpoints answer 503 when Stripe isn't
# configured.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Header, Request
from pydantic import BaseModel, Field

from app.dependencies import Tenant, TenantDep
from app.exceptions import AccountNotFoundError
from core.services.account_service import AccountService
from core.services.billing_service import BillingService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class CheckoutRequest(BaseModel):
    price_id: str = Field(..., min_length=1, description="Stripe price to subscribe to")


class RedirectUrlResponse(BaseModel):
    url: str


def _current_account(tenant: Tenant) -> dict:
    account = AccountService.get_account(tenant.account_id)
    if not account:
        raise AccountNotFoundError(tenant.account_id, user_id=tenant.uid)
    return account


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/prices")
async def list_prices(tenant: TenantDep):
    """Subscription prices available for upgrade."""
    return {"prices": BillingService.list_prices()}


@router.post("/checkout", response_model=RedirectUrlResponse)
async def create_checkout(tenant: TenantDep, body: CheckoutRequest):
    """
    Start a Stripe Checkout session.

    Redirect the browser to the returned URL.
    """
    url = BillingService.create_checkout_session(_current_account(tenant), body.price_id)
    return RedirectUrlResponse(url=url)


@router.post("/portal", response_model=RedirectUrlResponse)
async def create_portal(tenant: TenantDep):
    """Open the Stripe customer portal to manage or cancel the subscription."""
    url = BillingService.create_portal_session(_current_account(tenant))
    return RedirectUrlResponse(url=url)


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: Annotated[str | None, Header(alias="Stripe-Signature")] = None,
):
    """
    Receive Stripe events.

    The signature is verified against STRIPE_WEBHOOK_SECRET; no session is
    required.
    """
    payload = await request.body()
    event_type = BillingService.handle_webhook(payload, stripe_signature)
    return {"received": True, "type": event_type}
