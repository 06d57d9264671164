# =============================================================================
# core/models/account.py - Account Schemas
# =============================================================================
# An account is the tenant: every product, supply and settings row carries
# the account_id it belongs to. Users are linked to exactly one account
# (1:1 today; the schema allows several users per account).
#
# Subscription data lives on the account, not the user, so a plan upgrade
# applies to everyone in the account.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from lib.feature_flags import Plan


class SubscriptionStatus(str, Enum):
    """Stripe subscription states we persist on the account."""
    ACTIVE = "active"
    TRIALING = "trialing"
    CANCELED = "canceled"
    UNPAID = "unpaid"
    PAST_DUE = "past_due"
    INCOMPLETE = "incomplete"
    INCOMPLETE_EXPIRED = "incomplete_expired"
    PAUSED = "paused"


class AccountResponse(BaseModel):
    """
    Schema for returning account data to clients.

    Stripe identifiers are included so the billing page can decide between
    "Upgrade" (no customer yet) and "Manage subscription".

    Example:
        {
            "id": "550e8400-e29b-41d4-a716-446655440000",
            "name": "Flora & Co",
            "plan_name": "FREE",
            "subscription_status": null
        }
    """

    id: str = Field(..., description="Unique account identifier")
    name: str = Field(..., description="Account display name")

    plan_name: Plan = Field(
        default=Plan.FREE,
        description="Current subscription plan"
    )

    subscription_status: SubscriptionStatus | None = Field(
        default=None,
        description="Stripe subscription status (null when never subscribed)"
    )

    stripe_customer_id: str | None = None
    stripe_subscription_id: str | None = None
    stripe_product_id: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    model_config = {"from_attributes": True}
