# =============================================================================
# core/services/account_service.py - Account Business Logic
# =============================================================================
# Handles account (tenant) CRUD. Accounts are created at signup, updated by
# Stripe webhooks, and soft-deleted.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.feature_flags import Plan
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

ACCOUNTS_TABLE = "accounts"


class AccountService:
    """
    Service for account management operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def create_account(name: str, plan_name: Plan = Plan.FREE) -> dict[str, Any]:
        """
        Create a new account.

        Called during signup; the account name starts as the user's name.

        Args:
            name: Display name for the account
            plan_name: Initial plan (FREE unless a checkout already happened)

        Returns:
            Created account dict with id and created_at
        """
        account = SupabaseClient.insert_row(ACCOUNTS_TABLE, {
            "name": name,
            "plan_name": plan_name.value,
            "subscription_status": None,
        })
        logger.info(f"Created account: {account['id']} ({plan_name.value})")
        return account

    @staticmethod
    def get_account(
        account_id: str | UUID,
        include_deleted: bool = False,
    ) -> dict[str, Any] | None:
        """
        Get an account by ID.

        Soft-deleted accounts are treated as missing unless include_deleted.
        """
        account = SupabaseClient.fetch_row(ACCOUNTS_TABLE, account_id)
        if account and account.get("deleted_at") and not include_deleted:
            return None
        return account

    @staticmethod
    def update_account(account_id: str | UUID, data: dict[str, Any]) -> dict[str, Any] | None:
        """
        Update an account.

        Used for subscription updates coming from Stripe webhooks.

        Returns:
            Updated account dict, or None if the account doesn't exist
        """
        update_data = {**data, "updated_at": utc_now_iso()}
        account = SupabaseClient.update_row(ACCOUNTS_TABLE, account_id, update_data)
        if account:
            logger.info(f"Updated account: {normalize_uuid(account_id)} ({', '.join(data)})")
        return account

    @staticmethod
    def delete_account(account_id: str | UUID) -> dict[str, Any] | None:
        """
        Soft delete an account.

        The row is kept (for billing history) with deleted_at set.
        """
        now = utc_now_iso()
        account = SupabaseClient.update_row(ACCOUNTS_TABLE, account_id, {
            "deleted_at": now,
            "updated_at": now,
        })
        logger.info(f"Soft-deleted account: {normalize_uuid(account_id)}")
        return account

    @staticmethod
    def get_account_by_stripe_customer(customer_id: str) -> dict[str, Any] | None:
        """Find the account linked to a Stripe customer."""
        rows = SupabaseClient.fetch_rows(
            ACCOUNTS_TABLE,
            filters={"stripe_customer_id": customer_id},
            limit=1,
        )
        return rows[0] if rows else None
