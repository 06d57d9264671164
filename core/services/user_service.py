# =============================================================================
# core/services/user_service.py - User Business Logic
# =============================================================================
# Users are keyed by their Supabase auth uid and point at one account.
# get_user_with_account() is the preferred lookup for request handlers:
# it returns both rows in one call and fails loudly on dangling links.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso
from core.services.account_service import AccountService
from app.exceptions import AccountClosedError, AccountNotFoundError, UserNotFoundError

logger = logging.getLogger(__name__)

USERS_TABLE = "users"


class UserService:
    """Service for user profile operations."""

    @staticmethod
    def get_user(uid: str | UUID) -> dict[str, Any] | None:
        """Get a user by auth uid."""
        user = SupabaseClient.fetch_row(USERS_TABLE, uid)
        if not user:
            logger.debug(f"No user found with uid: {normalize_uuid(uid)}")
        return user

    @staticmethod
    def get_user_by_email(email: str) -> dict[str, Any] | None:
        """Get a user by email (used to reject duplicate signups)."""
        rows = SupabaseClient.fetch_rows(
            USERS_TABLE,
            filters={"email": email.strip().lower()},
            limit=1,
        )
        return rows[0] if rows else None

    @staticmethod
    def create_user(
        uid: str | UUID,
        email: str,
        account_id: str | UUID,
        name: str | None = None,
    ) -> dict[str, Any]:
        """
        Create the users row for an authenticated identity.

        The user must be linked to an existing account.
        """
        user = SupabaseClient.insert_row(USERS_TABLE, {
            "id": normalize_uuid(uid),
            "email": email.strip().lower(),
            "name": name,
            "account_id": normalize_uuid(account_id),
        })
        logger.info(f"Created user: {user['id']} linked to account: {user['account_id']}")
        return user

    @staticmethod
    def update_user(uid: str | UUID, data: dict[str, Any]) -> dict[str, Any]:
        """
        Update a user's profile.

        Raises:
            UserNotFoundError: If the user doesn't exist
        """
        user = SupabaseClient.update_row(
            USERS_TABLE,
            uid,
            {**data, "updated_at": utc_now_iso()},
        )
        if not user:
            raise UserNotFoundError(normalize_uuid(uid))
        return user

    @staticmethod
    def list_account_users(account_id: str | UUID) -> list[dict[str, Any]]:
        """All users linked to an account."""
        return SupabaseClient.fetch_rows(
            USERS_TABLE,
            filters={"account_id": account_id},
            order_by="created_at",
            desc=False,
        )

    @staticmethod
    def get_user_with_account(uid: str | UUID) -> tuple[dict[str, Any], dict[str, Any]]:
        """
        Get the user together with their account.

        Returns:
            Tuple of (user dict, account dict)

        Raises:
            UserNotFoundError: If the uid has no users row
            AccountNotFoundError: If the user's account is missing
            AccountClosedError: If the user's account was deleted
        """
        user = UserService.get_user(uid)
        if not user:
            raise UserNotFoundError(normalize_uuid(uid))

        account = AccountService.get_account(user["account_id"], include_deleted=True)
        if account and account.get("deleted_at"):
            raise AccountClosedError(user["account_id"])
        if not account:
            logger.error(
                f"User {user['id']} has invalid account_id: {user['account_id']}"
            )
            raise AccountNotFoundError(user["account_id"], user_id=user["id"])

        return user, account
