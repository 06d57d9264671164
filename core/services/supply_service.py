# =============================================================================
# core/services/supply_service.py - Supply Business Logic
# =============================================================================
# Account-scoped CRUD for supplies (raw materials).
#
# Ownership rules (shared with products):
# - reads of another account's row log a [Security] warning and look like
#   "not found", so row ids can't be enumerated
# - writes to another account's row are refused with 403
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import (
    ForbiddenResourceError,
    SupplyInUseError,
    SupplyNotFoundError,
)
from core.models.supply import SupplyCreate, SupplyUpdate
from core.services.feature_service import FeatureService
from lib.feature_flags import Feature, Plan
from lib.pagination import Page, paginate
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import changed_fields, normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

SUPPLIES_TABLE = "supplies"


class SupplyService:
    """Service for supply (raw material) operations."""

    @staticmethod
    def _get_for_write(
        account_id: str,
        supply_id: str,
        action: str,
    ) -> dict[str, Any]:
        """Fetch a supply that is about to be changed, enforcing ownership."""
        supply = SupabaseClient.fetch_row(SUPPLIES_TABLE, supply_id)
        if not supply:
            raise SupplyNotFoundError(supply_id)

        if supply["account_id"] != account_id:
            logger.warning(
                f"[Security] Account {account_id} tried to {action} supply "
                f"{supply_id} owned by account {supply['account_id']}"
            )
            raise ForbiddenResourceError("supply", supply_id, action)

        return supply

    @staticmethod
    def create_supply(
        account_id: str | UUID,
        data: SupplyCreate,
        plan: str | Plan | None = None,
    ) -> dict[str, Any]:
        """
        Create a supply for an account.

        Raises:
            QuotaExceededError: If the plan's MATERIALS quota is used up
        """
        account_id = normalize_uuid(account_id)
        FeatureService.ensure_quota(
            Feature.MATERIALS,
            plan,
            SupplyService.count_supplies(account_id),
        )

        supply = SupabaseClient.insert_row(SUPPLIES_TABLE, {
            **data.model_dump(),
            "account_id": account_id,
        })
        logger.info(f"Created supply {supply['id']} for account {account_id}")
        return supply

    @staticmethod
    def get_supply(account_id: str | UUID, supply_id: str) -> dict[str, Any]:
        """
        Get a supply owned by the account.

        Raises:
            SupplyNotFoundError: If missing or owned by another account
        """
        account_id = normalize_uuid(account_id)
        supply = SupabaseClient.fetch_row(SUPPLIES_TABLE, supply_id)
        if not supply:
            raise SupplyNotFoundError(supply_id)

        if supply["account_id"] != account_id:
            logger.warning(
                f"[Security] Account {account_id} tried to access supply "
                f"{supply_id} owned by account {supply['account_id']}"
            )
            raise SupplyNotFoundError(supply_id)

        return supply

    @staticmethod
    def update_supply(
        account_id: str | UUID,
        supply_id: str,
        data: SupplyUpdate,
    ) -> dict[str, Any]:
        """
        Update a supply.

        A cost change flags every product that uses the supply and schedules
        a price recalculation.

        Raises:
            SupplyNotFoundError: If the supply doesn't exist
            ForbiddenResourceError: If it belongs to another account
        """
        from core.services.product_service import ProductService

        account_id = normalize_uuid(account_id)
        supply = SupplyService._get_for_write(account_id, supply_id, "update")

        changes = changed_fields(data, clearable=("description",))
        if not changes:
            return supply

        cost_changed = "cost" in changes and float(changes["cost"]) != float(supply["cost"])

        # Flag before writing: a failed flag must not leave a new cost with stale prices
        flagged = 0
        if cost_changed:
            flagged = ProductService.flag_products_using_supply(account_id, supply_id)

        updated = SupabaseClient.update_row(
            SUPPLIES_TABLE,
            supply_id,
            {**changes, "updated_at": utc_now_iso()},
        ) or {**supply, **changes}

        if flagged:
            ProductService.schedule_recalculation(account_id)

        return updated

    @staticmethod
    def delete_supply(account_id: str | UUID, supply_id: str) -> None:
        """
        Delete a supply.

        Raises:
            SupplyNotFoundError: If the supply doesn't exist
            ForbiddenResourceError: If it belongs to another account
            SupplyInUseError: If a product still lists it as an ingredient
        """
        from core.services.product_service import ProductService

        account_id = normalize_uuid(account_id)
        SupplyService._get_for_write(account_id, supply_id, "delete")

        users = ProductService.find_products_using_supply(account_id, supply_id)
        if users:
            raise SupplyInUseError(supply_id, [p["id"] for p in users])

        SupabaseClient.delete_row(SUPPLIES_TABLE, supply_id)
        logger.info(f"Deleted supply {supply_id} from account {account_id}")

    @staticmethod
    def list_supplies(account_id: str | UUID) -> list[dict[str, Any]]:
        """All supplies of an account, newest first."""
        return SupabaseClient.fetch_rows(
            SUPPLIES_TABLE,
            filters={"account_id": account_id},
            order_by="created_at",
        )

    @staticmethod
    def get_supplies_page(
        account_id: str | UUID,
        page_size: int = 10,
        cursor: str | None = None,
    ) -> Page:
        """
        One page of supplies, newest first.

        Example:
            page = SupplyService.get_supplies_page(account_id, 10)
            # Page(items=[...], has_more=True, next_cursor="supply-123", total=25)
            next_page = SupplyService.get_supplies_page(account_id, 10, page.next_cursor)
        """
        return paginate(SUPPLIES_TABLE, normalize_uuid(account_id), page_size, cursor)

    @staticmethod
    def count_supplies(account_id: str | UUID) -> int:
        return SupabaseClient.count_rows(SUPPLIES_TABLE, {"account_id": account_id})

    @staticmethod
    def get_supplies_by_ids(
        account_id: str | UUID,
        supply_ids: list[str],
    ) -> dict[str, dict[str, Any]]:
        """
        Fetch several supplies of one account at once.

        Ids that don't exist or belong to another account are simply absent
        from the result.

        Returns:
            Mapping of supply id -> supply row
        """
        if not supply_ids:
            return {}

        client = SupabaseClient.get_client()
        try:
            response = (
                client.table(SUPPLIES_TABLE)
                .select("*")
                .eq("account_id", normalize_uuid(account_id))
                .in_("id", list(set(supply_ids)))
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch supplies: {e}",
                code="FETCH_SUPPLIES_FAILED",
                details={"supply_ids": supply_ids},
            )

        return {row["id"]: row for row in response.data or []}
