# =============================================================================
# core/services/settings_service.py - Pricing Settings Business Logic
# =============================================================================
# Settings are 1:1 with an account. They are created lazily on first read
# (get_or_create_settings) so accounts created before settings existed keep
# working.
#
# Changing settings changes every price in the account, so a successful
# update flags all products for recalculation and schedules the worker.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.config import settings as app_settings
from app.exceptions import InvalidSettingsError
from core.models.settings import SettingsUpdate
from lib.pricing import PricingSettings
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

SETTINGS_TABLE = "settings"

PERCENTAGE_FIELDS = ("tax_rate", "profit_margin", "other_percentage_costs")


class SettingsService:
    """Service for account pricing settings."""

    @staticmethod
    def create_settings(account_id: str | UUID) -> dict[str, Any]:
        """
        Create default settings for an account.

        Defaults: no tax, DEFAULT_PROFIT_MARGIN margin, no other costs.
        """
        row = SupabaseClient.insert_row(SETTINGS_TABLE, {
            "account_id": normalize_uuid(account_id),
            "tax_rate": 0,
            "profit_margin": app_settings.DEFAULT_PROFIT_MARGIN,
            "other_fixed_costs": 0,
            "other_percentage_costs": 0,
        })
        logger.info(f"Created default settings for account: {normalize_uuid(account_id)}")
        return row

    @staticmethod
    def get_settings_by_account(account_id: str | UUID) -> dict[str, Any] | None:
        rows = SupabaseClient.fetch_rows(
            SETTINGS_TABLE,
            filters={"account_id": account_id},
            limit=1,
        )
        return rows[0] if rows else None

    @staticmethod
    def get_settings(settings_id: str | UUID) -> dict[str, Any] | None:
        return SupabaseClient.fetch_row(SETTINGS_TABLE, settings_id)

    @staticmethod
    def get_or_create_settings(account_id: str | UUID) -> dict[str, Any]:
        """Ensure every account has settings (creates them if missing)."""
        row = SettingsService.get_settings_by_account(account_id)
        if row is None:
            row = SettingsService.create_settings(account_id)
        return row

    @staticmethod
    def get_pricing_settings(account_id: str | UUID) -> PricingSettings:
        """The account's settings in the shape the price formula expects."""
        return PricingSettings.from_row(SettingsService.get_or_create_settings(account_id))

    @staticmethod
    def update_settings(
        account_id: str | UUID,
        data: SettingsUpdate,
    ) -> dict[str, Any]:
        """
        Update the settings of an account.

        Args:
            account_id: Account whose settings change
            data: Fields to change (range-checked by the model)

        Returns:
            Updated settings dict

        Raises:
            InvalidSettingsError: If the merged percentages reach 100%
        """
        current = SettingsService.get_or_create_settings(account_id)
        changes = data.model_dump(exclude_none=True)
        if not changes:
            return current

        merged = {**current, **changes}
        percentages_total = sum(float(merged.get(name) or 0) for name in PERCENTAGE_FIELDS)
        if percentages_total >= 100:
            raise InvalidSettingsError(
                f"Tax, other percentage costs and profit margin add up to {percentages_total}%",
                details={"percentages_total": percentages_total},
            )

        updated = SupabaseClient.update_row(
            SETTINGS_TABLE,
            current["id"],
            {**changes, "updated_at": utc_now_iso()},
        ) or merged
        logger.info(f"Updated settings for account {normalize_uuid(account_id)}: {changes}")

        from core.services.product_service import ProductService

        if ProductService.flag_all_products(account_id):
            ProductService.schedule_recalculation(account_id)

        return updated
