# =============================================================================
# core/services/feature_service.py - Plan Gating
# =============================================================================
# Bridges the static plan table (lib.feature_flags) with live usage counts
# and the API's exception types.
# =============================================================================

import logging
from typing import Any

from app.exceptions import FeatureNotAvailableError, QuotaExceededError
from lib.feature_flags import (
    PLAN_CONFIG,
    Feature,
    Plan,
    check_quota,
    has_feature,
    resolve_plan,
)
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

# Quota features and the table whose rows they count
QUOTA_TABLES: dict[Feature, str] = {
    Feature.PRODUCTS: "products",
    Feature.MATERIALS: "supplies",
}


class FeatureService:
    """Feature and quota checks for an account's plan."""

    @staticmethod
    def ensure_feature(feature: Feature, plan: str | Plan | None) -> None:
        """
        Raises:
            FeatureNotAvailableError: If the plan lacks the feature
        """
        if not has_feature(feature, resolve_plan(plan)):
            raise FeatureNotAvailableError(feature.value)

    @staticmethod
    def ensure_quota(
        feature: Feature,
        plan: str | Plan | None,
        current_usage: int,
    ) -> None:
        """
        Raises:
            QuotaExceededError: If creating one more row would pass the limit
        """
        result = check_quota(feature, resolve_plan(plan), current_usage)
        if not result.allowed:
            logger.info(
                f"Quota reached for {feature.value}: {result.current}/{result.limit}"
            )
            raise QuotaExceededError(feature.value, result.limit)

    @staticmethod
    def usage_summary(account_id: str, plan: str | Plan | None) -> dict[str, Any]:
        """
        Plan, enabled features and quota usage for the features endpoint.

        Example:
            {
                "plan": "FREE",
                "features": ["MATERIALS"],
                "quotas": {"PRODUCTS": {"allowed": true, "current": 3, "limit": 10, "remaining": 7}}
            }
        """
        resolved = resolve_plan(plan)
        config = PLAN_CONFIG[resolved]

        quotas = {}
        for feature, table in QUOTA_TABLES.items():
            usage = SupabaseClient.count_rows(table, {"account_id": account_id})
            result = check_quota(feature, resolved, usage)
            quotas[feature.value] = {
                "allowed": result.allowed,
                "current": result.current,
                "limit": result.limit,
                "remaining": result.remaining,
            }

        return {
            "plan": resolved.value,
            "plan_label": config.name,
            "features": [feature.value for feature in config.features],
            "quotas": quotas,
        }
