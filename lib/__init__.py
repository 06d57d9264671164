# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - pricing.py: The selling price formula
# - feature_flags.py: Plan features and quotas
# - pagination.py: Cursor-based "fetch N+1, trim" pagination
# - utils.py: Shared utilities (error handling, UUID normalization)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.pricing import (
    PriceCalculationResult,
    PricingError,
    PricingSettings,
    PricingSupply,
    calculate_price,
    calculate_price_from_cost,
)
from lib.feature_flags import (
    PLAN_CONFIG,
    Feature,
    Plan,
    QuotaCheckResult,
    check_quota,
    get_quota,
    has_feature,
    has_quota,
    resolve_plan,
)
from lib.pagination import Page, paginate
from lib.utils import ApplicationError, normalize_uuid, utc_now_iso

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Pricing
    "PriceCalculationResult",
    "PricingError",
    "PricingSettings",
    "PricingSupply",
    "calculate_price",
    "calculate_price_from_cost",
    # Feature flags
    "PLAN_CONFIG",
    "Feature",
    "Plan",
    "QuotaCheckResult",
    "check_quota",
    "get_quota",
    "has_feature",
    "has_quota",
    "resolve_plan",
    # Pagination
    "Page",
    "paginate",
    # Utils
    "ApplicationError",
    "normalize_uuid",
    "utc_now_iso",
]
