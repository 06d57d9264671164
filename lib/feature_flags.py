# =============================================================================
# lib/feature_flags.py - Plan Features & Quotas
# =============================================================================
# Single source of truth for what each subscription plan may do.
#
# A plan has:
# - features: boolean capabilities (e.g. DATA_EXPORT)
# - quotas: numeric limits on how many rows of a kind an account may own
#
# The lookups are pure; callers pass in the plan (usually read from the
# session's custom claims) and the current usage.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Feature(str, Enum):
    """Available features in the application."""
    LABOR_COSTS = "LABOR_COSTS"
    ADVANCED_REPORTS = "ADVANCED_REPORTS"
    DATA_EXPORT = "DATA_EXPORT"
    API_ACCESS = "API_ACCESS"
    PRODUCTS = "PRODUCTS"
    MATERIALS = "MATERIALS"


class Plan(str, Enum):
    """Available subscription plans."""
    FREE = "FREE"
    PRO = "PRO"


@dataclass(frozen=True)
class PlanConfig:
    name: str
    description: str
    features: tuple[Feature, ...] = ()
    quotas: dict[Feature, int] = field(default_factory=dict)


@dataclass(frozen=True)
class QuotaCheckResult:
    """Result of a quota check."""
    allowed: bool
    current: int
    limit: int
    remaining: int


PLAN_CONFIG: dict[Plan, PlanConfig] = {
    Plan.FREE: PlanConfig(
        name="Free",
        description="Perfect to get started",
        features=(Feature.MATERIALS,),
        quotas={
            Feature.PRODUCTS: 10,
            Feature.MATERIALS: 20,
        },
    ),
    Plan.PRO: PlanConfig(
        name="Pro",
        description="For growing businesses",
        features=(
            Feature.LABOR_COSTS,
            Feature.ADVANCED_REPORTS,
            Feature.DATA_EXPORT,
            Feature.API_ACCESS,
        ),
        quotas={
            Feature.PRODUCTS: 500,
            Feature.MATERIALS: 1000,
        },
    ),
}


def resolve_plan(value: str | Plan | None) -> Plan:
    """
    Turn a claim value into a Plan.

    Sessions minted right after signup may not carry a plan claim yet;
    those fall back to FREE rather than triggering a database lookup.
    """
    if isinstance(value, Plan):
        return value
    try:
        return Plan(str(value).upper())
    except ValueError:
        return Plan.FREE


def _config_for(plan: str | Plan | None) -> PlanConfig | None:
    if plan is None:
        return None
    try:
        return PLAN_CONFIG.get(Plan(plan))
    except ValueError:
        return None


def has_feature(feature: Feature, plan: str | Plan | None) -> bool:
    """Check if a plan has access to a feature. Unknown plans have none."""
    config = _config_for(plan)
    if config is None:
        return False
    return feature in config.features


def get_quota(feature: Feature, plan: str | Plan | None) -> int:
    """Configured limit for a feature, or 0 when the plan sets none."""
    config = _config_for(plan)
    if config is None:
        return 0
    return config.quotas.get(feature, 0)


def has_quota(feature: Feature, plan: str | Plan | None, current_usage: int) -> bool:
    """True while current usage is below the plan's limit."""
    limit = get_quota(feature, plan)
    if not limit:
        return False
    return current_usage < limit


def check_quota(
    feature: Feature,
    plan: str | Plan | None,
    current_usage: int,
) -> QuotaCheckResult:
    """Like has_quota, but also reports the numbers for display."""
    limit = get_quota(feature, plan)
    return QuotaCheckResult(
        allowed=has_quota(feature, plan, current_usage),
        current=current_usage,
        limit=limit,
        remaining=max(limit - current_usage, 0),
    )
