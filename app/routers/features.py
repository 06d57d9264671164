# =============================================================================
# app/routers/features.py - Plan & Quota Endpoint
# =============================================================================

from fastapi import APIRouter

from app.dependencies import TenantDep
from core.services.feature_service import FeatureService

router = APIRouter()


@router.get("")
async def get_features(tenant: TenantDep):
    """
    The account's plan, its enabled features and current quota usage.

    Example response:
        {
            "plan": "FREE",
            "plan_label": "Free",
            "features": ["MATERIALS"],
            "quotas": {
                "PRODUCTS": {"allowed": true, "current": 3, "limit": 10, "remaining": 7},
                "MATERIALS": {"allowed": true, "current": 12, "limit": 20, "remaining": 8}
            }
        }
    """
    return FeatureService.usage_summary(tenant.account_id, tenant.plan)
