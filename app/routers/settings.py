# =============================================================================
# app/routers/settings.py - Pricing Settings Endpoints
# =============================================================================
# Each account has exactly one settings row; it is created on signup and
# recreated with defaults if it ever goes missing.
# =============================================================================

from fastapi import APIRouter

from app.dependencies import TenantDep
from core.models.settings import SettingsResponse, SettingsUpdate
from core.services.settings_service import SettingsService

router = APIRouter()


@router.get("", response_model=SettingsResponse)
async def get_settings(tenant: TenantDep):
    """Get the account's pricing settings."""
    return SettingsResponse(**SettingsService.get_or_create_settings(tenant.account_id))


@router.put("", response_model=SettingsResponse)
async def update_settings(tenant: TenantDep, body: SettingsUpdate):
    """
    Update pricing settings.

    Tax, other percentage costs and profit margin must add up to less than
    100%. Every product is flagged for a new price and a background
    recalculation is queued.
    """
    return SettingsResponse(**SettingsService.update_settings(tenant.account_id, body))
