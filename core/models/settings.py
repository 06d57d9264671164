# =============================================================================
# core/models/settings.py - Pricing Settings Schemas
# =============================================================================
# Settings are 1:1 with an account and hold the global parameters used by
# the price formula:
# - tax_rate: percentage (15 = 15%)
# - profit_margin: percentage
# - other_fixed_costs: currency amount added to every product
# - other_percentage_costs: percentage (card fees, commissions, ...)
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field


class SettingsResponse(BaseModel):
    """
    Schema for returning settings to clients.

    Example:
        {
            "id": "8a1d...",
            "account_id": "550e8400-...",
            "tax_rate": 15,
            "profit_margin": 30,
            "other_fixed_costs": 10,
            "other_percentage_costs": 5
        }
    """

    id: str
    account_id: str

    tax_rate: float = Field(default=0, description="Tax rate in percent")
    profit_margin: float = Field(default=30, description="Profit margin in percent")
    other_fixed_costs: float = Field(default=0, description="Fixed cost added to every product")
    other_percentage_costs: float = Field(default=0, description="Other costs in percent")

    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class SettingsUpdate(BaseModel):
    """
    Schema for updating settings.

    All fields are optional; only the ones sent are changed. Each percentage
    must be within 0-100 on its own, and the service additionally checks that
    the merged percentages stay below 100 in total.
    """

    tax_rate: float | None = Field(default=None, ge=0, le=100)
    profit_margin: float | None = Field(default=None, ge=0, le=100)
    other_fixed_costs: float | None = Field(default=None, ge=0)
    other_percentage_costs: float | None = Field(default=None, ge=0, le=100)

    model_config = {
        "json_schema_extra": {
            "example": {"tax_rate": 15, "profit_margin": 35}
        }
    }
