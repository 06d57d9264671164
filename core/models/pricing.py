# =============================================================================
# core/models/pricing.py - Pricing Schemas
# =============================================================================
# API shapes around lib.pricing: preview requests (from a raw cost or from a
# list of supplies) and the detailed price breakdown.
# =============================================================================

from pydantic import BaseModel, Field, model_validator


class PreviewSupply(BaseModel):
    """An ad-hoc line item for a preview; doesn't need to exist in the database."""

    unit_price: float = Field(..., ge=0)
    quantity: float = Field(..., ge=0)


class PricePreviewRequest(BaseModel):
    """
    Request a price preview using the account's settings.

    Send exactly one of supplies_cost or supplies.

    Example:
        {"supplies_cost": 100}
        {"supplies": [{"unit_price": 10, "quantity": 5}]}
    """

    supplies_cost: float | None = Field(default=None, ge=0)
    supplies: list[PreviewSupply] | None = None

    @model_validator(mode="after")
    def check_one_source(self) -> "PricePreviewRequest":
        if (self.supplies_cost is None) == (self.supplies is None):
            raise ValueError("Provide either supplies_cost or supplies")
        return self


class PriceBreakdownResponse(BaseModel):
    tax_rate: float
    other_percentage_costs: float
    profit_margin: float


class PriceResponse(BaseModel):
    """Detailed result of a price calculation."""

    supplies_cost: float
    fixed_costs: float
    total_cost: float
    percentages_total: float
    selling_price: float
    breakdown: PriceBreakdownResponse
