# =============================================================================
# lib/pricing.py - Selling Price Calculation
# =============================================================================
# Centralizes the price formula used by products, previews and the demo page:
#
#   total_cost    = supplies_cost + fixed_costs
#   percentages   = tax_rate + other_percentage_costs + profit_margin
#   selling_price = total_cost / (1 - percentages / 100)
#
# Everything here is pure - no database, no settings lookup - so it can be
# tested in isolation and reused by the Celery recalculation task.
#
# Usage:
#   from lib.pricing import calculate_price, PricingSupply, PricingSettings
#   result = calculate_price(
#       [PricingSupply(unit_price=10, quantity=5)],
#       PricingSettings(tax_rate=15, profit_margin=30),
#   )
#   print(result.selling_price)
# =============================================================================

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Iterable

from lib.utils import ApplicationError


class PricingError(ApplicationError):
    """Raised when pricing inputs cannot produce a meaningful price."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code="PRICING_ERROR", **kwargs)


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(frozen=True)
class PricingSupply:
    """A supply line item: what one unit costs and how many units are used."""
    unit_price: float
    quantity: float

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class PricingSettings:
    """
    The subset of account settings that drive pricing.

    Percentages are expressed as whole numbers (15 = 15%).
    other_fixed_costs is a currency amount added to every product.
    """
    tax_rate: float = 0.0
    profit_margin: float = 0.0
    other_fixed_costs: float = 0.0
    other_percentage_costs: float = 0.0

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "PricingSettings":
        """Build from a settings table row (missing values count as zero)."""
        return cls(
            tax_rate=float(row.get("tax_rate") or 0),
            profit_margin=float(row.get("profit_margin") or 0),
            other_fixed_costs=float(row.get("other_fixed_costs") or 0),
            other_percentage_costs=float(row.get("other_percentage_costs") or 0),
        )

    @property
    def percentages_total(self) -> float:
        return self.tax_rate + self.other_percentage_costs + self.profit_margin


@dataclass(frozen=True)
class PriceBreakdown:
    tax_rate: float
    other_percentage_costs: float
    profit_margin: float


@dataclass(frozen=True)
class PriceCalculationResult:
    """
    Result of a price calculation.

    Attributes:
        supplies_cost: Sum of all supply line items
        fixed_costs: Fixed costs from settings
        total_cost: supplies_cost + fixed_costs
        percentages_total: tax + other percentage costs + profit margin
        selling_price: Final selling price
        breakdown: The individual percentages that made up percentages_total
    """
    supplies_cost: float
    fixed_costs: float
    total_cost: float
    percentages_total: float
    selling_price: float
    breakdown: PriceBreakdown = field(
        default_factory=lambda: PriceBreakdown(0.0, 0.0, 0.0)
    )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# Calculation
# =============================================================================

def _validate_percentages(settings: PricingSettings) -> float:
    """Return the percentage total, or raise if it leaves no room for cost."""
    for name in ("tax_rate", "profit_margin", "other_percentage_costs"):
        value = getattr(settings, name)
        if value < 0 or value > 100:
            raise PricingError(
                f"{name} must be between 0 and 100 (got {value})",
                suggestion="Fix the value on the settings page",
                details={name: value},
            )

    if settings.other_fixed_costs < 0:
        raise PricingError(
            f"other_fixed_costs cannot be negative (got {settings.other_fixed_costs})",
            details={"other_fixed_costs": settings.other_fixed_costs},
        )

    total = settings.percentages_total
    if total >= 100:
        raise PricingError(
            f"Tax, other percentage costs and profit margin add up to {total}%",
            suggestion="Keep the sum of all percentages below 100%",
            details={"percentages_total": total},
        )
    return total


def calculate_price_from_cost(
    supplies_cost: float,
    settings: PricingSettings,
) -> PriceCalculationResult:
    """
    Calculate the selling price for an already-known supplies cost.

    Useful for previews where there are no real supplies yet.

    Example:
        >>> settings = PricingSettings(tax_rate=15, profit_margin=30,
        ...                            other_fixed_costs=10, other_percentage_costs=5)
        >>> calculate_price_from_cost(90, settings).selling_price
        200.0

    Raises:
        PricingError: If supplies_cost is negative or the percentages reach 100%
    """
    if supplies_cost < 0:
        raise PricingError(
            f"Supplies cost cannot be negative (got {supplies_cost})",
            details={"supplies_cost": supplies_cost},
        )

    percentages_total = _validate_percentages(settings)

    fixed_costs = settings.other_fixed_costs
    total_cost = supplies_cost + fixed_costs
    selling_price = total_cost / (1 - percentages_total / 100)

    return PriceCalculationResult(
        supplies_cost=supplies_cost,
        fixed_costs=fixed_costs,
        total_cost=total_cost,
        percentages_total=percentages_total,
        selling_price=selling_price,
        breakdown=PriceBreakdown(
            tax_rate=settings.tax_rate,
            other_percentage_costs=settings.other_percentage_costs,
            profit_margin=settings.profit_margin,
        ),
    )


def calculate_price(
    supplies: Iterable[PricingSupply],
    settings: PricingSettings,
) -> PriceCalculationResult:
    """
    Calculate the selling price of a product from its supplies.

    Args:
        supplies: Line items with unit_price and quantity
        settings: Tax, margin and cost settings of the account

    Returns:
        PriceCalculationResult with the full breakdown

    Raises:
        PricingError: If a line item is negative or the percentages reach 100%
    """
    supplies_cost = 0.0
    for supply in supplies:
        if supply.unit_price < 0 or supply.quantity < 0:
            raise PricingError(
                "Supply unit price and quantity cannot be negative",
                details={"unit_price": supply.unit_price, "quantity": supply.quantity},
            )
        supplies_cost += supply.line_total

    return calculate_price_from_cost(supplies_cost, settings)
