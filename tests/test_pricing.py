# =============================================================================
# tests/test_pricing.py - Price Formula Tests
# =============================================================================
# Unit tests for lib/pricing.py. Pure functions, no database.
# =============================================================================

import pytest

from lib.pricing import (
    PricingError,
    PricingSettings,
    PricingSupply,
    calculate_price,
    calculate_price_from_cost,
)


# =============================================================================
# calculate_price_from_cost
# =============================================================================

class TestCalculatePriceFromCost:
    """Tests for pricing a known supplies cost."""

    def test_reference_example(self):
        """90 + 10 fixed at 15% tax, 5% other, 30% margin -> 200."""
        settings = PricingSettings(
            tax_rate=15, profit_margin=30, other_fixed_costs=10, other_percentage_costs=5
        )

        result = calculate_price_from_cost(90, settings)

        assert result.supplies_cost == 90
        assert result.fixed_costs == 10
        assert result.total_cost == 100
        assert result.percentages_total == 50
        assert result.selling_price == pytest.approx(200.0)

    def test_no_settings_means_price_equals_cost(self):
        result = calculate_price_from_cost(42.5, PricingSettings())
        assert result.selling_price == pytest.approx(42.5)

    def test_zero_cost_with_fixed_costs(self):
        result = calculate_price_from_cost(0, PricingSettings(other_fixed_costs=20, profit_margin=20))
        assert result.selling_price == pytest.approx(25.0)

    def test_breakdown_reports_each_percentage(self):
        settings = PricingSettings(tax_rate=10, other_percentage_costs=2, profit_margin=25)

        breakdown = calculate_price_from_cost(10, settings).breakdown

        assert breakdown.tax_rate == 10
        assert breakdown.other_percentage_costs == 2
        assert breakdown.profit_margin == 25

    def test_negative_cost_rejected(self):
        with pytest.raises(PricingError) as exc_info:
            calculate_price_from_cost(-1, PricingSettings())
        assert exc_info.value.details == {"supplies_cost": -1}

    def test_percentages_reaching_100_rejected(self):
        """A price with 100% overhead would be infinite."""
        settings = PricingSettings(tax_rate=50, profit_margin=50)

        with pytest.raises(PricingError) as exc_info:
            calculate_price_from_cost(10, settings)
        assert exc_info.value.details["percentages_total"] == 100

    def test_percentage_out_of_range_rejected(self):
        with pytest.raises(PricingError, match="tax_rate"):
            calculate_price_from_cost(10, PricingSettings(tax_rate=-5))

    def test_negative_fixed_costs_rejected(self):
        with pytest.raises(PricingError, match="other_fixed_costs"):
            calculate_price_from_cost(10, PricingSettings(other_fixed_costs=-1))

    def test_to_dict_is_nested(self):
        result = calculate_price_from_cost(10, PricingSettings(tax_rate=10)).to_dict()

        assert result["breakdown"] == {
            "tax_rate": 10,
            "other_percentage_costs": 0,
            "profit_margin": 0,
        }
        assert set(result) == {
            "supplies_cost", "fixed_costs", "total_cost",
            "percentages_total", "selling_price", "breakdown",
        }


# =============================================================================
# calculate_price
# =============================================================================

class TestCalculatePrice:
    """Tests for pricing from supply line items."""

    def test_sums_line_items(self):
        supplies = [PricingSupply(unit_price=10, quantity=5), PricingSupply(unit_price=20, quantity=2)]

        result = calculate_price(supplies, PricingSettings(profit_margin=10))

        assert result.supplies_cost == 90
        assert result.selling_price == pytest.approx(100.0)

    def test_empty_supplies(self):
        result = calculate_price([], PricingSettings(other_fixed_costs=5))
        assert result.supplies_cost == 0
        assert result.selling_price == pytest.approx(5.0)

    def test_fractional_quantities(self):
        result = calculate_price([PricingSupply(unit_price=3, quantity=0.5)], PricingSettings())
        assert result.supplies_cost == pytest.approx(1.5)

    def test_negative_line_item_rejected(self):
        with pytest.raises(PricingError):
            calculate_price([PricingSupply(unit_price=-1, quantity=1)], PricingSettings())


# =============================================================================
# PricingSettings
# =============================================================================

class TestPricingSettings:

    def test_from_row_treats_missing_as_zero(self):
        settings = PricingSettings.from_row({"tax_rate": "12.5", "profit_margin": None})

        assert settings.tax_rate == 12.5
        assert settings.profit_margin == 0
        assert settings.other_fixed_costs == 0
        assert settings.percentages_total == 12.5
