# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the API models to ensure:
# - Valid data is accepted and parsed correctly
# - Invalid data raises ValidationError
# - Default values work as expected
#
# Run with: pytest tests/test_models.py -v
# =============================================================================

import pytest
from pydantic import ValidationError

from app.auth.models import LoginRequest, SessionData, TokenClaims
from core.models import (
    AccountResponse,
    Ingredient,
    PricePreviewRequest,
    ProductCreate,
    ProductUpdate,
    SettingsUpdate,
    SubscriptionStatus,
    SupplyCreate,
    SupplyPage,
    SupplyUpdate,
    UserWithAccount,
)
from lib.feature_flags import Plan


# =============================================================================
# Account / User Model Tests
# =============================================================================

class TestAccountResponse:
    """Tests for AccountResponse model."""

    def test_defaults(self):
        account = AccountResponse(id="acc-1", name="Flora & Co")

        assert account.plan_name is Plan.FREE
        assert account.subscription_status is None
        assert account.stripe_customer_id is None

    def test_parses_database_row(self):
        account = AccountResponse(**{
            "id": "acc-1",
            "name": "Flora & Co",
            "plan_name": "PRO",
            "subscription_status": "trialing",
            "created_at": "2024-01-01T00:00:01+00:00",
        })

        assert account.plan_name is Plan.PRO
        assert account.subscription_status is SubscriptionStatus.TRIALING
        assert account.created_at.year == 2024

    def test_unknown_plan_rejected(self):
        with pytest.raises(ValidationError):
            AccountResponse(id="acc-1", name="x", plan_name="GOLD")


class TestUserWithAccount:

    def test_nested_rows(self):
        result = UserWithAccount.model_validate({
            "user": {"id": "uid-1", "email": "a@b.test", "account_id": "acc-1"},
            "account": {"id": "acc-1", "name": "Shop"},
        })

        assert result.user.name is None
        assert result.account.name == "Shop"


# =============================================================================
# Catalog Model Tests
# =============================================================================

class TestSupplyModels:

    def test_create_defaults_unit(self):
        assert SupplyCreate(name="Rose", cost=1).unit == "unit"

    def test_create_rejects_negative_cost(self):
        with pytest.raises(ValidationError):
            SupplyCreate(name="Rose", cost=-0.01)

    def test_create_requires_name(self):
        with pytest.raises(ValidationError):
            SupplyCreate(name="", cost=1)

    def test_cost_coerced_from_form_string(self):
        assert SupplyCreate(name="Rose", cost="4.50").cost == 4.5

    def test_update_only_sent_fields(self):
        assert SupplyUpdate(cost=2).model_dump(exclude_none=True) == {"cost": 2}

    def test_page_defaults(self):
        page = SupplyPage()
        assert page.supplies == []
        assert page.next_cursor is None


class TestProductModels:

    def test_ingredient_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            Ingredient(supply_id="s-1", quantity=0)

    def test_create_without_ingredients(self):
        assert ProductCreate(name="Card").ingredients == []

    def test_update_distinguishes_missing_and_empty_ingredients(self):
        assert ProductUpdate(name="x").ingredients is None
        assert ProductUpdate(ingredients=[]).ingredients == []


# =============================================================================
# Settings / Pricing Model Tests
# =============================================================================

class TestSettingsUpdate:

    @pytest.mark.parametrize("field", ["tax_rate", "profit_margin", "other_percentage_costs"])
    def test_percentages_within_0_100(self, field):
        SettingsUpdate(**{field: 0})
        SettingsUpdate(**{field: 100})
        with pytest.raises(ValidationError):
            SettingsUpdate(**{field: 100.1})
        with pytest.raises(ValidationError):
            SettingsUpdate(**{field: -1})

    def test_fixed_costs_unbounded_above(self):
        assert SettingsUpdate(other_fixed_costs=10_000).other_fixed_costs == 10_000


class TestPricePreviewRequest:

    def test_cost_only(self):
        assert PricePreviewRequest(supplies_cost=10).supplies is None

    def test_supplies_only(self):
        request = PricePreviewRequest(supplies=[{"unit_price": 1, "quantity": 2}])
        assert request.supplies[0].quantity == 2

    def test_neither(self):
        with pytest.raises(ValidationError):
            PricePreviewRequest()


# =============================================================================
# Auth Model Tests
# =============================================================================

class TestAuthModels:

    def test_custom_claims_pick_known_keys(self):
        claims = TokenClaims(
            sub="uid-1", exp=2, iat=1,
            app_metadata={"provider": "email", "account_id": "acc-1", "plan_name": "PRO"},
        )
        assert claims.custom_claims == {"account_id": "acc-1", "plan_name": "PRO"}

    def test_session_is_frozen(self):
        session = SessionData(uid="uid-1")
        with pytest.raises(ValidationError):
            session.uid = "uid-2"

    def test_session_plan(self):
        assert SessionData(uid="u", plan_name="pro").plan is Plan.PRO
        assert SessionData(uid="u").plan is Plan.FREE

    def test_login_request_requires_password(self):
        with pytest.raises(ValidationError):
            LoginRequest(email="a@b.test", password="")
