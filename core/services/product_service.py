# =============================================================================
# core/services/product_service.py - Product Business Logic
# =============================================================================
# Account-scoped CRUD for products plus everything that keeps their stored
# price in sync with supplies and settings:
# - prices are computed server-side on create and when ingredients change
# - supply cost / settings changes set needs_recalculation on products
# - recalculate_prices() reprices flagged products (run by the Celery worker
#   or on demand from the API)
# =============================================================================

import json
import logging
from typing import Any
from uuid import UUID

from app.exceptions import (
    ForbiddenResourceError,
    InvalidPricingInputError,
    ProductNotFoundError,
)
from core.models.pricing import PricePreviewRequest
from core.models.product import ProductCreate, ProductUpdate
from core.services.feature_service import FeatureService
from core.services.settings_service import SettingsService
from core.services.supply_service import SupplyService
from lib.feature_flags import Feature, Plan
from lib.pricing import (
    PriceCalculationResult,
    PricingError,
    PricingSettings,
    PricingSupply,
    calculate_price,
    calculate_price_from_cost,
)
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import changed_fields, normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

PRODUCTS_TABLE = "products"


def _ingredient_filter(supply_id: str) -> str:
    """jsonb @> operand matching products that use the supply."""
    # postgrest only passes str values through to cs. unchanged
    return json.dumps([{"supply_id": supply_id}])


class ProductService:
    """Service for product operations and price maintenance."""

    # -------------------------------------------------------------------------
    # Pricing helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _price_ingredients(
        ingredients: list[dict[str, Any]],
        supplies_by_id: dict[str, dict[str, Any]],
        pricing_settings: PricingSettings,
    ) -> PriceCalculationResult:
        """
        Apply the price formula to a product's ingredients.

        Raises:
            InvalidPricingInputError: If an ingredient references an unknown
                supply or the settings leave no room for a price
        """
        missing = [i["supply_id"] for i in ingredients if i["supply_id"] not in supplies_by_id]
        if missing:
            raise InvalidPricingInputError(
                "Ingredients reference unknown supplies",
                details={"supply_ids": missing},
            )

        line_items = [
            PricingSupply(
                unit_price=float(supplies_by_id[i["supply_id"]]["cost"]),
                quantity=float(i["quantity"]),
            )
            for i in ingredients
        ]

        try:
            return calculate_price(line_items, pricing_settings)
        except PricingError as e:
            raise InvalidPricingInputError(e.message, details=e.details)

    @staticmethod
    def compute_price(
        account_id: str | UUID,
        ingredients: list[dict[str, Any]],
    ) -> PriceCalculationResult:
        """Price a list of ingredients with the account's current supplies and settings."""
        account_id = normalize_uuid(account_id)
        supplies_by_id = SupplyService.get_supplies_by_ids(
            account_id,
            [i["supply_id"] for i in ingredients],
        )
        return ProductService._price_ingredients(
            ingredients,
            supplies_by_id,
            SettingsService.get_pricing_settings(account_id),
        )

    @staticmethod
    def preview_price(
        account_id: str | UUID,
        request: PricePreviewRequest,
    ) -> PriceCalculationResult:
        """
        Price ad-hoc inputs (demo page, product form preview).

        Raises:
            InvalidPricingInputError: If the settings leave no room for a price
        """
        pricing_settings = SettingsService.get_pricing_settings(account_id)
        try:
            if request.supplies is not None:
                return calculate_price(
                    [PricingSupply(s.unit_price, s.quantity) for s in request.supplies],
                    pricing_settings,
                )
            return calculate_price_from_cost(request.supplies_cost, pricing_settings)
        except PricingError as e:
            raise InvalidPricingInputError(e.message, details=e.details)

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    @staticmethod
    def _get_for_write(account_id: str, product_id: str, action: str) -> dict[str, Any]:
        product = SupabaseClient.fetch_row(PRODUCTS_TABLE, product_id)
        if not product:
            raise ProductNotFoundError(product_id)

        if product["account_id"] != account_id:
            logger.warning(
                f"[Security] Account {account_id} tried to {action} product "
                f"{product_id} owned by account {product['account_id']}"
            )
            raise ForbiddenResourceError("product", product_id, action)

        return product

    @staticmethod
    def create_product(
        account_id: str | UUID,
        data: ProductCreate,
        plan: str | Plan | None = None,
    ) -> dict[str, Any]:
        """
        Create a product and compute its price.

        Raises:
            QuotaExceededError: If the plan's PRODUCTS quota is used up
            InvalidPricingInputError: If the ingredients can't be priced
        """
        account_id = normalize_uuid(account_id)
        FeatureService.ensure_quota(
            Feature.PRODUCTS,
            plan,
            ProductService.count_products(account_id),
        )

        ingredients = [i.model_dump() for i in data.ingredients]
        price = ProductService.compute_price(account_id, ingredients)

        product = SupabaseClient.insert_row(PRODUCTS_TABLE, {
            "account_id": account_id,
            "name": data.name,
            "description": data.description,
            "ingredients": ingredients,
            "price": round(price.selling_price, 2),
            "needs_recalculation": False,
        })
        logger.info(f"Created product {product['id']} for account {account_id}")
        return product

    @staticmethod
    def get_product(account_id: str | UUID, product_id: str) -> dict[str, Any]:
        """
        Get a product owned by the account.

        Raises:
            ProductNotFoundError: If missing or owned by another account
        """
        account_id = normalize_uuid(account_id)
        product = SupabaseClient.fetch_row(PRODUCTS_TABLE, product_id)
        if not product:
            raise ProductNotFoundError(product_id)

        if product["account_id"] != account_id:
            logger.warning(
                f"[Security] Account {account_id} tried to access product "
                f"{product_id} owned by account {product['account_id']}"
            )
            raise ProductNotFoundError(product_id)

        return product

    @staticmethod
    def update_product(
        account_id: str | UUID,
        product_id: str,
        data: ProductUpdate,
    ) -> dict[str, Any]:
        """
        Update a product. New ingredients reprice it immediately.

        Raises:
            ProductNotFoundError: If the product doesn't exist
            ForbiddenResourceError: If it belongs to another account
            InvalidPricingInputError: If the new ingredients can't be priced
        """
        account_id = normalize_uuid(account_id)
        product = ProductService._get_for_write(account_id, product_id, "update")

        changes = changed_fields(data, clearable=("description",))
        if not changes:
            return product

        if data.ingredients is not None:
            ingredients = [i.model_dump() for i in data.ingredients]
            price = ProductService.compute_price(account_id, ingredients)
            changes["ingredients"] = ingredients
            changes["price"] = round(price.selling_price, 2)
            changes["needs_recalculation"] = False

        updated = SupabaseClient.update_row(
            PRODUCTS_TABLE,
            product_id,
            {**changes, "updated_at": utc_now_iso()},
        )
        return updated or {**product, **changes}

    @staticmethod
    def delete_product(account_id: str | UUID, product_id: str) -> None:
        """
        Raises:
            ProductNotFoundError: If the product doesn't exist
            ForbiddenResourceError: If it belongs to another account
        """
        account_id = normalize_uuid(account_id)
        ProductService._get_for_write(account_id, product_id, "delete")
        SupabaseClient.delete_row(PRODUCTS_TABLE, product_id)
        logger.info(f"Deleted product {product_id} from account {account_id}")

    @staticmethod
    def list_products(account_id: str | UUID) -> list[dict[str, Any]]:
        """All products of an account, newest first."""
        return SupabaseClient.fetch_rows(
            PRODUCTS_TABLE,
            filters={"account_id": account_id},
            order_by="created_at",
        )

    @staticmethod
    def count_products(account_id: str | UUID) -> int:
        return SupabaseClient.count_rows(PRODUCTS_TABLE, {"account_id": account_id})

    @staticmethod
    def price_product(account_id: str | UUID, product_id: str) -> PriceCalculationResult:
        """Full price breakdown of a product with today's supplies and settings."""
        product = ProductService.get_product(account_id, product_id)
        return ProductService.compute_price(account_id, product.get("ingredients") or [])

    # -------------------------------------------------------------------------
    # Recalculation
    # -------------------------------------------------------------------------

    @staticmethod
    def get_products_needing_recalculation(account_id: str | UUID) -> list[dict[str, Any]]:
        return SupabaseClient.fetch_rows(
            PRODUCTS_TABLE,
            filters={"account_id": account_id, "needs_recalculation": True},
        )

    @staticmethod
    def find_products_using_supply(
        account_id: str | UUID,
        supply_id: str,
    ) -> list[dict[str, Any]]:
        """Products of the account whose ingredients include the supply."""
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table(PRODUCTS_TABLE)
                .select("*")
                .eq("account_id", normalize_uuid(account_id))
                .contains("ingredients", _ingredient_filter(supply_id))
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to find products using supply: {e}",
                code="FETCH_PRODUCTS_FAILED",
                details={"supply_id": supply_id},
            )
        return response.data or []

    @staticmethod
    def flag_products_using_supply(account_id: str | UUID, supply_id: str) -> int:
        """
        Mark products that use a supply as needing a new price.

        Returns:
            Number of products flagged
        """
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table(PRODUCTS_TABLE)
                .update({"needs_recalculation": True})
                .eq("account_id", normalize_uuid(account_id))
                .contains("ingredients", _ingredient_filter(supply_id))
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to flag products: {e}",
                code="FLAG_PRODUCTS_FAILED",
                details={"supply_id": supply_id},
            )

        flagged = len(response.data or [])
        logger.info(f"Flagged {flagged} product(s) using supply {supply_id}")
        return flagged

    @staticmethod
    def flag_all_products(account_id: str | UUID) -> int:
        """Mark every product of the account as needing a new price."""
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table(PRODUCTS_TABLE)
                .update({"needs_recalculation": True})
                .eq("account_id", normalize_uuid(account_id))
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to flag products: {e}",
                code="FLAG_PRODUCTS_FAILED",
                details={"account_id": normalize_uuid(account_id)},
            )

        flagged = len(response.data or [])
        logger.info(f"Flagged {flagged} product(s) of account {normalize_uuid(account_id)}")
        return flagged

    @staticmethod
    def recalculate_prices(account_id: str | UUID) -> int:
        """
        Reprice every flagged product of an account.

        Products that can't be priced (e.g. settings at 100%) keep their flag
        and old price and are logged.

        Returns:
            Number of products repriced
        """
        account_id = normalize_uuid(account_id)
        products = ProductService.get_products_needing_recalculation(account_id)
        if not products:
            return 0

        pricing_settings = SettingsService.get_pricing_settings(account_id)
        supply_ids = [
            i["supply_id"]
            for product in products
            for i in product.get("ingredients") or []
        ]
        supplies_by_id = SupplyService.get_supplies_by_ids(account_id, supply_ids)

        repriced = 0
        for product in products:
            try:
                price = ProductService._price_ingredients(
                    product.get("ingredients") or [],
                    supplies_by_id,
                    pricing_settings,
                )
            except InvalidPricingInputError as e:
                logger.warning(f"Could not reprice product {product['id']}: {e.message}")
                continue

            SupabaseClient.update_row(PRODUCTS_TABLE, product["id"], {
                "price": round(price.selling_price, 2),
                "needs_recalculation": False,
                "updated_at": utc_now_iso(),
            })
            repriced += 1

        logger.info(f"Repriced {repriced}/{len(products)} product(s) of account {account_id}")
        return repriced

    @staticmethod
    def schedule_recalculation(account_id: str | UUID) -> str | None:
        """
        Queue a background recalculation for the account.

        Broker failures are logged, not raised: products stay flagged and
        can be repriced later via POST /products/recalculate.

        Returns:
            Celery task id, or None if the task couldn't be queued
        """
        try:
            from workers.tasks import recalculate_account_prices

            result = recalculate_account_prices.delay(normalize_uuid(account_id))
            logger.info(f"Queued price recalculation {result.id} for account {normalize_uuid(account_id)}")
            return result.id

        except Exception as e:
            logger.warning(f"Failed to queue price recalculation. Is Redis running? Error: {e}")
            return None
