# =============================================================================
# app/routers/products.py - Product Endpoints
# =============================================================================
# CRUD for products plus price maintenance:
# - GET  /products/outdated     products waiting for a new price
# - POST /products/recalculate  reprice them now (no worker needed)
# - GET  /products/{id}/price   full price breakdown
#
# The fixed paths are declared before /{product_id} so they aren't captured
# as IDs.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path

from app.dependencies import TenantDep
from core.models.pricing import PriceResponse
from core.models.product import ProductCreate, ProductList, ProductResponse, ProductUpdate
from core.services.product_service import ProductService

router = APIRouter()


@router.get("", response_model=ProductList)
async def list_products(tenant: TenantDep):
    """List all products of the account, newest first."""
    products = ProductService.list_products(tenant.account_id)
    return ProductList(
        products=[ProductResponse(**row) for row in products],
        total=len(products),
    )


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(tenant: TenantDep, body: ProductCreate):
    """
    Create a product. Its price is computed from the ingredients and the
    account's settings.

    Raises:
        400: If an ingredient references an unknown supply
        403: If the plan's product quota is used up
    """
    return ProductResponse(**ProductService.create_product(tenant.account_id, body, tenant.plan))


@router.get("/outdated", response_model=ProductList)
async def list_outdated_products(tenant: TenantDep):
    """Products flagged for a new price after a supply or settings change."""
    products = ProductService.get_products_needing_recalculation(tenant.account_id)
    return ProductList(
        products=[ProductResponse(**row) for row in products],
        total=len(products),
    )


@router.post("/recalculate")
async def recalculate_products(tenant: TenantDep):
    """Reprice every flagged product now."""
    repriced = ProductService.recalculate_prices(tenant.account_id)
    return {"success": True, "repriced": repriced}


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    tenant: TenantDep,
    product_id: Annotated[str, Path(description="Product ID")],
):
    return ProductResponse(**ProductService.get_product(tenant.account_id, product_id))


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    tenant: TenantDep,
    body: ProductUpdate,
    product_id: Annotated[str, Path(description="Product ID")],
):
    """Update a product. New ingredients reprice it immediately."""
    return ProductResponse(**ProductService.update_product(tenant.account_id, product_id, body))


@router.delete("/{product_id}", status_code=204)
async def delete_product(
    tenant: TenantDep,
    product_id: Annotated[str, Path(description="Product ID")],
):
    ProductService.delete_product(tenant.account_id, product_id)


@router.get("/{product_id}/price", response_model=PriceResponse)
async def get_product_price(
    tenant: TenantDep,
    product_id: Annotated[str, Path(description="Product ID")],
):
    """Price breakdown of a product with today's supply costs and settings."""
    return PriceResponse(**ProductService.price_product(tenant.account_id, product_id).to_dict())
