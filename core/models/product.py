# =============================================================================
# core/models/product.py - Product Schemas
# =============================================================================
# A product is a composite (e.g. a bouquet) built from supplies. Its price is
# computed server-side from the ingredients and the account settings, and is
# flagged for recalculation whenever a supply cost or the settings change.
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field


class Ingredient(BaseModel):
    """A supply used in a product, with the quantity consumed."""

    supply_id: str = Field(..., description="Supply used")
    quantity: float = Field(..., gt=0, description="Units of the supply consumed")
    unit: str = Field(default="unit", max_length=20)


class ProductCreate(BaseModel):
    """
    Schema for creating a product.

    Example:
        {
            "name": "Rose bouquet",
            "description": "12 red roses",
            "ingredients": [{"supply_id": "8a1d...", "quantity": 12}]
        }
    """

    name: str = Field(..., min_length=1, max_length=120)
    description: str | None = Field(default=None, max_length=500)
    ingredients: list[Ingredient] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    """Partial update; sending ingredients recomputes the price."""

    name: str | None = Field(default=None, min_length=1, max_length=120)
    description: str | None = Field(default=None, max_length=500)
    ingredients: list[Ingredient] | None = None


class ProductResponse(BaseModel):
    """Schema for returning product data to clients."""

    id: str
    account_id: str
    name: str
    description: str | None = None
    price: float = 0
    ingredients: list[Ingredient] = Field(default_factory=list)
    needs_recalculation: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ProductList(BaseModel):
    products: list[ProductResponse] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
