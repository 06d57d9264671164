# =============================================================================
# core/models/supply.py - Supply Schemas
# =============================================================================
# A supply is a raw material (flowers, ribbon, vase, ...) with a unit cost.
# Products reference supplies through their ingredients list.
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field


class SupplyCreate(BaseModel):
    """
    Schema for creating a supply.

    Example:
        {"name": "Red rose", "cost": 4.5, "unit": "unit"}
    """

    name: str = Field(..., min_length=1, max_length=120)
    description: str | None = Field(default=None, max_length=500)
    cost: float = Field(..., ge=0, description="Cost of one unit")
    unit: str = Field(default="unit", min_length=1, max_length=20, description="e.g. unit, kg, m")


class SupplyUpdate(BaseModel):
    """Partial update; only the fields sent are changed."""

    name: str | None = Field(default=None, min_length=1, max_length=120)
    description: str | None = Field(default=None, max_length=500)
    cost: float | None = Field(default=None, ge=0)
    unit: str | None = Field(default=None, min_length=1, max_length=20)


class SupplyResponse(BaseModel):
    """Schema for returning supply data to clients."""

    id: str
    account_id: str
    name: str
    description: str | None = None
    cost: float
    unit: str = "unit"
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class SupplyPage(BaseModel):
    """
    One page of supplies.

    Example:
        {"supplies": [...], "has_more": true, "next_cursor": "supply-123", "total": 25}
    """

    supplies: list[SupplyResponse] = Field(default_factory=list)
    has_more: bool = False
    next_cursor: str | None = None
    total: int = Field(default=0, ge=0)
