# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - account.py: Account (tenant) schemas
# - user.py: User profile schemas
# - settings.py: Pricing settings schemas
# - supply.py: Supply (raw material) schemas
# - product.py: Product and ingredient schemas
# - pricing.py: Price preview / breakdown schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Tenant Models
# -----------------------------------------------------------------------------
from .account import AccountResponse, SubscriptionStatus
from .user import UserResponse, UserUpdate, UserWithAccount

# -----------------------------------------------------------------------------
# Settings Models
# -----------------------------------------------------------------------------
from .settings import SettingsResponse, SettingsUpdate

# -----------------------------------------------------------------------------
# Catalog Models - Supplies and Products
# -----------------------------------------------------------------------------
from .supply import SupplyCreate, SupplyPage, SupplyResponse, SupplyUpdate
from .product import (
    Ingredient,
    ProductCreate,
    ProductList,
    ProductResponse,
    ProductUpdate,
)

# -----------------------------------------------------------------------------
# Pricing Models
# -----------------------------------------------------------------------------
from .pricing import (
    PreviewSupply,
    PriceBreakdownResponse,
    PricePreviewRequest,
    PriceResponse,
)

__all__ = [
    "AccountResponse",
    "SubscriptionStatus",
    "UserResponse",
    "UserUpdate",
    "UserWithAccount",
    "SettingsResponse",
    "SettingsUpdate",
    "SupplyCreate",
    "SupplyPage",
    "SupplyResponse",
    "SupplyUpdate",
    "Ingredient",
    "ProductCreate",
    "ProductList",
    "ProductResponse",
    "ProductUpdate",
    "PreviewSupply",
    "PriceBreakdownResponse",
    "PricePreviewRequest",
    "PriceResponse",
]
