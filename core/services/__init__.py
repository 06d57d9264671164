# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .account_service import AccountService
from .user_service import UserService
from .settings_service import SettingsService
from .feature_service import FeatureService
from .supply_service import SupplyService
from .product_service import ProductService
from .billing_service import BillingService

__all__ = [
    "AccountService",
    "UserService",
    "SettingsService",
    "FeatureService",
    "SupplyService",
    "ProductService",
    "BillingService",
]
