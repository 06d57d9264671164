# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - account.py: Current account endpoints
# - user.py: Current user profile endpoints
# - settings.py: Pricing settings endpoints
# - supplies.py: Supply CRUD (cursor-paginated listing)
# - products.py: Product CRUD and price maintenance
# - pricing.py: Price preview
# - features.py: Plan features and quota usage
# - billing.py: Stripe checkout, portal and webhook
# - tasks.py: Background task status endpoints
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import account
from . import user
from . import settings
from . import supplies
from . import products
from . import pricing
from . import features
from . import billing
from . import tasks

__all__ = [
    "health",
    "account",
    "user",
    "settings",
    "supplies",
    "products",
    "pricing",
    "features",
    "billing",
    "tasks",
]
