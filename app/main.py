# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Pricewise app.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    PricewiseException,
    pricewise_exception_handler,
    validation_exception_handler,
)
from app import pages
from app.auth import routes as auth_routes
from app.routers import (
    account,
    billing,
    features,
    health,
    pricing,
    products,
    supplies,
    tasks,
    user,
)
from app.routers import settings as settings_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown.
    """
    logger.info(f"Starting Pricewise in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if not settings.billing_enabled:
        logger.info("Stripe is not configured; billing endpoints are disabled")

    yield

    logger.info("Shutting down Pricewise")


# Create FastAPI application
app = FastAPI(
    title="Pricewise",
    description="""
## Pricing for small merchants

Pricewise computes the selling price of composite products from the cost of
their supplies, the account's tax rate, fixed costs and profit margin:

```
price = (supplies_cost + fixed_costs) / (1 - (tax + other% + margin) / 100)
```

### How It Works

1. **Sign in** - exchange a Supabase access token for a session cookie
2. **Add supplies** - raw materials with a cost per unit
3. **Compose products** - ingredients reference supplies; the price is computed server-side
4. **Tune settings** - changes reprice every product in the background
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Sign in, sign up and session cookies"},
        {"name": "Account", "description": "The current account (tenant)"},
        {"name": "User", "description": "The current user's profile"},
        {"name": "Settings", "description": "Tax, margin and fixed costs"},
        {"name": "Supplies", "description": "Raw materials and their costs"},
        {"name": "Products", "description": "Products, ingredients and prices"},
        {"name": "Pricing", "description": "Price previews"},
        {"name": "Features", "description": "Plan features and quotas"},
        {"name": "Billing", "description": "Stripe subscriptions"},
        {"name": "Tasks", "description": "Track background recalculations"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# Cookies are only sent cross-origin to explicitly allowed origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(PricewiseException)
async def handle_pricewise_exception(request: Request, exc: PricewiseException):
    """Handle custom Pricewise exceptions."""
    return await pricewise_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

API_PREFIX = "/api/v1"

# Authentication endpoints
app.include_router(auth_routes.router, prefix=f"{API_PREFIX}/auth", tags=["Auth"])

# Health check endpoints
app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])

# Tenant endpoints
app.include_router(account.router, prefix=f"{API_PREFIX}/account", tags=["Account"])
app.include_router(user.router, prefix=f"{API_PREFIX}/user", tags=["User"])
app.include_router(settings_routes.router, prefix=f"{API_PREFIX}/settings", tags=["Settings"])

# Catalog endpoints
app.include_router(supplies.router, prefix=f"{API_PREFIX}/supplies", tags=["Supplies"])
app.include_router(products.router, prefix=f"{API_PREFIX}/products", tags=["Products"])
app.include_router(pricing.router, prefix=f"{API_PREFIX}/pricing", tags=["Pricing"])

# Plan endpoints
app.include_router(features.router, prefix=f"{API_PREFIX}/features", tags=["Features"])
app.include_router(billing.router, prefix=f"{API_PREFIX}/billing", tags=["Billing"])

# Task status endpoints
app.include_router(tasks.router, prefix=f"{API_PREFIX}/tasks", tags=["Tasks"])

# HTML pages (landing page at /)
app.include_router(pages.router, include_in_schema=False)
