# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the tenant-scoped business logic:
# - models/: Pydantic schemas for data validation
# - services/: Account, user, settings, supply, product, plan and billing
#   operations on top of lib.supabase_client
#
# Services raise app.exceptions errors and never touch the request; routers
# and pages stay thin.
# =============================================================================
