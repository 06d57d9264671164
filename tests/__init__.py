# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Pricewise API:
# - test_pricing.py / test_feature_flags.py / test_pagination.py: lib/ units
# - test_*_service.py: Service layer against the in-memory database
# - test_auth.py: ID tokens, session cookies, claims and signup
# - test_api.py / test_pages.py: HTTP tests through FastAPI's TestClient
# - test_billing.py: Stripe checkout and webhooks (Stripe mocked)
# - test_workers.py: Celery recalculation task
#
# fake_supabase.py stands in for the Supabase client; see conftest.py.
#
# Run tests with: pytest
# =============================================================================
