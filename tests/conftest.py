# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Swaps the Supabase client for an in-memory fake (tests/fake_supabase.py)
# - Stops Celery tasks from being queued
# - Builds Supabase-style access tokens and session cookies
# =============================================================================

import os
import time
import uuid

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-at-least-32-characters")
os.environ.setdefault("SECRET_KEY", "test-session-secret-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.config import settings
from core.services.product_service import ProductService
from lib.supabase_client import SupabaseClient
from tests.fake_supabase import FakeSupabase


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
def fake_db():
    """In-memory Supabase used as both the service and the anon client."""
    db = FakeSupabase()
    SupabaseClient._instance = db
    SupabaseClient._anon_instance = db
    yield db
    SupabaseClient.reset()


@pytest.fixture(autouse=True)
def scheduled(monkeypatch):
    """Record recalculation requests instead of sending them to Celery."""
    calls = []

    def fake_schedule(account_id):
        calls.append(account_id)
        return f"task-{len(calls)}"

    monkeypatch.setattr(ProductService, "schedule_recalculation", staticmethod(fake_schedule))
    return calls


@pytest.fixture
def account(fake_db):
    return fake_db.add_row("accounts", {
        "name": "Flora & Co",
        "plan_name": "FREE",
        "subscription_status": None,
        "stripe_customer_id": None,
        "stripe_subscription_id": None,
        "stripe_product_id": None,
        "deleted_at": None,
    })


@pytest.fixture
def user(fake_db, account):
    return fake_db.add_row("users", {
        "id": str(uuid.uuid4()),
        "email": "owner@flora.test",
        "name": "Olivia",
        "account_id": account["id"],
    })


@pytest.fixture
def account_settings(fake_db, account):
    return fake_db.add_row("settings", {
        "account_id": account["id"],
        "tax_rate": 15,
        "profit_margin": 30,
        "other_fixed_costs": 10,
        "other_percentage_costs": 5,
    })


@pytest.fixture
def other_account(fake_db):
    return fake_db.add_row("accounts", {"name": "Someone Else", "plan_name": "FREE"})


# =============================================================================
# Tokens
# =============================================================================

@pytest.fixture
def make_id_token():
    """
    Build a Supabase access token signed with the legacy HS256 secret.

    Example:
        token = make_id_token(user["id"], "a@b.test", age=600)
    """

    def _make(
        sub: str,
        email: str | None = "owner@flora.test",
        app_metadata: dict | None = None,
        age: int = 0,
        lifetime: int = 3600,
    ) -> str:
        issued = int(time.time()) - age
        payload = {
            "sub": sub,
            "email": email,
            "aud": "authenticated",
            "role": "authenticated",
            "iat": issued,
            "exp": issued + lifetime,
            "app_metadata": app_metadata or {},
        }
        return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm="HS256")

    return _make


@pytest.fixture
def client(fake_db):
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def signed_in_client(client, user, account, make_id_token):
    """TestClient carrying a valid session cookie for `user`."""
    token = make_id_token(
        user["id"],
        user["email"],
        app_metadata={"account_id": account["id"], "plan_name": account["plan_name"]},
    )
    response = client.post("/api/v1/auth/session", json={"id_token": token})
    assert response.status_code == 200
    return client
