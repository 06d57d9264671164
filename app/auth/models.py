# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Any, Optional

from pydantic import BaseModel, Field

from lib.feature_flags import Plan, resolve_plan


class TokenClaims(BaseModel):
    """
    Decoded Supabase access token.

    Supabase tokens include standard JWT claims plus app_metadata, where
    our custom claims (account_id, plan_name) are stored.
    """
    sub: str  # User ID
    email: Optional[str] = None
    aud: str | list[str] | None = None
    exp: int
    iat: int
    role: Optional[str] = None
    app_metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def custom_claims(self) -> dict[str, Any]:
        return {
            key: self.app_metadata[key]
            for key in ("account_id", "plan_name")
            if key in self.app_metadata
        }


class SessionData(BaseModel):
    """
    Verified contents of the session cookie.

    This is everything a request knows about the user without querying
    the database.
    """
    uid: str
    email: Optional[str] = None
    account_id: Optional[str] = None
    plan_name: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def plan(self) -> Plan:
        return resolve_plan(self.plan_name)


class SessionRequest(BaseModel):
    """Exchange a Supabase access token for a session cookie."""
    id_token: str = Field(..., min_length=1)


class SignupRequest(BaseModel):
    """First sign-in: creates the account, settings and user rows."""
    id_token: str = Field(..., min_length=1)
    name: Optional[str] = Field(default=None, max_length=120)
    account_name: Optional[str] = Field(default=None, max_length=120)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)
