# =============================================================================
# core/models/user.py - User Schemas
# =============================================================================
# A users row is keyed by the Supabase auth uid and links the identity to
# its account. Profile data is minimal: email and an optional display name.
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field

from .account import AccountResponse


class UserResponse(BaseModel):
    """Schema for returning user data to clients."""

    id: str = Field(..., description="Supabase auth uid")
    email: str = Field(..., description="Email address used to sign in")
    name: str | None = Field(default=None, description="Display name")
    account_id: str = Field(..., description="Account the user belongs to")

    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    name: str | None = Field(
        default=None,
        min_length=1,
        max_length=120,
        description="New display name"
    )


class UserWithAccount(BaseModel):
    """The authenticated user together with their account."""

    user: UserResponse
    account: AccountResponse
