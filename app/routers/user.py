# =============================================================================
# app/routers/user.py - User Profile Endpoints
# =============================================================================

from fastapi import APIRouter

from app.dependencies import TenantDep
from app.exceptions import UserNotFoundError
from core.models.user import UserResponse, UserUpdate
from core.services.user_service import UserService

router = APIRouter()


@router.get("", response_model=UserResponse)
async def get_user(tenant: TenantDep):
    """Get the signed-in user's profile."""
    user = UserService.get_user(tenant.uid)
    if not user:
        raise UserNotFoundError(tenant.uid)
    return UserResponse(**user)


@router.patch("", response_model=UserResponse)
async def update_user(tenant: TenantDep, body: UserUpdate):
    """Update the signed-in user's display name."""
    user = UserService.update_user(tenant.uid, body.model_dump(exclude_none=True))
    return UserResponse(**user)
