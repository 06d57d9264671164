# =============================================================================
# app/routers/account.py - Account Endpoints
# =============================================================================
# The signed-in user's account (tenant). An account can only ever see
# itself, so there is no list endpoint.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Query, Response

from app.auth.tokens import clear_session
from app.dependencies import TenantDep
from app.exceptions import AccountNotFoundError
from core.models.account import AccountResponse
from core.services.account_service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=AccountResponse)
async def get_account(
    tenant: TenantDep,
    id: Annotated[str | None, Query(description="Must match the session's account")] = None,
):
    """
    Get the current account.

    Asking for any other account ID answers 404.
    """
    if id is not None and id != tenant.account_id:
        logger.warning(
            f"[Security] User {tenant.uid} asked for account {id}, "
            f"session account is {tenant.account_id}"
        )
        raise AccountNotFoundError(id, user_id=tenant.uid, status_code=404)

    account = AccountService.get_account(tenant.account_id)
    if not account:
        raise AccountNotFoundError(tenant.account_id, user_id=tenant.uid)
    return AccountResponse(**account)


@router.delete("")
async def delete_account(tenant: TenantDep, response: Response):
    """
    Close the current account.

    The account is soft-deleted and the session cookie is cleared.
    """
    AccountService.delete_account(tenant.account_id)
    clear_session(response)
    return {"success": True, "account_id": tenant.account_id}
