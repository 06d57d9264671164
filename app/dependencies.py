# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Query, Request

from app.auth.dependencies import require_page_session, require_session
from app.auth.models import SessionData
from app.config import settings
from app.exceptions import (
    AccountClosedError,
    AccountNotFoundError,
    LoginRequired,
    UserNotFoundError,
)
from core.services.account_service import AccountService
from core.services.user_service import UserService
from lib.feature_flags import Plan

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tenant:
    """Who is asking: the signed-in user, their account and its plan."""
    uid: str
    account_id: str
    plan: Plan


def _tenant_from_session(session: SessionData) -> Tenant:
    """
    Resolve the tenant for a session.

    Sessions minted before the account_id claim was set fall back to the
    users row. Sessions of a closed account are rejected even though the
    cookie itself still verifies.

    Raises:
        UserNotFoundError: If there is no account claim and no users row
        AccountNotFoundError: If the account doesn't exist
        AccountClosedError: If the account was deleted
    """
    account_id = session.account_id
    if not account_id:
        user = UserService.get_user(session.uid)
        if not user:
            raise UserNotFoundError(session.uid)
        account_id = user["account_id"]

    account = AccountService.get_account(account_id, include_deleted=True)
    if not account:
        raise AccountNotFoundError(account_id, user_id=session.uid)
    if account.get("deleted_at"):
        logger.info(f"Rejected session of {session.uid} for closed account {account_id}")
        raise AccountClosedError(account_id)

    return Tenant(uid=session.uid, account_id=account_id, plan=session.plan)


async def get_tenant(session: SessionData = Depends(require_session)) -> Tenant:
    return _tenant_from_session(session)


async def get_page_tenant(
    request: Request,
    session: SessionData = Depends(require_page_session),
) -> Tenant:
    try:
        return _tenant_from_session(session)
    except AccountClosedError:
        raise LoginRequired(request.url.path)


def page_size_param(
    page_size: int = Query(
        default=settings.DEFAULT_PAGE_SIZE,
        ge=1,
        le=settings.MAX_PAGE_SIZE,
        description="Items per page",
    ),
) -> int:
    return page_size


# Type aliases for dependency injection
TenantDep = Annotated[Tenant, Depends(get_tenant)]
PageTenantDep = Annotated[Tenant, Depends(get_page_tenant)]
PageSizeDep = Annotated[int, Depends(page_size_param)]
