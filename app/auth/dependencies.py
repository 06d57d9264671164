# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# The session cookie is verified on every request. API routes answer 401
# without one; HTML pages redirect to /login instead.
#
# Usage:
#   from app.auth import require_session, SessionData
#
#   @router.get("/protected")
#   async def protected(session: SessionData = Depends(require_session)):
#       return {"account_id": session.account_id}
# =============================================================================

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request, Response

from app.auth.models import SessionData
from app.auth.tokens import clear_session, verify_session_cookie
from app.config import settings
from app.exceptions import InvalidTokenError, LoginRequired, NotAuthenticatedError
from core.models.user import UserWithAccount
from core.services.user_service import UserService

logger = logging.getLogger(__name__)


async def get_session(request: Request, response: Response) -> Optional[SessionData]:
    """
    Session from the request's cookie, or None.

    An invalid or expired cookie is cleared rather than treated as an error.
    """
    cookie = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not cookie:
        return None

    try:
        return verify_session_cookie(cookie)
    except InvalidTokenError as e:
        logger.info(f"Discarding session cookie: {e.message}")
        clear_session(response)
        return None


async def require_session(
    session: Optional[SessionData] = Depends(get_session),
) -> SessionData:
    """
    Raises:
        NotAuthenticatedError: 401 if there is no valid session
    """
    if session is None:
        raise NotAuthenticatedError()
    return session


async def require_page_session(
    request: Request,
    session: Optional[SessionData] = Depends(get_session),
) -> SessionData:
    """
    Raises:
        LoginRequired: handled as a 303 redirect to /login
    """
    if session is None:
        raise LoginRequired(request.url.path)
    return session


def _load_user_with_account(session: SessionData) -> UserWithAccount:
    user, account = UserService.get_user_with_account(session.uid)
    return UserWithAccount.model_validate({"user": user, "account": account})


async def get_user_with_account(
    session: SessionData = Depends(require_session),
) -> UserWithAccount:
    """
    The session's user row and account row.

    Raises:
        UserNotFoundError: If signup never completed
        AccountNotFoundError: If the user points at a missing account
    """
    return _load_user_with_account(session)


async def get_page_user_with_account(
    session: SessionData = Depends(require_page_session),
) -> UserWithAccount:
    return _load_user_with_account(session)


# Type aliases for dependency injection
SessionDep = Annotated[SessionData, Depends(require_session)]
PageSessionDep = Annotated[SessionData, Depends(require_page_session)]
UserWithAccountDep = Annotated[UserWithAccount, Depends(get_user_with_account)]
