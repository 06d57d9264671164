# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Session-cookie authentication on top of Supabase Auth.
#
# Usage:
#   from app.auth import require_session, SessionData
#
#   @router.get("/protected")
#   async def protected(session: SessionData = Depends(require_session)):
#       return {"user_id": session.uid}
# =============================================================================

from app.auth.dependencies import (
    get_session,
    get_user_with_account,
    require_page_session,
    require_session,
)
from app.auth.models import SessionData, TokenClaims
from app.auth.tokens import (
    clear_session,
    create_session_cookie,
    set_session,
    verify_id_token,
    verify_session_cookie,
)

__all__ = [
    "get_session",
    "get_user_with_account",
    "require_page_session",
    "require_session",
    "SessionData",
    "TokenClaims",
    "clear_session",
    "create_session_cookie",
    "set_session",
    "verify_id_token",
    "verify_session_cookie",
]
