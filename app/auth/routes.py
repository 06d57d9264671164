# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for signing in and out.
#
# The browser signs in with Supabase Auth (or posts email/password to
# /login), then exchanges the resulting access token for our HTTP-only
# session cookie. Signup additionally creates the account, its settings and
# the users row, and stores account_id / plan_name as custom claims.
# =============================================================================

import logging
from typing import Any

from fastapi import APIRouter, Depends, Response

from app.auth.claims import set_user_claims
from app.auth.dependencies import get_user_with_account
from app.auth.models import LoginRequest, SessionRequest, SignupRequest
from app.auth.tokens import clear_session, set_session, verify_id_token
from app.exceptions import (
    EmailInUseError,
    InvalidCredentialsError,
    InvalidTokenError,
    SignupRejectedError,
)
from core.models.user import UserWithAccount
from core.services.account_service import AccountService
from core.services.settings_service import SettingsService
from core.services.user_service import UserService
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Helpers (shared with the HTML pages)
# =============================================================================

def register(
    response: Response,
    id_token: str,
    name: str | None = None,
    account_name: str | None = None,
) -> dict[str, Any]:
    """
    Create account, settings and user for a new identity and start a session.

    Raises:
        InvalidTokenError: If the ID token doesn't verify or has no email
        EmailInUseError: If the identity or email is already registered
    """
    claims = verify_id_token(id_token)
    if not claims.email:
        raise InvalidTokenError("token has no email")

    if UserService.get_user(claims.sub) or UserService.get_user_by_email(claims.email):
        raise EmailInUseError(claims.email)

    account = AccountService.create_account(
        account_name or name or claims.email.split("@")[0]
    )
    SettingsService.create_settings(account["id"])
    user = UserService.create_user(claims.sub, claims.email, account["id"], name)

    custom_claims = {"account_id": account["id"], "plan_name": account["plan_name"]}
    set_user_claims(claims.sub, custom_claims)
    set_session(response, id_token, claims_override=custom_claims)

    logger.info(f"Signed up user {user['id']} with account {account['id']}")
    return {"success": True, "account_id": account["id"], "user_id": user["id"]}


def password_sign_in(email: str, password: str) -> str:
    """
    Sign in with email and password through Supabase Auth.

    Returns:
        A fresh access token

    Raises:
        InvalidCredentialsError: If Supabase rejects the credentials
    """
    client = SupabaseClient.get_anon_client()
    try:
        result = client.auth.sign_in_with_password({"email": email, "password": password})
    except Exception as e:
        logger.info(f"Password sign-in rejected: {e}")
        raise InvalidCredentialsError()

    if not result.session:
        raise InvalidCredentialsError()
    return result.session.access_token


def password_sign_up(email: str, password: str) -> str | None:
    """
    Create an email/password identity with Supabase Auth.

    Returns:
        An access token, or None when Supabase requires email confirmation
        before the first sign-in

    Raises:
        SignupRejectedError: If Supabase rejects the signup
    """
    client = SupabaseClient.get_anon_client()
    try:
        result = client.auth.sign_up({"email": email, "password": password})
    except Exception as e:
        logger.info(f"Password sign-up rejected: {e}")
        raise SignupRejectedError(str(e))

    if not result.session:
        return None
    return result.session.access_token


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/signup")
async def signup(body: SignupRequest, response: Response) -> dict:
    """
    Complete signup after creating the identity with Supabase Auth.

    Returns:
        dict: {success, account_id, user_id}

    Raises:
        400: If the email is already registered
        401: If the ID token is invalid or too old
    """
    return register(response, body.id_token, body.name, body.account_name)


@router.post("/login")
async def login(body: LoginRequest, response: Response) -> dict:
    """
    Sign in with email and password and start a session.

    Raises:
        401: If the credentials are wrong
    """
    access_token = password_sign_in(body.email, body.password)
    session = set_session(response, access_token)
    return {"success": True, "user_id": session.uid, "account_id": session.account_id}


@router.post("/session")
async def create_session(body: SessionRequest, response: Response) -> dict:
    """
    Exchange a Supabase access token for a session cookie.

    The token must come from a sign-in within the last few minutes.
    """
    session = set_session(response, body.id_token)
    return {"success": True, "user_id": session.uid, "account_id": session.account_id}


@router.post("/logout")
async def logout(response: Response) -> dict:
    clear_session(response)
    return {"success": True}


@router.post("/verify")
async def verify_token(body: SessionRequest) -> dict:
    """
    Verify that an ID token is valid.

    Useful for checking if a stored token is still valid.

    Raises:
        401: If token is invalid or expired
    """
    claims = verify_id_token(body.id_token)
    return {
        "valid": True,
        "user_id": claims.sub,
        "email": claims.email,
        "claims": claims.custom_claims,
    }


@router.get("/me", response_model=UserWithAccount)
async def get_current_user_info(
    current: UserWithAccount = Depends(get_user_with_account)
) -> UserWithAccount:
    """
    Get the signed-in user together with their account.

    Raises:
        401: If not authenticated
    """
    return current
