# =============================================================================
# app/auth/tokens.py - ID Token and Session Cookie Handling
# =============================================================================
# Turns a Supabase access token (the "ID token") into our own session cookie.
#
# ID token verification supports both:
# - ES256/RS256 (new Supabase JWT signing keys) via JWKS
# - HS256 (legacy Supabase JWT secret), only when SUPABASE_JWT_SECRET is set
#
# Session cookies are HS256 JWTs signed with SECRET_KEY. They are only minted
# for ID tokens issued within SESSION_MAX_TOKEN_AGE_SECONDS, so a stolen
# long-lived token can't be turned into a fresh 5-day session.
# =============================================================================

import logging
import time
from typing import Any

import httpx
from fastapi import Response
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError

from app.auth.models import SessionData, TokenClaims
from app.config import settings
from app.exceptions import InvalidTokenError, SessionCreationError

logger = logging.getLogger(__name__)

SESSION_ALGORITHM = "HS256"
SESSION_TOKEN_TYPE = "session"

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour

ASYMMETRIC_ALGORITHMS = ("ES256", "RS256")


# =============================================================================
# Supabase ID tokens
# =============================================================================

def _get_jwks_url() -> str:
    """Get the JWKS URL from Supabase URL."""
    supabase_url = settings.SUPABASE_URL.rstrip('/')
    return f"{supabase_url}/auth/v1/.well-known/jwks.json"


def _fetch_jwks() -> dict:
    """Fetch JWKS from Supabase with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()

    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        jwks_url = _get_jwks_url()
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = current_time
        logger.debug(f"Fetched JWKS from {jwks_url}")
        return _jwks_cache
    except Exception as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Stale keys are better than none
        if _jwks_cache:
            return _jwks_cache
        return {"keys": []}


def _get_signing_key(token: str) -> tuple[Any, str]:
    """
    Get the appropriate verification key for a token.

    Returns:
        Tuple of (key, algorithm) to use for verification

    Raises:
        InvalidTokenError: If no key is configured or published for the
            token's algorithm
    """
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError:
        raise InvalidTokenError("malformed token")

    alg = unverified_header.get("alg", "HS256")
    kid = unverified_header.get("kid")

    if alg == "HS256":
        if not settings.SUPABASE_JWT_SECRET:
            logger.warning("HS256 token rejected: SUPABASE_JWT_SECRET is not set")
            raise InvalidTokenError("HS256 tokens are not accepted")
        return settings.SUPABASE_JWT_SECRET, "HS256"

    if alg not in ASYMMETRIC_ALGORITHMS:
        raise InvalidTokenError(f"unsupported algorithm {alg}")

    if kid:
        jwks = _fetch_jwks()
        for key in jwks.get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    logger.warning(f"No JWKS key for alg={alg}, kid={kid}")
    raise InvalidTokenError("unknown signing key")


def verify_id_token(token: str) -> TokenClaims:
    """
    Verify a Supabase access token.

    Raises:
        InvalidTokenError: If the signature, audience or expiry is invalid
    """
    try:
        signing_key, algorithm = _get_signing_key(token)
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience="authenticated",
        )
    except ExpiredSignatureError:
        logger.warning("ID token has expired")
        raise InvalidTokenError("token has expired")
    except JWTError as e:
        logger.warning(f"ID token validation failed: {e}")
        raise InvalidTokenError(str(e))

    if not payload.get("sub"):
        logger.warning("ID token missing 'sub' claim")
        raise InvalidTokenError("missing user ID")

    try:
        return TokenClaims(**payload)
    except ValidationError as e:
        raise InvalidTokenError(f"malformed claims ({e.error_count()} errors)")


# =============================================================================
# Session cookies
# =============================================================================

def create_session_cookie(
    id_token: str,
    claims_override: dict[str, Any] | None = None,
) -> str:
    """
    Mint a session cookie value from a recently issued ID token.

    Args:
        id_token: Supabase access token from a fresh sign-in
        claims_override: account_id / plan_name to use instead of the
            token's app_metadata (used right after signup, when the token
            predates the custom claims)

    Raises:
        InvalidTokenError: If the ID token doesn't verify
        SessionCreationError: If the ID token is too old
    """
    claims = verify_id_token(id_token)

    now = int(time.time())
    if now - claims.iat > settings.SESSION_MAX_TOKEN_AGE_SECONDS:
        raise SessionCreationError("recent sign-in required")

    custom = {**claims.custom_claims, **(claims_override or {})}
    payload = {
        "sub": claims.sub,
        "email": claims.email,
        "account_id": custom.get("account_id"),
        "plan_name": custom.get("plan_name"),
        "typ": SESSION_TOKEN_TYPE,
        "iat": now,
        "exp": now + settings.session_max_age_seconds,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=SESSION_ALGORITHM)


def verify_session_cookie(cookie: str) -> SessionData:
    """
    Raises:
        InvalidTokenError: If the cookie is expired, tampered with or not a session
    """
    try:
        payload = jwt.decode(cookie, settings.SECRET_KEY, algorithms=[SESSION_ALGORITHM])
    except ExpiredSignatureError:
        raise InvalidTokenError("session has expired")
    except JWTError as e:
        raise InvalidTokenError(str(e))

    if payload.get("typ") != SESSION_TOKEN_TYPE or not payload.get("sub"):
        raise InvalidTokenError("not a session cookie")

    return SessionData(
        uid=payload["sub"],
        email=payload.get("email"),
        account_id=payload.get("account_id"),
        plan_name=payload.get("plan_name"),
    )


def set_session(
    response: Response,
    id_token: str,
    claims_override: dict[str, Any] | None = None,
) -> SessionData:
    """Create a session cookie and attach it to the response."""
    cookie = create_session_cookie(id_token, claims_override)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=cookie,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )
    return verify_session_cookie(cookie)


def clear_session(response: Response) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")
