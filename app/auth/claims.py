# =============================================================================
# app/auth/claims.py - Custom Claims
# =============================================================================
# account_id and plan_name are stored in the Supabase user's app_metadata
# (writable only with the service key), so they end up in every access token
# Supabase issues for that user.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.feature_flags import Plan
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid

logger = logging.getLogger(__name__)


def get_user_claims(uid: str | UUID) -> dict[str, Any]:
    """Current app_metadata of an auth user ({} if none)."""
    client = SupabaseClient.get_client()
    try:
        response = client.auth.admin.get_user_by_id(normalize_uuid(uid))
    except Exception as e:
        raise SupabaseClientError(
            message=f"Failed to read user claims: {e}",
            code="GET_CLAIMS_FAILED",
            details={"uid": normalize_uuid(uid)},
        )
    return dict(response.user.app_metadata or {})


def set_user_claims(uid: str | UUID, claims: dict[str, Any]) -> dict[str, Any]:
    """
    Merge claims into the user's app_metadata.

    Returns:
        The merged claims
    """
    merged = {**get_user_claims(uid), **claims}

    client = SupabaseClient.get_client()
    try:
        client.auth.admin.update_user_by_id(
            normalize_uuid(uid),
            {"app_metadata": merged},
        )
    except Exception as e:
        raise SupabaseClientError(
            message=f"Failed to set user claims: {e}",
            code="SET_CLAIMS_FAILED",
            details={"uid": normalize_uuid(uid)},
        )

    logger.debug(f"Set claims for user {normalize_uuid(uid)}: {sorted(claims)}")
    return merged


def update_plan_claim(uid: str | UUID, plan: str | Plan) -> dict[str, Any]:
    """Record a new plan; takes effect on the user's next sign-in."""
    plan_name = plan.value if isinstance(plan, Plan) else str(plan)
    return set_user_claims(uid, {"plan_name": plan_name})
