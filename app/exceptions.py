# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse


class PricewiseException(Exception):
    """
    Base exception for the Pricewise API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "PRICEWISE_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Auth Exceptions
# =============================================================================

class NotAuthenticatedError(PricewiseException):
    """Raised when a request needs a session and has none."""

    def __init__(self):
        super().__init__(
            message="Not authenticated",
            code="NOT_AUTHENTICATED",
            status_code=401,
            suggestion="Sign in via POST /api/v1/auth/login or /api/v1/auth/session",
        )


class LoginRequired(PricewiseException):
    """Raised by HTML pages; handled as a redirect to the login page."""

    def __init__(self, next_path: str = "/dashboard"):
        super().__init__(
            message="Login required",
            code="LOGIN_REQUIRED",
            status_code=303,
            details={"next": next_path},
        )


class InvalidTokenError(PricewiseException):
    """Raised when an ID token or session cookie fails verification."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Invalid token: {reason}",
            code="INVALID_TOKEN",
            status_code=401,
            suggestion="Sign in again to obtain a fresh token",
        )


class SessionCreationError(PricewiseException):
    """Raised when a session cookie cannot be minted from an ID token."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Could not create session: {reason}",
            code="SESSION_CREATION_FAILED",
            status_code=401,
            suggestion="Sign in again; session cookies require a recent sign-in",
        )


class InvalidCredentialsError(PricewiseException):
    """Raised when password sign-in is rejected by the identity provider."""

    def __init__(self):
        super().__init__(
            message="Invalid email or password",
            code="INVALID_CREDENTIALS",
            status_code=401,
            suggestion="Check your credentials or reset your password",
        )


class SignupRejectedError(PricewiseException):
    """Raised when the identity provider refuses to create the identity."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Signup failed: {reason}",
            code="SIGNUP_REJECTED",
            status_code=400,
            suggestion="Use another email or a stronger password",
        )


class EmailInUseError(PricewiseException):
    """Raised on signup when the email already has a user."""

    def __init__(self, email: str):
        super().__init__(
            message="Email already in use",
            code="EMAIL_IN_USE",
            status_code=400,
            suggestion="Log in instead, or sign up with another email",
            details={"email": email},
        )


# =============================================================================
# Tenant Exceptions
# =============================================================================

class AccountNotFoundError(PricewiseException):
    """Raised when a user points at an account that doesn't exist."""

    def __init__(self, account_id: str, user_id: str | None = None, status_code: int = 500):
        details = {"account_id": account_id}
        if user_id:
            details["user_id"] = user_id
        integrity_issue = status_code >= 500
        super().__init__(
            message="Account not found. Data integrity issue." if integrity_issue else "Account not found",
            code="ACCOUNT_NOT_FOUND",
            status_code=status_code,
            suggestion="Contact support; the user is linked to a missing account" if integrity_issue else None,
            details=details,
        )


class AccountClosedError(PricewiseException):
    """Raised when a session belongs to a soft-deleted account."""

    def __init__(self, account_id: str):
        super().__init__(
            message="Account has been closed",
            code="ACCOUNT_CLOSED",
            status_code=401,
            suggestion="Sign up again to create a new account",
            details={"account_id": account_id},
        )


class UserNotFoundError(PricewiseException):
    """Raised when the session's user has no users row."""

    def __init__(self, user_id: str):
        super().__init__(
            message=f"User not found: {user_id}",
            code="USER_NOT_FOUND",
            status_code=404,
            suggestion="Finish signing up via POST /api/v1/auth/signup",
            details={"user_id": user_id},
        )


class ProductNotFoundError(PricewiseException):
    """Raised when a product ID doesn't exist (or belongs to another account)."""

    def __init__(self, product_id: str):
        super().__init__(
            message=f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            status_code=404,
            suggestion="Check that the product_id is correct",
            details={"product_id": product_id}
        )


class SupplyNotFoundError(PricewiseException):
    """Raised when a supply ID doesn't exist (or belongs to another account)."""

    def __init__(self, supply_id: str):
        super().__init__(
            message=f"Supply not found: {supply_id}",
            code="SUPPLY_NOT_FOUND",
            status_code=404,
            suggestion="Check that the supply_id is correct",
            details={"supply_id": supply_id}
        )


class SupplyInUseError(PricewiseException):
    """Raised when deleting a supply that products still use."""

    def __init__(self, supply_id: str, product_ids: list[str]):
        super().__init__(
            message=f"Supply is used by {len(product_ids)} product(s)",
            code="SUPPLY_IN_USE",
            status_code=409,
            suggestion="Remove the supply from these products before deleting it",
            details={"supply_id": supply_id, "product_ids": product_ids},
        )


class ForbiddenResourceError(PricewiseException):
    """Raised when modifying a row owned by another account."""

    def __init__(self, resource: str, resource_id: str, action: str):
        super().__init__(
            message=f"Forbidden: You do not have permission to {action} this {resource}",
            code="FORBIDDEN",
            status_code=403,
            details={f"{resource}_id": resource_id},
        )


# =============================================================================
# Settings / Pricing Exceptions
# =============================================================================

class InvalidSettingsError(PricewiseException):
    """Raised when settings values are out of range."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="INVALID_SETTINGS",
            status_code=400,
            suggestion="Percentages must be 0-100 and add up to less than 100; fixed costs cannot be negative",
            details=details,
        )


class InvalidPricingInputError(PricewiseException):
    """Raised when a price cannot be computed from the given inputs."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="INVALID_PRICING_INPUT",
            status_code=400,
            suggestion="Check the product's supplies and the account settings",
            details=details,
        )


# =============================================================================
# Plan Exceptions
# =============================================================================

class QuotaExceededError(PricewiseException):
    """Raised when an account reaches its plan's quota."""

    def __init__(self, feature: str, limit: int):
        super().__init__(
            message=f"{feature.title()} limit reached ({limit})",
            code="QUOTA_EXCEEDED",
            status_code=403,
            suggestion="Upgrade to Pro to raise your limits",
            details={"feature": feature, "limit": limit},
        )


class FeatureNotAvailableError(PricewiseException):
    """Raised when the account's plan lacks a feature."""

    def __init__(self, feature: str):
        super().__init__(
            message=f"Feature not available on your plan: {feature}",
            code="FEATURE_NOT_AVAILABLE",
            status_code=403,
            suggestion="Upgrade to Pro to use this feature",
            details={"feature": feature},
        )


# =============================================================================
# Billing Exceptions
# =============================================================================

class BillingNotConfiguredError(PricewiseException):
    """Raised when billing endpoints are hit without Stripe credentials."""

    def __init__(self):
        super().__init__(
            message="Billing is not configured",
            code="BILLING_NOT_CONFIGURED",
            status_code=503,
            suggestion="Set STRIPE_SECRET_KEY and STRIPE_WEBHOOK_SECRET",
        )


class NoBillingCustomerError(PricewiseException):
    """Raised when opening the billing portal before ever subscribing."""

    def __init__(self, account_id: str):
        super().__init__(
            message="Account has no billing customer yet",
            code="NO_BILLING_CUSTOMER",
            status_code=400,
            suggestion="Subscribe first via POST /api/v1/billing/checkout",
            details={"account_id": account_id},
        )


class BillingError(PricewiseException):
    """Raised when Stripe rejects a request."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Billing provider error: {error}",
            code="BILLING_ERROR",
            status_code=502,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def pricewise_exception_handler(
    request: Request,
    exc: PricewiseException
) -> JSONResponse | RedirectResponse:
    """
    Convert PricewiseException to a response.

    LoginRequired becomes a 303 redirect to the login page; everything else
    is returned as structured JSON with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context

    A session cookie sent with an unauthenticated request is invalid and
    gets deleted.
    """
    from app.config import settings

    if isinstance(exc, LoginRequired):
        response = RedirectResponse(url="/login", status_code=303)
    else:
        response = JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    if isinstance(exc, (LoginRequired, NotAuthenticatedError, AccountClosedError)):
        if request.cookies.get(settings.SESSION_COOKIE_NAME):
            response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return response


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to user-friendly messages.
    """
    errors = exc.errors() if hasattr(exc, "errors") else str(exc)
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": jsonable_errors(errors),
        }
    )


def jsonable_errors(errors: Any) -> Any:
    """Strip non-serializable context (e.g. exception objects) from pydantic errors."""
    if not isinstance(errors, list):
        return errors
    return [
        {key: value for key, value in error.items() if key in ("loc", "msg", "type")}
        for error in errors
    ]
