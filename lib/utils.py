# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from pydantic import BaseModel


# =============================================================================
# UUID / Timestamp Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Handles both string and UUID objects, ensuring consistent string output.

    Example:
        account_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        account_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string (for updated_at / deleted_at columns)."""
    return datetime.now(timezone.utc).isoformat()


def changed_fields(data: BaseModel, clearable: tuple[str, ...] = ()) -> dict[str, Any]:
    """
    Columns a partial update should write.

    Only fields the caller actually sent are included. An explicit None is
    kept for `clearable` columns (it clears them) and ignored otherwise.
    """
    sent = data.model_dump(exclude_unset=True)
    return {key: value for key, value in sent.items() if value is not None or key in clearable}


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for application-specific errors.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging

    Example:
        class PricingError(ApplicationError):
            def __init__(self, message: str, **kwargs):
                super().__init__(message, code="PRICING_ERROR", **kwargs)
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
        }
