"""
Custom exceptions for the Coach Running engine.

Every error carries a descriptive message, an error code for API
responses, the HTTP status it maps to and optional details.

Absence of usable race data is NOT an error: estimators return None.
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for consistent API error responses."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Calibration errors
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_INPUT = "INVALID_INPUT"

    # Plan consistency errors
    INVARIANT_VIOLATION = "INVARIANT_VIOLATION"
    ZONE_SET_MISMATCH = "ZONE_SET_MISMATCH"

    # Activity feed errors
    EXTERNAL_FETCH_ERROR = "EXTERNAL_FETCH_ERROR"


class CoachRunningError(Exception):
    """
    Base exception for all Coach Running errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        status_code: HTTP status code for API responses
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# ============================================================================
# Input Errors (400)
# ============================================================================

class InvalidFormatError(CoachRunningError):
    """Raised when a duration text matches none of the supported forms."""

    def __init__(self, text: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.text = text
        error_details = details or {}
        error_details["text"] = text
        super().__init__(
            message=f"Unrecognized duration format: {text!r}",
            code=ErrorCode.INVALID_FORMAT,
            status_code=400,
            details=error_details,
        )


class InvalidInputError(CoachRunningError):
    """Raised when a calibration input is out of its domain."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code=ErrorCode.INVALID_INPUT,
            status_code=400,
            details=error_details,
        )


# ============================================================================
# Consistency Errors (409)
# ============================================================================

class InvariantViolationError(CoachRunningError):
    """Raised when a value reaching the engine breaks a structural rule."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.INVARIANT_VIOLATION,
            status_code=409,
            details=details,
        )


class ZoneSetMismatchError(InvariantViolationError):
    """Raised when a week is generated against another zone set than its plan's."""

    def __init__(
        self,
        plan_id: str,
        expected_fingerprint: str,
        actual_fingerprint: str,
    ) -> None:
        super().__init__(
            message=f"Week does not use the zone set recorded on plan '{plan_id}'",
            details={
                "plan_id": plan_id,
                "expected_fingerprint": expected_fingerprint,
                "actual_fingerprint": actual_fingerprint,
            },
        )
        self.code = ErrorCode.ZONE_SET_MISMATCH


# ============================================================================
# External Errors (502)
# ============================================================================

class ExternalFetchError(CoachRunningError):
    """Raised when the activity feed is unreachable, unauthorized or too slow."""

    def __init__(
        self,
        message: str,
        provider: str = "",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.provider = provider
        error_details = details or {}
        if provider:
            error_details["provider"] = provider
        super().__init__(
            message=message,
            code=ErrorCode.EXTERNAL_FETCH_ERROR,
            status_code=502,
            details=error_details,
        )
