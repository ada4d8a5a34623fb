"""
Custom exceptions for run-insights.

Every exception carries:
- A descriptive message
- An error code for consumers that serialize failures
- Optional details for debugging

Insufficient data is never an error here: the analytics return empty or
neutral results instead, so callers can render a "not enough data yet" state.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Error codes for consistent error payloads."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Goal errors
    GOAL_PRECONDITION_FAILED = "GOAL_PRECONDITION_FAILED"
    UNSUPPORTED_GOAL_TYPE = "UNSUPPORTED_GOAL_TYPE"

    # Template errors
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"


class RunInsightsError(Exception):
    """
    Base exception for all run-insights errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
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
# Validation Errors
# ============================================================================

class ValidationError(RunInsightsError):
    """Raised when input validation fails."""

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
            code=ErrorCode.VALIDATION_ERROR,
            details=error_details,
        )


class GoalPreconditionError(ValidationError):
    """Raised when a goal cannot be evaluated (e.g. target date before creation).

    This is a problem with the goal definition, not with the data, so the
    same call will keep failing until the goal is fixed.
    """

    def __init__(
        self,
        message: str,
        goal_id: Optional[str] = None,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if goal_id:
            error_details["goal_id"] = goal_id
        super().__init__(message=message, field=field, details=error_details)
        self.code = ErrorCode.GOAL_PRECONDITION_FAILED


class UnsupportedGoalTypeError(ValidationError):
    """Raised when a goal carries a type the calculator cannot dispatch on."""

    def __init__(self, goal_type: Any) -> None:
        super().__init__(
            message=f"Unsupported goal type: {goal_type}",
            field="type",
            details={"goal_type": str(goal_type)},
        )
        self.code = ErrorCode.UNSUPPORTED_GOAL_TYPE


# ============================================================================
# Not Found Errors
# ============================================================================

class NotFoundError(RunInsightsError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["resource_type"] = resource_type
        error_details["resource_id"] = resource_id
        super().__init__(
            message=f"{resource_type} not found: {resource_id}",
            code=ErrorCode.NOT_FOUND,
            details=error_details,
        )


class TemplateNotFoundError(NotFoundError):
    """Raised when a goal template is not found."""

    def __init__(self, template_id: str) -> None:
        super().__init__(resource_type="Goal template", resource_id=template_id)
        self.code = ErrorCode.TEMPLATE_NOT_FOUND
