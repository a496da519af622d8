"""
Custom Exceptions for the UniGuide prediction backend

Hierarchical exception classes for proper error handling across layers.
"""

from typing import Optional, Dict, Any


class UniGuideError(Exception):
    """Base exception for all UniGuide errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ValidationError(UniGuideError):
    """Raised when input validation fails."""
    pass


class InvalidInputError(ValidationError):
    """Raised when a student profile cannot produce a tier payload."""

    def __init__(
        self,
        message: str,
        tier: Optional[str] = None,
        field: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if tier:
            details["tier"] = tier
        if field:
            details["field"] = field
        super().__init__(message, details, original_error)


class DatabaseError(UniGuideError):
    """Raised when database operations fail."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table
        super().__init__(message, details, original_error)


class NotFoundError(DatabaseError):
    """Raised when a requested resource is not found."""
    pass


class InvalidStatusTransitionError(UniGuideError):
    """Raised when a prediction result leaves a terminal status."""

    def __init__(self, result_id: Any, current: str, requested: str):
        super().__init__(
            f"Prediction result {result_id} cannot move from {current} to {requested}",
            {"result_id": str(result_id), "current": current, "requested": requested},
        )


class PredictionServiceError(UniGuideError):
    """Raised when a call to the external prediction service fails."""

    def __init__(
        self,
        message: str,
        tier: Optional[str] = None,
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None
    ):
        details: Dict[str, Any] = {}
        if tier:
            details["tier"] = tier
        if operation:
            details["operation"] = operation
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details, original_error)
        self.tier = tier
        self.operation = operation
        self.status_code = status_code


class PredictionResponseError(PredictionServiceError):
    """Raised when the prediction service answers with a malformed body."""
    pass


class UnmappedValueError(UniGuideError):
    """Raised when a domain value has no counterpart in the L3 vocabulary."""

    def __init__(self, mapping: str, value: Any):
        super().__init__(
            f"No {mapping} mapping for value {value!r}",
            {"mapping": mapping, "value": str(value)},
        )
        self.mapping = mapping
        self.value = value


class ConfigurationError(UniGuideError):
    """Raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(message, details, original_error)
