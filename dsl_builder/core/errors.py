"""
Domain-specific exceptions for the DSL builder.

These exceptions represent rule-tree and generation failures and are mapped
to appropriate HTTP status codes in the API layer.
"""

from typing import Any


class DslBuilderError(Exception):
    """Base exception for all DSL builder domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(DslBuilderError):
    """
    Raised when input data fails validation.

    Examples:
    - Unknown condition field in an update
    - Condition value does not fit its comparison type (strict mode)
    - Malformed key/value row

    HTTP Status: 400 Bad Request
    """

    pass


class NotFoundError(DslBuilderError):
    """
    Raised when a requested resource does not exist.

    Examples:
    - Unknown document kind requested from the defaults endpoint

    HTTP Status: 404 Not Found
    """

    pass


class LastConditionError(DslBuilderError):
    """
    Raised when removing a condition would leave its group empty.

    A condition group always keeps at least one condition; the last one
    can only go away together with its group.

    HTTP Status: 409 Conflict
    """

    pass


class MissingValidationError(DslBuilderError):
    """
    Raised when a config document is requested without any validation group.

    This is a recoverable refusal: the operator is asked to add a rule and
    try again.

    HTTP Status: 422 Unprocessable Entity
    """

    pass


# HTTP Status Code Mapping
ERROR_STATUS_MAP = {
    ValidationError: 400,
    NotFoundError: 404,
    LastConditionError: 409,
    MissingValidationError: 422,
}


def get_status_code(error: Exception) -> int:
    """
    Get the HTTP status code for a given exception.

    Args:
        error: The exception instance

    Returns:
        HTTP status code (defaults to 500 for unknown errors)
    """
    return ERROR_STATUS_MAP.get(type(error), 500)
