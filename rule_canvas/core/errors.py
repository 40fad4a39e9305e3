"""
Domain-specific exceptions for the Rule Canvas service.

These exceptions represent canvas and rule-store failures and are mapped
to appropriate HTTP status codes in the API layer.
"""

from typing import Any


class RuleCanvasError(Exception):
    """Base exception for all rule canvas domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(RuleCanvasError):
    """
    Raised when canvas data fails validation.

    Examples:
    - Rule has a blank name
    - Rule is not connected to exactly one trigger, conditions and actions node
    - Required parameter missing, non-numeric number parameter, value outside options
    - Proposed edge rejected by the connection validator

    HTTP Status: 400 Bad Request
    """

    pass


class NotFoundError(RuleCanvasError):
    """
    Raised when a requested resource does not exist.

    Examples:
    - Node ID not present in the graph
    - Persisted rule record not found in the store

    HTTP Status: 404 Not Found
    """

    pass


class RuleNotFoundError(NotFoundError):
    """
    Raised when a rule id does not resolve to a node of type ``rule``.

    This is a structural error: the operation is aborted and no partial
    state is written.

    HTTP Status: 404 Not Found
    """

    pass


class ConflictError(RuleCanvasError):
    """
    Raised when an operation conflicts with current state.

    Examples:
    - Adding a node whose id already exists in the graph
    - Saving a rule that is already being saved

    HTTP Status: 409 Conflict
    """

    pass


class RuleStoreError(RuleCanvasError):
    """
    Raised when the remote rule store fails.

    Examples:
    - Network error while listing, creating, updating or deleting records
    - Non-2xx response from the rule store
    - Unreadable rule library file

    HTTP Status: 502 Bad Gateway
    """

    pass


# HTTP Status Code Mapping
ERROR_STATUS_MAP = {
    ValidationError: 400,
    NotFoundError: 404,
    RuleNotFoundError: 404,
    ConflictError: 409,
    RuleStoreError: 502,
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
