"""
core/exceptions.py

Description:
Defines the API error taxonomy. Every error carries a human-readable message
and is rendered by the handlers in main.py as {"success": false, "message": ...}.
"""

from typing import Any

from fastapi import HTTPException, status


class APIError(HTTPException):
    """Base exception with a standardized error message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, headers: dict[str, Any] | None = None):
        self.message = message or self.default_message
        super().__init__(status_code=self.status_code, detail=self.message, headers=headers)


class NotFoundError(APIError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class UnauthorizedError(APIError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Could not validate credentials"


class ForbiddenError(APIError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized to perform this action"


class InvalidStateError(APIError):
    """Operation is not legal for the entity's current lifecycle state."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Operation not allowed in the current state"


class ValidationFailedError(APIError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class UnexpectedError(APIError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "An unexpected error occurred"
