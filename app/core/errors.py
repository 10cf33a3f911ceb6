"""
Domain errors raised by the complaint lifecycle.

Routes never build HTTP errors for these by hand: the exception handler
registered in app.main turns each one into a {"error": ...} response
using the status code carried by the class.
"""

from fastapi import status


class ComplaintError(Exception):
    """Base class for every lifecycle error."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ComplaintError):
    """A required field (title, proof image) is missing."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ComplaintError):
    """Referenced complaint, team or user does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ComplaintError):
    """
    The request is well-formed but the current state forbids it
    (team on break, a backward status transition).

    Reported as 400 to keep the response codes the frontend already handles.
    """

    status_code = status.HTTP_400_BAD_REQUEST


class PermissionDeniedError(ComplaintError):
    """Caller role is not allowed to perform the operation."""

    status_code = status.HTTP_403_FORBIDDEN


class InfrastructureError(ComplaintError):
    """Persistence of the primary write failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
