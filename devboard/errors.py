"""
devboard/errors.py

Typed domain errors raised by the service layer.

Services raise these on the first violated precondition. Only the HTTP
boundary (devboard/main.py) turns them into responses, using
status_code_for() to map the transport-agnostic ErrorKind to a status code.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorKind(str, Enum):
    BAD_REQUEST = "BadRequest"
    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    INTERNAL = "Internal"


STATUS_CODES: Dict[ErrorKind, int] = {
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


def status_code_for(kind: ErrorKind) -> int:
    return STATUS_CODES.get(kind, 500)


class DomainError(Exception):
    """Base class for every error a service operation can raise."""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(DomainError):
    kind = ErrorKind.BAD_REQUEST
    default_message = "Invalid data"


class InvalidAssignmentError(DomainError):
    kind = ErrorKind.BAD_REQUEST
    default_message = "User is not a project member"


class InvalidOrExpiredError(DomainError):
    kind = ErrorKind.BAD_REQUEST
    default_message = "Token expired or invalid"


class MismatchError(DomainError):
    kind = ErrorKind.BAD_REQUEST
    default_message = "Passwords do not match"


class UnauthorizedError(DomainError):
    kind = ErrorKind.UNAUTHORIZED
    default_message = "Invalid credentials"


class ForbiddenError(DomainError):
    kind = ErrorKind.FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class ConflictError(DomainError):
    kind = ErrorKind.CONFLICT
    default_message = "Already exists"


class InternalError(DomainError):
    kind = ErrorKind.INTERNAL
