"""
Centralized error catalog for the permission engine.

This module provides the domain error taxonomy, standardized messages, and the
mapping of error kinds to HTTP status codes used by API layers that consume
the engine.
"""

from enum import Enum
from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class ErrorKind(Enum):
    """Domain error kinds."""

    # Lookup errors
    PERMISSION_NOT_FOUND = "PERMISSION_NOT_FOUND"
    ROLE_NOT_FOUND = "ROLE_NOT_FOUND"
    POLICY_NOT_FOUND = "POLICY_NOT_FOUND"

    # Assignment errors
    ROLE_ALREADY_ASSIGNED = "ROLE_ALREADY_ASSIGNED"
    ROLE_NOT_ASSIGNED = "ROLE_NOT_ASSIGNED"
    SYSTEM_ROLE_IMMUTABLE = "SYSTEM_ROLE_IMMUTABLE"

    # Validation errors
    INVALID_PERMISSION = "INVALID_PERMISSION"
    INVALID_ROLE = "INVALID_ROLE"
    INVALID_POLICY = "INVALID_POLICY"

    # Evaluation errors
    PERMISSION_DENIED = "PERMISSION_DENIED"
    INVALID_EVALUATION_CONTEXT = "INVALID_EVALUATION_CONTEXT"


class ErrorMessage:
    """Standardized default messages per error kind."""

    PERMISSION_NOT_FOUND = "Permission not found"
    ROLE_NOT_FOUND = "Role not found"
    POLICY_NOT_FOUND = "Policy not found"

    ROLE_ALREADY_ASSIGNED = "User already has this role"
    ROLE_NOT_ASSIGNED = "User does not have this role"
    SYSTEM_ROLE_IMMUTABLE = "System role cannot be modified"

    INVALID_PERMISSION = "Invalid permission"
    INVALID_ROLE = "Invalid role"
    INVALID_POLICY = "Invalid policy"

    PERMISSION_DENIED = "Permission denied"
    INVALID_EVALUATION_CONTEXT = "Evaluation context is missing or invalid"

    @classmethod
    def for_kind(cls, kind: ErrorKind) -> str:
        return getattr(cls, kind.name)


HTTP_STATUS_BY_KIND = {
    ErrorKind.PERMISSION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ROLE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.POLICY_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ROLE_ALREADY_ASSIGNED: status.HTTP_409_CONFLICT,
    ErrorKind.ROLE_NOT_ASSIGNED: status.HTTP_409_CONFLICT,
    ErrorKind.SYSTEM_ROLE_IMMUTABLE: status.HTTP_403_FORBIDDEN,
    ErrorKind.INVALID_PERMISSION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_ROLE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_POLICY: status.HTTP_400_BAD_REQUEST,
    ErrorKind.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorKind.INVALID_EVALUATION_CONTEXT: status.HTTP_400_BAD_REQUEST,
}


class DomainError(Exception):
    """
    Typed business failure raised by aggregates, repositories and the domain service.

    Args:
        kind: The error kind from the taxonomy
        message: Human readable message (defaults to the catalog message)
        details: Optional structured details
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.kind = kind
        self.message = message or ErrorMessage.for_kind(kind)
        self.details: Dict[str, Any] = dict(details or {})
        super().__init__(f"{kind.value}: {self.message}")

    def with_details(self, key: str, value: Any) -> "DomainError":
        """Attach a detail entry and return self for chaining."""
        self.details[key] = value
        return self

    def to_dict(self) -> Dict[str, Any]:
        body = {
            "error_code": self.kind.value,
            "message": self.message,
        }
        if self.details:
            body["details"] = self.details
        return body

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException with the standardized error body."""
        return HTTPException(
            status_code=HTTP_STATUS_BY_KIND[self.kind],
            detail=self.to_dict(),
        )


def is_domain_error(err: BaseException, kind: Optional[ErrorKind] = None) -> bool:
    """Check whether err is a DomainError (optionally of the given kind)."""
    if not isinstance(err, DomainError):
        return False
    return kind is None or err.kind is kind


class ConditionDecodeError(ValueError):
    """Raised when a policy's stored condition set cannot be decoded."""


class EvaluationError(Exception):
    """
    A repository failure during evaluation, tagged with the phase that failed.

    The original exception is chained as __cause__.
    """

    def __init__(self, phase: str, message: str):
        self.phase = phase
        super().__init__(f"{phase.upper()} evaluation failed: {message}")
