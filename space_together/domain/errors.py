"""
Space Together Error Kinds

Every error code the service emits belongs to exactly one kind. The kind
decides the HTTP status; the code and message travel to the client.
"""

from enum import Enum
from typing import Any, Optional

from space_together.libs.result import Error


class ErrorKind(str, Enum):
    """Error classification used for transport mapping"""

    validation = "validation"
    not_found = "not_found"
    conflict = "conflict"
    precondition = "precondition"
    auth_missing = "auth_missing"
    auth_rejected = "auth_rejected"
    tenant_unavailable = "tenant_unavailable"
    store_failure = "store_failure"
    store_timeout = "store_timeout"


ERROR_KINDS = {
    # Validation
    "VALIDATION_ERROR": ErrorKind.validation,
    "INVALID_ID": ErrorKind.validation,
    "INVALID_EMAIL": ErrorKind.validation,
    "INVALID_STATUS": ErrorKind.validation,
    "INVALID_ROLE": ErrorKind.validation,
    "CLASS_REQUIRED": ErrorKind.validation,
    "BAD_TENANT_ID": ErrorKind.validation,
    "EMPTY_BATCH": ErrorKind.validation,
    "INVALID_LOOKUP_FIELD": ErrorKind.validation,
    # Not found
    "NOT_FOUND": ErrorKind.not_found,
    "SCHOOL_NOT_FOUND": ErrorKind.not_found,
    "USER_NOT_FOUND": ErrorKind.not_found,
    "CLASS_NOT_FOUND": ErrorKind.not_found,
    # Conflict
    "DUPLICATE_PENDING": ErrorKind.conflict,
    "DUPLICATE_KEY": ErrorKind.conflict,
    "DUPLICATE_KEYS": ErrorKind.conflict,
    "ALREADY_MEMBER": ErrorKind.conflict,
    "DIRECTOR_EXISTS": ErrorKind.conflict,
    "HEAD_OF_STUDIES_LIMIT": ErrorKind.conflict,
    # Precondition
    "NOT_PENDING": ErrorKind.precondition,
    "EXPIRED": ErrorKind.precondition,
    "ALREADY_EXPIRED": ErrorKind.precondition,
    "INVITED_USER_REQUIRED": ErrorKind.precondition,
    "SCHOOL_DATABASE_MISSING": ErrorKind.precondition,
    "NO_UPDATES": ErrorKind.precondition,
    "CROSS_TENANT_FORBIDDEN": ErrorKind.precondition,
    # Auth
    "AUTH_REQUIRED": ErrorKind.auth_missing,
    "INVALID_TOKEN": ErrorKind.auth_missing,
    "TENANT_REQUIRED": ErrorKind.auth_missing,
    "INVALID_SCHOOL_TOKEN": ErrorKind.auth_missing,
    "FORBIDDEN": ErrorKind.auth_rejected,
    # Infrastructure
    "TENANT_UNAVAILABLE": ErrorKind.tenant_unavailable,
    "STORE_FAILURE": ErrorKind.store_failure,
    "STORE_TIMEOUT": ErrorKind.store_timeout,
}


def kind_of(code: str) -> ErrorKind:
    """Unknown codes are treated as store failures so they never leak as 4xx"""
    return ERROR_KINDS.get(code, ErrorKind.store_failure)


class AppError(Exception):
    """
    Raised by infrastructure code (ids, registry, repositories) when an
    operation cannot continue. Use cases let it propagate; the API layer
    renders it exactly like a returned Error.
    """

    def __init__(
        self,
        code: str,
        message: str,
        reason: Optional[str] = None,
        details: Optional[Any] = None,
    ):
        self.error = Error(code, message, reason=reason, details=details)
        super().__init__(message)

    @property
    def code(self) -> str:
        return self.error.code

    @property
    def kind(self) -> ErrorKind:
        return kind_of(self.error.code)
