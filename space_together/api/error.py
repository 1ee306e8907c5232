from typing import NoReturn

from fastapi import status

from space_together.domain.errors import ErrorKind, kind_of
from space_together.libs.result import Error

STATUS_BY_KIND = {
    ErrorKind.validation: status.HTTP_400_BAD_REQUEST,
    ErrorKind.precondition: status.HTTP_400_BAD_REQUEST,
    ErrorKind.conflict: status.HTTP_400_BAD_REQUEST,
    ErrorKind.auth_missing: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.auth_rejected: status.HTTP_403_FORBIDDEN,
    ErrorKind.not_found: status.HTTP_404_NOT_FOUND,
    ErrorKind.tenant_unavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.store_timeout: status.HTTP_504_GATEWAY_TIMEOUT,
    ErrorKind.store_failure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Codes whose status differs from their kind's
STATUS_OVERRIDES = {
    "CROSS_TENANT_FORBIDDEN": status.HTTP_403_FORBIDDEN,
}


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(
        self, base_error: Error, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    ):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


def status_for(error: Error) -> int:
    if error.code in STATUS_OVERRIDES:
        return STATUS_OVERRIDES[error.code]
    return STATUS_BY_KIND[kind_of(error.code)]


def raise_for_error(error: Error) -> NoReturn:
    """Raise ClientError for 4xx codes and ServerError for everything else"""
    status_code = status_for(error)
    if status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
        raise ClientError(error, status_code=status_code)
    raise ServerError(error, status_code=status_code)
