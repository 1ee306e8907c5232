import logging
from typing import Optional

from fastapi import Depends, Header, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError

from config import ApplicationConfig
from space_together.adapter.services.unit_of_work import MongoUnitOfWork
from space_together.api.error import ClientError, raise_for_error
from space_together.api.utils.jwt import verify_jwt, verify_school_token
from space_together.app.use_cases.tenants import ResolveTenantUseCase, TenantContext
from space_together.domain.entities import AuthUser, TenantCredential
from space_together.libs.result import Error

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_registry(request: Request):
    return request.app.state.registry


def get_index_manager(request: Request):
    return request.app.state.index_manager


def get_event_bus(request: Request):
    return request.app.state.event_bus


async def get_unit_of_work(request: Request):
    yield MongoUnitOfWork(
        get_registry(request),
        get_index_manager(request),
        ttl_index=ApplicationConfig.JOIN_REQUEST_TTL_INDEX,
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthUser:
    """
    Dependency to extract and verify the bearer token from the Authorization header.

    Args:
        credentials: Bearer token from Authorization header

    Returns:
        AuthUser built from the token payload

    Raises:
        ClientError: 401 if the token is missing, invalid or expired
    """
    if credentials is None:
        raise ClientError(
            Error("AUTH_REQUIRED", "Authentication required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    payload = verify_jwt(credentials.credentials)
    if payload is None:
        raise ClientError(
            Error("INVALID_TOKEN", "Invalid or expired token"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    try:
        return AuthUser(
            id=payload.get("id") or payload.get("user_id"),
            email=payload.get("email"),
            role=payload.get("role"),
            name=payload.get("name"),
        )
    except ValidationError:
        raise ClientError(
            Error("INVALID_TOKEN", "Invalid token payload"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


async def get_school_credential(
    school_token: Optional[str] = Header(None, alias="School-Token"),
) -> Optional[TenantCredential]:
    """
    Dependency to verify the School-Token header.

    Returns:
        TenantCredential, or None when the header is absent

    Raises:
        ClientError: 401 INVALID_SCHOOL_TOKEN if the token is invalid or expired
    """
    if not school_token:
        return None

    payload = verify_school_token(school_token)
    if payload is None or not payload.get("id"):
        raise ClientError(
            Error("INVALID_SCHOOL_TOKEN", "Invalid or expired school token"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return TenantCredential(
        tenant_id=str(payload["id"]),
        database_name=payload.get("database_name"),
        subject=payload.get("creator_id"),
        roles=payload.get("roles") or [],
        name=payload.get("name"),
        username=payload.get("username"),
    )


async def get_tenant(
    request: Request,
    credential: Optional[TenantCredential] = Depends(get_school_credential),
    registry=Depends(get_registry),
) -> TenantContext:
    """
    Dependency resolving the school database of a per-school route.

    Routes mounted under /school/{school_id}/... must name the token's school.

    Raises:
        ClientError: 401 TENANT_REQUIRED, 400 BAD_TENANT_ID,
                     403 CROSS_TENANT_FORBIDDEN
        ServerError: 503 TENANT_UNAVAILABLE
    """
    use_case = ResolveTenantUseCase(registry)
    result = await use_case.execute(credential, request.path_params.get("school_id"))

    if result.is_err():
        raise_for_error(result.error)

    return result.value
