from unittest.mock import MagicMock

import pytest

from space_together.app.use_cases.tenants import ResolveTenantUseCase
from space_together.domain.entities import TenantCredential
from space_together.domain.errors import AppError
from space_together.domain.ids import IdType


@pytest.fixture
def registry():
    registry = MagicMock()
    registry.get_db = MagicMock(side_effect=lambda name: f"<db {name}>")
    return registry


@pytest.fixture
def credential():
    school_id = IdType.new().as_hex()
    return TenantCredential(tenant_id=school_id, database_name=f"school_{school_id}")


@pytest.mark.asyncio
async def test_resolve_uses_credential_database(registry, credential):
    # Act
    result = await ResolveTenantUseCase(registry).execute(credential)

    # Assert
    assert result.is_ok()
    tenant = result.value
    assert tenant.tenant_id == credential.tenant_id
    assert tenant.database_name == credential.database_name
    assert tenant.database == f"<db {credential.database_name}>"
    registry.get_db.assert_called_once_with(credential.database_name)


@pytest.mark.asyncio
async def test_resolve_matching_path_school(registry, credential):
    result = await ResolveTenantUseCase(registry).execute(credential, credential.tenant_id)

    assert result.is_ok()


@pytest.mark.asyncio
async def test_resolve_without_credential(registry):
    result = await ResolveTenantUseCase(registry).execute(None)

    assert result.is_err()
    assert result.error.code == "TENANT_REQUIRED"
    assert result.error.message == "School token required"
    registry.get_db.assert_not_called()


@pytest.mark.asyncio
async def test_resolve_bad_tenant_id(registry):
    credential = TenantCredential(tenant_id="not-hex", database_name="school_x")

    result = await ResolveTenantUseCase(registry).execute(credential)

    assert result.is_err()
    assert result.error.code == "BAD_TENANT_ID"


@pytest.mark.asyncio
async def test_resolve_credential_without_database(registry):
    credential = TenantCredential(tenant_id=IdType.new().as_hex())

    result = await ResolveTenantUseCase(registry).execute(credential)

    assert result.is_err()
    assert result.error.code == "TENANT_REQUIRED"


@pytest.mark.asyncio
async def test_resolve_cross_tenant_path(registry, credential):
    """A token for school A never opens school B's database"""
    other_school = IdType.new().as_hex()

    result = await ResolveTenantUseCase(registry).execute(credential, other_school)

    assert result.is_err()
    assert result.error.code == "CROSS_TENANT_FORBIDDEN"
    registry.get_db.assert_not_called()


@pytest.mark.asyncio
async def test_resolve_unavailable_database(registry, credential):
    registry.get_db.side_effect = AppError("TENANT_UNAVAILABLE", "Tenant database is unavailable")

    result = await ResolveTenantUseCase(registry).execute(credential)

    assert result.is_err()
    assert result.error.code == "TENANT_UNAVAILABLE"
