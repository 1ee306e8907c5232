from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from config import ApplicationConfig
from space_together.api.app import create_app
from space_together.api.utils.jwt import create_access_token, create_school_token
from space_together.app.repositories.entity_repository import Page
from space_together.depends import get_unit_of_work


@pytest.fixture
def registry():
    registry = MagicMock()
    registry.get_db = MagicMock(side_effect=lambda name: MagicMock(name=name))
    return registry


@pytest.fixture
def repository(mock_uow):
    """Generic repository handed out by uow.repository(descriptor, database_name)"""
    repository = MagicMock()
    repository.list = AsyncMock(return_value=Page())
    repository.count = AsyncMock(return_value=0)
    repository.find_by_id = AsyncMock(return_value=None)
    repository.insert = AsyncMock(side_effect=lambda entity: entity)
    repository.create_many_with_validation = AsyncMock(return_value=[])
    mock_uow.repository = MagicMock(return_value=repository)
    return repository


@pytest.fixture
def app(registry, mock_uow, repository):
    app = create_app(ApplicationConfig, registry=registry)

    async def override_get_unit_of_work():
        yield mock_uow

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    return app


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def bearer():
    """Authorization header for an AuthUser"""

    def headers(actor) -> dict:
        token = create_access_token(actor.id, actor.email, actor.role.value if actor.role else None)
        return {"Authorization": f"Bearer {token}"}

    return headers


@pytest.fixture
def school_headers():
    """School-Token header for a School"""

    def headers(school) -> dict:
        return {"School-Token": create_school_token(school)}

    return headers
