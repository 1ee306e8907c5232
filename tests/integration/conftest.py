import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from motor.motor_asyncio import AsyncIOMotorClient

from config import ApplicationConfig
from space_together.adapter.database.registry import DatabaseRegistry
from space_together.api.app import create_app
from space_together.api.utils.jwt import create_access_token, create_school_token
from space_together.domain.entities import School
from space_together.domain.ids import IdType

# These tests run against a real MongoDB server, e.g. mongodb://localhost:27017
MONGO_TEST_URI = os.environ.get("MONGO_TEST_URI")


@pytest_asyncio.fixture
async def registry():
    if not MONGO_TEST_URI:
        pytest.skip("MONGO_TEST_URI is not set")

    client = AsyncIOMotorClient(MONGO_TEST_URI, serverSelectionTimeoutMS=2000)
    registry = DatabaseRegistry(client, f"st_test_{IdType.new().as_hex()}")
    yield registry

    # School databases opened during the test are dropped with the main one
    for name in [registry.main_db_name, *registry.known_databases()]:
        await client.drop_database(name)
    registry.close()


@pytest.fixture
def app(registry):
    return create_app(ApplicationConfig, registry=registry)


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth_headers(user_id: str, email: str, role: str = None) -> dict:
    token = create_access_token(user_id, email, role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    return auth_headers(IdType.new().as_hex(), "admin@space-together.test", "ADMIN")


@pytest_asyncio.fixture
async def school(client, admin_headers):
    """A registered school with its database name assigned"""
    response = await client.post(
        "/schools",
        json={"name": "Greenhill Academy", "username": f"greenhill-{IdType.new().as_hex()}"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def create_user(client, admin_headers):
    async def factory(email: str, name: str = "Test User", role: str = None) -> dict:
        payload = {"name": name, "email": email}
        if role:
            payload["role"] = role
        response = await client.post("/users", json=payload, headers=admin_headers)
        assert response.status_code == 201
        return response.json()

    return factory


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def school_headers():
    def headers(school: dict) -> dict:
        return {"School-Token": create_school_token(School.model_validate(school))}

    return headers
