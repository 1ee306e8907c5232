import asyncio

import pytest
import pytest_asyncio
from httpx import AsyncClient

from space_together.domain.entities import ChangeVerb


@pytest_asyncio.fixture
async def other_school(client, admin_headers):
    response = await client.post(
        "/schools",
        json={"name": "Riverside College", "username": "riverside"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    return response.json()


async def create_class(client, headers, username, **fields):
    return await client.post(
        "/school/classes",
        json={"name": username.upper(), "username": username, **fields},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_school_database_is_assigned(school):
    assert school["database_name"] == f"school_{school['id']}"


@pytest.mark.asyncio
async def test_schools_are_isolated(
    client: AsyncClient, school, other_school, school_headers
):
    """
    Given a class created with school A's token
    Then school B's token never sees it
    And naming school A in the path with B's token is forbidden
    """
    headers_a = school_headers(school)
    headers_b = school_headers(other_school)
    created = await create_class(client, headers_a, "s1a")
    assert created.status_code == 201
    assert created.json()["school_id"] == school["id"]

    seen_by_a = await client.get("/school/classes", headers=headers_a)
    seen_by_b = await client.get("/school/classes", headers=headers_b)
    assert seen_by_a.json()["total"] == 1
    assert seen_by_b.json()["total"] == 0

    forbidden = await client.get(f"/school/{school['id']}/classes", headers=headers_b)
    assert forbidden.status_code == 403
    assert forbidden.json()["code"] == "CROSS_TENANT_FORBIDDEN"

    own_path = await client.get(f"/school/{school['id']}/classes", headers=headers_a)
    assert own_path.json()["total"] == 1

    missing = await client.get(f"/school/classes/{created.json()['id']}", headers=headers_b)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_school_routes_need_school_token(client: AsyncClient):
    response = await client.get("/school/classes")

    assert response.status_code == 401
    assert response.json()["message"] == "School token required"


@pytest.mark.asyncio
async def test_unique_username_per_school(
    client: AsyncClient, school, other_school, school_headers
):
    assert (await create_class(client, school_headers(school), "s2b")).status_code == 201

    duplicate = await create_class(client, school_headers(school), "s2b")
    elsewhere = await create_class(client, school_headers(other_school), "s2b")

    assert duplicate.status_code == 400
    assert duplicate.json()["code"] == "DUPLICATE_KEY"
    assert elsewhere.status_code == 201


@pytest.mark.asyncio
async def test_filter_and_paging(client: AsyncClient, school, school_headers):
    headers = school_headers(school)
    for username in ("alpha", "alpine", "beta"):
        await create_class(client, headers, username)

    response = await client.get("/school/classes?filter=ALP&limit=1", headers=headers)

    page = response.json()
    assert page["total"] == 2
    assert page["total_pages"] == 2
    assert len(page["items"]) == 1

    count = await client.get("/school/classes/count?filter=alp", headers=headers)
    assert count.json() == {"count": 2}


@pytest.mark.asyncio
async def test_update_publishes_one_event(
    app, client: AsyncClient, school, school_headers
):
    # Arrange
    headers = school_headers(school)
    created = (await create_class(client, headers, "s3c")).json()
    bus = app.state.event_bus
    while bus.pending_publications:
        await asyncio.sleep(0)
    subscription = bus.subscribe(school["database_name"])

    # Act
    response = await client.put(
        f"/school/classes/{created['id']}", json={"name": "Senior 3 C"}, headers=headers
    )
    while bus.pending_publications:
        await asyncio.sleep(0)

    # Assert
    assert response.status_code == 200
    assert response.json()["name"] == "Senior 3 C"
    assert subscription.pending() == 1
    event = await subscription.get()
    assert event.verb == ChangeVerb.updated
    assert event.entity_id == created["id"]
    assert event.payload["name"] == "Senior 3 C"


@pytest.mark.asyncio
async def test_class_with_relations(client: AsyncClient, school, school_headers):
    headers = school_headers(school)
    teacher = await client.post(
        "/school/teachers", json={"name": "Ada", "email": "ada@example.com"}, headers=headers
    )
    assert teacher.status_code == 201
    created = (
        await create_class(client, headers, "s4d", class_teacher_id=teacher.json()["id"])
    ).json()

    response = await client.get(f"/school/classes/{created['id']}/with-relations", headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert data["class_teacher"]["email"] == "ada@example.com"
    assert data["students"] == []


@pytest.mark.asyncio
async def test_bulk_create_validation(client: AsyncClient, school, school_headers):
    headers = school_headers(school)
    await create_class(client, headers, "taken")

    # Validated batches write nothing when any key collides
    validated = await client.post(
        "/school/classes/bulk",
        json={"items": [{"name": "A", "username": "fresh"}, {"name": "B", "username": "taken"}]},
        headers=headers,
    )
    assert validated.status_code == 400
    assert validated.json()["code"] == "DUPLICATE_KEYS"
    assert validated.json()["details"] == {"username": ["taken"]}
    assert (await client.get("/school/classes/count", headers=headers)).json()["count"] == 1

    # Unvalidated batches keep the prefix before the failure
    unvalidated = await client.post(
        "/school/classes/bulk?validate=false",
        json={"items": [{"name": "A", "username": "fresh"}, {"name": "B", "username": "taken"}]},
        headers=headers,
    )
    assert unvalidated.status_code == 201
    data = unvalidated.json()
    assert data["inserted_count"] == 1
    assert data["failed_index"] == 1


@pytest.mark.asyncio
async def test_bulk_tags_and_active(client: AsyncClient, school, school_headers):
    headers = school_headers(school)
    ids = [(await create_class(client, headers, name)).json()["id"] for name in ("t1", "t2")]

    added = await client.put(
        "/school/classes/bulk/tags/add",
        json={"ids": ids, "tags": ["science", "day"]},
        headers=headers,
    )
    removed = await client.put(
        "/school/classes/bulk/tags/remove", json={"ids": ids, "tags": ["day"]}, headers=headers
    )
    inactive = await client.put(
        "/school/classes/bulk/active", json={"ids": ids, "is_active": False}, headers=headers
    )

    assert added.json()["count"] == 2
    assert all(item["tags"] == ["science"] for item in removed.json()["items"])
    assert all(item["is_active"] is False for item in inactive.json()["items"])

    deleted = await client.post("/school/classes/bulk/delete", json={"ids": ids}, headers=headers)
    assert deleted.json() == {"deleted_count": 2}
