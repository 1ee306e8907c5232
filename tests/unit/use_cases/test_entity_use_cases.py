from unittest.mock import AsyncMock, MagicMock

import pytest

from space_together.app.repositories.entity_repository import BulkCreateResult, Page
from space_together.app.use_cases.entities import (
    BulkCreateEntitiesUseCase,
    BulkDeleteEntitiesUseCase,
    BulkTagsUseCase,
    BulkUpdateEntitiesUseCase,
    CreateEntityUseCase,
    GetEntityUseCase,
    ListEntitiesUseCase,
    UpdateEntityUseCase,
)
from space_together.domain.catalog import CLASSES, SCHOOLS
from space_together.domain.entities import SchoolClass, SchoolClassPatch
from space_together.domain.errors import AppError
from space_together.domain.ids import IdType


@pytest.fixture
def repository(mock_uow):
    repository = MagicMock()
    repository.list = AsyncMock(return_value=Page())
    repository.list_with_relations = AsyncMock(return_value=Page())
    repository.find_by_id = AsyncMock(return_value=None)
    repository.insert = AsyncMock(side_effect=lambda entity: entity)
    repository.update = AsyncMock()
    repository.update_many = AsyncMock()
    repository.delete_many = AsyncMock()
    repository.create_many = AsyncMock()
    repository.create_many_with_validation = AsyncMock()
    repository.add_tags = AsyncMock(return_value=[])
    repository.remove_tags = AsyncMock(return_value=[])
    mock_uow.repository = MagicMock(return_value=repository)
    return repository


@pytest.mark.asyncio
async def test_list_tenant_entities_reads_tenant_database(mock_uow, repository):
    # Arrange
    item = SchoolClass(id=IdType.new().as_hex(), name="S1 A", username="s1a")
    repository.list.return_value = Page(items=[item], total=1, total_pages=1, current_page=1)

    # Act
    result = await ListEntitiesUseCase(mock_uow, CLASSES, "school_abc").execute("s1", 10, 0)

    # Assert
    assert result.is_ok()
    assert result.value.items == [item]
    mock_uow.repository.assert_called_once_with(CLASSES, "school_abc")
    repository.list.assert_called_once_with("s1", 10, 0, None)


@pytest.mark.asyncio
async def test_list_with_relations(mock_uow, repository):
    await ListEntitiesUseCase(mock_uow, CLASSES, "school_abc").execute(with_relations=True)

    repository.list_with_relations.assert_called_once()
    repository.list.assert_not_called()


@pytest.mark.asyncio
async def test_get_missing_entity(mock_uow, repository):
    result = await GetEntityUseCase(mock_uow, CLASSES, "school_abc").execute(
        IdType.new().as_hex()
    )

    assert result.is_err()
    assert result.error.code == "NOT_FOUND"


@pytest.mark.asyncio
async def test_create_applies_overrides(mock_uow, repository):
    """The school of the token wins over the body"""
    # Arrange
    token_school = IdType.new().as_hex()
    body = {"name": "S1 A", "username": "s1a", "school_id": IdType.new().as_hex(), "id": "x"}

    # Act
    result = await CreateEntityUseCase(mock_uow, CLASSES, "school_abc").execute(
        body, overrides={"school_id": token_school, "not_a_field": 1}
    )

    # Assert
    assert result.is_ok()
    created = result.value
    assert created.school_id == token_school
    assert created.id is None


@pytest.mark.asyncio
async def test_create_school_assigns_database_name(mock_uow, repository):
    result = await CreateEntityUseCase(
        mock_uow, SCHOOLS, school_db_prefix="tenant_"
    ).execute({"name": "Greenhill Academy", "username": "greenhill"})

    assert result.is_ok()
    school = result.value
    assert IdType.from_hex(school.id).as_hex() == school.id
    assert school.database_name == f"tenant_{school.id}"


@pytest.mark.asyncio
async def test_create_invalid_body(mock_uow, repository):
    result = await CreateEntityUseCase(mock_uow, CLASSES, "school_abc").execute({"name": "S1"})

    assert result.is_err()
    assert result.error.code == "VALIDATION_ERROR"
    assert result.error.details[0]["loc"] == ["username"]
    repository.insert.assert_not_called()


@pytest.mark.asyncio
async def test_create_duplicate_key(mock_uow, repository):
    repository.insert.side_effect = AppError("DUPLICATE_KEY", "Duplicate value for username")

    result = await CreateEntityUseCase(mock_uow, CLASSES, "school_abc").execute(
        {"name": "S1 A", "username": "s1a"}
    )

    assert result.is_err()
    assert result.error.code == "DUPLICATE_KEY"


@pytest.mark.asyncio
async def test_update_validates_patch(mock_uow, repository):
    entity_id = IdType.new().as_hex()

    result = await UpdateEntityUseCase(mock_uow, CLASSES, "school_abc").execute(
        entity_id, {"name": "S1 B", "unknown": True}
    )

    assert result.is_ok()
    patch = repository.update.call_args.args[1]
    assert isinstance(patch, SchoolClassPatch)
    assert patch.model_dump(exclude_none=True) == {"name": "S1 B"}


@pytest.mark.asyncio
async def test_bulk_create_validated(mock_uow, repository):
    # Arrange
    items = [{"name": "A", "username": "a"}, {"name": "B", "username": "b"}]
    repository.create_many_with_validation.return_value = ["a", "b"]

    # Act
    result = await BulkCreateEntitiesUseCase(mock_uow, CLASSES, "school_abc").execute(items)

    # Assert
    assert result.is_ok()
    assert result.value.inserted_count == 2
    entities = repository.create_many_with_validation.call_args.args[0]
    assert [entity.username for entity in entities] == ["a", "b"]
    repository.create_many.assert_not_called()


@pytest.mark.asyncio
async def test_bulk_create_unvalidated_reports_stop(mock_uow, repository):
    repository.create_many.return_value = BulkCreateResult(
        inserted=["a"], failed_index=1, reason="duplicate key"
    )

    result = await BulkCreateEntitiesUseCase(mock_uow, CLASSES, "school_abc").execute(
        [{"name": "A", "username": "a"}, {"name": "A", "username": "a"}], validate=False
    )

    assert result.is_ok()
    assert result.value.inserted_count == 1
    assert result.value.failed_index == 1
    assert result.value.reason == "duplicate key"


@pytest.mark.asyncio
async def test_bulk_create_invalid_item_writes_nothing(mock_uow, repository):
    result = await BulkCreateEntitiesUseCase(mock_uow, CLASSES, "school_abc").execute(
        [{"name": "A", "username": "a"}, {"name": "B"}]
    )

    assert result.is_err()
    assert result.error.code == "VALIDATION_ERROR"
    assert "index 1" in result.error.message
    repository.create_many_with_validation.assert_not_called()


@pytest.mark.asyncio
async def test_bulk_create_duplicate_keys(mock_uow, repository):
    repository.create_many_with_validation.side_effect = AppError(
        "DUPLICATE_KEYS", "Duplicate keys in batch", details={"username": ["a"]}
    )

    result = await BulkCreateEntitiesUseCase(mock_uow, CLASSES, "school_abc").execute(
        [{"name": "A", "username": "a"}, {"name": "A2", "username": "a"}]
    )

    assert result.is_err()
    assert result.error.code == "DUPLICATE_KEYS"
    assert result.error.details == {"username": ["a"]}


@pytest.mark.asyncio
async def test_bulk_update_requires_ids(mock_uow, repository):
    result = await BulkUpdateEntitiesUseCase(mock_uow, CLASSES, "school_abc").execute(
        [{"name": "no id"}]
    )

    assert result.is_err()
    assert result.error.code == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_bulk_update_passes_patches(mock_uow, repository):
    entity_id = IdType.new().as_hex()
    repository.update_many.return_value = ["updated"]

    result = await BulkUpdateEntitiesUseCase(mock_uow, CLASSES, "school_abc").execute(
        [{"id": entity_id, "name": "Renamed"}]
    )

    assert result.is_ok()
    assert result.value.count == 1
    ((updated_id, patch),) = repository.update_many.call_args.args[0]
    assert updated_id == entity_id
    assert patch.name == "Renamed"


@pytest.mark.asyncio
async def test_bulk_delete_empty_batch(mock_uow, repository):
    result = await BulkDeleteEntitiesUseCase(mock_uow, CLASSES, "school_abc").execute([])

    assert result.is_err()
    assert result.error.code == "EMPTY_BATCH"
    repository.delete_many.assert_not_called()


@pytest.mark.asyncio
async def test_bulk_remove_tags(mock_uow, repository):
    ids = [IdType.new().as_hex()]

    result = await BulkTagsUseCase(mock_uow, CLASSES, "school_abc").execute(
        ids, ["old"], add=False
    )

    assert result.is_ok()
    repository.remove_tags.assert_called_once_with(ids, ["old"])
    repository.add_tags.assert_not_called()
