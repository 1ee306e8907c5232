from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import BulkWriteError, DuplicateKeyError

from space_together.adapter.repositories.entity_repository import MongoEntityRepository, to_wire
from space_together.adapter.repositories.join_school_request_repository import (
    MongoJoinSchoolRequestRepository,
)
from space_together.adapter.repositories.user_repository import MongoUserRepository
from space_together.domain.catalog import CLASSES, SCHOOLS
from space_together.domain.entities import (
    JoinRole,
    JoinSchoolRequest,
    JoinStatus,
    SchoolClass,
    User,
    UserPatch,
)
from space_together.domain.errors import AppError

NOW = datetime(2025, 3, 1, 12, 0, 0)


def cursor(documents):
    result = MagicMock()
    result.to_list = AsyncMock(return_value=documents)
    return result


@pytest.fixture
def collection():
    collection = MagicMock()
    collection.name = "classes"
    collection.insert_one = AsyncMock()
    collection.insert_many = AsyncMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.update_many = AsyncMock()
    collection.delete_one = AsyncMock()
    collection.count_documents = AsyncMock(return_value=0)
    collection.find = MagicMock(return_value=cursor([]))
    collection.aggregate = MagicMock(return_value=cursor([]))
    return collection


@pytest.fixture
def database(collection):
    database = MagicMock()
    database.name = "school_abc"
    database.__getitem__.return_value = collection
    return database


@pytest.fixture
def index_manager():
    manager = MagicMock()
    manager.ensure = AsyncMock()
    return manager


@pytest.fixture
def classes(database, index_manager):
    return MongoEntityRepository(database, CLASSES, index_manager)


def test_to_wire_renames_id_and_hides_passwords():
    oid, school = ObjectId(), ObjectId()

    wire = to_wire({"_id": oid, "school_id": school, "password_hash": "x", "ids": [oid]})

    assert wire == {"id": str(oid), "school_id": str(school), "ids": [str(oid)]}


def test_convert_field_only_touches_id_fields(classes):
    teacher = ObjectId()

    assert classes.convert_field("class_teacher_id", str(teacher)) == teacher
    assert classes.convert_field("student_ids", {"$in": [str(teacher)]}) == {"$in": [teacher]}
    assert classes.convert_field("name", str(teacher)) == str(teacher)


def test_convert_field_rejects_malformed_ids(classes):
    with pytest.raises(AppError) as exc_info:
        classes.convert_field("school_id", "not-an-id")

    assert exc_info.value.code == "INVALID_ID"


def test_build_match_searches_declared_fields(classes):
    match = classes.build_match("s1.a")

    assert set(match) == {"$or"}
    fields = [next(iter(clause)) for clause in match["$or"]]
    assert fields == list(CLASSES.search_fields)
    assert match["$or"][0]["name"] == {"$regex": r"s1\.a", "$options": "i"}


def test_build_match_combines_filter_and_extra(classes):
    school = ObjectId()

    match = classes.build_match("s1", {"school_id": str(school)})

    assert match["$and"][1] == {"school_id": school}


def test_build_match_blank_filter_matches_everything(classes):
    assert classes.build_match("   ") == {}


def test_relation_stages_unwind_single_relations(classes):
    stages = classes.relation_stages()

    assert stages[0] == {
        "$lookup": {
            "from": "teachers",
            "localField": "class_teacher_id",
            "foreignField": "_id",
            "as": "class_teacher",
        }
    }
    assert stages[1]["$unwind"]["path"] == "$class_teacher"
    # many relations stay arrays
    assert [stage for stage in stages if "$unwind" in stage] == [stages[1]]


@pytest.mark.asyncio
async def test_insert_stores_object_ids_and_timestamps(classes, collection, index_manager):
    # Arrange
    school = ObjectId()
    entity = SchoolClass(name="S1 A", username="s1a", school_id=str(school))

    # Act
    created = await classes.insert(entity)

    # Assert
    document = collection.insert_one.await_args.args[0]
    assert isinstance(document["_id"], ObjectId)
    assert document["school_id"] == school
    assert document["created_at"] == document["updated_at"]
    assert created.id == str(document["_id"])
    index_manager.ensure.assert_awaited()


@pytest.mark.asyncio
async def test_insert_duplicate_key(classes, collection):
    collection.insert_one.side_effect = DuplicateKeyError(
        "E11000 duplicate key error collection: school_abc.classes index: unique_username",
        11000,
        {
            "errmsg": "E11000 duplicate key error collection: school_abc.classes "
            "index: unique_username dup key",
            "keyValue": {"username": "s1a"},
        },
    )

    with pytest.raises(AppError) as exc_info:
        await classes.insert(SchoolClass(name="S1 A", username="s1a"))

    assert exc_info.value.code == "DUPLICATE_KEY"
    assert exc_info.value.error.details == {
        "index": "unique_username",
        "key": {"username": "s1a"},
    }


@pytest.mark.asyncio
async def test_find_by_rejects_undeclared_fields(classes):
    with pytest.raises(AppError) as exc_info:
        await classes.find_by("description", "x")

    assert exc_info.value.code == "INVALID_LOOKUP_FIELD"


@pytest.mark.asyncio
async def test_update_without_changes_returns_current(classes, collection):
    oid = ObjectId()
    collection.find_one.return_value = {"_id": oid, "name": "S1 A", "username": "s1a"}

    updated = await classes.update(str(oid), {"name": None})

    assert updated.id == str(oid)
    collection.find_one_and_update.assert_not_called()


@pytest.mark.asyncio
async def test_update_missing_document(classes):
    with pytest.raises(AppError) as exc_info:
        await classes.update(str(ObjectId()), {"name": "S1 B"})

    assert exc_info.value.code == "NOT_FOUND"


@pytest.mark.asyncio
async def test_list_pages(classes, collection):
    documents = [{"_id": ObjectId(), "name": f"C{i}", "username": f"c{i}"} for i in range(2)]
    collection.aggregate.return_value = cursor(documents)
    collection.count_documents.return_value = 5

    page = await classes.list(limit=2, skip=2)

    assert [item.name for item in page.items] == ["C0", "C1"]
    assert page.total == 5
    assert page.total_pages == 3
    assert page.current_page == 2
    pipeline = collection.aggregate.call_args.args[0]
    assert pipeline[1:] == [
        {"$sort": {"updated_at": -1, "_id": -1}},
        {"$skip": 2},
        {"$limit": 2},
    ]


@pytest.mark.asyncio
async def test_create_many_reports_stop_index(classes, collection):
    # Arrange
    collection.insert_many.side_effect = BulkWriteError(
        {"writeErrors": [{"index": 1, "errmsg": "E11000 duplicate key"}], "nInserted": 1}
    )
    entities = [SchoolClass(name=f"C{i}", username=f"c{i}") for i in range(3)]

    # Act
    result = await classes.create_many(entities)

    # Assert
    assert result.failed_index == 1
    assert result.reason == "E11000 duplicate key"
    inserted_filter = collection.find.call_args.args[0]
    assert len(inserted_filter["_id"]["$in"]) == 1


@pytest.mark.asyncio
async def test_create_many_with_validation_finds_batch_duplicates(classes, collection):
    entities = [
        SchoolClass(name="A", username="a"),
        SchoolClass(name="B", username="a", code="B1"),
    ]

    with pytest.raises(AppError) as exc_info:
        await classes.create_many_with_validation(entities)

    assert exc_info.value.code == "DUPLICATE_KEYS"
    assert exc_info.value.error.details == {"username": ["a"]}
    collection.insert_many.assert_not_called()


@pytest.mark.asyncio
async def test_create_many_with_validation_finds_stored_duplicates(classes, collection):
    # username lookup finds nothing, code lookup finds B1
    collection.find.side_effect = [cursor([]), cursor([{"_id": ObjectId(), "code": "B1"}])]
    entities = [SchoolClass(name="B", username="b", code="B1")]

    with pytest.raises(AppError) as exc_info:
        await classes.create_many_with_validation(entities)

    assert exc_info.value.error.details == {"code": ["B1"]}


@pytest.mark.asyncio
async def test_update_many_skips_failures(database, index_manager, collection):
    schools = MongoEntityRepository(database, SCHOOLS, index_manager)

    with pytest.raises(AppError) as exc_info:
        await schools.update_many([(str(ObjectId()), {"name": "Renamed"})])

    assert exc_info.value.code == "NO_UPDATES"


@pytest.mark.asyncio
async def test_transition_only_matches_pending_unexpired(database, index_manager, collection):
    # Arrange
    repository = MongoJoinSchoolRequestRepository(database, index_manager)
    request_id, responder = ObjectId(), ObjectId()

    # Act
    result = await repository.transition(
        str(request_id), JoinStatus.Rejected, str(responder), NOW, message="No room"
    )

    # Assert
    assert result is None
    match, update = collection.find_one_and_update.call_args.args
    assert match == {
        "_id": request_id,
        "status": "Pending",
        "$or": [{"expires_at": None}, {"expires_at": {"$gt": NOW}}],
    }
    assert update["$set"]["status"] == "Rejected"
    assert update["$set"]["responded_by"] == responder
    assert update["$set"]["message"] == "No room"


@pytest.mark.asyncio
async def test_expire_old_uses_inclusive_cutoff(database, index_manager, collection):
    collection.update_many.return_value = MagicMock(modified_count=4)
    repository = MongoJoinSchoolRequestRepository(database, index_manager)

    assert await repository.expire_old(NOW) == 4

    match, update = collection.update_many.call_args.args
    assert match == {"status": "Pending", "expires_at": {"$lte": NOW}}
    assert update == {"$set": {"status": "Expired", "updated_at": NOW}}


@pytest.mark.asyncio
async def test_stats_fill_missing_statuses(database, index_manager, collection):
    collection.aggregate.return_value = cursor([{"_id": "Pending", "count": 3}])
    repository = MongoJoinSchoolRequestRepository(database, index_manager)

    stats = await repository.stats_by_status()

    expected = {status.value: 0 for status in JoinStatus}
    expected["Pending"] = 3
    assert stats == expected


@pytest.mark.asyncio
async def test_expire_old_second_sweep_changes_nothing(database, index_manager, collection):
    collection.update_many.side_effect = [MagicMock(modified_count=2), MagicMock(modified_count=0)]
    repository = MongoJoinSchoolRequestRepository(database, index_manager)

    assert await repository.expire_old(NOW) == 2
    assert await repository.expire_old(NOW) == 0

    first, second = collection.update_many.call_args_list
    assert first.args == second.args


@pytest.mark.asyncio
async def test_cleanup_expired_only_deletes_old_expired(database, index_manager, collection):
    collection.delete_many = AsyncMock(return_value=MagicMock(deleted_count=2))
    repository = MongoJoinSchoolRequestRepository(database, index_manager)
    cutoff = datetime(2025, 2, 1)

    assert await repository.cleanup_expired(cutoff) == 2

    collection.delete_many.assert_awaited_once_with(
        {"status": "Expired", "updated_at": {"$lte": cutoff}}
    )


@pytest.mark.asyncio
async def test_reopen_restores_claimed_request(database, index_manager, collection):
    # Arrange
    collection.update_one = AsyncMock(return_value=MagicMock(modified_count=1))
    repository = MongoJoinSchoolRequestRepository(database, index_manager)
    request = JoinSchoolRequest(
        id=str(ObjectId()),
        school_id=str(ObjectId()),
        role=JoinRole.Teacher,
        email="pupil@example.com",
        message="Welcome",
        sent_by=str(ObjectId()),
    )

    # Act
    reopened = await repository.reopen(request, NOW)

    # Assert
    assert reopened is True
    match, update = collection.update_one.call_args.args
    assert match == {"_id": ObjectId(request.id), "status": "Accepted", "responded_at": NOW}
    assert update["$set"]["status"] == "Pending"
    assert update["$set"]["message"] == "Welcome"
    assert update["$unset"] == {"responded_by": "", "responded_at": "", "invited_user_id": ""}


@pytest.mark.asyncio
async def test_get_by_email_matches_stored_lowercase(database, index_manager, collection):
    users = MongoUserRepository(database, index_manager)

    assert await users.get_by_email(" Pupil@Example.COM ") is None

    collection.find_one.assert_awaited_once_with({"email": "pupil@example.com"})


def test_user_email_is_stored_lowercase():
    user = User(name="Pupil One", email="Pupil.One@Example.COM")

    assert user.email == "pupil.one@example.com"
    assert UserPatch(email="New@Example.com").email == "new@example.com"
