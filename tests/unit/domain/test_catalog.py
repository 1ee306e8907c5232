import pytest

from config import ApplicationConfig
from space_together.domain.catalog import (
    ENTITY_DESCRIPTORS,
    JOIN_SCHOOL_REQUESTS,
    LEARNING_OUTCOMES,
    MAIN_SUBJECTS,
    join_request_indexes,
)
from space_together.domain.descriptors import Scope


def index_names(specs):
    return [spec.index_name for spec in specs]


def test_ttl_index_is_off_by_default():
    """The expire-old sweep owns expiry unless a deployment opts into the TTL index"""
    assert ApplicationConfig.JOIN_REQUEST_TTL_INDEX is False
    assert "expires_at_ttl" not in index_names(join_request_indexes())
    assert "expires_at_ttl" not in index_names(JOIN_SCHOOL_REQUESTS.indexes)


def test_ttl_index_when_enabled():
    ttl = [spec for spec in join_request_indexes(True) if spec.index_name == "expires_at_ttl"]

    assert len(ttl) == 1
    assert ttl[0].options() == {"name": "expires_at_ttl", "expireAfterSeconds": 0}


def test_collection_names_and_paths_are_unique():
    collections = [descriptor.collection for descriptor in ENTITY_DESCRIPTORS]
    paths = [descriptor.path for descriptor in ENTITY_DESCRIPTORS]

    assert len(set(collections)) == len(collections)
    assert len(set(paths)) == len(paths)


@pytest.mark.parametrize(
    "collection",
    [
        "main_subjects",
        "learning_outcomes",
        "topics",
        "subject_grading_schemes",
        "subject_progress_configs",
        "subject_learning_materials",
    ],
)
def test_subject_curriculum_collections_are_global(collection):
    descriptor = next(d for d in ENTITY_DESCRIPTORS if d.collection == collection)

    assert descriptor.scope == Scope.GLOBAL
    if collection != "main_subjects":
        assert "subject_id" in descriptor.object_id_fields
        assert "subject_id" in descriptor.model.model_fields
        assert any(
            relation.collection == "main_subjects" and relation.local_field == "subject_id"
            for relation in descriptor.relations
        )


def test_main_subject_joins_its_outcomes_by_subject_id():
    relations = {relation.name: relation for relation in MAIN_SUBJECTS.relations}

    outcomes = relations["learning_outcomes"]
    assert outcomes.collection == LEARNING_OUTCOMES.collection
    assert (outcomes.local_field, outcomes.foreign_field, outcomes.many) == (
        "_id",
        "subject_id",
        True,
    )
    assert relations["grading_scheme"].foreign_field == "subject_id"
    assert relations["progress_config"].many is False
