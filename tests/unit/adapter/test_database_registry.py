from unittest.mock import MagicMock

import pytest

from space_together.adapter.database.registry import DatabaseRegistry
from space_together.domain.errors import AppError


@pytest.fixture
def client():
    client = MagicMock()
    client.__getitem__.side_effect = lambda name: MagicMock(name=name)
    return client


@pytest.fixture
def registry(client):
    return DatabaseRegistry(client, "space_together_test")


def test_same_name_returns_same_handle(registry, client):
    first = registry.get_db("school_abc")
    second = registry.get_db("school_abc")

    assert first is second
    client.__getitem__.assert_called_once_with("school_abc")
    assert registry.known_databases() == ["school_abc"]


def test_main_db(registry, client):
    main = registry.main_db()

    assert main is registry.get_db("space_together_test")
    assert registry.main_db_name == "space_together_test"
    client.__getitem__.assert_called_once_with("space_together_test")


def test_databases_are_distinct(registry):
    assert registry.get_db("school_a") is not registry.get_db("school_b")
    assert registry.known_databases() == ["school_a", "school_b"]


@pytest.mark.parametrize(
    "name",
    ["", "school.abc", "school/abc", "school abc", "school$", "s" * 64, None],
)
def test_invalid_names_are_unavailable(registry, client, name):
    with pytest.raises(AppError) as exc_info:
        registry.get_db(name)

    assert exc_info.value.code == "TENANT_UNAVAILABLE"
    assert registry.known_databases() == []
    client.__getitem__.assert_not_called()


def test_closed_registry_refuses_new_handles(registry, client):
    registry.close()

    with pytest.raises(AppError) as exc_info:
        registry.get_db("school_abc")
    client.close.assert_called_once()
    assert exc_info.value.code == "TENANT_UNAVAILABLE"
