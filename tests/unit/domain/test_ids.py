import pytest
from bson import ObjectId

from space_together.domain.ids import IdType, InvalidId, is_valid_hex


def test_hex_and_binary_forms_describe_the_same_id():
    oid = ObjectId()
    id_type = IdType.from_hex(str(oid))

    assert id_type.as_hex() == str(oid)
    assert id_type.as_binary() == oid.binary
    assert len(id_type.as_binary()) == 12
    assert IdType.from_binary(id_type.as_binary()) == id_type


def test_new_ids_are_distinct_lowercase_hex():
    first, second = IdType.new(), IdType.new()

    assert first != second
    assert first.as_hex() == first.as_hex().lower()
    assert len(first.as_hex()) == 24


@pytest.mark.parametrize(
    "value",
    ["", "abc", "z" * 24, "0" * 23, "0" * 25, None, 12345],
)
def test_from_hex_rejects_malformed_values(value):
    with pytest.raises(InvalidId) as exc_info:
        IdType.from_hex(value)

    assert exc_info.value.code == "INVALID_ID"


def test_from_binary_rejects_wrong_length():
    with pytest.raises(InvalidId):
        IdType.from_binary(b"\x00" * 11)


def test_parse_accepts_every_representation():
    oid = ObjectId()

    assert IdType.parse(str(oid)) == oid
    assert IdType.parse(oid) == oid
    assert IdType.parse(IdType(oid)) == oid


def test_is_valid_hex():
    assert is_valid_hex(IdType.new().as_hex())
    assert not is_valid_hex("school-1")
    assert not is_valid_hex(None)


def test_ids_hash_by_value():
    oid = ObjectId()

    assert {IdType(oid), IdType.from_hex(str(oid))} == {IdType(oid)}
    assert str(IdType(oid)) == str(oid)
