"""
Identifier model.

Entities are keyed by Mongo ObjectIds. The wire always carries the 24-char
lowercase hex form and the store always receives the 12-byte binary form;
``IdType`` is the only place the two meet.
"""

from typing import Union

from bson import ObjectId
from bson.errors import InvalidId as BsonInvalidId

from .errors import AppError


class InvalidId(AppError):
    def __init__(self, value):
        super().__init__("INVALID_ID", f"Invalid id: {value!r}")


class IdType:
    __slots__ = ("_oid",)

    def __init__(self, oid: ObjectId):
        self._oid = oid

    @classmethod
    def new(cls) -> "IdType":
        return cls(ObjectId())

    @classmethod
    def from_hex(cls, value: str) -> "IdType":
        if not isinstance(value, str) or len(value) != 24 or not ObjectId.is_valid(value):
            raise InvalidId(value)
        return cls(ObjectId(value))

    @classmethod
    def from_binary(cls, value: Union[bytes, ObjectId]) -> "IdType":
        if isinstance(value, ObjectId):
            return cls(value)
        try:
            return cls(ObjectId(bytes(value)))
        except (BsonInvalidId, TypeError):
            raise InvalidId(value)

    @classmethod
    def parse(cls, value: Union["IdType", ObjectId, str]) -> ObjectId:
        """Store form of any accepted id representation"""
        if isinstance(value, IdType):
            return value._oid
        if isinstance(value, ObjectId):
            return value
        return cls.from_hex(value)._oid

    def as_hex(self) -> str:
        return str(self._oid)

    def as_binary(self) -> bytes:
        return self._oid.binary

    def as_object_id(self) -> ObjectId:
        return self._oid

    def __eq__(self, other) -> bool:
        if isinstance(other, IdType):
            return self._oid == other._oid
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._oid)

    def __str__(self) -> str:
        return self.as_hex()

    def __repr__(self) -> str:
        return f"IdType('{self.as_hex()}')"


def is_valid_hex(value) -> bool:
    return isinstance(value, str) and len(value) == 24 and ObjectId.is_valid(value)
