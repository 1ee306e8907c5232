"""
Generic Mongo repository.

One implementation serves every collection; the EntityDescriptor says which
fields are searchable, which hold ids, which are unique and how relations
are joined. Ids are hex strings above this module and ObjectIds below it.
"""

import logging
import math
import re
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo import ReturnDocument
from pymongo.errors import BulkWriteError, PyMongoError

from space_together.adapter.database.errors import store_call, store_error
from space_together.adapter.database.indexes import IndexManager
from space_together.app.repositories.entity_repository import (
    DEFAULT_LIMIT,
    BulkCreateResult,
    IEntityRepository,
    Page,
)
from space_together.domain.base import utc_now
from space_together.domain.descriptors import EntityDescriptor, IndexSpec
from space_together.domain.errors import AppError
from space_together.domain.ids import IdType

logger = logging.getLogger(__name__)

SENSITIVE_FIELDS = ("password_hash", "password")


def to_wire(value: Any) -> Any:
    """Store form to wire form: ObjectIds become hex, _id becomes id"""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, list):
        return [to_wire(item) for item in value]
    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            if key in SENSITIVE_FIELDS:
                continue
            result["id" if key == "_id" else key] = to_wire(item)
        return result
    return value


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value


def _escape(text: str) -> Dict[str, str]:
    return {"$regex": re.escape(text), "$options": "i"}


class MongoEntityRepository(IEntityRepository):
    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        descriptor: EntityDescriptor,
        index_manager: IndexManager,
        indexes: Optional[Iterable[IndexSpec]] = None,
    ):
        self.database = database
        self.descriptor = descriptor
        self.index_manager = index_manager
        self.collection = database[descriptor.collection]
        self._indexes = tuple(indexes) if indexes is not None else descriptor.indexes

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def object_id(self, value: Any) -> ObjectId:
        return IdType.parse(value)

    def convert_field(self, field: str, value: Any) -> Any:
        """Hex to ObjectId for id-typed fields, enums to their values"""
        if field == "_id" or field in self.descriptor.object_id_fields:
            if isinstance(value, (str, IdType)):
                return self.object_id(value)
            if isinstance(value, (list, tuple)):
                return [self.convert_field(field, item) for item in value]
            if isinstance(value, dict):
                return {op: self.convert_field(field, item) for op, item in value.items()}
        return _plain(value)

    def to_document(self, data: Dict[str, Any]) -> Dict[str, Any]:
        document = {}
        for key, value in data.items():
            if key == "id":
                key = "_id"
            document[key] = self.convert_field(key, value)
        return document

    def prepare_match(self, match: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        if not match:
            return {}
        prepared = {}
        for key, value in match.items():
            if key in ("$and", "$or", "$nor"):
                prepared[key] = [self.prepare_match(clause) for clause in value]
            else:
                field = "_id" if key == "id" else key
                prepared[field] = self.convert_field(field, value)
        return prepared

    def from_document(self, document: Dict[str, Any]):
        return self.descriptor.model.model_validate(to_wire(document))

    def _new_document(self, entity: BaseModel, now) -> Dict[str, Any]:
        data = entity.model_dump(exclude_none=True)
        data["id"] = data.get("id") or ObjectId()
        data.setdefault("created_at", now)
        data["updated_at"] = now
        return self.to_document(data)

    def _changes(self, patch: Any) -> Dict[str, Any]:
        if isinstance(patch, BaseModel):
            changes = patch.model_dump(exclude_none=True, exclude_unset=True)
        else:
            changes = {key: value for key, value in dict(patch).items() if value is not None}
        for key in ("id", "_id", "created_at", "updated_at"):
            changes.pop(key, None)
        return changes

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def build_match(
        self, filter: Optional[str] = None, extra_match: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        clauses = []
        if filter and filter.strip() and self.descriptor.search_fields:
            pattern = _escape(filter.strip())
            clauses.append(
                {"$or": [{field: pattern} for field in self.descriptor.search_fields]}
            )
        extra = self.prepare_match(extra_match)
        if extra:
            clauses.append(extra)
        if not clauses:
            return {}
        if len(clauses) == 1:
            return clauses[0]
        return {"$and": clauses}

    def relation_stages(self) -> List[Dict[str, Any]]:
        stages = []
        for relation in self.descriptor.relations:
            stages.append(
                {
                    "$lookup": {
                        "from": relation.collection,
                        "localField": relation.local_field,
                        "foreignField": relation.foreign_field,
                        "as": relation.name,
                    }
                }
            )
            if not relation.many:
                stages.append(
                    {
                        "$unwind": {
                            "path": f"${relation.name}",
                            "preserveNullAndEmptyArrays": True,
                        }
                    }
                )
        return stages

    @staticmethod
    def _paging(limit: Optional[int], skip: int) -> Tuple[int, int]:
        limit = DEFAULT_LIMIT if limit is None else max(1, int(limit))
        return limit, max(0, int(skip or 0))

    @staticmethod
    def _page(items: List[Any], total: int, limit: int, skip: int) -> Page:
        return Page(
            items=items,
            total=total,
            total_pages=math.ceil(total / limit) if total else 0,
            current_page=skip // limit + 1,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def ensure_indexes(self) -> None:
        await self.index_manager.ensure(self.database, self.descriptor.collection, self._indexes)

    async def find_by_id(self, entity_id: str):
        oid = self.object_id(entity_id)
        await self.ensure_indexes()
        with store_call(f"find {self.descriptor.kind}"):
            document = await self.collection.find_one({"_id": oid})
        return self.from_document(document) if document else None

    async def find_by(self, field: str, value: Any):
        if field not in self.descriptor.lookup_keys:
            raise AppError(
                "INVALID_LOOKUP_FIELD",
                f"Cannot look up {self.descriptor.kind} by {field}",
            )
        await self.ensure_indexes()
        with store_call(f"find {self.descriptor.kind} by {field}"):
            document = await self.collection.find_one({field: self.convert_field(field, value)})
        return self.from_document(document) if document else None

    async def find_many_by_ids(self, entity_ids: Sequence[str]):
        oids = [self.object_id(entity_id) for entity_id in entity_ids]
        if not oids:
            return []
        await self.ensure_indexes()
        with store_call(f"find many {self.descriptor.kind}"):
            documents = await self.collection.find({"_id": {"$in": oids}}).to_list(length=None)
        by_id = {document["_id"]: document for document in documents}
        return [self.from_document(by_id[oid]) for oid in oids if oid in by_id]

    async def list(self, filter=None, limit=None, skip=0, extra_match=None) -> Page:
        limit, skip = self._paging(limit, skip)
        match = self.build_match(filter, extra_match)
        pipeline = [
            {"$match": match},
            {"$sort": {"updated_at": -1, "_id": -1}},
            {"$skip": skip},
            {"$limit": limit},
        ]
        await self.ensure_indexes()
        with store_call(f"list {self.descriptor.kind}"):
            documents = await self.collection.aggregate(pipeline).to_list(length=None)
            total = await self.collection.count_documents(match)
        items = [self.from_document(document) for document in documents]
        return self._page(items, total, limit, skip)

    async def count(self, filter=None, extra_match=None) -> int:
        match = self.build_match(filter, extra_match)
        await self.ensure_indexes()
        with store_call(f"count {self.descriptor.kind}"):
            return await self.collection.count_documents(match)

    async def list_with_relations(self, filter=None, limit=None, skip=0, extra_match=None) -> Page:
        limit, skip = self._paging(limit, skip)
        match = self.build_match(filter, extra_match)
        pipeline = [
            {"$match": match},
            {"$sort": {"updated_at": -1, "_id": -1}},
            {"$skip": skip},
            {"$limit": limit},
            *self.relation_stages(),
        ]
        await self.ensure_indexes()
        with store_call(f"list {self.descriptor.kind} with relations"):
            documents = await self.collection.aggregate(pipeline).to_list(length=None)
            total = await self.collection.count_documents(match)
        return self._page([to_wire(document) for document in documents], total, limit, skip)

    async def find_with_relations(self, entity_id: str) -> Optional[dict]:
        pipeline = [
            {"$match": {"_id": self.object_id(entity_id)}},
            {"$limit": 1},
            *self.relation_stages(),
        ]
        await self.ensure_indexes()
        with store_call(f"find {self.descriptor.kind} with relations"):
            documents = await self.collection.aggregate(pipeline).to_list(length=1)
        return to_wire(documents[0]) if documents else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert(self, entity):
        document = self._new_document(entity, utc_now())
        await self.ensure_indexes()
        with store_call(f"insert {self.descriptor.kind}"):
            await self.collection.insert_one(document)
        return self.from_document(document)

    async def update(self, entity_id: str, patch: Any):
        oid = self.object_id(entity_id)
        changes = self._changes(patch)
        await self.ensure_indexes()
        if not changes:
            existing = await self.find_by_id(entity_id)
            if existing is None:
                raise AppError("NOT_FOUND", f"{self.descriptor.kind} not found")
            return existing

        changes["updated_at"] = utc_now()
        with store_call(f"update {self.descriptor.kind}"):
            document = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": self.to_document(changes)},
                return_document=ReturnDocument.AFTER,
            )
        if document is None:
            raise AppError("NOT_FOUND", f"{self.descriptor.kind} not found")
        return self.from_document(document)

    async def delete(self, entity_id: str) -> None:
        oid = self.object_id(entity_id)
        await self.ensure_indexes()
        with store_call(f"delete {self.descriptor.kind}"):
            result = await self.collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise AppError("NOT_FOUND", f"{self.descriptor.kind} not found")

    # ------------------------------------------------------------------
    # Bulk
    # ------------------------------------------------------------------

    async def create_many(self, entities) -> BulkCreateResult:
        if not entities:
            return BulkCreateResult()
        now = utc_now()
        documents = [self._new_document(entity, now) for entity in entities]
        await self.ensure_indexes()

        failed_index = None
        reason = None
        try:
            await self.collection.insert_many(documents, ordered=True)
            inserted_ids = [document["_id"] for document in documents]
        except BulkWriteError as exc:
            details = exc.details or {}
            write_errors = details.get("writeErrors") or [{}]
            failed_index = write_errors[0].get("index", details.get("nInserted", 0))
            reason = write_errors[0].get("errmsg", str(exc))
            inserted_ids = [document["_id"] for document in documents[:failed_index]]
            logger.warning(
                f"Bulk insert of {self.descriptor.kind} stopped at index {failed_index}: {reason}"
            )
        except PyMongoError as exc:
            raise store_error(exc, f"insert many {self.descriptor.kind}") from exc

        inserted = await self.find_many_by_ids([str(oid) for oid in inserted_ids])
        return BulkCreateResult(inserted=inserted, failed_index=failed_index, reason=reason)

    async def create_many_with_validation(self, entities):
        conflicts: Dict[str, List[Any]] = {}
        rows = [entity.model_dump(exclude_none=True) for entity in entities]

        for key in self.descriptor.unique_keys:
            name = "+".join(key)
            seen = set()
            values = []
            for row in rows:
                value = self._key_value(row, key)
                if value is None:
                    continue
                if value in seen:
                    conflicts.setdefault(name, []).append(self._describe(key, value))
                seen.add(value)
                values.append(value)

            existing = await self._existing_values(key, values)
            for value in existing:
                described = self._describe(key, value)
                if described not in conflicts.get(name, []):
                    conflicts.setdefault(name, []).append(described)

        if conflicts:
            raise AppError(
                "DUPLICATE_KEYS",
                f"Duplicate {', '.join(conflicts)} in {self.descriptor.kind} batch",
                details=conflicts,
            )

        result = await self.create_many(entities)
        if result.failed_index is not None:
            raise AppError(
                "DUPLICATE_KEYS",
                f"Batch stopped at entry {result.failed_index}",
                reason=result.reason,
                details={"inserted": len(result.inserted), "failed_index": result.failed_index},
            )
        return result.inserted

    @staticmethod
    def _key_value(row: Dict[str, Any], key: Tuple[str, ...]):
        values = tuple(_plain(row.get(field)) for field in key)
        if any(value is None for value in values):
            return None
        return values

    @staticmethod
    def _describe(key: Tuple[str, ...], value: Tuple[Any, ...]):
        if len(key) == 1:
            return str(value[0])
        return {field: str(item) for field, item in zip(key, value)}

    async def _existing_values(self, key: Tuple[str, ...], values: List[Tuple[Any, ...]]):
        if not values:
            return []
        await self.ensure_indexes()
        if len(key) == 1:
            field = key[0]
            query = {field: {"$in": [self.convert_field(field, value[0]) for value in values]}}
        else:
            query = {
                "$or": [
                    {field: self.convert_field(field, item) for field, item in zip(key, value)}
                    for value in values
                ]
            }
        projection = {field: 1 for field in key}
        with store_call(f"check unique {'+'.join(key)} of {self.descriptor.kind}"):
            documents = await self.collection.find(query, projection).to_list(length=None)
        return [tuple(to_wire(document.get(field)) for field in key) for document in documents]

    async def update_many(self, updates):
        updated = []
        for entity_id, patch in updates:
            try:
                updated.append(await self.update(entity_id, patch))
            except AppError as exc:
                logger.warning(
                    f"Failed to update {self.descriptor.kind} {entity_id}: {exc.error.message}"
                )
        if not updated:
            raise AppError("NO_UPDATES", f"No {self.descriptor.kind} was updated")
        return updated

    async def delete_many(self, entity_ids) -> int:
        oids = [self.object_id(entity_id) for entity_id in entity_ids]
        if not oids:
            return 0
        await self.ensure_indexes()
        with store_call(f"delete many {self.descriptor.kind}"):
            result = await self.collection.delete_many({"_id": {"$in": oids}})
        return result.deleted_count

    async def _update_ids(self, entity_ids, update: Dict[str, Any], operation: str):
        oids = [self.object_id(entity_id) for entity_id in entity_ids]
        if not oids:
            return []
        update.setdefault("$set", {})["updated_at"] = utc_now()
        await self.ensure_indexes()
        with store_call(f"{operation} {self.descriptor.kind}"):
            await self.collection.update_many({"_id": {"$in": oids}}, update)
        return await self.find_many_by_ids(entity_ids)

    async def add_tags(self, entity_ids, tags):
        return await self._update_ids(
            entity_ids, {"$addToSet": {"tags": {"$each": list(tags)}}}, "add tags to"
        )

    async def remove_tags(self, entity_ids, tags):
        return await self._update_ids(
            entity_ids, {"$pullAll": {"tags": list(tags)}}, "remove tags from"
        )

    async def set_active(self, entity_ids, is_active: bool):
        return await self._update_ids(
            entity_ids, {"$set": {"is_active": bool(is_active)}}, "set active on"
        )
