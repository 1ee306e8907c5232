from datetime import timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from space_together.adapter.database.errors import store_call
from space_together.adapter.database.indexes import IndexManager
from space_together.app.repositories.join_school_request_repository import (
    IJoinSchoolRequestRepository,
    JoinRequestQuery,
)
from space_together.domain.base import utc_now
from space_together.domain.catalog import JOIN_SCHOOL_REQUESTS, join_request_indexes
from space_together.domain.entities import JoinSchoolRequest, JoinStatus

from .entity_repository import MongoEntityRepository, _escape, to_wire


def not_expired(now) -> Dict:
    return {"$or": [{"expires_at": None}, {"expires_at": {"$gt": now}}]}


class MongoJoinSchoolRequestRepository(MongoEntityRepository, IJoinSchoolRequestRepository):
    """Join school requests in the global database"""

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        index_manager: IndexManager,
        ttl_index: bool = False,
    ):
        super().__init__(
            database,
            JOIN_SCHOOL_REQUESTS,
            index_manager,
            indexes=join_request_indexes(ttl_index),
        )

    def _query_match(self, query: JoinRequestQuery, now) -> Dict:
        match = {}
        if query.email:
            match["email"] = _escape(query.email.strip())
        for field in ("school_id", "class_id", "invited_user_id", "sent_by"):
            value = getattr(query, field)
            if value:
                match[field] = self.object_id(value)
        if query.status is not None:
            match["status"] = query.status.value
        if query.role is not None:
            match["role"] = query.role.value
        if query.older_than_days is not None:
            match["created_at"] = {"$lte": now - timedelta(days=query.older_than_days)}
        return match

    async def _run_query(self, query: JoinRequestQuery, now, with_relations: bool):
        limit, skip = self._paging(query.limit, query.skip)
        match = self._query_match(query, now)
        pipeline = [
            {"$match": match},
            {"$sort": {"created_at": -1, "_id": -1}},
            {"$skip": skip},
            {"$limit": limit},
        ]
        if with_relations:
            pipeline.extend(self.relation_stages())
        await self.ensure_indexes()
        with store_call("query join_school_request"):
            documents = await self.collection.aggregate(pipeline).to_list(length=None)
            total = await self.collection.count_documents(match)
        if with_relations:
            items = [to_wire(document) for document in documents]
        else:
            items = [self.from_document(document) for document in documents]
        return self._page(items, total, limit, skip)

    async def query(self, query: JoinRequestQuery, now):
        return await self._run_query(query, now, with_relations=False)

    async def query_with_relations(self, query: JoinRequestQuery, now):
        return await self._run_query(query, now, with_relations=True)

    async def find_pending(self, email: str, school_id: str) -> Optional[JoinSchoolRequest]:
        await self.ensure_indexes()
        with store_call("find pending join_school_request"):
            document = await self.collection.find_one(
                {
                    "email": email,
                    "school_id": self.object_id(school_id),
                    "status": JoinStatus.Pending.value,
                }
            )
        return self.from_document(document) if document else None

    async def transition(
        self,
        request_id: str,
        new_status: JoinStatus,
        responded_by: str,
        now,
        invited_user_id: Optional[str] = None,
        message: Optional[str] = None,
    ) -> Optional[JoinSchoolRequest]:
        changes = {
            "status": new_status.value,
            "responded_by": self.object_id(responded_by),
            "responded_at": now,
            "updated_at": now,
        }
        if invited_user_id:
            changes["invited_user_id"] = self.object_id(invited_user_id)
        if message is not None:
            changes["message"] = message

        match = {
            "_id": self.object_id(request_id),
            "status": JoinStatus.Pending.value,
            **not_expired(now),
        }
        await self.ensure_indexes()
        with store_call("transition join_school_request"):
            document = await self.collection.find_one_and_update(
                match, {"$set": changes}, return_document=ReturnDocument.AFTER
            )
        return self.from_document(document) if document else None

    async def reopen(self, request: JoinSchoolRequest, responded_at) -> bool:
        """Undo an accept claimed at responded_at, restoring the previous fields"""
        restore = {"status": JoinStatus.Pending.value, "updated_at": utc_now()}
        unset = {"responded_by": "", "responded_at": ""}
        for field in ("invited_user_id", "message"):
            value = getattr(request, field)
            if value is None:
                unset[field] = ""
            else:
                restore[field] = self.convert_field(field, value)

        with store_call("reopen join_school_request"):
            result = await self.collection.update_one(
                {
                    "_id": self.object_id(request.id),
                    "status": JoinStatus.Accepted.value,
                    "responded_at": responded_at,
                },
                {"$set": restore, "$unset": unset},
            )
        return result.modified_count == 1

    async def bulk_transition(
        self,
        request_ids: Sequence[str],
        new_status: JoinStatus,
        responded_by: str,
        now,
        return_documents: bool = False,
    ) -> Tuple[int, List[JoinSchoolRequest]]:
        oids = [self.object_id(request_id) for request_id in request_ids]
        if not oids:
            return 0, []
        responder = self.object_id(responded_by)
        match = {
            "_id": {"$in": oids},
            "status": JoinStatus.Pending.value,
            **not_expired(now),
        }
        changes = {
            "status": new_status.value,
            "responded_by": responder,
            "responded_at": now,
            "updated_at": now,
        }
        await self.ensure_indexes()
        with store_call("bulk transition join_school_request"):
            result = await self.collection.update_many(match, {"$set": changes})

        documents = []
        if return_documents and result.modified_count:
            with store_call("read transitioned join_school_request"):
                found = await self.collection.find(
                    {
                        "_id": {"$in": oids},
                        "status": new_status.value,
                        "responded_by": responder,
                        "responded_at": now,
                    }
                ).to_list(length=None)
            documents = [self.from_document(document) for document in found]
        return result.modified_count, documents

    async def update_expiration(self, request_id: str, expires_at, now):
        await self.ensure_indexes()
        with store_call("update join_school_request expiration"):
            document = await self.collection.find_one_and_update(
                {"_id": self.object_id(request_id), "status": JoinStatus.Pending.value},
                {"$set": {"expires_at": expires_at, "updated_at": now}},
                return_document=ReturnDocument.AFTER,
            )
        return self.from_document(document) if document else None

    async def expire_old(self, now) -> int:
        await self.ensure_indexes()
        with store_call("expire join_school_requests"):
            result = await self.collection.update_many(
                {"status": JoinStatus.Pending.value, "expires_at": {"$lte": now}},
                {"$set": {"status": JoinStatus.Expired.value, "updated_at": now}},
            )
        return result.modified_count

    async def cleanup_expired(self, updated_before) -> int:
        await self.ensure_indexes()
        with store_call("cleanup expired join_school_requests"):
            result = await self.collection.delete_many(
                {"status": JoinStatus.Expired.value, "updated_at": {"$lte": updated_before}}
            )
        return result.deleted_count

    async def count_by_status(self, status: JoinStatus, school_id: Optional[str] = None) -> int:
        match = {"status": status.value}
        if school_id:
            match["school_id"] = self.object_id(school_id)
        await self.ensure_indexes()
        with store_call("count join_school_requests"):
            return await self.collection.count_documents(match)

    async def stats_by_status(self) -> Dict[str, int]:
        pipeline = [{"$group": {"_id": "$status", "count": {"$sum": 1}}}]
        await self.ensure_indexes()
        with store_call("join_school_request stats"):
            rows = await self.collection.aggregate(pipeline).to_list(length=None)
        counts = {status.value: 0 for status in JoinStatus}
        for row in rows:
            counts[row["_id"]] = row["count"]
        return counts
