from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from space_together.adapter.database.errors import store_call
from space_together.adapter.database.indexes import IndexManager
from space_together.app.repositories.user_repository import IUserRepository
from space_together.domain.base import utc_now
from space_together.domain.catalog import USERS
from space_together.domain.entities import User
from space_together.domain.errors import AppError

from .entity_repository import MongoEntityRepository


class MongoUserRepository(MongoEntityRepository, IUserRepository):
    """Users in the global database"""

    def __init__(self, database: AsyncIOMotorDatabase, index_manager: IndexManager):
        super().__init__(database, USERS, index_manager)

    async def get_by_email(self, email: str) -> Optional[User]:
        await self.ensure_indexes()
        with store_call("find user by email"):
            document = await self.collection.find_one({"email": email.strip().lower()})
        return self.from_document(document) if document else None

    async def add_school(self, user_id: str, school_id: str) -> User:
        school_oid = self.object_id(school_id)
        await self.ensure_indexes()
        with store_call("add school to user"):
            document = await self.collection.find_one_and_update(
                {"_id": self.object_id(user_id)},
                {
                    "$addToSet": {"schools": school_oid},
                    "$set": {"current_school_id": school_oid, "updated_at": utc_now()},
                },
                return_document=ReturnDocument.AFTER,
            )
        if document is None:
            raise AppError("USER_NOT_FOUND", "User not found")
        return self.from_document(document)
