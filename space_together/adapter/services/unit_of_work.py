from typing import Dict, Optional

from space_together.adapter.database.indexes import IndexManager
from space_together.adapter.database.registry import DatabaseRegistry
from space_together.adapter.repositories.entity_repository import MongoEntityRepository
from space_together.adapter.repositories.join_school_request_repository import (
    MongoJoinSchoolRequestRepository,
)
from space_together.adapter.repositories.user_repository import MongoUserRepository
from space_together.app.services.unit_of_work import SchoolRepositories, UnitOfWork
from space_together.domain.catalog import CLASSES, SCHOOL_STAFF, SCHOOLS, STUDENTS, TEACHERS
from space_together.domain.descriptors import EntityDescriptor
from space_together.domain.errors import AppError


class MongoUnitOfWork(UnitOfWork):
    """Mongo implementation of UnitOfWork pattern"""

    def __init__(
        self,
        registry: DatabaseRegistry,
        index_manager: IndexManager,
        ttl_index: bool = False,
    ):
        self.registry = registry
        self.index_manager = index_manager
        self.ttl_index = ttl_index
        self._schools: Dict[str, SchoolRepositories] = {}

    async def __aenter__(self):
        # Initialize global repositories over the main database
        main_db = self.registry.main_db()
        self.users = MongoUserRepository(main_db, self.index_manager)
        self.schools = MongoEntityRepository(main_db, SCHOOLS, self.index_manager)
        self.join_requests = MongoJoinSchoolRequestRepository(
            main_db, self.index_manager, ttl_index=self.ttl_index
        )
        return self

    async def __aexit__(self, *args):
        self._schools.clear()

    def for_school(self, database_name: str) -> SchoolRepositories:
        scope = self._schools.get(database_name)
        if scope is None:
            database = self.registry.get_db(database_name)
            scope = SchoolRepositories(
                database_name=database_name,
                students=MongoEntityRepository(database, STUDENTS, self.index_manager),
                teachers=MongoEntityRepository(database, TEACHERS, self.index_manager),
                school_staff=MongoEntityRepository(database, SCHOOL_STAFF, self.index_manager),
                classes=MongoEntityRepository(database, CLASSES, self.index_manager),
            )
            self._schools[database_name] = scope
        return scope

    def repository(
        self, descriptor: EntityDescriptor, database_name: Optional[str] = None
    ) -> MongoEntityRepository:
        if descriptor.is_tenant_scoped:
            if not database_name:
                raise AppError("TENANT_REQUIRED", "School token required")
            database = self.registry.get_db(database_name)
        else:
            database = self.registry.main_db()
        return MongoEntityRepository(database, descriptor, self.index_manager)
