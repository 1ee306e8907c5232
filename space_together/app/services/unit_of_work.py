from abc import ABC, abstractmethod
from dataclasses import dataclass

from space_together.app.repositories.entity_repository import IEntityRepository
from space_together.app.repositories.join_school_request_repository import (
    IJoinSchoolRequestRepository,
)
from space_together.app.repositories.user_repository import IUserRepository
from space_together.domain.descriptors import EntityDescriptor


@dataclass
class SchoolRepositories:
    """Repositories bound to one school's database"""

    database_name: str
    students: IEntityRepository
    teachers: IEntityRepository
    school_staff: IEntityRepository
    classes: IEntityRepository


class UnitOfWork(ABC):
    """
    Abstract UnitOfWork - defines repository access.

    Every write is applied to the store as it happens; there is no
    cross-document transaction to commit or roll back.
    """

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    schools: IEntityRepository
    join_requests: IJoinSchoolRequestRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    def for_school(self, database_name: str) -> SchoolRepositories:
        """Repositories over the named school database"""
        pass

    @abstractmethod
    def repository(self, descriptor: EntityDescriptor, database_name: str = None) -> IEntityRepository:
        """Generic repository for descriptor; tenant scope requires database_name"""
        pass
