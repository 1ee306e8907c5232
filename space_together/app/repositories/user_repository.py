from abc import abstractmethod
from typing import Optional

from space_together.domain.entities import User

from .entity_repository import IEntityRepository


class IUserRepository(IEntityRepository[User]):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email; emails are stored lowercased"""
        pass

    @abstractmethod
    async def add_school(self, user_id: str, school_id: str) -> User:
        """Add school to the user's schools and make it the current one"""
        pass
