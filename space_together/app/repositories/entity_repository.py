from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

from pydantic import BaseModel, Field

from space_together.domain.descriptors import EntityDescriptor

T = TypeVar("T", bound=BaseModel)

DEFAULT_LIMIT = 50


class Page(BaseModel, Generic[T]):
    """One page of a filtered list"""

    items: List[Any] = Field(default_factory=list)
    total: int = 0
    total_pages: int = 0
    current_page: int = 1


class BulkCreateResult(BaseModel):
    """Inserted prefix of a batch; failed_index/reason set when the store stopped it"""

    inserted: List[Any] = Field(default_factory=list)
    failed_index: Optional[int] = None
    reason: Optional[str] = None


class IEntityRepository(ABC, Generic[T]):
    """Generic document repository - application layer"""

    descriptor: EntityDescriptor

    @abstractmethod
    async def find_by_id(self, entity_id: str) -> Optional[T]:
        """Get entity by ID"""
        pass

    @abstractmethod
    async def find_by(self, field: str, value: Any) -> Optional[T]:
        """Get entity by one of the declared lookup keys"""
        pass

    @abstractmethod
    async def find_many_by_ids(self, entity_ids: Sequence[str]) -> List[T]:
        """Get entities by ID, in the order given; missing ids are skipped"""
        pass

    @abstractmethod
    async def list(
        self,
        filter: Optional[str] = None,
        limit: Optional[int] = None,
        skip: int = 0,
        extra_match: Optional[Dict[str, Any]] = None,
    ) -> Page[T]:
        """Case-insensitive search across the declared fields, newest update first"""
        pass

    @abstractmethod
    async def count(
        self, filter: Optional[str] = None, extra_match: Optional[Dict[str, Any]] = None
    ) -> int:
        """Count with the same filter grammar as list"""
        pass

    @abstractmethod
    async def list_with_relations(
        self,
        filter: Optional[str] = None,
        limit: Optional[int] = None,
        skip: int = 0,
        extra_match: Optional[Dict[str, Any]] = None,
    ) -> Page[dict]:
        """List with declared relations joined in"""
        pass

    @abstractmethod
    async def find_with_relations(self, entity_id: str) -> Optional[dict]:
        """Get entity by ID with declared relations joined in"""
        pass

    @abstractmethod
    async def insert(self, entity: T) -> T:
        """Create a new entity"""
        pass

    @abstractmethod
    async def update(self, entity_id: str, patch: Any) -> T:
        """Apply the set fields of patch; raises NOT_FOUND"""
        pass

    @abstractmethod
    async def delete(self, entity_id: str) -> None:
        """Delete entity; raises NOT_FOUND"""
        pass

    @abstractmethod
    async def create_many(self, entities: Sequence[T]) -> BulkCreateResult:
        """Ordered insert; stops at the first store error"""
        pass

    @abstractmethod
    async def create_many_with_validation(self, entities: Sequence[T]) -> List[T]:
        """All-or-nothing insert checked against the declared unique keys"""
        pass

    @abstractmethod
    async def update_many(self, updates: Sequence[Tuple[str, Any]]) -> List[T]:
        """Per-item update; raises NO_UPDATES when none succeeded"""
        pass

    @abstractmethod
    async def delete_many(self, entity_ids: Sequence[str]) -> int:
        """Delete entities, returns deleted count"""
        pass

    @abstractmethod
    async def add_tags(self, entity_ids: Sequence[str], tags: Sequence[str]) -> List[T]:
        pass

    @abstractmethod
    async def remove_tags(self, entity_ids: Sequence[str], tags: Sequence[str]) -> List[T]:
        pass

    @abstractmethod
    async def set_active(self, entity_ids: Sequence[str], is_active: bool) -> List[T]:
        pass
