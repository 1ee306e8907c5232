from abc import abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from space_together.domain.entities import JoinRole, JoinSchoolRequest, JoinStatus

from .entity_repository import IEntityRepository, Page


class JoinRequestQuery(BaseModel):
    """Compound filter for join requests, newest first"""

    email: Optional[str] = None
    school_id: Optional[str] = None
    class_id: Optional[str] = None
    invited_user_id: Optional[str] = None
    sent_by: Optional[str] = None
    status: Optional[JoinStatus] = None
    role: Optional[JoinRole] = None
    older_than_days: Optional[int] = None
    limit: Optional[int] = None
    skip: int = 0


class IJoinSchoolRequestRepository(IEntityRepository[JoinSchoolRequest]):
    """Join school request repository interface - application layer"""

    @abstractmethod
    async def find_pending(self, email: str, school_id: str) -> Optional[JoinSchoolRequest]:
        """Get the pending request for (email, school_id)"""
        pass

    @abstractmethod
    async def query(self, query: JoinRequestQuery, now: datetime) -> Page[JoinSchoolRequest]:
        """Filter join requests"""
        pass

    @abstractmethod
    async def query_with_relations(self, query: JoinRequestQuery, now: datetime) -> Page[dict]:
        """Filter join requests with school, invited user and sender joined in"""
        pass

    @abstractmethod
    async def transition(
        self,
        request_id: str,
        new_status: JoinStatus,
        responded_by: str,
        now: datetime,
        invited_user_id: Optional[str] = None,
        message: Optional[str] = None,
    ) -> Optional[JoinSchoolRequest]:
        """
        Move a Pending, unexpired request to new_status in one document update.

        Returns None when the request was not Pending or had expired at now.
        """
        pass

    @abstractmethod
    async def reopen(self, request: JoinSchoolRequest, responded_at: datetime) -> bool:
        """Put an accept claimed at responded_at back to Pending as request was"""
        pass

    @abstractmethod
    async def bulk_transition(
        self,
        request_ids: Sequence[str],
        new_status: JoinStatus,
        responded_by: str,
        now: datetime,
        return_documents: bool = False,
    ) -> Tuple[int, List[JoinSchoolRequest]]:
        """Transition every Pending, unexpired request among request_ids"""
        pass

    @abstractmethod
    async def update_expiration(
        self, request_id: str, expires_at: datetime, now: datetime
    ) -> Optional[JoinSchoolRequest]:
        """Reset expires_at of a Pending request; None when not Pending"""
        pass

    @abstractmethod
    async def expire_old(self, now: datetime) -> int:
        """Mark Pending requests past expires_at as Expired"""
        pass

    @abstractmethod
    async def cleanup_expired(self, updated_before: datetime) -> int:
        """Delete Expired requests last updated before the cutoff"""
        pass

    @abstractmethod
    async def count_by_status(
        self, status: JoinStatus, school_id: Optional[str] = None
    ) -> int:
        pass

    @abstractmethod
    async def stats_by_status(self) -> Dict[str, int]:
        """Count per status"""
        pass
