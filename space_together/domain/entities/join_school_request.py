"""
Join School Request Entity

Invitation from a school to an email address to take a role in it.
"""

from typing import Optional

from pydantic import EmailStr

from space_together.domain.base import Entity, UtcDatetime

from .enums import RESPONSE_STATUSES, JoinRole, JoinStatus


class JoinSchoolRequest(Entity):
    """
    Join school request entity - lives in the global database.

    Business Rules:
    - Created Pending, expires 7 days after creation unless told otherwise
    - At most one Pending request per (email, school_id)
    - Accepted/Rejected/Cancelled/Expired rows never change again
    - responded_at is set exactly when status is Accepted/Rejected/Cancelled
    - Accepted rows always carry invited_user_id
    """

    school_id: str
    invited_user_id: Optional[str] = None
    class_id: Optional[str] = None
    role: JoinRole
    email: EmailStr
    type: str = ""
    message: Optional[str] = None
    status: JoinStatus = JoinStatus.Pending
    sent_at: Optional[UtcDatetime] = None
    sent_by: str
    responded_by: Optional[str] = None
    responded_at: Optional[UtcDatetime] = None
    expires_at: Optional[UtcDatetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == JoinStatus.Pending

    def is_expired_at(self, now) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    @property
    def is_responded(self) -> bool:
        return self.status in RESPONSE_STATUSES


class JoinSchoolRequestWithRelations(JoinSchoolRequest):
    """Join request with school, invited user and sender embedded"""

    school: Optional[dict] = None
    invited_user: Optional[dict] = None
    sender: Optional[dict] = None
