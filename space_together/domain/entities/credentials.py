"""
Credentials

Verified token payloads. Both live for one request only.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from .enums import UserRole

STAFF_ROLES = (UserRole.ADMIN, UserRole.SCHOOLSTAFF, UserRole.TEACHER)


class AuthUser(BaseModel):
    """Bearer token payload"""

    id: str
    email: str
    role: Optional[UserRole] = None
    name: Optional[str] = None

    @property
    def is_admin_staff_or_teacher(self) -> bool:
        return self.role in STAFF_ROLES


class TenantCredential(BaseModel):
    """School token payload"""

    tenant_id: str
    database_name: Optional[str] = None
    subject: Optional[str] = None
    roles: List[str] = Field(default_factory=list)
    name: Optional[str] = None
    username: Optional[str] = None
