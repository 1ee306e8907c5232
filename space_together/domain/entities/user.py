"""
User Entity

Platform account. Lives in the global database.
"""

from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from space_together.domain.base import Entity, EntityPatch

from .enums import Gender, UserRole


class User(Entity):
    """
    User entity - global account shared across schools.

    Business Rules:
    - Email is unique across the platform and stored lowercased
    - schools lists every school the user belongs to
    - Password hashes never leave the store
    """

    name: str
    email: EmailStr
    username: Optional[str] = None
    password_hash: Optional[str] = Field(default=None, exclude=True)
    role: Optional[UserRole] = None
    image: Optional[str] = None
    image_id: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[Gender] = None
    bio: Optional[str] = None
    schools: List[str] = Field(default_factory=list)
    current_school_id: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    def belongs_to(self, school_id: str) -> bool:
        return school_id in self.schools


class UserPatch(EntityPatch):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    username: Optional[str] = None
    role: Optional[UserRole] = None
    image: Optional[str] = None
    image_id: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[Gender] = None
    bio: Optional[str] = None
    current_school_id: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().lower() if value else value
