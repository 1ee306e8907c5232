"""
School Entity

A school is a tenant: its own documents live in the database named by
database_name.
"""

from typing import List, Optional

from pydantic import Field

from space_together.domain.base import Entity, EntityPatch

from .enums import AffiliationType, SchoolType


class School(Entity):
    """
    School entity - global registry of tenants.

    Business Rules:
    - username and code are unique
    - database_name is assigned once and never changes
    """

    creator_id: Optional[str] = None
    username: str
    name: str
    code: Optional[str] = None
    logo: Optional[str] = None
    logo_id: Optional[str] = None
    description: Optional[str] = None
    school_type: Optional[SchoolType] = None
    affiliation: Optional[AffiliationType] = None
    curriculum: List[str] = Field(default_factory=list)
    website: Optional[str] = None
    student_capacity: Optional[int] = None
    database_name: Optional[str] = None
    is_active: bool = True


class SchoolPatch(EntityPatch):
    username: Optional[str] = None
    name: Optional[str] = None
    code: Optional[str] = None
    logo: Optional[str] = None
    logo_id: Optional[str] = None
    description: Optional[str] = None
    school_type: Optional[SchoolType] = None
    affiliation: Optional[AffiliationType] = None
    curriculum: Optional[List[str]] = None
    website: Optional[str] = None
    student_capacity: Optional[int] = None
    is_active: Optional[bool] = None


def school_db_name_from_id(school_id: str, prefix: str = "school_") -> str:
    return f"{prefix}{school_id}"
