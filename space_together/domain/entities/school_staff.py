from typing import List, Optional

from pydantic import EmailStr

from space_together.domain.base import EntityPatch, TaggedEntity

from .enums import SchoolStaffType


class SchoolStaff(TaggedEntity):
    """
    School staff member - lives in the school's database.

    Business Rules:
    - At most one Director per school (partial unique index)
    - At most five HeadOfStudies per school
    """

    user_id: Optional[str] = None
    school_id: Optional[str] = None
    creator_id: Optional[str] = None
    name: str
    email: EmailStr
    type: SchoolStaffType = SchoolStaffType.Director


class SchoolStaffPatch(EntityPatch):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    type: Optional[SchoolStaffType] = None
    is_active: Optional[bool] = None
    tags: Optional[List[str]] = None


def parse_staff_type(value: str) -> SchoolStaffType:
    if (value or "").lower() == "director":
        return SchoolStaffType.Director
    return SchoolStaffType.HeadOfStudies
