from typing import List, Optional

from pydantic import EmailStr, Field

from space_together.domain.base import EntityPatch, TaggedEntity

from .enums import Gender, TeacherType


class Teacher(TaggedEntity):
    """
    Teacher of a school - lives in the school's database.

    Business Rules:
    - One teacher record per email within a school
    """

    user_id: Optional[str] = None
    school_id: Optional[str] = None
    creator_id: Optional[str] = None
    name: str
    email: EmailStr
    phone: Optional[str] = None
    gender: Optional[Gender] = None
    image: Optional[str] = None
    image_id: Optional[str] = None
    type: TeacherType = TeacherType.Regular
    class_ids: List[str] = Field(default_factory=list)
    subject_ids: List[str] = Field(default_factory=list)


class TeacherPatch(EntityPatch):
    user_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    gender: Optional[Gender] = None
    image: Optional[str] = None
    image_id: Optional[str] = None
    type: Optional[TeacherType] = None
    class_ids: Optional[List[str]] = None
    subject_ids: Optional[List[str]] = None
    is_active: Optional[bool] = None
    tags: Optional[List[str]] = None


def parse_teacher_type(value: str) -> TeacherType:
    """Free-form invitation type to a teacher type; unknown values are Regular"""
    normalized = (value or "").replace(" ", "").replace("_", "").lower()
    for teacher_type in TeacherType:
        if teacher_type.value.lower() == normalized:
            return teacher_type
    return TeacherType.Regular
