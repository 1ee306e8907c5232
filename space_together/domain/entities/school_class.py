from typing import List, Optional

from pydantic import Field

from space_together.domain.base import EntityPatch, TaggedEntity

from .enums import ClassType


class SchoolClass(TaggedEntity):
    """
    Class of a school - lives in the school's database.

    Business Rules:
    - username is unique, code is unique when present
    """

    name: str
    username: str
    code: Optional[str] = None
    school_id: Optional[str] = None
    creator_id: Optional[str] = None
    class_teacher_id: Optional[str] = None
    main_class_id: Optional[str] = None
    trade_id: Optional[str] = None
    type: ClassType = ClassType.School
    image: Optional[str] = None
    image_id: Optional[str] = None
    description: Optional[str] = None
    capacity: Optional[int] = None
    grade_level: Optional[str] = None
    student_ids: List[str] = Field(default_factory=list)


class SchoolClassPatch(EntityPatch):
    name: Optional[str] = None
    username: Optional[str] = None
    code: Optional[str] = None
    class_teacher_id: Optional[str] = None
    main_class_id: Optional[str] = None
    trade_id: Optional[str] = None
    type: Optional[ClassType] = None
    image: Optional[str] = None
    image_id: Optional[str] = None
    description: Optional[str] = None
    capacity: Optional[int] = None
    grade_level: Optional[str] = None
    is_active: Optional[bool] = None
    tags: Optional[List[str]] = None
