from typing import List, Optional

from space_together.domain.base import EntityPatch, TaggedEntity

from .enums import SubjectCategory


class Subject(TaggedEntity):
    """Subject taught in a class of a school"""

    name: str
    username: str
    code: Optional[str] = None
    class_id: Optional[str] = None
    creator_id: Optional[str] = None
    class_teacher_id: Optional[str] = None
    main_subject_id: Optional[str] = None
    subject_type: SubjectCategory = SubjectCategory.Other
    description: Optional[str] = None


class SubjectPatch(EntityPatch):
    name: Optional[str] = None
    username: Optional[str] = None
    code: Optional[str] = None
    class_id: Optional[str] = None
    class_teacher_id: Optional[str] = None
    main_subject_id: Optional[str] = None
    subject_type: Optional[SubjectCategory] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None
    tags: Optional[List[str]] = None
