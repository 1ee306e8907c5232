from typing import List, Optional

from pydantic import BaseModel, Field

from space_together.domain.base import Entity, EntityPatch, UtcDatetime

from .enums import SubjectCategory


class SubjectContributor(BaseModel):
    name: str
    role: str
    user_id: Optional[str] = None


class MainSubject(Entity):
    """
    Main subject - the curriculum-level subject class subjects derive from.

    Business Rules:
    - code is unique
    - learning outcomes, grading schemes and progress configs hang off it by subject_id
    """

    name: str
    code: str
    description: Optional[str] = None
    level: Optional[str] = None
    estimated_hours: int = 0
    credits: Optional[int] = None
    category: SubjectCategory = SubjectCategory.Other
    main_class_ids: List[str] = Field(default_factory=list)
    prerequisites: Optional[List[str]] = None
    contributors: List[SubjectContributor] = Field(default_factory=list)
    starting_year: Optional[UtcDatetime] = None
    ending_year: Optional[UtcDatetime] = None
    creator_id: Optional[str] = None
    is_active: bool = True


class MainSubjectPatch(EntityPatch):
    name: Optional[str] = None
    code: Optional[str] = None
    description: Optional[str] = None
    level: Optional[str] = None
    estimated_hours: Optional[int] = None
    credits: Optional[int] = None
    category: Optional[SubjectCategory] = None
    main_class_ids: Optional[List[str]] = None
    prerequisites: Optional[List[str]] = None
    contributors: Optional[List[SubjectContributor]] = None
    starting_year: Optional[UtcDatetime] = None
    ending_year: Optional[UtcDatetime] = None
    is_active: Optional[bool] = None
