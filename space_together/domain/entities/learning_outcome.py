from typing import List, Optional

from pydantic import BaseModel, Field

from space_together.domain.base import Entity, EntityPatch

from .enums import SubjectTypeFor


class CompetencyBlock(BaseModel):
    knowledge: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    attitudes: List[str] = Field(default_factory=list)


class LearningOutcome(Entity):
    """Learning outcome of a main subject, ordered within it"""

    subject_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    order: int = 0
    estimated_hours: Optional[int] = None
    key_competencies: CompetencyBlock = Field(default_factory=CompetencyBlock)
    assessment_criteria: List[str] = Field(default_factory=list)
    role: SubjectTypeFor = SubjectTypeFor.MainSubject
    prerequisites: Optional[List[str]] = None
    is_mandatory: Optional[bool] = None
    creator_id: Optional[str] = None


class LearningOutcomePatch(EntityPatch):
    subject_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    order: Optional[int] = None
    estimated_hours: Optional[int] = None
    key_competencies: Optional[CompetencyBlock] = None
    assessment_criteria: Optional[List[str]] = None
    role: Optional[SubjectTypeFor] = None
    prerequisites: Optional[List[str]] = None
    is_mandatory: Optional[bool] = None
