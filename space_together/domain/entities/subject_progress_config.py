from typing import Optional

from pydantic import BaseModel, Field

from space_together.domain.base import Entity, EntityPatch

from .enums import SubjectTypeFor


class ProgressThresholds(BaseModel):
    satisfactory: float = 70.0
    needs_improvement: float = 50.0
    at_risk: float = 30.0


class SubjectProgressConfig(Entity):
    """What is tracked for a subject and where progress turns into a warning"""

    subject_id: Optional[str] = None
    role: SubjectTypeFor = SubjectTypeFor.MainSubject
    track_attendance: bool = True
    track_assignments: bool = True
    track_topic_coverage: bool = True
    track_skill_acquisition: bool = True
    thresholds: ProgressThresholds = Field(default_factory=ProgressThresholds)
    creator_id: Optional[str] = None


class SubjectProgressConfigPatch(EntityPatch):
    track_attendance: Optional[bool] = None
    track_assignments: Optional[bool] = None
    track_topic_coverage: Optional[bool] = None
    track_skill_acquisition: Optional[bool] = None
    thresholds: Optional[ProgressThresholds] = None
