from typing import Dict, Optional

from pydantic import Field

from space_together.domain.base import Entity, EntityPatch

from .enums import SubjectGradingType, SubjectTypeFor


class SubjectGradingScheme(Entity):
    """
    Grading scheme of a subject.

    grade_boundaries maps a grade to its lower bound, assessment_weights maps
    an assessment kind to its share of the final mark.
    """

    subject_id: Optional[str] = None
    scheme_type: SubjectGradingType = SubjectGradingType.Percentage
    grade_boundaries: Dict[str, float] = Field(default_factory=dict)
    assessment_weights: Dict[str, float] = Field(default_factory=dict)
    minimum_passing_grade: str
    role: SubjectTypeFor = SubjectTypeFor.MainSubject
    creator_id: Optional[str] = None


class SubjectGradingSchemePatch(EntityPatch):
    scheme_type: Optional[SubjectGradingType] = None
    grade_boundaries: Optional[Dict[str, float]] = None
    assessment_weights: Optional[Dict[str, float]] = None
    minimum_passing_grade: Optional[str] = None
    role: Optional[SubjectTypeFor] = None
