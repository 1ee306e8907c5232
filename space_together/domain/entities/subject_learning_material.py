from typing import Optional

from space_together.domain.base import Entity, EntityPatch

from .enums import SubjectMaterialType


class SubjectLearningMaterial(Entity):
    """Book, video or link attached to a subject or to one of its topics (topic_id)"""

    subject_id: Optional[str] = None
    topic_id: Optional[str] = None
    material_type: SubjectMaterialType
    title: str
    link: Optional[str] = None
    description: Optional[str] = None
    creator_id: Optional[str] = None
    is_active: bool = True


class SubjectLearningMaterialPatch(EntityPatch):
    subject_id: Optional[str] = None
    topic_id: Optional[str] = None
    material_type: Optional[SubjectMaterialType] = None
    title: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None
