from typing import Optional

from space_together.domain.base import Entity, EntityPatch


class SubjectTopic(Entity):
    """Topic under a learning outcome; parent_topic_id nests sub-topics (2.3.1 under 2.3)"""

    subject_id: Optional[str] = None
    learning_outcome_id: Optional[str] = None
    parent_topic_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    order: float = 0
    creator_id: Optional[str] = None


class SubjectTopicPatch(EntityPatch):
    subject_id: Optional[str] = None
    learning_outcome_id: Optional[str] = None
    parent_topic_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    order: Optional[float] = None
