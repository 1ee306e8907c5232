"""
Change Event

Post-commit notification of an entity mutation. Best effort, never stored.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from space_together.domain.base import utc_now

GLOBAL_TOPIC = "global"


class ChangeVerb(str, Enum):
    created = "created"
    updated = "updated"
    deleted = "deleted"
    connected = "connected"


class ChangeEvent(BaseModel):
    topic: str
    entity_kind: str
    entity_id: str
    verb: ChangeVerb
    payload: Any = None
    timestamp: datetime = Field(default_factory=utc_now)

    def to_sse(self) -> str:
        """Server-Sent Events frame"""
        return f"data: {json.dumps(self.model_dump(mode='json'))}\n\n"
