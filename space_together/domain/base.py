from datetime import UTC, datetime
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Naive UTC timestamp truncated to milliseconds, the form the store hands back"""
    now = datetime.now(UTC)
    return now.replace(tzinfo=None, microsecond=now.microsecond // 1000 * 1000)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


UtcDatetime = Annotated[datetime, AfterValidator(to_naive_utc)]


class Entity(BaseModel):
    """Base for every stored document; ids are hex strings on this side"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None


class TaggedEntity(Entity):
    is_active: bool = True
    tags: List[str] = Field(default_factory=list)


class EntityPatch(BaseModel):
    """Partial update; unset and null fields are left untouched"""

    model_config = ConfigDict(extra="ignore")
