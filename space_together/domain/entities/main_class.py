from typing import Optional

from space_together.domain.base import Entity, EntityPatch


class MainClass(Entity):
    """
    Main class - a level of a trade (e.g. "Software Development L3").

    Business Rules:
    - (trade_id, level) is unique
    """

    name: str
    username: str
    trade_id: Optional[str] = None
    level: Optional[int] = None
    description: Optional[str] = None
    disable: Optional[bool] = None


class MainClassPatch(EntityPatch):
    name: Optional[str] = None
    username: Optional[str] = None
    trade_id: Optional[str] = None
    level: Optional[int] = None
    description: Optional[str] = None
    disable: Optional[bool] = None
