from typing import Optional

from space_together.domain.base import Entity, EntityPatch


class Trade(Entity):
    """Trade within a sector; trade_id points at a parent trade"""

    sector_id: Optional[str] = None
    trade_id: Optional[str] = None
    name: str
    username: str
    description: Optional[str] = None
    class_min: int
    class_max: int
    disable: Optional[bool] = None


class TradePatch(EntityPatch):
    sector_id: Optional[str] = None
    trade_id: Optional[str] = None
    name: Optional[str] = None
    username: Optional[str] = None
    description: Optional[str] = None
    class_min: Optional[int] = None
    class_max: Optional[int] = None
    disable: Optional[bool] = None
