from typing import Optional, Tuple

from space_together.domain.base import Entity, EntityPatch


class Sector(Entity):
    """Education sector (e.g. a national curriculum)"""

    name: str
    username: str
    logo: Optional[str] = None
    logo_id: Optional[str] = None
    description: Optional[str] = None
    curriculum: Optional[Tuple[int, int]] = None
    country: str
    disable: Optional[bool] = None


class SectorPatch(EntityPatch):
    name: Optional[str] = None
    username: Optional[str] = None
    logo: Optional[str] = None
    logo_id: Optional[str] = None
    description: Optional[str] = None
    curriculum: Optional[Tuple[int, int]] = None
    country: Optional[str] = None
    disable: Optional[bool] = None
