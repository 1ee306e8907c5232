"""
Entity Use Case DTOs

Response shapes shared by every collection served through a descriptor.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class EntityPage(BaseModel):
    items: List[Any] = Field(default_factory=list)
    total: int = 0
    total_pages: int = 0
    current_page: int = 1


class EntityCountResponse(BaseModel):
    count: int


class BulkCreateEntitiesResponse(BaseModel):
    """Created documents; failed_index/reason are set when the batch stopped early"""

    inserted: List[Any] = Field(default_factory=list)
    inserted_count: int = 0
    failed_index: Optional[int] = None
    reason: Optional[str] = None


class BulkEntitiesResponse(BaseModel):
    items: List[Any] = Field(default_factory=list)
    count: int = 0


class BulkDeleteResponse(BaseModel):
    deleted_count: int


class DeleteEntityResponse(BaseModel):
    status: str
