"""
Entity Use Cases

Generic CRUD and bulk operations for every collection in the descriptor
catalogue.
"""

from .bulk_use_cases import (
    BulkActiveUseCase,
    BulkCreateEntitiesUseCase,
    BulkDeleteEntitiesUseCase,
    BulkTagsUseCase,
    BulkUpdateEntitiesUseCase,
)
from .crud_use_cases import (
    CountEntitiesUseCase,
    CreateEntityUseCase,
    DeleteEntityUseCase,
    GetEntityUseCase,
    ListEntitiesUseCase,
    UpdateEntityUseCase,
)
from .dtos import (
    BulkCreateEntitiesResponse,
    BulkDeleteResponse,
    BulkEntitiesResponse,
    DeleteEntityResponse,
    EntityCountResponse,
    EntityPage,
)

__all__ = [
    "ListEntitiesUseCase",
    "CountEntitiesUseCase",
    "GetEntityUseCase",
    "CreateEntityUseCase",
    "UpdateEntityUseCase",
    "DeleteEntityUseCase",
    "BulkCreateEntitiesUseCase",
    "BulkUpdateEntitiesUseCase",
    "BulkDeleteEntitiesUseCase",
    "BulkTagsUseCase",
    "BulkActiveUseCase",
    "EntityPage",
    "EntityCountResponse",
    "BulkCreateEntitiesResponse",
    "BulkEntitiesResponse",
    "BulkDeleteResponse",
    "DeleteEntityResponse",
]
