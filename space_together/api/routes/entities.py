"""
Generic collection routes.

One router per entity descriptor. Global collections are served under
/{path}; per-school collections under /school/{path} and
/school/{school_id}/{path}, always against the database named by the
School-Token header.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from pydantic import BaseModel, Field

from config import ApplicationConfig
from space_together.api.error import raise_for_error
from space_together.api.utils.events import publish_change
from space_together.api.utils.query import page_limit
from space_together.app.services.event_bus import IEventBus
from space_together.app.services.unit_of_work import UnitOfWork
from space_together.app.use_cases.entities import (
    BulkActiveUseCase,
    BulkCreateEntitiesResponse,
    BulkCreateEntitiesUseCase,
    BulkDeleteEntitiesUseCase,
    BulkDeleteResponse,
    BulkEntitiesResponse,
    BulkTagsUseCase,
    BulkUpdateEntitiesUseCase,
    CountEntitiesUseCase,
    CreateEntityUseCase,
    DeleteEntityResponse,
    DeleteEntityUseCase,
    EntityCountResponse,
    EntityPage,
    GetEntityUseCase,
    ListEntitiesUseCase,
    UpdateEntityUseCase,
)
from space_together.app.use_cases.tenants import TenantContext
from space_together.depends import get_current_user, get_event_bus, get_tenant, get_unit_of_work
from space_together.domain.catalog import ENTITY_DESCRIPTORS
from space_together.domain.descriptors import EntityDescriptor
from space_together.domain.entities import GLOBAL_TOPIC, AuthUser, ChangeVerb


class EntityScope(BaseModel):
    """Where a request reads and writes, and where its events go"""

    database_name: Optional[str] = None
    topic: str = GLOBAL_TOPIC
    overrides: Dict[str, Any] = Field(default_factory=dict)


class BulkCreateRequest(BaseModel):
    items: List[Dict[str, Any]] = Field(..., description="Documents to create")


class BulkUpdateItem(BaseModel):
    id: str = Field(..., description="Document ID")
    update: Dict[str, Any] = Field(..., description="Fields to change")


class BulkUpdateRequest(BaseModel):
    updates: List[BulkUpdateItem]


class BulkIdsRequest(BaseModel):
    ids: List[str]


class BulkActiveRequest(BaseModel):
    ids: List[str]
    is_active: bool


class BulkTagsRequest(BaseModel):
    ids: List[str]
    tags: List[str]


# ============================================================================
# Scope dependencies
# ============================================================================


async def global_read_scope() -> EntityScope:
    return EntityScope()


async def global_write_scope(current_user: AuthUser = Depends(get_current_user)) -> EntityScope:
    return EntityScope(overrides={"creator_id": current_user.id})


async def tenant_scope(tenant: TenantContext = Depends(get_tenant)) -> EntityScope:
    """Per-school documents always belong to the school of the token"""
    return EntityScope(
        database_name=tenant.database_name,
        topic=tenant.database_name,
        overrides={"school_id": tenant.tenant_id},
    )


def _unwrap(result):
    if result.is_err():
        raise_for_error(result.error)
    return result.value


def build_entity_router(
    descriptor: EntityDescriptor,
    prefix: str,
    read_scope=global_read_scope,
    write_scope=global_write_scope,
) -> APIRouter:
    """
    Build the route set of one collection.

    Static paths are registered before /{entity_id} so they are never
    captured as ids. Tag and active routes exist only for models that
    carry those fields.
    """
    router = APIRouter(prefix=prefix, tags=[descriptor.tag or descriptor.kind])
    model = descriptor.model
    kind = descriptor.kind

    def use_case(cls, uow: UnitOfWork, scope: EntityScope, **kwargs):
        return cls(uow, descriptor, scope.database_name, **kwargs)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @router.get("", response_model=EntityPage)
    async def list_entities(
        filter: Optional[str] = None,
        limit: Optional[int] = Query(None, ge=1),
        skip: int = Query(0, ge=0),
        scope: EntityScope = Depends(read_scope),
        uow: UnitOfWork = Depends(get_unit_of_work),
    ):
        result = await use_case(ListEntitiesUseCase, uow, scope).execute(
            filter, page_limit(limit), skip
        )
        return _unwrap(result)

    @router.get("/count", response_model=EntityCountResponse)
    async def count_entities(
        filter: Optional[str] = None,
        scope: EntityScope = Depends(read_scope),
        uow: UnitOfWork = Depends(get_unit_of_work),
    ):
        result = await use_case(CountEntitiesUseCase, uow, scope).execute(filter)
        return _unwrap(result)

    @router.get("/with-relations", response_model=EntityPage)
    async def list_entities_with_relations(
        filter: Optional[str] = None,
        limit: Optional[int] = Query(None, ge=1),
        skip: int = Query(0, ge=0),
        scope: EntityScope = Depends(read_scope),
        uow: UnitOfWork = Depends(get_unit_of_work),
    ):
        result = await use_case(ListEntitiesUseCase, uow, scope).execute(
            filter, page_limit(limit), skip, with_relations=True
        )
        return _unwrap(result)

    # ------------------------------------------------------------------
    # Bulk writes
    # ------------------------------------------------------------------

    @router.post(
        "/bulk", status_code=status.HTTP_201_CREATED, response_model=BulkCreateEntitiesResponse
    )
    async def bulk_create_entities(
        request: BulkCreateRequest,
        validate: bool = True,
        scope: EntityScope = Depends(write_scope),
        uow: UnitOfWork = Depends(get_unit_of_work),
        bus: IEventBus = Depends(get_event_bus),
    ):
        """
        Raises:
            - 400 Bad Request: EMPTY_BATCH, VALIDATION_ERROR, DUPLICATE_KEYS
        """
        result = await use_case(
            BulkCreateEntitiesUseCase,
            uow,
            scope,
            school_db_prefix=ApplicationConfig.SCHOOL_DB_PREFIX,
        ).execute(request.items, validate=validate, overrides=scope.overrides)
        response = _unwrap(result)

        if response.inserted:
            publish_change(bus, scope.topic, kind, "bulk", ChangeVerb.created, response.inserted)
        return response

    @router.put("/bulk", response_model=BulkEntitiesResponse)
    async def bulk_update_entities(
        request: BulkUpdateRequest,
        scope: EntityScope = Depends(write_scope),
        uow: UnitOfWork = Depends(get_unit_of_work),
        bus: IEventBus = Depends(get_event_bus),
    ):
        """
        Raises:
            - 400 Bad Request: EMPTY_BATCH, VALIDATION_ERROR, NO_UPDATES
        """
        items = [{**item.update, "id": item.id} for item in request.updates]
        result = await use_case(BulkUpdateEntitiesUseCase, uow, scope).execute(items)
        response = _unwrap(result)

        publish_change(bus, scope.topic, kind, "bulk", ChangeVerb.updated, response.items)
        return response

    if descriptor.supports_active:

        @router.put("/bulk/active", response_model=BulkEntitiesResponse)
        async def bulk_set_active(
            request: BulkActiveRequest,
            scope: EntityScope = Depends(write_scope),
            uow: UnitOfWork = Depends(get_unit_of_work),
            bus: IEventBus = Depends(get_event_bus),
        ):
            result = await use_case(BulkActiveUseCase, uow, scope).execute(
                request.ids, request.is_active
            )
            response = _unwrap(result)

            publish_change(bus, scope.topic, kind, "bulk", ChangeVerb.updated, response.items)
            return response

    if descriptor.supports_tags:

        @router.put("/bulk/tags/add", response_model=BulkEntitiesResponse)
        async def bulk_add_tags(
            request: BulkTagsRequest,
            scope: EntityScope = Depends(write_scope),
            uow: UnitOfWork = Depends(get_unit_of_work),
            bus: IEventBus = Depends(get_event_bus),
        ):
            result = await use_case(BulkTagsUseCase, uow, scope).execute(
                request.ids, request.tags, add=True
            )
            response = _unwrap(result)

            publish_change(bus, scope.topic, kind, "bulk", ChangeVerb.updated, response.items)
            return response

        @router.put("/bulk/tags/remove", response_model=BulkEntitiesResponse)
        async def bulk_remove_tags(
            request: BulkTagsRequest,
            scope: EntityScope = Depends(write_scope),
            uow: UnitOfWork = Depends(get_unit_of_work),
            bus: IEventBus = Depends(get_event_bus),
        ):
            result = await use_case(BulkTagsUseCase, uow, scope).execute(
                request.ids, request.tags, add=False
            )
            response = _unwrap(result)

            publish_change(bus, scope.topic, kind, "bulk", ChangeVerb.updated, response.items)
            return response

    @router.post("/bulk/delete", response_model=BulkDeleteResponse)
    async def bulk_delete_entities(
        request: BulkIdsRequest,
        scope: EntityScope = Depends(write_scope),
        uow: UnitOfWork = Depends(get_unit_of_work),
        bus: IEventBus = Depends(get_event_bus),
    ):
        result = await use_case(BulkDeleteEntitiesUseCase, uow, scope).execute(request.ids)
        response = _unwrap(result)

        if response.deleted_count:
            publish_change(bus, scope.topic, kind, "bulk", ChangeVerb.deleted, request.ids)
        return response

    # ------------------------------------------------------------------
    # Single document
    # ------------------------------------------------------------------

    @router.post("", status_code=status.HTTP_201_CREATED, response_model=model)
    async def create_entity(
        data: Dict[str, Any] = Body(...),
        scope: EntityScope = Depends(write_scope),
        uow: UnitOfWork = Depends(get_unit_of_work),
        bus: IEventBus = Depends(get_event_bus),
    ):
        """
        Raises:
            - 400 Bad Request: VALIDATION_ERROR, DUPLICATE_KEY
            - 401 Unauthorized: AUTH_REQUIRED, TENANT_REQUIRED
        """
        result = await use_case(
            CreateEntityUseCase,
            uow,
            scope,
            school_db_prefix=ApplicationConfig.SCHOOL_DB_PREFIX,
        ).execute(data, overrides=scope.overrides)
        created = _unwrap(result)

        publish_change(bus, scope.topic, kind, created.id, ChangeVerb.created, created)
        return created

    @router.get("/{entity_id}", response_model=model)
    async def get_entity(
        entity_id: str,
        scope: EntityScope = Depends(read_scope),
        uow: UnitOfWork = Depends(get_unit_of_work),
    ):
        """
        Raises:
            - 400 Bad Request: INVALID_ID
            - 404 Not Found: NOT_FOUND
        """
        result = await use_case(GetEntityUseCase, uow, scope).execute(entity_id)
        return _unwrap(result)

    @router.get("/{entity_id}/with-relations")
    async def get_entity_with_relations(
        entity_id: str,
        scope: EntityScope = Depends(read_scope),
        uow: UnitOfWork = Depends(get_unit_of_work),
    ):
        result = await use_case(GetEntityUseCase, uow, scope).execute(
            entity_id, with_relations=True
        )
        return _unwrap(result)

    @router.put("/{entity_id}", response_model=model)
    async def update_entity(
        entity_id: str,
        data: Dict[str, Any] = Body(...),
        scope: EntityScope = Depends(write_scope),
        uow: UnitOfWork = Depends(get_unit_of_work),
        bus: IEventBus = Depends(get_event_bus),
    ):
        """
        Raises:
            - 400 Bad Request: INVALID_ID, VALIDATION_ERROR, DUPLICATE_KEY
            - 404 Not Found: NOT_FOUND
        """
        result = await use_case(UpdateEntityUseCase, uow, scope).execute(entity_id, data)
        updated = _unwrap(result)

        publish_change(bus, scope.topic, kind, entity_id, ChangeVerb.updated, updated)
        return updated

    @router.delete("/{entity_id}", response_model=DeleteEntityResponse)
    async def delete_entity(
        entity_id: str,
        scope: EntityScope = Depends(write_scope),
        uow: UnitOfWork = Depends(get_unit_of_work),
        bus: IEventBus = Depends(get_event_bus),
    ):
        result = await use_case(DeleteEntityUseCase, uow, scope).execute(entity_id)
        response = _unwrap(result)

        publish_change(bus, scope.topic, kind, entity_id, ChangeVerb.deleted)
        return response

    return router


def entity_routers() -> List[APIRouter]:
    """Every collection router of the catalogue"""
    routers = []
    for descriptor in ENTITY_DESCRIPTORS:
        if descriptor.is_tenant_scoped:
            routers.append(
                build_entity_router(
                    descriptor,
                    f"/school/{descriptor.path}",
                    read_scope=tenant_scope,
                    write_scope=tenant_scope,
                )
            )
            routers.append(
                build_entity_router(
                    descriptor,
                    f"/school/{{school_id}}/{descriptor.path}",
                    read_scope=tenant_scope,
                    write_scope=tenant_scope,
                )
            )
        else:
            routers.append(build_entity_router(descriptor, f"/{descriptor.path}"))
    return routers
