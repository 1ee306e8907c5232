"""
Entity CRUD Use Cases

Single-document operations for every collection in the descriptor
catalogue. The descriptor decides the model, the update model and the
database scope; the use cases only validate and delegate.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError

from space_together.app.use_cases.validation import validation_error
from space_together.domain.entities import School, school_db_name_from_id
from space_together.domain.errors import AppError
from space_together.domain.ids import IdType
from space_together.libs.result import Error, Result, Return

from .base import EntityUseCase, to_page
from .dtos import DeleteEntityResponse, EntityCountResponse, EntityPage

logger = logging.getLogger(__name__)


def prepare_entity(entity: BaseModel, school_db_prefix: str = "school_") -> BaseModel:
    """A new school gets its id and database name up front; both never change"""
    if isinstance(entity, School) and not entity.database_name:
        entity.id = entity.id or IdType.new().as_hex()
        entity.database_name = school_db_name_from_id(entity.id, school_db_prefix)
    return entity


def build_entity(model, data: Dict[str, Any], overrides: Optional[Dict[str, Any]] = None):
    payload = dict(data)
    payload.pop("id", None)
    payload.pop("_id", None)
    if overrides:
        payload.update(
            {key: value for key, value in overrides.items() if key in model.model_fields}
        )
    return model.model_validate(payload)


class ListEntitiesUseCase(EntityUseCase):
    """
    Search a collection, most recently updated first.

    Business Rules:
    - filter matches case-insensitively across the declared search fields
    - with_relations joins the declared relations; missing targets are null
    """

    async def execute(
        self,
        filter: Optional[str] = None,
        limit: Optional[int] = None,
        skip: int = 0,
        with_relations: bool = False,
        extra_match: Optional[Dict[str, Any]] = None,
    ) -> Result[EntityPage]:
        async with self.uow:
            try:
                repository = self.repository()
                if with_relations:
                    page = await repository.list_with_relations(filter, limit, skip, extra_match)
                else:
                    page = await repository.list(filter, limit, skip, extra_match)
            except AppError as exc:
                return Return.err(exc.error)

        return Return.ok(to_page(page))


class CountEntitiesUseCase(EntityUseCase):
    async def execute(
        self, filter: Optional[str] = None, extra_match: Optional[Dict[str, Any]] = None
    ) -> Result[EntityCountResponse]:
        async with self.uow:
            try:
                count = await self.repository().count(filter, extra_match)
            except AppError as exc:
                return Return.err(exc.error)

        return Return.ok(EntityCountResponse(count=count))


class GetEntityUseCase(EntityUseCase):
    async def execute(self, entity_id: str, with_relations: bool = False) -> Result:
        async with self.uow:
            try:
                repository = self.repository()
                if with_relations:
                    entity = await repository.find_with_relations(entity_id)
                else:
                    entity = await repository.find_by_id(entity_id)
            except AppError as exc:
                return Return.err(exc.error)

        if entity is None:
            return Return.err(Error("NOT_FOUND", f"{self.descriptor.kind} not found"))
        return Return.ok(entity)


class CreateEntityUseCase(EntityUseCase):
    """
    Create one document.

    Business Rules:
    - The body is validated against the descriptor's model
    - overrides (school of the token, creator) win over the body
    - Unique indexes reject duplicates as DUPLICATE_KEY
    """

    def __init__(self, uow, descriptor, database_name=None, school_db_prefix: str = "school_"):
        super().__init__(uow, descriptor, database_name)
        self.school_db_prefix = school_db_prefix

    async def execute(
        self, data: Dict[str, Any], overrides: Optional[Dict[str, Any]] = None
    ) -> Result:
        try:
            entity = build_entity(self.descriptor.model, data, overrides)
        except ValidationError as exc:
            return Return.err(validation_error(exc, f"Invalid {self.descriptor.kind}"))
        entity = prepare_entity(entity, self.school_db_prefix)

        async with self.uow:
            try:
                created = await self.repository().insert(entity)
            except AppError as exc:
                return Return.err(exc.error)

        logger.info(f"Created {self.descriptor.kind} {created.id}")
        return Return.ok(created)


class UpdateEntityUseCase(EntityUseCase):
    """
    Partial update of one document.

    Business Rules:
    - Only fields present in the body change; null never overwrites
    """

    async def execute(self, entity_id: str, data: Dict[str, Any]) -> Result:
        try:
            patch = self.descriptor.patch_model.model_validate(data)
        except ValidationError as exc:
            return Return.err(validation_error(exc, f"Invalid {self.descriptor.kind} update"))

        async with self.uow:
            try:
                updated = await self.repository().update(entity_id, patch)
            except AppError as exc:
                return Return.err(exc.error)

        logger.info(f"Updated {self.descriptor.kind} {entity_id}")
        return Return.ok(updated)


class DeleteEntityUseCase(EntityUseCase):
    async def execute(self, entity_id: str) -> Result[DeleteEntityResponse]:
        async with self.uow:
            try:
                await self.repository().delete(entity_id)
            except AppError as exc:
                return Return.err(exc.error)

        logger.info(f"Deleted {self.descriptor.kind} {entity_id}")
        return Return.ok(DeleteEntityResponse(status="deleted"))
