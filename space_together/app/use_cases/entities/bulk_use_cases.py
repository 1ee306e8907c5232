"""
Entity Bulk Use Cases

Batch operations over one collection: create, update, delete, tags and
the active flag.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from space_together.app.use_cases.validation import validation_error
from space_together.domain.errors import AppError
from space_together.libs.result import Error, Result, Return

from .base import EntityUseCase
from .crud_use_cases import build_entity, prepare_entity
from .dtos import BulkCreateEntitiesResponse, BulkDeleteResponse, BulkEntitiesResponse

logger = logging.getLogger(__name__)


def _empty_batch() -> Error:
    return Error("EMPTY_BATCH", "No items given")


class BulkCreateEntitiesUseCase(EntityUseCase):
    """
    Create many documents.

    Business Rules:
    - Every entry is validated before anything is written
    - validate=True checks the declared unique keys within the batch and
      against the store first, and writes nothing on a conflict
    - validate=False inserts in order and reports where the store stopped
    """

    def __init__(self, uow, descriptor, database_name=None, school_db_prefix: str = "school_"):
        super().__init__(uow, descriptor, database_name)
        self.school_db_prefix = school_db_prefix

    async def execute(
        self,
        items: List[Dict[str, Any]],
        validate: bool = True,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Result[BulkCreateEntitiesResponse]:
        if not items:
            return Return.err(_empty_batch())

        entities = []
        for index, item in enumerate(items):
            try:
                entity = build_entity(self.descriptor.model, item, overrides)
            except ValidationError as exc:
                return Return.err(
                    validation_error(exc, f"Invalid {self.descriptor.kind} at index {index}")
                )
            entities.append(prepare_entity(entity, self.school_db_prefix))

        async with self.uow:
            try:
                repository = self.repository()
                if validate:
                    inserted = await repository.create_many_with_validation(entities)
                    response = BulkCreateEntitiesResponse(
                        inserted=inserted, inserted_count=len(inserted)
                    )
                else:
                    result = await repository.create_many(entities)
                    response = BulkCreateEntitiesResponse(
                        inserted=result.inserted,
                        inserted_count=len(result.inserted),
                        failed_index=result.failed_index,
                        reason=result.reason,
                    )
            except AppError as exc:
                return Return.err(exc.error)

        logger.info(f"Bulk created {response.inserted_count} {self.descriptor.kind}(s)")
        return Return.ok(response)


class BulkUpdateEntitiesUseCase(EntityUseCase):
    """
    Apply a patch per document.

    Business Rules:
    - Each item carries its id plus the fields to change
    - Items that fail are skipped; none succeeding is NO_UPDATES
    """

    async def execute(self, items: List[Dict[str, Any]]) -> Result[BulkEntitiesResponse]:
        if not items:
            return Return.err(_empty_batch())

        updates = []
        for index, item in enumerate(items):
            body = dict(item)
            entity_id = body.pop("id", None)
            if not entity_id:
                return Return.err(Error("VALIDATION_ERROR", f"Missing id at index {index}"))
            try:
                updates.append((entity_id, self.descriptor.patch_model.model_validate(body)))
            except ValidationError as exc:
                return Return.err(
                    validation_error(exc, f"Invalid {self.descriptor.kind} update at index {index}")
                )

        async with self.uow:
            try:
                updated = await self.repository().update_many(updates)
            except AppError as exc:
                return Return.err(exc.error)

        return Return.ok(BulkEntitiesResponse(items=updated, count=len(updated)))


class BulkDeleteEntitiesUseCase(EntityUseCase):
    async def execute(self, entity_ids: Sequence[str]) -> Result[BulkDeleteResponse]:
        if not entity_ids:
            return Return.err(_empty_batch())

        async with self.uow:
            try:
                deleted = await self.repository().delete_many(entity_ids)
            except AppError as exc:
                return Return.err(exc.error)

        logger.info(f"Bulk deleted {deleted} {self.descriptor.kind}(s)")
        return Return.ok(BulkDeleteResponse(deleted_count=deleted))


class BulkTagsUseCase(EntityUseCase):
    """Add or remove tags on many documents; tags already present are not repeated"""

    async def execute(
        self, entity_ids: Sequence[str], tags: Sequence[str], add: bool = True
    ) -> Result[BulkEntitiesResponse]:
        if not entity_ids:
            return Return.err(_empty_batch())

        async with self.uow:
            try:
                repository = self.repository()
                if add:
                    items = await repository.add_tags(entity_ids, tags)
                else:
                    items = await repository.remove_tags(entity_ids, tags)
            except AppError as exc:
                return Return.err(exc.error)

        return Return.ok(BulkEntitiesResponse(items=items, count=len(items)))


class BulkActiveUseCase(EntityUseCase):
    async def execute(
        self, entity_ids: Sequence[str], is_active: bool
    ) -> Result[BulkEntitiesResponse]:
        if not entity_ids:
            return Return.err(_empty_batch())

        async with self.uow:
            try:
                items = await self.repository().set_active(entity_ids, is_active)
            except AppError as exc:
                return Return.err(exc.error)

        return Return.ok(BulkEntitiesResponse(items=items, count=len(items)))
