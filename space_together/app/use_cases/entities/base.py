from typing import Optional

from space_together.app.services.unit_of_work import UnitOfWork
from space_together.domain.descriptors import EntityDescriptor

from .dtos import EntityPage


class EntityUseCase:
    """Base for use cases that run against one descriptor's collection"""

    def __init__(
        self,
        uow: UnitOfWork,
        descriptor: EntityDescriptor,
        database_name: Optional[str] = None,
    ):
        self.uow = uow
        self.descriptor = descriptor
        self.database_name = database_name

    def repository(self):
        return self.uow.repository(self.descriptor, self.database_name)


def to_page(page) -> EntityPage:
    return EntityPage(
        items=page.items,
        total=page.total,
        total_pages=page.total_pages,
        current_page=page.current_page,
    )
