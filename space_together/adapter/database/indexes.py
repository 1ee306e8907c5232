"""
Index manager.

Indexes are declared next to the collection (see the descriptor catalogue)
and created the first time a repository touches the collection in this
process. Creating an index that already exists is a no-op on the server; the
only races left are two processes creating the same index with different
options, which are logged and ignored.
"""

import logging
from typing import Iterable, Set, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import OperationFailure, PyMongoError

from space_together.adapter.database.errors import store_error
from space_together.domain.descriptors import IndexSpec

logger = logging.getLogger(__name__)

# IndexAlreadyExists, IndexOptionsConflict, IndexKeySpecsConflict
_TOLERATED_CODES = {68, 85, 86}


def is_tolerated_index_error(exc: OperationFailure) -> bool:
    message = str(exc)
    return (
        exc.code in _TOLERATED_CODES
        or "already exists" in message
        or "IndexKeySpecsConflict" in message
        or "IndexOptionsConflict" in message
    )


class IndexManager:
    def __init__(self):
        self._ensured: Set[Tuple[str, str]] = set()

    def is_ensured(self, database_name: str, collection_name: str) -> bool:
        return (database_name, collection_name) in self._ensured

    async def ensure(
        self,
        database: AsyncIOMotorDatabase,
        collection_name: str,
        specs: Iterable[IndexSpec],
    ) -> None:
        key = (database.name, collection_name)
        if key in self._ensured:
            return

        collection = database[collection_name]
        for spec in specs:
            await self._create(collection, spec)

        self._ensured.add(key)
        logger.info(f"Indexes ensured for {database.name}.{collection_name}")

    async def _create(self, collection, spec: IndexSpec) -> None:
        try:
            await collection.create_index(list(spec.keys), **spec.options())
        except OperationFailure as exc:
            if is_tolerated_index_error(exc):
                logger.warning(
                    f"Index {spec.index_name} on {collection.name} already present: {exc}"
                )
                return
            raise store_error(exc, f"create index {spec.index_name}") from exc
        except PyMongoError as exc:
            raise store_error(exc, f"create index {spec.index_name}") from exc
