"""
Database registry.

One motor client per process; one database handle per logical database,
created on first use and cached. The global database holds users, schools
and join requests; every school gets its own database.
"""

import logging
import threading
from typing import Dict

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from space_together.domain.errors import AppError

logger = logging.getLogger(__name__)

_FORBIDDEN_NAME_CHARS = set('/\\. "$*<>:|?')
_MAX_NAME_LENGTH = 63


class DatabaseRegistry:
    def __init__(self, client: AsyncIOMotorClient, main_db_name: str):
        self._client = client
        self._main_db_name = main_db_name
        self._databases: Dict[str, AsyncIOMotorDatabase] = {}
        self._lock = threading.Lock()
        self._closed = False

    @classmethod
    def from_config(cls, config) -> "DatabaseRegistry":
        client = AsyncIOMotorClient(
            config.MONGO_URI,
            timeoutMS=config.STORE_TIMEOUT_MS,
            serverSelectionTimeoutMS=config.STORE_TIMEOUT_MS,
        )
        logger.info(f"Database registry ready (main database: {config.MAIN_DB_NAME})")
        return cls(client, config.MAIN_DB_NAME)

    @property
    def main_db_name(self) -> str:
        return self._main_db_name

    def main_db(self) -> AsyncIOMotorDatabase:
        return self.get_db(self._main_db_name)

    def get_db(self, name: str) -> AsyncIOMotorDatabase:
        """Same name, same handle. Fails with TENANT_UNAVAILABLE."""
        database = self._databases.get(name)
        if database is not None:
            return database

        if self._closed:
            raise AppError("TENANT_UNAVAILABLE", "Database client is closed")
        if not _is_valid_name(name):
            raise AppError(
                "TENANT_UNAVAILABLE",
                "Tenant database is unavailable",
                reason=f"invalid database name {name!r}",
            )

        with self._lock:
            database = self._databases.get(name)
            if database is None:
                database = self._client[name]
                self._databases[name] = database
                logger.debug(f"Opened database handle {name}")
        return database

    def known_databases(self):
        return sorted(self._databases)

    def close(self):
        self._closed = True
        self._databases.clear()
        self._client.close()


def _is_valid_name(name) -> bool:
    if not isinstance(name, str) or not name:
        return False
    if len(name) > _MAX_NAME_LENGTH:
        return False
    return not any(ch in _FORBIDDEN_NAME_CHARS for ch in name)
