"""
Resolve Tenant Use Case

Picks the school database for a per-school request from the verified school
token.
"""

import logging
from typing import Optional

from space_together.domain.entities import TenantCredential
from space_together.domain.errors import AppError
from space_together.domain.ids import is_valid_hex
from space_together.libs.result import Error, Result, Return

from .dtos import TenantContext

logger = logging.getLogger(__name__)


class ResolveTenantUseCase:
    """
    Use case for turning a school credential into a tenant context.

    Business Rules:
    - A school token is required on every per-school route
    - tenant_id must be a valid id
    - The credential must name its database
    - When the route names a school, it must be the credential's school
    - The database always comes from the credential, never from the path
    """

    def __init__(self, registry):
        self.registry = registry

    async def execute(
        self,
        credential: Optional[TenantCredential],
        path_school_id: Optional[str] = None,
    ) -> Result[TenantContext]:
        if credential is None:
            return Return.err(Error("TENANT_REQUIRED", "School token required"))

        if not is_valid_hex(credential.tenant_id):
            return Return.err(Error("BAD_TENANT_ID", "Invalid school id in school token"))

        if not credential.database_name:
            return Return.err(
                Error("TENANT_REQUIRED", "School token does not name a school database")
            )

        if path_school_id is not None and path_school_id != credential.tenant_id:
            logger.warning(
                f"School {credential.tenant_id} token used against school {path_school_id}"
            )
            return Return.err(
                Error("CROSS_TENANT_FORBIDDEN", "School token does not grant access to this school")
            )

        try:
            database = self.registry.get_db(credential.database_name)
        except AppError as exc:
            return Return.err(exc.error)

        return Return.ok(
            TenantContext(
                tenant_id=credential.tenant_id,
                database_name=credential.database_name,
                credential=credential,
                database=database,
            )
        )
