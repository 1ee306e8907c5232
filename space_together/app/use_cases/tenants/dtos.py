"""
Tenant Use Case DTOs
"""

from typing import Any

from pydantic import BaseModel, ConfigDict

from space_together.domain.entities import TenantCredential


class TenantContext(BaseModel):
    """The school a request runs against and the database it reads from"""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    tenant_id: str
    database_name: str
    credential: TenantCredential
    database: Any = None
