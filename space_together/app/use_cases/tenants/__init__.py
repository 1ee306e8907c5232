"""
Tenant Use Cases

Selection of the school database a request runs against.
"""

from .dtos import TenantContext
from .resolve_tenant_use_case import ResolveTenantUseCase

__all__ = [
    "ResolveTenantUseCase",
    "TenantContext",
]
