"""
Entity descriptors.

A descriptor is everything the generic repository and router need to know
about one collection: where it lives, how it is searched, which keys are
unique, which fields hold ids, which indexes it carries and how it joins
to other collections.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type

from pydantic import BaseModel


class Scope(str, Enum):
    """Which database a collection lives in"""

    GLOBAL = "global"
    TENANT = "tenant"


@dataclass(frozen=True, eq=False)
class IndexSpec:
    keys: Tuple[Tuple[str, int], ...]
    name: Optional[str] = None
    unique: bool = False
    sparse: bool = False
    ttl_seconds: Optional[int] = None
    partial_filter: Optional[Dict[str, Any]] = None

    @property
    def index_name(self) -> str:
        if self.name:
            return self.name
        return "_".join(f"{key}_{direction}" for key, direction in self.keys)

    def options(self) -> Dict[str, Any]:
        """Keyword arguments for ``create_index``"""
        options: Dict[str, Any] = {"name": self.index_name}
        if self.unique:
            options["unique"] = True
        if self.sparse:
            options["sparse"] = True
        if self.ttl_seconds is not None:
            options["expireAfterSeconds"] = self.ttl_seconds
        if self.partial_filter is not None:
            options["partialFilterExpression"] = self.partial_filter
        return options


def index(*keys, **options) -> IndexSpec:
    """``index("email")``, ``index(("created_at", -1))``, ``index("a", "b", unique=True)``"""
    normalized = tuple(key if isinstance(key, tuple) else (key, 1) for key in keys)
    return IndexSpec(keys=normalized, **options)


@dataclass(frozen=True)
class Relation:
    """Left join to another collection of the same database"""

    name: str
    collection: str
    local_field: str
    foreign_field: str = "_id"
    many: bool = False


@dataclass(frozen=True, eq=False)
class EntityDescriptor:
    kind: str
    collection: str
    path: str
    scope: Scope
    model: Type[BaseModel]
    patch_model: Type[BaseModel]
    search_fields: Tuple[str, ...] = ()
    unique_keys: Tuple[Tuple[str, ...], ...] = ()
    lookup_keys: Tuple[str, ...] = ()
    object_id_fields: Tuple[str, ...] = ()
    indexes: Tuple[IndexSpec, ...] = ()
    relations: Tuple[Relation, ...] = ()
    tag: str = field(default="")

    @property
    def is_tenant_scoped(self) -> bool:
        return self.scope == Scope.TENANT

    @property
    def supports_tags(self) -> bool:
        return "tags" in self.model.model_fields

    @property
    def supports_active(self) -> bool:
        return "is_active" in self.model.model_fields
