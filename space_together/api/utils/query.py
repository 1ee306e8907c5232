from enum import Enum
from typing import Optional, Type, TypeVar

from fastapi import status

from config import ApplicationConfig
from space_together.api.error import ClientError
from space_together.libs.result import Error

E = TypeVar("E", bound=Enum)


def parse_enum(enum_type: Type[E], value: Optional[str], code: str) -> Optional[E]:
    """Case-insensitive enum lookup for path and query strings"""
    if value is None or value == "":
        return None
    for member in enum_type:
        if member.value.lower() == value.strip().lower():
            return member
    allowed = ", ".join(member.value for member in enum_type)
    raise ClientError(
        Error(code, f"Invalid value {value!r}. Must be one of: {allowed}"),
        status_code=status.HTTP_400_BAD_REQUEST,
    )


def page_limit(limit: Optional[int]) -> int:
    return limit or ApplicationConfig.DEFAULT_PAGE_LIMIT
