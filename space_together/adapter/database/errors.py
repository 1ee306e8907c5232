import logging
from contextlib import contextmanager

from pymongo.errors import DuplicateKeyError, PyMongoError

from space_together.domain.errors import AppError

logger = logging.getLogger(__name__)


def duplicate_key_error(exc: DuplicateKeyError) -> AppError:
    details = exc.details or {}
    key_value = details.get("keyValue") or {}
    fields = ", ".join(key_value) or "unique key"
    return AppError(
        "DUPLICATE_KEY",
        f"Duplicate value for {fields}",
        reason=details.get("errmsg", str(exc)),
        details={
            "index": _index_name(details.get("errmsg", str(exc))),
            "key": {k: str(v) for k, v in key_value.items()},
        },
    )


def _index_name(errmsg: str):
    marker = "index: "
    if marker not in errmsg:
        return None
    return errmsg.split(marker, 1)[1].split(" ", 1)[0]


def store_error(exc: PyMongoError, operation: str) -> AppError:
    if isinstance(exc, DuplicateKeyError):
        return duplicate_key_error(exc)
    if getattr(exc, "timeout", False):
        logger.error(f"Store timeout during {operation}: {exc}")
        return AppError(
            "STORE_TIMEOUT", "Database operation timed out", reason=str(exc)
        )
    logger.error(f"Store failure during {operation}: {exc}")
    return AppError("STORE_FAILURE", "Database operation failed", reason=str(exc))


@contextmanager
def store_call(operation: str):
    """Translate driver errors raised inside the block into AppError"""
    try:
        yield
    except PyMongoError as exc:
        raise store_error(exc, operation) from exc
