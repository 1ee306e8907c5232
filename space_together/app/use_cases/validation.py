from pydantic import ValidationError

from space_together.libs.result import Error


def validation_error(exc: ValidationError, message: str = "Invalid request body") -> Error:
    """pydantic errors as a VALIDATION_ERROR with {loc, msg, type} details"""
    details = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    return Error("VALIDATION_ERROR", message, details=details)
