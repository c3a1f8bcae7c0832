"""JSON error responses shared by all endpoints."""

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse

GENERIC_ERROR = "Failed to complete the operation."
EXPORT_ERROR = "Failed to generate export."


def error_response(status_code: int, message: str, **extra: Any) -> ORJSONResponse:
    """Build the ``{success: false, error}`` body used for every failure."""
    return ORJSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, **extra},
    )


def _field_name(loc: tuple[Any, ...]) -> str:
    # Drop the "query"/"body"/"path" source marker
    parts = [str(part) for part in loc[1:]] or [str(part) for part in loc]
    return ".".join(parts)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    """Report malformed parameters as 400 naming the offending input."""
    errors = exc.errors()
    details = [
        {"field": _field_name(tuple(err.get("loc", ()))), "message": err.get("msg", "")}
        for err in errors
    ]
    if details:
        first = details[0]
        message = f"Invalid value for '{first['field']}': {first['message']}"
    else:
        message = "Invalid request."
    return error_response(400, message, details=details)
