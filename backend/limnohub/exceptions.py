"""Application exceptions.

Errors that cross a service boundary carry a short machine-readable code
next to the human-readable message, so the HTTP layer can map them to a
status code without inspecting the text.
"""


class LimnoError(Exception):
    """Base exception for limnohub errors."""

    def __init__(self, message: str, code: str = "LIMNO_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidFilterError(LimnoError):
    """A filter value could not be converted to its column type.

    Raised while coercing request filters, before any query is built.
    """

    def __init__(self, key: str, value: object):
        self.key = key
        self.value = value
        super().__init__(
            message=f"Invalid value for filter '{key}': {value!r}",
            code="INVALID_FILTER",
        )


class ExportGenerationError(LimnoError):
    """The export file could not be produced.

    The message is intentionally generic; the underlying failure is logged
    where it happens and is not exposed to callers.
    """

    def __init__(self) -> None:
        super().__init__(
            message="Failed to generate export file.",
            code="EXPORT_FAILED",
        )
