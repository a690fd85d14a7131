"""Domain exceptions shared by the API, service and server layers."""


class AptEvalError(Exception):
    """Base class for application errors."""


class ValidationError(AptEvalError):
    """Client input is missing or malformed.

    ``field`` names the offending input so the API can echo it back.
    """

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class StorageError(AptEvalError):
    """The persistence layer failed (I/O, constraint, driver)."""


class StartupError(AptEvalError):
    """The process cannot start serving traffic."""
