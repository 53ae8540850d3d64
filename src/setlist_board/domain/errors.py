"""Error taxonomy for session board mutations."""


class BoardError(Exception):
    """Base class for errors reported back to the requesting participant."""

    @property
    def message(self) -> str:
        """Return the participant-facing message."""
        return str(self)


class ValidationError(BoardError):
    """Raised when a request is malformed and must not reach storage."""


class AuthorizationError(BoardError):
    """Raised when the caller may not perform the requested mutation."""


class StorageError(BoardError):
    """Raised when a storage backend fails, times out or cannot commit."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class UnsupportedOperationError(BoardError):
    """Raised when the configured backend cannot perform an operation."""
