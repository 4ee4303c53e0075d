"""Application error types."""


class CenterStageError(Exception):
    """Base class for errors surfaced to API callers."""


class ValidationError(CenterStageError):
    """Raised when input fails validation."""

    def __init__(
        self, message: str, details: list[dict[str, object]] | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or []


class NotFoundError(CenterStageError):
    """Raised when a referenced record does not exist."""

    def __init__(self, entity: str, entity_id: object) -> None:
        super().__init__(f"{entity.capitalize()} not found")
        self.entity = entity
        self.entity_id = entity_id


class ForbiddenError(CenterStageError):
    """Raised when the acting user may not perform an operation."""


class RateLimitedError(CenterStageError):
    """Raised when a client exceeded its request budget."""

    def __init__(self, reset_time: int, retry_after: int) -> None:
        super().__init__(f"Too many requests, retry in {retry_after}s")
        self.reset_time = reset_time
        self.retry_after = retry_after


class TransientFetchError(CenterStageError):
    """Raised when a remote fetch fails and may succeed later."""


class ConfirmationMismatchError(CenterStageError):
    """Raised when a destructive action was not confirmed with the exact name."""

    def __init__(self, expected: str) -> None:
        super().__init__("Project name confirmation does not match")
        self.expected = expected
