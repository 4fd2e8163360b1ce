"""Typed failures raised by the conversation store and its collaborators."""


class ManualChatError(Exception):
    """Base class for all manualchat errors."""


class NotFoundError(ManualChatError):
    """An explicitly referenced record does not exist."""

    def __init__(self, resource: str = "Resource", id: str | None = None) -> None:
        self.resource = resource
        self.id = id
        detail = f"{resource} not found" if id is None else f"{resource} with id {id} not found"
        super().__init__(detail)


class PersistenceError(ManualChatError):
    """Connectivity or constraint failure in the storage engine.

    The original driver exception is kept as ``__cause__``; the message itself
    never carries a connection string.
    """


class DatabaseNotConfiguredError(PersistenceError):
    """Raised on the first query against the placeholder engine."""

    def __init__(self) -> None:
        super().__init__(
            "Database not configured. Set FRONTEND_DATABASE_URL or FRONTEND_POSTGRES_URL."
        )


class RateLimitExceededError(ManualChatError):
    def __init__(self, limit: int, window_hours: int) -> None:
        self.limit = limit
        self.window_hours = window_hours
        super().__init__(f"Message limit of {limit} per {window_hours}h reached")


class InferenceError(ManualChatError):
    """The inference backend failed or answered with an error status."""

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(detail)


class InferenceTimeoutError(InferenceError):
    pass
