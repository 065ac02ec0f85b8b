class AlignmentEngineError(Exception):
    """Base exception for the alignment engine."""

    pass


class PersistenceError(AlignmentEngineError):
    """Raised when a store read or write fails.

    Propagates out of the recalculation so the job system can redeliver.
    """

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Persistence failure during '{operation}'{detail}")


class NotificationError(AlignmentEngineError):
    """Raised when a notification cannot be handed to the delivery transport."""

    pass


class InvalidJobError(AlignmentEngineError):
    """Raised when a queued job payload cannot be parsed."""

    pass
