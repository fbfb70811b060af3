class AppException(Exception):
    """Base application exception."""

    pass


class NotFoundError(AppException):
    """Resource not found exception."""

    pass


class ValidationError(AppException):
    """Required field missing or invalid."""

    pass


class ParseError(AppException):
    """Malformed input that could not be decoded."""

    pass


class ConflictError(AppException):
    """Resource already exists."""

    pass


class DependencyError(AppException):
    """An external dependency (scheduler, event bus, metering, store) failed."""

    pass


class BatchError(AppException):
    """One or more tasks of a fan-out failed after every sibling settled."""

    noun = "tasks"

    def __init__(self, failed_count: int, total_count: int):
        self.failed_count = failed_count
        self.total_count = total_count
        super().__init__(
            f"{failed_count} of {total_count} {self.noun} failed"
            f" ({'total' if self.is_total_failure else 'partial'} failure)"
        )

    @property
    def is_total_failure(self) -> bool:
        return self.failed_count >= self.total_count


class BatchSchedulingError(BatchError):
    """Scheduling or removing deferred triggers failed for some items."""

    noun = "subscription item triggers"


class PartialSendError(BatchError):
    """Some meter events were rejected by the metering API."""

    noun = "meter events"
