from typing import Any, Mapping, Optional

GENERIC_ERROR_MESSAGE = "Something went wrong."


class TaskboardError(Exception):
    """Base class for every error the task client reports to its caller."""

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ValidationError(TaskboardError):
    """Raised before any request is sent when user input is rejected locally."""

    def __init__(self, errors: Mapping[str, str]):
        self.errors = dict(errors)
        first = next(iter(self.errors.values()), "Invalid input")
        super().__init__(first)


class TransportError(TaskboardError):
    """Raised when a request was sent but failed or was rejected by the server."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message or GENERIC_ERROR_MESSAGE, cause=cause)
        self.status_code = status_code


class NotFoundError(TransportError):
    """The persistence side no longer has the requested task."""

    def __init__(self, message: Optional[str] = None, *, cause: Optional[BaseException] = None):
        super().__init__(message or "Task not found", status_code=404, cause=cause)


class MutationFailed(TaskboardError):
    """A create/update/delete failed and its optimistic patch was reverted.

    ``fields`` holds the values the user submitted, untouched, so a form can
    stay open with them.
    """

    def __init__(
        self,
        op: str,
        message: str,
        *,
        fields: Optional[Mapping[str, Any]] = None,
        task_id: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause=cause)
        self.op = op
        self.fields = dict(fields or {})
        self.task_id = task_id
