from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from taskboard.core.timestamps import seconds_to_datetime

TaskStatus = Literal["todo", "in-progress", "done"]

MAX_TITLE = 200
MAX_DESCRIPTION = 2000


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _TaskFields(_WireModel):
    @field_validator("title", mode="before", check_fields=False)
    @classmethod
    def title_required(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Title is required")
        return _strip(v)

    @field_validator("title", check_fields=False)
    @classmethod
    def title_length(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            raise ValueError("Title is required")
        if len(v) > MAX_TITLE:
            raise ValueError(f"Title cannot exceed {MAX_TITLE} characters")
        return v

    @field_validator("description", mode="before", check_fields=False)
    @classmethod
    def description_trim(cls, v: Any) -> Any:
        if v is None:
            return ""
        return _strip(v)

    @field_validator("description", check_fields=False)
    @classmethod
    def description_length(cls, v: str) -> str:
        if len(v) > MAX_DESCRIPTION:
            raise ValueError(f"Description cannot exceed {MAX_DESCRIPTION} characters")
        return v

    @field_validator("status", mode="before", check_fields=False)
    @classmethod
    def status_not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Status must be one of: todo, in-progress, done")
        return v

    @field_validator("priority", check_fields=False)
    @classmethod
    def priority_range(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not 1 <= v <= 9:
            raise ValueError("Priority must be between 1 and 9")
        return v

    @field_validator("due_date", check_fields=False)
    @classmethod
    def due_date_in_range(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and seconds_to_datetime(v) is None:
            raise ValueError("Due date is not a valid date")
        return v


class TaskCreate(_TaskFields):
    title: str
    description: str = ""
    status: TaskStatus = "todo"
    priority: Optional[int] = None
    due_date: Optional[int] = None


class TaskUpdate(_TaskFields):
    """Partial update; only fields present in the request body are applied.

    An explicit null for ``priority`` or ``dueDate`` clears that field.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[int] = None
    due_date: Optional[int] = None

    def to_patch(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.model_fields_set}


class TaskOut(_WireModel):
    id: str
    title: str
    description: str
    status: TaskStatus
    priority: Optional[int] = None
    due_date: Optional[int] = None
    created_at: int
    updated_at: int


class TaskDeleted(BaseModel):
    ok: bool = True
    id: str
    message: str = "Task deleted successfully"
