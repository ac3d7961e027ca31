"""Task, project, activity and user data models.

Python attributes are snake_case; the JSON wire format uses camelCase
aliases (``projectId``, ``isCompleted``...). Both spellings are accepted
on input.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from tasknest.utils.dates import ensure_utc

# Fields omitted from the wire payload when they are None. ``priority`` is
# always present (null means "no priority").
_OPTIONAL_WIRE_FIELDS = ("description", "parentId", "dueDate", "subtaskCount")


class TaskNestModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Task(TaskNestModel):
    """Task model representing a complete task entity.

    Attributes:
        id: Unique identifier assigned by the store
        content: Short title
        description: Optional free text
        owner_id: Owning user; never serialized
        project_id: Owning project
        parent_id: Parent task for subtasks, None for top-level tasks
        priority: 1=low .. 4=urgent, None for no priority
        due_date: Optional due date (UTC)
        tags: Ordered list of tags
        is_completed: Completion status
        order: Manual sort key, lower sorts first
        subtask_count: Derived on top-level listings, never persisted
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    id: str
    content: str
    description: str | None = None
    owner_id: str | None = Field(default=None, exclude=True)
    project_id: str
    parent_id: str | None = None
    priority: int | None = Field(default=None, ge=1, le=4)
    due_date: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    is_completed: bool = False
    order: int = 0
    subtask_count: int | None = None
    created_at: datetime
    updated_at: datetime

    normalize_dates = field_validator(
        "due_date", "created_at", "updated_at", mode="before"
    )(ensure_utc)

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the JSON response body."""
        data = self.model_dump(by_alias=True, mode="json")
        for key in _OPTIONAL_WIRE_FIELDS:
            if data.get(key) is None:
                data.pop(key, None)
        return data


class TaskCreate(TaskNestModel):
    """Model for creating a new task.

    ``content`` and ``project_id`` are validated by the store rather than
    here, so that a missing value surfaces as a ValidationError with a clear
    message. ``priority`` is a label (``"high"``) or an integer 1-4.
    """

    content: str = ""
    project_id: str | None = None
    description: str | None = None
    priority: str | int | None = None
    due_date: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    order: int = 0
    parent_id: str | None = None

    normalize_dates = field_validator("due_date", mode="before")(ensure_utc)


class TaskUpdate(TaskNestModel):
    """Model for a partial task update.

    Only fields explicitly set are written (``model_fields_set``), so a
    field can be cleared by sending null. Identity and ownership fields are
    not part of this model and are dropped if sent.
    """

    content: str | None = None
    description: str | None = None
    parent_id: str | None = None
    priority: str | int | None = None
    due_date: datetime | None = None
    tags: list[str] | None = None
    is_completed: bool | None = None
    order: int | None = None

    normalize_dates = field_validator("due_date", mode="before")(ensure_utc)

    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


class TaskFilters(TaskNestModel):
    """Filters for listing a project's tasks.

    Attributes:
        parent_id: None, blank or ``"null"`` for top-level tasks, else a
            parent id
        due_date: all | today | tomorrow | this_week | overdue
        priority: all | none | low | medium | high | urgent
    """

    parent_id: str | None = None
    due_date: str = "all"
    priority: str = "all"

    @field_validator("due_date", "priority", mode="before")
    @classmethod
    def normalize_choice(cls, value: Any) -> Any:
        if value is None or value == "":
            return "all"
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def top_level(self) -> bool:
        """Whether the query is for top-level tasks."""
        return not self.parent_id or self.parent_id.strip() in ("", "null")


class Project(TaskNestModel):
    """Project model. Exactly one project per user is the inbox."""

    id: str
    name: str
    color: str = "gray"
    owner_id: str | None = Field(default=None, exclude=True)
    is_favorite: bool = False
    is_inbox: bool = False
    created_at: datetime
    updated_at: datetime

    normalize_dates = field_validator(
        "created_at", "updated_at", mode="before"
    )(ensure_utc)


class ProjectCreate(TaskNestModel):
    """Model for creating a new project."""

    name: str = ""
    color: str = "gray"
    is_favorite: bool = False


class ActivityEntry(TaskNestModel):
    """A recorded user action."""

    id: str
    user_id: str
    action: str
    entity_type: str = "task"
    entity_id: str | None = None
    created_at: datetime

    normalize_dates = field_validator("created_at", mode="before")(ensure_utc)


class User(TaskNestModel):
    """User model."""

    id: str
    email: str
    name: str | None = None
    created_at: datetime

    normalize_dates = field_validator("created_at", mode="before")(ensure_utc)
