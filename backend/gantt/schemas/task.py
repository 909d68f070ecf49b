from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

from gantt.models import TaskStatus, TaskPriority


class TaskCreate(BaseModel):
    """Schema for creating a new task. Duration defaults to the inclusive day span."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str | None = None
    name: str | None = None
    description: str | None = None
    start_date: date
    end_date: date
    duration: int | None = None
    progress: float | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    resource_id: str | None = None
    parent_id: str | None = None
    custom_fields: dict[str, Any] | None = None

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class TaskUpdate(BaseModel):
    """Schema for updating a task. Only fields present in the body change."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = None
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    duration: int | None = None
    progress: float | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    resource_id: str | None = None
    parent_id: str | None = None
    custom_fields: dict[str, Any] | None = None

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class TaskRead(BaseModel):
    """Schema for reading a task together with its critical path results."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    name: str
    description: str
    start_date: date
    end_date: date
    duration: int
    progress: int
    status: TaskStatus
    priority: TaskPriority
    resource_id: str | None
    resource_allocation: float
    parent_id: str | None
    dependencies: list[str]
    custom_fields: dict[str, Any]
    early_start: date | None
    early_finish: date | None
    late_start: date | None
    late_finish: date | None
    slack: int
    is_critical: bool
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def is_milestone(self) -> bool:
        """One-day tasks are drawn as diamonds."""
        return self.duration == 1
