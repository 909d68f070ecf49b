import uuid
from datetime import date, datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


TaskStatus = Literal["todo", "in_progress", "completed", "blocked"]
TaskPriority = Literal["low", "medium", "high", "critical"]


def generate_id(prefix: str = "gantt") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:9]}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Task(BaseModel):
    """
    A bar on the chart.

    Key fields:
    - start_date / end_date: inclusive calendar dates (end_date >= start_date)
    - duration: day count used for date stepping; computed from the dates as
      an inclusive calendar-day count when not given
    - early_*/late_*/slack/is_critical: written by the critical path analyzer,
      never by callers
    - dependencies: ids of dependency records where this task is an endpoint
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(default_factory=generate_id)
    name: str = "Unnamed Task"
    description: str = ""
    start_date: date
    end_date: date
    duration: int = Field(default=1, ge=1)
    progress: int = 0
    status: TaskStatus = "todo"
    priority: TaskPriority = "medium"
    resource_id: str | None = None
    resource_allocation: float = 1.0
    parent_id: str | None = None
    dependencies: list[str] = Field(default_factory=list)
    custom_fields: dict[str, Any] = Field(default_factory=dict)

    # Critical path results
    early_start: date | None = None
    early_finish: date | None = None
    late_start: date | None = None
    late_finish: date | None = None
    slack: int = 0
    is_critical: bool = False

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("progress", mode="before")
    @classmethod
    def clamp_progress(cls, value: Any) -> int:
        if value is None:
            return 0
        return max(0, min(100, int(round(float(value)))))

    @model_validator(mode="after")
    def check_dates(self) -> "Task":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if "duration" not in self.model_fields_set:
            self.duration = (self.end_date - self.start_date).days + 1
        return self

    @property
    def is_milestone(self) -> bool:
        return self.duration == 1
