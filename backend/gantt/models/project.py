from datetime import date, timedelta

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from gantt.models.task import Task
from gantt.models.dependency import Dependency
from gantt.models.resource import Resource


class EngineOptions(BaseModel):
    """
    Calendar and scheduling options of one engine instance.

    working_days uses ISO weekdays (Monday=1 ... Sunday=7).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    start_date: date = Field(default_factory=date.today)
    end_date: date | None = None  # Defaults to start_date + 30 days
    time_scale: str = "day"
    working_days: list[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5])
    holidays: list[date] = Field(default_factory=list)
    validate_dependencies: bool = False

    @field_validator("working_days")
    @classmethod
    def check_working_days(cls, value: list[int]) -> list[int]:
        if not value:
            raise ValueError("At least one working day is required")
        invalid = sorted(d for d in value if d < 1 or d > 7)
        if invalid:
            raise ValueError(f"Working days must be ISO weekdays 1-7, got {invalid}")
        return value


class Timeline(BaseModel):
    """Visible date range: task dates padded by a week on each side."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    start: date
    end: date
    total_days: int

    @classmethod
    def default(cls, options: EngineOptions) -> "Timeline":
        end = options.end_date or options.start_date + timedelta(days=30)
        return cls(start=options.start_date, end=end, total_days=max(1, (end - options.start_date).days))


class ProjectSnapshot(BaseModel):
    """
    Full exportable engine state.

    Consumed by undo/redo and by whatever persists projects outside the
    engine. Dates stay date objects here; string conversion belongs to the
    persistence layer.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    tasks: list[Task] = Field(default_factory=list)
    dependencies: list[Dependency] = Field(default_factory=list)
    resources: list[Resource] = Field(default_factory=list)
    critical_path: list[Task] = Field(default_factory=list)
    timeline: Timeline | None = None
    options: EngineOptions = Field(default_factory=EngineOptions)
