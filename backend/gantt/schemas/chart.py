from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from gantt.schemas.task import TaskRead


class CriticalPathRead(BaseModel):
    """Critical tasks in early-start order plus the projected finish."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    tasks: list[TaskRead]
    task_ids: list[str]
    project_end_date: date | None
    has_cycle: bool


class ThemeUpdate(BaseModel):
    theme: str


class ZoomRequest(BaseModel):
    """
    Zoom the view.

    - ``zoom``: absolute level (clamped to 0.1..5)
    - ``factor`` with optional ``cx``/``cy``: scale around a screen point
    - ``wheel_delta``: wheel step around ``cx``/``cy``
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    zoom: float | None = None
    factor: float | None = Field(default=None, gt=0)
    wheel_delta: float | None = None
    cx: float = 0
    cy: float = 0
    pan_x: float | None = None
    pan_y: float | None = None


class ViewRead(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    zoom: float
    pan_x: float
    pan_y: float


class SessionStart(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    x: float
    y: float
    task_id: str | None = None
    bar_offset: float | None = None
    bar_width: float | None = None
    modifier: bool = False
    button: int = 0


class SessionMove(BaseModel):
    x: float
    y: float


class SessionEnd(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    x: float
    y: float
    task_id: str | None = None


class SessionRead(BaseModel):
    """Controller state after a pointer event, plus what was committed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    state: str
    selected: list[str]
    result: dict[str, Any] | None = None


class KeyPress(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    in_form_field: bool = False


class KeyRead(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    handled: bool
    selected: list[str]
    can_undo: bool
    can_redo: bool


class ContextAction(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    task_id: str
    action: Literal["edit", "delete", "addDependency", "duplicate", "setMilestone"]


class HistoryRead(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    applied: bool
    can_undo: bool
    can_redo: bool
