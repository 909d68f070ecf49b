from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from gantt.models.task import generate_id, utcnow


DependencyType = Literal["finish-to-start", "start-to-start", "finish-to-finish", "start-to-finish"]


class Dependency(BaseModel):
    """
    A directed edge in the task graph.

    from_id -> to_id means the "to" task is constrained by the "from" task
    according to ``type``, shifted by ``lag`` working days (may be negative).

    Example: If Task A must finish before Task B starts:
    - from_id = A.id
    - to_id = B.id
    - type = "finish-to-start"
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(default_factory=generate_id)
    from_id: str = Field(alias="from")
    to_id: str = Field(alias="to")
    type: DependencyType = "finish-to-start"
    lag: int = 0
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
