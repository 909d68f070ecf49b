from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from gantt.models.task import generate_id


class Resource(BaseModel):
    """Something a task can be assigned to (person, machine, room)."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=generate_id)
    name: str = "Unnamed Resource"
    type: str = "human"
    capacity: float = 1
    cost: float = 0
    skills: list[str] = Field(default_factory=list)
    availability: list[Any] = Field(default_factory=list)
