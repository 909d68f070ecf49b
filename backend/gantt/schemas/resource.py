from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ResourceCreate(BaseModel):
    """Schema for creating a resource."""
    id: str | None = None
    name: str = "Unnamed Resource"
    type: str = "human"
    capacity: float = 1
    cost: float = 0
    skills: list[str] = Field(default_factory=list)
    availability: list[Any] = Field(default_factory=list)


class ResourceRead(BaseModel):
    """Schema for reading a resource."""
    id: str
    name: str
    type: str
    capacity: float
    cost: float
    skills: list[str]
    availability: list[Any]

    model_config = {"from_attributes": True}


class ResourceAssign(BaseModel):
    """Schema for assigning a resource to a task."""

    model_config = ConfigDict(populate_by_name=True)

    task_id: str = Field(alias="taskId")
    allocation: float = Field(default=1.0, gt=0)
