from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from gantt.models import DependencyType


class DependencyCreate(BaseModel):
    """Schema for creating a new dependency."""

    model_config = ConfigDict(populate_by_name=True)

    from_id: str = Field(alias="from")  # The constraining task
    to_id: str = Field(alias="to")      # The constrained task
    type: DependencyType = "finish-to-start"
    lag: int = 0


class DependencyRead(BaseModel):
    """Schema for reading a dependency."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    from_id: str = Field(alias="from")
    to_id: str = Field(alias="to")
    type: DependencyType
    lag: int
    created_at: datetime = Field(alias="createdAt")
