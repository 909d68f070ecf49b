"""
Resource routes for the Gantt API.
"""

from fastapi import APIRouter, Depends, status

from gantt.engine import GanttEngine, get_engine
from gantt.models import Resource
from gantt.schemas import ResourceCreate, ResourceRead, ResourceAssign, TaskRead

router = APIRouter()


@router.post("/", response_model=ResourceRead, status_code=status.HTTP_201_CREATED)
async def create_resource(
    resource_in: ResourceCreate,
    engine: GanttEngine = Depends(get_engine),
) -> Resource:
    return engine.store.add_resource(resource_in.model_dump(exclude_none=True))


@router.get("/", response_model=list[ResourceRead])
async def list_resources(engine: GanttEngine = Depends(get_engine)) -> list[Resource]:
    return engine.store.get_resources()


@router.post("/{resource_id}/assign", response_model=TaskRead)
async def assign_resource(
    resource_id: str,
    assignment: ResourceAssign,
    engine: GanttEngine = Depends(get_engine),
):
    """Assign a resource to a task. Scheduling is not affected."""
    engine.store.assign_resource(assignment.task_id, resource_id, assignment.allocation)
    return engine.store.require_task(assignment.task_id)
