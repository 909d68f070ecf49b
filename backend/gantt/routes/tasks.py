"""
Task routes for the Gantt API.
"""

from fastapi import APIRouter, Depends, status

from gantt.engine import GanttEngine, get_engine
from gantt.exceptions import NotFoundError
from gantt.models import Task
from gantt.schemas import TaskCreate, TaskUpdate, TaskRead
from gantt.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_in: TaskCreate,
    engine: GanttEngine = Depends(get_engine),
) -> Task:
    """
    Create a new task.

    Duration defaults to the inclusive calendar-day span of the dates.
    The critical path is recomputed before the response is sent.
    """
    return engine.store.add_task(task_in.to_fields())


@router.get("/", response_model=list[TaskRead])
async def list_tasks(
    critical: bool | None = None,
    engine: GanttEngine = Depends(get_engine),
) -> list[Task]:
    """
    List tasks in chart row order.

    Optionally filter by critical-path membership.
    """
    tasks = engine.store.get_tasks()
    if critical is not None:
        tasks = [t for t in tasks if t.is_critical == critical]

    logger.debug(f"Listed {len(tasks)} tasks" + (f" (critical={critical})" if critical is not None else ""))

    return tasks


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: str,
    engine: GanttEngine = Depends(get_engine),
) -> Task:
    """Get a task by ID."""
    task = engine.store.get_task(task_id)
    if not task:
        raise NotFoundError("Task", task_id)
    return task


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: str,
    task_in: TaskUpdate,
    engine: GanttEngine = Depends(get_engine),
) -> Task:
    """
    Update a task.

    Moving a date without sending a duration recomputes the duration from
    the new dates. Derived scheduling fields cannot be set.
    """
    return engine.store.update_task(task_id, task_in.to_fields())


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    engine: GanttEngine = Depends(get_engine),
) -> None:
    """Delete a task and every dependency that references it."""
    engine.store.delete_task(task_id)
