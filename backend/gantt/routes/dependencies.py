"""
Dependency routes for the Gantt API.
"""

from fastapi import APIRouter, Depends, status

from gantt.engine import GanttEngine, get_engine
from gantt.exceptions import NotFoundError
from gantt.models import Dependency
from gantt.schemas import DependencyCreate, DependencyRead
from gantt.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/", response_model=DependencyRead, status_code=status.HTTP_201_CREATED)
async def create_dependency(
    dep_in: DependencyCreate,
    engine: GanttEngine = Depends(get_engine),
) -> Dependency:
    """
    Create a new dependency (edge in the task graph).

    Cycles, self-loops and duplicates are accepted and scheduled around
    unless dependency validation is enabled, in which case they are
    rejected with 400/409.
    """
    logger.info(f"Creating dependency: {dep_in.from_id} -> {dep_in.to_id} ({dep_in.type})")

    return engine.store.add_dependency(dep_in.from_id, dep_in.to_id, dep_in.type, dep_in.lag)


@router.get("/", response_model=list[DependencyRead])
async def list_dependencies(
    task_id: str | None = None,
    engine: GanttEngine = Depends(get_engine),
) -> list[Dependency]:
    """
    List dependencies.

    Optionally filter to those where task_id is either endpoint.
    """
    dependencies = engine.store.get_dependencies()
    if task_id:
        dependencies = [d for d in dependencies if task_id in (d.from_id, d.to_id)]

    logger.debug(f"Listed {len(dependencies)} dependencies")

    return dependencies


@router.get("/{dependency_id}", response_model=DependencyRead)
async def get_dependency(
    dependency_id: str,
    engine: GanttEngine = Depends(get_engine),
) -> Dependency:
    dependency = engine.store.get_dependency(dependency_id)
    if not dependency:
        raise NotFoundError("Dependency", dependency_id)
    return dependency


@router.delete("/{dependency_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_dependency(
    dependency_id: str,
    engine: GanttEngine = Depends(get_engine),
) -> None:
    """
    Delete a dependency.

    This may allow the successor task to start earlier.
    """
    engine.store.remove_dependency(dependency_id)
