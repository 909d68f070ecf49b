from gantt.models.task import Task, TaskStatus, TaskPriority, generate_id
from gantt.models.dependency import Dependency, DependencyType
from gantt.models.resource import Resource
from gantt.models.project import EngineOptions, Timeline, ProjectSnapshot

__all__ = [
    "Task",
    "TaskStatus",
    "TaskPriority",
    "generate_id",
    "Dependency",
    "DependencyType",
    "Resource",
    "EngineOptions",
    "Timeline",
    "ProjectSnapshot",
]
