"""
Task store: the single owner of the task, dependency and resource maps.

Every mutation goes through this class. Each structural mutation:
1. updates the maps
2. recomputes the timeline and the critical path (synchronously)
3. emits its event on the store's EventBus

Renderer and InteractionController read from the store but never write to
the maps directly, which keeps the derived CPM fields consistent.
"""

from datetime import timedelta
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from gantt.events import EventBus
from gantt.exceptions import (
    NotFoundError,
    ValidationError,
    CycleDetectedError,
    DuplicateDependencyError,
    SelfDependencyError,
)
from gantt.models import (
    Task,
    Dependency,
    Resource,
    EngineOptions,
    Timeline,
    ProjectSnapshot,
)
from gantt.models.task import utcnow
from gantt.services.calendar import CalendarService
from gantt.services.critical_path import CriticalPathAnalyzer, ScheduleAnalysis
from gantt.services.graph import build_graph, detect_cycle
from gantt.logging_config import get_logger

logger = get_logger(__name__)

TIMELINE_PADDING = timedelta(days=7)

# Fields callers may not set directly: identity, graph bookkeeping, CPM output
PROTECTED_TASK_FIELDS = frozenset({
    "id",
    "dependencies",
    "early_start",
    "early_finish",
    "late_start",
    "late_finish",
    "slack",
    "is_critical",
    "created_at",
    "updated_at",
})

# camelCase (wire) and snake_case names -> field name
_TASK_FIELD_NAMES = {
    **{name: name for name in Task.model_fields},
    **{info.alias: name for name, info in Task.model_fields.items() if info.alias},
}


def normalize_task_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    """Map wire names (``startDate``) and legacy names (``start_date``) to field names."""
    return {_TASK_FIELD_NAMES.get(key, key): value for key, value in data.items()}


class TaskStore:
    """
    In-memory task graph with critical path scheduling.

    Usage:
        store = TaskStore()
        a = store.add_task({"name": "Design", "startDate": date(2024, 1, 1), "endDate": date(2024, 1, 5)})
        b = store.add_task({"name": "Build", "startDate": date(2024, 1, 8), "endDate": date(2024, 1, 10)})
        store.add_dependency(a.id, b.id)
        store.get_critical_path()  # [a, b]
    """

    def __init__(
        self,
        options: EngineOptions | Mapping[str, Any] | None = None,
        events: EventBus | None = None,
    ):
        self.events = events or EventBus()

        self._tasks: dict[str, Task] = {}
        self._dependencies: dict[str, Dependency] = {}
        self._resources: dict[str, Resource] = {}
        self._critical_path: list[Task] = []
        self.analysis: ScheduleAnalysis | None = None

        self._configure_calendar(self._validate_options(options or {}))
        self._timeline = Timeline.default(self.options)

    # =========================================================================
    # Events
    # =========================================================================

    def on(self, event: str, callback):
        return self.events.on(event, callback)

    def off(self, event: str, callback) -> None:
        self.events.off(event, callback)

    # =========================================================================
    # Task Management
    # =========================================================================

    def add_task(self, partial: Task | Mapping[str, Any] | None = None, **fields: Any) -> Task:
        """
        Create a task from a partial record.

        Missing id, name, status and priority get defaults; progress is
        clamped to 0..100; duration is derived from the dates when absent.
        Raises ValidationError for unparseable dates or end before start.
        """
        data = self._task_input(partial, fields)
        for key in PROTECTED_TASK_FIELDS - {"id"}:
            data.pop(key, None)

        if data.get("id") in self._tasks:
            raise ValidationError(f"Task with ID {data['id']} already exists")

        task = self._build_task(data)
        self._tasks[task.id] = task

        logger.info(f"Added task: id={task.id} name='{task.name}' {task.start_date}..{task.end_date}")

        self.recalculate()
        self.events.emit("taskAdded", task)
        return task

    def update_task(self, task_id: str, patch: Mapping[str, Any] | None = None, **fields: Any) -> Task:
        """
        Merge a patch into a task and stamp updated_at.

        When the patch moves a date without giving a duration, the duration
        is recomputed from the new dates.
        """
        task = self.require_task(task_id)
        changes = self._task_input(patch, fields)
        ignored = PROTECTED_TASK_FIELDS.intersection(changes)
        if ignored:
            logger.debug(f"Ignoring read-only fields on task {task_id}: {sorted(ignored)}")
        changes = {k: v for k, v in changes.items() if k not in PROTECTED_TASK_FIELDS}

        logger.info(f"Updating task {task_id}: {changes}")

        merged = {**task.model_dump(), **changes, "updated_at": utcnow()}
        dates_moved = "start_date" in changes or "end_date" in changes
        if dates_moved and "duration" not in changes:
            merged.pop("duration")

        updated = self._build_task(merged)
        for name in Task.model_fields:
            setattr(task, name, getattr(updated, name))

        self.recalculate()
        self.events.emit("taskUpdated", task)
        return task

    def delete_task(self, task_id: str) -> bool:
        """Delete a task together with every dependency that touches it."""
        task = self.require_task(task_id)

        removed = [
            dep_id for dep_id, dep in self._dependencies.items()
            if dep.from_id == task_id or dep.to_id == task_id
        ]
        for dep_id in removed:
            del self._dependencies[dep_id]
        for other in self._tasks.values():
            other.dependencies = [d for d in other.dependencies if d not in removed]

        del self._tasks[task_id]

        logger.info(f"Deleted task {task_id}: '{task.name}' ({len(removed)} dependencies removed)")

        self.recalculate()
        self.events.emit("taskDeleted", task_id)
        return True

    # =========================================================================
    # Dependency Management
    # =========================================================================

    def add_dependency(
        self,
        from_id: str,
        to_id: str,
        type: str = "finish-to-start",
        lag: int = 0,
        dependency_id: str | None = None,
    ) -> Dependency:
        """
        Link two tasks.

        Cycles, self-loops and unknown endpoints are tolerated unless
        ``options.validate_dependencies`` is on.
        """
        if self.options.validate_dependencies:
            self._validate_dependency(from_id, to_id)

        data = {"from": from_id, "to": to_id, "type": type, "lag": lag}
        if dependency_id:
            data["id"] = dependency_id
        try:
            dependency = Dependency.model_validate(data)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc, "Invalid dependency") from exc

        self._dependencies[dependency.id] = dependency
        self._attach_dependency(dependency)

        logger.info(f"Added dependency {dependency.id}: {from_id} -> {to_id} ({dependency.type}, lag={dependency.lag})")

        self.recalculate()
        self.events.emit("dependencyAdded", dependency)
        return dependency

    def remove_dependency(self, dependency_id: str) -> bool:
        dependency = self._dependencies.get(dependency_id)
        if dependency is None:
            raise NotFoundError("Dependency", dependency_id)

        for endpoint in (dependency.from_id, dependency.to_id):
            task = self._tasks.get(endpoint)
            if task:
                task.dependencies = [d for d in task.dependencies if d != dependency_id]

        del self._dependencies[dependency_id]

        logger.info(f"Removed dependency {dependency_id}: {dependency.from_id} -> {dependency.to_id}")

        self.recalculate()
        self.events.emit("dependencyRemoved", dependency_id)
        return True

    def _attach_dependency(self, dependency: Dependency) -> None:
        # A self-loop is listed once on its task
        for endpoint in dict.fromkeys((dependency.from_id, dependency.to_id)):
            task = self._tasks.get(endpoint)
            if task:
                task.dependencies.append(dependency.id)

    def _validate_dependency(self, from_id: str, to_id: str) -> None:
        for role, task_id in (("Predecessor task", from_id), ("Successor task", to_id)):
            if task_id not in self._tasks:
                raise NotFoundError(role, task_id)

        if from_id == to_id:
            logger.warning(f"Self-dependency rejected: {from_id}")
            raise SelfDependencyError(from_id)

        if self.find_dependency(from_id, to_id):
            logger.warning(f"Duplicate dependency rejected: {from_id} -> {to_id}")
            raise DuplicateDependencyError(from_id, to_id)

        graph = build_graph(self._tasks.values(), self._dependencies.values())
        if detect_cycle(graph, from_id, to_id):
            logger.warning(f"Cycle detected: {from_id} -> {to_id} would create a cycle")
            raise CycleDetectedError(from_id, to_id)

    # =========================================================================
    # Resource Management
    # =========================================================================

    def add_resource(self, partial: Resource | Mapping[str, Any] | None = None, **fields: Any) -> Resource:
        data = partial.model_dump() if isinstance(partial, Resource) else dict(partial or {})
        data.update(fields)
        try:
            resource = Resource.model_validate(data)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc, "Invalid resource") from exc

        self._resources[resource.id] = resource
        logger.info(f"Added resource: id={resource.id} name='{resource.name}'")
        self.events.emit("resourceAdded", resource)
        return resource

    def assign_resource(self, task_id: str, resource_id: str, allocation: float = 1.0) -> bool:
        task = self.require_task(task_id)
        if resource_id not in self._resources:
            raise NotFoundError("Resource", resource_id)

        task.resource_id = resource_id
        task.resource_allocation = allocation

        logger.info(f"Assigned resource {resource_id} to task {task_id} (allocation={allocation})")
        self.events.emit("resourceAssigned", {
            "task_id": task_id,
            "resource_id": resource_id,
            "allocation": allocation,
        })
        return True

    # =========================================================================
    # Options
    # =========================================================================

    def set_options(self, **changes: Any) -> EngineOptions:
        """Change calendar or scheduling options and reschedule."""
        self._configure_calendar(self._validate_options({**self.options.model_dump(), **changes}))
        self.recalculate()
        self.events.emit("optionsChanged", self.options)
        return self.options

    def _configure_calendar(self, options: EngineOptions) -> None:
        # Nothing is assigned until the calendar accepts the options
        calendar = CalendarService(options.working_days, options.holidays)
        self.analyzer = CriticalPathAnalyzer(calendar)
        self.calendar = calendar
        self.options = options

    @staticmethod
    def _validate_options(options: EngineOptions | Mapping[str, Any]) -> EngineOptions:
        if isinstance(options, EngineOptions):
            return options.model_copy(deep=True)
        try:
            return EngineOptions.model_validate(options)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc, "Invalid engine options") from exc

    # =========================================================================
    # Scheduling
    # =========================================================================

    def recalculate(self) -> list[Task]:
        """Recompute the timeline and the critical path for the whole graph."""
        self._timeline = self._calculate_timeline()
        self.analysis = self.analyzer.analyze(self._tasks.values(), self._dependencies.values())
        self._critical_path = self.analysis.critical_path
        self.events.emit("criticalPathCalculated", self._critical_path)
        return self._critical_path

    def _calculate_timeline(self) -> Timeline:
        if not self._tasks:
            return Timeline.default(self.options)

        all_dates = [d for task in self._tasks.values() for d in (task.start_date, task.end_date)]
        start = min(all_dates) - TIMELINE_PADDING
        end = max(all_dates) + TIMELINE_PADDING
        return Timeline(start=start, end=end, total_days=(end - start).days)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def get_task(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def require_task(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    def get_dependencies(self) -> list[Dependency]:
        return list(self._dependencies.values())

    def get_dependency(self, dependency_id: str) -> Dependency | None:
        return self._dependencies.get(dependency_id)

    def find_dependency(self, from_id: str, to_id: str) -> Dependency | None:
        return next(
            (d for d in self._dependencies.values() if d.from_id == from_id and d.to_id == to_id),
            None,
        )

    def get_resources(self) -> list[Resource]:
        return list(self._resources.values())

    def get_resource(self, resource_id: str) -> Resource | None:
        return self._resources.get(resource_id)

    def get_critical_path(self) -> list[Task]:
        return list(self._critical_path)

    def get_timeline(self) -> Timeline:
        return self._timeline

    def task_index(self, task_id: str) -> int:
        """Row of a task on the chart (insertion order)."""
        for index, key in enumerate(self._tasks):
            if key == task_id:
                return index
        raise NotFoundError("Task", task_id)

    # =========================================================================
    # Import / Export
    # =========================================================================

    def export_data(self) -> ProjectSnapshot:
        """Deep copy of the full engine state."""
        return ProjectSnapshot(
            tasks=[t.model_copy(deep=True) for t in self._tasks.values()],
            dependencies=[d.model_copy(deep=True) for d in self._dependencies.values()],
            resources=[r.model_copy(deep=True) for r in self._resources.values()],
            critical_path=[t.model_copy(deep=True) for t in self._critical_path],
            timeline=self._timeline.model_copy(),
            options=self.options.model_copy(deep=True),
        )

    def import_data(self, data: ProjectSnapshot | Mapping[str, Any]) -> None:
        """
        Clear the store and rebuild it from a snapshot.

        Task, dependency and resource ids and timestamps are preserved.
        Emits a single ``dataImported`` event instead of per-item events, so
        history does not record the reload.
        """
        if isinstance(data, ProjectSnapshot):
            snapshot = data
            options = data.options.model_copy(deep=True)
        else:
            try:
                snapshot = ProjectSnapshot.model_validate(data)
            except PydanticValidationError as exc:
                raise ValidationError.from_pydantic(exc, "Invalid snapshot") from exc
            provided = EngineOptions.model_validate(data.get("options") or {})
            options = self._validate_options({
                **self.options.model_dump(),
                **provided.model_dump(exclude_unset=True),
            })

        self._configure_calendar(options)

        self._tasks.clear()
        self._dependencies.clear()
        self._resources.clear()

        for task in snapshot.tasks:
            copy = task.model_copy(deep=True)
            copy.dependencies = []
            self._tasks[copy.id] = copy

        for dependency in snapshot.dependencies:
            copy = dependency.model_copy(deep=True)
            self._dependencies[copy.id] = copy
            self._attach_dependency(copy)

        for resource in snapshot.resources:
            self._resources[resource.id] = resource.model_copy(deep=True)

        logger.info(
            f"Imported {len(self._tasks)} tasks, {len(self._dependencies)} dependencies, "
            f"{len(self._resources)} resources"
        )

        self.recalculate()
        self.events.emit("dataImported", None)

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _task_input(partial: Task | Mapping[str, Any] | None, fields: Mapping[str, Any]) -> dict[str, Any]:
        if isinstance(partial, Task):
            data = partial.model_dump()
        else:
            data = normalize_task_fields(partial or {})
        data.update(normalize_task_fields(fields))
        return data

    @staticmethod
    def _build_task(data: Mapping[str, Any]) -> Task:
        try:
            return Task.model_validate(data)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc
