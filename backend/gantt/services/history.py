"""
Undo/redo for the task store.

Two strategies with the same interface:

- SnapshotHistory (default): after every structural store event the full
  ``export_data()`` snapshot is pushed into a bounded ring buffer. Undo and
  redo move a cursor and reload the snapshot there with ``import_data()``.
  Simple and exact, memory grows with graph size times capacity.
- CommandHistory: records the inverse of each structural change and replays
  it. Cheaper for large graphs; reloads are partial, so timestamps of
  restored tasks are not preserved.

Both group several store mutations into one entry inside ``batch()``.
"""

from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator

from gantt.events import STRUCTURAL_EVENTS
from gantt.models import Task, Dependency, ProjectSnapshot
from gantt.services.store import TaskStore, PROTECTED_TASK_FIELDS
from gantt.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_HISTORY_SIZE = 50


class BaseHistory:
    """Event subscription and batching shared by both strategies."""

    def __init__(self, store: TaskStore, capacity: int = DEFAULT_HISTORY_SIZE):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.store = store
        self.capacity = capacity
        self._batch_depth = 0
        self._batch_dirty = False
        self._replaying = False
        self._handlers: dict[str, Callable[[Any], None]] = {}

        for event in STRUCTURAL_EVENTS:
            handler = self._make_handler(event)
            self._handlers[event] = handler
            store.on(event, handler)
        store.on("dataImported", self._on_import)

    def _make_handler(self, event: str) -> Callable[[Any], None]:
        def handler(data: Any) -> None:
            self._on_structural_event(event, data)
        return handler

    def detach(self) -> None:
        for event, handler in self._handlers.items():
            self.store.off(event, handler)
        self._handlers.clear()
        self.store.off("dataImported", self._on_import)

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Record every mutation inside the block as one undo step."""
        self._batch_depth += 1
        try:
            yield
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._batch_dirty:
                self._batch_dirty = False
                self._commit_batch()

    @contextmanager
    def _replay(self) -> Iterator[None]:
        self._replaying = True
        try:
            yield
        finally:
            self._replaying = False

    def _on_import(self, _data: Any) -> None:
        # A reload from outside history starts a new timeline
        if not self._replaying:
            self._reset()

    def _on_structural_event(self, event: str, data: Any) -> None:
        raise NotImplementedError

    def _reset(self) -> None:
        raise NotImplementedError

    def _commit_batch(self) -> None:
        raise NotImplementedError

    def undo(self) -> bool:
        raise NotImplementedError

    def redo(self) -> bool:
        raise NotImplementedError

    def can_undo(self) -> bool:
        raise NotImplementedError

    def can_redo(self) -> bool:
        raise NotImplementedError


class SnapshotHistory(BaseHistory):
    """
    Full-state snapshots in a ring buffer with a cursor.

    The buffer starts with a baseline snapshot of the store, so the first
    recorded mutation can be undone. Past ``capacity`` entries the oldest is
    dropped.
    """

    def __init__(self, store: TaskStore, capacity: int = DEFAULT_HISTORY_SIZE):
        super().__init__(store, capacity)
        self._snapshots: deque[ProjectSnapshot] = deque(maxlen=capacity)
        self._cursor = -1
        self.push()

    def _reset(self) -> None:
        self._snapshots.clear()
        self._cursor = -1
        self.push()

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._snapshots)

    def push(self) -> None:
        """Record the store's current state, discarding any redo entries."""
        while len(self._snapshots) > self._cursor + 1:
            self._snapshots.pop()
        self._snapshots.append(self.store.export_data())
        self._cursor = len(self._snapshots) - 1
        logger.debug(f"History snapshot {self._cursor + 1}/{self.capacity}")

    def _on_structural_event(self, event: str, data: Any) -> None:
        if self._replaying:
            return
        if self._batch_depth:
            self._batch_dirty = True
            return
        self.push()

    def _commit_batch(self) -> None:
        self.push()

    def can_undo(self) -> bool:
        return self._cursor > 0

    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    def undo(self) -> bool:
        if not self.can_undo():
            return False
        self._cursor -= 1
        self._load(self._snapshots[self._cursor])
        return True

    def redo(self) -> bool:
        if not self.can_redo():
            return False
        self._cursor += 1
        self._load(self._snapshots[self._cursor])
        return True

    def _load(self, snapshot: ProjectSnapshot) -> None:
        with self._replay():
            self.store.import_data(snapshot)
        logger.debug(f"History cursor moved to {self._cursor}")


# =============================================================================
# Command-based history
# =============================================================================

@dataclass
class Change:
    """One reversible store change."""
    undo: Callable[[TaskStore], None]
    redo: Callable[[TaskStore], None]


class CommandHistory(BaseHistory):
    """
    Inverse-operation history.

    Keeps a shadow copy of tasks and dependencies so each event can be turned
    into a pair of replayable operations without snapshotting the whole graph.
    """

    def __init__(self, store: TaskStore, capacity: int = DEFAULT_HISTORY_SIZE):
        super().__init__(store, capacity)
        self._undo_stack: deque[list[Change]] = deque(maxlen=capacity)
        self._redo_stack: list[list[Change]] = []
        self._pending: list[Change] = []
        self._tasks: dict[str, Task] = {}
        self._dependencies: dict[str, Dependency] = {}
        self._resync()

    def _resync(self) -> None:
        self._tasks = {t.id: t.model_copy(deep=True) for t in self.store.get_tasks()}
        self._dependencies = {d.id: d.model_copy(deep=True) for d in self.store.get_dependencies()}

    def _on_import(self, data: Any) -> None:
        self._resync()
        super()._on_import(data)

    def _reset(self) -> None:
        self._undo_stack.clear()
        self._redo_stack.clear()
        self._pending.clear()

    def _track(self, event: str, data: Any) -> None:
        if event in ("taskAdded", "taskUpdated"):
            self._tasks[data.id] = data.model_copy(deep=True)
        elif event == "taskDeleted":
            self._tasks.pop(data, None)
            self._dependencies = {
                k: d for k, d in self._dependencies.items() if data not in (d.from_id, d.to_id)
            }
        elif event == "dependencyAdded":
            self._dependencies[data.id] = data.model_copy(deep=True)
        elif event == "dependencyRemoved":
            self._dependencies.pop(data, None)

    def _on_structural_event(self, event: str, data: Any) -> None:
        change = self._change_for(event, data)
        self._track(event, data)
        if self._replaying or change is None:
            return
        if self._batch_depth:
            self._pending.append(change)
            self._batch_dirty = True
            return
        self._record([change])

    def _commit_batch(self) -> None:
        changes, self._pending = self._pending, []
        self._record(changes)

    def _record(self, changes: list[Change]) -> None:
        self._undo_stack.append(changes)
        self._redo_stack.clear()

    def _change_for(self, event: str, data: Any) -> Change | None:
        if event == "taskAdded":
            task = data.model_copy(deep=True)
            return Change(
                undo=lambda store: store.delete_task(task.id),
                redo=lambda store: _restore_task(store, task),
            )

        if event == "taskUpdated":
            before = self._tasks.get(data.id)
            if before is None:
                return None
            after = data.model_copy(deep=True)
            return Change(
                undo=lambda store: store.update_task(before.id, _editable_fields(before)),
                redo=lambda store: store.update_task(after.id, _editable_fields(after)),
            )

        if event == "taskDeleted":
            task = self._tasks.get(data)
            if task is None:
                return None
            links = [d for d in self._dependencies.values() if task.id in (d.from_id, d.to_id)]

            def undo_delete(store: TaskStore) -> None:
                _restore_task(store, task)
                for dep in links:
                    _restore_dependency(store, dep)

            return Change(undo=undo_delete, redo=lambda store: store.delete_task(task.id))

        if event == "dependencyAdded":
            dep = data.model_copy(deep=True)
            return Change(
                undo=lambda store: store.remove_dependency(dep.id),
                redo=lambda store: _restore_dependency(store, dep),
            )

        if event == "dependencyRemoved":
            dep = self._dependencies.get(data)
            if dep is None:
                return None
            return Change(
                undo=lambda store: _restore_dependency(store, dep),
                redo=lambda store: store.remove_dependency(dep.id),
            )

        return None

    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    def undo(self) -> bool:
        if not self._undo_stack:
            return False
        changes = self._undo_stack.pop()
        with self._replay():
            for change in reversed(changes):
                change.undo(self.store)
        self._redo_stack.append(changes)
        return True

    def redo(self) -> bool:
        if not self._redo_stack:
            return False
        changes = self._redo_stack.pop()
        with self._replay():
            for change in changes:
                change.redo(self.store)
        self._undo_stack.append(changes)
        return True


def _editable_fields(task: Task) -> dict[str, Any]:
    return task.model_dump(exclude=set(PROTECTED_TASK_FIELDS))


def _restore_task(store: TaskStore, task: Task) -> None:
    store.add_task({**_editable_fields(task), "id": task.id})


def _restore_dependency(store: TaskStore, dep: Dependency) -> None:
    store.add_dependency(dep.from_id, dep.to_id, dep.type, dep.lag, dependency_id=dep.id)


def create_history(store: TaskStore, mode: str = "snapshot", capacity: int = DEFAULT_HISTORY_SIZE) -> BaseHistory:
    if mode == "command":
        return CommandHistory(store, capacity)
    if mode == "snapshot":
        return SnapshotHistory(store, capacity)
    raise ValueError(f"Unknown history mode: {mode}")
