"""
Pointer, keyboard and context-menu handling.

The controller is a small state machine driven by abstract pointer sessions:

    IDLE --session_start on bar--> DRAGGING | RESIZING --session_end--> IDLE
    IDLE --start_dependency_creation--> CREATING_DEPENDENCY --session_end--> IDLE
    IDLE --session_start(button=1|2)--> PANNING --session_end--> IDLE

Any state returns to IDLE on ``cancel()`` without committing. Points are
screen coordinates; they are mapped to world coordinates through the
renderer's view transform before measuring deltas.

All mutations go through the TaskStore, so the store recomputes the critical
path and the renderer redraws from its events.
"""

from contextlib import nullcontext
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Iterable

from gantt.events import EventBus
from gantt.exceptions import ValidationError
from gantt.models import Task
from gantt.rendering.renderer import Renderer, Feedback
from gantt.services.history import BaseHistory, create_history
from gantt.services.store import TaskStore, PROTECTED_TASK_FIELDS
from gantt.logging_config import get_logger

logger = get_logger(__name__)

Point = tuple[float, float]

COPY_SUFFIX = " (Copy)"
PAN_BUTTONS = (1, 2)  # middle, right


class InteractionState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    RESIZING = "resizing"
    CREATING_DEPENDENCY = "creating_dependency"
    PANNING = "panning"


@dataclass
class InteractionOptions:
    enable_drag_drop: bool = True
    enable_resize: bool = True
    enable_dependency_creation: bool = True
    enable_context_menu: bool = True
    enable_keyboard_shortcuts: bool = True
    enable_multi_select: bool = True
    enable_undo_redo: bool = True
    resize_handle_width: float = 10


@dataclass
class Gesture:
    """The pointer session in progress."""
    task_id: str | None = None
    origin: Point = (0.0, 0.0)  # world coordinates at session start
    original_start: date | None = None
    original_duration: int = 1
    day_delta: int = 0
    pointer: Point | None = None


class InteractionController:
    """
    Translates user gestures into TaskStore mutations.

    ``confirm`` is asked before deleting tasks; it receives the prompt text
    and returns True to proceed. Without one, deletes always proceed.
    """

    def __init__(
        self,
        store: TaskStore,
        renderer: Renderer,
        history: BaseHistory | None = None,
        options: InteractionOptions | None = None,
        confirm: Callable[[str], bool] | None = None,
    ):
        self.store = store
        self.renderer = renderer
        self.options = options or InteractionOptions()
        self.confirm = confirm
        self.events = EventBus()

        if history is None and self.options.enable_undo_redo:
            history = create_history(store)
        self.history = history

        self.state = InteractionState.IDLE
        self.gesture: Gesture | None = None
        self._selected: dict[str, None] = {}  # insertion-ordered set
        self._clipboard: list[Task] = []

        store.on("taskDeleted", self._on_task_deleted)
        store.on("dataImported", self._on_data_imported)

    def on(self, event: str, callback):
        return self.events.on(event, callback)

    def off(self, event: str, callback) -> None:
        self.events.off(event, callback)

    def detach(self) -> None:
        self.store.off("taskDeleted", self._on_task_deleted)
        self.store.off("dataImported", self._on_data_imported)

    # =========================================================================
    # Pointer sessions
    # =========================================================================

    def session_start(
        self,
        point: Point,
        task_id: str | None = None,
        bar_offset: float | None = None,
        bar_width: float | None = None,
        modifier: bool = False,
        button: int = 0,
    ) -> InteractionState:
        """
        Pointer pressed.

        ``task_id``, ``bar_offset`` (pointer x minus bar x) and ``bar_width``
        may come from the presentation layer; when omitted they are resolved
        with the renderer's hit test.
        """
        if button in PAN_BUTTONS:
            if self.state != InteractionState.IDLE:
                self.cancel()
            self.renderer.transform.begin_pan(*point)
            self.state = InteractionState.PANNING
            return self.state

        if self.state == InteractionState.CREATING_DEPENDENCY:
            # Target is picked on release
            return self.state

        if self.state != InteractionState.IDLE:
            self.cancel()

        on_bar = True
        if task_id is None:
            hit = self.renderer.hit_test(*point)
            if hit is not None:
                task_id = hit.task_id
                on_bar = hit.kind != "name"
                if hit.kind == "bar":
                    bar_offset = hit.offset if bar_offset is None else bar_offset
                    bar_width = hit.width if bar_width is None else bar_width

        if task_id is None or self.store.get_task(task_id) is None:
            if not modifier:
                self.clear_selection()
            return self.state

        self._select_on_press(task_id, modifier)

        task = self.store.require_task(task_id)
        world = self.renderer.transform.to_world(*point)
        gesture = Gesture(
            task_id=task_id,
            origin=world,
            original_start=task.start_date,
            original_duration=task.duration,
            pointer=world,
        )

        # Handle width is in screen pixels, bar offsets in world units
        handle_width = self.options.resize_handle_width / self.renderer.transform.zoom
        on_handle = (
            bar_offset is not None
            and bar_width is not None
            and bar_offset > bar_width - handle_width
        )
        if on_handle and self.options.enable_resize:
            self.gesture = gesture
            self.state = InteractionState.RESIZING
            self.events.emit("resizeStart", {"task_id": task_id})
        elif self.options.enable_drag_drop and on_bar:
            self.gesture = gesture
            self.state = InteractionState.DRAGGING
            self.events.emit("dragStart", {"task_id": task_id})
        return self.state

    def session_move(self, point: Point) -> None:
        if self.state == InteractionState.PANNING:
            self.renderer.transform.update_pan(*point)
            return
        if self.gesture is None:
            return

        world = self.renderer.transform.to_world(*point)
        gesture = self.gesture
        gesture.pointer = world
        dx = world[0] - gesture.origin[0]
        dy = world[1] - gesture.origin[1]
        gesture.day_delta = self._day_delta(dx)

        if self.state == InteractionState.DRAGGING:
            new_start = self.store.calendar.add_working_days(gesture.original_start, gesture.day_delta)
            self._set_feedback(drag_task_id=gesture.task_id, drag_dx=dx)
            self.events.emit("dragUpdate", {
                "task_id": gesture.task_id,
                "delta_x": dx,
                "delta_y": dy,
                "new_start_date": new_start,
            })
        elif self.state == InteractionState.RESIZING:
            self._set_feedback(resize_task_id=gesture.task_id, resize_dx=dx)
            self.events.emit("resizeUpdate", {
                "task_id": gesture.task_id,
                "delta_x": dx,
                "new_duration": self._new_duration(gesture),
            })
        elif self.state == InteractionState.CREATING_DEPENDENCY:
            self._set_feedback(link_from_id=gesture.task_id, link_point=world)
            self.events.emit("dependencyCreationUpdate", {"task_id": gesture.task_id, "point": world})

    def session_end(self, point: Point, task_id: str | None = None) -> Any:
        """
        Pointer released. Commits the gesture and returns to IDLE.

        Returns the updated Task for drag/resize, the new Dependency for a
        dependency gesture, otherwise None.
        """
        if self.state == InteractionState.PANNING:
            self.renderer.transform.end_pan()
            self.state = InteractionState.IDLE
            return None
        if self.gesture is None:
            self.state = InteractionState.IDLE
            return None

        self.session_move(point)
        state, gesture = self.state, self.gesture
        self._reset()

        if state == InteractionState.DRAGGING:
            return self._commit_drag(gesture)
        if state == InteractionState.RESIZING:
            return self._commit_resize(gesture)
        if state == InteractionState.CREATING_DEPENDENCY:
            if task_id is None:
                hit = self.renderer.hit_test(*point)
                task_id = hit.task_id if hit else None
            return self._commit_dependency(gesture, task_id)
        return None

    def cancel(self) -> bool:
        """Abort the gesture in progress; nothing is committed."""
        if self.state == InteractionState.IDLE:
            return False
        if self.state == InteractionState.PANNING:
            self.renderer.transform.end_pan()
        cancelled = self.state
        self._reset()
        logger.debug(f"Cancelled {cancelled.value}")
        self.events.emit("operationCancelled", {"state": cancelled.value})
        return True

    def _reset(self) -> None:
        self.state = InteractionState.IDLE
        self.gesture = None
        self._set_feedback()

    def _day_delta(self, dx: float) -> int:
        return round(dx / self.renderer.day_width)

    @staticmethod
    def _new_duration(gesture: Gesture) -> int:
        return max(1, gesture.original_duration + gesture.day_delta)

    def _commit_drag(self, gesture: Gesture) -> Task | None:
        if gesture.day_delta == 0 or self.store.get_task(gesture.task_id) is None:
            return None
        cal = self.store.calendar
        new_start = cal.add_working_days(gesture.original_start, gesture.day_delta)
        new_end = cal.add_working_days(new_start, gesture.original_duration - 1)
        task = self.store.update_task(gesture.task_id, {
            "start_date": new_start,
            "end_date": new_end,
            "duration": gesture.original_duration,
        })
        logger.info(f"Dragged task {task.id} by {gesture.day_delta} working days")
        self.events.emit("dragEnd", {
            "task_id": task.id,
            "new_start_date": new_start,
            "new_end_date": new_end,
        })
        return task

    def _commit_resize(self, gesture: Gesture) -> Task | None:
        task = self.store.get_task(gesture.task_id)
        new_duration = self._new_duration(gesture)
        if task is None or new_duration == gesture.original_duration:
            return None
        new_end = self.store.calendar.add_working_days(task.start_date, new_duration - 1)
        task = self.store.update_task(task.id, {"duration": new_duration, "end_date": new_end})
        logger.info(f"Resized task {task.id} to {new_duration} days")
        self.events.emit("resizeEnd", {
            "task_id": task.id,
            "new_duration": new_duration,
            "new_end_date": new_end,
        })
        return task

    def _commit_dependency(self, gesture: Gesture, to_id: str | None):
        if to_id is None or to_id == gesture.task_id or self.store.get_task(to_id) is None:
            return None
        dependency = self.store.add_dependency(gesture.task_id, to_id)
        self.events.emit("dependencyCreated", {
            "from_task_id": gesture.task_id,
            "to_task_id": to_id,
            "dependency_id": dependency.id,
        })
        return dependency

    def start_dependency_creation(self, task_id: str) -> bool:
        """Arm a dependency gesture from ``task_id``; the next release picks the target."""
        if not self.options.enable_dependency_creation:
            return False
        task = self.store.require_task(task_id)
        if self.state != InteractionState.IDLE:
            self.cancel()
        self.gesture = Gesture(task_id=task.id, original_start=task.start_date, original_duration=task.duration)
        self.state = InteractionState.CREATING_DEPENDENCY
        self.events.emit("dependencyCreationStart", {"from_task_id": task.id})
        return True

    def _set_feedback(self, **changes: Any) -> None:
        self.renderer.feedback = Feedback(selected=frozenset(self._selected), **changes)
        self.renderer.request_redraw()

    # =========================================================================
    # Selection
    # =========================================================================

    def _select_on_press(self, task_id: str, modifier: bool) -> None:
        if modifier and self.options.enable_multi_select:
            self.toggle_selection(task_id)
        elif task_id not in self._selected:
            self.clear_selection()
            self.select_task(task_id)

    def select_task(self, task_id: str) -> None:
        self.store.require_task(task_id)
        self._selected[task_id] = None
        self._set_feedback()
        self.events.emit("taskSelected", {"task_id": task_id})

    def deselect_task(self, task_id: str) -> None:
        if task_id in self._selected:
            del self._selected[task_id]
            self._set_feedback()
            self.events.emit("taskDeselected", {"task_id": task_id})

    def toggle_selection(self, task_id: str) -> None:
        if task_id in self._selected:
            self.deselect_task(task_id)
        else:
            self.select_task(task_id)

    def clear_selection(self) -> None:
        self._selected.clear()
        self._set_feedback()
        self.events.emit("selectionCleared", None)

    def select_all(self) -> None:
        for task in self.store.get_tasks():
            self._selected[task.id] = None
        self._set_feedback()
        self.events.emit("allTasksSelected", {"task_ids": self.selected_tasks})

    @property
    def selected_tasks(self) -> list[str]:
        return list(self._selected)

    def set_selected_tasks(self, task_ids: Iterable[str]) -> None:
        self.clear_selection()
        for task_id in task_ids:
            self.select_task(task_id)

    def _on_task_deleted(self, task_id: str) -> None:
        if task_id in self._selected:
            del self._selected[task_id]
            self._set_feedback()
        if self.gesture and self.gesture.task_id == task_id:
            self.cancel()

    def _on_data_imported(self, _data: Any) -> None:
        self._selected = {k: None for k in self._selected if self.store.get_task(k)}
        self._set_feedback()

    # =========================================================================
    # Keyboard
    # =========================================================================

    def handle_key(
        self,
        key: str,
        ctrl: bool = False,
        meta: bool = False,
        shift: bool = False,
        in_form_field: bool = False,
    ) -> bool:
        """Returns True when the key was consumed."""
        if in_form_field or not self.options.enable_keyboard_shortcuts:
            return False

        command = ctrl or meta
        lowered = key.lower() if len(key) == 1 else key

        if key in ("Delete", "Backspace"):
            if not self._selected:
                return False
            self.delete_selected_tasks()
            return True
        if key == "Escape":
            self.clear_selection()
            self.cancel()
            return True

        if command:
            if lowered == "a":
                self.select_all()
            elif lowered == "z" and not shift:
                self.undo()
            elif lowered == "y":
                self.redo()
            elif lowered == "c":
                self.copy_selected_tasks()
            elif lowered == "v":
                self.paste_tasks()
            else:
                return self.renderer.transform.handle_key(key)
            return True

        return self.renderer.transform.handle_key(key)

    # =========================================================================
    # Actions
    # =========================================================================

    def context_action(self, task_id: str, action: str) -> Any:
        if not self.options.enable_context_menu:
            return None
        self.store.require_task(task_id)

        if action == "edit":
            return self.edit_task(task_id)
        if action == "delete":
            return self.delete_task(task_id)
        if action == "addDependency":
            return self.start_dependency_creation(task_id)
        if action == "duplicate":
            return self.duplicate_task(task_id)
        if action == "setMilestone":
            return self.set_task_as_milestone(task_id)
        raise ValidationError(f"Unknown context action: {action}")

    def edit_task(self, task_id: str) -> None:
        self.store.require_task(task_id)
        self.events.emit("editTask", {"task_id": task_id})

    def double_click(self, point: Point) -> str | None:
        hit = self.renderer.hit_test(*point)
        if hit is None:
            return None
        self.edit_task(hit.task_id)
        return hit.task_id

    def _confirmed(self, prompt: str) -> bool:
        return self.confirm is None or bool(self.confirm(prompt))

    def delete_task(self, task_id: str) -> bool:
        self.store.require_task(task_id)
        if not self._confirmed("Are you sure you want to delete this task?"):
            return False
        self.store.delete_task(task_id)
        self.events.emit("taskDeleted", {"task_id": task_id})
        return True

    def delete_selected_tasks(self) -> list[str]:
        task_ids = [t for t in self._selected if self.store.get_task(t)]
        if not task_ids:
            return []
        if not self._confirmed(f"Are you sure you want to delete {len(task_ids)} task(s)?"):
            return []

        with self._batch():
            for task_id in task_ids:
                self.store.delete_task(task_id)
        self.clear_selection()
        logger.info(f"Deleted {len(task_ids)} selected tasks")
        self.events.emit("tasksDeleted", {"task_ids": task_ids})
        return task_ids

    def duplicate_task(self, task_id: str) -> Task:
        original = self.store.require_task(task_id)
        new_task = self.store.add_task(self._copy_of(original))
        self.events.emit("taskDuplicated", {"original_task_id": task_id, "new_task": new_task})
        return new_task

    def set_task_as_milestone(self, task_id: str) -> Task:
        task = self.store.require_task(task_id)
        task = self.store.update_task(task_id, {"duration": 1, "end_date": task.start_date})
        self.events.emit("taskSetAsMilestone", {"task_id": task_id})
        return task

    def copy_selected_tasks(self) -> list[Task]:
        self._clipboard = [
            self.store.get_task(t).model_copy(deep=True)
            for t in self._selected if self.store.get_task(t)
        ]
        self.events.emit("tasksCopied", {"tasks": list(self._clipboard)})
        return list(self._clipboard)

    def paste_tasks(self) -> list[Task]:
        if not self._clipboard:
            return []
        with self._batch():
            pasted = [self.store.add_task(self._copy_of(task)) for task in self._clipboard]
        self.events.emit("tasksPasted", {"tasks": pasted})
        return pasted

    def _copy_of(self, task: Task) -> dict[str, Any]:
        cal = self.store.calendar
        data = task.model_dump(exclude=set(PROTECTED_TASK_FIELDS))
        data["name"] = f"{task.name}{COPY_SUFFIX}"
        data["start_date"] = cal.add_working_days(task.start_date, 1)
        data["end_date"] = cal.add_working_days(task.end_date, 1)
        return data

    # =========================================================================
    # History
    # =========================================================================

    def _batch(self):
        if self.history is None:
            return nullcontext()
        return self.history.batch()

    def can_undo(self) -> bool:
        return self.history is not None and self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history is not None and self.history.can_redo()

    def undo(self) -> bool:
        if not self.can_undo():
            return False
        self.cancel()
        self.history.undo()
        self.events.emit("undo", {"can_undo": self.can_undo(), "can_redo": self.can_redo()})
        return True

    def redo(self) -> bool:
        if not self.can_redo():
            return False
        self.cancel()
        self.history.redo()
        self.events.emit("redo", {"can_undo": self.can_undo(), "can_redo": self.can_redo()})
        return True
