"""
Per-instance event bus.

Each TaskStore, Renderer and InteractionController owns its own EventBus; there
is no process-wide registry. Listeners are called synchronously in
registration order. A listener that raises is logged and skipped, the
remaining listeners still run.
"""

from collections import defaultdict
from typing import Any, Callable

from gantt.logging_config import get_logger

logger = get_logger(__name__)

Listener = Callable[[Any], None]

# Store events that change the task graph. History records exactly these.
STRUCTURAL_EVENTS = (
    "taskAdded",
    "taskUpdated",
    "taskDeleted",
    "dependencyAdded",
    "dependencyRemoved",
)


class EventBus:
    """Listener registry keyed by event name."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def on(self, event: str, callback: Listener) -> Listener:
        self._listeners[event].append(callback)
        return callback

    def off(self, event: str, callback: Listener) -> None:
        listeners = self._listeners.get(event)
        if listeners and callback in listeners:
            listeners.remove(callback)

    def emit(self, event: str, data: Any = None) -> None:
        # Copy so listeners may unsubscribe while being called
        for callback in list(self._listeners.get(event, ())):
            try:
                callback(data)
            except Exception:
                logger.exception(f"Error in event listener for {event}")

    def listeners(self, event: str) -> list[Listener]:
        return list(self._listeners.get(event, ()))

    def clear(self) -> None:
        self._listeners.clear()
