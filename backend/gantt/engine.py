"""
One Gantt engine instance: store, history, renderer and interaction
controller wired together.

There is no module-level engine. The HTTP adapter keeps one per app on
``app.state`` and hands it to routes through ``get_engine``.
"""

from typing import Any, Callable, Mapping

from fastapi import Request

from gantt.config import Settings, get_settings
from gantt.events import EventBus
from gantt.interaction import InteractionController, InteractionOptions
from gantt.models import EngineOptions
from gantt.rendering import Renderer, RenderOptions
from gantt.services.history import BaseHistory, create_history
from gantt.services.store import TaskStore
from gantt.logging_config import get_logger

logger = get_logger(__name__)


class GanttEngine:
    def __init__(
        self,
        options: EngineOptions | Mapping[str, Any] | None = None,
        render_options: RenderOptions | None = None,
        history_mode: str = "snapshot",
        history_size: int = 50,
        interaction_options: InteractionOptions | None = None,
        debounce: float = 0.016,
        confirm: Callable[[str], bool] | None = None,
    ):
        self.events = EventBus()
        self.store = TaskStore(options, events=self.events)
        self.history: BaseHistory = create_history(self.store, history_mode, history_size)
        self.renderer = Renderer(self.store, render_options, debounce=debounce)
        self.controller = InteractionController(
            self.store,
            self.renderer,
            history=self.history,
            options=interaction_options,
            confirm=confirm,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **overrides: Any) -> "GanttEngine":
        settings = settings or get_settings()
        params: dict[str, Any] = {
            "options": {
                "working_days": settings.working_days,
                "holidays": settings.holidays,
                "validate_dependencies": settings.validate_dependencies,
            },
            "render_options": RenderOptions.from_settings(settings),
            "history_mode": settings.history_mode,
            "history_size": settings.history_size,
            "interaction_options": InteractionOptions(resize_handle_width=settings.resize_handle_width),
            "debounce": settings.redraw_debounce_ms / 1000,
        }
        params.update(overrides)
        logger.info(
            f"Creating engine: history={params['history_mode']}/{params['history_size']} "
            f"theme={params['render_options'].theme}"
        )
        return cls(**params)

    def close(self) -> None:
        self.controller.detach()
        self.renderer.detach()
        self.history.detach()


def get_engine(request: Request) -> GanttEngine:
    """FastAPI dependency: the engine belonging to the running app."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        engine = GanttEngine.from_settings()
        request.app.state.engine = engine
    return engine
