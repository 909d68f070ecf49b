"""
Chart routes for the Gantt API: schedule analysis, rendering, view state,
history and the pointer/keyboard interaction sessions.
"""

from typing import Any

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from gantt.engine import GanttEngine, get_engine
from gantt.models import Timeline, ProjectSnapshot
from gantt.schemas import (
    CriticalPathRead,
    ThemeUpdate,
    ZoomRequest,
    ViewRead,
    SessionStart,
    SessionMove,
    SessionEnd,
    SessionRead,
    KeyPress,
    KeyRead,
    ContextAction,
    HistoryRead,
    TaskRead,
)
from gantt.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


# =============================================================================
# Schedule
# =============================================================================

@router.get("/critical-path", response_model=CriticalPathRead)
async def get_critical_path(engine: GanttEngine = Depends(get_engine)) -> CriticalPathRead:
    """Critical tasks ordered by early start."""
    store = engine.store
    critical = store.get_critical_path()
    analysis = store.analysis
    return CriticalPathRead(
        tasks=[TaskRead.model_validate(task) for task in critical],
        task_ids=[task.id for task in critical],
        project_end_date=analysis.project_end_date if analysis else None,
        has_cycle=analysis.has_cycle if analysis else False,
    )


@router.get("/timeline", response_model=Timeline)
async def get_timeline(engine: GanttEngine = Depends(get_engine)) -> Timeline:
    return engine.store.get_timeline()


# =============================================================================
# Rendering
# =============================================================================

@router.get("/scene")
async def get_scene(engine: GanttEngine = Depends(get_engine)) -> dict[str, Any]:
    """Current scene as draw primitives, with the view transform to apply."""
    transform = engine.renderer.transform
    return {
        **engine.renderer.get_scene().to_dict(),
        "view": {"zoom": transform.zoom, "panX": transform.pan_x, "panY": transform.pan_y},
    }


@router.get("/svg")
async def get_svg(engine: GanttEngine = Depends(get_engine)) -> Response:
    return Response(content=engine.renderer.export_svg(), media_type="image/svg+xml")


@router.put("/theme")
async def set_theme(body: ThemeUpdate, engine: GanttEngine = Depends(get_engine)) -> dict[str, str]:
    """Switch palette; unknown names are rejected with 422."""
    engine.renderer.set_theme(body.theme)
    return {"theme": body.theme}


@router.post("/zoom", response_model=ViewRead)
async def zoom(body: ZoomRequest, engine: GanttEngine = Depends(get_engine)) -> ViewRead:
    transform = engine.renderer.transform
    if body.zoom is not None:
        transform.set_zoom(body.zoom)
    if body.factor is not None:
        transform.zoom_at(body.factor, body.cx, body.cy)
    if body.wheel_delta is not None:
        transform.wheel(body.wheel_delta, body.cx, body.cy)
    if body.pan_x is not None or body.pan_y is not None:
        transform.set_pan(
            transform.pan_x if body.pan_x is None else body.pan_x,
            transform.pan_y if body.pan_y is None else body.pan_y,
        )
    return ViewRead(zoom=transform.zoom, pan_x=transform.pan_x, pan_y=transform.pan_y)


# =============================================================================
# History
# =============================================================================

def _history_state(engine: GanttEngine, applied: bool) -> HistoryRead:
    controller = engine.controller
    return HistoryRead(applied=applied, can_undo=controller.can_undo(), can_redo=controller.can_redo())


@router.post("/undo", response_model=HistoryRead)
async def undo(engine: GanttEngine = Depends(get_engine)) -> HistoryRead:
    return _history_state(engine, engine.controller.undo())


@router.post("/redo", response_model=HistoryRead)
async def redo(engine: GanttEngine = Depends(get_engine)) -> HistoryRead:
    return _history_state(engine, engine.controller.redo())


# =============================================================================
# Import / Export
# =============================================================================

@router.get("/export", response_model=ProjectSnapshot)
async def export_data(engine: GanttEngine = Depends(get_engine)) -> ProjectSnapshot:
    return engine.store.export_data()


@router.post("/import", response_model=ProjectSnapshot)
async def import_data(
    snapshot: dict[str, Any],
    engine: GanttEngine = Depends(get_engine),
) -> ProjectSnapshot:
    """Replace the whole chart. Ids and timestamps in the payload are kept."""
    engine.store.import_data(snapshot)
    return engine.store.export_data()


# =============================================================================
# Interaction
# =============================================================================

def _session_state(engine: GanttEngine, result: Any = None) -> SessionRead:
    if isinstance(result, BaseModel):
        result = result.model_dump(mode="json", by_alias=True)
    elif result is not None and not isinstance(result, dict):
        result = {"value": result}
    controller = engine.controller
    return SessionRead(state=controller.state.value, selected=controller.selected_tasks, result=result)


@router.post("/sessions/start", response_model=SessionRead)
async def session_start(body: SessionStart, engine: GanttEngine = Depends(get_engine)) -> SessionRead:
    engine.controller.session_start(
        (body.x, body.y),
        task_id=body.task_id,
        bar_offset=body.bar_offset,
        bar_width=body.bar_width,
        modifier=body.modifier,
        button=body.button,
    )
    return _session_state(engine)


@router.post("/sessions/move", response_model=SessionRead)
async def session_move(body: SessionMove, engine: GanttEngine = Depends(get_engine)) -> SessionRead:
    engine.controller.session_move((body.x, body.y))
    return _session_state(engine)


@router.post("/sessions/end", response_model=SessionRead)
async def session_end(body: SessionEnd, engine: GanttEngine = Depends(get_engine)) -> SessionRead:
    result = engine.controller.session_end((body.x, body.y), task_id=body.task_id)
    return _session_state(engine, result)


@router.post("/sessions/cancel", response_model=SessionRead)
async def session_cancel(engine: GanttEngine = Depends(get_engine)) -> SessionRead:
    engine.controller.cancel()
    return _session_state(engine)


@router.post("/keys", response_model=KeyRead)
async def key_press(body: KeyPress, engine: GanttEngine = Depends(get_engine)) -> KeyRead:
    controller = engine.controller
    handled = controller.handle_key(
        body.key,
        ctrl=body.ctrl,
        meta=body.meta,
        shift=body.shift,
        in_form_field=body.in_form_field,
    )
    return KeyRead(
        handled=handled,
        selected=controller.selected_tasks,
        can_undo=controller.can_undo(),
        can_redo=controller.can_redo(),
    )


@router.post("/context-action", response_model=SessionRead)
async def context_action(body: ContextAction, engine: GanttEngine = Depends(get_engine)) -> SessionRead:
    result = engine.controller.context_action(body.task_id, body.action)
    return _session_state(engine, result)
