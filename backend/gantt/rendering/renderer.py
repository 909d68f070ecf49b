"""
Chart rendering.

``build_scene`` is a pure function from store state to draw primitives. The
Renderer wraps it with the redraw policy: it listens to the store, coalesces
redraw requests through a RedrawScheduler, keeps the last scene for hit
testing and owns the pan/zoom ViewTransform.
"""

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from gantt.events import EventBus, STRUCTURAL_EVENTS
from gantt.models import Task
from gantt.services.store import TaskStore
from gantt.rendering.primitives import Scene, Rect, Line, Curve, Label, Polygon, Style
from gantt.rendering.scheduler import RedrawScheduler
from gantt.rendering.svg import render_svg
from gantt.rendering.themes import Palette, get_theme
from gantt.rendering.viewport import ViewTransform
from gantt.logging_config import get_logger

logger = get_logger(__name__)

BAR_INSET = 8
BAR_RADIUS = 4
LABEL_MIN_BAR_WIDTH = 60
ARROW_SIZE = 8
CURVE_LIFT = 20
MILESTONE_SIZE = 12
HEADER_TICK_DAYS = 7
MIN_RESIZE_WIDTH = 20

# Store events after which the chart is stale
REDRAW_EVENTS = STRUCTURAL_EVENTS + ("dataImported", "optionsChanged", "resourceAssigned")


@dataclass
class RenderOptions:
    width: float = 1200
    height: float = 600
    row_height: float = 40
    header_height: float = 60
    sidebar_width: float = 250
    show_dependencies: bool = True
    show_critical_path: bool = True
    show_progress: bool = True
    theme: str = "default"

    @classmethod
    def from_settings(cls, settings) -> "RenderOptions":
        return cls(
            width=settings.chart_width,
            height=settings.chart_height,
            row_height=settings.row_height,
            header_height=settings.header_height,
            sidebar_width=settings.sidebar_width,
            theme=settings.theme,
        )


@dataclass
class Feedback:
    """Transient interaction state drawn on top of the chart."""
    selected: frozenset[str] = frozenset()
    drag_task_id: str | None = None
    drag_dx: float = 0
    resize_task_id: str | None = None
    resize_dx: float = 0
    link_from_id: str | None = None
    link_point: tuple[float, float] | None = None


@dataclass
class Hit:
    """Result of a hit test, in world coordinates."""
    task_id: str
    kind: str  # "bar" | "milestone" | "name"
    x: float
    width: float
    offset: float  # pointer x minus bar x


def day_offset(day: date, origin: date) -> int:
    return (day - origin).days


def calculate_day_width(store: TaskStore, options: RenderOptions) -> float:
    return (options.width - options.sidebar_width) / store.get_timeline().total_days


def build_scene(
    store: TaskStore,
    options: RenderOptions,
    transform: ViewTransform,
    theme: Palette,
    feedback: Feedback | None = None,
) -> Scene:
    """
    Lay the chart out as draw primitives.

    Rows follow task insertion order. Geometry is in world units; the view
    transform is only consulted to keep the scene self-describing and is
    applied by presentation adapters.
    """
    feedback = feedback or Feedback()
    scene = Scene(width=options.width, height=options.height, background=theme.background)
    tasks = store.get_tasks()
    timeline = store.get_timeline()
    day_width = calculate_day_width(store, options)

    _header(scene, options, theme, timeline.start, timeline.total_days, day_width)
    _grid(scene, options, theme, len(tasks), timeline.total_days, day_width)

    by_id = {task.id: task for task in tasks}
    rows: dict[str, int] = {}
    for index, task in enumerate(tasks):
        rows[task.id] = index
        _task_row(scene, options, theme, feedback, task, index, timeline.start, day_width)

    if options.show_dependencies:
        for dep in store.get_dependencies():
            source = by_id.get(dep.from_id)
            target = by_id.get(dep.to_id)
            if source is None or target is None:
                continue
            from_x = options.sidebar_width + day_offset(source.end_date, timeline.start) * day_width
            to_x = options.sidebar_width + day_offset(target.start_date, timeline.start) * day_width
            from_y = _row_center(options, rows[source.id])
            to_y = _row_center(options, rows[target.id])
            _dependency(scene, theme, dep.id, dep.type, from_x, from_y, to_x, to_y)

    for index, task in enumerate(tasks):
        if task.duration == 1:
            x = options.sidebar_width + day_offset(task.start_date, timeline.start) * day_width
            _milestone(scene, theme, task.id, x, _row_center(options, index))

    _link_preview(scene, options, theme, feedback, rows, timeline.start, day_width, by_id)

    logger.debug(f"Scene built: {len(tasks)} rows, {len(scene)} primitives, zoom={transform.zoom:.2f}")
    return scene


def _row_top(options: RenderOptions, index: int) -> float:
    return options.header_height + index * options.row_height


def _row_center(options: RenderOptions, index: int) -> float:
    return _row_top(options, index) + options.row_height / 2


def _text(theme: Palette, size_delta: float = 0, **style: Any) -> Style:
    return Style(
        fill=style.pop("fill", theme.text_color),
        font_family=theme.font_family,
        font_size=theme.font_size + size_delta,
        **style,
    )


def _header(scene: Scene, options: RenderOptions, theme: Palette, start: date, total_days: int, day_width: float) -> None:
    scene.add("header", Rect(
        0, 0, options.width, options.header_height,
        Style(fill=theme.header_background, stroke=theme.border, stroke_width=1),
        css_class="header-background",
    ))
    scene.add("header", Rect(
        0, 0, options.sidebar_width, options.header_height,
        Style(fill=theme.sidebar_background, stroke=theme.border, stroke_width=1),
        css_class="sidebar-header",
    ))
    scene.add("header", Label(
        options.sidebar_width / 2, options.header_height / 2 + 5, "Task Name",
        _text(theme, font_weight="bold", anchor="middle"),
        css_class="sidebar-title",
    ))

    # Weekly ticks from the timeline start
    for day in range(0, total_days + 1, HEADER_TICK_DAYS):
        x = options.sidebar_width + day * day_width
        tick = start + timedelta(days=day)
        scene.add("header", Line(
            x, 0, x, options.header_height,
            Style(stroke=theme.grid_color, stroke_width=1),
            css_class="header-tick",
        ))
        scene.add("header", Label(
            x + 5, options.header_height - 10, f"{tick:%b} {tick.day}",
            _text(theme, -2),
            css_class="header-label",
        ))


def _grid(scene: Scene, options: RenderOptions, theme: Palette, row_count: int, total_days: int, day_width: float) -> None:
    timeline_width = options.width - options.sidebar_width

    scene.add("grid", Rect(
        options.sidebar_width, options.header_height,
        timeline_width, options.height - options.header_height,
        Style(fill=theme.timeline_background),
        css_class="timeline-background",
    ))
    for index in range(row_count):
        fill = theme.row_background if index % 2 == 0 else theme.row_background_alt
        scene.add("grid", Rect(
            options.sidebar_width, _row_top(options, index), timeline_width, options.row_height,
            Style(fill=fill),
            css_class="row-background",
        ))

    for day in range(total_days + 1):
        x = options.sidebar_width + day * day_width
        scene.add("grid", Line(
            x, options.header_height, x, options.height,
            Style(stroke=theme.grid_color, stroke_width=1, opacity=0.3),
            css_class="grid-day",
        ))
    for index in range(row_count):
        y = _row_top(options, index)
        scene.add("grid", Line(
            options.sidebar_width, y, options.width, y,
            Style(stroke=theme.grid_color, stroke_width=1, opacity=0.2),
            css_class="grid-row",
        ))


def _task_row(
    scene: Scene,
    options: RenderOptions,
    theme: Palette,
    feedback: Feedback,
    task: Task,
    index: int,
    start: date,
    day_width: float,
) -> None:
    y = _row_top(options, index)
    text_y = y + options.row_height / 2 + 5

    scene.add("tasks", Label(
        10, text_y, task.name, _text(theme), css_class="task-name", task_id=task.id,
    ))

    x = options.sidebar_width + day_offset(task.start_date, start) * day_width
    width = max(1, task.duration) * day_width
    full_width = width
    opacity = 1.0
    if task.id == feedback.drag_task_id:
        x += feedback.drag_dx
        opacity = 0.7
    if task.id == feedback.resize_task_id:
        width = max(MIN_RESIZE_WIDTH, width + feedback.resize_dx)

    if task.is_critical and options.show_critical_path:
        style = Style(fill=theme.critical_task_color, stroke=theme.critical_task_border, stroke_width=2)
    else:
        style = Style(fill=theme.status_fill(task.status), stroke=theme.status_stroke(task.status), stroke_width=1)
    if task.id in feedback.selected:
        style.stroke = theme.selection_color
        style.stroke_width = 3
    style.opacity = opacity

    scene.add("tasks", Rect(
        x, y + BAR_INSET, width, options.row_height - 2 * BAR_INSET, style,
        radius=BAR_RADIUS, css_class="task-bar", task_id=task.id,
    ))

    if width > LABEL_MIN_BAR_WIDTH:
        scene.add("tasks", Label(
            x + 8, text_y, task.name, _text(theme, -1, fill="white"),
            css_class="task-label", task_id=task.id,
        ))

    if options.show_progress and task.progress > 0:
        scene.add("tasks", Rect(
            x, y + BAR_INSET, full_width * task.progress / 100, options.row_height - 2 * BAR_INSET,
            Style(fill="url(#progress-pattern)", opacity=opacity),
            radius=BAR_RADIUS, css_class="progress-bar", task_id=task.id,
        ))


def arrowhead(from_x: float, from_y: float, to_x: float, to_y: float, size: float = ARROW_SIZE) -> list[tuple[float, float]]:
    """Triangle pointing at (to_x, to_y) along the chord of the curve."""
    angle = math.atan2(to_y - from_y, to_x - from_x)
    base_x = to_x - size * math.cos(angle)
    base_y = to_y - size * math.sin(angle)
    return [
        (to_x, to_y),
        (base_x - size * math.cos(angle - math.pi / 6), base_y - size * math.sin(angle - math.pi / 6)),
        (base_x - size * math.cos(angle + math.pi / 6), base_y - size * math.sin(angle + math.pi / 6)),
    ]


def _dependency(
    scene: Scene,
    theme: Palette,
    dependency_id: str,
    dependency_type: str,
    from_x: float,
    from_y: float,
    to_x: float,
    to_y: float,
) -> None:
    dash = None if dependency_type == "finish-to-start" else "5,5"
    scene.add("dependencies", Curve(
        from_x, from_y, (from_x + to_x) / 2, min(from_y, to_y) - CURVE_LIFT, to_x, to_y,
        Style(stroke=theme.dependency_color, stroke_width=2, dash=dash),
        css_class="dependency-line",
        dependency_id=dependency_id,
    ))
    scene.add("dependencies", Polygon(
        arrowhead(from_x, from_y, to_x, to_y),
        Style(fill=theme.dependency_color),
        css_class="dependency-arrow",
        dependency_id=dependency_id,
    ))


def _milestone(scene: Scene, theme: Palette, task_id: str, x: float, cy: float) -> None:
    size = MILESTONE_SIZE
    scene.add("milestones", Polygon(
        [(x, cy - size), (x + size, cy), (x, cy + size), (x - size, cy)],
        Style(fill=theme.milestone_color, stroke=theme.milestone_border, stroke_width=2),
        css_class="milestone",
        task_id=task_id,
    ))


def _link_preview(
    scene: Scene,
    options: RenderOptions,
    theme: Palette,
    feedback: Feedback,
    rows: dict[str, int],
    start: date,
    day_width: float,
    by_id: dict[str, Task],
) -> None:
    source = by_id.get(feedback.link_from_id) if feedback.link_from_id else None
    if source is None or feedback.link_point is None:
        return
    from_x = options.sidebar_width + (day_offset(source.start_date, start) + max(1, source.duration)) * day_width
    from_y = _row_center(options, rows[source.id])
    to_x, to_y = feedback.link_point
    scene.add("overlay", Line(
        from_x, from_y, to_x, to_y,
        Style(stroke=theme.link_preview_color, stroke_width=2, dash="5,5"),
        css_class="dependency-preview",
    ))


class Renderer:
    """
    Keeps a scene in sync with a TaskStore.

    Store mutations only schedule a redraw; ``get_scene()`` flushes any
    pending redraw first, so callers always see current state.
    """

    def __init__(
        self,
        store: TaskStore,
        options: RenderOptions | None = None,
        transform: ViewTransform | None = None,
        debounce: float = 0.016,
    ):
        self.store = store
        self.options = options or RenderOptions()
        self.theme = get_theme(self.options.theme)
        self.transform = transform or ViewTransform()
        self.feedback = Feedback()
        self.events = EventBus()
        self.scene: Scene | None = None
        self.render_count = 0
        self.scheduler = RedrawScheduler(self.render, debounce)

        for event in REDRAW_EVENTS:
            store.on(event, self._on_store_change)

        self.render()

    def detach(self) -> None:
        self.scheduler.cancel()
        for event in REDRAW_EVENTS:
            self.store.off(event, self._on_store_change)

    def on(self, event: str, callback):
        return self.events.on(event, callback)

    def off(self, event: str, callback) -> None:
        self.events.off(event, callback)

    def _on_store_change(self, _data: Any) -> None:
        self.scheduler.schedule()

    def request_redraw(self) -> None:
        self.scheduler.schedule()

    def render(self) -> Scene:
        """Rebuild the whole scene now."""
        self.store.events.emit("beforeRender", None)
        self.scene = build_scene(self.store, self.options, self.transform, self.theme, self.feedback)
        self.render_count += 1
        self.events.emit("render", self.scene)
        self.store.events.emit("afterRender", self.scene)
        return self.scene

    def get_scene(self) -> Scene:
        self.scheduler.flush()
        return self.scene

    @property
    def day_width(self) -> float:
        return calculate_day_width(self.store, self.options)

    # =========================================================================
    # Theme and view
    # =========================================================================

    def set_theme(self, name: str) -> Scene:
        self.theme = get_theme(name)
        self.options.theme = name
        logger.info(f"Theme set to {name}")
        self.scheduler.cancel()
        return self.render()

    def set_zoom(self, zoom: float) -> None:
        self.transform.set_zoom(zoom)

    def set_pan(self, x: float, y: float) -> None:
        self.transform.set_pan(x, y)

    def export_svg(self) -> str:
        return render_svg(self.get_scene(), self.transform)

    # =========================================================================
    # Hit testing
    # =========================================================================

    def hit_test(self, x: float, y: float) -> Hit | None:
        """Topmost task primitive under a screen point."""
        wx, wy = self.transform.to_world(x, y)
        scene = self.get_scene()

        for shape in reversed(scene.group("milestones")):
            min_x, min_y, max_x, max_y = shape.bounds()
            if min_x <= wx <= max_x and min_y <= wy <= max_y:
                return Hit(shape.task_id, "milestone", min_x, max_x - min_x, wx - min_x)

        for shape in reversed(scene.group("tasks")):
            if isinstance(shape, Rect) and shape.css_class == "task-bar" and shape.contains(wx, wy):
                return Hit(shape.task_id, "bar", shape.x, shape.width, wx - shape.x)

        if 0 <= wx <= self.options.sidebar_width and wy >= self.options.header_height:
            index = int((wy - self.options.header_height) // self.options.row_height)
            tasks = self.store.get_tasks()
            if index < len(tasks):
                return Hit(tasks[index].id, "name", 0, self.options.sidebar_width, wx)
        return None

    def click(self, x: float, y: float) -> Hit | None:
        hit = self.hit_test(x, y)
        if hit:
            self.events.emit("taskClick", {"task_id": hit.task_id, "x": x, "y": y})
        return hit

    def hover(self, x: float, y: float) -> Hit | None:
        hit = self.hit_test(x, y)
        if hit:
            self.events.emit("taskHover", {"task_id": hit.task_id, "x": x, "y": y})
        return hit
