"""
Draw primitives.

The scene builder emits these plain records; presentation adapters (SVG,
canvas, an immediate-mode UI) turn them into pixels. Coordinates are in world
units: the view transform is applied by the adapter, not baked in.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Iterator, Union


@dataclass
class Style:
    fill: str | None = None
    stroke: str | None = None
    stroke_width: float = 0
    opacity: float = 1.0
    dash: str | None = None  # e.g. "5,5"
    font_family: str | None = None
    font_size: float | None = None
    font_weight: str | None = None
    anchor: str | None = None  # text-anchor


@dataclass
class Rect:
    x: float
    y: float
    width: float
    height: float
    style: Style = field(default_factory=Style)
    radius: float = 0
    css_class: str = ""
    task_id: str | None = None

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height


@dataclass
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    style: Style = field(default_factory=Style)
    css_class: str = ""


@dataclass
class Curve:
    """Quadratic Bezier from start through control point to end."""
    x1: float
    y1: float
    cx: float
    cy: float
    x2: float
    y2: float
    style: Style = field(default_factory=Style)
    css_class: str = ""
    dependency_id: str | None = None


@dataclass
class Label:
    x: float
    y: float
    text: str
    style: Style = field(default_factory=Style)
    css_class: str = ""
    task_id: str | None = None


@dataclass
class Polygon:
    points: list[tuple[float, float]]
    style: Style = field(default_factory=Style)
    css_class: str = ""
    task_id: str | None = None
    dependency_id: str | None = None

    def bounds(self) -> tuple[float, float, float, float]:
        xs = [p[0] for p in self.points]
        ys = [p[1] for p in self.points]
        return min(xs), min(ys), max(xs), max(ys)


Primitive = Union[Rect, Line, Curve, Label, Polygon]

# Paint order, back to front
GROUPS = ("header", "grid", "tasks", "dependencies", "milestones", "overlay")


@dataclass
class Scene:
    width: float
    height: float
    background: str
    groups: dict[str, list[Primitive]] = field(default_factory=lambda: {name: [] for name in GROUPS})

    def add(self, group: str, primitive: Primitive) -> Primitive:
        self.groups[group].append(primitive)
        return primitive

    def group(self, name: str) -> list[Primitive]:
        return self.groups[name]

    def __iter__(self) -> Iterator[Primitive]:
        for name in GROUPS:
            yield from self.groups[name]

    def __len__(self) -> int:
        return sum(len(items) for items in self.groups.values())

    def for_task(self, task_id: str) -> list[Primitive]:
        return [p for p in self if getattr(p, "task_id", None) == task_id]

    def for_dependency(self, dependency_id: str) -> list[Primitive]:
        return [p for p in self if getattr(p, "dependency_id", None) == dependency_id]

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form, each primitive tagged with its ``kind``."""
        return {
            "width": self.width,
            "height": self.height,
            "background": self.background,
            "groups": {
                name: [{"kind": type(p).__name__.lower(), **asdict(p)} for p in self.groups[name]]
                for name in GROUPS
            },
        }
