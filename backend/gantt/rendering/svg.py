"""
SVG presentation adapter: turns a Scene into a standalone SVG document.
"""

from html import escape

from gantt.rendering.primitives import Scene, Rect, Line, Curve, Label, Polygon, Style, GROUPS
from gantt.rendering.viewport import ViewTransform

SVG_NS = "http://www.w3.org/2000/svg"

PATTERN_DEFS = (
    "<defs>"
    '<pattern id="progress-pattern" width="4" height="4" patternUnits="userSpaceOnUse">'
    '<rect width="4" height="4" fill="rgba(255,255,255,0.3)"/>'
    "</pattern>"
    '<pattern id="critical-pattern" width="8" height="8" patternUnits="userSpaceOnUse">'
    '<rect width="8" height="8" fill="rgba(255,0,0,0.1)"/>'
    "</pattern>"
    "</defs>"
)


def _num(value: float) -> str:
    # Integral floats without the trailing ".0"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def _attrs(**attrs) -> str:
    parts = []
    for name, value in attrs.items():
        if value is None or value == "":
            continue
        if isinstance(value, float) or isinstance(value, int) and not isinstance(value, bool):
            value = _num(value)
        parts.append(f'{name.replace("_", "-")}="{escape(str(value))}"')
    return " ".join(parts)


def _style_attrs(style: Style, fill_default: str | None = None) -> dict:
    return {
        "fill": style.fill or fill_default,
        "stroke": style.stroke,
        "stroke_width": style.stroke_width or None,
        "stroke_dasharray": style.dash,
        "opacity": style.opacity if style.opacity != 1.0 else None,
        "font_family": style.font_family,
        "font_size": style.font_size,
        "font_weight": style.font_weight,
        "text_anchor": style.anchor,
    }


def _data_attrs(shape) -> dict:
    return {
        "class": shape.css_class,
        "data_task_id": getattr(shape, "task_id", None),
        "data_dependency_id": getattr(shape, "dependency_id", None),
    }


def render_primitive(shape) -> str:
    if isinstance(shape, Rect):
        attrs = _attrs(
            x=shape.x, y=shape.y, width=shape.width, height=shape.height,
            rx=shape.radius or None, ry=shape.radius or None,
            **_style_attrs(shape.style), **_data_attrs(shape),
        )
        return f"<rect {attrs}/>"

    if isinstance(shape, Line):
        attrs = _attrs(
            x1=shape.x1, y1=shape.y1, x2=shape.x2, y2=shape.y2,
            **_style_attrs(shape.style), **_data_attrs(shape),
        )
        return f"<line {attrs}/>"

    if isinstance(shape, Curve):
        path = (
            f"M {_num(shape.x1)} {_num(shape.y1)} "
            f"Q {_num(shape.cx)} {_num(shape.cy)} {_num(shape.x2)} {_num(shape.y2)}"
        )
        attrs = _attrs(d=path, **_style_attrs(shape.style, fill_default="none"), **_data_attrs(shape))
        return f"<path {attrs}/>"

    if isinstance(shape, Polygon):
        points = " ".join(f"{_num(x)},{_num(y)}" for x, y in shape.points)
        attrs = _attrs(points=points, **_style_attrs(shape.style), **_data_attrs(shape))
        return f"<polygon {attrs}/>"

    if isinstance(shape, Label):
        attrs = _attrs(x=shape.x, y=shape.y, **_style_attrs(shape.style), **_data_attrs(shape))
        return f"<text {attrs}>{escape(shape.text)}</text>"

    raise TypeError(f"Unsupported primitive: {type(shape).__name__}")


def render_svg(scene: Scene, transform: ViewTransform | None = None) -> str:
    transform = transform or ViewTransform()
    view = (
        f"translate({_num(transform.pan_x)}, {_num(transform.pan_y)}) "
        f"scale({_num(transform.zoom)})"
    )

    lines = [
        f'<svg xmlns="{SVG_NS}" width="{_num(scene.width)}" height="{_num(scene.height)}" '
        f'viewBox="0 0 {_num(scene.width)} {_num(scene.height)}" '
        f'style="background: {escape(scene.background)}">',
        PATTERN_DEFS,
        f'<g class="gantt-main" transform="{view}">',
    ]
    for name in GROUPS:
        lines.append(f'<g class="gantt-{name}">')
        lines.extend(render_primitive(shape) for shape in scene.group(name))
        lines.append("</g>")
    lines.append("</g>")
    lines.append("</svg>")
    return "\n".join(lines)
