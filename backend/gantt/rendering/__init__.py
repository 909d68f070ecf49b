from gantt.rendering.primitives import Scene, Rect, Line, Curve, Label, Polygon, Style
from gantt.rendering.themes import Palette, THEMES, get_theme
from gantt.rendering.viewport import ViewTransform, MIN_ZOOM, MAX_ZOOM
from gantt.rendering.scheduler import RedrawScheduler
from gantt.rendering.renderer import Renderer, RenderOptions, Feedback, Hit, build_scene
from gantt.rendering.svg import render_svg
