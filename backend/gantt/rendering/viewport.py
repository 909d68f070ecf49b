"""
Pan/zoom view transform.

screen = world * zoom + pan. Zoom is clamped to [MIN_ZOOM, MAX_ZOOM].
"""

from dataclasses import dataclass, field

MIN_ZOOM = 0.1
MAX_ZOOM = 5.0
ZOOM_STEP_IN = 1.1
ZOOM_STEP_OUT = 0.9


def clamp_zoom(zoom: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


@dataclass
class ViewTransform:
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    # Screen point where an auxiliary-button pan started, minus the pan at that time
    _pan_anchor: tuple[float, float] | None = field(default=None, repr=False, compare=False)

    def set_zoom(self, zoom: float) -> None:
        self.zoom = clamp_zoom(zoom)

    def set_pan(self, x: float, y: float) -> None:
        self.pan_x = x
        self.pan_y = y

    def pan_by(self, dx: float, dy: float) -> None:
        self.pan_x += dx
        self.pan_y += dy

    def zoom_at(self, factor: float, cx: float, cy: float) -> bool:
        """
        Scale by ``factor`` keeping the world point under (cx, cy) fixed.

        Returns False when the clamp left the zoom unchanged.
        """
        old_zoom = self.zoom
        new_zoom = clamp_zoom(old_zoom * factor)
        if new_zoom == old_zoom:
            return False
        ratio = new_zoom / old_zoom
        self.pan_x = cx - (cx - self.pan_x) * ratio
        self.pan_y = cy - (cy - self.pan_y) * ratio
        self.zoom = new_zoom
        return True

    def wheel(self, delta_y: float, cx: float, cy: float) -> bool:
        """Wheel down zooms out, wheel up zooms in, around the cursor."""
        return self.zoom_at(ZOOM_STEP_OUT if delta_y > 0 else ZOOM_STEP_IN, cx, cy)

    def zoom_in(self) -> None:
        self.set_zoom(self.zoom * ZOOM_STEP_IN)

    def zoom_out(self) -> None:
        self.set_zoom(self.zoom * ZOOM_STEP_OUT)

    def reset(self) -> None:
        self.zoom = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0

    def handle_key(self, key: str) -> bool:
        if key in ("+", "="):
            self.zoom_in()
        elif key == "-":
            self.zoom_out()
        elif key == "0":
            self.reset()
        else:
            return False
        return True

    # Auxiliary-button (middle/right) drag panning

    def begin_pan(self, x: float, y: float) -> None:
        self._pan_anchor = (x - self.pan_x, y - self.pan_y)

    def update_pan(self, x: float, y: float) -> bool:
        if self._pan_anchor is None:
            return False
        self.pan_x = x - self._pan_anchor[0]
        self.pan_y = y - self._pan_anchor[1]
        return True

    def end_pan(self) -> None:
        self._pan_anchor = None

    @property
    def is_panning(self) -> bool:
        return self._pan_anchor is not None

    def to_world(self, x: float, y: float) -> tuple[float, float]:
        return (x - self.pan_x) / self.zoom, (y - self.pan_y) / self.zoom

    def to_screen(self, x: float, y: float) -> tuple[float, float]:
        return x * self.zoom + self.pan_x, y * self.zoom + self.pan_y
