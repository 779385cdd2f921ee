"""Input event dataclasses for the gesture controller.

Coordinates are canvas-relative pixels. These events are produced by a GUI
binding, by the HTTP API, or directly by tests.
"""

from dataclasses import dataclass

from stagcompose.geometry import Point, is_finite_point


@dataclass
class PointerEvent:
    """Mouse/pen pointer event.

    Attributes:
        x: X coordinate relative to the canvas
        y: Y coordinate relative to the canvas
    """
    x: float
    y: float

    @property
    def point(self) -> Point | None:
        """The event position, or None if the coordinates are malformed."""
        if not is_finite_point((self.x, self.y)):
            return None
        return Point(float(self.x), float(self.y))


@dataclass
class TouchEvent:
    """Multi-touch event.

    Attributes:
        touches: Concurrent contact points, in contact order
    """
    touches: tuple[tuple[float, float], ...] = ()

    @property
    def points(self) -> list[Point] | None:
        """Contact points, or None if any contact is malformed."""
        points = []
        for touch in self.touches:
            if not is_finite_point(touch):
                return None
            points.append(Point(float(touch[0]), float(touch[1])))
        return points


@dataclass
class WheelEvent:
    """Scroll wheel event.

    Attributes:
        x: X coordinate relative to the canvas
        y: Y coordinate relative to the canvas
        delta_y: Scroll delta, negative when scrolling up (zoom in)
    """
    x: float = 0.0
    y: float = 0.0
    delta_y: float = 0.0

    @property
    def zoom_in(self) -> bool:
        """Whether this scroll step enlarges the layer."""
        return self.delta_y < 0
