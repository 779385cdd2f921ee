"""Gesture controller.

Turns pointer, touch and wheel events into transform changes on the selected
layer. The controller is a state machine over one exclusive
:data:`~stagcompose.gestures.states.GestureState`:

    Idle ──press on body──────────▶ Dragging
         ──press on corner handle─▶ Resizing(handle)
         ──press on rotate handle─▶ Rotating
         ──two-finger touch───────▶ Pinching
    Dragging ──second finger──────▶ Pinching
    any  ──release / leave / touch end──▶ Idle

While a gesture is active, new presses are ignored until release. The one
exception is a second finger during a one-finger drag.

Every entry point returns True when the canvas should be repainted.
"""

import logging
from dataclasses import replace

from stagcompose.config import settings
from stagcompose.geometry import (
    Handle,
    Point,
    angle_between,
    corner_handle_hit,
    distance,
    local_corners,
    point_in_oriented_box,
    rotate_point,
    rotation_handle_hit,
    to_local,
    to_world,
    wrap_degrees,
)
from stagcompose.layers import Layer, LayerStack

from .events import PointerEvent, TouchEvent, WheelEvent
from .states import IDLE, Dragging, GestureState, Idle, Pinching, Resizing, Rotating

logger = logging.getLogger(__name__)

_ORIGIN = Point(0.0, 0.0)

_OPPOSITE = {
    Handle.TL: Handle.BR,
    Handle.TR: Handle.BL,
    Handle.BL: Handle.TR,
    Handle.BR: Handle.TL,
}


class GestureController:
    """Drives drag, resize, rotate and pinch gestures on a layer stack."""

    def __init__(
        self,
        stack: LayerStack,
        handle_size: float | None = None,
        rotation_handle_offset: float | None = None,
        rotation_handle_radius: float | None = None,
    ):
        self.stack = stack
        self.handle_size = handle_size if handle_size is not None else settings.HANDLE_SIZE
        self.rotation_handle_offset = (
            rotation_handle_offset if rotation_handle_offset is not None
            else settings.ROTATION_HANDLE_OFFSET
        )
        self.rotation_handle_radius = (
            rotation_handle_radius if rotation_handle_radius is not None
            else settings.ROTATION_HANDLE_RADIUS
        )
        self.state: GestureState = IDLE

    @property
    def is_active(self) -> bool:
        """Whether a gesture is in progress."""
        return not isinstance(self.state, Idle)

    # --- Pointer ---

    def pointer_down(self, event: PointerEvent) -> bool:
        """Start a gesture, selecting the layer under the pointer if needed."""
        if self.is_active:
            logger.debug("Ignoring press during %s", self.state.name)
            return False
        point = event.point
        if point is None:
            logger.debug("Ignoring malformed press %r", event)
            return False
        return self._begin(point)

    def pointer_move(self, event: PointerEvent) -> bool:
        """Update the active single-pointer gesture."""
        if not self.is_active or isinstance(self.state, Pinching):
            return False
        point = event.point
        if point is None:
            logger.debug("Ignoring malformed move %r", event)
            return False
        layer = self._active_layer()
        if layer is None:
            return False

        if isinstance(self.state, Dragging):
            self._drag(layer, point)
        elif isinstance(self.state, Resizing):
            self._resize(layer, point)
        elif isinstance(self.state, Rotating):
            self._rotate(layer, point)
        return True

    def pointer_up(self, event: PointerEvent | None = None) -> bool:
        """End the active gesture."""
        return self.end()

    def pointer_leave(self, event: PointerEvent | None = None) -> bool:
        """End the active gesture when the pointer leaves the surface."""
        return self.end()

    # --- Touch ---

    def touch_start(self, event: TouchEvent) -> bool:
        """One contact behaves like a pointer press, two start a pinch.

        A second finger landing during a one-finger drag turns the drag into
        a pinch on the dragged layer.
        """
        points = event.points
        if self.is_active:
            if isinstance(self.state, Dragging) and points and len(points) == 2:
                layer = self._active_layer()
                return layer is not None and self._start_pinch(layer, points)
            logger.debug("Ignoring touch start during %s", self.state.name)
            return False
        if not points or len(points) > 2:
            logger.debug("Ignoring touch start with contacts %r", event.touches)
            return False
        if len(points) == 1:
            return self._begin(points[0])

        layer = self.stack.selected
        if layer is None:
            return False
        return self._start_pinch(layer, points)

    def touch_move(self, event: TouchEvent) -> bool:
        """Update a pinch, or a single-contact gesture."""
        points = event.points
        if not self.is_active or not points:
            return False
        if not isinstance(self.state, Pinching):
            if len(points) == 2 and isinstance(self.state, Dragging):
                layer = self._active_layer()
                if layer is not None:
                    self._start_pinch(layer, points)
                return False
            if len(points) != 1:
                return False
            return self.pointer_move(PointerEvent(points[0].x, points[0].y))
        if len(points) != 2:
            return False

        layer = self._active_layer()
        if layer is None:
            return False
        self._pinch(layer, points[0], points[1])
        return True

    def touch_end(self, event: TouchEvent | None = None) -> bool:
        """End the active gesture."""
        return self.end()

    # --- Wheel ---

    def wheel(self, event: WheelEvent) -> bool:
        """Scale the selected layer by one zoom step. Ignored during a gesture."""
        if self.is_active:
            return False
        layer = self.stack.selected
        if layer is None:
            return False
        factor = settings.WHEEL_ZOOM_IN if event.zoom_in else settings.WHEEL_ZOOM_OUT
        minimum = self.stack.min_layer_size
        transform = layer.transform
        transform.width = max(minimum, transform.width * factor)
        transform.height = max(minimum, transform.height * factor)
        return True

    # --- Lifecycle ---

    def end(self) -> bool:
        """Return to Idle. True if a gesture was active."""
        was_active = self.is_active
        self.state = IDLE
        return was_active

    def abort(self) -> None:
        """Drop any gesture without touching layer state."""
        if self.is_active:
            logger.info("Aborting %s gesture", self.state.name)
        self.state = IDLE

    # --- Internals ---

    def _begin(self, point: Point) -> bool:
        layer = self.stack.selected
        if layer is not None:
            state = self._classify(layer, point)
            if state is not None:
                self.state = state
                return False

        index = self.stack.layer_at(point)
        if index is None:
            had_selection = self.stack.selected_index is not None
            self.stack.select(None)
            return had_selection

        self.stack.select(index)
        state = self._classify(self.stack.selected, point)
        if state is not None:
            self.state = state
        return True

    def _classify(self, layer: Layer, point: Point) -> GestureState | None:
        """Pick the gesture a press on ``layer`` starts. Handles win over the body."""
        transform = layer.transform
        local = to_local(point, transform)

        if rotation_handle_hit(local, transform, self.rotation_handle_offset,
                               self.rotation_handle_radius):
            return Rotating(layer_id=layer.id, last_angle=angle_between(transform.center, point))

        handle = corner_handle_hit(local, transform, self.handle_size)
        if handle is not Handle.NONE:
            return Resizing(
                layer_id=layer.id,
                handle=handle,
                start_pointer=point,
                anchor=to_world(local_corners(transform)[_OPPOSITE[handle]], transform),
                start_width=transform.width,
                start_height=transform.height,
            )

        if point_in_oriented_box(point, transform):
            return Dragging(
                layer_id=layer.id,
                grab_offset=Point(point.x - transform.x, point.y - transform.y),
            )
        return None

    def _active_layer(self) -> Layer | None:
        layer = self.stack.get(self.state.layer_id)
        if layer is None:
            logger.warning(
                "Layer %s vanished during %s, releasing gesture",
                self.state.layer_id, self.state.name,
            )
            self.state = IDLE
        return layer

    def _drag(self, layer: Layer, point: Point) -> None:
        offset = self.state.grab_offset
        layer.transform.x = point.x - offset.x
        layer.transform.y = point.y - offset.y

    def _resize(self, layer: Layer, point: Point) -> None:
        state = self.state
        transform = layer.transform
        minimum = self.stack.min_layer_size

        # Pointer delta in the layer's own axes
        world_delta = Point(point.x - state.start_pointer.x, point.y - state.start_pointer.y)
        dx, dy = rotate_point(world_delta, _ORIGIN, -transform.rotation)

        handle = state.handle
        if handle in (Handle.TR, Handle.BR):
            width = state.start_width + dx
        else:
            width = state.start_width - dx
        if handle in (Handle.BL, Handle.BR):
            height = state.start_height + dy
        else:
            height = state.start_height - dy

        width = max(minimum, width)
        height = max(minimum, height)

        # Place the box so the opposite corner keeps its world position
        opposite = _OPPOSITE[handle]
        corner_x = width if opposite in (Handle.TR, Handle.BR) else 0.0
        corner_y = height if opposite in (Handle.BL, Handle.BR) else 0.0
        offset = rotate_point(
            Point(corner_x - width / 2, corner_y - height / 2), _ORIGIN, transform.rotation
        )
        transform.x = state.anchor.x - offset.x - width / 2
        transform.y = state.anchor.y - offset.y - height / 2
        transform.width = width
        transform.height = height

    def _rotate(self, layer: Layer, point: Point) -> None:
        angle = angle_between(layer.transform.center, point)
        layer.transform.rotation += wrap_degrees(angle - self.state.last_angle)
        self.state = replace(self.state, last_angle=angle)

    def _pinch(self, layer: Layer, first: Point, second: Point) -> None:
        state = self.state
        transform = layer.transform
        minimum = self.stack.min_layer_size

        scale = distance(first, second) / state.start_distance
        transform.width = max(minimum, state.start_width * scale)
        transform.height = max(minimum, state.start_height * scale)
        transform.rotation = state.start_rotation + (angle_between(first, second) - state.start_angle)

    def _start_pinch(self, layer: Layer, points: list[Point]) -> bool:
        start_distance = distance(points[0], points[1])
        if start_distance <= 0:
            logger.debug("Ignoring pinch with coincident contacts")
            return False
        transform = layer.transform
        self.state = Pinching(
            layer_id=layer.id,
            start_distance=start_distance,
            start_angle=angle_between(points[0], points[1]),
            start_width=transform.width,
            start_height=transform.height,
            start_rotation=transform.rotation,
        )
        return False
