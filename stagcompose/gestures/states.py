"""Gesture states.

Exactly one state is active at a time. Each active state records what it
needs from the moment the gesture started, plus the ID of the layer it acts
on so a gesture can notice when that layer disappears.
"""

from dataclasses import dataclass
from typing import Union

from stagcompose.geometry import Handle, Point


@dataclass(frozen=True)
class Idle:
    """No gesture in progress."""
    name: str = "idle"


@dataclass(frozen=True)
class Dragging:
    """Moving the layer. ``grab_offset`` is pointer minus origin at press time."""
    layer_id: str
    grab_offset: Point
    name: str = "dragging"


@dataclass(frozen=True)
class Resizing:
    """Dragging one corner handle. ``anchor`` is the world position of the opposite corner."""
    layer_id: str
    handle: Handle
    start_pointer: Point
    anchor: Point
    start_width: float
    start_height: float
    name: str = "resizing"


@dataclass(frozen=True)
class Rotating:
    """Dragging the rotation handle. ``last_angle`` is the center-to-pointer angle of the previous move."""
    layer_id: str
    last_angle: float
    name: str = "rotating"


@dataclass(frozen=True)
class Pinching:
    """Two-finger gesture: concurrent rotate and resize relative to its start."""
    layer_id: str
    start_distance: float
    start_angle: float
    start_width: float
    start_height: float
    start_rotation: float
    name: str = "pinching"


GestureState = Union[Idle, Dragging, Resizing, Rotating, Pinching]

IDLE = Idle()
