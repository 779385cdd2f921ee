"""
Geometry helpers for oriented layer boxes.

All functions are pure. Angles are in degrees and positive angles rotate
clockwise on screen, because the y axis grows downward.

Hit-testing never rotates the layer into world space. Instead the cursor is
brought into the layer's local frame (origin at the unrotated top-left
corner), where every test is an axis-aligned or circular comparison.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from stagcompose.layers.base import LayerTransform


class Point(NamedTuple):
    """A 2D point in canvas (world) or local coordinates."""
    x: float
    y: float


class Handle(str, Enum):
    """Corner resize handles in the layer's local frame."""
    NONE = "none"
    TL = "tl"
    TR = "tr"
    BL = "bl"
    BR = "br"


def rotate_point(point: Point, pivot: Point, angle_degrees: float) -> Point:
    """Rotate ``point`` about ``pivot`` by ``angle_degrees`` (clockwise on screen)."""
    theta = math.radians(angle_degrees)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    dx = point[0] - pivot[0]
    dy = point[1] - pivot[1]
    return Point(
        pivot[0] + dx * cos_t - dy * sin_t,
        pivot[1] + dx * sin_t + dy * cos_t,
    )


def box_center(box: LayerTransform) -> Point:
    """Center of the box, which is also its rotation pivot."""
    return Point(box.x + box.width / 2, box.y + box.height / 2)


def to_local(point: Point, box: LayerTransform) -> Point:
    """
    Map a world point into the box's local, unrotated frame.

    The result lies in ``[0, width] x [0, height]`` when the point is inside
    the oriented box.
    """
    center = box_center(box)
    unrotated = rotate_point(point, center, -box.rotation)
    return Point(unrotated.x - box.x, unrotated.y - box.y)


def to_world(local_point: Point, box: LayerTransform) -> Point:
    """Inverse of :func:`to_local`."""
    world = Point(local_point[0] + box.x, local_point[1] + box.y)
    return rotate_point(world, box_center(box), box.rotation)


def point_in_oriented_box(point: Point, box: LayerTransform) -> bool:
    """Check whether a world point lies inside the rotated box (edges inclusive)."""
    local = to_local(point, box)
    return 0 <= local.x <= box.width and 0 <= local.y <= box.height


def local_corners(box: LayerTransform) -> dict[Handle, Point]:
    """Corner positions in the local frame, keyed by handle."""
    return {
        Handle.TL: Point(0.0, 0.0),
        Handle.TR: Point(box.width, 0.0),
        Handle.BL: Point(0.0, box.height),
        Handle.BR: Point(box.width, box.height),
    }


def corner_handle_hit(local_point: Point, box: LayerTransform, handle_size: float) -> Handle:
    """
    Find the corner handle under a local point.

    Each handle is an axis-aligned square of side ``handle_size`` centered on
    its corner.

    Returns:
        The hit handle or ``Handle.NONE``
    """
    half = handle_size / 2
    for handle, corner in local_corners(box).items():
        if abs(local_point[0] - corner.x) <= half and abs(local_point[1] - corner.y) <= half:
            return handle
    return Handle.NONE


def rotation_handle_position(box: LayerTransform, handle_offset: float) -> Point:
    """Local position of the rotation handle, centered above the top edge."""
    return Point(box.width / 2, -handle_offset)


def rotation_handle_hit(
    local_point: Point,
    box: LayerTransform,
    handle_offset: float,
    handle_radius: float,
) -> bool:
    """Circular hit test against the rotation handle."""
    handle = rotation_handle_position(box, handle_offset)
    return distance(local_point, handle) <= handle_radius


def oriented_corners(box: LayerTransform) -> list[Point]:
    """World-space corners in drawing order TL, TR, BR, BL."""
    corners = local_corners(box)
    return [
        to_world(corners[handle], box)
        for handle in (Handle.TL, Handle.TR, Handle.BR, Handle.BL)
    ]


def oriented_bounds(box: LayerTransform) -> tuple[float, float, float, float]:
    """Axis-aligned bounds ``(min_x, min_y, max_x, max_y)`` of the rotated box."""
    corners = oriented_corners(box)
    xs = [c.x for c in corners]
    ys = [c.y for c in corners]
    return min(xs), min(ys), max(xs), max(ys)


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(b[0] - a[0], b[1] - a[1])


def angle_between(origin: Point, point: Point) -> float:
    """Screen angle in degrees of the vector from ``origin`` to ``point``."""
    return math.degrees(math.atan2(point[1] - origin[1], point[0] - origin[0]))


def wrap_degrees(delta: float) -> float:
    """Wrap an angle step into ``(-180, 180]``."""
    wrapped = math.fmod(delta, 360.0)
    if wrapped <= -180.0:
        wrapped += 360.0
    elif wrapped > 180.0:
        wrapped -= 360.0
    return wrapped


def is_finite_point(point) -> bool:
    """True if ``point`` is a pair of finite numbers."""
    try:
        x, y = point
    except (TypeError, ValueError):
        return False
    if not isinstance(x, (int, float)) or not isinstance(y, (int, float)):
        return False
    return math.isfinite(x) and math.isfinite(y)
