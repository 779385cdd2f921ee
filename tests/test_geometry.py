"""Tests for oriented-box geometry and hit-testing."""

import math

import pytest

from stagcompose.geometry import (
    Handle,
    Point,
    angle_between,
    corner_handle_hit,
    is_finite_point,
    oriented_bounds,
    point_in_oriented_box,
    rotate_point,
    rotation_handle_hit,
    to_local,
    to_world,
    wrap_degrees,
)
from stagcompose.layers import LayerTransform


class TestRotatePoint:
    def test_zero_angle_is_identity(self):
        assert rotate_point(Point(3, 4), Point(1, 1), 0) == pytest.approx((3, 4))

    def test_positive_angle_turns_clockwise_on_screen(self):
        # +x axis turns toward +y (down) for a positive angle
        result = rotate_point(Point(1, 0), Point(0, 0), 90)
        assert result.x == pytest.approx(0, abs=1e-9)
        assert result.y == pytest.approx(1)

    def test_rotation_about_pivot(self):
        result = rotate_point(Point(20, 10), Point(10, 10), 180)
        assert result == pytest.approx((0, 10))


class TestLocalFrame:
    @pytest.mark.parametrize("rotation", [0, 17.5, 45, 90, 133, 180, -72, 359])
    @pytest.mark.parametrize("point", [(0, 0), (125.5, -40), (310, 220), (-5.25, 999)])
    def test_to_world_inverts_to_local(self, rotation, point):
        box = LayerTransform(x=40, y=60, width=120, height=80, rotation=rotation)
        round_trip = to_world(to_local(Point(*point), box), box)
        assert round_trip.x == pytest.approx(point[0], abs=1e-9)
        assert round_trip.y == pytest.approx(point[1], abs=1e-9)

    def test_unrotated_local_is_offset(self):
        box = LayerTransform(x=10, y=20, width=50, height=50)
        assert to_local(Point(15, 30), box) == pytest.approx((5, 10))

    def test_center_is_fixed_under_rotation(self):
        box = LayerTransform(x=10, y=20, width=50, height=30, rotation=63)
        assert to_local(Point(35, 35), box) == pytest.approx((25, 15))


class TestPointInOrientedBox:
    def test_edges_are_inclusive(self):
        box = LayerTransform(x=0, y=0, width=100, height=50)
        assert point_in_oriented_box(Point(0, 0), box)
        assert point_in_oriented_box(Point(100, 50), box)
        assert not point_in_oriented_box(Point(100.5, 50), box)

    def test_rotated_box_excludes_unrotated_corner(self):
        box = LayerTransform(x=0, y=0, width=100, height=100, rotation=45)
        # Corner of the unrotated square lies outside the diamond
        assert not point_in_oriented_box(Point(2, 2), box)
        assert point_in_oriented_box(Point(50, 50), box)
        # Diamond tip pokes out beyond the original top edge
        assert point_in_oriented_box(Point(50, -20), box)

    def test_rotated_90_swaps_extent(self):
        box = LayerTransform(x=0, y=0, width=40, height=20, rotation=90)
        assert point_in_oriented_box(Point(20, 25), box)
        assert not point_in_oriented_box(Point(2, 10), box)


class TestHandles:
    def test_corner_handles(self):
        box = LayerTransform(x=0, y=0, width=100, height=60)
        assert corner_handle_hit(Point(1, -2), box, 10) is Handle.TL
        assert corner_handle_hit(Point(104, 3), box, 10) is Handle.TR
        assert corner_handle_hit(Point(-5, 65), box, 10) is Handle.BL
        assert corner_handle_hit(Point(100, 60), box, 10) is Handle.BR
        assert corner_handle_hit(Point(50, 30), box, 10) is Handle.NONE
        assert corner_handle_hit(Point(106, 60), box, 10) is Handle.NONE

    def test_rotation_handle_above_top_edge(self):
        box = LayerTransform(x=0, y=0, width=100, height=100)
        assert rotation_handle_hit(to_local(Point(50, -30), box), box, 30, 8)
        assert rotation_handle_hit(to_local(Point(55, -25), box), box, 30, 8)
        assert not rotation_handle_hit(to_local(Point(50, -45), box), box, 30, 8)

    def test_rotation_handle_follows_rotation(self):
        box = LayerTransform(x=0, y=0, width=100, height=100, rotation=90)
        # Above the top edge turns to the right of the box
        assert rotation_handle_hit(to_local(Point(130, 50), box), box, 30, 8)
        assert not rotation_handle_hit(to_local(Point(50, -30), box), box, 30, 8)


class TestBounds:
    def test_unrotated_bounds(self):
        box = LayerTransform(x=5, y=6, width=10, height=20)
        assert oriented_bounds(box) == pytest.approx((5, 6, 15, 26))

    def test_rotated_45_bounds(self):
        box = LayerTransform(x=50, y=50, width=100, height=100, rotation=45)
        half_diagonal = 50 * math.sqrt(2)
        assert oriented_bounds(box) == pytest.approx((
            100 - half_diagonal, 100 - half_diagonal,
            100 + half_diagonal, 100 + half_diagonal,
        ))


class TestAngles:
    def test_angle_between(self):
        assert angle_between(Point(0, 0), Point(10, 0)) == pytest.approx(0)
        assert angle_between(Point(0, 0), Point(0, 10)) == pytest.approx(90)
        assert angle_between(Point(0, 0), Point(0, -10)) == pytest.approx(-90)

    @pytest.mark.parametrize("delta,expected", [
        (0, 0),
        (90, 90),
        (180, 180),
        (-180, 180),
        (270, -90),
        (-350, 10),
        (725, 5),
    ])
    def test_wrap_degrees(self, delta, expected):
        assert wrap_degrees(delta) == pytest.approx(expected)


class TestIsFinitePoint:
    @pytest.mark.parametrize("value", [(0, 0), (1.5, -3), [2, 4]])
    def test_accepts_numbers(self, value):
        assert is_finite_point(value)

    @pytest.mark.parametrize("value", [
        None, (1,), (1, 2, 3), ("1", 2), (float("nan"), 0), (0, float("inf")),
    ])
    def test_rejects_malformed(self, value):
        assert not is_finite_point(value)
