"""Tests for arrow routing between cards and targets."""

import math

import pytest

from leadshot.annotation.annotation_config import AnnotationConfig
from leadshot.annotation.arrow_router import (
    arrowhead,
    entry_point,
    exit_edge,
    exit_point,
    route_arrow,
    snap_to_boundary,
)
from leadshot.annotation.geometry import Rect


def _target_at_angle(card, angle_deg, radius=400, size=20):
    cx, cy = card.center
    tx = cx + radius * math.cos(math.radians(angle_deg))
    ty = cy + radius * math.sin(math.radians(angle_deg))
    return Rect(tx - size / 2, ty - size / 2, size, size)


@pytest.mark.parametrize(
    "angle, edge",
    [
        (0, "right"),
        (-45, "right"),
        (44.999, "right"),
        (45, "bottom"),
        (90, "bottom"),
        (134.999, "bottom"),
        (135, "left"),
        (180, "left"),
        (-180, "left"),
        (-135.001, "left"),
        (-135, "top"),
        (-90, "top"),
        (-45.001, "top"),
    ],
)
def test_exit_edge_bands(angle, edge):
    assert exit_edge(angle) == edge


@pytest.mark.parametrize(
    "angle",
    [0, 44.9, 45, 45.1, 90, 134.9, 135, 135.1, 180, -44.9, -45, -45.1, -90, -134.9, -135, -135.1],
)
def test_start_on_boundary_near_band_edges(angle):
    """Near the 45-degree band boundaries the start still lands on the card edge, away from corners."""
    config = AnnotationConfig()
    card = Rect(800, 500, 280, 46)
    target = _target_at_angle(card, angle)

    route = route_arrow(card, target, config)

    assert card.on_boundary(route.start)
    assert not card.contains_point(route.start)
    corners = [(card.x, card.y), (card.right, card.y), (card.x, card.bottom), (card.right, card.bottom)]
    nearest_corner = min(math.dist(route.start, c) for c in corners)
    assert nearest_corner >= config.edge_inset - 1e-9


def test_straight_right_route():
    card = Rect(100, 100, 200, 50)
    target = Rect(500, 100, 50, 50)

    route = route_arrow(card, target)

    assert route.edge == "right"
    assert route.start == pytest.approx((300, 125))
    assert route.end == pytest.approx((496, 125))
    assert route.head[0] == route.end
    assert route.head[1][0] < route.end[0]
    assert route.head[2][0] < route.end[0]


def test_straight_down_route():
    card = Rect(100, 100, 200, 50)
    target = Rect(150, 300, 100, 40)

    route = route_arrow(card, target)

    assert route.edge == "bottom"
    assert route.start == pytest.approx((200, 150))
    assert route.end == pytest.approx((200, 296))


def test_tangent_overshoot_is_clamped():
    """At 30 degrees the tangent formula runs past a short card's bottom corner."""
    card = Rect(100, 100, 280, 46)

    point, edge = exit_point(card, 30, inset=10)

    assert edge == "right"
    assert point == pytest.approx((380, 136))


def test_exit_point_on_top_edge():
    card = Rect(100, 100, 280, 46)

    point, edge = exit_point(card, -90, inset=10)

    assert edge == "top"
    assert point == pytest.approx((240, 100))


def test_snap_to_boundary():
    card = Rect(0, 0, 100, 50)

    assert snap_to_boundary(card, (10, 25)) == ((0, 25), "left")
    assert snap_to_boundary(card, (50, 45)) == ((50, 50), "bottom")
    assert snap_to_boundary(card, (95, 20)) == ((100, 20), "right")
    assert snap_to_boundary(card, (50, 3)) == ((50, 0), "top")


def test_entry_point_stops_outside_target():
    target = Rect(500, 100, 50, 50)

    end = entry_point((300, 125), target, margin=4)

    assert end == pytest.approx((496, 125))
    assert not target.contains_point(end)


def test_entry_point_diagonal_hits_near_edge():
    target = Rect(200, 200, 100, 100)

    end = entry_point((100, 100), target, margin=0)

    assert end == pytest.approx((200, 200))


def test_entry_point_from_inside_target_returns_center():
    target = Rect(0, 0, 100, 100)

    assert entry_point((10, 10), target, margin=4) == (50, 50)


def test_arrowhead_shape():
    head = arrowhead((0, 0), (100, 0), length=10, half_angle_deg=30)

    tip, left, right = head
    assert tip == (100, 0)
    assert math.dist(tip, left) == pytest.approx(10)
    assert math.dist(tip, right) == pytest.approx(10)
    assert left[1] == pytest.approx(5)
    assert right[1] == pytest.approx(-5)
    assert left[0] == pytest.approx(100 - 10 * math.cos(math.radians(30)))


def test_route_is_deterministic():
    card = Rect(400, 300, 280, 64)
    target = Rect(900, 520, 120, 50)

    assert route_arrow(card, target) == route_arrow(card, target)
