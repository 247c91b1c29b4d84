"""Straight connector routing between a callout card and its target.

The exit edge is chosen from the angle between the card center and the
target center, bucketed into 90 degree bands:

    right   [-45, 45)
    bottom  [45, 135)
    left    [135, 180] and [-180, -135)
    top     [-135, -45)

The exit point on that edge comes from the tangent of the angle and is then
clamped to the edge's interior so it never lands on a corner. Near the band
boundaries the tangent formula runs off the edge, so the clamp is what keeps
the start point on the card.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Literal, Optional

from .annotation_config import AnnotationConfig
from .geometry import Point, Rect, clamp

logger = logging.getLogger(__name__)

Edge = Literal["right", "bottom", "left", "top"]


@dataclass(frozen=True)
class ArrowRoute:
    """Connector from a card edge to just outside the target."""

    start: Point
    end: Point
    head: tuple[Point, Point, Point]
    edge: Edge

    @property
    def length(self) -> float:
        return math.hypot(self.end[0] - self.start[0], self.end[1] - self.start[1])


def exit_edge(angle_deg: float) -> Edge:
    """Map an angle in degrees (y axis pointing down) to a card edge."""
    if -45 <= angle_deg < 45:
        return "right"
    if 45 <= angle_deg < 135:
        return "bottom"
    if angle_deg >= 135 or angle_deg < -135:
        return "left"
    return "top"


def _edge_range(low: float, high: float, inset: float) -> tuple[float, float]:
    if high - low <= inset * 2:
        mid = (low + high) / 2
        return mid, mid
    return low + inset, high - inset


def exit_point(card: Rect, angle_deg: float, inset: float) -> tuple[Point, Edge]:
    """Point where the connector leaves the card.

    Args:
        card: Card rectangle.
        angle_deg: Direction from card center to target center, in degrees.
        inset: Minimum distance kept from the card corners.

    Returns:
        (point, edge) with the point clamped onto the edge interior.
    """
    cx, cy = card.center
    half_w = card.width / 2
    half_h = card.height / 2
    tangent = math.tan(math.radians(angle_deg))
    edge = exit_edge(angle_deg)

    if edge in ("right", "left"):
        low, high = _edge_range(card.y, card.bottom, inset)
        if edge == "right":
            return (card.right, clamp(cy + half_w * tangent, low, high)), edge
        return (card.x, clamp(cy - half_w * tangent, low, high)), edge

    low, high = _edge_range(card.x, card.right, inset)
    # Bands exclude 0 and 180 degrees, so the tangent is never zero here.
    if edge == "bottom":
        return (clamp(cx + half_h / tangent, low, high), card.bottom), edge
    return (clamp(cx - half_h / tangent, low, high), card.y), edge


def snap_to_boundary(card: Rect, point: Point) -> tuple[Point, Edge]:
    """Move a point lying strictly inside the card onto its nearest edge."""
    px, py = point
    distances = {
        "left": px - card.x,
        "right": card.right - px,
        "top": py - card.y,
        "bottom": card.bottom - py,
    }
    edge = min(distances, key=distances.get)
    if edge == "left":
        return (card.x, py), edge
    if edge == "right":
        return (card.right, py), edge
    if edge == "top":
        return (px, card.y), edge
    return (px, card.bottom), edge


def entry_point(start: Point, target: Rect, margin: float) -> Point:
    """Where the connector should stop: just outside the target's near edge.

    Clips the segment from ``start`` to the target center against the target
    rectangle and backs off ``margin`` pixels from the first crossing. If the
    start already lies inside the target there is no outside edge to stop at,
    so the target center is returned.
    """
    sx, sy = start
    tx, ty = target.center
    dx, dy = tx - sx, ty - sy
    length = math.hypot(dx, dy)
    if length == 0:
        return (tx, ty)

    t_enter = 0.0
    for origin, delta, low, high in (
        (sx, dx, target.x, target.right),
        (sy, dy, target.y, target.bottom),
    ):
        if delta == 0:
            continue
        t1 = (low - origin) / delta
        t2 = (high - origin) / delta
        t_enter = max(t_enter, min(t1, t2))

    if t_enter <= 0:
        return (tx, ty)

    travel = max(0.0, t_enter * length - margin)
    return (sx + dx * travel / length, sy + dy * travel / length)


def arrowhead(start: Point, end: Point, length: float, half_angle_deg: float) -> tuple[Point, Point, Point]:
    """Triangle with its tip at ``end`` pointing along start -> end."""
    angle = math.atan2(end[1] - start[1], end[0] - start[0])
    spread = math.radians(half_angle_deg)

    left = (
        end[0] - length * math.cos(angle - spread),
        end[1] - length * math.sin(angle - spread),
    )
    right = (
        end[0] - length * math.cos(angle + spread),
        end[1] - length * math.sin(angle + spread),
    )
    return (end, left, right)


def route_arrow(card: Rect, target: Rect, config: Optional[AnnotationConfig] = None) -> ArrowRoute:
    """Compute the connector from a committed card to its target.

    Args:
        card: Committed card rectangle.
        target: Target rectangle.
        config: Supplies edge inset, target margin and arrowhead shape.

    Returns:
        ArrowRoute whose start lies on the card boundary.
    """
    cfg = config or AnnotationConfig()
    cx, cy = card.center
    tx, ty = target.center
    angle = math.degrees(math.atan2(ty - cy, tx - cx))

    start, edge = exit_point(card, angle, cfg.edge_inset)
    if card.contains_point(start):
        logger.debug("Exit point %s fell inside card %s; snapping to edge", start, card)
        start, edge = snap_to_boundary(card, start)

    end = entry_point(start, target, cfg.target_margin)
    head = arrowhead(start, end, cfg.arrowhead_length, cfg.arrowhead_angle_deg)
    return ArrowRoute(start=start, end=end, head=head, edge=edge)
