"""Candidate card positions around a target.

For each direction (right, left, above, below) and each gap distance the card
is pushed away from the matching target edge, centered on the target's other
axis and clamped into the canvas. A candidate survives only if its footprint
(card plus badge headroom) stays clear of the target and of every committed
card, and its arrow length is inside the accepted range.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Sequence

from .annotation_config import AnnotationConfig
from .geometry import Canvas, Point, Rect, clamp, distance

logger = logging.getLogger(__name__)

Direction = Literal["right", "left", "above", "below"]

DIRECTIONS: tuple[Direction, ...] = ("right", "left", "above", "below")


@dataclass(frozen=True)
class Candidate:
    """A tentative card placement."""

    card: Rect
    direction: Direction
    gap: int
    arrow_start: Point
    arrow_length: float


def card_footprint(card: Rect, config: AnnotationConfig) -> Rect:
    """Card rectangle extended upwards to cover its badge."""
    return card.expanded(top=config.badge_headroom)


def clamp_card(x: float, y: float, size: tuple[int, int], canvas: Canvas, config: AnnotationConfig) -> Rect:
    """Clamp a card origin so the card and its badge stay inside the canvas."""
    width, height = size
    margin = config.edge_margin
    x = clamp(x, margin, canvas.width - width - margin)
    y = clamp(y, margin + config.badge_headroom, canvas.height - height - margin)
    return Rect(x, y, width, height)


def facing_edge_point(card: Rect, direction: Direction, target: Rect, inset: float) -> Point:
    """Point on the card edge that faces the target, kept away from corners."""
    tx, ty = target.center
    if direction == "right":
        return (card.x, _inset_clamp(ty, card.y, card.bottom, inset))
    if direction == "left":
        return (card.right, _inset_clamp(ty, card.y, card.bottom, inset))
    if direction == "above":
        return (_inset_clamp(tx, card.x, card.right, inset), card.bottom)
    return (_inset_clamp(tx, card.x, card.right, inset), card.y)


def _inset_clamp(value: float, low: float, high: float, inset: float) -> float:
    if high - low <= inset * 2:
        return (low + high) / 2
    return clamp(value, low + inset, high - inset)


def _position(direction: Direction, target: Rect, size: tuple[int, int], gap: int) -> tuple[float, float]:
    width, height = size
    cx, cy = target.center
    if direction == "right":
        return target.right + gap, cy - height / 2
    if direction == "left":
        return target.x - gap - width, cy - height / 2
    if direction == "above":
        return cx - width / 2, target.y - gap - height
    return cx - width / 2, target.bottom + gap


def is_clear(
    card: Rect,
    target: Rect,
    placed_cards: Sequence[Rect],
    config: AnnotationConfig,
) -> bool:
    """True if the card's footprint avoids the target and committed cards."""
    footprint = card_footprint(card, config)
    if footprint.overlaps(target, config.target_padding):
        return False
    return not any(
        footprint.overlaps(card_footprint(other, config), config.card_spacing)
        for other in placed_cards
    )


def generate_candidates(
    target: Rect,
    card_size: tuple[int, int],
    canvas: Canvas,
    placed_cards: Sequence[Rect] = (),
    config: AnnotationConfig | None = None,
) -> list[Candidate]:
    """Enumerate valid card placements for one target.

    Args:
        target: Target rectangle in image pixels.
        card_size: (width, height) of the card.
        canvas: Canvas dimensions.
        placed_cards: Rectangles of cards committed earlier in this pass.
        config: Layout configuration.

    Returns:
        Valid candidates in generation order (direction-major, ascending gap).
    """
    cfg = config or AnnotationConfig()
    target_center = target.center
    candidates = []
    rejected = 0

    for direction in DIRECTIONS:
        for gap in cfg.gap_sequence:
            x, y = _position(direction, target, card_size, gap)
            card = clamp_card(x, y, card_size, canvas, cfg)

            if not card.inside_canvas(canvas, cfg.edge_margin):
                rejected += 1
                continue
            if not is_clear(card, target, placed_cards, cfg):
                rejected += 1
                continue

            start = facing_edge_point(card, direction, target, cfg.edge_inset)
            length = distance(start, target_center)
            if not cfg.min_arrow_length <= length <= cfg.max_arrow_length:
                rejected += 1
                continue

            candidates.append(Candidate(card, direction, gap, start, length))

    logger.debug(
        "Candidates for target %s: %d valid, %d rejected",
        target,
        len(candidates),
        rejected,
    )
    return candidates
