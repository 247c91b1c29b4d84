"""Greedy placement of callout cards.

Annotations are placed one at a time in input order. Each placement sees the
cards committed before it and never moves them, so the result depends on the
input order. The committed cards are threaded through the fold as an
immutable tuple rather than held on a shared object.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from .annotation_config import AnnotationConfig
from .arrow_router import ArrowRoute, route_arrow
from .candidates import Candidate, clamp_card, generate_candidates
from .geometry import Canvas, Rect
from .target_annotation import TargetAnnotation
from .text_layout import CardText, layout_card_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacedCard:
    """A committed card with its routed arrow.

    Attributes:
        index: Position in the committed sequence (badge number - 1).
        annotation: The annotation this card describes.
        card: Card rectangle on the canvas.
        text: Wrapped label and impact lines.
        arrow: Connector from the card edge to the target.
        arrow_length: Length of the selected candidate's arrow, measured to the
            target center; None for degraded placements.
        degraded: True when no candidate met the constraints.
    """

    index: int
    annotation: TargetAnnotation
    card: Rect
    text: CardText
    arrow: ArrowRoute
    arrow_length: Optional[float]
    degraded: bool = False

    @property
    def badge_number(self) -> int:
        return self.index + 1


def select_candidate(candidates: Sequence[Candidate], ideal_length: float) -> Optional[Candidate]:
    """Pick the candidate whose arrow is closest to the ideal length.

    The sort is stable, so ties keep generation order (right, left, above,
    below; shorter gaps first).
    """
    if not candidates:
        return None
    ranked = sorted(candidates, key=lambda c: abs(c.arrow_length - ideal_length))
    return ranked[0]


def fallback_card(target: Rect, size: tuple[int, int], canvas: Canvas, config: AnnotationConfig) -> Rect:
    """Degraded placement: right of the target at a small gap, clamped to the canvas."""
    _, height = size
    cy = target.center[1]
    return clamp_card(target.right + config.fallback_gap, cy - height / 2, size, canvas, config)


def place_card(
    annotation: TargetAnnotation,
    placed: tuple[PlacedCard, ...],
    canvas: Canvas,
    config: Optional[AnnotationConfig] = None,
) -> PlacedCard:
    """Place one annotation against the cards committed so far.

    Args:
        annotation: Annotation to place.
        placed: Cards committed earlier in this pass, in order.
        canvas: Canvas dimensions.
        config: Layout configuration.

    Returns:
        The new PlacedCard; the caller appends it to the committed tuple.
    """
    cfg = config or AnnotationConfig()
    text = layout_card_text(annotation.label, annotation.conversion_impact, cfg)
    size = (text.width, text.height)
    target = annotation.target_rect

    candidates = generate_candidates(
        target,
        size,
        canvas,
        [p.card for p in placed],
        cfg,
    )
    chosen = select_candidate(candidates, cfg.ideal_arrow_length)

    if chosen is not None:
        card = chosen.card
        arrow_length = chosen.arrow_length
        degraded = False
        logger.debug(
            "Placed %r %s of target at gap=%d arrow_length=%.1f",
            annotation.label,
            chosen.direction,
            chosen.gap,
            arrow_length,
        )
    else:
        card = fallback_card(target, size, canvas, cfg)
        arrow_length = None
        degraded = True
        logger.warning(
            "Degraded placement for %r: no candidate cleared target %s and %d placed card(s)",
            annotation.label,
            target,
            len(placed),
        )

    return PlacedCard(
        index=len(placed),
        annotation=annotation,
        card=card,
        text=text,
        arrow=route_arrow(card, target, cfg),
        arrow_length=arrow_length,
        degraded=degraded,
    )


def layout_annotations(
    annotations: Sequence[TargetAnnotation],
    canvas: Canvas,
    config: Optional[AnnotationConfig] = None,
) -> tuple[PlacedCard, ...]:
    """Place every annotation in order, each seeing only earlier cards."""
    cfg = config or AnnotationConfig()
    placed: tuple[PlacedCard, ...] = ()
    for annotation in annotations:
        placed = placed + (place_card(annotation, placed, canvas, cfg),)
    return placed
