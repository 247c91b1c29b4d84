"""Input records describing what to annotate.

The vision collaborator reports issues either in the nested wire shape::

    {"targetRect": {"x": 860, "y": 490, "width": 200, "height": 100},
     "label": "No CTA Button", "severity": "critical",
     "description": "...", "conversionImpact": "Up to 30% fewer sign-ups"}

or in the flat shape with the rectangle fields inlined::

    {"x": 860, "y": 490, "width": 200, "height": 100, "label": "No CTA Button", ...}

Both are normalized into ``TargetAnnotation``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Literal, Optional, Union

from .annotation_config import SEVERITIES
from .geometry import Canvas, Rect

logger = logging.getLogger(__name__)

Severity = Literal["critical", "warning", "info"]


@dataclass(frozen=True)
class TargetAnnotation:
    """One issue to call out on the screenshot.

    Attributes:
        target_rect: Bounding box of the page element, in image pixels.
        label: Headline shown in bold on the card (required).
        severity: critical, warning or info; selects the accent color.
        description: Longer explanation, not drawn on the card.
        conversion_impact: Optional secondary line shown under the label.
    """

    target_rect: Rect
    label: str
    severity: Severity = "info"
    description: str = ""
    conversion_impact: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "targetRect": self.target_rect.to_dict(),
            "label": self.label,
            "severity": self.severity,
            "description": self.description,
            "conversionImpact": self.conversion_impact,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TargetAnnotation:
        """Build from the nested or flat dict shape.

        Raises:
            KeyError: If the rectangle fields are missing.
            ValueError: If a rectangle field is not numeric.
        """
        rect_data = data.get("targetRect") or data.get("target_rect") or data
        impact = data.get("conversionImpact", data.get("conversion_impact"))
        return cls(
            target_rect=Rect.from_dict(rect_data),
            label=str(data.get("label") or "").strip(),
            severity=coerce_severity(data.get("severity")),
            description=str(data.get("description") or ""),
            conversion_impact=str(impact).strip() if impact else None,
        )


def coerce_severity(value: Any) -> Severity:
    """Lower-case a severity, mapping missing or unknown values to info."""
    severity = str(value or "info").lower()
    if severity not in SEVERITIES:
        logger.debug("Unknown severity %r coerced to info", severity)
        return "info"
    return severity


AnnotationInput = Union[TargetAnnotation, dict]


def normalize_annotations(
    annotations: Optional[Iterable[AnnotationInput]],
    canvas: Canvas,
    max_annotations: int = 3,
    scale_factor: float = 1.0,
) -> list[TargetAnnotation]:
    """Prepare the annotation list for layout.

    Keeps the first ``max_annotations`` entries, then drops entries with an
    empty label or an unreadable rectangle. Surviving targets are scaled by
    ``scale_factor`` and clipped to the canvas.

    Args:
        annotations: Raw annotation dicts or TargetAnnotation instances.
        canvas: Canvas the targets must fit in.
        max_annotations: Number of leading entries to consider.
        scale_factor: Multiplier from input coordinates to image pixels.

    Returns:
        Annotations ready for layout, in input order.
    """
    if not annotations:
        return []

    result = []
    for position, raw in enumerate(list(annotations)[:max_annotations]):
        if isinstance(raw, TargetAnnotation):
            annotation = raw
        else:
            try:
                annotation = TargetAnnotation.from_dict(raw)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning("Dropping annotation %d: malformed target rect (%s)", position, e)
                continue

        if not annotation.label.strip():
            logger.debug("Dropping annotation %d: empty label", position)
            continue

        rect = annotation.target_rect
        if scale_factor != 1.0:
            rect = rect.scaled(scale_factor)
        rect = rect.clip_to_canvas(canvas.width, canvas.height)

        result.append(
            TargetAnnotation(
                target_rect=rect,
                label=annotation.label.strip(),
                severity=coerce_severity(annotation.severity),
                description=annotation.description,
                conversion_impact=annotation.conversion_impact,
            )
        )

    return result
