"""Centralized configuration for callout annotation.

Defines card geometry, placement search parameters, arrow routing constants
and styling. Supports severity-specific style overrides and loading from
environment variables or a JSON style file.
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

SEVERITIES = ("critical", "warning", "info")


@dataclass
class AnnotationConfig:
    """Configuration for callout card layout and rendering.

    Attributes:
        max_annotations: Only this many leading entries are considered.
        card_width: Fixed card width shared by every card in a run.
        card_padding: Inner padding above/below the text block.
        text_inset: Horizontal offset of text from the card's left edge.
        accent_allowance: Extra width reserved for the accent bar.
        line_height: Label line height; impact lines use line_height - impact_line_delta.
        label_char_width: Average glyph width of the bold label font; wrapped
            lines must fit content_width when drawn in that font.
        impact_char_scale: Impact glyph width as a fraction of label_char_width.
        max_label_lines: Cap on wrapped label lines before ellipsizing.
        max_impact_lines: Cap on wrapped impact lines before ellipsizing.
        edge_margin: Minimum distance between a card and the canvas border.
        target_padding: Minimum clearance between a card and its target.
        card_spacing: Minimum clearance between two committed cards.
        gap_sequence: Ascending distances from the target edge to try.
        min_arrow_length / max_arrow_length: Accepted arrow length range.
        ideal_arrow_length: Preferred arrow length inside the range.
        fallback_gap: Gap used by the degraded right-hand placement.
        edge_inset: Arrow start keeps this distance from card corners.
        target_margin: Arrow end stops this far outside the target edge.
        arrowhead_length / arrowhead_angle_deg: Arrowhead triangle shape.
        badge_radius / badge_offset: Numbered badge geometry.
        severity_styles: Per-severity overrides {severity: {field: value}}.
    """

    # Selection
    max_annotations: int = 3

    # Card geometry
    card_width: int = 280
    card_padding: int = 14
    text_inset: int = 14
    accent_allowance: int = 10
    line_height: int = 18
    impact_gap: int = 8
    impact_line_delta: int = 4
    label_char_width: float = 9.0  # DejaVu Sans Bold 14px, measured with headroom
    impact_char_scale: float = 0.85
    max_label_lines: int = 4
    max_impact_lines: int = 3
    corner_radius: int = 8
    accent_width: int = 4

    # Placement search
    edge_margin: int = 20
    target_padding: int = 10
    card_spacing: int = 12
    gap_sequence: tuple[int, ...] = (30, 50, 70, 90, 110, 130)
    min_arrow_length: float = 50.0
    max_arrow_length: float = 150.0
    ideal_arrow_length: float = 100.0
    fallback_gap: int = 20

    # Arrow routing
    edge_inset: int = 10
    target_margin: int = 4
    arrowhead_length: int = 10
    arrowhead_angle_deg: float = 30.0
    arrow_width: int = 2

    # Badge
    badge_radius: int = 11
    badge_offset: int = 6

    # Typography
    label_font_size: int = 14
    impact_font_size: int = 11
    badge_font_size: int = 12
    font_path: str = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"
    bold_font_path: str = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"

    # Colors (RGB / RGBA)
    card_fill: tuple[int, ...] = (255, 255, 255, 255)
    card_border: tuple[int, ...] = (229, 231, 235, 255)  # Gray-200
    label_text_color: tuple[int, ...] = (31, 41, 55, 255)  # Gray-800
    badge_text_color: tuple[int, ...] = (255, 255, 255, 255)
    shadow_color: tuple[int, ...] = (0, 0, 0, 51)
    shadow_offset: int = 2
    shadow_blur: int = 4
    accent_color: tuple[int, ...] = (220, 38, 38, 255)  # Red-600

    # Severity overrides, merged over the defaults above
    severity_styles: dict[str, dict] = field(
        default_factory=lambda: {
            "critical": {"accent_color": (220, 38, 38, 255)},
            "warning": {"accent_color": (217, 119, 6, 255)},  # Amber-600
            "info": {"accent_color": (37, 99, 235, 255)},  # Blue-600
        }
    )

    @property
    def content_width(self) -> int:
        """Width available to text inside the card."""
        return self.card_width - self.card_padding * 2 - self.accent_allowance

    @property
    def badge_headroom(self) -> int:
        """Vertical space the badge occupies above a card."""
        return self.badge_radius * 2 + self.badge_offset

    def get_style_for_severity(self, severity: str) -> dict:
        """Get effective style for a severity level.

        Merges severity-specific overrides with default values.

        Args:
            severity: One of critical, warning, info.

        Returns:
            Dict with effective style values for this severity.
        """
        default_style = {
            "accent_color": self.accent_color,
            "card_fill": self.card_fill,
            "card_border": self.card_border,
            "label_text_color": self.label_text_color,
            "badge_text_color": self.badge_text_color,
        }
        override = self.severity_styles.get(severity, {})
        return {**default_style, **override}

    def validate(self) -> None:
        """Reject configurations the layout engine cannot honor.

        Raises:
            ValueError: If a constraint between fields is violated.
        """
        if self.max_annotations < 0:
            raise ValueError(f"max_annotations must be >= 0, got {self.max_annotations}")
        if self.content_width <= 0:
            raise ValueError(
                f"card_width {self.card_width} leaves no room for text"
            )
        if self.impact_line_delta >= self.line_height:
            raise ValueError("impact_line_delta must be smaller than line_height")
        if not self.min_arrow_length <= self.ideal_arrow_length <= self.max_arrow_length:
            raise ValueError(
                "ideal_arrow_length must lie within [min_arrow_length, max_arrow_length]"
            )
        if list(self.gap_sequence) != sorted(self.gap_sequence) or not self.gap_sequence:
            raise ValueError("gap_sequence must be a non-empty ascending sequence")
        if self.max_label_lines < 1:
            raise ValueError("max_label_lines must be >= 1")

    @classmethod
    def from_env(cls) -> "AnnotationConfig":
        """Load configuration from environment variables with defaults."""
        defaults = cls()
        gaps = os.getenv("LEADSHOT_GAP_SEQUENCE")
        return cls(
            max_annotations=int(os.getenv("LEADSHOT_MAX_ANNOTATIONS", str(defaults.max_annotations))),
            card_width=int(os.getenv("LEADSHOT_CARD_WIDTH", str(defaults.card_width))),
            edge_margin=int(os.getenv("LEADSHOT_EDGE_MARGIN", str(defaults.edge_margin))),
            min_arrow_length=float(os.getenv("LEADSHOT_MIN_ARROW_LENGTH", str(defaults.min_arrow_length))),
            max_arrow_length=float(os.getenv("LEADSHOT_MAX_ARROW_LENGTH", str(defaults.max_arrow_length))),
            ideal_arrow_length=float(os.getenv("LEADSHOT_IDEAL_ARROW_LENGTH", str(defaults.ideal_arrow_length))),
            gap_sequence=(
                tuple(int(g) for g in gaps.split(",")) if gaps else defaults.gap_sequence
            ),
            font_path=os.getenv("LEADSHOT_FONT_PATH", defaults.font_path),
            bold_font_path=os.getenv("LEADSHOT_BOLD_FONT_PATH", defaults.bold_font_path),
        )


def load_config(style_path: Optional[Path], base: Optional[AnnotationConfig] = None) -> AnnotationConfig:
    """Load annotation config overrides from a JSON file.

    Unknown keys are ignored with a warning. JSON lists are converted to
    tuples so colors and the gap sequence keep their declared types.

    Args:
        style_path: JSON file with field overrides, or None.
        base: Config to override (defaults to AnnotationConfig()).

    Returns:
        New AnnotationConfig with overrides applied.
    """
    config = base or AnnotationConfig()
    if not style_path or not style_path.exists():
        return config

    with open(style_path) as f:
        custom = json.load(f)

    known = {f.name for f in fields(AnnotationConfig)}
    overrides = {}
    for key, value in custom.items():
        if key not in known:
            logger.warning("Ignoring unknown style key: %s", key)
            continue
        if isinstance(value, list):
            value = tuple(value)
        elif key == "severity_styles":
            value = {
                sev: {k: tuple(v) if isinstance(v, list) else v for k, v in style.items()}
                for sev, style in value.items()
            }
        overrides[key] = value

    return replace(config, **overrides)
