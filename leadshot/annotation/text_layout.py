"""Word wrapping and card sizing for callout text.

Wrapping is character based: the line capacity is the card's text width
divided by an average glyph width, with a narrower glyph for the smaller
impact font. Card width never changes; only the height grows with the
number of wrapped lines.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .annotation_config import AnnotationConfig

ELLIPSIS = "..."


@dataclass(frozen=True)
class CardText:
    """Wrapped text and the card size it needs."""

    label_lines: tuple[str, ...]
    impact_lines: tuple[str, ...]
    width: int
    height: int


def wrap_text(text: str, max_chars_per_line: int) -> list[str]:
    """Greedy word wrap.

    Words are accumulated while the line stays within the limit. A single
    word longer than the limit is cut short and ends in an ellipsis.

    Args:
        text: Text to wrap; runs of whitespace collapse to one space.
        max_chars_per_line: Maximum characters per line (>= 1).

    Returns:
        Wrapped lines; empty list for empty or whitespace-only text.
    """
    limit = max(1, max_chars_per_line)
    lines: list[str] = []
    current = ""

    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= limit:
            current = candidate
            continue
        if current:
            lines.append(current)
        current = _truncate_word(word, limit) if len(word) > limit else word

    if current:
        lines.append(current)
    return lines


def _truncate_word(word: str, limit: int) -> str:
    if limit <= len(ELLIPSIS):
        return word[:limit]
    return word[: limit - len(ELLIPSIS)] + ELLIPSIS


def _cap_lines(lines: list[str], max_lines: int, limit: int) -> list[str]:
    """Keep at most max_lines, marking the cut with an ellipsis."""
    if len(lines) <= max_lines:
        return lines
    kept = lines[:max_lines]
    last = kept[-1]
    if len(last) + len(ELLIPSIS) > limit:
        last = last[: max(0, limit - len(ELLIPSIS))].rstrip()
    kept[-1] = last + ELLIPSIS
    return kept


def label_chars_per_line(config: AnnotationConfig) -> int:
    return math.floor(config.content_width / config.label_char_width)


def impact_chars_per_line(config: AnnotationConfig) -> int:
    return math.floor(
        config.content_width / (config.label_char_width * config.impact_char_scale)
    )


def card_height(label_line_count: int, impact_line_count: int, config: AnnotationConfig) -> int:
    """Height of a card holding the given number of wrapped lines."""
    height = config.card_padding * 2 + label_line_count * config.line_height
    if impact_line_count > 0:
        height += config.impact_gap
        height += impact_line_count * (config.line_height - config.impact_line_delta)
    return height


def layout_card_text(
    label: str,
    impact: Optional[str],
    config: Optional[AnnotationConfig] = None,
) -> CardText:
    """Wrap label and impact text and size the card around them."""
    cfg = config or AnnotationConfig()

    label_limit = label_chars_per_line(cfg)
    impact_limit = impact_chars_per_line(cfg)

    label_lines = _cap_lines(wrap_text(label, label_limit), cfg.max_label_lines, label_limit)
    impact_lines = (
        _cap_lines(wrap_text(impact, impact_limit), cfg.max_impact_lines, impact_limit)
        if impact
        else []
    )

    return CardText(
        label_lines=tuple(label_lines),
        impact_lines=tuple(impact_lines),
        width=cfg.card_width,
        height=card_height(len(label_lines), len(impact_lines), cfg),
    )
