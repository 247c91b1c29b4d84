"""Scene description for the annotation overlay.

The overlay is built as a flat list of typed drawing primitives in paint
order. Rasterizing (``annotation_renderer.render_scene``) and SVG export
(``scene_to_svg``) both consume this list, so the layout code never deals
with a particular output format.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from .annotation_config import AnnotationConfig
from .geometry import Canvas, Point
from .placement import PlacedCard

SVG_NS = "http://www.w3.org/2000/svg"
SVG_FONT_FAMILY = "Arial, Helvetica, sans-serif"

Color = tuple[int, ...]


@dataclass(frozen=True)
class RoundedRect:
    x: float
    y: float
    width: float
    height: float
    radius: float
    fill: Color
    outline: Optional[Color] = None
    outline_width: int = 0
    shadow: bool = False


@dataclass(frozen=True)
class TextRun:
    """A single line of text.

    ``anchor`` uses Pillow's two-letter anchor codes: ``ls`` puts (x, y) at
    the left end of the baseline, ``mm`` centers the text on (x, y).
    ``max_width`` is the horizontal room the line may occupy.
    """

    x: float
    y: float
    text: str
    font_size: int
    fill: Color
    bold: bool = False
    anchor: str = "ls"
    max_width: Optional[float] = None


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    radius: float
    fill: Color


@dataclass(frozen=True)
class Line:
    start: Point
    end: Point
    color: Color
    width: int


@dataclass(frozen=True)
class Polygon:
    points: tuple[Point, ...]
    fill: Color


Primitive = Union[RoundedRect, TextRun, Circle, Line, Polygon]


@dataclass(frozen=True)
class Badge:
    """Numbered circle sitting above a card's top-right corner."""

    number: int
    cx: float
    cy: float
    radius: float


def badge_for(placed: PlacedCard, config: AnnotationConfig) -> Badge:
    r = config.badge_radius
    card = placed.card
    return Badge(
        number=placed.badge_number,
        cx=card.right - r - config.badge_offset,
        cy=card.y - r - config.badge_offset,
        radius=r,
    )


def card_primitives(placed: PlacedCard, config: AnnotationConfig) -> list[Primitive]:
    """Primitives for one card, its text, badge and arrow."""
    style = config.get_style_for_severity(placed.annotation.severity)
    accent = style["accent_color"]
    card = placed.card
    text_x = card.x + config.text_inset
    text_room = config.content_width

    primitives: list[Primitive] = [
        RoundedRect(
            card.x,
            card.y,
            card.width,
            card.height,
            radius=config.corner_radius,
            fill=style["card_fill"],
            outline=style["card_border"],
            outline_width=1,
            shadow=True,
        ),
        RoundedRect(
            card.x,
            card.y + 4,
            config.accent_width,
            card.height - 8,
            radius=config.accent_width / 2,
            fill=accent,
        ),
    ]

    baseline = card.y + config.card_padding + config.label_font_size - 2
    for line in placed.text.label_lines:
        primitives.append(
            TextRun(text_x, baseline, line, config.label_font_size, style["label_text_color"], bold=True, max_width=text_room)
        )
        baseline += config.line_height

    if placed.text.impact_lines:
        baseline += config.impact_gap // 2
        for line in placed.text.impact_lines:
            primitives.append(
                TextRun(text_x, baseline, line, config.impact_font_size, accent, max_width=text_room)
            )
            baseline += config.line_height - config.impact_line_delta

    badge = badge_for(placed, config)
    primitives.append(Circle(badge.cx, badge.cy, badge.radius, accent))
    primitives.append(
        TextRun(
            badge.cx,
            badge.cy,
            str(badge.number),
            config.badge_font_size,
            style["badge_text_color"],
            bold=True,
            anchor="mm",
        )
    )

    arrow = placed.arrow
    primitives.append(Line(arrow.start, arrow.end, accent, config.arrow_width))
    primitives.append(Polygon(arrow.head, accent))
    return primitives


def build_scene(placed_cards: Sequence[PlacedCard], config: Optional[AnnotationConfig] = None) -> list[Primitive]:
    """Flatten committed cards into paint-ordered primitives (commit order)."""
    cfg = config or AnnotationConfig()
    primitives: list[Primitive] = []
    for placed in placed_cards:
        primitives.extend(card_primitives(placed, cfg))
    return primitives


def _svg_color(color: Color) -> dict[str, str]:
    rgb = "#{:02x}{:02x}{:02x}".format(*color[:3])
    if len(color) > 3 and color[3] != 255:
        return {"color": rgb, "opacity": f"{color[3] / 255:.3f}"}
    return {"color": rgb}


def _paint(attr: str, color: Color) -> dict[str, str]:
    parsed = _svg_color(color)
    result = {attr: parsed["color"]}
    if "opacity" in parsed:
        result[f"{attr}-opacity"] = parsed["opacity"]
    return result


def _num(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def scene_to_svg(primitives: Sequence[Primitive], canvas: Canvas, config: Optional[AnnotationConfig] = None) -> str:
    """Serialize primitives as a standalone SVG document sized to the canvas."""
    cfg = config or AnnotationConfig()
    root = ET.Element(
        "svg",
        {"xmlns": SVG_NS, "width": str(canvas.width), "height": str(canvas.height)},
    )
    defs = ET.SubElement(root, "defs")
    shadow = ET.SubElement(
        defs,
        "filter",
        {"id": "shadow", "x": "-10%", "y": "-10%", "width": "120%", "height": "130%"},
    )
    ET.SubElement(
        shadow,
        "feDropShadow",
        {
            "dx": "0",
            "dy": str(cfg.shadow_offset),
            "stdDeviation": str(cfg.shadow_blur),
            "flood-opacity": f"{cfg.shadow_color[3] / 255:.2f}",
        },
    )

    for prim in primitives:
        if isinstance(prim, RoundedRect):
            attrs = {
                "x": _num(prim.x),
                "y": _num(prim.y),
                "width": _num(prim.width),
                "height": _num(prim.height),
                "rx": _num(prim.radius),
                "ry": _num(prim.radius),
                **_paint("fill", prim.fill),
            }
            if prim.outline is not None and prim.outline_width:
                attrs.update(_paint("stroke", prim.outline))
                attrs["stroke-width"] = str(prim.outline_width)
            if prim.shadow:
                attrs["filter"] = "url(#shadow)"
            ET.SubElement(root, "rect", attrs)
        elif isinstance(prim, TextRun):
            attrs = {
                "x": _num(prim.x),
                "y": _num(prim.y),
                "font-family": SVG_FONT_FAMILY,
                "font-size": str(prim.font_size),
                **_paint("fill", prim.fill),
            }
            if prim.bold:
                attrs["font-weight"] = "bold"
            if prim.anchor == "mm":
                attrs["text-anchor"] = "middle"
                attrs["dominant-baseline"] = "central"
            node = ET.SubElement(root, "text", attrs)
            node.text = prim.text
        elif isinstance(prim, Circle):
            ET.SubElement(
                root,
                "circle",
                {"cx": _num(prim.cx), "cy": _num(prim.cy), "r": _num(prim.radius), **_paint("fill", prim.fill)},
            )
        elif isinstance(prim, Line):
            ET.SubElement(
                root,
                "line",
                {
                    "x1": _num(prim.start[0]),
                    "y1": _num(prim.start[1]),
                    "x2": _num(prim.end[0]),
                    "y2": _num(prim.end[1]),
                    "stroke-width": str(prim.width),
                    **_paint("stroke", prim.color),
                },
            )
        elif isinstance(prim, Polygon):
            points = " ".join(f"{_num(x)},{_num(y)}" for x, y in prim.points)
            ET.SubElement(root, "polygon", {"points": points, **_paint("fill", prim.fill)})

    return ET.tostring(root, encoding="unicode")
