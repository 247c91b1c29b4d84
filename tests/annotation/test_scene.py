"""Tests for overlay scene construction and SVG export."""

import xml.etree.ElementTree as ET

import pytest

from leadshot.annotation.annotation_config import AnnotationConfig
from leadshot.annotation.geometry import Canvas, Rect
from leadshot.annotation.placement import layout_annotations
from leadshot.annotation.scene import (
    Circle,
    Line,
    Polygon,
    RoundedRect,
    TextRun,
    badge_for,
    build_scene,
    card_primitives,
    scene_to_svg,
)
from leadshot.annotation.target_annotation import TargetAnnotation

SVG = "{http://www.w3.org/2000/svg}"


@pytest.fixture
def config():
    return AnnotationConfig()


@pytest.fixture
def placed(config):
    annotations = [
        TargetAnnotation(Rect(860, 490, 200, 100), "No CTA Button", "critical", "", "Up to 30% fewer sign-ups"),
        TargetAnnotation(Rect(100, 120, 400, 200), "Hero copy is vague and never says what the product does", "warning"),
    ]
    return layout_annotations(annotations, Canvas(1920, 1080), config)


def test_card_primitives_contents(placed, config):
    primitives = card_primitives(placed[0], config)

    rects = [p for p in primitives if isinstance(p, RoundedRect)]
    texts = [p for p in primitives if isinstance(p, TextRun)]
    assert len(rects) == 2
    assert rects[0].shadow
    assert sum(isinstance(p, Circle) for p in primitives) == 1
    assert sum(isinstance(p, Line) for p in primitives) == 1
    assert sum(isinstance(p, Polygon) for p in primitives) == 1

    body_lines = [t.text for t in texts if t.anchor == "ls"]
    assert body_lines == ["No CTA Button", "Up to 30% fewer sign-ups"]
    assert [t.text for t in texts if t.anchor == "mm"] == ["1"]


def test_label_bold_and_impact_in_accent(placed, config):
    texts = [p for p in card_primitives(placed[0], config) if isinstance(p, TextRun)]
    accent = config.get_style_for_severity("critical")["accent_color"]

    label, impact = texts[0], texts[1]
    assert label.bold
    assert label.font_size == config.label_font_size
    assert not impact.bold
    assert impact.font_size == config.impact_font_size
    assert impact.fill == accent


def test_text_baselines_inside_card(placed, config):
    for card in placed:
        for run in card_primitives(card, config):
            if not isinstance(run, TextRun) or run.anchor != "ls":
                continue
            assert run.y - run.font_size >= card.card.y
            assert run.y + 4 <= card.card.bottom
            assert run.max_width == config.content_width
            assert run.x + run.max_width <= card.card.right


def test_badge_sits_above_card(placed, config):
    for card in placed:
        badge = badge_for(card, config)
        assert badge.cy + badge.radius <= card.card.y
        assert badge.cx + badge.radius <= card.card.right
        badge_box = Rect(badge.cx - badge.radius, badge.cy - badge.radius, badge.radius * 2, badge.radius * 2)
        assert not badge_box.overlaps(card.annotation.target_rect)


def test_badges_numbered_in_order(placed, config):
    scene = build_scene(placed, config)

    numbers = [p.text for p in scene if isinstance(p, TextRun) and p.anchor == "mm"]
    assert numbers == ["1", "2"]


def test_arrow_primitives_match_route(placed, config):
    line = next(p for p in card_primitives(placed[0], config) if isinstance(p, Line))

    assert line.start == placed[0].arrow.start
    assert line.end == placed[0].arrow.end


def test_build_scene_empty():
    assert build_scene([]) == []


def test_scene_to_svg_structure(placed, config):
    svg = scene_to_svg(build_scene(placed, config), Canvas(1920, 1080), config)
    root = ET.fromstring(svg)

    assert root.tag == f"{SVG}svg"
    assert root.get("width") == "1920"
    assert root.get("height") == "1080"
    assert root.find(f"{SVG}defs/{SVG}filter") is not None
    assert len(root.findall(f"{SVG}rect")) == 4
    assert len(root.findall(f"{SVG}circle")) == 2
    assert len(root.findall(f"{SVG}line")) == 2
    assert len(root.findall(f"{SVG}polygon")) == 2


def test_scene_to_svg_escapes_text(config):
    annotation = TargetAnnotation(Rect(860, 490, 200, 100), "Price < $10 & hidden", "info")
    placed = layout_annotations([annotation], Canvas(1920, 1080), config)

    svg = scene_to_svg(build_scene(placed, config), Canvas(1920, 1080), config)

    assert "&lt;" in svg
    texts = [node.text for node in ET.fromstring(svg).iter(f"{SVG}text")]
    assert "Price < $10 & hidden" in texts
