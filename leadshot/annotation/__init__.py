from .annotation_config import AnnotationConfig, load_config
from .geometry import Canvas, Rect
from .target_annotation import TargetAnnotation, normalize_annotations
from .text_layout import CardText, wrap_text, layout_card_text
from .candidates import Candidate, generate_candidates
from .placement import PlacedCard, select_candidate, place_card, layout_annotations
from .arrow_router import ArrowRoute, route_arrow
from .scene import build_scene, scene_to_svg
from .annotation_renderer import render_scene, composite_overlay
from .annotation_orchestrator import AnnotatedImage, annotate_screenshot

__all__ = [
    "AnnotationConfig",
    "load_config",
    "Canvas",
    "Rect",
    "TargetAnnotation",
    "normalize_annotations",
    "CardText",
    "wrap_text",
    "layout_card_text",
    "Candidate",
    "generate_candidates",
    "PlacedCard",
    "select_candidate",
    "place_card",
    "layout_annotations",
    "ArrowRoute",
    "route_arrow",
    "build_scene",
    "scene_to_svg",
    "render_scene",
    "composite_overlay",
    "AnnotatedImage",
    "annotate_screenshot",
]
