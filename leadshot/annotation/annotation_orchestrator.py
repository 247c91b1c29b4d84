"""Annotation pipeline entry point.

Decodes the screenshot, normalizes the annotation list, runs greedy card
placement, builds the overlay scene and composites it onto the image.
Each call is self-contained: nothing is shared between calls, so callers
may annotate several screenshots concurrently.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from PIL import Image

from .annotation_config import AnnotationConfig
from .annotation_renderer import composite_overlay, decode_image, encode_image, render_scene
from .geometry import Canvas
from .placement import PlacedCard, layout_annotations
from .scene import build_scene
from .target_annotation import AnnotationInput, normalize_annotations

logger = logging.getLogger(__name__)


@dataclass
class AnnotatedImage:
    """Result of one annotation pass.

    Attributes:
        buffer: Encoded output image (same format as the input).
        width: Output width in pixels (equals input width). None when the
            input bytes were passed through without decoding.
        height: Output height in pixels (equals input height), or None.
        format: Image format name, e.g. "PNG", or None.
        annotation_count: Number of cards actually rendered.
        annotation_labels: Labels of rendered cards, in badge order.
        placements: Committed placements, for diagnostics.
    """

    buffer: bytes
    width: Optional[int]
    height: Optional[int]
    format: Optional[str]
    annotation_count: int
    annotation_labels: list[str] = field(default_factory=list)
    placements: tuple[PlacedCard, ...] = ()

    @property
    def degraded_count(self) -> int:
        return sum(1 for p in self.placements if p.degraded)


def annotate_screenshot(
    image: Union[Image.Image, bytes],
    annotations: Optional[Iterable[AnnotationInput]],
    config: Optional[AnnotationConfig] = None,
    scale_factor: float = 1.0,
) -> AnnotatedImage:
    """Draw callout cards for the given annotations onto a screenshot.

    Args:
        image: Screenshot as encoded bytes or a PIL Image.
        annotations: Annotation dicts or TargetAnnotation instances; only the
            first ``config.max_annotations`` are considered and entries with
            an empty label are dropped.
        config: Layout and styling configuration (defaults if None).
        scale_factor: Multiplier applied to target rects, e.g. 2.0 when the
            rects are CSS pixels and the screenshot is at 2x.

    Returns:
        AnnotatedImage. With nothing to draw, ``buffer`` is the input bytes
        unchanged. An empty annotation list returns before the image is
        decoded at all.

    Raises:
        PIL.UnidentifiedImageError: If the image bytes cannot be decoded.
        OSError: If decoding or encoding fails.
    """
    start_time = time.perf_counter()
    cfg = config or AnnotationConfig()
    cfg.validate()

    if not annotations and isinstance(image, bytes):
        logger.info("No annotations supplied; returning image bytes unchanged")
        return AnnotatedImage(
            buffer=image,
            width=None,
            height=None,
            format=None,
            annotation_count=0,
        )

    try:
        base = decode_image(image)
    except OSError as e:
        logger.error("Image decode failed: %s", e)
        raise

    canvas = Canvas.from_size(base.size)
    fmt = base.format or "PNG"
    targets = normalize_annotations(annotations, canvas, cfg.max_annotations, scale_factor)

    if not targets:
        logger.info("No annotations to draw; returning image unchanged")
        buffer = image if isinstance(image, bytes) else encode_image(base, fmt)
        return AnnotatedImage(
            buffer=buffer,
            width=base.width,
            height=base.height,
            format=fmt,
            annotation_count=0,
        )

    layout_start = time.perf_counter()
    placements = layout_annotations(targets, canvas, cfg)
    layout_time_ms = (time.perf_counter() - layout_start) * 1000

    render_start = time.perf_counter()
    overlay = render_scene(build_scene(placements, cfg), canvas, cfg)
    try:
        buffer = encode_image(composite_overlay(base, overlay), fmt)
    except OSError as e:
        logger.error("Image encode failed: format=%s error=%s", fmt, e)
        raise
    render_time_ms = (time.perf_counter() - render_start) * 1000

    result = AnnotatedImage(
        buffer=buffer,
        width=base.width,
        height=base.height,
        format=fmt,
        annotation_count=len(placements),
        annotation_labels=[p.annotation.label for p in placements],
        placements=placements,
    )

    total_time_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        "Annotated %dx%d %s: cards=%d degraded=%d layout=%dms render=%dms total=%dms",
        base.width,
        base.height,
        fmt,
        result.annotation_count,
        result.degraded_count,
        int(layout_time_ms),
        int(render_time_ms),
        int(total_time_ms),
    )
    return result
