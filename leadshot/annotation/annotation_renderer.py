"""Pillow rendering of annotation scenes.

Rasterizes the primitive list from ``scene.build_scene`` into a transparent
overlay the size of the canvas, then composites that overlay onto the base
screenshot in a single pass. Card shadows are drawn on their own layer and
blurred before the rest of the overlay is painted over them.
"""

import io
import logging
from functools import lru_cache
from typing import Optional, Sequence, Union

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from .annotation_config import AnnotationConfig
from .geometry import Canvas
from .scene import Circle, Line, Polygon, Primitive, RoundedRect, TextRun

logger = logging.getLogger(__name__)

ELLIPSIS = "..."

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


@lru_cache(maxsize=32)
def load_font(path: str, size: int) -> Font:
    """Load a TrueType font, falling back to Pillow's bundled default.

    Args:
        path: Font file path or name resolvable by FreeType.
        size: Font size in pixels.

    Returns:
        Loaded font.
    """
    try:
        return ImageFont.truetype(path, size)
    except OSError:
        logger.debug("Font %s unavailable, using default", path)
        return ImageFont.load_default(size=size)


def fit_text(draw: ImageDraw.ImageDraw, text: str, font: Font, max_width: Optional[float]) -> str:
    """Shorten text with an ellipsis until it fits in max_width pixels."""
    if max_width is None or draw.textlength(text, font=font) <= max_width:
        return text
    trimmed = text
    while trimmed:
        trimmed = trimmed[:-1].rstrip()
        candidate = trimmed + ELLIPSIS
        if draw.textlength(candidate, font=font) <= max_width:
            return candidate
    return ""


def _draw_text(draw: ImageDraw.ImageDraw, run: TextRun, font: Font) -> None:
    text = fit_text(draw, run.text, font, run.max_width)
    if text != run.text:
        logger.debug("Text %r trimmed to %r to fit %spx", run.text, text, run.max_width)
    if not text:
        return

    if isinstance(font, ImageFont.FreeTypeFont):
        draw.text((run.x, run.y), text, fill=run.fill, font=font, anchor=run.anchor)
        return

    # Bitmap fonts only support top-left anchoring
    bbox = draw.textbbox((0, 0), text, font=font)
    text_w = bbox[2] - bbox[0]
    text_h = bbox[3] - bbox[1]
    if run.anchor == "mm":
        origin = (run.x - text_w / 2, run.y - text_h / 2)
    else:
        origin = (run.x, run.y - text_h)
    draw.text(origin, text, fill=run.fill, font=font)


def _box(x: float, y: float, width: float, height: float) -> list[tuple[float, float]]:
    return [(x, y), (x + width, y + height)]


def render_scene(
    primitives: Sequence[Primitive],
    canvas: Canvas,
    config: Optional[AnnotationConfig] = None,
) -> Image.Image:
    """Rasterize primitives onto a transparent RGBA overlay.

    Args:
        primitives: Paint-ordered primitives.
        canvas: Overlay dimensions.
        config: Supplies fonts and shadow styling.

    Returns:
        RGBA image of size (canvas.width, canvas.height).
    """
    cfg = config or AnnotationConfig()
    size = (canvas.width, canvas.height)

    shadow_layer = Image.new("RGBA", size, (0, 0, 0, 0))
    shadow_draw = ImageDraw.Draw(shadow_layer, "RGBA")
    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer, "RGBA")
    has_shadow = False

    for prim in primitives:
        if isinstance(prim, RoundedRect):
            if prim.shadow:
                has_shadow = True
                shadow_draw.rounded_rectangle(
                    _box(prim.x, prim.y + cfg.shadow_offset, prim.width, prim.height),
                    radius=prim.radius,
                    fill=cfg.shadow_color,
                )
            draw.rounded_rectangle(
                _box(prim.x, prim.y, prim.width, prim.height),
                radius=prim.radius,
                fill=prim.fill,
                outline=prim.outline,
                width=prim.outline_width,
            )
        elif isinstance(prim, TextRun):
            font_path = cfg.bold_font_path if prim.bold else cfg.font_path
            _draw_text(draw, prim, load_font(font_path, prim.font_size))
        elif isinstance(prim, Circle):
            draw.ellipse(
                _box(prim.cx - prim.radius, prim.cy - prim.radius, prim.radius * 2, prim.radius * 2),
                fill=prim.fill,
            )
        elif isinstance(prim, Line):
            draw.line([prim.start, prim.end], fill=prim.color, width=prim.width)
        elif isinstance(prim, Polygon):
            draw.polygon(list(prim.points), fill=prim.fill)
        else:
            raise TypeError(f"Unsupported primitive: {type(prim).__name__}")

    if not has_shadow:
        return layer

    shadow_layer = shadow_layer.filter(ImageFilter.GaussianBlur(cfg.shadow_blur))
    return Image.alpha_composite(shadow_layer, layer)


def composite_overlay(image: Image.Image, overlay: Image.Image) -> Image.Image:
    """Composite the overlay onto the base image in one pass.

    The result keeps the base image's size. Images with transparency stay
    RGBA; everything else comes back as RGB so it can be re-encoded in the
    original format.
    """
    if overlay.size != image.size:
        raise ValueError(f"Overlay size {overlay.size} does not match image size {image.size}")

    has_alpha = image.mode in ("RGBA", "LA") or "transparency" in image.info
    composed = Image.alpha_composite(image.convert("RGBA"), overlay)
    return composed if has_alpha else composed.convert("RGB")


def decode_image(data: Union[Image.Image, bytes]) -> Image.Image:
    """Open image bytes, forcing a full decode so errors surface here."""
    if isinstance(data, Image.Image):
        return data
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


def encode_image(image: Image.Image, fmt: Optional[str]) -> bytes:
    """Encode an image, defaulting to PNG when the source format is unknown."""
    fmt = (fmt or "PNG").upper()
    if fmt in ("JPEG", "JPG") and image.mode != "RGB":
        image = image.convert("RGB")
    buf = io.BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()
