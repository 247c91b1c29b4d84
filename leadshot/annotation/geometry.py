"""Rectangle and point primitives shared by the layout engine.

All coordinates are image pixels with the origin at the top-left corner and
y growing downwards. Values may be fractional; the renderer rounds when it
rasterizes.

Examples:
    Overlap with padding:
        >>> a = Rect(0, 0, 100, 50)
        >>> b = Rect(105, 0, 100, 50)
        >>> a.overlaps(b)
        False
        >>> a.overlaps(b, padding=10)
        True

    Clipping to a canvas:
        >>> Rect(1800, 900, 300, 200).clip_to_canvas(1920, 1080)
        Rect(x=1800, y=900, width=120, height=180)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

Point = tuple[float, float]

DEFAULT_CANVAS_SIZE = (1920, 1080)


@dataclass(frozen=True)
class Canvas:
    """Pixel dimensions of the base image for one annotation pass."""

    width: int
    height: int

    @classmethod
    def from_size(cls, size: tuple[int, int] | None) -> Canvas:
        """Build a canvas from a decoded image size, defaulting to 1920x1080."""
        if not size or not size[0] or not size[1]:
            logger.warning(
                "Image size undetectable, using default canvas %sx%s",
                *DEFAULT_CANVAS_SIZE,
            )
            return cls(*DEFAULT_CANVAS_SIZE)
        return cls(int(size[0]), int(size[1]))


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle.

    Attributes:
        x: X-coordinate of top-left corner
        y: Y-coordinate of top-left corner
        width: Width in pixels
        height: Height in pixels
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def expanded(self, top: float = 0, right: float = 0, bottom: float = 0, left: float = 0) -> Rect:
        """Return a copy grown outward by the given amount on each side."""
        return Rect(
            self.x - left,
            self.y - top,
            self.width + left + right,
            self.height + top + bottom,
        )

    def overlaps(self, other: Rect, padding: float = 0) -> bool:
        """Check whether two rectangles come closer than ``padding``.

        Rectangles that merely touch do not overlap at zero padding.
        """
        return (
            self.x < other.right + padding
            and other.x < self.right + padding
            and self.y < other.bottom + padding
            and other.y < self.bottom + padding
        )

    def contains_point(self, point: Point) -> bool:
        """True if the point is strictly inside the rectangle."""
        px, py = point
        return self.x < px < self.right and self.y < py < self.bottom

    def on_boundary(self, point: Point, tolerance: float = 1e-6) -> bool:
        """True if the point lies on one of the four edges."""
        px, py = point
        within_x = self.x - tolerance <= px <= self.right + tolerance
        within_y = self.y - tolerance <= py <= self.bottom + tolerance
        on_vertical = within_y and (
            abs(px - self.x) <= tolerance or abs(px - self.right) <= tolerance
        )
        on_horizontal = within_x and (
            abs(py - self.y) <= tolerance or abs(py - self.bottom) <= tolerance
        )
        return on_vertical or on_horizontal

    def inside_canvas(self, canvas: Canvas, margin: float = 0) -> bool:
        return (
            self.x >= margin
            and self.y >= margin
            and self.right <= canvas.width - margin
            and self.bottom <= canvas.height - margin
        )

    def clip_to_canvas(self, canvas_width: int, canvas_height: int) -> Rect:
        """Clip the rectangle so it fits within the canvas.

        Mirrors how element bounds are clipped before annotation: the origin is
        clamped into the canvas and the size shrunk to what remains.
        """
        x = max(0, min(self.x, canvas_width - 1))
        y = max(0, min(self.y, canvas_height - 1))
        width = max(1, min(self.right, canvas_width) - x)
        height = max(1, min(self.bottom, canvas_height) - y)
        clipped = Rect(x, y, width, height)
        if clipped != self:
            logger.warning(
                "Target clipped to fit image: original=%s clipped=%s", self, clipped
            )
        return clipped

    def scaled(self, factor: float) -> Rect:
        """Scale all coordinates, e.g. CSS pixels to device pixels."""
        return Rect(
            self.x * factor,
            self.y * factor,
            self.width * factor,
            self.height * factor,
        )

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Rect:
        """Reconstruct Rect from dict.

        Raises:
            KeyError: If required keys are missing
            ValueError: If a value is not numeric
        """
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]; ``low`` wins when the range is empty."""
    return max(low, min(value, high))


def distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])
