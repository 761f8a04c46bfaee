"""Rasterize shapes and brush strokes into inpainting masks.

Shapes are drawn with OpenCV onto a uint8 canvas (255 = fill) and the
result is handed out as a bool mask. Coordinates are (x, y) pixel
positions, like the drawing primitives they feed.
"""

from typing import Iterable, Sequence

import cv2
import numpy as np

from refill.raster import as_mask
from refill.utils import dilate_mask

# Externally proposed regions grow by this fraction of their size on each
# side, but never by less than _REGION_MIN_GROW pixels.
_REGION_GROW = 0.1
_REGION_MIN_GROW = 5

Point = tuple[float, float]
Rect = tuple[float, float, float, float]


def _pt(p: Point) -> tuple[int, int]:
    return int(round(p[0])), int(round(p[1]))


class MaskBuilder:
    """Accumulates shapes into a mask of a fixed size.

    Usage:
        mask = (
            MaskBuilder(width, height)
            .add_rectangle(10, 10, 40, 20)
            .add_stroke([(5, 5), (30, 12)], width=8)
            .build()
        )
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Mask size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._canvas = np.zeros((height, width), dtype=np.uint8)

    @classmethod
    def like(cls, image: np.ndarray) -> "MaskBuilder":
        """Builder sized to match an image array."""
        h, w = image.shape[:2]
        return cls(w, h)

    def add_rectangle(self, x: float, y: float, w: float, h: float) -> "MaskBuilder":
        """Fill the axis-aligned box with top-left (x, y) and size w x h."""
        if w <= 0 or h <= 0:
            return self
        x0, y0 = _pt((x, y))
        x1, y1 = _pt((x + w, y + h))
        x0, y0 = max(x0, 0), max(y0, 0)
        x1, y1 = min(x1, self.width), min(y1, self.height)
        if x1 > x0 and y1 > y0:
            self._canvas[y0:y1, x0:x1] = 255
        return self

    def add_ellipse(self, x: float, y: float, w: float, h: float) -> "MaskBuilder":
        """Fill the ellipse inscribed in the given bounding box."""
        if w <= 0 or h <= 0:
            return self
        center = _pt((x + w / 2, y + h / 2))
        axes = (max(int(round(w / 2)), 1), max(int(round(h / 2)), 1))
        cv2.ellipse(self._canvas, center, axes, 0, 0, 360, 255, thickness=-1)
        return self

    def add_polygon(self, points: Sequence[Point]) -> "MaskBuilder":
        """Fill a closed polygon. Fewer than three points draws nothing."""
        if len(points) < 3:
            return self
        pts = np.array([_pt(p) for p in points], dtype=np.int32)
        cv2.fillPoly(self._canvas, [pts], 255)
        return self

    def add_stroke(self, points: Sequence[Point], width: int = 20) -> "MaskBuilder":
        """Paint a round-capped freehand stroke of the given brush width."""
        if not points:
            return self
        thickness = max(int(width), 1)
        radius = max(thickness // 2, 1)
        pts = [_pt(p) for p in points]
        for a, b in zip(pts, pts[1:]):
            cv2.line(self._canvas, a, b, 255, thickness=thickness, lineType=cv2.LINE_8)
        for p in pts:
            cv2.circle(self._canvas, p, radius, 255, thickness=-1)
        return self

    def add_regions(self, regions: Iterable[Rect]) -> "MaskBuilder":
        """Fill externally proposed (x, y, w, h) boxes, grown slightly so
        loosely fitted boxes still cover their target."""
        for x, y, w, h in regions:
            grow_x = max(_REGION_MIN_GROW, w * _REGION_GROW)
            grow_y = max(_REGION_MIN_GROW, h * _REGION_GROW)
            self.add_rectangle(x - grow_x, y - grow_y, w + 2 * grow_x, h + 2 * grow_y)
        return self

    def add_mask(self, mask: np.ndarray) -> "MaskBuilder":
        """Union with an existing bool or 0/255 mask of the same size."""
        if mask.shape[:2] != (self.height, self.width):
            raise ValueError(
                f"Mask shape {mask.shape[:2]} does not match builder "
                f"{(self.height, self.width)}"
            )
        self._canvas[as_mask(mask)] = 255
        return self

    def dilate(self, px: int) -> "MaskBuilder":
        """Grow everything drawn so far by `px` pixels."""
        self._canvas = dilate_mask(self._canvas, px)
        return self

    def clear(self) -> "MaskBuilder":
        self._canvas[:] = 0
        return self

    def build(self) -> np.ndarray:
        """Return the mask as a new (H, W) bool array."""
        return self._canvas > 0
