"""Diffusion smoothing.

Each sweep replaces every masked pixel's RGB with the plain mean of its eight
neighbors, read from a snapshot taken at the start of the sweep so the update
order cannot bias the result. The outermost rows and columns are never
relaxed, so their neighbor reads always stay in range.

On its own this converges to a blurred average of the surroundings: fine for
flat backgrounds and gradients, poor for texture. The mask is only read.
"""

import numpy as np

from refill.inpainters.base import Inpainter
from refill.raster import OPAQUE
from refill.state import Algorithm, EngineState, Reporter

DEFAULT_PASSES = 10

_INNER_OFFSETS = [(dy, dx) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dy, dx) != (0, 0)]


def validate_passes(passes: int) -> int:
    if not isinstance(passes, (int, np.integer)) or isinstance(passes, bool) or passes < 0:
        raise ValueError(f"passes must be a non-negative integer, got {passes!r}")
    return int(passes)


def smooth(
    image: np.ndarray,
    mask: np.ndarray,
    passes: int = DEFAULT_PASSES,
    reporter: Reporter | None = None,
) -> None:
    """Relax masked pixels toward their neighbor mean, in place.

    Args:
        image: (H, W, 4) uint8 RGBA array, modified in place.
        mask: (H, W) bool array of pixels to relax. Not modified.
        passes: Number of sweeps.
        reporter: Optional reporter, checked for cancellation once per sweep.
    """
    passes = validate_passes(passes)
    h, w = mask.shape
    if passes == 0 or h < 3 or w < 3:
        return
    inner = mask[1:-1, 1:-1]
    if not inner.any():
        return

    region = image[1:-1, 1:-1]
    for i in range(passes):
        if reporter is not None:
            reporter.check()
        prev = image[..., :3].astype(np.int32)
        total = np.zeros((h - 2, w - 2, 3), dtype=np.int32)
        for dy, dx in _INNER_OFFSETS:
            total += prev[1 + dy : h - 1 + dy, 1 + dx : w - 1 + dx]
        mean = np.clip(np.rint(total / 8.0), 0, 255).astype(np.uint8)
        region[..., :3][inner] = mean[inner]
        region[..., 3][inner] = OPAQUE
        if reporter is not None:
            reporter.advance((i + 1) / passes)


class DiffusionInpainter(Inpainter):
    """Diffusion smoothing alone."""

    algorithm = Algorithm.DIFFUSION

    def __init__(self, passes: int = DEFAULT_PASSES):
        self._passes = validate_passes(passes)

    @property
    def name(self) -> str:
        return f"diffusion(passes={self._passes})"

    def _inpaint(self, image: np.ndarray, mask: np.ndarray, reporter: Reporter) -> None:
        reporter.stage(EngineState.SMOOTHING)
        smooth(image, mask, self._passes, reporter)
        # the working mask only counts as cleared once every sweep has run
        mask[:] = False
