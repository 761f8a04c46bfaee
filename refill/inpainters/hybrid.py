"""Texture synthesis followed by diffusion over the original mask.

Synthesis runs to completion on a copy of the mask, leaving detailed but
seamy content. A few diffusion sweeps over the original footprint then damp
the seams while keeping most of the synthesized detail.
"""

import numpy as np

from refill.inpainters.base import Inpainter
from refill.inpainters.diffusion import DEFAULT_PASSES, smooth, validate_passes
from refill.inpainters.texture import DEFAULT_PATCH_SIZE, PatchMatcher
from refill.patches import validate_patch_size
from refill.state import Algorithm, EngineState, Reporter

# Share of the progress band given to synthesis when smoothing follows.
_SYNTHESIS_SHARE = 0.85


def _run(
    matcher: PatchMatcher,
    image: np.ndarray,
    mask: np.ndarray,
    work_mask: np.ndarray,
    passes: int,
    reporter: Reporter | None,
) -> None:
    share = _SYNTHESIS_SHARE if passes > 0 else 1.0
    if reporter is not None:
        reporter.stage(EngineState.SYNTHESIZING, 0.0, share)
    matcher.fill(image, work_mask, reporter)
    if passes > 0:
        if reporter is not None:
            reporter.stage(EngineState.SMOOTHING, share, 1.0)
        smooth(image, mask, passes, reporter)


def hybrid_fill(
    image: np.ndarray,
    mask: np.ndarray,
    patch_size: int = DEFAULT_PATCH_SIZE,
    passes: int = DEFAULT_PASSES,
    reporter: Reporter | None = None,
    **kwargs,
) -> np.ndarray:
    """Fill `image` in place; `mask` itself is left untouched.

    Keyword arguments go to `PatchMatcher`. Returns the working mask after
    synthesis, which is all False once the call completes.
    """
    passes = validate_passes(passes)
    matcher = PatchMatcher(patch_size=patch_size, **kwargs)
    work_mask = mask.copy()
    _run(matcher, image, mask, work_mask, passes, reporter)
    return work_mask


class HybridInpainter(Inpainter):
    """Texture synthesis, then `passes` diffusion sweeps to blend seams."""

    algorithm = Algorithm.HYBRID

    def __init__(
        self,
        patch_size: int = DEFAULT_PATCH_SIZE,
        passes: int = DEFAULT_PASSES,
        seed: int | None = None,
        **kwargs,
    ):
        self._patch_size = validate_patch_size(patch_size)
        self._passes = validate_passes(passes)
        self._seed = seed
        self._matcher_kwargs = kwargs

    @property
    def name(self) -> str:
        return f"hybrid(patch={self._patch_size}, passes={self._passes})"

    def _inpaint(self, image: np.ndarray, mask: np.ndarray, reporter: Reporter) -> None:
        matcher = PatchMatcher(
            patch_size=self._patch_size, seed=self._seed, **self._matcher_kwargs
        )
        work_mask = mask.copy()
        try:
            _run(matcher, image, mask, work_mask, self._passes, reporter)
        finally:
            # report the synthesis mask, not the footprint used for smoothing
            mask[:] = work_mask
