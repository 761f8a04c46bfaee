"""Unified entry points: synchronous `inpaint` and threaded `submit`."""

from concurrent.futures import Future, ThreadPoolExecutor

import numpy as np

from refill.inpainters import get_inpainter, resolve_algorithm
from refill.inpainters.diffusion import DEFAULT_PASSES
from refill.inpainters.texture import DEFAULT_PATCH_SIZE
from refill.state import (
    Algorithm,
    CancelToken,
    EngineState,
    InpaintResult,
    ProgressSink,
    Reporter,
)


def inpainter_kwargs(
    algorithm: Algorithm, patch_size: int, passes: int, seed: int | None, matcher_kwargs: dict
) -> dict:
    if algorithm is Algorithm.DIFFUSION:
        return {"passes": passes}
    kwargs = {"patch_size": patch_size, "seed": seed, **matcher_kwargs}
    if algorithm is Algorithm.HYBRID:
        kwargs["passes"] = passes
    return kwargs


def inpaint(
    image: np.ndarray,
    mask: np.ndarray,
    algorithm: str | Algorithm = Algorithm.HYBRID,
    patch_size: int = DEFAULT_PATCH_SIZE,
    passes: int = DEFAULT_PASSES,
    *,
    seed: int | None = None,
    cancel: CancelToken | None = None,
    progress: ProgressSink | None = None,
    reporter: Reporter | None = None,
    **matcher_kwargs,
) -> InpaintResult:
    """Repair the masked region of an image.

    Args:
        image: (H, W, 4) RGBA or (H, W, 3) RGB uint8 array. Not modified.
        mask: (H, W) bool mask, True where content is unknown. Numeric
            masks must use 0/255; 0/1 masks are rejected.
        algorithm: "texture", "diffusion" or "hybrid".
        patch_size: Patch side for texture and hybrid. Ignored by diffusion.
        passes: Diffusion sweeps for diffusion and hybrid. Ignored by texture.
        seed: Seed for candidate sampling. Fix it for reproducible output.
        cancel: Optional token; when set the call returns the partial image.
        progress: Optional `(percent, phase)` callback.
        reporter: Pre-built reporter, used by `InpaintTask`.
        **matcher_kwargs: Extra `PatchMatcher` options (samples,
            distance_penalty, ...) for texture and hybrid.

    Returns:
        InpaintResult with the repaired copy and a COMPLETED or CANCELLED status.

    Raises:
        DimensionMismatchError: Mask and image sizes differ.
        ValueError: Unknown algorithm, invalid parameters or a 0/1 mask.
    """
    try:
        algo = resolve_algorithm(algorithm)
        kwargs = inpainter_kwargs(algo, patch_size, passes, seed, matcher_kwargs)
        inpainter = get_inpainter(algo, **kwargs)
    except Exception:
        if reporter is not None:
            reporter.fail()
        raise
    return inpainter.inpaint(
        image, mask, cancel=cancel, progress=progress, reporter=reporter
    )


class InpaintTask:
    """One engine invocation running on its own worker thread.

    The task works on private copies of the buffers, so the caller may keep
    using its arrays. Only `cancel()`, `state` and `result()` touch the
    running job.
    """

    def __init__(
        self,
        image: np.ndarray,
        mask: np.ndarray,
        algorithm: str | Algorithm = Algorithm.HYBRID,
        patch_size: int = DEFAULT_PATCH_SIZE,
        passes: int = DEFAULT_PASSES,
        *,
        seed: int | None = None,
        progress: ProgressSink | None = None,
        **matcher_kwargs,
    ):
        self._token = CancelToken()
        self._reporter = Reporter(cancel=self._token, progress=progress)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="refill")
        self._future: Future = self._executor.submit(
            inpaint,
            image.copy(),
            mask.copy(),
            algorithm,
            patch_size,
            passes,
            seed=seed,
            reporter=self._reporter,
            **matcher_kwargs,
        )
        self._future.add_done_callback(lambda _: self._executor.shutdown(wait=False))

    @property
    def state(self) -> EngineState:
        return self._reporter.state

    def cancel(self) -> None:
        """Ask the worker to stop at its next checkpoint."""
        self._token.cancel()

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: float | None = None) -> InpaintResult:
        """Block until the job ends; re-raises validation errors."""
        return self._future.result(timeout=timeout)


def submit(
    image: np.ndarray,
    mask: np.ndarray,
    algorithm: str | Algorithm = Algorithm.HYBRID,
    patch_size: int = DEFAULT_PATCH_SIZE,
    passes: int = DEFAULT_PASSES,
    **kwargs,
) -> InpaintTask:
    """Start `inpaint` on a worker thread and return a handle to it."""
    return InpaintTask(image, mask, algorithm, patch_size, passes, **kwargs)
