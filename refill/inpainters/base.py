import time
from abc import ABC, abstractmethod

import numpy as np

from refill.errors import InpaintCancelled
from refill.raster import prepare
from refill.state import (
    Algorithm,
    CancelToken,
    InpaintResult,
    ProgressSink,
    Reporter,
    Status,
)


class Inpainter(ABC):
    """Base class for the fill algorithms.

    Subclasses implement `_inpaint`, which works in place on private copies
    of the caller's buffers, clearing mask pixels as they are synthesized.
    `inpaint` wraps it with validation, cancellation and state tracking; the
    caller's arrays are never modified.
    """

    algorithm: Algorithm

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name including the main parameters."""
        ...

    @abstractmethod
    def _inpaint(self, image: np.ndarray, mask: np.ndarray, reporter: Reporter) -> None: ...

    def inpaint(
        self,
        image: np.ndarray,
        mask: np.ndarray,
        cancel: CancelToken | None = None,
        progress: ProgressSink | None = None,
        reporter: Reporter | None = None,
    ) -> InpaintResult:
        """Fill the masked pixels of `image`.

        Args:
            image: (H, W, 4) RGBA or (H, W, 3) RGB uint8 array.
            mask: (H, W) bool array, or uint8 with 255 marking pixels to fill.
            cancel: Optional token polled between pixels and sweeps.
            progress: Optional `(percent, phase)` callback.
            reporter: Pre-built reporter; overrides `cancel` and `progress`.

        Returns:
            InpaintResult holding a new RGBA image. On cancellation the image
            is the partial fill and the status is CANCELLED.

        Raises:
            DimensionMismatchError: Mask and image sizes differ. Nothing is
                modified.
            ValueError: Malformed image or mask array.
        """
        if reporter is None:
            reporter = Reporter(cancel=cancel, progress=progress)
        t0 = time.time()
        reporter.analyze()
        try:
            work_image, work_mask = prepare(image, mask)
        except Exception:
            reporter.fail()
            raise

        initial = int(np.count_nonzero(work_mask))
        status = Status.COMPLETED
        if initial:
            try:
                self._inpaint(work_image, work_mask, reporter)
            except InpaintCancelled:
                status = Status.CANCELLED
            except Exception:
                reporter.fail()
                raise

        reporter.finish(status)
        remaining = self._remaining(work_mask)
        return InpaintResult(
            image=work_image,
            status=status,
            algorithm=self.algorithm,
            filled=initial - remaining,
            remaining=remaining,
            elapsed=time.time() - t0,
        )

    def _remaining(self, work_mask: np.ndarray) -> int:
        """Masked pixels left in the working mask after `_inpaint`."""
        return int(np.count_nonzero(work_mask))
