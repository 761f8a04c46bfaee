"""Pipeline orchestration: connects mask sources and files to inpainters."""

import time
from pathlib import Path

import numpy as np

from refill.inpainters import INPAINTERS, get_inpainter
from refill.inpainters.base import Inpainter
from refill.raster import as_mask, mask_stats
from refill.state import CancelToken, InpaintResult, Phase, ProgressSink
from refill.utils import load_image, load_mask, make_comparison, save_image


def _resolve_mask(mask: str | Path | np.ndarray) -> np.ndarray:
    if isinstance(mask, np.ndarray):
        return as_mask(mask)
    return load_mask(mask)


class Pipeline:
    """Loads images and masks, runs an inpainter and writes the result.

    Usage:
        pipeline = Pipeline(inpainter="hybrid", inpainter_kwargs={"seed": 0})
        result = pipeline.run("input.png", "mask.png", "output.png")

        # Accept a pre-built instance:
        pipeline = Pipeline(inpainter=HybridInpainter(patch_size=9, passes=5))
    """

    def __init__(
        self,
        inpainter: str | Inpainter = "hybrid",
        inpainter_kwargs: dict | None = None,
        progress: ProgressSink | None = None,
    ):
        if isinstance(inpainter, Inpainter):
            self._inpainter = inpainter
        else:
            self._inpainter = get_inpainter(inpainter, **(inpainter_kwargs or {}))
        self._progress = progress

    @property
    def inpainter(self) -> Inpainter:
        return self._inpainter

    def _run_inpaint(
        self, image: np.ndarray, mask: np.ndarray, cancel: CancelToken | None = None
    ) -> InpaintResult:
        print(f"  Inpainting with {self._inpainter.name}...")
        t0 = time.time()
        result = self._inpainter.inpaint(
            image, mask, cancel=cancel, progress=self._progress
        )
        elapsed = time.time() - t0
        if result.completed:
            print(f"  Inpainting done in {elapsed:.1f}s")
        else:
            print(f"  Inpainting cancelled after {elapsed:.1f}s, keeping partial result")
        return result

    def inpaint(
        self,
        image_path: str | Path,
        mask: str | Path | np.ndarray,
        cancel: CancelToken | None = None,
    ) -> InpaintResult:
        """Run inpainting on an image file with a provided mask.

        Args:
            image_path: Path to input image.
            mask: Mask array or path to a mask image.
            cancel: Optional cancellation token.

        Returns:
            InpaintResult for the loaded image.
        """
        image = load_image(image_path)
        if self._progress is not None:
            self._progress(0, Phase.DETECT)
        return self._run_inpaint(image, _resolve_mask(mask), cancel)

    def run(
        self,
        image_path: str | Path,
        mask: str | Path | np.ndarray,
        output_path: str | Path | None = None,
        cancel: CancelToken | None = None,
    ) -> np.ndarray:
        """Load, inpaint and optionally save.

        Args:
            image_path: Path to input image.
            mask: Mask array or path to a mask image.
            output_path: Path to save the result. If None, result is not saved.
            cancel: Optional cancellation token.

        Returns:
            Inpainted RGBA image array.
        """
        image = load_image(image_path)
        if self._progress is not None:
            self._progress(0, Phase.DETECT)
        mask_arr = _resolve_mask(mask)

        n_masked, _, pct = mask_stats(mask_arr)
        print(f"  Mask covers {pct:.1f}% of image ({n_masked} pixels)")

        if n_masked == 0:
            print("  Nothing to fill, skipping inpainting.")
            if output_path:
                save_image(image, output_path)
            return image

        result = self._run_inpaint(image, mask_arr, cancel)

        if output_path:
            save_image(result.image, output_path)
            print(f"  Result saved to {output_path}")

        return result.image


def compare(
    image_path: str | Path,
    mask: str | Path | np.ndarray,
    output_dir: str | Path,
    inpainter_kwargs: dict[str, dict] | None = None,
) -> list[tuple[str, np.ndarray]]:
    """Run every algorithm on an image and produce a comparison.

    Args:
        image_path: Path to input image.
        mask: Mask array or path to a mask image.
        output_dir: Directory to save results.
        inpainter_kwargs: Per-algorithm kwargs, keyed by algorithm name.

    Returns:
        List of (inpainter name, result image) pairs.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    inpainter_kwargs = inpainter_kwargs or {}
    image = load_image(image_path)
    mask_arr = _resolve_mask(mask)

    results = []
    for algorithm in INPAINTERS:
        print(f"\n--- {algorithm.value} ---")
        inpainter = get_inpainter(algorithm, **inpainter_kwargs.get(algorithm.value, {}))
        t0 = time.time()
        result = inpainter.inpaint(image, mask_arr)
        print(f"  {inpainter.name}: {time.time() - t0:.1f}s")
        save_image(result.image, output_dir / f"result_{algorithm.value}.png")
        results.append((inpainter.name, result.image))

    print("\nGenerating comparison grid...")
    comparison = make_comparison(image, mask_arr, results)
    save_image(comparison, output_dir / "comparison.png")
    print(f"Comparison saved to {output_dir / 'comparison.png'}")
    return results
