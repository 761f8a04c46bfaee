"""Batch processing for directories of images sharing one mask.

Every image in the input directory is inpainted with the same mask, which
suits a fixed watermark stamped at the same place on a series of images.
Images whose size differs from the mask are reported and skipped.
"""

import shutil
import time
from pathlib import Path

import numpy as np

from refill.errors import DimensionMismatchError
from refill.inpainters.base import Inpainter
from refill.raster import mask_stats
from refill.utils import list_images, load_image, save_image, warn


def inpaint_batch(
    input_dir: Path,
    output_dir: Path,
    mask: np.ndarray,
    inpainter: Inpainter,
) -> list[Path]:
    """Inpaint every image in `input_dir` with a shared mask.

    Args:
        input_dir: Directory of input images.
        output_dir: Directory for results, created if needed. File names are
            kept.
        mask: Shared (H, W) mask.
        inpainter: Inpainter instance.

    Returns:
        Paths of the images that were written.
    """
    total_t0 = time.time()
    image_paths = list_images(input_dir)
    if not image_paths:
        raise FileNotFoundError(f"No image files found in {input_dir}")
    n = len(image_paths)
    print(f"  Source: directory ({n} images)")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    n_masked, _, pct = mask_stats(mask)
    if n_masked == 0:
        print("  Shared mask is empty. Copying originals.")
        for i, p in enumerate(image_paths):
            out_p = output_dir / p.name
            shutil.copy2(p, out_p)
            written.append(out_p)
            print(f"  [{i + 1}/{n}] {p.name} (copied)")
        return written

    print(f"\n  Inpainting {n} images with shared mask ({pct:.1f}% masked)...")
    for i, p in enumerate(image_paths):
        t0 = time.time()
        image = load_image(p)
        try:
            result = inpainter.inpaint(image, mask)
        except DimensionMismatchError as exc:
            warn(f"[{i + 1}/{n}] {p.name} skipped: {exc}")
            continue
        out_p = output_dir / p.name
        save_image(result.image, out_p)
        written.append(out_p)
        elapsed = time.time() - t0
        print(f"  [{i + 1}/{n}] {p.name} ({elapsed:.1f}s)")

    total_elapsed = time.time() - total_t0
    print(
        f"\n  Batch complete: {len(written)}/{n} images in {total_elapsed:.1f}s "
        f"({total_elapsed / n:.1f}s/image avg)"
    )
    return written
