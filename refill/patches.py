"""Patch and neighborhood helpers shared by the fill stages.

Coordinates are (y, x) row/column pairs throughout, matching numpy
indexing of (H, W, ...) buffers.
"""

import numpy as np

# 8-neighborhood in raster order.
NEIGHBOR_OFFSETS = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)

# Same offsets, closest first (orthogonal before diagonal).
NEAREST_OFFSETS = (
    (-1, 0), (0, -1), (0, 1), (1, 0),
    (-1, -1), (-1, 1), (1, -1), (1, 1),
)


def validate_patch_size(patch_size: int) -> int:
    if not isinstance(patch_size, (int, np.integer)) or isinstance(patch_size, bool):
        raise ValueError(f"patch_size must be an integer, got {patch_size!r}")
    if patch_size < 3 or patch_size % 2 == 0:
        raise ValueError(f"patch_size must be an odd integer >= 3, got {patch_size}")
    return int(patch_size)


def neighbors(y: int, x: int, height: int, width: int, offsets=NEIGHBOR_OFFSETS):
    """Yield in-bounds neighbor coordinates of (y, x)."""
    for dy, dx in offsets:
        ny, nx = y + dy, x + dx
        if 0 <= ny < height and 0 <= nx < width:
            yield ny, nx


def known_neighbor_counts(mask: np.ndarray) -> np.ndarray:
    """Count unmasked 8-neighbors of every pixel.

    Out-of-range neighbors are ignored (not counted as known).
    """
    h, w = mask.shape
    known = np.pad(~mask, 1, constant_values=False).astype(np.uint8)
    counts = np.zeros((h, w), dtype=np.uint8)
    for dy, dx in NEIGHBOR_OFFSETS:
        counts += known[1 + dy : 1 + dy + h, 1 + dx : 1 + dx + w]
    return counts


def count_known_neighbors(mask: np.ndarray, y: int, x: int) -> int:
    window = mask[max(y - 1, 0) : y + 2, max(x - 1, 0) : x + 2]
    known = window.size - int(np.count_nonzero(window))
    if not mask[y, x]:
        known -= 1
    return known


def is_interior(y: int, x: int, half: int, height: int, width: int) -> bool:
    """True if a full patch of radius `half` centered at (y, x) fits."""
    return half <= y < height - half and half <= x < width - half


def patch_window(y: int, x: int, half: int) -> tuple[slice, slice]:
    return slice(y - half, y + half + 1), slice(x - half, x + half + 1)


def distance_weights(patch_size: int) -> np.ndarray:
    """Per-position weights 1 / (d + 1), d = distance to the patch center."""
    half = patch_size // 2
    dy, dx = np.mgrid[-half : half + 1, -half : half + 1]
    return 1.0 / (np.hypot(dy, dx) + 1.0)


def _footprint_index(ys: np.ndarray, xs: np.ndarray, half: int):
    offsets = np.arange(-half, half + 1)
    rows = ys[:, None, None] + offsets[None, :, None]
    cols = xs[:, None, None] + offsets[None, None, :]
    return rows, cols


def gather_patches(buffer: np.ndarray, ys: np.ndarray, xs: np.ndarray, half: int) -> np.ndarray:
    """Stack the patches centered at (ys[i], xs[i]).

    Returns an array of shape (n, 2*half+1, 2*half+1, ...) with the trailing
    dimensions of `buffer`. All centers must be interior.
    """
    rows, cols = _footprint_index(ys, xs, half)
    return buffer[rows, cols]


def footprints_clear(mask: np.ndarray, ys: np.ndarray, xs: np.ndarray, half: int) -> np.ndarray:
    """Boolean array: True where the patch at (ys[i], xs[i]) has no masked pixel."""
    return ~gather_patches(mask, ys, xs, half).any(axis=(1, 2))


def neighbor_mean(image: np.ndarray, mask: np.ndarray, y: int, x: int) -> np.ndarray | None:
    """Mean RGB of the known 8-neighbors of (y, x), or None if there are none."""
    h, w = mask.shape
    values = [image[ny, nx, :3] for ny, nx in neighbors(y, x, h, w) if not mask[ny, nx]]
    if not values:
        return None
    return np.mean(np.asarray(values, dtype=np.float64), axis=0)


def nearest_known_neighbor(mask: np.ndarray, y: int, x: int) -> tuple[int, int] | None:
    h, w = mask.shape
    for ny, nx in neighbors(y, x, h, w, NEAREST_OFFSETS):
        if not mask[ny, nx]:
            return ny, nx
    return None


def to_channel(values: np.ndarray) -> np.ndarray:
    """Round float channel values into uint8."""
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)
