"""Image and mask buffer conversion and validation."""

import numpy as np

from refill.errors import DimensionMismatchError

OPAQUE = 255


def as_rgba(image: np.ndarray) -> np.ndarray:
    """Return `image` as an (H, W, 4) uint8 RGBA array.

    RGBA input is returned as-is (no copy). RGB input gets an opaque alpha
    channel appended.

    Raises:
        ValueError: If the array is not (H, W, 3) or (H, W, 4) uint8.
    """
    if image.dtype != np.uint8:
        raise ValueError(f"Image must be uint8, got {image.dtype}")
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(
            f"Image must have shape (H, W, 3) or (H, W, 4), got {image.shape}"
        )
    if image.shape[2] == 4:
        return image
    h, w = image.shape[:2]
    alpha = np.full((h, w, 1), OPAQUE, dtype=np.uint8)
    return np.concatenate([image, alpha], axis=2)


def as_mask(mask: np.ndarray) -> np.ndarray:
    """Return `mask` as an (H, W) bool array, True meaning "fill me".

    Bool masks are returned as-is. Numeric masks follow the 0/255 convention
    and are thresholded at 127.

    Raises:
        ValueError: If the mask is not 2-D, or is a numeric 0/1 mask, which
            the threshold would silently read as empty.
    """
    if mask.ndim != 2:
        raise ValueError(f"Mask must be 2-dimensional, got shape {mask.shape}")
    if mask.dtype == np.bool_:
        return mask
    if mask.any() and mask.max() <= 1:
        raise ValueError(
            "Numeric masks must use 0/255 (got values in [0, 1]); "
            "pass a bool mask or scale it by 255"
        )
    return mask > 127


def check_dimensions(image: np.ndarray, mask: np.ndarray) -> None:
    """Raise DimensionMismatchError unless image and mask share (H, W)."""
    img_shape = tuple(image.shape[:2])
    mask_shape = tuple(mask.shape[:2])
    if img_shape != mask_shape:
        raise DimensionMismatchError(img_shape, mask_shape)


def prepare(image: np.ndarray, mask: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Validate caller buffers and return private working copies.

    Nothing is copied until every check has passed, so a rejected call
    leaves no trace.
    """
    rgba = as_rgba(image)
    bool_mask = as_mask(mask)
    check_dimensions(rgba, bool_mask)
    return rgba.copy(), bool_mask.copy()


def mask_stats(mask: np.ndarray) -> tuple[int, int, float]:
    """Compute basic statistics about a mask.

    Returns:
        Tuple of (n_masked, total, percentage).
    """
    n_masked = int(np.count_nonzero(mask))
    total = mask.shape[0] * mask.shape[1]
    pct = n_masked / total * 100 if total > 0 else 0.0
    return n_masked, total, pct
