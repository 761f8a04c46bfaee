"""Utility functions for image I/O, mask visualization, and comparison output."""

import sys
from pathlib import Path

import cv2
import numpy as np
from PIL import Image

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".tiff", ".tif"}
_NO_ALPHA_EXTENSIONS = {".jpg", ".jpeg", ".bmp"}


def is_image(path: str | Path) -> bool:
    return Path(path).suffix.lower() in IMAGE_EXTENSIONS


def dilate_mask(mask: np.ndarray, px: int) -> np.ndarray:
    """Dilate a binary mask by a given number of pixels.

    Uses an elliptical structuring element for smooth expansion.

    Args:
        mask: Mask, shape (H, W), dtype uint8 (0/255) or bool.
        px: Number of pixels to dilate by. If <= 0, mask is returned unchanged.

    Returns:
        Dilated mask, same shape and dtype.
    """
    if px <= 0:
        return mask
    kernel = cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (px * 2 + 1, px * 2 + 1))
    if mask.dtype == np.bool_:
        return cv2.dilate(mask.astype(np.uint8) * 255, kernel, iterations=1) > 0
    return cv2.dilate(mask, kernel, iterations=1)


def list_images(directory: str | Path) -> list[Path]:
    """List image files in a directory, sorted by name.

    Args:
        directory: Path to directory.

    Returns:
        Sorted list of image file paths.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")
    images = [p for p in directory.iterdir() if p.is_file() and is_image(p)]
    images.sort(key=lambda p: p.name)
    return images


def load_image(path: str | Path) -> np.ndarray:
    """Load an image from disk.

    Args:
        path: Path to the image file.

    Returns:
        Image as numpy array, shape (H, W, 4), dtype uint8, RGBA.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file cannot be read as an image.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")
    try:
        with Image.open(path) as img:
            return np.array(img.convert("RGBA"))
    except OSError as exc:
        raise ValueError(f"Could not read image: {path}") from exc


def save_image(image: np.ndarray, path: str | Path) -> None:
    """Save an image or mask to disk.

    RGBA arrays lose their alpha for formats without one. Bool masks are
    written as 0/255 grayscale.

    Args:
        image: (H, W, 4) RGBA, (H, W, 3) RGB, or (H, W) mask array.
        path: Output path. Parent directories are created if needed.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if image.dtype == np.bool_:
        image = image.astype(np.uint8) * 255
    pil = Image.fromarray(image)
    if pil.mode == "RGBA" and path.suffix.lower() in _NO_ALPHA_EXTENSIONS:
        pil = pil.convert("RGB")
    try:
        pil.save(path)
    except (OSError, ValueError) as exc:
        raise IOError(f"Failed to write image: {path}") from exc


def load_mask(path: str | Path) -> np.ndarray:
    """Load a mask from disk.

    Any image works; it is converted to grayscale and thresholded at 127.

    Returns:
        Mask as numpy array, shape (H, W), dtype bool.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Mask not found: {path}")
    try:
        with Image.open(path) as img:
            gray = np.array(img.convert("L"))
    except OSError as exc:
        raise ValueError(f"Could not read mask: {path}") from exc
    return gray > 127


def warn(message: str) -> None:
    print(f"  Warning: {message}", file=sys.stderr)


def overlay_mask(
    image: np.ndarray, mask: np.ndarray, color=(255, 0, 0), alpha=0.4
) -> np.ndarray:
    """Overlay a mask on an image for visualization.

    Masked pixels are tinted with the given color.

    Args:
        image: Input image, shape (H, W, 3) or (H, W, 4), RGB(A).
        mask: Mask, shape (H, W), bool or uint8.
        color: RGB color to tint the masked regions.
        alpha: Opacity of the tint overlay.

    Returns:
        (H, W, 3) RGB visualization.
    """
    rgb = np.ascontiguousarray(image[..., :3])
    mask_bool = mask if mask.dtype == np.bool_ else mask > 127
    vis = rgb.copy()
    overlay = np.full_like(rgb, color, dtype=np.uint8)
    vis[mask_bool] = cv2.addWeighted(rgb, 1 - alpha, overlay, alpha, 0)[mask_bool]
    return vis


def make_comparison(
    original: np.ndarray,
    mask: np.ndarray,
    results: list[tuple[str, np.ndarray]],
    max_width: int = 800,
) -> np.ndarray:
    """Create a side-by-side comparison image.

    Produces a grid: [original | mask overlay | result1 | result2 | ...],
    three panels per row.

    Args:
        original: Original input image.
        mask: Mask that was inpainted.
        results: List of (label, inpainted_result) tuples.
        max_width: Maximum width for each panel. Images are scaled down if wider.

    Returns:
        Comparison image as an RGB numpy array.
    """
    h, w = original.shape[:2]

    scale = min(1.0, max_width / w)
    new_w = max(int(w * scale), 1)
    new_h = max(int(h * scale), 1)

    def panel(img: np.ndarray, label: str) -> np.ndarray:
        rgb = np.ascontiguousarray(img[..., :3])
        return _add_label(cv2.resize(rgb, (new_w, new_h)), label)

    panels = [
        panel(original, "Original"),
        panel(overlay_mask(original, mask), "Mask"),
    ]
    for label, inpainted in results:
        panels.append(panel(inpainted, label))

    if len(panels) <= 3:
        return np.hstack(panels)
    rows = []
    for i in range(0, len(panels), 3):
        row_panels = panels[i : i + 3]
        while len(row_panels) < 3:
            row_panels.append(np.zeros_like(panels[0]))
        rows.append(np.hstack(row_panels))
    return np.vstack(rows)


def _add_label(image: np.ndarray, label: str) -> np.ndarray:
    """Add a text label to the top of an image."""
    h, w = image.shape[:2]
    label_height = 30
    labeled = np.zeros((h + label_height, w, 3), dtype=np.uint8)
    labeled[label_height:, :] = image

    labeled[:label_height, :] = (40, 40, 40)

    font = cv2.FONT_HERSHEY_SIMPLEX
    font_scale = 0.5
    thickness = 1
    text_size = cv2.getTextSize(label, font, font_scale, thickness)[0]
    text_x = max((w - text_size[0]) // 2, 0)
    text_y = (label_height + text_size[1]) // 2
    cv2.putText(
        labeled, label, (text_x, text_y), font, font_scale, (255, 255, 255), thickness
    )
    return labeled
