"""Exceptions raised by the inpainting engine."""

from typing import Any


class InpaintError(Exception):
    """Base class for engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class DimensionMismatchError(InpaintError, ValueError):
    """Mask and image do not have the same width and height."""

    def __init__(self, image_shape: tuple[int, int], mask_shape: tuple[int, int]):
        img_h, img_w = image_shape
        mask_h, mask_w = mask_shape
        super().__init__(
            f"Mask size ({mask_w}x{mask_h}) differs from image ({img_w}x{img_h})",
            {"image_shape": image_shape, "mask_shape": mask_shape},
        )
        self.image_shape = image_shape
        self.mask_shape = mask_shape


class InpaintCancelled(InpaintError):
    """Raised inside a running stage when its cancel token fires.

    Inpainters catch this and hand back the partial image, so it never
    escapes the public API.
    """

    def __init__(self, message: str = "Inpainting cancelled"):
        super().__init__(message)
