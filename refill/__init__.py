"""Mask-driven raster inpainting: texture synthesis, diffusion, and both."""

from refill.engine import InpaintTask, inpaint, submit
from refill.errors import DimensionMismatchError, InpaintError
from refill.frontier import Frontier, compute_frontier
from refill.inpainters import (
    DiffusionInpainter,
    HybridInpainter,
    Inpainter,
    TextureInpainter,
    get_inpainter,
)
from refill.inpainters.diffusion import smooth
from refill.inpainters.hybrid import hybrid_fill
from refill.inpainters.texture import PatchMatcher, synthesize
from refill.masks import MaskBuilder
from refill.state import (
    Algorithm,
    CancelToken,
    EngineState,
    InpaintResult,
    Phase,
    Status,
)

__version__ = "0.1.0"

__all__ = [
    "Algorithm",
    "CancelToken",
    "DiffusionInpainter",
    "DimensionMismatchError",
    "EngineState",
    "Frontier",
    "HybridInpainter",
    "InpaintError",
    "InpaintResult",
    "InpaintTask",
    "Inpainter",
    "MaskBuilder",
    "PatchMatcher",
    "Phase",
    "Status",
    "TextureInpainter",
    "compute_frontier",
    "get_inpainter",
    "hybrid_fill",
    "inpaint",
    "smooth",
    "submit",
    "synthesize",
]
