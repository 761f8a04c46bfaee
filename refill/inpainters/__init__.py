"""Inpainter registry."""

from refill.inpainters.base import Inpainter
from refill.inpainters.diffusion import DiffusionInpainter
from refill.inpainters.hybrid import HybridInpainter
from refill.inpainters.texture import TextureInpainter
from refill.state import Algorithm

INPAINTERS: dict[Algorithm, type[Inpainter]] = {
    Algorithm.TEXTURE: TextureInpainter,
    Algorithm.DIFFUSION: DiffusionInpainter,
    Algorithm.HYBRID: HybridInpainter,
}


def resolve_algorithm(name: str | Algorithm) -> Algorithm:
    """Turn an algorithm name into its enum member."""
    if isinstance(name, Algorithm):
        return name
    try:
        return Algorithm(str(name).lower())
    except ValueError:
        available = ", ".join(a.value for a in Algorithm)
        raise ValueError(f"Unknown algorithm '{name}'. Available: {available}") from None


def get_inpainter(name: str | Algorithm, **kwargs) -> Inpainter:
    """Instantiate an inpainter by algorithm name."""
    return INPAINTERS[resolve_algorithm(name)](**kwargs)


__all__ = [
    "Inpainter",
    "INPAINTERS",
    "get_inpainter",
    "resolve_algorithm",
    "TextureInpainter",
    "DiffusionInpainter",
    "HybridInpainter",
]
