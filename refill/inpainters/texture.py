"""Patch-based texture synthesis.

Fills a masked region from its boundary inward. Each step takes the frontier
pixel with the most known neighbors, samples candidate source patches (mostly
near the pixel, some anywhere in the image), scores them against the known
part of the target neighborhood and copies the best source's center color in.

Sampling is driven by an injected `numpy.random.Generator`, so a fixed seed
reproduces the fill exactly. Candidate scoring is vectorised: all candidates
for one pixel are gathered and scored in a single numpy expression.

Fallbacks keep the fill total:
- a pixel too close to the border for a full patch takes the mean of its
  known neighbors;
- a pixel with no valid candidate copies its nearest known neighbor;
- anything still masked when the frontier runs dry copies the nearest known
  pixel anywhere in the image.
"""

import math

import cv2
import numpy as np

from refill.frontier import Frontier
from refill.inpainters.base import Inpainter
from refill.patches import (
    distance_weights,
    footprints_clear,
    gather_patches,
    is_interior,
    nearest_known_neighbor,
    neighbor_mean,
    neighbors,
    patch_window,
    to_channel,
    validate_patch_size,
)
from refill.raster import OPAQUE
from refill.state import Algorithm, EngineState, Reporter

DEFAULT_PATCH_SIZE = 7
DEFAULT_SAMPLES = 600
DEFAULT_LOCAL_FRACTION = 0.7
DEFAULT_MIN_RADIUS = 50
DEFAULT_MAX_RADIUS = 100
DEFAULT_DISTANCE_PENALTY = 0.1

# Weight of the copied source color relative to one known neighbor.
_SOURCE_WEIGHT = 2.0


class PatchMatcher:
    """Exemplar-based fill of a mask, one frontier pixel at a time."""

    def __init__(
        self,
        patch_size: int = DEFAULT_PATCH_SIZE,
        samples: int = DEFAULT_SAMPLES,
        local_fraction: float = DEFAULT_LOCAL_FRACTION,
        min_radius: float = DEFAULT_MIN_RADIUS,
        max_radius: float = DEFAULT_MAX_RADIUS,
        distance_penalty: float = DEFAULT_DISTANCE_PENALTY,
        distance_weighting: bool = True,
        blend: bool = True,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ):
        """Initialize the matcher.

        Args:
            patch_size: Side of the square comparison window. Odd, >= 3.
            samples: Candidate source centers drawn per frontier pixel.
            local_fraction: Share of candidates drawn near the target pixel;
                the rest are drawn uniformly over the image.
            min_radius: Lower clamp of the local sampling radius.
            max_radius: Upper clamp of the local sampling radius. The radius
                itself is the number of pixels still masked.
            distance_penalty: Score added per pixel of distance between the
                target and a candidate, favouring local sources.
            distance_weighting: Weight patch positions by 1 / (d + 1) so the
                pixels near the center dominate the match.
            blend: Average the copied color with the pixel's known neighbors
                (source weighted double) instead of copying it verbatim.
            rng: Random generator for candidate sampling. Takes precedence
                over `seed`.
            seed: Seed for a fresh generator when `rng` is not given.
        """
        self.patch_size = validate_patch_size(patch_size)
        if samples < 1:
            raise ValueError(f"samples must be >= 1, got {samples}")
        if not 0.0 <= local_fraction <= 1.0:
            raise ValueError(f"local_fraction must be in [0, 1], got {local_fraction}")
        if min_radius > max_radius:
            raise ValueError("min_radius must not exceed max_radius")
        self.samples = int(samples)
        self.local_fraction = local_fraction
        self.min_radius = min_radius
        self.max_radius = max_radius
        self.distance_penalty = distance_penalty
        self.distance_weighting = distance_weighting
        self.blend = blend
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._half = self.patch_size // 2
        if distance_weighting:
            self._weights = distance_weights(self.patch_size)
        else:
            self._weights = np.ones((self.patch_size, self.patch_size))

    def sample_candidates(
        self, y: int, x: int, height: int, width: int, remaining: int
    ) -> tuple[np.ndarray, np.ndarray]:
        """Draw candidate source centers for target (y, x).

        Centers are clamped so every candidate has a full patch in bounds.
        """
        half = self._half
        n_local = int(round(self.samples * self.local_fraction))
        n_global = self.samples - n_local
        radius = min(max(remaining, self.min_radius), self.max_radius)

        angles = self._rng.uniform(0.0, 2.0 * math.pi, n_local)
        dists = self._rng.uniform(0.0, radius, n_local)
        local_y = np.floor(y + np.sin(angles) * dists).astype(np.int64)
        local_x = np.floor(x + np.cos(angles) * dists).astype(np.int64)

        global_y = self._rng.integers(half, height - half, n_global)
        global_x = self._rng.integers(half, width - half, n_global)

        ys = np.clip(np.concatenate([local_y, global_y]), half, height - half - 1)
        xs = np.clip(np.concatenate([local_x, global_x]), half, width - half - 1)
        return ys, xs

    def score_candidates(
        self,
        image: np.ndarray,
        mask: np.ndarray,
        y: int,
        x: int,
        ys: np.ndarray,
        xs: np.ndarray,
    ) -> np.ndarray | None:
        """Score candidate centers against the target patch at (y, x).

        Only target positions that are currently known contribute color
        error. Returns None when the target patch has no known position.
        """
        half = self._half
        rows, cols = patch_window(y, x, half)
        weights = self._weights * ~mask[rows, cols]
        total = weights.sum()
        if total <= 0:
            return None

        target = image[rows, cols, :3].astype(np.float64)
        sources = gather_patches(image[..., :3], ys, xs, half).astype(np.float64)
        ssd = ((sources - target) ** 2).sum(axis=-1)
        color_error = (ssd * weights).sum(axis=(1, 2)) / total
        spatial = np.hypot(ys - y, xs - x)
        return color_error + self.distance_penalty * spatial

    def find_source(
        self, image: np.ndarray, mask: np.ndarray, y: int, x: int, remaining: int
    ) -> tuple[int, int] | None:
        """Return the best fully-known source center for (y, x), or None."""
        height, width = mask.shape
        ys, xs = self.sample_candidates(y, x, height, width, remaining)
        valid = footprints_clear(mask, ys, xs, self._half)
        if not valid.any():
            return None
        ys, xs = ys[valid], xs[valid]
        scores = self.score_candidates(image, mask, y, x, ys, xs)
        if scores is None:
            return None
        best = int(np.argmin(scores))
        return int(ys[best]), int(xs[best])

    def _blended(self, image: np.ndarray, mask: np.ndarray, y: int, x: int, source: np.ndarray) -> np.ndarray:
        if not self.blend:
            return source
        height, width = mask.shape
        total = source.astype(np.float64) * _SOURCE_WEIGHT
        weight = _SOURCE_WEIGHT
        for ny, nx in neighbors(y, x, height, width):
            if not mask[ny, nx]:
                total += image[ny, nx, :3]
                weight += 1.0
        return to_channel(total / weight)

    def fill_pixel(self, image: np.ndarray, mask: np.ndarray, y: int, x: int, remaining: int) -> None:
        """Synthesize the color of a single frontier pixel (mask left untouched)."""
        height, width = mask.shape
        if not is_interior(y, x, self._half, height, width):
            mean = neighbor_mean(image, mask, y, x)
            if mean is not None:
                image[y, x, :3] = to_channel(mean)
        else:
            match = self.find_source(image, mask, y, x, remaining)
            if match is not None:
                sy, sx = match
                image[y, x, :3] = self._blended(image, mask, y, x, image[sy, sx, :3])
            else:
                nearest = nearest_known_neighbor(mask, y, x)
                if nearest is not None:
                    image[y, x, :3] = image[nearest[0], nearest[1], :3]
        image[y, x, 3] = OPAQUE

    def fill(self, image: np.ndarray, mask: np.ndarray, reporter: Reporter | None = None) -> int:
        """Fill every masked pixel of `image`, clearing `mask` as it goes.

        Both buffers are mutated in place. Returns the number of pixels
        filled through the frontier (the rest went through the final
        nearest-pixel sweep).
        """
        initial = int(np.count_nonzero(mask))
        if initial == 0:
            return 0

        frontier = Frontier(mask)
        budget = 2 * initial
        remaining = initial
        iterations = 0
        filled = 0
        while len(frontier) and iterations < budget:
            if reporter is not None:
                reporter.check()
            iterations += 1
            target = frontier.pop()
            if target is None:
                break
            y, x = target
            self.fill_pixel(image, mask, y, x, remaining)
            mask[y, x] = False
            remaining -= 1
            filled += 1
            frontier.push_neighbors(y, x)
            if reporter is not None:
                reporter.advance(filled / initial)

        if remaining:
            fill_nearest(image, mask)
        return filled


def fill_nearest(image: np.ndarray, mask: np.ndarray) -> None:
    """Copy the nearest known pixel into every masked pixel and clear the mask.

    Nearness is the 5x5 chamfer approximation of Euclidean distance used by
    `cv2.distanceTransformWithLabels`. An image with no known pixel at all is
    filled with opaque black.
    """
    if not mask.any():
        return
    if mask.all():
        image[mask] = (0, 0, 0, OPAQUE)
        mask[:] = False
        return
    # every known (zero) pixel gets its own label; masked pixels inherit the
    # label of the closest one
    _, labels = cv2.distanceTransformWithLabels(
        mask.astype(np.uint8), cv2.DIST_L2, 5, labelType=cv2.DIST_LABEL_PIXEL
    )
    known = np.argwhere(~mask)
    lookup = np.zeros((int(labels.max()) + 1, 2), dtype=np.intp)
    lookup[labels[known[:, 0], known[:, 1]]] = known
    source = lookup[labels[mask]]
    image[mask, :3] = image[source[:, 0], source[:, 1], :3]
    image[mask, 3] = OPAQUE
    mask[:] = False


def synthesize(
    image: np.ndarray,
    mask: np.ndarray,
    patch_size: int = DEFAULT_PATCH_SIZE,
    reporter: Reporter | None = None,
    **kwargs,
) -> int:
    """Run texture synthesis in place. See `PatchMatcher` for keyword options."""
    return PatchMatcher(patch_size=patch_size, **kwargs).fill(image, mask, reporter)


class TextureInpainter(Inpainter):
    """Texture synthesis alone."""

    algorithm = Algorithm.TEXTURE

    def __init__(self, patch_size: int = DEFAULT_PATCH_SIZE, seed: int | None = None, **kwargs):
        self._patch_size = validate_patch_size(patch_size)
        self._seed = seed
        self._matcher_kwargs = kwargs

    @property
    def name(self) -> str:
        return f"texture(patch={self._patch_size})"

    def _inpaint(self, image: np.ndarray, mask: np.ndarray, reporter: Reporter) -> None:
        matcher = PatchMatcher(
            patch_size=self._patch_size, seed=self._seed, **self._matcher_kwargs
        )
        reporter.stage(EngineState.SYNTHESIZING)
        matcher.fill(image, mask, reporter)
