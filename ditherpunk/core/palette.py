"""Fixed color catalog, RGB distance and nearest-color quantization."""

from __future__ import annotations

import math
from typing import NamedTuple, Sequence

import numpy as np


class Color(NamedTuple):
    r: int
    g: int
    b: int


WHITE = Color(255, 255, 255)
BLACK = Color(0, 0, 0)
RED = Color(255, 0, 0)
GREEN = Color(0, 255, 0)
BLUE = Color(0, 0, 255)
YELLOW = Color(255, 255, 0)
MAGENTA = Color(255, 0, 255)
CYAN = Color(0, 255, 255)

# Priority order: select_colors() takes a prefix of these.
PALETTE: tuple[Color, ...] = (
    WHITE,
    BLACK,
    RED,
    GREEN,
    BLUE,
    YELLOW,
    MAGENTA,
    CYAN,
)

# Subset used by palette + error diffusion, in its own priority order.
DIFFUSION_PALETTE: tuple[Color, ...] = (BLACK, WHITE, RED, BLUE, GREEN)


def select_colors(palette: Sequence[Color], n: int) -> tuple[Color, ...]:
    """Return the first ``n`` colors of ``palette`` in priority order.

    Raises:
        ValueError: if ``n`` is below 1 or larger than the palette.
    """
    if n < 1:
        raise ValueError("Palette must contain at least one color")
    if n > len(palette):
        raise ValueError(
            f"Requested {n} colors but the palette only has {len(palette)}"
        )
    return tuple(palette[:n])


def color_distance(a: Sequence[int], b: Sequence[int]) -> float:
    """Euclidean distance between two RGB triples."""
    return math.sqrt(
        (float(a[0]) - float(b[0])) ** 2
        + (float(a[1]) - float(b[1])) ** 2
        + (float(a[2]) - float(b[2])) ** 2
    )


def nearest_color(color: Sequence[int], candidates: Sequence[Color]) -> Color:
    """Return the candidate closest to ``color``.

    Ties go to the earliest candidate, so callers control the outcome
    through palette order.
    """
    if not candidates:
        raise ValueError("Cannot quantize against an empty palette")

    best = candidates[0]
    best_distance = color_distance(color, best)
    for candidate in candidates[1:]:
        distance = color_distance(color, candidate)
        if distance < best_distance:
            best = candidate
            best_distance = distance
    return best


def quantize_array(pixels: np.ndarray, candidates: Sequence[Color]) -> np.ndarray:
    """Map every pixel of an (H, W, 3) buffer to its nearest candidate.

    Works one candidate at a time on (H, W) planes of squared distances,
    so memory stays a small multiple of the input. A later candidate only
    takes over where it is strictly closer, matching nearest_color().
    """
    if not candidates:
        raise ValueError("Cannot quantize against an empty palette")

    r, g, b = (pixels[:, :, c].astype(np.int32) for c in range(3))
    index_type = np.min_scalar_type(len(candidates) - 1)
    best_idx = np.zeros(pixels.shape[:2], dtype=index_type)
    best_dist: np.ndarray | None = None

    for i, (cr, cg, cb) in enumerate(candidates):
        dist = (r - cr) ** 2
        dist += (g - cg) ** 2
        dist += (b - cb) ** 2
        if best_dist is None:
            best_dist = dist
            continue
        closer = dist < best_dist
        best_idx[closer] = i
        np.copyto(best_dist, dist, where=closer)

    return np.array(candidates, dtype=np.uint8)[best_idx]
