"""Thresholding, ordered and error diffusion dithering transforms.

RGB transforms take an (H, W, 3) uint8 buffer, overwrite it in place and
return it. Callers that need the original must pass a copy.
"""

from __future__ import annotations

import numpy as np

from ditherpunk.core.bayer import bayer_thresholds
from ditherpunk.core.kernels import DiffusionKernel
from ditherpunk.core.palette import (
    DIFFUSION_PALETTE,
    PALETTE,
    Color,
    nearest_color,
    quantize_array,
    select_colors,
)

LUMA_WEIGHTS = (0.2126, 0.7152, 0.0722)
THRESHOLD = 128.0
# Lifts weighted sums like 254.99999999999997 back to the intended level
# before truncation.
GRAY_EPSILON = 1e-6

# Grayscale diffusion splits the residual between the right and lower
# neighbors. Kept apart from the named kernel catalog.
HALF_SPLIT_TAPS = ((1, 0, 0.5), (0, 1, 0.5))


def luminance(pixels: np.ndarray) -> np.ndarray:
    """Weighted brightness of an (H, W, 3) buffer, range [0, 255]."""
    rgb = pixels.astype(np.float64)
    r_w, g_w, b_w = LUMA_WEIGHTS
    return r_w * rgb[:, :, 0] + g_w * rgb[:, :, 1] + b_w * rgb[:, :, 2]


def _write_binary(pixels: np.ndarray, white: np.ndarray) -> np.ndarray:
    pixels[...] = np.where(white[:, :, np.newaxis], 255, 0).astype(np.uint8)
    return pixels


def threshold(pixels: np.ndarray) -> np.ndarray:
    """White where luminance exceeds 128, black elsewhere."""
    return _write_binary(pixels, luminance(pixels) > THRESHOLD)


def random_dither(
    pixels: np.ndarray, rng: np.random.Generator | None = None
) -> np.ndarray:
    """Compare each pixel's luminance fraction against a uniform draw.

    Draws happen in row-major order, one per pixel, so a seeded generator
    gives reproducible output.
    """
    if rng is None:
        rng = np.random.default_rng()
    h, w = pixels.shape[:2]
    draws = rng.random((h, w))
    return _write_binary(pixels, luminance(pixels) / 255.0 > draws)


def ordered_dither(pixels: np.ndarray, order: int = 2) -> np.ndarray:
    """Threshold against a tiled Bayer matrix of the given order."""
    h, w = pixels.shape[:2]
    thresholds = bayer_thresholds(order, h, w)
    return _write_binary(pixels, luminance(pixels) > thresholds)


def palette_quantize(
    pixels: np.ndarray,
    n_colors: int,
    palette: tuple[Color, ...] = PALETTE,
) -> np.ndarray:
    """Replace every pixel with the nearest of the first ``n_colors``."""
    candidates = select_colors(palette, n_colors)
    pixels[...] = quantize_array(pixels, candidates)
    return pixels


def to_grayscale(pixels: np.ndarray) -> np.ndarray:
    """Single-channel 8-bit luminance image (values truncated)."""
    return np.clip(luminance(pixels) + GRAY_EPSILON, 0.0, 255.0).astype(np.uint8)


def error_diffusion(gray: np.ndarray) -> np.ndarray:
    """Binarize a grayscale image with right/down error diffusion.

    Args:
        gray: 2D uint8 array. Overwritten with 0 or 255 values.

    Returns:
        The same array.
    """
    h, w = gray.shape
    buffer = gray.astype(np.float64) / 255.0

    for y in range(h):
        for x in range(w):
            old = buffer[y, x]
            new = 1.0 if old > 0.5 else 0.0
            gray[y, x] = int(new * 255)
            err = old - new

            for dx, dy, weight in HALF_SPLIT_TAPS:
                nx, ny = x + dx, y + dy
                if nx < w and ny < h:
                    buffer[ny, nx] += err * weight

    return gray


def palette_diffusion(
    pixels: np.ndarray,
    n_colors: int,
    kernel: DiffusionKernel,
    palette: tuple[Color, ...] = DIFFUSION_PALETTE,
) -> np.ndarray:
    """Quantize to a reduced palette, pushing the error through ``kernel``.

    Pixels are visited row-major. Each neighbor write is clamped to
    [0, 255] and truncated to an integer, so later pixels see the
    corrected 8-bit values.
    """
    candidates = select_colors(palette, n_colors)
    h, w = pixels.shape[:2]

    for y in range(h):
        for x in range(w):
            old = pixels[y, x].astype(np.float64)
            new = nearest_color(old, candidates)
            pixels[y, x] = new

            if kernel.is_empty:
                continue
            err = old - np.array(new, dtype=np.float64)

            for dx, dy, weight in kernel.taps:
                nx, ny = x + dx, y + dy
                if 0 <= nx < w and 0 <= ny < h:
                    corrected = pixels[ny, nx].astype(np.float64) + err * weight
                    pixels[ny, nx] = np.clip(corrected, 0.0, 255.0).astype(np.uint8)

    return pixels
