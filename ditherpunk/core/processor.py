"""Image processing pipeline.

Validate settings → copy buffer → run the selected dither transform.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from ditherpunk.core.dither import (
    error_diffusion,
    ordered_dither,
    palette_diffusion,
    palette_quantize,
    random_dither,
    threshold,
    to_grayscale,
)
from ditherpunk.core.kernels import KernelName, get_kernel
from ditherpunk.core.palette import (
    BLACK,
    DIFFUSION_PALETTE,
    PALETTE,
    WHITE,
    Color,
    select_colors,
)

logger = logging.getLogger(__name__)

MAX_BAYER_ORDER = 10


class DitherMode(str, Enum):
    THRESHOLD = "threshold"
    RANDOM = "random"
    ORDERED = "ordered"
    PALETTE = "palette"
    DIFFUSION = "diffusion"
    PALETTE_DIFFUSION = "palette-diffusion"


@dataclass(frozen=True)
class Settings:
    """Processing settings that affect output."""

    mode: DitherMode = DitherMode.THRESHOLD
    n_colors: int = 4  # palette modes only
    order: int = 2  # ordered mode only
    kernel: str = KernelName.FLOYD_STEINBERG.value  # palette-diffusion only
    seed: int | None = None  # random mode only

    @property
    def palette(self) -> tuple[Color, ...]:
        """Colors the mode can produce, in priority order."""
        if self.mode == DitherMode.PALETTE:
            return select_colors(PALETTE, self.n_colors)
        if self.mode == DitherMode.PALETTE_DIFFUSION:
            return select_colors(DIFFUSION_PALETTE, self.n_colors)
        return (BLACK, WHITE)

    def validate(self) -> None:
        """Raise ValueError for settings that can't be processed."""
        if self.mode == DitherMode.PALETTE:
            select_colors(PALETTE, self.n_colors)
        elif self.mode == DitherMode.PALETTE_DIFFUSION:
            select_colors(DIFFUSION_PALETTE, self.n_colors)
        elif self.mode == DitherMode.ORDERED and not (
            0 <= self.order <= MAX_BAYER_ORDER
        ):
            raise ValueError(
                f"Bayer order must be between 0 and {MAX_BAYER_ORDER}, "
                f"got {self.order}"
            )


@dataclass
class ProcessedImage:
    """Result of processing an image."""

    pixels: np.ndarray  # (H, W, 3) RGB, or (H, W) for grayscale diffusion
    mode: DitherMode
    colors: tuple[Color, ...] = field(default_factory=tuple)
    width: int = 0
    height: int = 0

    @property
    def is_grayscale(self) -> bool:
        return self.pixels.ndim == 2


def process_image(
    pixels: np.ndarray,
    settings: Settings,
    rng: np.random.Generator | None = None,
) -> ProcessedImage:
    """Run the transform selected by ``settings`` on a copy of ``pixels``.

    Args:
        pixels: (H, W, 3) uint8 RGB buffer. Left untouched.
        settings: processing settings; validated before any work.
        rng: random source for random mode. Defaults to a generator
            seeded from ``settings.seed``.

    Raises:
        ValueError: on invalid settings or a non-RGB buffer.
    """
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected an RGB buffer, got shape {pixels.shape}")
    settings.validate()

    work = np.array(pixels, dtype=np.uint8, copy=True)
    h, w = work.shape[:2]
    mode = settings.mode
    logger.debug("Processing %dx%d image with %s", w, h, mode.value)

    if mode == DitherMode.THRESHOLD:
        result = threshold(work)
    elif mode == DitherMode.RANDOM:
        if rng is None:
            rng = np.random.default_rng(settings.seed)
        result = random_dither(work, rng)
    elif mode == DitherMode.ORDERED:
        result = ordered_dither(work, settings.order)
    elif mode == DitherMode.PALETTE:
        result = palette_quantize(work, settings.n_colors)
    elif mode == DitherMode.DIFFUSION:
        result = error_diffusion(to_grayscale(work))
    else:
        kernel = get_kernel(settings.kernel)
        result = palette_diffusion(work, settings.n_colors, kernel)

    return ProcessedImage(
        pixels=result,
        mode=mode,
        colors=settings.palette,
        width=w,
        height=h,
    )
