"""Error diffusion kernels.

Each kernel is an ordered list of (dx, dy, weight) taps relative to the
pixel being quantized. Weights normally sum to 1.0; Atkinson sums to 0.75
and drops the remaining quarter of the error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

Tap = tuple[int, int, float]


class KernelName(str, Enum):
    FLOYD_STEINBERG = "floyd-steinberg"
    JARVIS_JUDICE_NINKE = "jarvis-judice-ninke"
    ATKINSON = "atkinson"


@dataclass(frozen=True)
class DiffusionKernel:
    name: str
    taps: tuple[Tap, ...]

    @property
    def total_weight(self) -> float:
        """Fraction of the quantization error the kernel passes on."""
        return sum(weight for _, _, weight in self.taps)

    @property
    def is_empty(self) -> bool:
        return not self.taps


FLOYD_STEINBERG_TAPS: tuple[Tap, ...] = (
    (1, 0, 7 / 16),
    (-1, 1, 3 / 16),
    (0, 1, 5 / 16),
    (1, 1, 1 / 16),
)

# Two rows of lookahead, denominator 48
JARVIS_JUDICE_NINKE_TAPS: tuple[Tap, ...] = (
    (1, 0, 7 / 48),
    (2, 0, 5 / 48),
    (-2, 1, 3 / 48),
    (-1, 1, 5 / 48),
    (0, 1, 7 / 48),
    (1, 1, 5 / 48),
    (2, 1, 3 / 48),
    (-2, 2, 1 / 48),
    (-1, 2, 3 / 48),
    (0, 2, 5 / 48),
    (1, 2, 3 / 48),
    (2, 2, 1 / 48),
)

ATKINSON_TAPS: tuple[Tap, ...] = (
    (1, 0, 1 / 8),
    (2, 0, 1 / 8),
    (-1, 1, 1 / 8),
    (0, 1, 1 / 8),
    (1, 1, 1 / 8),
    (0, 2, 1 / 8),
)


KERNELS: dict[KernelName, DiffusionKernel] = {
    KernelName.FLOYD_STEINBERG: DiffusionKernel(
        KernelName.FLOYD_STEINBERG.value, FLOYD_STEINBERG_TAPS
    ),
    KernelName.JARVIS_JUDICE_NINKE: DiffusionKernel(
        KernelName.JARVIS_JUDICE_NINKE.value, JARVIS_JUDICE_NINKE_TAPS
    ),
    KernelName.ATKINSON: DiffusionKernel(KernelName.ATKINSON.value, ATKINSON_TAPS),
}

EMPTY_KERNEL = DiffusionKernel("none", ())


def is_known_kernel(name: str) -> bool:
    return name in {k.value for k in KernelName}


def get_kernel(name: str) -> DiffusionKernel:
    """Look up a kernel by name.

    Unknown names fall back to EMPTY_KERNEL, which quantizes every pixel
    independently. This never raises; use is_known_kernel() to validate.
    """
    if not is_known_kernel(name):
        logger.warning(
            "Unknown diffusion kernel %r, falling back to no diffusion", name
        )
        return EMPTY_KERNEL
    return KERNELS[KernelName(name)]
