"""Recursive Bayer matrix generation for ordered dithering."""

from __future__ import annotations

import numpy as np


def bayer_matrix(order: int) -> np.ndarray:
    """Build the 2^order x 2^order Bayer rank matrix.

    Order 0 is [[0]]. Each rank m of the previous order spreads to
    4m (top-left), 4m + 2 (top-right), 4m + 3 (bottom-left) and
    4m + 1 (bottom-right), so the result is a permutation of
    0 .. size**2 - 1.

    Raises:
        ValueError: if ``order`` is negative.
    """
    if order < 0:
        raise ValueError(f"Bayer order must be non-negative, got {order}")
    if order == 0:
        return np.array([[0]], dtype=np.int64)

    base = 4 * bayer_matrix(order - 1)
    return np.block(
        [
            [base + 0, base + 2],
            [base + 3, base + 1],
        ]
    )


def bayer_thresholds(order: int, height: int, width: int) -> np.ndarray:
    """Tile the Bayer matrix over an image and rescale ranks to 0-255.

    The threshold at (x, y) is M[y % size][x % size] * 255 / size**2.
    """
    matrix = bayer_matrix(order)
    size = matrix.shape[0]
    reps_y = -(-height // size)
    reps_x = -(-width // size)
    tiled = np.tile(matrix, (reps_y, reps_x))[:height, :width]
    return tiled.astype(np.float64) * (255.0 / (size * size))
