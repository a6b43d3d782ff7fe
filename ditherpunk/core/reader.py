"""Image loading.

Decodes anything Pillow can open and flattens it to an 8-bit RGB buffer.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError


@dataclass
class SourceImage:
    """A decoded input image."""

    path: Path
    pixels: np.ndarray  # (H, W, 3) uint8
    format: str  # Pillow format name, e.g. "PNG"

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    def to_pil(self) -> Image.Image:
        return Image.fromarray(self.pixels)


def open_image(path: str | Path) -> SourceImage:
    """Open an image file and convert it to RGB.

    Raises:
        FileNotFoundError: if the path does not exist.
        ValueError: if the file can't be decoded as an image.
    """
    local_path = Path(path)
    if not local_path.exists():
        raise FileNotFoundError(f"File not found: {local_path}")

    try:
        with Image.open(local_path) as img:
            fmt = img.format or ""
            rgb = img.convert("RGB")
    except (UnidentifiedImageError, OSError) as e:
        raise ValueError(f"Cannot read image {local_path}: {e}") from e

    return SourceImage(
        path=local_path,
        pixels=np.array(rgb, dtype=np.uint8),
        format=fmt,
    )
