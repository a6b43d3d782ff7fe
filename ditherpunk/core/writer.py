"""Save processed images.

Output is written to a temporary file beside the destination and renamed
into place, so a failed encode never leaves a partial file behind.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import numpy as np
from PIL import Image

from ditherpunk.core.processor import DitherMode, ProcessedImage

# Suffix for auto-generated output names
OUTPUT_TAGS: dict[DitherMode, str] = {
    DitherMode.THRESHOLD: "monochrome",
    DitherMode.RANDOM: "random",
    DitherMode.ORDERED: "bayer",
    DitherMode.PALETTE: "palette",
    DitherMode.DIFFUSION: "diffusion",
    DitherMode.PALETTE_DIFFUSION: "palette_diffusion",
}


def default_output_path(input_path: Path, mode: DitherMode) -> Path:
    """<input stem>_<mode tag>.png next to the input."""
    return input_path.parent / f"{input_path.stem}_{OUTPUT_TAGS[mode]}.png"


def output_format(path: Path) -> str:
    """Pillow format name for the file extension."""
    suffix = path.suffix.lower()
    fmt = Image.registered_extensions().get(suffix)
    if fmt is None:
        raise ValueError(f"Unsupported output format: {suffix or path.name}")
    return fmt


def to_pil(pixels: np.ndarray) -> Image.Image:
    """Wrap an RGB or grayscale buffer as a PIL image."""
    return Image.fromarray(pixels.astype(np.uint8))


def save_image(pixels: np.ndarray, output_path: Path) -> None:
    """Encode ``pixels`` to ``output_path``.

    Raises:
        ValueError: unsupported extension.
        OSError: destination not writable.
    """
    output_path = Path(output_path)
    fmt = output_format(output_path)
    img = to_pil(pixels)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{output_path.stem}-",
        suffix=output_path.suffix,
        dir=output_path.parent,
    )
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as fh:
            img.save(fh, format=fmt)
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, output_path)
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise


def save_output(image: ProcessedImage, output_path: Path) -> None:
    """Save a ProcessedImage in the format given by the output extension."""
    save_image(image.pixels, output_path)
