"""Terminal size detection utilities."""

from __future__ import annotations

import shutil


def get_terminal_size(
    fallback_width: int = 80,
    fallback_height: int = 24,
) -> tuple[int, int]:
    """Get current terminal size in columns and rows.

    Returns (width, height). Falls back to provided defaults
    if terminal size cannot be determined.
    """
    try:
        size = shutil.get_terminal_size(fallback=(fallback_width, fallback_height))
        return size.columns, size.lines
    except (ValueError, OSError):
        return fallback_width, fallback_height


def fit_preview(
    img_width: int,
    img_height: int,
    max_cols: int | None = None,
    max_rows: int | None = None,
) -> tuple[int, int]:
    """Pixel dimensions for a half-block preview that fits the terminal.

    Each character cell shows two stacked pixels, so a cell of roughly
    1:2 aspect holds two square pixels. Images are only ever shrunk.

    Args:
        img_width: original image width in pixels.
        img_height: original image height in pixels.
        max_cols: available columns (defaults to terminal width).
        max_rows: available rows (defaults to terminal height - 4 for UI).

    Returns:
        (pixel_width, pixel_height) tuple.
    """
    if max_cols is None or max_rows is None:
        tw, th = get_terminal_size()
        if max_cols is None:
            max_cols = tw
        if max_rows is None:
            max_rows = max(th - 4, 10)

    max_w = max(max_cols, 1)
    max_h = max(max_rows, 1) * 2
    scale = min(max_w / img_width, max_h / img_height, 1.0)
    return max(1, int(img_width * scale)), max(1, int(img_height * scale))
