"""Dithered image preview widget for the TUI."""

from __future__ import annotations

import numpy as np
from rich.text import Text
from textual.app import ComposeResult
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Static

from ditherpunk.core.processor import ProcessedImage

HALF_BLOCK = "▀"
EMPTY_MESSAGE = "No image loaded. Press 'o' to open a file."


def _rgb(pixel: np.ndarray) -> str:
    return f"rgb({int(pixel[0])},{int(pixel[1])},{int(pixel[2])})"


def pixels_to_text(pixels: np.ndarray) -> Text:
    """Render a pixel buffer as half-block characters.

    Each character covers two rows: the upper pixel is the foreground
    color, the lower one the background. An odd last row has no
    background. Grayscale buffers are expanded to RGB.
    """
    if pixels.ndim == 2:
        pixels = np.repeat(pixels[:, :, np.newaxis], 3, axis=2)

    h, w = pixels.shape[:2]
    text = Text()
    for y in range(0, h, 2):
        if y > 0:
            text.append("\n")
        for x in range(w):
            style = _rgb(pixels[y, x])
            if y + 1 < h:
                style = f"{style} on {_rgb(pixels[y + 1, x])}"
            text.append(HALF_BLOCK, style=style)
    return text


class DitherPreview(Widget):
    """Widget that displays a processed image scaled to the terminal."""

    DEFAULT_CSS = """
    DitherPreview {
        width: 1fr;
        height: 1fr;
        overflow: auto;
        background: $surface;
    }

    DitherPreview #preview-content {
        width: auto;
        height: auto;
    }
    """

    class ImageUpdated(Message):
        """Posted when a new image is displayed."""
        def __init__(self, image: ProcessedImage) -> None:
            super().__init__()
            self.image = image

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._current_image: ProcessedImage | None = None

    def compose(self) -> ComposeResult:
        yield Static(EMPTY_MESSAGE, id="preview-content")

    def update_image(self, image: ProcessedImage) -> None:
        """Show a processed image."""
        self._current_image = image
        content = self.query_one("#preview-content", Static)
        content.update(pixels_to_text(image.pixels))
        self.post_message(self.ImageUpdated(image))

    def clear(self) -> None:
        self._current_image = None
        content = self.query_one("#preview-content", Static)
        content.update(EMPTY_MESSAGE)

    @property
    def current_image(self) -> ProcessedImage | None:
        return self._current_image
