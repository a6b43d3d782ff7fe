"""Main Textual application for the ditherpunk TUI."""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    Footer,
    Header,
    Input,
    Label,
    Static,
)
from textual.worker import get_current_worker

from ditherpunk.core.processor import ProcessedImage, Settings, process_image
from ditherpunk.core.reader import SourceImage, open_image
from ditherpunk.core.writer import default_output_path, save_output
from ditherpunk.tui.controls import ControlPanel
from ditherpunk.tui.preview import DitherPreview
from ditherpunk.utils.terminal import fit_preview


class SaveScreen(ModalScreen[str | None]):
    """Modal screen for saving output."""

    BINDINGS = [Binding("escape", "cancel", "Cancel", priority=True)]

    def action_cancel(self) -> None:
        self.dismiss(None)

    DEFAULT_CSS = """
    SaveScreen {
        align: center middle;
    }

    SaveScreen #save-dialog {
        width: 60;
        height: 12;
        background: $surface;
        border: thick $accent;
        padding: 1 2;
    }

    SaveScreen #save-title {
        text-style: bold;
        margin-bottom: 1;
    }

    SaveScreen Input {
        margin: 1 0;
    }

    SaveScreen .button-row {
        margin-top: 1;
        align: center middle;
        height: 3;
    }

    SaveScreen Button {
        margin: 0 1;
    }
    """

    def __init__(self, default_path: str = "", **kwargs) -> None:
        super().__init__(**kwargs)
        self._default_path = default_path

    def compose(self) -> ComposeResult:
        with Vertical(id="save-dialog"):
            yield Static("Save Output", id="save-title")
            yield Label("Output file path:")
            yield Input(
                value=self._default_path,
                placeholder="output.png",
                id="save-path",
            )
            with Horizontal(classes="button-row"):
                yield Button("Save", variant="primary", id="btn-save")
                yield Button("Cancel", variant="default", id="btn-cancel")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-save":
            path_input = self.query_one("#save-path", Input)
            self.dismiss(path_input.value or None)
        elif event.button.id == "btn-cancel":
            self.dismiss(None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value or None)


class OpenFileScreen(ModalScreen[str | None]):
    """Simple modal for entering a file path."""

    BINDINGS = [Binding("escape", "cancel", "Cancel", priority=True)]

    def action_cancel(self) -> None:
        self.dismiss(None)

    DEFAULT_CSS = """
    OpenFileScreen {
        align: center middle;
    }

    OpenFileScreen #open-dialog {
        width: 60;
        height: 10;
        background: $surface;
        border: thick $accent;
        padding: 1 2;
    }

    OpenFileScreen #open-title {
        text-style: bold;
        margin-bottom: 1;
    }

    OpenFileScreen .button-row {
        margin-top: 1;
        align: center middle;
        height: 3;
    }

    OpenFileScreen Button {
        margin: 0 1;
    }
    """

    def compose(self) -> ComposeResult:
        with Vertical(id="open-dialog"):
            yield Static("Open Image", id="open-title")
            yield Input(placeholder="Path to an image file...", id="file-input")
            with Horizontal(classes="button-row"):
                yield Button("Open", variant="primary", id="btn-open")
                yield Button("Cancel", variant="default", id="btn-cancel")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-open":
            inp = self.query_one("#file-input", Input)
            self.dismiss(inp.value if inp.value else None)
        elif event.button.id == "btn-cancel":
            self.dismiss(None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value if event.value else None)


class DitherpunkApp(App):
    """Main TUI application."""

    TITLE = "ditherpunk"
    CSS = """
    #main-area {
        height: 1fr;
        width: 1fr;
    }

    #preview-container {
        width: 1fr;
        height: 1fr;
    }

    #status-bar {
        height: 1;
        background: $panel;
        padding: 0 1;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", priority=True),
        Binding("s", "save", "Save", priority=True),
        Binding("o", "open_file", "Open", priority=True),
        Binding("r", "rerender", "Re-render", priority=True),
        Binding("tab", "toggle_panel", "Toggle Panel"),
    ]

    def __init__(self, input_path: str | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._input_path = input_path
        self._source: SourceImage | None = None
        self._preview_pixels: np.ndarray | None = None
        self._settings = Settings()
        self._panel_visible = True

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-area"):
            with Vertical(id="preview-container"):
                yield DitherPreview()
            yield ControlPanel(self._settings, id="control-panel")
        yield Static("Ready", id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        if self._input_path:
            self._load_file(self._input_path)

    def _load_file(self, path: str) -> None:
        """Load an image and build the scaled-down preview buffer."""
        try:
            source = open_image(path)
        except (FileNotFoundError, ValueError) as e:
            self.workers.cancel_group(self, "preview")
            self._source = None
            self._preview_pixels = None
            self.query_one(DitherPreview).clear()
            self._update_status(f"Error: {e}")
            return

        self._source = source
        self.title = f"ditherpunk - {source.path.name}"

        preview = self.query_one(DitherPreview)
        pw = preview.size.width or 80
        ph = preview.size.height or 24
        px_w, px_h = fit_preview(
            source.width, source.height, max_cols=pw - 2, max_rows=ph - 2
        )
        scaled = source.to_pil().resize((px_w, px_h), Image.Resampling.LANCZOS)
        self._preview_pixels = np.array(scaled, dtype=np.uint8)

        self._update_status(
            f"Loaded {source.path.name} ({source.width}x{source.height})"
        )
        self._render_preview()

    def _update_status(self, text: str) -> None:
        try:
            status = self.query_one("#status-bar", Static)
            status.update(text)
        except NoMatches:
            pass

    @work(thread=True, exclusive=True, group="preview")
    def _render_preview(self) -> None:
        """Dither the preview buffer in a background thread."""
        if self._preview_pixels is None:
            return

        worker = get_current_worker()
        try:
            processed = process_image(self._preview_pixels, self._settings)
        except ValueError as e:
            if not worker.is_cancelled:
                self.call_from_thread(self._update_status, f"Error: {e}")
            return

        if not worker.is_cancelled:
            self.call_from_thread(self._display_image, processed)

    def _display_image(self, image: ProcessedImage) -> None:
        """Display a processed image (called on main thread)."""
        self.query_one(DitherPreview).update_image(image)

    # --- Actions ---

    def action_rerender(self) -> None:
        self._render_preview()

    def action_save(self) -> None:
        preview = self.query_one(DitherPreview)
        if self._source is None or preview.current_image is None:
            self._update_status("No image loaded")
            return
        default_path = default_output_path(self._source.path, self._settings.mode)
        self.push_screen(SaveScreen(str(default_path)), self._on_save_result)

    def _on_save_result(self, path: str | None) -> None:
        if path is None:
            return
        self._do_save(path)

    @work(thread=True, exclusive=True, group="save")
    def _do_save(self, output_path: str) -> None:
        """Process the full-resolution image and save it."""
        if self._source is None:
            return

        worker = get_current_worker()
        out = Path(output_path)
        self.call_from_thread(self._update_status, "Saving...")

        try:
            processed = process_image(self._source.pixels, self._settings)
            if worker.is_cancelled:
                return
            save_output(processed, out)
        except (ValueError, OSError) as e:
            if not worker.is_cancelled:
                self.call_from_thread(self._update_status, f"Save error: {e}")
            return

        if not worker.is_cancelled:
            self.call_from_thread(self._update_status, f"Saved to {out}")

    def action_open_file(self) -> None:
        self.push_screen(OpenFileScreen(), self._on_file_selected)

    def _on_file_selected(self, path: str | None) -> None:
        if path:
            self._load_file(path)

    def action_toggle_panel(self) -> None:
        panel = self.query_one("#control-panel", ControlPanel)
        self._panel_visible = not self._panel_visible
        panel.display = self._panel_visible

    # --- Message handlers ---

    def on_dither_preview_image_updated(
        self, event: DitherPreview.ImageUpdated
    ) -> None:
        image = event.image
        self._update_status(
            f"{image.mode.value}: {image.width}x{image.height} preview"
        )

    def on_control_panel_settings_changed(
        self, event: ControlPanel.SettingsChanged
    ) -> None:
        self._settings = event.settings
        self._render_preview()


def run_app(input_path: str | None = None) -> None:
    """Launch the TUI application."""
    app = DitherpunkApp(input_path=input_path)
    app.run()
