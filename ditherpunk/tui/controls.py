"""Settings control panel for the TUI."""

from __future__ import annotations

from dataclasses import replace

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.message import Message
from textual.widget import Widget
from textual.widgets import (
    Button,
    Input,
    Label,
    Select,
    Static,
)

from ditherpunk.core.kernels import KernelName
from ditherpunk.core.palette import DIFFUSION_PALETTE, PALETTE
from ditherpunk.core.processor import MAX_BAYER_ORDER, DitherMode, Settings


def max_colors(mode: DitherMode) -> int:
    """Largest color count the mode's palette allows."""
    if mode == DitherMode.PALETTE_DIFFUSION:
        return len(DIFFUSION_PALETTE)
    return len(PALETTE)


class ControlPanel(Widget):
    """Settings panel with controls for dithering parameters."""

    DEFAULT_CSS = """
    ControlPanel {
        width: 32;
        height: 1fr;
        background: $panel;
        padding: 1;
        border-left: solid $accent;
    }

    ControlPanel Label {
        margin-top: 1;
        color: $text-muted;
    }

    ControlPanel Select {
        width: 100%;
        margin-bottom: 0;
    }

    ControlPanel #panel-title {
        text-style: bold;
        color: $text;
        margin-bottom: 1;
    }

    ControlPanel .num-row {
        height: 3;
        margin-top: 1;
    }

    ControlPanel .num-row Label {
        width: 12;
        margin-top: 0;
        padding-top: 1;
    }

    ControlPanel .num-row Button {
        min-width: 3;
        margin: 0;
    }

    ControlPanel .num-row Input {
        width: 1fr;
        margin: 0;
    }
    """

    class SettingsChanged(Message):
        """Posted when any setting changes."""
        def __init__(self, settings: Settings) -> None:
            super().__init__()
            self.settings = settings

    def __init__(self, settings: Settings | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self._settings = settings or Settings()

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("Settings", id="panel-title")

            yield Label("Mode")
            yield Select(
                [(m.value, m.value) for m in DitherMode],
                value=self._settings.mode.value,
                allow_blank=False,
                id="mode-select",
            )

            yield Label("Kernel")
            yield Select(
                [(k.value, k.value) for k in KernelName],
                value=self._settings.kernel,
                allow_blank=False,
                id="kernel-select",
            )

            with Horizontal(classes="num-row"):
                yield Label("Colors")
                yield Button("-", id="colors-dec")
                yield Input(
                    value=str(self._settings.n_colors),
                    id="colors-input",
                    type="integer",
                )
                yield Button("+", id="colors-inc")

            with Horizontal(classes="num-row"):
                yield Label("Bayer order")
                yield Button("-", id="order-dec")
                yield Input(
                    value=str(self._settings.order),
                    id="order-input",
                    type="integer",
                )
                yield Button("+", id="order-inc")

    @property
    def settings(self) -> Settings:
        return self._settings

    def _update_settings(self, **overrides) -> None:
        """Create new settings with overrides and emit change."""
        settings = replace(self._settings, **overrides)
        # Keep the color count inside the palette of the selected mode
        limit = max_colors(settings.mode)
        if settings.n_colors > limit:
            settings = replace(settings, n_colors=limit)
            self._set_input("#colors-input", limit)
        self._settings = settings
        self.post_message(self.SettingsChanged(self._settings))

    def _set_input(self, selector: str, value: int) -> None:
        try:
            self.query_one(selector, Input).value = str(value)
        except NoMatches:
            pass

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.value is Select.BLANK:
            return
        if event.select.id == "mode-select":
            self._update_settings(mode=DitherMode(event.value))
        elif event.select.id == "kernel-select":
            self._update_settings(kernel=str(event.value))

    def _adjust_colors(self, delta: int) -> None:
        limit = max_colors(self._settings.mode)
        new_val = max(1, min(limit, self._settings.n_colors + delta))
        self._set_input("#colors-input", new_val)
        self._update_settings(n_colors=new_val)

    def _adjust_order(self, delta: int) -> None:
        new_val = max(0, min(MAX_BAYER_ORDER, self._settings.order + delta))
        self._set_input("#order-input", new_val)
        self._update_settings(order=new_val)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        btn = event.button.id
        if btn == "colors-dec":
            self._adjust_colors(-1)
        elif btn == "colors-inc":
            self._adjust_colors(1)
        elif btn == "order-dec":
            self._adjust_order(-1)
        elif btn == "order-inc":
            self._adjust_order(1)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        try:
            val = int(event.value)
        except ValueError:
            return
        if event.input.id == "colors-input":
            limit = max_colors(self._settings.mode)
            self._update_settings(n_colors=max(1, min(limit, val)))
        elif event.input.id == "order-input":
            self._update_settings(order=max(0, min(MAX_BAYER_ORDER, val)))
