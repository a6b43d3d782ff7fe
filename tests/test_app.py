"""Tests for the interactive preview app."""

import asyncio

import numpy as np
import pytest
from PIL import Image

from ditherpunk.app import DitherpunkApp
from ditherpunk.core.processor import DitherMode
from ditherpunk.tui.preview import DitherPreview


@pytest.fixture
def sample_image(tmp_path):
    ramp = np.linspace(0, 255, 20, dtype=np.uint8)
    pixels = np.stack([np.tile(ramp, (10, 1))] * 3, axis=-1)
    path = tmp_path / "sample.png"
    Image.fromarray(pixels).save(str(path))
    return path


async def _settle(app, pilot):
    await app.workers.wait_for_complete()
    await pilot.pause()


class TestDitherpunkApp:
    def test_loaded_image_is_previewed(self, sample_image):
        async def scenario():
            app = DitherpunkApp(input_path=str(sample_image))
            async with app.run_test() as pilot:
                await _settle(app, pilot)
                shown = app.query_one(DitherPreview).current_image
                assert shown is not None
                assert shown.mode == DitherMode.THRESHOLD
                assert set(np.unique(shown.pixels).tolist()) <= {0, 255}

        asyncio.run(scenario())

    def test_failed_load_clears_preview(self, sample_image, tmp_path):
        async def scenario():
            app = DitherpunkApp(input_path=str(sample_image))
            async with app.run_test() as pilot:
                await _settle(app, pilot)
                app._load_file(str(tmp_path / "missing.png"))
                await _settle(app, pilot)

                assert app.query_one(DitherPreview).current_image is None
                assert app._source is None

        asyncio.run(scenario())

    def test_save_without_image_opens_nothing(self):
        async def scenario():
            app = DitherpunkApp()
            async with app.run_test() as pilot:
                app.action_save()
                await pilot.pause()
                assert len(app.screen_stack) == 1

        asyncio.run(scenario())
