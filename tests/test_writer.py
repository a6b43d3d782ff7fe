"""Tests for the output writer."""

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from ditherpunk.core.processor import DitherMode, Settings, process_image
from ditherpunk.core.writer import (
    default_output_path,
    output_format,
    save_image,
    save_output,
)


def _make_processed_image(mode=DitherMode.THRESHOLD):
    pixels = np.random.default_rng(0).integers(0, 256, (6, 8, 3), dtype=np.uint8)
    return process_image(pixels, Settings(mode=mode, n_colors=3))


class TestOutputFormat:
    def test_png(self):
        assert output_format(Path("out.png")) == "PNG"

    def test_case_insensitive(self):
        assert output_format(Path("OUT.JPG")) == "JPEG"

    def test_unsupported(self):
        with pytest.raises(ValueError, match="Unsupported"):
            output_format(Path("out.txt"))

    def test_missing_extension(self):
        with pytest.raises(ValueError, match="Unsupported"):
            output_format(Path("out"))


class TestDefaultOutputPath:
    def test_uses_stem_and_mode(self):
        path = default_output_path(Path("/photos/cat.jpg"), DitherMode.ORDERED)
        assert path == Path("/photos/cat_bayer.png")

    def test_every_mode_has_a_name(self):
        names = {default_output_path(Path("a.png"), m).name for m in DitherMode}
        assert len(names) == len(DitherMode)


class TestSaveImage:
    def test_save_rgb(self, tmp_path):
        output = tmp_path / "out.png"
        processed = _make_processed_image()
        save_output(processed, output)

        assert output.exists()
        img = Image.open(str(output))
        assert img.format == "PNG"
        assert img.mode == "RGB"
        assert np.array_equal(np.array(img), processed.pixels)

    def test_save_grayscale(self, tmp_path):
        output = tmp_path / "gray.png"
        save_output(_make_processed_image(DitherMode.DIFFUSION), output)

        img = Image.open(str(output))
        assert img.mode == "L"
        assert img.size == (8, 6)

    def test_overwrites_existing(self, tmp_path):
        output = tmp_path / "out.png"
        output.write_bytes(b"old")
        save_image(np.zeros((2, 2, 3), dtype=np.uint8), output)
        assert Image.open(str(output)).size == (2, 2)

    def test_no_temp_files_left(self, tmp_path):
        save_image(np.zeros((2, 2, 3), dtype=np.uint8), tmp_path / "out.png")
        assert [p.name for p in tmp_path.iterdir()] == ["out.png"]

    def test_unsupported_format_writes_nothing(self, tmp_path):
        with pytest.raises(ValueError):
            save_image(np.zeros((2, 2, 3), dtype=np.uint8), tmp_path / "out.txt")
        assert list(tmp_path.iterdir()) == []

    def test_failed_encode_leaves_no_file(self, tmp_path, monkeypatch):
        def broken_save(self, fp, format=None, **params):
            fp.write(b"partial")
            raise OSError("disk full")

        monkeypatch.setattr(Image.Image, "save", broken_save)
        output = tmp_path / "out.png"
        with pytest.raises(OSError, match="disk full"):
            save_image(np.zeros((2, 2, 3), dtype=np.uint8), output)
        assert list(tmp_path.iterdir()) == []

    def test_missing_directory(self, tmp_path):
        with pytest.raises(OSError):
            save_image(
                np.zeros((2, 2, 3), dtype=np.uint8), tmp_path / "nope" / "out.png"
            )
