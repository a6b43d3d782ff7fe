"""Tests for the color catalog, distance metric and quantizer."""

import math
import tracemalloc

import numpy as np
import pytest

from ditherpunk.core.palette import (
    BLACK,
    BLUE,
    CYAN,
    DIFFUSION_PALETTE,
    GREEN,
    MAGENTA,
    PALETTE,
    RED,
    WHITE,
    YELLOW,
    Color,
    color_distance,
    nearest_color,
    quantize_array,
    select_colors,
)


class TestCatalog:
    def test_palette_order(self):
        assert PALETTE == (WHITE, BLACK, RED, GREEN, BLUE, YELLOW, MAGENTA, CYAN)

    def test_diffusion_palette_order(self):
        assert DIFFUSION_PALETTE == (BLACK, WHITE, RED, BLUE, GREEN)

    def test_colors_are_immutable(self):
        with pytest.raises(AttributeError):
            WHITE.r = 0

    def test_select_first_n(self):
        assert select_colors(PALETTE, 3) == (WHITE, BLACK, RED)

    def test_select_whole_palette(self):
        assert select_colors(PALETTE, 8) == PALETTE

    def test_select_zero_raises(self):
        with pytest.raises(ValueError, match="at least one"):
            select_colors(PALETTE, 0)

    def test_select_too_many_raises(self):
        with pytest.raises(ValueError, match="only has 5"):
            select_colors(DIFFUSION_PALETTE, 6)


class TestColorDistance:
    def test_zero_for_same_color(self):
        for color in PALETTE:
            assert color_distance(color, color) == 0.0

    def test_symmetric(self):
        a = Color(12, 200, 45)
        b = Color(250, 3, 99)
        assert color_distance(a, b) == color_distance(b, a)

    def test_known_value(self):
        assert color_distance((0, 0, 0), (3, 4, 0)) == pytest.approx(5.0)

    def test_black_to_white(self):
        assert color_distance(BLACK, WHITE) == pytest.approx(255 * math.sqrt(3))

    def test_no_uint8_wraparound(self):
        a = np.array([0, 0, 0], dtype=np.uint8)
        b = np.array([255, 0, 0], dtype=np.uint8)
        assert color_distance(a, b) == pytest.approx(255.0)


class TestNearestColor:
    def test_single_candidate_always_wins(self):
        for color in [(0, 0, 0), (255, 255, 255), (17, 99, 230)]:
            assert nearest_color(color, [RED]) == RED

    def test_picks_closest(self):
        assert nearest_color((240, 10, 20), PALETTE) == RED
        assert nearest_color((10, 10, 200), PALETTE) == BLUE

    def test_mid_gray_goes_white(self):
        # 128 is one step closer to 255 than to 0
        assert nearest_color((128, 128, 128), [BLACK, WHITE]) == WHITE

    def test_tie_goes_to_first_candidate(self):
        # Black is equidistant from pure red and pure green
        assert nearest_color(BLACK, [RED, GREEN]) == RED
        assert nearest_color(BLACK, [GREEN, RED]) == GREEN

    def test_empty_candidates_raises(self):
        with pytest.raises(ValueError, match="empty palette"):
            nearest_color((1, 2, 3), [])


class TestQuantizeArray:
    def test_matches_nearest_color(self):
        rng = np.random.default_rng(7)
        pixels = rng.integers(0, 256, size=(6, 9, 3), dtype=np.uint8)
        result = quantize_array(pixels, PALETTE)
        for y in range(6):
            for x in range(9):
                expected = nearest_color(pixels[y, x], PALETTE)
                assert tuple(result[y, x]) == expected

    def test_tie_goes_to_first_candidate(self):
        pixels = np.zeros((2, 2, 3), dtype=np.uint8)
        result = quantize_array(pixels, [GREEN, RED])
        assert (result == np.array(GREEN, dtype=np.uint8)).all()

    def test_equidistant_pixel_keeps_first_candidate(self):
        # (128, 128, 0) is exactly as far from red as from green
        pixels = np.full((3, 4, 3), (128, 128, 0), dtype=np.uint8)
        red_first = quantize_array(pixels, [RED, GREEN])
        green_first = quantize_array(pixels, [GREEN, RED])
        assert (red_first == np.array(RED, dtype=np.uint8)).all()
        assert (green_first == np.array(GREEN, dtype=np.uint8)).all()

    def test_later_candidate_wins_only_when_closer(self):
        pixels = np.array([[(0, 0, 0), (250, 250, 250), (128, 128, 0)]], dtype=np.uint8)
        result = quantize_array(pixels, [BLACK, RED, GREEN, WHITE])
        assert [tuple(p) for p in result[0]] == [BLACK, WHITE, RED]

    def test_memory_stays_proportional_to_input(self):
        pixels = np.zeros((600, 800, 3), dtype=np.uint8)
        tracemalloc.start()
        try:
            quantize_array(pixels, PALETTE)
            _, peak = tracemalloc.get_traced_memory()
        finally:
            tracemalloc.stop()
        assert peak < 20 * pixels.nbytes

    def test_preserves_shape_and_dtype(self):
        pixels = np.zeros((4, 5, 3), dtype=np.uint8)
        result = quantize_array(pixels, [WHITE])
        assert result.shape == (4, 5, 3)
        assert result.dtype == np.uint8

    def test_empty_candidates_raises(self):
        with pytest.raises(ValueError):
            quantize_array(np.zeros((1, 1, 3), dtype=np.uint8), [])
