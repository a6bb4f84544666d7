"""
Tests the tonal and color filters
"""

import numpy as np
import pytest

from pixelchain import Color, Colors, Image, host
from pixelchain.filters import (
    Brightness,
    Colorize,
    Contrast,
    DominantColor,
    Greyscale,
    MonochromeMask,
    Negate,
    Opacity,
    ReplaceColors,
    SepiaFast,
    SepiaSlow,
)


class TestSepia:
    """Both sepia variants."""

    def test_slow_matrix(self, make_image):
        result = SepiaSlow().apply(make_image(2, 2, (100, 150, 200), gd_alpha=30))
        assert tuple(result.pixels[1, 1]) == (192, 171, 187, 30)

    def test_slow_clamps(self, make_image):
        result = SepiaSlow().apply(make_image(1, 1, (255, 255, 255)))
        assert tuple(result.pixels[0, 0, :3]) == (255, 255, 239)

    def test_fast_tints_warm(self, make_image):
        result = SepiaFast().apply(make_image(3, 3, (90, 140, 200), gd_alpha=12))
        r, g, b, a = (int(v) for v in result.pixels[1, 1])
        assert r > g > b
        assert a == 12

    def test_fast_equals_host_sequence(self, noise_image):
        expected = host.colorize(host.grayscale(host.contrast(noise_image, -15)), 35, 10, -17)
        assert SepiaFast().apply(noise_image) == expected

    def test_slow_preserves_varying_alpha(self, noise_image):
        pixels = noise_image.pixels.copy()
        pixels[..., 3] = (np.arange(24 * 24).reshape(24, 24) * 127) // (24 * 24 - 1)
        image = Image(pixels)
        result = SepiaSlow().apply(image)
        assert np.array_equal(result.gd_alpha, image.gd_alpha)
        assert result.gd_alpha.max() == 127

    def test_fast_approximates_slow(self, noise_image):
        fast = SepiaFast().apply(noise_image).pixels.astype(int)
        slow = SepiaSlow().apply(noise_image).pixels.astype(int)
        assert np.abs(fast - slow)[..., :2].max() <= 48
        assert np.array_equal(fast[..., 3], slow[..., 3])


class TestMonochromeMask:
    """Two color mask reduction."""

    def test_dark_becomes_color(self):
        pixels = np.zeros((4, 8, 4), dtype=np.uint8)
        pixels[:, 4:, :3] = 250
        result = MonochromeMask(color='#00ff00').apply(Image(pixels))
        assert result.get_pixel(0, 0) == Colors.GREEN
        assert result.get_pixel(7, 3) == Colors.MAGENTA
        assert not result.is_transparent()

    def test_requires_color(self, solid_red_image, context):
        result = MonochromeMask().run(solid_red_image, context)
        assert result.skipped
        assert result.image == solid_red_image


class TestReplaceColors:
    """Hue tolerance color replacement."""

    def test_exact_hue(self):
        pixels = np.zeros((1, 3, 4), dtype=np.uint8)
        pixels[0, 0] = (255, 0, 0, 0)
        pixels[0, 1] = (0, 255, 0, 0)
        pixels[0, 2] = (128, 0, 0, 40)
        result = ReplaceColors(from_color=Colors.RED, to_color=Colors.BLUE).apply(Image(pixels))
        assert tuple(result.pixels[0, 0]) == (0, 0, 255, 0)
        assert tuple(result.pixels[0, 1]) == (0, 255, 0, 0)
        red, green, blue, alpha = (int(v) for v in result.pixels[0, 2])
        assert red == 0 and green == 0 and blue > 100
        assert alpha == 40

    def test_tolerance(self, make_image):
        orange = make_image(1, 1, (255, 64, 0))
        assert ReplaceColors(tolerance=0).apply(orange) == orange
        replaced = ReplaceColors(tolerance=10).apply(orange)
        assert tuple(replaced.pixels[0, 0]) == (0, 0, 255, 0)

    def test_tolerance_is_clamped(self):
        assert ReplaceColors(tolerance=500).hue_tolerance == 180
        assert ReplaceColors(tolerance=-3).hue_tolerance == 0

    def test_transparent_pixels_become_near_white(self, make_image):
        result = ReplaceColors(from_color=Colors.GREEN).apply(make_image(2, 1, (0, 255, 0), gd_alpha=127))
        assert tuple(result.pixels[0, 0]) == (254, 254, 254, 127)


class TestColorWrappers:
    """Filters delegating to a single host operation."""

    def test_greyscale_and_negate(self, solid_red_image):
        assert Greyscale().apply(solid_red_image) == host.grayscale(solid_red_image)
        assert Negate().apply(solid_red_image).get_pixel(0, 0) == Colors.CYAN

    def test_brightness_and_contrast(self, gradient_image):
        assert Brightness(level=30).apply(gradient_image) == host.brightness(gradient_image, 30)
        assert Contrast(level=-40).apply(gradient_image) == host.contrast(gradient_image, -40)

    def test_rejected_parameters_skip(self, gradient_image, context, diagnostics):
        result = Brightness(level=400).run(gradient_image, context)
        assert result.skipped
        assert result.image is gradient_image
        assert len(diagnostics) == 1

    def test_colorize(self, make_image):
        result = Colorize(red=10, green=-10, alpha=27).apply(make_image(1, 1, (100, 100, 100), gd_alpha=100))
        assert tuple(result.pixels[0, 0]) == (110, 90, 100, 127)


class TestOpacity:
    """Opacity scaling."""

    def test_half_opacity(self, solid_red_image):
        result = Opacity(opacity=50).apply(solid_red_image)
        assert result.get_pixel(0, 0).same_rgb(Colors.RED)
        assert int(result.pixels[0, 0, 3]) == 63

    def test_zero_opacity(self, solid_red_image):
        assert Opacity(opacity=0).apply(solid_red_image).get_pixel(5, 5).is_transparent

    def test_full_opacity_is_identity(self, solid_red_image):
        assert Opacity(opacity=100).apply(solid_red_image) == solid_red_image

    @pytest.mark.parametrize("opacity", [-1, 101])
    def test_out_of_range(self, solid_red_image, opacity):
        assert Opacity(opacity=opacity).run(solid_red_image).skipped


class TestDominantColor:
    """Dominant color fills."""

    def test_most_frequent_color_wins(self, make_image):
        image = make_image(8, 8, (255, 0, 0))
        image.pixels[6:] = (0, 0, 255, 0)
        result = DominantColor(quality=1).apply(image)
        assert result.size == image.size
        assert np.all(result.pixels == (255, 0, 0, 0))

    def test_white_and_transparent_pixels_are_ignored(self, make_image):
        image = make_image(8, 8, (255, 255, 255))
        image.pixels[:4, :4] = (0, 0, 0, 127)
        image.pixels[6:, 6:] = (0, 128, 0, 0)
        result = DominantColor(quality=1).apply(image)
        assert result.get_pixel(0, 0) == Color(0, 128, 0)

    def test_nothing_to_sample_skips(self, make_image, context, diagnostics):
        image = make_image(4, 4, (0, 0, 0), gd_alpha=127)
        result = DominantColor().run(image, context)
        assert result.skipped
        assert len(diagnostics) == 1
        assert DominantColor(quality=0).run(make_image(2, 2, (1, 2, 3))).skipped
