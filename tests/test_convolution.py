"""
Tests the sharpening, blur, edge and pixel effect filters
"""

import numpy as np
import pytest

from pixelchain import Box, Colors, Image, host
from pixelchain.filters import (
    AddNoise,
    Blur,
    Dot,
    EdgeDetect,
    Emboss,
    HostFilter,
    Lqip,
    MeanRemoval,
    Pixelate,
    Scatter,
    SelectiveBlur,
    SharpenUniversal,
    Smooth,
    Sobel,
    UnsharpMask,
)


@pytest.fixture
def step_image() -> Image:
    """An opaque 8x4 image, columns 0-3 at 100 and 4-7 at 150."""
    pixels = np.zeros((4, 8, 4), dtype=np.uint8)
    pixels[:, :4, :3] = 100
    pixels[:, 4:, :3] = 150
    return Image(pixels)


class TestUnsharpMask:
    """Sharpening via the blurred difference."""

    def test_calibration(self):
        assert UnsharpMask().calibrated == (pytest.approx(1.28), 1, 3)
        assert UnsharpMask(amount=900, radius=100, threshold=999).calibrated == (pytest.approx(8.0), 100, 255)

    def test_zero_radius_is_identity(self, noise_image):
        assert UnsharpMask(radius=0).apply(noise_image) == noise_image

    def test_flat_image_unchanged(self, make_image):
        image = make_image(6, 6, (80, 90, 100))
        assert UnsharpMask(threshold=0).apply(image) == image

    def test_edges_gain_contrast(self, step_image):
        result = UnsharpMask(amount=80, radius=0.5, threshold=3).apply(step_image)
        assert int(result.pixels[1, 3, 0]) == 85
        assert int(result.pixels[1, 4, 0]) > 150
        assert int(result.pixels[1, 0, 0]) == 100
        assert np.array_equal(result.gd_alpha, step_image.gd_alpha)

    def test_threshold_protects_small_differences(self, step_image):
        assert UnsharpMask(threshold=255).apply(step_image) == step_image

    def test_without_threshold_every_pixel_is_sharpened(self, step_image):
        result = UnsharpMask(threshold=0).apply(step_image)
        assert int(result.pixels[1, 3, 0]) < 100


class TestBlur:
    """Repeated gaussian blur."""

    def test_amount(self, step_image):
        once = Blur(amount=1).apply(step_image)
        assert once == host.gaussian_blur(step_image)
        assert Blur(amount=3).apply(step_image) == host.gaussian_blur(host.gaussian_blur(once))

    def test_zero_amount_is_identity(self, step_image):
        assert Blur(amount=0).apply(step_image) == step_image

    def test_negative_amount_skips(self, step_image, context, diagnostics):
        assert Blur(amount=-1).run(step_image, context).skipped
        assert len(diagnostics) == 1


class TestSoftening:
    """Smooth, selective blur, scatter and pixelate wrappers."""

    def test_smooth(self, step_image):
        assert Smooth(level=5).apply(step_image) == host.smooth(step_image, 5)
        assert Smooth(level=-8).run(step_image).skipped

    def test_selective_blur(self, step_image):
        result = SelectiveBlur().apply(step_image)
        assert result.size == step_image.size
        assert int(result.pixels[1, 0, 0]) == 100

    def test_scatter(self, noise_image):
        assert Scatter(sub=-2, plus=2, seed=3).apply(noise_image) == \
            Scatter(sub=-2, plus=2, seed=3).apply(noise_image)
        assert Scatter().apply(noise_image) == noise_image
        assert Scatter(sub=5, plus=1).run(noise_image).skipped

    def test_pixelate(self, noise_image):
        assert Pixelate(block_size=3, advanced=True).apply(noise_image) == \
            host.pixelate(noise_image, 3, True)
        assert Pixelate(block_size=0).run(noise_image).skipped


class TestKernelEffects:
    """Edge detect, emboss and mean removal."""

    @pytest.mark.parametrize("effect, expected", [
        (EdgeDetect(), 127),
        (Emboss(), 127),
        (MeanRemoval(), 60),
    ])
    def test_flat_image(self, make_image, effect, expected):
        result = effect.apply(make_image(4, 4, (60, 60, 60)))
        assert np.all(result.pixels[..., :3] == expected)


class TestHostFilter:
    """Named host operations."""

    def test_named_operation(self, step_image):
        f = HostFilter('colorize', {'red': 20, 'green': 0, 'blue': -10})
        assert f.apply(step_image) == host.colorize(step_image, 20, 0, -10)

    def test_unknown_operation_skips(self, step_image):
        result = HostFilter('sharpen_all').run(step_image)
        assert result.skipped
        assert result.image is step_image


class TestSharpenUniversal:
    """Single kernel sharpening."""

    def test_kernel(self):
        assert SharpenUniversal(amount=100).kernel() == ((-1.0, -2.5, -1.0), (-2.5, 15.0, -2.5), (-1.0, -2.5, -1.0))
        assert SharpenUniversal(amount=4).kernel()[0][0] == 0.0
        assert SharpenUniversal(amount=900).kernel() == SharpenUniversal(amount=500).kernel()

    def test_zero_amount_is_identity(self, noise_image):
        assert SharpenUniversal().apply(noise_image) == noise_image

    def test_edges_gain_contrast(self, step_image):
        result = SharpenUniversal(amount=100).apply(step_image)
        assert result.pixels[1, 3, 0] < 100
        assert result.pixels[1, 4, 0] > 150


class TestSobel:
    """Thresholded edge detection."""

    def test_step_edge(self, step_image):
        result = Sobel().apply(step_image)
        assert np.all(result.pixels[:, 3:5, :3] == 0)
        assert np.all(result.pixels[:, :3, :3] == 255)
        assert np.all(result.pixels[:, 5:, :3] == 255)
        assert np.all(result.gd_alpha == step_image.gd_alpha)

    def test_threshold(self, step_image):
        assert np.all(Sobel(threshold=250).apply(step_image).pixels[..., :3] == 255)
        assert Sobel(threshold=0).apply(step_image) == Sobel().apply(step_image)

    def test_magnitude_of_flat_image(self, make_image):
        assert np.all(Sobel.magnitude(make_image(5, 5, (40, 80, 120))) == 0)


class TestPlaceholders:
    """Low quality placeholders."""

    def test_lqip(self, noise_image):
        expected = Blur(amount=12).apply(Pixelate(block_size=6).apply(noise_image))
        assert Lqip().apply(noise_image) == expected


class TestDot:
    """Halftone dots."""

    def test_dark_cells_get_dots(self, make_image):
        result = Dot().apply(make_image(12, 12, (0, 0, 0)))
        assert result.size == Box(12, 12)
        for x, y in [(3, 3), (9, 3), (3, 9), (9, 9)]:
            assert result.get_pixel(x, y) == Colors.BLACK

    def test_white_cells_stay_empty(self, make_image):
        result = Dot().apply(make_image(12, 12, (255, 255, 255)))
        assert not np.any(result.opaque_mask())

    def test_squares_in_fixed_color(self, make_image):
        f = Dot(color='#ff0000', shape='square')
        assert f.dots(make_image(12, 12, (0, 0, 0)))[0] == (3, 3, 2, Colors.RED)
        result = f.apply(make_image(12, 12, (0, 0, 0)))
        assert result.get_pixel(3, 3) == Colors.RED
        assert result.get_pixel(1, 5) == Colors.RED
        assert result.get_pixel(0, 0).is_transparent

    def test_multiplier_grows_dots(self, make_image):
        image = make_image(12, 12, (128, 128, 128))
        small = Dot(multiplier=0.5).dots(image)[0][2]
        large = Dot(multiplier=2).dots(image)[0][2]
        assert small < large

    def test_invalid_block_size_skips(self, noise_image):
        assert Dot(block_size=0).run(noise_image).skipped


class TestAddNoise:
    """Random brightness noise."""

    def test_reproducible(self, noise_image):
        assert AddNoise(seed=3).apply(noise_image) == AddNoise(seed=3).apply(noise_image)
        assert AddNoise(seed=3).apply(noise_image) != noise_image

    def test_channels_move_together(self, make_image):
        image = make_image(20, 20, (128, 128, 128), gd_alpha=20)
        result = AddNoise(level=30, seed=5).apply(image)
        difference = result.pixels.astype(int) - image.pixels.astype(int)
        assert np.abs(difference).max() <= 30
        assert np.all(difference[..., 0] == difference[..., 1])
        assert np.all(difference[..., 1] == difference[..., 2])
        assert np.all(difference[..., 3] == 0)
        changed = np.count_nonzero(difference[..., 0])
        assert 100 < changed < 300

    def test_zero_level_is_identity(self, noise_image):
        assert AddNoise(level=0).apply(noise_image) == noise_image

    def test_invalid_level_skips(self, noise_image):
        assert AddNoise(level=300).run(noise_image).skipped
