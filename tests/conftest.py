"""
Pytest fixtures for PixelChain tests
"""

import numpy as np
import pytest

from pixelchain import Image, CollectingDiagnostics
from pixelchain.filters import FilterContext


def solid(width: int, height: int, rgb: tuple[int, int, int], gd_alpha: int = 0) -> Image:
    """Creates a single colored image with the given raster alpha."""
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[...] = (*rgb, gd_alpha)
    return Image(pixels)


@pytest.fixture
def solid_red_image() -> Image:
    """An opaque red 16x16 image."""
    return solid(16, 16, (255, 0, 0))


@pytest.fixture
def gradient_image() -> Image:
    """An opaque 64x32 image with a horizontal black to white gradient."""
    pixels = np.zeros((32, 64, 4), dtype=np.uint8)
    for x in range(64):
        pixels[:, x, :3] = x * 255 // 63
    return Image(pixels)


@pytest.fixture
def noise_image() -> Image:
    """An opaque 24x24 image of reproducible random colors."""
    rng = np.random.default_rng(42)
    pixels = np.zeros((24, 24, 4), dtype=np.uint8)
    pixels[..., :3] = rng.integers(0, 256, size=(24, 24, 3))
    return Image(pixels)


@pytest.fixture
def centered_square_image() -> Image:
    """A transparent 10x10 image with an opaque red 4x4 square at (3, 3)."""
    image = solid(10, 10, (0, 0, 0), gd_alpha=127)
    image.pixels[3:7, 3:7] = (255, 0, 0, 0)
    return image


@pytest.fixture
def diagnostics() -> CollectingDiagnostics:
    return CollectingDiagnostics()


@pytest.fixture
def context(diagnostics) -> FilterContext:
    """A filter context collecting all diagnostics in memory."""
    return FilterContext(diagnostics=diagnostics)


@pytest.fixture
def make_image():
    """Factory for single colored images, see :func:`solid`."""
    return solid
