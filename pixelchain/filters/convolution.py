# PixelChain Filters - Convolution and Softening
"""
Kernel based sharpening, the blur family, edge detection and pixel effects.

:class:`UnsharpMask`, :class:`Sobel`, :class:`Dot` and :class:`AddNoise` are
implemented here, the other filters are thin wrappers which invoke host
operations (blur invokes one repeatedly). If the host rejects the parameters
the filter is skipped and the image stays unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

import numpy as np

from pixelchain import host
from pixelchain.color import Color, Colors
from pixelchain.errors import UnusableInput
from pixelchain.image import Image
from .base import Filter, FilterContext, register_filter


def _round_half_away(values: np.ndarray) -> np.ndarray:
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


@register_filter
@dataclass(frozen=True)
class UnsharpMask(Filter):
    """Sharpens by adding the difference to a gaussian blurred copy.

    Parameters are calibrated to the usual photo editor ranges:

    - ``amount`` 0 to 500, scaled by 0.016
    - ``radius`` 0 to 50, doubled and rounded. A radius of 0 leaves the
      image unchanged
    - ``threshold`` 0 to 255. Channels which differ from the blurred copy
      by less than the threshold are kept, a threshold of 0 sharpens every
      pixel

    Alpha is never sharpened.
    """

    amount: float = 80
    radius: float = 0.5
    threshold: int = 3

    @property
    def calibrated(self) -> tuple[float, int, int]:
        """The (amount, radius, threshold) actually used"""
        amount = min(self.amount, 500) * 0.016
        radius = abs(int(_round_half_away(np.array(min(50.0, self.radius) * 2))))
        threshold = min(255, int(self.threshold))
        return amount, radius, threshold

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        amount, radius, threshold = self.calibrated
        if radius == 0:
            return image.copy()
        blurred = host.gaussian_blur(image).pixels[..., :3].astype(np.float64)
        original = image.pixels[..., :3].astype(np.float64)
        difference = original - blurred
        if threshold > 0:
            sharpened = np.clip(_round_half_away(amount * difference) + original, 0, 255)
            sharpened = np.where(np.abs(difference) >= threshold, sharpened, original)
        else:
            sharpened = np.clip(amount * difference + original, 0, 255)
        pixels = image.pixels.copy()
        pixels[..., :3] = sharpened.astype(np.uint8)
        return Image(pixels)


@register_filter
@dataclass(frozen=True)
class Blur(Filter):
    """Gaussian blur, applied ``amount`` times."""

    amount: int = 1

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        if self.amount is None or int(self.amount) < 0:
            raise UnusableInput(f'Blur amount must not be negative, got {self.amount}',
                                {'amount': self.amount})
        result = image.copy()
        for _ in range(int(self.amount)):
            result = host.gaussian_blur(result)
        return result


@register_filter
@dataclass(frozen=True)
class Smooth(Filter):
    """Smoothing with a weighted center pixel, lower levels blur stronger."""

    level: float = 0

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        return host.smooth(image, self.level)


@register_filter
@dataclass(frozen=True)
class SelectiveBlur(Filter):
    """Edge preserving blur."""

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        return host.selective_blur(image)


@register_filter
@dataclass(frozen=True)
class Scatter(Filter):
    """Noise effect displacing pixels by random offsets within [sub, plus).

    A ``seed`` makes the result reproducible.
    """

    sub: int = 0
    plus: int = 0
    seed: int | None = None

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        return host.scatter(image, self.sub, self.plus, self.seed)


@register_filter
@dataclass(frozen=True)
class Pixelate(Filter):
    """Pixelates in blocks, ``advanced`` averages each block."""

    block_size: int = 1
    advanced: bool = False

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        return host.pixelate(image, self.block_size, self.advanced)


@register_filter
@dataclass(frozen=True)
class EdgeDetect(Filter):

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        return host.edge_detect(image)


@register_filter
@dataclass(frozen=True)
class Emboss(Filter):

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        return host.emboss(image)


@register_filter
@dataclass(frozen=True)
class MeanRemoval(Filter):

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        return host.mean_removal(image)


@register_filter
@dataclass(frozen=True)
class SharpenUniversal(Filter):
    """Sharpens with a single 3x3 kernel whose weights grow with ``amount`` (0 to 500).

    The edge neighbours are weighted ``-0.025 * amount``, the corners
    ``-0.01 * amount`` from an amount of 10 upwards, and the center balances
    the kernel to a sum of 1.
    """

    amount: float = 0

    def kernel(self) -> tuple[tuple[float, ...], ...]:
        amount = max(0.0, min(500.0, float(self.amount)))
        corner = amount * -0.01 if amount >= 10 else 0.0
        edge = amount * -0.025
        center = -(4 * corner + 4 * edge) + 1
        return ((corner, edge, corner), (edge, center, edge), (corner, edge, corner))

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        return host.convolve(image, self.kernel(), 1)


@register_filter
@dataclass(frozen=True)
class Sobel(Filter):
    """Sobel edge detection drawing black edges on white.

    Pixels whose gradient magnitude in the grey image exceeds ``threshold``
    are edges. A threshold of 0 or below uses the default of 125. Alpha is
    preserved.
    """

    threshold: int = 125

    DEFAULT_THRESHOLD: ClassVar[int] = 125

    @staticmethod
    def magnitude(image: Image) -> np.ndarray:
        """The gradient magnitude of the grey image, edge pixels repeated at the border."""
        gray = host.grayscale(image).pixels[..., 0].astype(np.float64)
        padded = np.pad(gray, 1, mode='edge')
        height, width = gray.shape

        def window(dy: int, dx: int) -> np.ndarray:
            return padded[1 + dy:1 + dy + height, 1 + dx:1 + dx + width]

        gx = (window(-1, 1) + 2 * window(0, 1) + window(1, 1)
              - window(-1, -1) - 2 * window(0, -1) - window(1, -1))
        gy = (window(1, -1) + 2 * window(1, 0) + window(1, 1)
              - window(-1, -1) - 2 * window(-1, 0) - window(-1, 1))
        return np.hypot(gx, gy)

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        threshold = self.threshold if self.threshold > 0 else self.DEFAULT_THRESHOLD
        edges = self.magnitude(image) > threshold
        pixels = image.pixels.copy()
        pixels[..., :3] = np.where(edges, 0, 255).astype(np.uint8)[..., None]
        return Image(pixels)


@register_filter
@dataclass(frozen=True)
class Lqip(Filter):
    """Low quality image placeholder: a pixelated and heavily blurred copy."""

    block_size: int = 6
    blur: int = 12

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        result = Pixelate(block_size=self.block_size).apply(image, context)
        return Blur(amount=self.blur).apply(result, context)


@register_filter
@dataclass(frozen=True)
class Dot(Filter):
    """Halftone effect, the image becomes a grid of dots on a transparent canvas.

    The image is divided into cells of ``block_size`` pixels. Each cell gets a
    dot in its average color, or in ``color`` if given, which grows with the
    darkness of the cell scaled by ``multiplier``. ``shape`` is ``circle`` or
    ``square``.
    """

    block_size: int = 6
    color: Color | None = None
    shape: str = 'circle'
    multiplier: float = 1

    INTENSITY_FACTOR: ClassVar[float] = 1.2
    CIRCLE_FACTOR: ClassVar[float] = 1.2

    def __post_init__(self):
        self._coerce('color', Color.coerce)

    def dots(self, image: Image) -> list[tuple[int, int, int, Color]]:
        """Center, radius and color of every visible dot."""
        block = int(self.block_size)
        columns = max(int(round(image.width / block)), 1)
        rows = max(int(round(image.height * columns / image.width)), 1)
        cells = host.resize(image, columns, rows)
        darkness = (255 - host.grayscale(cells).pixels[..., 0].astype(np.float64)) / 255
        intensity = darkness * self.multiplier * self.INTENSITY_FACTOR
        half = int(round(block / 2))
        square = self.shape.lower().startswith('s')
        dots = []
        for y in range(rows):
            for x in range(columns):
                if square:
                    radius = int(round(half * intensity[y, x] / 2))
                else:
                    radius = int(round(half * intensity[y, x] * self.CIRCLE_FACTOR))
                if radius <= 0:
                    continue
                color = self.color if self.color is not None else Color.from_gd(*cells.pixels[y, x])
                dots.append((x * block + half, y * block + half, radius, color))
        return dots

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        if self.block_size is None or int(self.block_size) < 1:
            raise UnusableInput(f'Dot block size must be positive, got {self.block_size}',
                                {'block_size': self.block_size})
        canvas = Image.create(image.width, image.height, Colors.TRANSPARENT)
        host.fill_dots(canvas, self.dots(image), square=self.shape.lower().startswith('s'))
        return canvas


@register_filter
@dataclass(frozen=True)
class AddNoise(Filter):
    """Film grain: about half of the pixels are lightened or darkened.

    Each affected pixel moves all three color channels by the same random
    step of up to ``level``. A ``seed`` makes the result reproducible.
    """

    level: int = 30
    seed: int | None = None

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        level = int(self.level)
        if not 0 <= level <= 255:
            raise UnusableInput(f'Noise level must lie within 0 and 255, got {self.level}',
                                {'level': self.level})
        rng = np.random.default_rng(self.seed)
        shape = (image.height, image.width)
        affected = rng.random(shape) < 0.5
        direction = np.where(rng.random(shape) < 0.5, 1, -1)
        step = rng.integers(0, level + 1, size=shape)
        adjustment = np.where(affected, step * direction, 0)
        rgb = image.pixels[..., :3].astype(np.int16) + adjustment[..., None]
        pixels = image.pixels.copy()
        pixels[..., :3] = np.clip(rgb, 0, 255).astype(np.uint8)
        return Image(pixels)


@register_filter
@dataclass(frozen=True)
class HostFilter(Filter):
    """Applies any named host operation once.

    Example::

        HostFilter('colorize', {'red': 20, 'green': 0, 'blue': -10})
        HostFilter('pixelate', {'block_size': 4, 'advanced': True})
    """

    operation: str = 'grayscale'
    settings: dict[str, Any] = field(default_factory=dict)

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        return host.apply_operation(self.operation, image, **self.settings)


__all__ = [
    'UnsharpMask',
    'Blur',
    'Smooth',
    'SelectiveBlur',
    'Scatter',
    'Pixelate',
    'EdgeDetect',
    'Emboss',
    'MeanRemoval',
    'SharpenUniversal',
    'Sobel',
    'Lqip',
    'Dot',
    'AddNoise',
    'HostFilter',
]
