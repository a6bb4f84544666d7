# PixelChain Filters - Tonal and Color Transforms
"""
Whole-image color transforms: sepia toning, two-color mask reduction,
hue-tolerance color replacement and thin wrappers around the host's color
operations (greyscale, negate, brightness, contrast, colorize) plus opacity
and dominant color fills.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from pixelchain import host
from pixelchain.color import (
    Color,
    Colors,
    DISCARD_COLOR,
    GD_ALPHA_TRANSPARENT,
    TRANSPARENT_FILL,
    alpha_array_to_gd,
    gd_array_to_alpha,
    hsl_array_to_rgb,
    rgb_array_to_hsl,
)
from pixelchain.errors import UnusableInput
from pixelchain.image import Image
from .base import Filter, FilterContext, register_filter


@register_filter
@dataclass(frozen=True)
class SepiaSlow(Filter):
    """Sepia toning via a per-pixel linear combination of the channels.

    This is the reference implementation :class:`SepiaFast` approximates.
    The blue row of the matrix weights the blue channel three times, which
    is kept for output compatibility with existing renderings. Alpha is
    preserved.
    """

    MATRIX: ClassVar[tuple] = (
        (0.393, 0.769, 0.189),
        (0.349, 0.686, 0.168),
        (0.272, 0.534, 0.131),
    )

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        rgb = image.pixels[..., :3].astype(np.float64)
        r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
        (rr, rg, rb), (gr, gg, gb), (br, bg, bb) = self.MATRIX
        channels = [
            rr * r + rg * g + rb * b,
            gr * r + gg * g + gb * b,
            br * b + bg * b + bb * b,
        ]
        pixels = image.pixels.copy()
        for index, channel in enumerate(channels):
            pixels[..., index] = np.clip(np.floor(channel + 0.5), 0, 255).astype(np.uint8)
        return Image(pixels)


@register_filter
@dataclass(frozen=True)
class SepiaFast(Filter):
    """Sepia toning in three host passes: contrast, greyscale and a tint."""

    contrast: int = -15
    tint: tuple[int, int, int] = (35, 10, -17)

    def __post_init__(self):
        self._coerce('tint', lambda value: tuple(int(v) for v in value))

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        result = host.contrast(image, self.contrast)
        result = host.grayscale(result)
        return host.colorize(result, *self.tint)


@register_filter
@dataclass(frozen=True)
class MonochromeMask(Filter):
    """Reduces the image to two colors for use as a mask.

    The image is quantized to a two entry palette. The darker entry becomes
    ``color``, the lighter one the discard sentinel (magenta), both opaque.
    """

    color: Color | None = None

    def __post_init__(self):
        self._coerce('color', Color.coerce)

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        if self.color is None:
            raise UnusableInput('Monochrome mask requires a color')
        indices, palette = host.reduce_palette(image, 2)
        luma = [0.299 * c.red + 0.587 * c.green + 0.114 * c.blue for c in palette]
        if len(palette) == 2:
            dark_index = int(np.argmin(luma))
        else:
            dark_index = 0 if luma[0] < 127 else -1
        lookup = np.empty((max(len(palette), 1), 4), dtype=np.uint8)
        for index in range(len(palette)):
            target = self.color if index == dark_index else DISCARD_COLOR
            lookup[index] = (target.red, target.green, target.blue, 0)
        return Image(lookup[indices])


@register_filter
@dataclass(frozen=True)
class ReplaceColors(Filter):
    """Replaces all colors whose hue lies within a tolerance of ``from_color``.

    Matching pixels get the hue and saturation of ``to_color`` and keep their
    own lightness. The tolerance (0 to 100) is scaled to 0 to 180 hue degrees,
    the hue band does not wrap around 0/360. Fully transparent pixels are
    written as transparent near-white.
    """

    from_color: Color = Colors.RED
    to_color: Color = Colors.BLUE
    tolerance: int = 0

    def __post_init__(self):
        self._coerce('from_color', Color.coerce)
        self._coerce('to_color', Color.coerce)

    @property
    def hue_tolerance(self) -> float:
        """Tolerance in hue degrees"""
        return min(max(int(self.tolerance), 0), 100) * 1.8

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        target_hue, _, _ = self.from_color.to_hsl()
        new_hue, new_saturation, _ = self.to_color.to_hsl()
        tolerance = self.hue_tolerance

        hue, _, lightness = rgb_array_to_hsl(image.pixels[..., :3])
        matches = (hue >= target_hue - tolerance) & (target_hue + tolerance >= hue)
        replaced = hsl_array_to_rgb(np.full_like(hue, new_hue),
                                    np.full_like(hue, new_saturation),
                                    lightness)
        pixels = image.pixels.copy()
        pixels[..., :3] = np.where(matches[..., None], replaced, image.pixels[..., :3])
        transparent = image.pixels[..., 3] == GD_ALPHA_TRANSPARENT
        pixels[transparent] = TRANSPARENT_FILL.to_gd()
        return Image(pixels)


@register_filter
@dataclass(frozen=True)
class Greyscale(Filter):
    """Converts to grey using luma weights, alpha is preserved."""

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        return host.grayscale(image)


@register_filter
@dataclass(frozen=True)
class Negate(Filter):
    """Inverts all color channels."""

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        return host.negate(image)


@register_filter
@dataclass(frozen=True)
class Brightness(Filter):
    """Adds ``level`` (-255 to 255) to all color channels."""

    level: int = 0

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        return host.brightness(image, self.level)


@register_filter
@dataclass(frozen=True)
class Contrast(Filter):
    """Changes the contrast, -100 (maximum) to 100 (flat gray)."""

    level: int = 0

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        return host.contrast(image, self.level)


@register_filter
@dataclass(frozen=True)
class Colorize(Filter):
    """Adds fixed offsets to the channels, alpha offset in the 0-127 scale."""

    red: int = 0
    green: int = 0
    blue: int = 0
    alpha: int = 0

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        return host.colorize(image, self.red, self.green, self.blue, self.alpha)


@register_filter
@dataclass(frozen=True)
class Opacity(Filter):
    """Scales the opacity of every pixel by ``opacity`` percent (0 to 100)."""

    opacity: float = 100

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        if not 0 <= self.opacity <= 100:
            raise UnusableInput(f'Opacity must lie within 0 and 100, got {self.opacity}',
                                {'opacity': self.opacity})
        if self.opacity == 100:
            return image.copy()
        alpha = gd_array_to_alpha(image.pixels[..., 3]).astype(np.float64)
        pixels = image.pixels.copy()
        pixels[..., 3] = alpha_array_to_gd(np.rint(alpha * self.opacity / 100))
        return Image(pixels)


@register_filter
@dataclass(frozen=True)
class DominantColor(Filter):
    """Fills the whole image with its dominant color, e.g. as a placeholder.

    Every ``quality``-th pixel is sampled, mostly transparent and near white
    pixels are ignored. The samples are reduced to ``palette_size`` colors and
    the most frequent one wins. The result is opaque.
    """

    quality: int = 10
    palette_size: int = 5

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        if self.quality < 1:
            raise UnusableInput(f'Quality must be at least 1, got {self.quality}',
                                {'quality': self.quality})
        samples = image.pixels.reshape(-1, 4)[::int(self.quality)]
        visible = samples[..., 3] <= GD_ALPHA_TRANSPARENT // 2
        near_white = np.all(samples[..., :3] > 250, axis=-1)
        samples = samples[visible & ~near_white]
        if len(samples) == 0:
            raise UnusableInput('No colored pixels to sample')
        indices, palette = host.reduce_palette(Image(np.ascontiguousarray(samples[None])),
                                               self.palette_size)
        counts = np.bincount(indices.ravel(), minlength=len(palette))
        dominant = palette[int(np.argmax(counts))]
        return Image.create(image.width, image.height, dominant)


__all__ = [
    'SepiaSlow',
    'SepiaFast',
    'MonochromeMask',
    'ReplaceColors',
    'Greyscale',
    'Negate',
    'Brightness',
    'Contrast',
    'Colorize',
    'Opacity',
    'DominantColor',
]
