# PixelChain - Color
"""
Implements the immutable :class:`Color` value type, colour string parsing and
the colour space helpers used by the filters.

Two alpha scales exist in pixelchain:

* the conventional scale used at the API boundary, 0 (transparent) to 255
  (opaque), stored in :attr:`Color.alpha`
* the raster scale used inside :class:`~pixelchain.image.Image`, 0 (opaque) to
  127 (transparent), available as :attr:`Color.gd_alpha`

Both directions of the conversion are exact for every value of the raster
scale, so converting a pixel out and back in never changes it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np
import PIL.ImageColor

GD_ALPHA_OPAQUE = 0
"Raster alpha of a fully opaque pixel"
GD_ALPHA_TRANSPARENT = 127
"Raster alpha of a fully transparent pixel"

_RGB_PATTERN = re.compile(r"^rgba?\((.*)\)$", re.IGNORECASE)
_HEX_PATTERN = re.compile(r"^[0-9a-f]+$", re.IGNORECASE)


def alpha_to_gd(alpha: int) -> int:
    """Converts a 0-255 (opaque at max) alpha into the 0-127 (opaque at 0) scale."""
    alpha = min(max(int(alpha), 0), 255)
    return GD_ALPHA_TRANSPARENT - int(round(alpha * GD_ALPHA_TRANSPARENT / 255))


def gd_to_alpha(gd_alpha: int) -> int:
    """Converts a 0-127 (opaque at 0) alpha into the 0-255 (opaque at max) scale."""
    gd_alpha = min(max(int(gd_alpha), 0), GD_ALPHA_TRANSPARENT)
    return int(round((GD_ALPHA_TRANSPARENT - gd_alpha) * 255 / GD_ALPHA_TRANSPARENT))


def alpha_array_to_gd(alpha: np.ndarray) -> np.ndarray:
    """Vectorized :func:`alpha_to_gd`."""
    alpha = np.clip(alpha.astype(np.float64), 0, 255)
    return (GD_ALPHA_TRANSPARENT - np.rint(alpha * GD_ALPHA_TRANSPARENT / 255)).astype(np.uint8)


def gd_array_to_alpha(gd_alpha: np.ndarray) -> np.ndarray:
    """Vectorized :func:`gd_to_alpha`."""
    gd_alpha = np.clip(gd_alpha.astype(np.float64), 0, GD_ALPHA_TRANSPARENT)
    return np.rint((GD_ALPHA_TRANSPARENT - gd_alpha) * 255 / GD_ALPHA_TRANSPARENT).astype(np.uint8)


@dataclass(frozen=True)
class Color:
    """
    An immutable RGBA colour with 8 bit channels.

    ``alpha`` uses the conventional scale (255 = opaque). Use :attr:`gd_alpha`
    or :meth:`from_gd` to work with the raster scale.
    """

    red: int
    green: int
    blue: int
    alpha: int = 255

    def __post_init__(self):
        for name in ("red", "green", "blue", "alpha"):
            value = getattr(self, name)
            if not isinstance(value, (int, np.integer)):
                raise TypeError(f"Color channel {name} must be an integer, got {value!r}")
            if not 0 <= value <= 255:
                raise ValueError(f"Color channel {name} out of range 0-255: {value}")
            object.__setattr__(self, name, int(value))

    @classmethod
    def from_gd(cls, red: int, green: int, blue: int, gd_alpha: int = GD_ALPHA_OPAQUE) -> Color:
        """
        Creates a colour from a raster pixel

        :param red: Red 0-255
        :param green: Green 0-255
        :param blue: Blue 0-255
        :param gd_alpha: Alpha in the raster scale, 0 = opaque, 127 = transparent
        :return: The colour
        """
        return cls(int(red), int(green), int(blue), gd_to_alpha(gd_alpha))

    @classmethod
    def coerce(cls, value: ColorTypes) -> Color:
        """
        Converts any supported colour representation into a :class:`Color`.

        :param value: A Color, a colour string or an (r, g, b[, a]) tuple
        :return: The colour
        """
        if isinstance(value, Color):
            return value
        if isinstance(value, str):
            return parse_color(value)
        if isinstance(value, (tuple, list)) and len(value) in (3, 4):
            return cls(*[int(v) for v in value])
        raise TypeError(f"Can not convert {value!r} to a Color")

    @property
    def gd_alpha(self) -> int:
        """Alpha in the raster scale (0 = opaque, 127 = transparent)"""
        return alpha_to_gd(self.alpha)

    @property
    def is_transparent(self) -> bool:
        return self.alpha == 0

    def to_rgb(self) -> tuple[int, int, int]:
        return self.red, self.green, self.blue

    def to_rgba(self) -> tuple[int, int, int, int]:
        return self.red, self.green, self.blue, self.alpha

    def to_gd(self) -> tuple[int, int, int, int]:
        """The colour as raster pixel (r, g, b, gd_alpha)"""
        return self.red, self.green, self.blue, self.gd_alpha

    def with_alpha(self, alpha: int) -> Color:
        """Returns a copy of this colour with a different (0-255) alpha."""
        return Color(self.red, self.green, self.blue, alpha)

    def with_opacity(self, opacity: float) -> Color:
        """Returns a copy of this colour with an opacity between 0.0 and 1.0."""
        opacity = min(max(float(opacity), 0.0), 1.0)
        return self.with_alpha(int(round(opacity * 255)))

    def same_rgb(self, other: Color) -> bool:
        return self.to_rgb() == other.to_rgb()

    def to_hex(self) -> str:
        """Hex representation, ``#rrggbb`` or ``#rrggbbaa`` if not opaque"""
        if self.alpha == 255:
            return f"#{self.red:02x}{self.green:02x}{self.blue:02x}"
        return f"#{self.red:02x}{self.green:02x}{self.blue:02x}{self.alpha:02x}"

    def to_hsl(self) -> tuple[float, float, float]:
        return rgb_to_hsl(self.red, self.green, self.blue)

    def __str__(self):
        return self.to_hex()


ColorTypes = Union[Color, str, Sequence[int]]
"The colour representations accepted wherever a colour is expected"


class Colors:
    """Frequently used colours"""

    BLACK = Color(0, 0, 0)
    WHITE = Color(255, 255, 255)
    RED = Color(255, 0, 0)
    GREEN = Color(0, 255, 0)
    BLUE = Color(0, 0, 255)
    YELLOW = Color(255, 255, 0)
    CYAN = Color(0, 255, 255)
    MAGENTA = Color(255, 0, 255)
    TRANSPARENT = Color(0, 0, 0, 0)


DISCARD_COLOR = Colors.MAGENTA
"Mask sentinel: pixels under this mask colour are made fully transparent"
KEEP_COLOR = Colors.CYAN
"Mask sentinel: pixels under this mask colour are kept"
TRANSPARENT_FILL = Color(254, 254, 254, 0)
"Colour written for fully transparent pixels by the colour replace filter"


def _parse_channel(text: str) -> int:
    value = int(round(float(text.strip())))
    return min(max(value, 0), 255)


def parse_color(text: str) -> Color:
    """
    Parses a colour string.

    Supported forms: ``#rgb``, ``#rgba``, ``#rrggbb``, ``#rrggbbaa`` (the ``#``
    is optional), ``rgb(r, g, b)`` and ``rgba(r, g, b, a)`` where ``a`` is an
    opacity between 0.0 and 1.0. Other forms such as CSS colour names (``red``)
    and ``hsl()`` are resolved by Pillow.

    :param text: The colour string
    :return: The colour
    :raises ValueError: If the string is not a valid colour
    """
    if not isinstance(text, str):
        raise ValueError(f"Invalid colour: {text!r}")
    value = text.strip()
    match = _RGB_PATTERN.match(value)
    if match:
        parts = [part for part in match.group(1).split(",")]
        is_rgba = value.lower().startswith("rgba")
        try:
            if is_rgba and len(parts) == 4:
                opacity = min(max(float(parts[3].strip()), 0.0), 1.0)
                return Color(*[_parse_channel(p) for p in parts[:3]],
                             int(round(opacity * 255)))
            if len(parts) == 3:
                return Color(*[_parse_channel(p) for p in parts])
        except ValueError as e:
            raise ValueError(f"Invalid colour: {text!r}") from e
        raise ValueError(f"Invalid colour: {text!r}")
    if not _HEX_PATTERN.match(value.lstrip("#")):
        if value.startswith("#"):
            raise ValueError(f"Invalid colour: {text!r}")
        try:
            return Color(*PIL.ImageColor.getrgb(value))
        except ValueError as e:
            raise ValueError(f"Invalid colour: {text!r}") from e
    value = value.lstrip("#")
    if len(value) in (3, 4):
        value = "".join(ch * 2 for ch in value)
    if len(value) == 6:
        return Color(int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))
    if len(value) == 8:
        return Color(int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16),
                     int(value[6:8], 16))
    raise ValueError(f"Invalid colour: {text!r}")


# ---------------------------------------------------------------------------
# HSL
# ---------------------------------------------------------------------------

def rgb_to_hsl(red: int, green: int, blue: int) -> tuple[float, float, float]:
    """
    Converts an RGB colour to HSL.

    :return: Hue in degrees [0, 360), saturation and lightness in [0, 1],
        each rounded to three decimals
    """
    r = min(max(red, 0), 255) / 255
    g = min(max(green, 0), 255) / 255
    b = min(max(blue, 0), 255) / 255
    high = max(r, g, b)
    low = min(r, g, b)
    hue = 0.0
    saturation = 0.0
    lightness = (high + low) / 2
    delta = high - low
    if delta != 0:
        saturation = delta / (1 - abs(2 * lightness - 1))
        if high == r:
            hue = 60 * np.fmod((g - b) / delta, 6)
            if b > g:
                hue += 360
        elif high == g:
            hue = 60 * ((b - r) / delta + 2)
        else:
            hue = 60 * ((r - g) / delta + 4)
    return round(float(hue), 3), round(saturation, 3), round(lightness, 3)


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> tuple[int, int, int]:
    """
    Converts an HSL colour back to RGB, the inverse of :func:`rgb_to_hsl`.

    Channels are floored, so pure and gray colours round-trip exactly.
    """
    result = hsl_array_to_rgb(np.array([hue], dtype=np.float64),
                              np.array([saturation], dtype=np.float64),
                              np.array([lightness], dtype=np.float64))
    return int(result[0, 0]), int(result[0, 1]), int(result[0, 2])


def rgb_array_to_hsl(rgb: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Vectorized :func:`rgb_to_hsl`.

    :param rgb: uint8 array of shape (..., 3)
    :return: Hue, saturation and lightness arrays of shape (...)
    """
    values = rgb[..., :3].astype(np.float64) / 255
    r, g, b = values[..., 0], values[..., 1], values[..., 2]
    high = values.max(axis=-1)
    low = values.min(axis=-1)
    lightness = (high + low) / 2
    delta = high - low
    chromatic = delta != 0
    safe_delta = np.where(chromatic, delta, 1.0)
    denominator = 1 - np.abs(2 * lightness - 1)
    saturation = np.where(chromatic, delta / np.where(denominator == 0, 1.0, denominator), 0.0)
    hue_r = 60 * np.fmod((g - b) / safe_delta, 6) + np.where(b > g, 360, 0)
    hue_g = 60 * ((b - r) / safe_delta + 2)
    hue_b = 60 * ((r - g) / safe_delta + 4)
    hue = np.select([high == r, high == g], [hue_r, hue_g], default=hue_b)
    hue = np.where(chromatic, hue, 0.0)
    return np.round(hue, 3), np.round(saturation, 3), np.round(lightness, 3)


def hsl_array_to_rgb(hue: np.ndarray, saturation: np.ndarray, lightness: np.ndarray) -> np.ndarray:
    """
    Vectorized :func:`hsl_to_rgb`.

    :return: uint8 array of shape (..., 3)
    """
    h = np.clip(hue, 0, 360)
    s = np.clip(saturation, 0, 1)
    l = np.clip(lightness, 0, 1)
    c = (1 - np.abs(2 * l - 1)) * s
    x = c * (1 - np.abs(np.fmod(h / 60, 2) - 1))
    m = l - c / 2
    zero = np.zeros_like(c)
    sectors = [h < 60, h < 120, h < 180, h < 240, h < 300]
    r = np.select(sectors, [c, x, zero, zero, x], default=c)
    g = np.select(sectors, [x, c, c, x, zero], default=zero)
    b = np.select(sectors, [zero, zero, x, c, c], default=x)
    rgb = np.stack([r + m, g + m, b + m], axis=-1) * 255
    return np.clip(np.floor(rgb + 1e-9), 0, 255).astype(np.uint8)


__all__ = [
    "Color",
    "Colors",
    "ColorTypes",
    "DISCARD_COLOR",
    "KEEP_COLOR",
    "TRANSPARENT_FILL",
    "GD_ALPHA_OPAQUE",
    "GD_ALPHA_TRANSPARENT",
    "alpha_to_gd",
    "gd_to_alpha",
    "alpha_array_to_gd",
    "gd_array_to_alpha",
    "parse_color",
    "rgb_to_hsl",
    "hsl_to_rgb",
    "rgb_array_to_hsl",
    "hsl_array_to_rgb",
]
