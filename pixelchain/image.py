"""
Implements the class :class:`.Image`, pixelchain's in-memory raster.

An image is a numpy array of shape (height, width, 4) and dtype uint8. The
first three channels hold red, green and blue, the fourth channel holds alpha
in the raster scale where 0 is fully opaque and 127 fully transparent. All
filters read and write this representation directly, conversion to the
conventional 0-255 alpha scale only happens in :meth:`Image.from_rgba`,
:meth:`Image.to_rgba` and the Pillow helpers.
"""

from __future__ import annotations

import numpy as np
import PIL.Image

from .color import (
    Color,
    Colors,
    ColorTypes,
    GD_ALPHA_TRANSPARENT,
    alpha_array_to_gd,
    gd_array_to_alpha,
)
from .errors import DimensionMismatch, HostOperationError, OutOfBounds
from .geometry import Box, Point, PointTypes

DEFAULT_MAX_CANVAS_PIXELS = 16384 * 16384
"Largest canvas :meth:`Image.create` allocates unless told otherwise"


class Image:
    """
    An owned RGBA raster buffer using the inverted 0-127 alpha scale.

    Images are mutable through :meth:`set_pixel`, :meth:`paste` and
    :meth:`replace`. Filters never mutate the image they receive, they work
    on a :meth:`copy` or a freshly created canvas.
    """

    def __init__(self, pixels: np.ndarray):
        """
        :param pixels: uint8 array of shape (height, width, 4), alpha in the
            raster scale. The array is referenced, not copied.
        """
        if not isinstance(pixels, np.ndarray):
            raise TypeError("Image pixels must be a numpy array")
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Image pixels must have shape (height, width, 4), got {pixels.shape}")
        if pixels.dtype != np.uint8:
            pixels = np.clip(pixels, 0, 255).astype(np.uint8)
        if pixels[..., 3].max(initial=0) > GD_ALPHA_TRANSPARENT:
            raise ValueError("Raster alpha must lie within 0 (opaque) and 127 (transparent)")
        self.pixels: np.ndarray = pixels
        "The raw pixel data, (height, width, 4) uint8 with raster alpha"

    # ---- construction ----

    @classmethod
    def create(cls, width: int, height: int, fill: ColorTypes = Colors.TRANSPARENT,
               max_pixels: int = DEFAULT_MAX_CANVAS_PIXELS) -> Image:
        """
        Allocates a new canvas.

        :param width: Width in pixels, at least 1
        :param height: Height in pixels, at least 1
        :param fill: Initial colour of every pixel
        :param max_pixels: Upper limit of width * height
        :return: The new image
        :raises HostOperationError: If the canvas can not be allocated
        """
        width = int(width)
        height = int(height)
        if width < 1 or height < 1:
            raise HostOperationError(f"Can not create a canvas of {width}x{height} pixels",
                                     {"width": width, "height": height})
        if width * height > max_pixels:
            raise HostOperationError(
                f"Canvas of {width}x{height} pixels exceeds the limit of {max_pixels} pixels",
                {"width": width, "height": height, "max_pixels": max_pixels})
        color = Color.coerce(fill)
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[...] = color.to_gd()
        return cls(pixels)

    @classmethod
    def from_rgba(cls, rgba: np.ndarray) -> Image:
        """
        Creates an image from conventional pixel data.

        :param rgba: uint8 array of shape (height, width, 4) with 255 = opaque
            alpha, or (height, width, 3) for opaque RGB data
        :return: The image
        """
        rgba = np.asarray(rgba)
        if rgba.ndim != 3 or rgba.shape[2] not in (3, 4):
            raise ValueError(f"Expected an array of shape (height, width, 3|4), got {rgba.shape}")
        height, width = rgba.shape[:2]
        pixels = np.zeros((height, width, 4), dtype=np.uint8)
        pixels[..., :3] = rgba[..., :3]
        if rgba.shape[2] == 4:
            pixels[..., 3] = alpha_array_to_gd(rgba[..., 3])
        return cls(pixels)

    @classmethod
    def from_pil(cls, pil_image: PIL.Image.Image) -> Image:
        """Creates an image from a Pillow image of any mode."""
        if pil_image.mode != "RGBA":
            pil_image = pil_image.convert("RGBA")
        return cls.from_rgba(np.asarray(pil_image))

    # ---- conversion ----

    def to_rgba(self) -> np.ndarray:
        """Returns a copy of the pixel data using the conventional 0-255 alpha."""
        rgba = self.pixels.copy()
        rgba[..., 3] = gd_array_to_alpha(self.pixels[..., 3])
        return rgba

    def to_pil(self) -> PIL.Image.Image:
        """Returns the image as Pillow RGBA image."""
        return PIL.Image.fromarray(self.to_rgba(), "RGBA")

    def copy(self) -> Image:
        return Image(self.pixels.copy())

    # ---- geometry ----

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> Box:
        return Box(self.width, self.height)

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    # ---- pixel access ----

    def _check_bounds(self, x: int, y: int):
        if not self.contains(x, y):
            raise OutOfBounds(f"Pixel ({x}, {y}) lies outside of the {self.width}x{self.height} image",
                              {"x": x, "y": y, "width": self.width, "height": self.height})

    def get_pixel(self, x: int, y: int) -> Color:
        """
        Returns the colour of a single pixel.

        :raises OutOfBounds: If the coordinate lies outside the image
        """
        self._check_bounds(x, y)
        r, g, b, a = self.pixels[y, x]
        return Color.from_gd(r, g, b, a)

    def set_pixel(self, x: int, y: int, color: ColorTypes):
        """
        Overwrites a single pixel without blending.

        :raises OutOfBounds: If the coordinate lies outside the image
        """
        self._check_bounds(x, y)
        self.pixels[y, x] = Color.coerce(color).to_gd()

    @property
    def gd_alpha(self) -> np.ndarray:
        """View of the raster alpha channel (0 = opaque, 127 = transparent)"""
        return self.pixels[..., 3]

    def opaque_mask(self) -> np.ndarray:
        """Boolean array which is True where a pixel is fully opaque."""
        return self.pixels[..., 3] == 0

    def is_transparent(self) -> bool:
        """True if at least one pixel is not fully opaque."""
        return bool(np.any(self.pixels[..., 3] != 0))

    # ---- compositing ----

    def _clip(self, source: Image, at: Point) -> tuple[slice, slice, slice, slice] | None:
        x0 = max(at.x, 0)
        y0 = max(at.y, 0)
        x1 = min(at.x + source.width, self.width)
        y1 = min(at.y + source.height, self.height)
        if x0 >= x1 or y0 >= y1:
            return None
        return (slice(y0, y1), slice(x0, x1),
                slice(y0 - at.y, y1 - at.y), slice(x0 - at.x, x1 - at.x))

    def paste(self, source: Image, at: PointTypes = (0, 0), blend: bool = True):
        """
        Draws ``source`` onto this image in place.

        The coordinate is signed, the parts of ``source`` which fall outside
        this image are clipped.

        :param source: The image to draw
        :param at: Position of the source's top-left corner
        :param blend: If True the source is alpha blended over this image
            (source-over), otherwise its pixels replace the destination's
        """
        at = Point.coerce(at)
        region = self._clip(source, at)
        if region is None:
            return
        dy, dx, sy, sx = region
        src = source.pixels[sy, sx]
        if not blend:
            self.pixels[dy, dx] = src
            return
        dst = self.pixels[dy, dx]
        self.pixels[dy, dx] = blend_over(dst, src)

    def replace(self, source: Image, at: PointTypes = (0, 0)):
        """Copies ``source`` onto this image without blending."""
        self.paste(source, at, blend=False)

    def require_same_size(self, other: Image):
        """
        :raises DimensionMismatch: If ``other`` differs in width or height
        """
        if self.size != other.size:
            raise DimensionMismatch(
                f"Image sizes differ: {self.width}x{self.height} vs {other.width}x{other.height}",
                {"expected": self.size.to_dict(), "actual": other.size.to_dict()})

    def __eq__(self, other):
        if not isinstance(other, Image):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and bool(np.array_equal(self.pixels, other.pixels))

    __hash__ = None

    def __repr__(self):
        return f"Image ({self.width}x{self.height})"


def blend_over(destination: np.ndarray, source: np.ndarray) -> np.ndarray:
    """
    Alpha blends raster pixels ``source`` over ``destination`` (source-over).

    Both arrays hold raster alpha. Fully opaque source pixels replace the
    destination exactly, fully transparent ones leave it untouched.

    :return: The blended pixels, same shape as the inputs
    """
    src_alpha = gd_array_to_alpha(source[..., 3]).astype(np.float64) / 255
    dst_alpha = gd_array_to_alpha(destination[..., 3]).astype(np.float64) / 255
    out_alpha = src_alpha + dst_alpha * (1 - src_alpha)
    weight_dst = dst_alpha * (1 - src_alpha)
    safe_alpha = np.where(out_alpha > 0, out_alpha, 1.0)
    rgb = (source[..., :3] * src_alpha[..., None]
           + destination[..., :3] * weight_dst[..., None]) / safe_alpha[..., None]
    rgb = np.where((out_alpha > 0)[..., None], rgb, destination[..., :3])
    result = np.empty_like(destination)
    result[..., :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
    result[..., 3] = alpha_array_to_gd(np.rint(out_alpha * 255))
    return result


__all__ = ["Image", "blend_over", "DEFAULT_MAX_CANVAS_PIXELS"]
