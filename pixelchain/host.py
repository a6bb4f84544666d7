# PixelChain - Host Raster Operations
"""
Single-call raster primitives the filters are built from.

These mirror the built-in operations of a classic truecolor raster library:
whole-image filters (grayscale, colorize, contrast, convolution, ...), palette
reduction, shape filling and rotation. Every operation validates its
parameters and raises :class:`~pixelchain.errors.HostOperationError` when it
rejects them. Whole-image operations return a new image and never modify
their input, the drawing primitives (``fill_*``, ``draw_*``) draw in place
onto a canvas the caller owns.

The named whole-image operations are collected in :data:`HOST_OPERATIONS` so
they can be invoked by name, see :func:`apply_operation`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

import numpy as np
import PIL.Image
import PIL.ImageDraw

from .color import Color, ColorTypes, Colors, GD_ALPHA_TRANSPARENT
from .errors import HostOperationError
from .image import Image

logger = logging.getLogger(__name__)

GAUSSIAN_KERNEL = ((1.0, 2.0, 1.0), (2.0, 4.0, 2.0), (1.0, 2.0, 1.0))
EDGE_DETECT_KERNEL = ((-1.0, 0.0, -1.0), (0.0, 4.0, 0.0), (-1.0, 0.0, -1.0))
EMBOSS_KERNEL = ((1.5, 0.0, 0.0), (0.0, 0.0, 0.0), (0.0, 0.0, -1.5))
MEAN_REMOVAL_KERNEL = ((-1.0, -1.0, -1.0), (-1.0, 9.0, -1.0), (-1.0, -1.0, -1.0))


def _result(image: Image, rgb: np.ndarray, alpha: np.ndarray | None = None) -> Image:
    pixels = np.empty_like(image.pixels)
    pixels[..., :3] = rgb
    pixels[..., 3] = image.pixels[..., 3] if alpha is None else alpha
    return Image(pixels)


def _require_range(name: str, value: int, low: int, high: int):
    if not low <= value <= high:
        raise HostOperationError(f"{name} must lie within {low} and {high}, got {value}",
                                 {name: value})


# ---- color operations ----

def grayscale(image: Image) -> Image:
    """Converts to gray using the .299/.587/.114 luma weights, alpha is kept."""
    rgb = image.pixels[..., :3].astype(np.float64)
    gray = (0.299 * rgb[..., 0] + 0.587 * rgb[..., 1] + 0.114 * rgb[..., 2]).astype(np.uint8)
    return _result(image, gray[..., None].repeat(3, axis=2))


def negate(image: Image) -> Image:
    """Inverts the color channels."""
    return _result(image, 255 - image.pixels[..., :3])


def brightness(image: Image, level: int) -> Image:
    """Adds ``level`` (-255..255) to each color channel."""
    level = int(level)
    _require_range("level", level, -255, 255)
    rgb = np.clip(image.pixels[..., :3].astype(np.int16) + level, 0, 255)
    return _result(image, rgb.astype(np.uint8))


def contrast(image: Image, level: int) -> Image:
    """
    Changes the contrast. Negative levels increase, positive levels decrease
    the contrast, 100 flattens every channel to mid gray.
    """
    level = int(level)
    _require_range("level", level, -100, 100)
    factor = ((100.0 - level) / 100.0) ** 2
    rgb = image.pixels[..., :3].astype(np.float64) / 255.0
    rgb = ((rgb - 0.5) * factor + 0.5) * 255.0
    return _result(image, np.clip(rgb, 0, 255).astype(np.uint8))


def colorize(image: Image, red: int, green: int, blue: int, alpha: int = 0) -> Image:
    """
    Adds fixed offsets to every channel.

    :param red: Offset -255..255
    :param green: Offset -255..255
    :param blue: Offset -255..255
    :param alpha: Offset -127..127 in the raster alpha scale
    """
    red, green, blue, alpha = int(red), int(green), int(blue), int(alpha)
    for name, value in (("red", red), ("green", green), ("blue", blue)):
        _require_range(name, value, -255, 255)
    _require_range("alpha", alpha, -GD_ALPHA_TRANSPARENT, GD_ALPHA_TRANSPARENT)
    pixels = image.pixels.astype(np.int16)
    rgb = np.clip(pixels[..., :3] + np.array([red, green, blue], dtype=np.int16), 0, 255)
    new_alpha = np.clip(pixels[..., 3] + alpha, 0, GD_ALPHA_TRANSPARENT)
    return _result(image, rgb.astype(np.uint8), new_alpha.astype(np.uint8))


# ---- convolution ----

def convolve(image: Image, kernel: Sequence[Sequence[float]], divisor: float, offset: float = 0.0) -> Image:
    """
    Applies a 3x3 convolution matrix.

    Pixels outside the image are taken from the nearest edge pixel. Each
    channel becomes ``sum / divisor + offset``, clamped to 0..255 and
    truncated. Alpha is copied from the source.

    :raises HostOperationError: For a malformed kernel or a zero divisor
    """
    matrix = np.asarray(kernel, dtype=np.float64)
    if matrix.shape != (3, 3):
        raise HostOperationError(f"Convolution kernel must be 3x3, got {matrix.shape}")
    if divisor == 0:
        raise HostOperationError("Convolution divisor must not be zero")
    rgb = image.pixels[..., :3].astype(np.float64)
    padded = np.pad(rgb, ((1, 1), (1, 1), (0, 0)), mode="edge")
    height, width = image.height, image.width
    total = np.zeros_like(rgb)
    for j in range(3):
        for i in range(3):
            weight = matrix[j, i]
            if weight != 0:
                total += weight * padded[j:j + height, i:i + width]
    total = total / divisor + offset
    return _result(image, np.clip(total, 0, 255).astype(np.uint8))


def gaussian_blur(image: Image) -> Image:
    """One pass of the 3x3 gaussian kernel."""
    return convolve(image, GAUSSIAN_KERNEL, 16)


def edge_detect(image: Image) -> Image:
    return convolve(image, EDGE_DETECT_KERNEL, 1, 127)


def emboss(image: Image) -> Image:
    return convolve(image, EMBOSS_KERNEL, 1, 127)


def mean_removal(image: Image) -> Image:
    """Sharpening 'sketch' effect."""
    return convolve(image, MEAN_REMOVAL_KERNEL, 1, 0)


def smooth(image: Image, weight: float) -> Image:
    """
    Blurs using a kernel with ``weight`` as center weight. Small weights
    blur strongly, large weights barely change the image.
    """
    weight = float(weight)
    if weight + 8 == 0:
        raise HostOperationError("Smooth weight -8 results in a zero divisor", {"weight": weight})
    kernel = ((1.0, 1.0, 1.0), (1.0, weight, 1.0), (1.0, 1.0, 1.0))
    return convolve(image, kernel, weight + 8, 0)


def selective_blur(image: Image) -> Image:
    """
    Edge preserving blur: every neighbour contributes with the inverse of its
    per-channel difference to the center pixel.
    """
    rgb = image.pixels[..., :3].astype(np.float64)
    padded = np.pad(rgb, ((1, 1), (1, 1), (0, 0)), mode="edge")
    height, width = image.height, image.width
    weights = []
    values = []
    for j in range(3):
        for i in range(3):
            neighbour = padded[j:j + height, i:i + width]
            if i == 1 and j == 1:
                weight = np.full_like(rgb, 0.5)
            else:
                diff = np.abs(rgb - neighbour)
                weight = np.where(diff != 0, 1.0 / np.where(diff != 0, diff, 1.0), 1.0)
            weights.append(weight)
            values.append(neighbour)
    weight_sum = np.sum(weights, axis=0)
    total = np.zeros_like(rgb)
    for weight, value in zip(weights, values):
        total += weight * value
    return _result(image, np.clip(total / weight_sum, 0, 255).astype(np.uint8))


# ---- block and noise effects ----

def pixelate(image: Image, block_size: int, advanced: bool = False) -> Image:
    """
    Pixelates the image in blocks of ``block_size`` pixels.

    :param block_size: Edge length of a block, a size of 1 changes nothing
    :param advanced: If True each block gets its average color, otherwise
        the color of its top-left pixel
    """
    block_size = int(block_size)
    if block_size <= 0:
        raise HostOperationError(f"Pixelate block size must be positive, got {block_size}",
                                 {"block_size": block_size})
    if block_size == 1:
        return image.copy()
    height, width = image.height, image.width
    ys = np.arange(0, height, block_size)
    xs = np.arange(0, width, block_size)
    if advanced:
        sums = np.add.reduceat(np.add.reduceat(image.pixels.astype(np.int64), ys, axis=0), xs, axis=1)
        heights = np.diff(np.append(ys, height))
        widths = np.diff(np.append(xs, width))
        counts = heights[:, None] * widths[None, :]
        blocks = (sums // counts[..., None]).astype(np.uint8)
    else:
        blocks = image.pixels[ys][:, xs]
    expanded = np.repeat(np.repeat(blocks, block_size, axis=0), block_size, axis=1)
    return Image(np.ascontiguousarray(expanded[:height, :width]))


def scatter(image: Image, sub: int, plus: int, seed: int | None = None) -> Image:
    """
    Scatters pixels: every pixel takes the color of a pixel displaced by a
    random offset within ``[sub, plus)`` on each axis. Displacements which
    leave the image keep the original pixel.

    :param sub: Smallest displacement
    :param plus: Largest displacement (exclusive), must be greater than ``sub``
    :param seed: Random seed for reproducible results
    """
    sub = int(sub)
    plus = int(plus)
    if sub == 0 and plus == 0:
        return image.copy()
    if sub >= plus:
        raise HostOperationError(f"Scatter requires sub < plus, got {sub} >= {plus}",
                                 {"sub": sub, "plus": plus})
    rng = np.random.default_rng(seed)
    height, width = image.height, image.width
    yy, xx = np.mgrid[0:height, 0:width]
    src_y = yy + rng.integers(sub, plus, size=(height, width))
    src_x = xx + rng.integers(sub, plus, size=(height, width))
    inside = (src_y >= 0) & (src_y < height) & (src_x >= 0) & (src_x < width)
    src_y = np.where(inside, src_y, yy)
    src_x = np.where(inside, src_x, xx)
    return Image(image.pixels[src_y, src_x])


# ---- palette ----

def reduce_palette(image: Image, colors: int = 2) -> tuple[np.ndarray, list[Color]]:
    """
    Reduces the image to at most ``colors`` palette entries.

    :return: An index array of shape (height, width) and the palette
    """
    if colors < 1 or colors > 256:
        raise HostOperationError(f"Palette size must lie within 1 and 256, got {colors}")
    rgb = PIL.Image.fromarray(np.ascontiguousarray(image.pixels[..., :3]), "RGB")
    quantized = rgb.quantize(colors=colors)
    indices = np.asarray(quantized, dtype=np.uint8)
    raw_palette = quantized.getpalette() or []
    used = int(indices.max(initial=0)) + 1
    palette = [Color(*raw_palette[index * 3:index * 3 + 3]) for index in range(used)]
    return indices, palette


# ---- drawing primitives (in place) ----

def _draw_mask(image: Image, draw: Callable[[PIL.ImageDraw.ImageDraw], None]) -> np.ndarray:
    mask = PIL.Image.new("L", (image.width, image.height), 0)
    draw(PIL.ImageDraw.Draw(mask))
    return np.asarray(mask) > 0


def fill_mask(image: Image, mask: np.ndarray, color: ColorTypes):
    """Sets every pixel where ``mask`` is True to ``color``."""
    image.pixels[mask] = Color.coerce(color).to_gd()


def fill_ellipse(image: Image, center: tuple[int, int], width: int, height: int, color: ColorTypes):
    """Draws a filled ellipse of the given diameters centered at ``center``."""
    if width < 0 or height < 0:
        raise HostOperationError(f"Ellipse diameters must not be negative: {width}x{height}")
    cx, cy = center
    rx = width / 2
    ry = height / 2
    bbox = [cx - rx, cy - ry, cx + rx, cy + ry]
    fill_mask(image, _draw_mask(image, lambda draw: draw.ellipse(bbox, fill=255)), color)


def fill_circles(image: Image, centers: Sequence[tuple[int, int]], radius: int, color: ColorTypes):
    """Draws filled circles of the same radius at all ``centers`` in one pass."""
    if radius < 0:
        raise HostOperationError(f"Circle radius must not be negative, got {radius}")

    def draw_all(draw):
        for cx, cy in centers:
            draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius], fill=255)

    fill_mask(image, _draw_mask(image, draw_all), color)


def fill_dots(image: Image, dots: Sequence[tuple[int, int, int, ColorTypes]], square: bool = False):
    """
    Draws filled circles, or squares, of individual size and color in one pass.

    :param dots: ``(x, y, radius, color)`` per dot, (x, y) is its center. For
        squares the radius is half the edge length.
    :param square: If True squares are drawn instead of circles
    """
    layer = PIL.Image.new("RGBA", (image.width, image.height), (0, 0, 0, 0))
    coverage = PIL.Image.new("L", (image.width, image.height), 0)
    draw_layer = PIL.ImageDraw.Draw(layer)
    draw_coverage = PIL.ImageDraw.Draw(coverage)
    for x, y, radius, color in dots:
        if radius < 0:
            raise HostOperationError(f"Dot radius must not be negative, got {radius}")
        bbox = [x - radius, y - radius, x + radius, y + radius]
        if square:
            draw_layer.rectangle(bbox, fill=Color.coerce(color).to_rgba())
            draw_coverage.rectangle(bbox, fill=255)
        else:
            draw_layer.ellipse(bbox, fill=Color.coerce(color).to_rgba())
            draw_coverage.ellipse(bbox, fill=255)
    drawn = np.asarray(coverage) > 0
    image.pixels[drawn] = Image.from_pil(layer).pixels[drawn]


def fill_polygon(image: Image, points: Sequence[tuple[int, int]], color: ColorTypes):
    """Fills the polygon through ``points`` (at least three vertices)."""
    if len(points) < 3:
        raise HostOperationError(f"A polygon requires at least 3 points, got {len(points)}")
    vertices = [(int(x), int(y)) for x, y in points]
    fill_mask(image, _draw_mask(image, lambda draw: draw.polygon(vertices, fill=255)), color)


def fill_rectangle(image: Image, x1: int, y1: int, x2: int, y2: int, color: ColorTypes):
    """Fills the rectangle between the inclusive corners (x1, y1) and (x2, y2)."""
    x1, x2 = sorted((int(x1), int(x2)))
    y1, y2 = sorted((int(y1), int(y2)))
    x1 = max(x1, 0)
    y1 = max(y1, 0)
    x2 = min(x2, image.width - 1)
    y2 = min(y2, image.height - 1)
    if x1 > x2 or y1 > y2:
        return
    image.pixels[y1:y2 + 1, x1:x2 + 1] = Color.coerce(color).to_gd()


def draw_rectangle(image: Image, x1: int, y1: int, x2: int, y2: int, color: ColorTypes,
                   thickness: int = 1):
    """Draws the outline of a rectangle with the given line thickness."""
    if thickness < 1:
        raise HostOperationError(f"Line thickness must be at least 1, got {thickness}")
    bbox = [min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2)]
    mask = _draw_mask(image, lambda draw: draw.rectangle(bbox, outline=255, width=int(thickness)))
    fill_mask(image, mask, color)


def rotate(image: Image, angle: float, background: ColorTypes = Colors.TRANSPARENT) -> Image:
    """
    Rotates anti-clockwise by ``angle`` degrees around the center. The canvas
    grows to hold the whole rotated image, uncovered areas get ``background``.
    """
    if angle % 360 == 0:
        return image.copy()
    fill = Color.coerce(background).to_rgba()
    rotated = image.to_pil().rotate(angle, resample=PIL.Image.Resampling.BICUBIC,
                                    expand=True, fillcolor=fill)
    return Image.from_pil(rotated)


def resize(image: Image, width: int, height: int) -> Image:
    """Resamples the image to ``width`` x ``height`` pixels (bicubic)."""
    width, height = int(width), int(height)
    if width < 1 or height < 1:
        raise HostOperationError(f"Can not resize to {width}x{height} pixels",
                                 {"width": width, "height": height})
    if (width, height) == (image.width, image.height):
        return image.copy()
    resized = image.to_pil().resize((width, height), resample=PIL.Image.Resampling.BICUBIC)
    return Image.from_pil(resized)


# ---- named operations ----

HOST_OPERATIONS: dict[str, Callable[..., Image]] = {
    "grayscale": grayscale,
    "negate": negate,
    "brightness": brightness,
    "contrast": contrast,
    "colorize": colorize,
    "gaussian_blur": gaussian_blur,
    "selective_blur": selective_blur,
    "edge_detect": edge_detect,
    "emboss": emboss,
    "mean_removal": mean_removal,
    "smooth": smooth,
    "pixelate": pixelate,
    "scatter": scatter,
}
"Whole-image operations by name"


def apply_operation(name: str, image: Image, *args: Any, **kwargs: Any) -> Image:
    """
    Invokes a named host operation.

    :raises HostOperationError: If the operation is unknown or rejects the
        given parameters
    """
    operation = HOST_OPERATIONS.get(name.lower())
    if operation is None:
        raise HostOperationError(f"Unknown host operation: {name}", {"operation": name})
    logger.debug("host operation %s args=%s kwargs=%s", name, args, kwargs)
    try:
        return operation(image, *args, **kwargs)
    except (TypeError, ValueError) as e:
        raise HostOperationError(f"Host operation {name} rejected its parameters: {e}",
                                 {"operation": name, "args": list(args), "kwargs": kwargs}) from e


__all__ = [
    "HOST_OPERATIONS",
    "apply_operation",
    "grayscale",
    "negate",
    "brightness",
    "contrast",
    "colorize",
    "convolve",
    "gaussian_blur",
    "edge_detect",
    "emboss",
    "mean_removal",
    "smooth",
    "selective_blur",
    "pixelate",
    "scatter",
    "reduce_palette",
    "fill_mask",
    "fill_ellipse",
    "fill_circles",
    "fill_dots",
    "fill_polygon",
    "fill_rectangle",
    "draw_rectangle",
    "rotate",
    "resize",
    "GAUSSIAN_KERNEL",
]
