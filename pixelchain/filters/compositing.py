# PixelChain Filters - Alpha Masks and Geometric Compositing
"""
Filters which work with the alpha channel and with geometry.

- :class:`ApplyMask` makes pixels transparent where a mask shows the discard
  sentinel color
- :class:`MaskBorder` adds a border which follows the silhouette of the
  opaque content
- :class:`BoxBorder` frames the image with a solid border
- :class:`RoundedCorners` clips the corners to quarter circles
- :class:`Mask` keeps the image inside a circle, polygon, star or other shape
- :class:`Reflection` appends a mirrored copy fading out below the image
- :class:`Watermark` blends a single or tiled watermark image onto the image
- :class:`DrawRectangle` and :class:`FaceRectangles` outline regions

Borders and reflection return a larger canvas, all other filters keep the
image size.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar

import numpy as np

from pixelchain import host
from pixelchain.color import (
    Color,
    Colors,
    DISCARD_COLOR,
    GD_ALPHA_TRANSPARENT,
    KEEP_COLOR,
    parse_color,
)
from pixelchain.config import Settings
from pixelchain.dimensions import parse_dimension, parse_pair
from pixelchain.errors import UnusableInput
from pixelchain.faces import FaceDetector
from pixelchain.geometry import (
    Box,
    HAnchor,
    Point,
    Rectangle,
    VAnchor,
    place,
    polygon_points,
    star_points,
)
from pixelchain.image import Image
from .base import Filter, FilterContext, collaborator, register_filter
from .pipeline import FilterPipeline
from .tonal import MonochromeMask, Opacity

logger = logging.getLogger(__name__)

CORNERS = ('tl', 'tr', 'bl', 'br')
"Corner keys accepted by :meth:`RoundedCorners.from_param_string`"


def _setting_default(name: str) -> Any:
    return Settings.model_fields[name].default


def _border_params(params: str, image_width: int | None,
                   default_color: Color | str | None) -> tuple[int, Color | str | None]:
    if not params or not params.strip():
        raise ValueError('Empty border parameters')
    if '|' in params:
        width_text, _, color_text = params.partition('|')
    else:
        width_text, _, color_text = params.partition(',')
    width = parse_dimension(width_text, image_width) or 0
    color = parse_color(color_text) if color_text.strip() else default_color
    return width, color


@register_filter
@dataclass(frozen=True)
class ApplyMask(Filter):
    """Makes every pixel transparent where the mask shows the discard color.

    The mask must have the same size as the image. Pixels under any other
    mask color are kept unchanged. Applying the same mask twice has the same
    effect as applying it once.
    """

    mask: Image | None = collaborator()
    discard_color: Color = DISCARD_COLOR

    def __post_init__(self):
        self._coerce('discard_color', Color.coerce)

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        if self.mask is None:
            raise UnusableInput('No mask given')
        image.require_same_size(self.mask)
        discard = np.all(self.mask.pixels[..., :3] == self.discard_color.to_rgb(), axis=-1)
        pixels = image.pixels.copy()
        pixels[discard] = (0, 0, 0, GD_ALPHA_TRANSPARENT)
        return Image(pixels)


@register_filter
@dataclass(frozen=True)
class MaskBorder(Filter):
    """Adds a border following the outline of the opaque content.

    The image is centered on a transparent canvas enlarged by ``width`` on
    each side. Wherever opacity changes between a pixel and its left or
    upper neighbour a filled circle of radius ``width`` is stamped in the
    border color, then the image is drawn on top. Transparent images thereby
    get a border around their visible shape instead of their bounding box.
    """

    width: int = 0
    color: Color | None = None

    def __post_init__(self):
        self._coerce('color', Color.coerce)

    @classmethod
    def from_param_string(cls, params: str, image_width: int | None = None,
                          default_color: Color | str | None = None) -> 'MaskBorder':
        """Creates the filter from ``"width|color"``, e.g. ``"5|#ff0000"``.

        The width may be a percentage of ``image_width``. If no color is
        given ``default_color`` is used.
        """
        width, color = _border_params(params, image_width, default_color)
        return cls(width=width, color=color)

    @staticmethod
    def edge_points(opaque: np.ndarray) -> list[tuple[int, int]]:
        """Finds the circle centers for an opacity map.

        Rows are scanned in row-major order, the last row is not scanned.
        The left neighbour of a row's first pixel is the last pixel of the
        previous row, the row above the first row counts as transparent.

        :param opaque: Boolean array, True where a pixel is fully opaque
        :return: The distinct (x, y) centers
        """
        height, width = opaque.shape
        scanned = opaque[:height - 1]
        if scanned.size == 0:
            return []
        flat = scanned.ravel()
        previous = np.empty_like(flat)
        previous[1:] = flat[:-1]
        previous[0] = flat[0]
        x_transition = (flat != previous).reshape(scanned.shape)
        above = np.zeros_like(scanned)
        above[1:] = scanned[:-1]
        y_transition = above != scanned
        rows, cols = np.mgrid[0:scanned.shape[0], 0:width]
        center_x = np.where(x_transition & scanned, cols, cols - 1)
        center_y = np.where(y_transition & scanned, rows, rows - 1)
        hits = x_transition | y_transition
        points = np.unique(np.stack([center_x[hits], center_y[hits]], axis=-1), axis=0)
        return [(int(x), int(y)) for x, y in points]

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        if not self.width or self.color is None:
            raise UnusableInput('Border requires a width and a color',
                                {'width': self.width, 'color': str(self.color)})
        if self.width < 0:
            raise UnusableInput(f'Border width must not be negative, got {self.width}',
                                {'width': self.width})
        border = int(self.width)
        new_width = image.width + 2 * border
        new_height = image.height + 2 * border
        source = Image.create(new_width, new_height, Colors.TRANSPARENT)
        source.paste(image, (border, border))
        canvas = Image.create(new_width, new_height, Colors.TRANSPARENT)
        centers = self.edge_points(source.opaque_mask())
        host.fill_circles(canvas, centers, border, self.color)
        canvas.paste(source, (0, 0))
        return canvas


@register_filter
@dataclass(frozen=True)
class BoxBorder(Filter):
    """Frames the image with a solid border of ``width`` pixels on every side.

    Unlike :class:`MaskBorder` the border follows the bounding box, transparent
    areas of the image show the border color.
    """

    width: int = 0
    color: Color | None = None

    def __post_init__(self):
        self._coerce('color', Color.coerce)

    @classmethod
    def from_param_string(cls, params: str, image_width: int | None = None,
                          default_color: Color | str | None = None) -> 'BoxBorder':
        """Creates the filter from ``"width|color"``, see :meth:`MaskBorder.from_param_string`."""
        width, color = _border_params(params, image_width, default_color)
        return cls(width=width, color=color)

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        if not self.width or self.color is None:
            raise UnusableInput('Border requires a width and a color',
                                {'width': self.width, 'color': str(self.color)})
        if self.width < 0:
            raise UnusableInput(f'Border width must not be negative, got {self.width}',
                                {'width': self.width})
        border = int(self.width)
        canvas = Image.create(image.width + 2 * border, image.height + 2 * border, self.color)
        canvas.paste(image, (border, border))
        return canvas


@register_filter
@dataclass(frozen=True)
class RoundedCorners(Filter):
    """Rounds the corners of an image by making them transparent.

    Each corner has its own radius in pixels, a radius of 0 keeps the corner
    square.
    """

    top_left: int = 0
    top_right: int = 0
    bottom_left: int = 0
    bottom_right: int = 0

    @classmethod
    def from_param_string(cls, params: str, image_width: int | None = None) -> 'RoundedCorners':
        """Creates the filter from ``"corner,radius|corner,radius|..."``.

        ``corner`` is one of ``tl``, ``tr``, ``bl``, ``br`` or ``all``, later
        entries override earlier ones. Radii may be percentages of
        ``image_width``. Unknown corners and invalid radii are skipped with a
        log message.
        """
        radii = dict.fromkeys(CORNERS, 0)
        for entry in (params or '').split('|'):
            parts = entry.split(',')
            corner = parts[0].strip().lower()
            if corner not in CORNERS and corner != 'all':
                logger.warning('Unknown rounded corner option: %s', parts[0])
                continue
            try:
                radius = parse_dimension(parts[1], image_width) if len(parts) > 1 else 0
            except ValueError:
                logger.warning('Invalid rounded corner radius: %s', parts[1])
                continue
            radius = radius or 0
            for key in (CORNERS if corner == 'all' else (corner,)):
                radii[key] = radius
        return cls(top_left=radii['tl'], top_right=radii['tr'],
                   bottom_left=radii['bl'], bottom_right=radii['br'])

    def build_mask(self, width: int, height: int) -> Image:
        """Creates the keep/discard mask for an image of the given size."""
        tl, tr, bl, br = self.top_left, self.top_right, self.bottom_left, self.bottom_right
        mask = Image.create(width, height, DISCARD_COLOR)
        corners = (
            (tl, tl, tl),
            (tr, width - tr, tr),
            (bl, bl, height - bl),
            (br, width - br, height - br),
        )
        for radius, cx, cy in corners:
            if radius > 0:
                host.fill_circles(mask, [(cx, cy)], radius, KEEP_COLOR)
        infill = (
            (tl, 0, width - tl - tr, height - max(bl, br)),
            (bl, max(tl, tr), width - br - bl, height - max(tl, tr)),
            (0, tl, width - max(tr, br), height - tl - bl),
            (max(tl, bl), tr, width - max(tl, bl), height - tr - br),
        )
        for x, y, w, h in infill:
            if w >= 0 and h >= 0:
                host.fill_rectangle(mask, x, y, x + w, y + h, KEEP_COLOR)
        return mask

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        radii = (self.top_left, self.top_right, self.bottom_left, self.bottom_right)
        if any(radius < 0 for radius in radii):
            raise UnusableInput(f'Corner radii must not be negative: {radii}', {'radii': radii})
        if not any(radii):
            return image.copy()
        mask = self.build_mask(image.width, image.height)
        return ApplyMask(mask=mask).apply(image, context)


@register_filter
@dataclass(frozen=True)
class Mask(Filter):
    """Keeps the part of the image inside a shape, the rest becomes transparent.

    ``shape`` is one of ``circle``, ``ellipse``, ``rectangle``, ``square``,
    ``polygon-N``, ``star-N`` (N corners or spikes, at least 3) or ``image``.
    The shape is centered at (``x``, ``y``), its ``width`` (and ``height``
    for ellipses and rectangles, defaulting to ``width``) may be given in
    pixels or as percentage of the shorter image side. Polygons and stars
    turn clockwise by ``rotation`` degrees, ``split`` is the inner radius of
    a star relative to its outer one.

    The ``image`` shape reduces ``mask_image`` to two colors, its dark parts
    are kept.

    The mask is drawn at twice the image size and scaled down together with
    the masked image, which smooths the outline.
    """

    SCALE: ClassVar[int] = 2

    shape: str = 'circle'
    x: int | str = '50%'
    y: int | str = '50%'
    width: int | str = '100%'
    height: int | str | None = None
    rotation: float = 0
    split: float = 0.5
    mask_image: Image | None = collaborator()

    @classmethod
    def from_param_string(cls, params: str, mask_image: Image | None = None) -> 'Mask':
        """Creates the filter from a pipe separated parameter string.

        The fields are ``shape|x|y|width`` followed by ``height`` for
        ellipses and rectangles or ``rotation|split`` for polygons and stars,
        e.g. ``"circle"``, ``"ellipse|50%|50%|80%|40%"`` or ``"star-5|||90%|36"``.
        Empty fields take their defaults.
        """
        parts = [part.strip() for part in (params or '').split('|')]
        shape = parts[0].lower() if parts else ''
        if not shape:
            raise ValueError('Empty mask parameters')
        parts += [''] * (7 - len(parts))
        values = dict(shape=shape, x=parts[1] or '50%', y=parts[2] or '50%',
                      width=parts[3] or '100%', mask_image=mask_image)
        if shape.startswith(('polygon-', 'star-')):
            values['rotation'] = float(parts[4]) if parts[4] else 0
            values['split'] = float(parts[5]) if parts[5] else 0.5
        elif parts[4]:
            values['height'] = parts[4]
        return cls(**values)

    def corners(self) -> int:
        """The number of corners of a ``polygon-N`` or spikes of a ``star-N``."""
        _, _, count = self.shape.partition('-')
        try:
            return int(count)
        except ValueError:
            raise UnusableInput(f'Invalid mask shape: {self.shape}', {'shape': self.shape}) from None

    def _length(self, value: int | str, base: int) -> int:
        try:
            return (parse_dimension(value, base) or 0) * self.SCALE
        except ValueError as e:
            raise UnusableInput(f'Invalid mask dimension: {value}', {'value': value}) from e

    def build_mask(self, image: Image) -> Image:
        """Creates the keep/discard mask at the working scale for ``image``."""
        width, height = image.width * self.SCALE, image.height * self.SCALE
        shape = self.shape.lower()
        if shape == 'image':
            if self.mask_image is None:
                raise UnusableInput('Mask shape image requires a mask image')
            scaled = host.resize(self.mask_image, width, height)
            return MonochromeMask(KEEP_COLOR).apply(scaled)
        base = min(image.width, image.height)
        center = Point(self._length(self.x, image.width), self._length(self.y, image.height))
        size = self._length(self.width, base)
        mask = Image.create(width, height, DISCARD_COLOR)
        if shape == 'circle':
            host.fill_circles(mask, [center.to_tuple()], int(round(size / 2)), KEEP_COLOR)
        elif shape in ('ellipse', 'rectangle', 'square'):
            extent = size if self.height is None or shape == 'square' else self._length(self.height, base)
            if shape == 'ellipse':
                host.fill_ellipse(mask, center.to_tuple(), size, extent, KEEP_COLOR)
            else:
                half_width, half_height = int(round(size / 2)), int(round(extent / 2))
                host.fill_rectangle(mask, center.x - half_width, center.y - half_height,
                                    center.x + half_width, center.y + half_height, KEEP_COLOR)
        elif shape.startswith(('polygon-', 'star-')):
            count = self.corners()
            radius = int(round(size / 2))
            try:
                if shape.startswith('star-'):
                    points = star_points(center, radius, count, self.split, self.rotation)
                else:
                    points = polygon_points(center, radius, count, self.rotation)
            except ValueError as e:
                raise UnusableInput(str(e), {'shape': self.shape}) from e
            host.fill_polygon(mask, [point.to_tuple() for point in points], KEEP_COLOR)
        else:
            raise UnusableInput(f'Unknown mask shape: {self.shape}', {'shape': self.shape})
        return mask

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        mask = self.build_mask(image)
        working = host.resize(image, mask.width, mask.height)
        masked = ApplyMask(mask=mask).apply(working, context)
        return host.resize(masked, image.width, image.height)


@register_filter
@dataclass(frozen=True)
class Reflection(Filter):
    """Appends a mirrored, fading copy of the bottom of the image.

    The canvas grows by ``gap + height - 1`` rows filled with ``color``. Below
    the gap the image's bottom rows appear mirrored, their opacity fading
    linearly from ``starting_opacity`` to ``ending_opacity`` percent.

    ``height`` and ``gap`` accept pixels or percentages of the image height.
    """

    height: int | str = '50%'
    gap: int | str = 0
    starting_opacity: int = 80
    ending_opacity: int = 0
    color: Color = Colors.TRANSPARENT

    def __post_init__(self):
        self._coerce('color', Color.coerce)

    @classmethod
    def from_param_string(cls, params: str, color: Color | str = Colors.TRANSPARENT) -> 'Reflection':
        """Creates the filter from ``"gap,start,end,height"`` (default ``"0,80,0,50%"``).

        Opacities outside 1 to 100 fall back to their defaults.
        """
        parts = [part.strip() for part in (params or '').split(',')]
        parts += [''] * (4 - len(parts))
        gap, start, end, height = parts[:4]

        def opacity(text: str, default: int) -> int:
            try:
                value = int(float(text))
            except ValueError:
                return default
            return value if 0 < value <= 100 else default

        return cls(height=height or '50%', gap=gap or 0,
                   starting_opacity=opacity(start, 80), ending_opacity=opacity(end, 0),
                   color=color)

    @staticmethod
    def to_gd_opacity(percent: float) -> float:
        """Converts a 0 (transparent) to 100 (opaque) percentage to raster alpha."""
        return GD_ALPHA_TRANSPARENT * (1 - percent / 100)

    def row_alphas(self, rows: int) -> np.ndarray:
        """The raster alpha of each reflected row, from the mirror line down."""
        start = self.to_gd_opacity(self.starting_opacity)
        end = self.to_gd_opacity(self.ending_opacity)
        increment = (end - start) / rows
        alphas = np.clip(start + np.arange(rows) * increment, 0, GD_ALPHA_TRANSPARENT)
        return alphas.astype(np.uint8)

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        try:
            rows = parse_dimension(self.height, image.height)
            gap = parse_dimension(self.gap, image.height) or 0
        except ValueError as e:
            raise UnusableInput(str(e), {'height': self.height, 'gap': self.gap}) from e
        if rows is None or rows <= 0:
            raise UnusableInput(f'Reflection height must be positive, got {self.height}',
                                {'height': self.height})
        if gap < 0:
            raise UnusableInput(f'Reflection gap must not be negative, got {self.gap}',
                                {'gap': self.gap})
        rows = min(rows, image.height)
        canvas = Image.create(image.width, image.height + gap + rows - 1, self.color)
        canvas.paste(image, (0, 0))
        visible = rows - 1
        if visible > 0:
            mirrored = image.pixels[image.height - 1:image.height - 1 - visible:-1].copy()
            mirrored[..., 3] = self.row_alphas(rows)[:visible, None]
            top = image.height + gap
            canvas.pixels[top:top + visible] = mirrored
        return canvas


@register_filter
@dataclass(frozen=True)
class Watermark(Filter):
    """Blends a watermark image onto the image.

    ``position`` is either a pair of anchors such as ``"right,bottom"`` or
    ``"repeat,gap_x,gap_y"`` to tile the watermark across the image. Tiles
    are spaced by ``gap_y`` rows, each row is shifted left by ``gap_x``
    pixels against the previous one, a unit-less ``gap_x`` is a percentage
    of the watermark width (default 50%). Unknown anchors fall back to
    ``"center,center"``.

    ``offset`` moves a single watermark, for tiles it widens the spacing.
    The watermark is rotated anti-clockwise by ``rotation`` degrees before
    it is placed and blended with ``opacity`` percent. Images smaller than
    ``min_width`` x ``min_height`` are skipped.
    """

    watermark: Image | None = collaborator()
    min_width: int | str = 0
    min_height: int | str = 0
    opacity: int = 100
    position: str = 'center,center'
    offset_x: int | str = 0
    offset_y: int | str = 0
    rotation: int = 0

    @classmethod
    def from_param_string(cls, params: str, watermark: Image | None = None) -> 'Watermark':
        """Creates the filter from ``"min_dimensions|opacity|position|offset|rotation"``.

        E.g. ``"200,100|50|right,bottom|-10,-10"``. The opacity is clamped to
        0 to 100, empty fields take their defaults.
        """
        parts = [part.strip() for part in (params or '').split('|')]
        parts += [''] * (5 - len(parts))
        min_dims, opacity, position, offset, rotation = parts[:5]
        minimum = parse_pair(min_dims) if min_dims else []
        offsets = parse_pair(offset) if offset else []
        return cls(watermark=watermark,
                   min_width=minimum[0] if minimum and minimum[0] else 0,
                   min_height=minimum[1] if len(minimum) > 1 and minimum[1] else 0,
                   opacity=max(min(abs(int(float(opacity))), 100), 0) if opacity else 100,
                   position=position or 'center,center',
                   offset_x=offsets[0] if offsets and offsets[0] else 0,
                   offset_y=offsets[1] if len(offsets) > 1 and offsets[1] else 0,
                   rotation=int(float(rotation)) if rotation else 0)

    @staticmethod
    def _dimension(value: int | str, base: int) -> int:
        try:
            return parse_dimension(value, base) or 0
        except ValueError as e:
            raise UnusableInput(f'Invalid watermark dimension: {value}', {'value': value}) from e

    def anchors(self) -> tuple[HAnchor, VAnchor]:
        """The anchors of a single watermark, center for unknown names."""
        parts = parse_pair(self.position)
        try:
            return HAnchor.from_name(parts[0]), VAnchor.from_name(parts[1] if len(parts) > 1 else '')
        except ValueError:
            logger.warning('Invalid watermark position %r, using center', self.position)
            return HAnchor.CENTER, VAnchor.CENTER

    def tile_positions(self, image: Box, mark: Box, offset: Point) -> list[Point]:
        """The top-left corners of all tiles which overlap the image."""
        parts = parse_pair(self.position)
        gap_x = parts[1] if len(parts) > 1 and parts[1] else '50%'
        if len(parts) < 3 and not gap_x.endswith(('%', 'px')):
            gap_x += '%'
        gap_y = parts[2] if len(parts) > 2 and parts[2] else 0
        shift = max(min(self._dimension(gap_x, mark.width), mark.width), 0)
        spacing = max(min(self._dimension(gap_y, mark.height), mark.height), 0)
        pitch_x = mark.width + offset.x
        pitch_y = mark.height + spacing + offset.y
        if pitch_x <= 0 or pitch_y <= 0:
            raise UnusableInput('Watermark offset leaves no room for the tiles',
                                {'offset': offset.to_dict()})
        positions = []
        row = 0
        y = spacing + offset.y
        while y < image.height:
            x = offset.x - (row * shift) % pitch_x
            if x > 0:
                x -= pitch_x
            while x < image.width:
                if y + mark.height > 0 and x + mark.width > 0:
                    positions.append(Point(x, y))
                x += pitch_x
            row += 1
            y += pitch_y
        return positions

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        if self.watermark is None:
            raise UnusableInput('No watermark image given')
        min_width = self._dimension(self.min_width, image.width)
        min_height = self._dimension(self.min_height, image.height)
        if min_width > image.width or min_height > image.height:
            raise UnusableInput('Image is too small for the watermark',
                                {'min_width': min_width, 'min_height': min_height})
        mark = host.rotate(self.watermark, self.rotation) if self.rotation else self.watermark
        offset = Point(self._dimension(self.offset_x, image.width),
                       self._dimension(self.offset_y, image.height))
        layer = Image.create(image.width, image.height, Colors.TRANSPARENT)
        if parse_pair(self.position)[0].lower() == 'repeat':
            positions = self.tile_positions(image.size, mark.size, offset)
        else:
            positions = [place(image.size, mark.size, *self.anchors(), offset)]
        logger.debug('placing %d watermark(s)', len(positions))
        for position in positions:
            layer.paste(mark, position)
        result = image.copy()
        result.paste(Opacity(opacity=self.opacity).apply(layer, context))
        return result


@register_filter
@dataclass(frozen=True)
class DrawRectangle(Filter):
    """Draws the outline of a rectangle from ``position`` to ``position + box``."""

    position: Point = field(default_factory=Point)
    box: Box = field(default_factory=lambda: Box(0, 0))
    color: Color = Colors.BLACK
    thickness: int = 1

    def __post_init__(self):
        self._coerce('position', Point.coerce)
        self._coerce('box', Box.coerce)
        self._coerce('color', Color.coerce)

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        result = image.copy()
        x, y = self.position.to_tuple()
        host.draw_rectangle(result, x, y, x + self.box.width, y + self.box.height,
                            self.color, self.thickness)
        return result


@register_filter
@dataclass(frozen=True)
class FaceRectangles(Filter):
    """Outlines detected faces.

    ``faces`` holds the boxes of a face detection run: the first box encloses
    all faces and is drawn in ``outline_color``, the single faces follow and
    are drawn in ``face_color``. If no boxes are given they are requested
    from ``detector``. With fewer than two boxes nothing is drawn.
    """

    faces: list[Rectangle] = field(default_factory=list)
    outline_color: Color = field(default_factory=lambda: parse_color(_setting_default('face_outline_color')))
    face_color: Color = field(default_factory=lambda: parse_color(_setting_default('face_secondary_color')))
    min_size: int = field(default_factory=lambda: _setting_default('face_rectangle_min_size'))
    thickness: int = field(default_factory=lambda: _setting_default('face_rectangle_thickness'))
    sensitivity: int = 3
    detector: FaceDetector | None = collaborator()

    def __post_init__(self):
        self._coerce('faces', lambda faces: [Rectangle.coerce(face) for face in faces])
        self._coerce('outline_color', Color.coerce)
        self._coerce('face_color', Color.coerce)

    @classmethod
    def from_settings(cls, settings: Settings, **params) -> 'FaceRectangles':
        """Creates the filter with the colors and sizes configured in ``settings``."""
        return cls(outline_color=settings.face_outline_color,
                   face_color=settings.face_secondary_color,
                   min_size=settings.face_rectangle_min_size,
                   thickness=settings.face_rectangle_thickness,
                   **params)

    def build_pipeline(self, faces: list[Rectangle]) -> FilterPipeline:
        """Creates the pipeline drawing one rectangle per box."""
        pipeline = FilterPipeline()
        color = self.outline_color
        for index, face in enumerate(faces, start=1):
            face = face.with_min_size(self.min_size, self.min_size)
            pipeline.add(DrawRectangle(position=face.position, box=face.box,
                                       color=color, thickness=self.thickness),
                         priority=index)
            color = self.face_color
        return pipeline

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        faces = self.faces
        if not faces and self.detector is not None:
            faces = self.detector.detect(image, self.sensitivity)
        if len(faces) < 2:
            raise UnusableInput('No faces found', {'faces': [face.to_dict() for face in faces]})
        logger.debug('outlining %d faces', len(faces) - 1)
        context = context if context is not None else FilterContext()
        return self.build_pipeline(faces).apply(image, context.branch('face_rectangles'))


__all__ = [
    'ApplyMask',
    'MaskBorder',
    'BoxBorder',
    'RoundedCorners',
    'Mask',
    'Reflection',
    'Watermark',
    'DrawRectangle',
    'FaceRectangles',
    'CORNERS',
]
