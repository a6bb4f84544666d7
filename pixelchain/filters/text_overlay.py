# PixelChain Filters - Text Overlay
"""
Renders a block of text onto an image.

The filter is configured with a single pipe separated parameter string of up
to 17 positional fields::

    text | min_dimensions | font_size | line_height | font_color | font_path |
    align | width | position | offset | opacity | shadow_color |
    shadow_offset | shadow_opacity | box_background | text_background |
    rotation

Missing or empty fields take their defaults, e.g. ``"Hello"`` renders black
12px text centered on the image, ``"Hello||24||#ffffff||left|50%|left,bottom|10,-10"``
renders white 24px text in a box half as wide as the image, 10 pixels away
from the lower left corner.
The line height is a multiplier (``1.5``), a percentage of the font size
(``150%``) or a distance in pixels (``18px``).

Processing follows these steps:

1. The text is sanitized: line break markup becomes a newline, other tags
   are removed and HTML entities are decoded.
2. The text is wrapped to the box width, the box is as high as the rows.
3. Box background, text background, shadow and text are drawn into the box.
4. The box is rotated anti-clockwise around its center, growing as required.
5. The box is placed on a 3x3 anchor grid plus an offset and blended onto
   the image. The box may extend beyond the image borders.
"""

from __future__ import annotations

import html
import logging
import math
import re
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from pixelchain import host
from pixelchain.color import Color, Colors, parse_color
from pixelchain.config import Settings
from pixelchain.dimensions import parse_dimension, parse_font_size, parse_pair
from pixelchain.errors import UnusableInput
from pixelchain.fonts import FontService, PillowFontService, TextStyle
from pixelchain.geometry import Box, HAnchor, Point, VAnchor, place
from pixelchain.image import Image
from .base import Filter, FilterContext, collaborator, register_filter

logger = logging.getLogger(__name__)

FIELD_COUNT = 17
"Number of positional fields in a text overlay parameter string"

_LINE_BREAKS = ('\\n', '<br />', '<br>', '</p>')
_TAG_PATTERN = re.compile(r'<[^>]*>')


def sanitize_text(text: str) -> str:
    """Converts markup to plain text lines.

    Line break markup (``\\n`` written literally, ``<br>``, ``<br />`` and
    ``</p>``) becomes a newline, all other tags are dropped, HTML entities are
    decoded and every line is trimmed.
    """
    for marker in _LINE_BREAKS:
        text = text.replace(marker, '\n')
    text = _TAG_PATTERN.sub('', text)
    text = html.unescape(text).replace('\xa0', ' ')
    return '\n'.join(line.strip() for line in text.split('\n'))


def _opacity(text: str, default: float) -> float:
    if not text:
        return default
    return max(min(round(abs(int(float(text))) / 100, 2), 1.0), 0.0)


def _line_height(text: str, font_size: int) -> float:
    """Converts a line height field into a multiple of the font size.

    Percentages and ``px`` values refer to the font size. A bare number below
    the font size is a multiplier (``"1.5"``), any other bare number a
    distance in pixels (``"18"`` at 12px is 1.5).
    """
    value = text.lower()
    if value.endswith('%') or value.endswith('px'):
        multiple = parse_dimension(value, font_size) / font_size
    else:
        number = float(value)
        if not math.isfinite(number):
            raise ValueError(f'Invalid line height: {text!r}')
        multiple = number if number < font_size else number / font_size
    if multiple <= 0:
        raise ValueError(f'Line height must be positive, got {text!r}')
    return round(multiple, 2)


class TextOverlayParams(BaseModel):
    """The decoded parameter string of a :class:`TextOverlay`.

    Dimensions are already resolved against the image size, see :meth:`parse`.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    text: str = ''
    min_width: int = 0
    min_height: int = 0
    font_size: int = Field(default=12, gt=0)
    line_height: float = 1.25
    "Distance of two baselines as multiple of the font size"
    font_color: Color = Colors.BLACK
    font_path: str | None = None
    align: str = 'center'
    width: int = 0
    "Width of the text box in pixels"
    position: tuple[HAnchor, VAnchor] = (HAnchor.CENTER, VAnchor.CENTER)
    offset: Point = Point(0, 0)
    opacity: float = Field(default=1.0, ge=0.0, le=1.0)
    shadow_color: Color | None = None
    shadow_offset: Point = Point(1, 1)
    shadow_opacity: float = Field(default=1.0, ge=0.0, le=1.0)
    box_background: Color = Colors.TRANSPARENT
    text_background: Color = Colors.TRANSPARENT
    rotation: int = 0

    @classmethod
    def parse(cls, params: str, image_width: int, image_height: int,
              settings: Settings | None = None) -> 'TextOverlayParams':
        """Decodes a pipe separated parameter string.

        :param params: The parameter string
        :param image_width: Reference for horizontal percentages
        :param image_height: Reference for vertical percentages
        :param settings: Provides the default font, size and line height
        :raises ValueError: If a field can not be interpreted
        """
        settings = settings if settings is not None else Settings()
        fields = (params or '').split('|')[:FIELD_COUNT]
        fields += [''] * (FIELD_COUNT - len(fields))
        fields = [field.strip() for field in fields]
        (text, min_dims, font_size, line_height, font_color, font_path, align, width,
         position, offset, opacity, shadow_color, shadow_offset, shadow_opacity,
         box_background, text_background, rotation) = fields

        min_parts = parse_pair(min_dims) if min_dims else []
        min_width = parse_dimension(min_parts[0], image_width) if min_parts else None
        min_height = parse_dimension(min_parts[1], image_height) if len(min_parts) > 1 else None

        size = parse_font_size(font_size, settings.default_font_size)
        if size <= 0:
            raise ValueError(f'Font size must be positive, got {font_size!r}')
        if line_height:
            line_height_value = _line_height(line_height, size)
        else:
            line_height_value = round(settings.default_line_height, 2)

        if width:
            requested = parse_dimension(width, image_width)
            if requested > 0:
                box_width = min(requested, image_width)
            else:
                box_width = min(max(image_width + requested, 0), image_width)
        else:
            box_width = image_width

        anchors = parse_pair(position) if position else []
        h_anchor = HAnchor.from_name(anchors[0] if anchors else '', HAnchor.CENTER)
        v_anchor = VAnchor.from_name(anchors[1] if len(anchors) > 1 else '', VAnchor.CENTER)

        offsets = parse_pair(offset) if offset else []
        offset_point = Point(parse_dimension(offsets[0], image_width) or 0 if offsets else 0,
                             parse_dimension(offsets[1], image_height) or 0 if len(offsets) > 1 else 0)

        shadow_parts = parse_pair(shadow_offset) if shadow_offset else []
        shadow_point = Point(
            parse_dimension(shadow_parts[0], image_width) if shadow_parts and shadow_parts[0] else 1,
            parse_dimension(shadow_parts[1], image_width) if len(shadow_parts) > 1 and shadow_parts[1] else 1)

        default_font = str(settings.default_font_path) if settings.default_font_path else None
        return cls(
            text=text,
            min_width=min_width or 0,
            min_height=min_height or 0,
            font_size=size,
            line_height=line_height_value,
            font_color=parse_color(font_color) if font_color else Colors.BLACK,
            font_path=font_path or default_font,
            align=align.lower() or 'center',
            width=box_width,
            position=(h_anchor, v_anchor),
            offset=offset_point,
            opacity=_opacity(opacity, 1.0),
            shadow_color=parse_color(shadow_color) if shadow_color else None,
            shadow_offset=shadow_point,
            shadow_opacity=_opacity(shadow_opacity, 1.0),
            box_background=parse_color(box_background) if box_background else Colors.TRANSPARENT,
            text_background=parse_color(text_background) if text_background else Colors.TRANSPARENT,
            rotation=int(float(rotation)) if rotation else 0,
        )

    def style(self) -> TextStyle:
        """The rendering style with the opacities applied to the colors."""
        shadow = self.shadow_color.with_opacity(self.shadow_opacity) if self.shadow_color else None
        return TextStyle(font_size=self.font_size,
                         line_height=self.line_height,
                         color=self.font_color.with_opacity(self.opacity),
                         font_path=self.font_path,
                         align=self.align,
                         text_background=self.text_background,
                         shadow_color=shadow,
                         shadow_offset=self.shadow_offset)


@register_filter
@dataclass(frozen=True)
class TextOverlay(Filter):
    """Draws wrapped, optionally rotated text onto the image.

    :param params: Pipe separated parameter string, see the module
        documentation
    :param font_service: Measures, wraps and renders the text. If None a
        :class:`PillowFontService` is used.
    :param settings: Default font, font size and line height
    """

    params: str = ''
    font_service: FontService | None = collaborator()
    settings: Settings | None = collaborator()

    def parse(self, image: Image) -> TextOverlayParams:
        """Decodes the parameter string for the given image."""
        try:
            return TextOverlayParams.parse(self.params, image.width, image.height, self.settings)
        except ValueError as e:
            # pydantic's ValidationError is a ValueError as well
            raise UnusableInput(f'Invalid text overlay parameters: {e}',
                                {'params': self.params}) from e

    def render_box(self, params: TextOverlayParams, text: str) -> Image:
        """Wraps and renders the text into its (rotated) box."""
        fonts = self.font_service if self.font_service is not None else PillowFontService()
        wrapped, rows = fonts.wrap(text, params.width, params.font_size, params.font_path)
        box_height = int(rows * params.line_height * params.font_size)
        if box_height <= 0:
            raise UnusableInput('Text box has no height', {'rows': rows})
        settings = self.settings if self.settings is not None else Settings()
        canvas = Image.create(params.width, box_height, params.box_background,
                              max_pixels=settings.max_canvas_pixels)
        box = fonts.render(canvas, wrapped, params.style())
        if params.rotation:
            box = host.rotate(box, params.rotation, Colors.TRANSPARENT)
        return box

    def apply(self, image: Image, context: FilterContext | None = None) -> Image:
        if not self.params or not self.params.split('|')[0].strip():
            raise UnusableInput('No text to overlay')
        params = self.parse(image)
        if params.min_width > image.width or params.min_height > image.height:
            raise UnusableInput('Image is too small for the text overlay',
                                {'min_width': params.min_width, 'min_height': params.min_height})
        text = sanitize_text(params.text)
        if not text.strip():
            raise UnusableInput('No text left after removing markup', {'text': params.text})
        if params.width == 0:
            raise UnusableInput('Text box width is zero', {'width': params.width})

        box = self.render_box(params, text)
        h_anchor, v_anchor = params.position
        at = place(image.size, Box(box.width, box.height), h_anchor, v_anchor, params.offset)
        logger.debug('placing %dx%d text box at %s', box.width, box.height, at.to_tuple())
        result = image.copy()
        result.paste(box, at)
        return result


__all__ = ['TextOverlay', 'TextOverlayParams', 'sanitize_text', 'FIELD_COUNT']
