"""
Font and glyph services used by the text overlay.

A :class:`FontService` measures text, wraps it to a pixel width and renders
a block of lines into a canvas. :class:`PillowFontService` implements it with
Pillow's FreeType bindings and caches loaded font handles.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from threading import RLock
from typing import Protocol, runtime_checkable

import PIL.Image
import PIL.ImageDraw
import PIL.ImageFont

from .color import Color, Colors
from .errors import HostOperationError
from .geometry import Point
from .image import Image

logger = logging.getLogger(__name__)

TEXT_ALIGNMENTS = ("left", "center", "right")
"Supported horizontal text alignments"


@dataclass(frozen=True)
class TextStyle:
    """How a block of text is drawn."""

    font_size: int = 12
    "Font size in pixels"
    line_height: float = 1.25
    "Distance between two baselines as multiple of the font size"
    color: Color = Colors.BLACK
    font_path: str | None = None
    "TrueType font file, None for the bundled default font"
    align: str = "center"
    "left, center or right"
    text_background: Color = Colors.TRANSPARENT
    "Filled behind each line's text"
    shadow_color: Color | None = None
    shadow_offset: Point = field(default_factory=lambda: Point(1, 1))


@runtime_checkable
class FontService(Protocol):
    """Measures, wraps and renders text."""

    def measure(self, text: str, font_size: int, font_path: str | None = None) -> float:
        ...

    def wrap(self, text: str, width: int, font_size: int,
             font_path: str | None = None) -> tuple[str, int]:
        ...

    def render(self, canvas: Image, text: str, style: TextStyle) -> Image:
        ...


class PillowFontService:
    """
    :class:`FontService` based on Pillow.

    :param default_font_path: Font used if a request names none. If None
        Pillow's bundled default font is used.
    """

    def __init__(self, default_font_path: str | Path | None = None):
        self.default_font_path = str(default_font_path) if default_font_path else None
        self._cached_fonts: dict[tuple[str | None, int], PIL.ImageFont.FreeTypeFont] = {}
        self._cache_lock = RLock()

    def get_font(self, font_size: int, font_path: str | None = None):
        """
        Returns a (cached) font handle.

        :param font_size: Size in pixels
        :param font_path: TrueType file, None for the default font
        :raises HostOperationError: If the font can not be loaded
        """
        if font_size <= 0:
            raise HostOperationError(f"Font size must be positive, got {font_size}",
                                     {"font_size": font_size})
        path = font_path or self.default_font_path
        cache_key = (path, int(font_size))
        with self._cache_lock:
            if cache_key in self._cached_fonts:
                return self._cached_fonts[cache_key]
        try:
            if path is None:
                font = PIL.ImageFont.load_default(size=font_size)
            else:
                font = PIL.ImageFont.truetype(path, int(font_size))
        except OSError as e:
            logger.warning("Failed to load font %s: %s", path, e)
            raise HostOperationError(f"Font {path} could not be loaded: {e}",
                                     {"font_path": path}) from e
        with self._cache_lock:
            self._cached_fonts[cache_key] = font
        return font

    def measure(self, text: str, font_size: int, font_path: str | None = None) -> float:
        """Returns the advance width of a single line of text in pixels."""
        return self.get_font(font_size, font_path).getlength(text)

    def _split_word(self, word: str, width: int, font) -> list[str]:
        if font.getlength(word) <= width:
            return [word]
        pieces = []
        rest = word
        while rest and font.getlength(rest) > width:
            cut = len(rest) - 1
            while cut > 1 and font.getlength(rest[:cut] + "-") > width:
                cut -= 1
            if cut < 1:
                break
            pieces.append(rest[:cut] + "-")
            rest = rest[cut:]
        if rest:
            pieces.append(rest)
        return pieces

    def wrap(self, text: str, width: int, font_size: int,
             font_path: str | None = None) -> tuple[str, int]:
        """
        Wraps text at word boundaries so no line exceeds ``width`` pixels.
        Words longer than a line are hyphenated.

        :return: The wrapped text (lines separated by newlines) and the
            number of rows
        """
        if not text:
            return "", 0
        font = self.get_font(font_size, font_path)
        rows = []
        for paragraph in text.split("\n"):
            current = ""
            for word in paragraph.split():
                for piece in self._split_word(word, width, font):
                    candidate = f"{current} {piece}" if current else piece
                    if current and font.getlength(candidate) > width:
                        rows.append(current)
                        current = piece
                    else:
                        current = candidate
            rows.append(current)
        return "\n".join(rows), len(rows)

    def render(self, canvas: Image, text: str, style: TextStyle) -> Image:
        """
        Draws a block of lines onto a copy of ``canvas``.

        Each line is aligned within the canvas width. The line background is
        drawn first, then the shadow, then the text itself.

        :return: The canvas with the text
        """
        if style.align not in TEXT_ALIGNMENTS:
            raise HostOperationError(f"Unknown text alignment: {style.align}", {"align": style.align})
        font = self.get_font(style.font_size, style.font_path)
        base = canvas.to_pil()
        step = style.line_height * style.font_size
        placements = []
        for index, line in enumerate(text.split("\n")):
            length = font.getlength(line)
            if style.align == "left":
                x = 0.0
            elif style.align == "right":
                x = canvas.width - length
            else:
                x = (canvas.width - length) / 2
            placements.append((x, index * step, line, length))

        def draw_pass(painter):
            nonlocal base
            layer = PIL.Image.new("RGBA", base.size, (0, 0, 0, 0))
            painter(PIL.ImageDraw.Draw(layer))
            base = PIL.Image.alpha_composite(base, layer)

        if not style.text_background.is_transparent:
            def paint_background(draw):
                for x, y, line, length in placements:
                    if line:
                        draw.rectangle([x, y, x + length, y + step - 1],
                                       fill=style.text_background.to_rgba())
            draw_pass(paint_background)
        if style.shadow_color is not None and not style.shadow_color.is_transparent:
            offset = style.shadow_offset

            def paint_shadow(draw):
                for x, y, line, _ in placements:
                    draw.text((x + offset.x, y + offset.y), line, font=font,
                              fill=style.shadow_color.to_rgba())
            draw_pass(paint_shadow)

        def paint_text(draw):
            for x, y, line, _ in placements:
                draw.text((x, y), line, font=font, fill=style.color.to_rgba())
        draw_pass(paint_text)
        return Image.from_pil(base)


__all__ = ["FontService", "PillowFontService", "TextStyle", "TEXT_ALIGNMENTS"]
