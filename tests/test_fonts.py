"""
Tests the Pillow based font service
"""

import pytest

from pixelchain import Colors, Image, PillowFontService, TextStyle
from pixelchain.errors import HostOperationError


@pytest.fixture(scope="module")
def fonts() -> PillowFontService:
    return PillowFontService()


class TestPillowFontService:
    """Measuring, wrapping and rendering with the bundled font."""

    def test_font_cache(self, fonts):
        assert fonts.get_font(14) is fonts.get_font(14)
        with pytest.raises(HostOperationError):
            fonts.get_font(0)

    def test_missing_font_file(self, fonts):
        with pytest.raises(HostOperationError):
            fonts.get_font(12, "/nonexistent/font.ttf")

    def test_measure_grows_with_text(self, fonts):
        assert fonts.measure("Hello World", 16) > fonts.measure("Hello", 16) > 0

    def test_wrap_respects_width(self, fonts):
        text = "the quick brown fox jumps over the lazy dog"
        wrapped, rows = fonts.wrap(text, 60, 12)
        assert rows > 1
        assert rows == len(wrapped.split("\n"))
        for line in wrapped.split("\n"):
            assert " " not in line or fonts.measure(line, 12) <= 60

    def test_wrap_keeps_paragraphs(self, fonts):
        wrapped, rows = fonts.wrap("a\nb", 500, 12)
        assert (wrapped, rows) == ("a\nb", 2)
        assert fonts.wrap("", 100, 12) == ("", 0)

    def test_wrap_hyphenates_long_words(self, fonts):
        wrapped, rows = fonts.wrap("Donaudampfschifffahrtsgesellschaft", 50, 12)
        assert rows > 1
        assert wrapped.split("\n")[0].endswith("-")

    def test_render_draws_text(self, fonts):
        canvas = Image.create(80, 20, Colors.WHITE)
        result = fonts.render(canvas, "Hi", TextStyle(font_size=14, color=Colors.BLACK))
        assert result.size == canvas.size
        assert result != canvas
        assert canvas == Image.create(80, 20, Colors.WHITE)

    def test_render_alignment(self, fonts):
        canvas = Image.create(100, 16)
        left = fonts.render(canvas, "x", TextStyle(align="left"))
        right = fonts.render(canvas, "x", TextStyle(align="right"))
        assert left.gd_alpha[:, :50].min() < 127
        assert right.gd_alpha[:, :50].min() == 127
        with pytest.raises(HostOperationError):
            fonts.render(canvas, "x", TextStyle(align="justify"))

    def test_render_text_background(self, fonts):
        canvas = Image.create(60, 20)
        style = TextStyle(color=Colors.WHITE, text_background=Colors.BLUE, align="left")
        result = fonts.render(canvas, "Wide text", style)
        assert result.get_pixel(0, 14) == Colors.BLUE
