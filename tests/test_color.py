"""
Tests the Color class, colour parsing and the HSL conversion
"""

import numpy as np
import pytest

from pixelchain import Color, Colors, parse_color
from pixelchain.color import (
    GD_ALPHA_OPAQUE,
    GD_ALPHA_TRANSPARENT,
    alpha_array_to_gd,
    alpha_to_gd,
    gd_array_to_alpha,
    gd_to_alpha,
    hsl_array_to_rgb,
    hsl_to_rgb,
    rgb_array_to_hsl,
    rgb_to_hsl,
)


class TestAlphaScales:
    """Conversion between the conventional and the raster alpha scale."""

    def test_extremes(self):
        assert alpha_to_gd(255) == GD_ALPHA_OPAQUE
        assert alpha_to_gd(0) == GD_ALPHA_TRANSPARENT
        assert gd_to_alpha(GD_ALPHA_OPAQUE) == 255
        assert gd_to_alpha(GD_ALPHA_TRANSPARENT) == 0

    def test_raster_alpha_survives_round_trip(self):
        for gd_alpha in range(GD_ALPHA_TRANSPARENT + 1):
            assert alpha_to_gd(gd_to_alpha(gd_alpha)) == gd_alpha

    def test_vectorized_matches_scalar(self):
        gd_values = np.arange(128, dtype=np.uint8)
        alpha = gd_array_to_alpha(gd_values)
        assert [int(a) for a in alpha] == [gd_to_alpha(g) for g in range(128)]
        assert np.array_equal(alpha_array_to_gd(alpha), gd_values)

    def test_out_of_range_is_clamped(self):
        assert alpha_to_gd(300) == 0
        assert gd_to_alpha(200) == 0


class TestColor:
    """Construction and conversion of colours."""

    def test_defaults_to_opaque(self):
        color = Color(10, 20, 30)
        assert color.alpha == 255
        assert color.gd_alpha == 0
        assert color.to_gd() == (10, 20, 30, 0)

    def test_channel_validation(self):
        with pytest.raises(ValueError):
            Color(256, 0, 0)
        with pytest.raises(ValueError):
            Color(0, -1, 0)
        with pytest.raises(TypeError):
            # noinspection PyTypeChecker
            Color(0.5, 0, 0)

    def test_immutable(self):
        color = Color(1, 2, 3)
        with pytest.raises(AttributeError):
            # noinspection PyDataclass
            color.red = 5

    def test_from_gd(self):
        assert Color.from_gd(1, 2, 3, 127) == Color(1, 2, 3, 0)
        assert Color.from_gd(1, 2, 3).alpha == 255

    def test_coerce(self):
        assert Color.coerce("#ff0000") == Colors.RED
        assert Color.coerce((0, 0, 255)) == Colors.BLUE
        assert Color.coerce([0, 255, 0, 0]) == Color(0, 255, 0, 0)
        assert Color.coerce(Colors.WHITE) is Colors.WHITE
        with pytest.raises(TypeError):
            Color.coerce(12)

    def test_opacity(self):
        assert Colors.BLACK.with_opacity(0.5).alpha == 128
        assert Colors.BLACK.with_opacity(2).alpha == 255
        assert Colors.BLACK.with_opacity(0).is_transparent

    def test_hex(self):
        assert Colors.RED.to_hex() == "#ff0000"
        assert str(Color(1, 2, 3, 4)) == "#01020304"


class TestParseColor:
    """Parsing of colour strings."""

    def test_hex_forms(self):
        assert parse_color("#f00") == Colors.RED
        assert parse_color("00ff00") == Colors.GREEN
        assert parse_color("#0000ff80") == Color(0, 0, 255, 128)
        assert parse_color("#fff8") == Color(255, 255, 255, 0x88)

    def test_rgb_forms(self):
        assert parse_color("rgb(1, 2, 3)") == Color(1, 2, 3)
        assert parse_color("rgba(10,20,30,0.5)") == Color(10, 20, 30, 128)
        assert parse_color("rgba(0,0,0,0)").is_transparent
        assert parse_color("RGB(300,0,0)") == Colors.RED

    def test_named_forms(self):
        assert parse_color("red") == Colors.RED
        assert parse_color(" White ") == Colors.WHITE
        assert parse_color("navy") == Color(0, 0, 128)
        assert parse_color("hsl(120, 100%, 50%)") == Color(0, 255, 0)

    @pytest.mark.parametrize("text", ["", "nope", "#12345", "#red", "rgb(1,2)", "rgba(a,b,c,d)"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_color(text)


class TestHsl:
    """RGB to HSL conversion and back."""

    def test_primaries(self):
        assert rgb_to_hsl(255, 0, 0) == (0.0, 1.0, 0.5)
        assert rgb_to_hsl(0, 255, 0) == (120.0, 1.0, 0.5)
        assert rgb_to_hsl(0, 0, 255) == (240.0, 1.0, 0.5)

    def test_gray_has_no_hue(self):
        hue, saturation, lightness = rgb_to_hsl(128, 128, 128)
        assert hue == 0.0 and saturation == 0.0
        assert lightness == pytest.approx(0.502, abs=1e-3)

    def test_magenta_hue(self):
        assert rgb_to_hsl(255, 0, 255)[0] == 300.0

    def test_back_conversion(self):
        assert hsl_to_rgb(0, 1, 0.5) == (255, 0, 0)
        assert hsl_to_rgb(240, 1, 0.5) == (0, 0, 255)
        assert hsl_to_rgb(0, 0, 1) == (255, 255, 255)

    def test_vectorized_matches_scalar(self):
        colors = np.array([[[255, 0, 0], [12, 200, 99], [30, 30, 30], [250, 128, 7]]], dtype=np.uint8)
        hue, saturation, lightness = rgb_array_to_hsl(colors)
        for index, rgb in enumerate(colors[0]):
            expected = rgb_to_hsl(*[int(c) for c in rgb])
            assert (hue[0, index], saturation[0, index], lightness[0, index]) == pytest.approx(expected)
        back = hsl_array_to_rgb(hue, saturation, lightness)
        assert back.shape == colors.shape
        assert tuple(back[0, 0]) == (255, 0, 0)
