"""Tests for computed value normalization."""

import pytest

from style_extract.values import (
    font_size_to_mixin_arg,
    format_number,
    normalize_value,
    px_to_em,
    px_to_unitless,
    rgb_to_hex,
)


# ---------------------------------------------------------------------------
# Colours
# ---------------------------------------------------------------------------


class TestRgbToHex:
    def test_opaque_rgb(self):
        assert rgb_to_hex("rgb(255, 0, 0)") == "#ff0000"

    def test_translucent_rgba_unchanged(self):
        assert rgb_to_hex("rgba(255,0,0,0.5)") == "rgba(255,0,0,0.5)"

    def test_rgba_with_full_alpha(self):
        assert rgb_to_hex("rgba(16, 32, 48, 1)") == "#102030"

    def test_space_separated_syntax(self):
        assert rgb_to_hex("rgb(255 255 255)") == "#ffffff"
        assert rgb_to_hex("rgb(0 0 0 / 50%)") == "rgb(0 0 0 / 50%)"

    def test_each_occurrence_converted_independently(self):
        shadow = "rgb(0, 0, 0) 0px 1px 2px 0px, rgba(0, 0, 0, 0.2) 0px 2px 4px 0px"
        assert rgb_to_hex(shadow) == "#000000 0px 1px 2px 0px, rgba(0, 0, 0, 0.2) 0px 2px 4px 0px"

    def test_non_colour_text_untouched(self):
        assert rgb_to_hex("1px solid") == "1px solid"


# ---------------------------------------------------------------------------
# Unit conversion
# ---------------------------------------------------------------------------


class TestUnitConversion:
    def test_line_height_ratio(self):
        assert px_to_unitless("24px", 16) == "1.5"

    def test_letter_spacing_em(self):
        assert px_to_em("4px", 16) == "0.25em"

    def test_ratio_is_trimmed_to_four_decimals(self):
        assert px_to_unitless("10px", 3) == "3.3333"
        assert px_to_unitless("21px", 16) == "1.3125"

    def test_unknown_font_size_leaves_value(self):
        assert px_to_unitless("24px", None) == "24px"
        assert px_to_em("2px", 0) == "2px"

    def test_non_px_value_left_alone(self):
        assert px_to_unitless("normal", 16) == "normal"
        assert px_to_em("0.1em", 16) == "0.1em"

    @pytest.mark.parametrize("value,expected", [(16.0, "16"), (0.0, "0"), (1.25, "1.25"), (-0.0, "0")])
    def test_format_number(self, value, expected):
        assert format_number(value) == expected


class TestNormalizeValue:
    def test_colour_property(self):
        assert normalize_value("border-color", "rgb(1, 2, 3)") == "#010203"

    def test_non_colour_property_keeps_rgb(self):
        assert normalize_value("content", "rgb(0, 0, 0)") == "rgb(0, 0, 0)"

    def test_line_height(self):
        assert normalize_value("line-height", "28px", 16.0) == "1.75"

    def test_letter_spacing(self):
        assert normalize_value("letter-spacing", "1.6px", 16.0) == "0.1em"

    def test_other_properties_pass_through(self):
        assert normalize_value("width", "320px", 16.0) == "320px"


class TestFontSizeMixinArg:
    def test_px(self):
        assert font_size_to_mixin_arg("16px", 10.0) == "16"

    def test_rem_uses_root_size(self):
        assert font_size_to_mixin_arg("1.4rem", 10.0) == "14"

    def test_other_units_unsupported(self):
        assert font_size_to_mixin_arg("1.2em", 10.0) is None
