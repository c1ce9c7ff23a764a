"""Tests for colour parsing and light/dark classification."""

import pytest

from zepress.css.colors import ThemeColors, default_colors, is_dark, luminance, parse_colors_from_css, parse_rgb


class TestParseRgb:
    """Test colour parsing."""

    @pytest.mark.parametrize(
        "color,expected",
        [
            ("#000", (0, 0, 0)),
            ("#fff", (255, 255, 255)),
            ("#ffff", (255, 255, 255)),
            ("#1e1e1e", (30, 30, 30)),
            ("#1e1e1e80", (30, 30, 30)),
            ("rgb(10, 20, 30)", (10, 20, 30)),
            ("rgba(10, 20, 30, 0.5)", (10, 20, 30)),
            ("rgb(100%, 0%, 0%)", (255, 0, 0)),
            ("rgb(10 20 30 / 50%)", (10, 20, 30)),
            ("  WHITE ", (255, 255, 255)),
        ],
    )
    def test_supported_formats(self, color, expected):
        assert parse_rgb(color) == expected

    @pytest.mark.parametrize("color", ["", "#12", "rgb(1, 2)", "hsl(0, 0%, 0%)", "transparent", "rgb(a, b, c)"])
    def test_unsupported_values(self, color):
        assert parse_rgb(color) is None


class TestIsDark:
    """Test luminance-based classification."""

    def test_luminance_formula(self):
        assert luminance("#ffffff") == pytest.approx(1.0)
        assert luminance("#000000") == pytest.approx(0.0)
        assert luminance("rgb(255, 0, 0)") == pytest.approx(0.299)

    @pytest.mark.parametrize("color", ["#000", "#282c34", "rgb(30, 30, 30)", "#1e1e1eff", "navy"])
    def test_dark_colors(self, color):
        assert is_dark(color) is True

    @pytest.mark.parametrize("color", ["#fff", "#f6f8fa", "rgba(255, 255, 255, 0.5)", "#808080"])
    def test_light_colors(self, color):
        assert is_dark(color) is False

    def test_unparseable_is_light(self):
        assert is_dark("not-a-colour") is False


class TestParseColorsFromCss:
    """Test background/foreground extraction from theme CSS."""

    def test_hljs_rule(self):
        colors = parse_colors_from_css(".hljs { background: #282c34; color: #abb2bf; }")
        assert colors == ThemeColors(background="#282c34", foreground="#abb2bf")
        assert colors.is_dark

    def test_missing_foreground_uses_default_pair(self):
        colors = parse_colors_from_css("pre { background-color: #ffffff; }")
        assert colors.background == "#ffffff"
        assert colors.foreground == default_colors(False).foreground

    def test_selector_priority(self):
        css = ".highlight { background: #000000; } .hljs { background: #ffffff; }"
        assert parse_colors_from_css(css).background == "#ffffff"

    def test_foreground_from_later_rule(self):
        css = ".hljs { background: #ffffff; } .hljs, .other { color: #333333; }"
        colors = parse_colors_from_css(css)
        assert colors.foreground == "#333333"

    def test_background_shorthand_with_image(self):
        colors = parse_colors_from_css(".hljs { background: url(x.png) #101010 no-repeat; }")
        assert colors.background == "#101010"

    def test_comments_in_selectors_and_declarations(self):
        css = "/* theme */ .hljs /* block */ { /* bg */ background: #1e1e1e; color: #d4d4d4; }"
        assert parse_colors_from_css(css) == ThemeColors("#1e1e1e", "#d4d4d4")

    def test_rule_nested_in_media_block(self):
        css = "@media screen { .hljs { background: #002b36; color: #839496; } }"
        assert parse_colors_from_css(css) == ThemeColors("#002b36", "#839496")

    def test_braces_inside_strings_do_not_split_rules(self):
        css = '.x { content: "}"; } .hljs { background: #fafafa; color: #383a42; }'
        assert parse_colors_from_css(css) == ThemeColors("#fafafa", "#383a42")

    def test_no_matching_rule(self):
        assert parse_colors_from_css(".other { background: #000; }") is None
        assert parse_colors_from_css("") is None


class TestDefaultColors:
    def test_pairs(self):
        assert default_colors(True) == ThemeColors("#2d2d2d", "#d8dee9")
        assert default_colors(False) == ThemeColors("#f6f6f6", "#2e3440")
