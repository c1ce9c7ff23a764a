"""Tests for stylesheet inlining."""

import pytest

from zepress.core.exceptions import CssResolutionError
from zepress.css.inline import BASE_INLINE_CSS, inline_stylesheet, parse_rules, specificity, split_selectors
from zepress.utils.html import parse_html, parse_style


class TestSelectorHelpers:
    """Test selector parsing helpers."""

    def test_split_selectors_respects_brackets(self):
        assert split_selectors('a, p:not(.x, .y), [data-a="1,2"]') == ["a", "p:not(.x, .y)", '[data-a="1,2"]']

    def test_specificity_ordering(self):
        assert specificity("#id") > specificity(".a.b")
        assert specificity(".a.b") > specificity(".a")
        assert specificity(".a") > specificity("p")
        assert specificity("p") == (0, 0, 1)

    def test_parse_rules_drops_custom_properties_and_at_rules(self):
        rules = parse_rules(":root { --c: red; } @media print { p { color: red; } } p { color: blue; --x: 1; }")
        assert rules == [("p", {"color": "blue"})]

    def test_parse_rules_keeps_important(self):
        rules = parse_rules("p { color: red !important; }")
        assert rules[0][1]["color"] == "red !important"


class TestInlineStylesheet:
    """Test copying stylesheet rules onto elements."""

    def test_matching_rule_applied(self):
        soup = parse_html('<p class="a">x</p>')
        changed = inline_stylesheet(soup, ".a { color: red; }")
        assert changed == 1
        assert soup.p["style"] == "color: red;"

    def test_existing_inline_declaration_wins(self):
        soup = parse_html('<p class="a" style="color: blue">x</p>')
        inline_stylesheet(soup, ".a { color: red; margin: 0; }")
        styles = parse_style(soup.p["style"])
        assert styles["color"] == "blue"
        assert styles["margin"] == "0"

    def test_more_specific_rule_wins(self):
        soup = parse_html('<p class="a">x</p>')
        inline_stylesheet(soup, ".a { color: blue; } p { color: red; }")
        assert parse_style(soup.p["style"])["color"] == "blue"

    def test_later_rule_wins_at_equal_specificity(self):
        soup = parse_html('<p class="a b">x</p>')
        inline_stylesheet(soup, ".a { color: red; } .b { color: green; }")
        assert parse_style(soup.p["style"])["color"] == "green"

    def test_dynamic_pseudo_classes_skipped(self):
        soup = parse_html('<a href="#">x</a>')
        changed = inline_stylesheet(soup, "a:hover { color: red; } a::before { content: 'x'; }")
        assert changed == 0
        assert not soup.a.has_attr("style")

    def test_unsupported_selector_skipped(self):
        soup = parse_html('<p class="a">x</p>')
        inline_stylesheet(soup, "p:unknown-pseudo { color: red; } .a { margin: 0; }")
        assert soup.p["style"] == "margin: 0;"

    def test_malformed_stylesheet_raises(self):
        soup = parse_html("<p>x</p>")
        with pytest.raises(CssResolutionError):
            inline_stylesheet(soup, "p { color: red;")

    def test_base_css_styles_heading_number(self):
        soup = parse_html('<h2><span class="zp-heading-number">1</span></h2>')
        inline_stylesheet(soup, BASE_INLINE_CSS)
        assert parse_style(soup.span["style"]) == {"font-weight": "inherit"}
