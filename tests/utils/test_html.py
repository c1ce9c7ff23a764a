"""Unit tests for HTML utilities module."""

import pytest

from zepress.utils.html import (
    add_class,
    create_element_with_attributes,
    format_style,
    get_classes,
    merge_style,
    parse_html,
    parse_style,
    serialize_html,
    split_declarations,
)


class TestStyleHelpers:
    """Test inline style parsing and formatting."""

    def test_split_respects_parentheses_and_quotes(self):
        style = 'background: url("a;b.png"); font-family: "x;y"; color: rgb(1, 2, 3)'
        assert split_declarations(style) == [
            'background: url("a;b.png")',
            'font-family: "x;y"',
            "color: rgb(1, 2, 3)",
        ]

    def test_parse_style(self):
        assert parse_style("Color: red; --Accent: blue;; broken; margin : 0") == {
            "color": "red",
            "--Accent": "blue",
            "margin": "0",
        }

    def test_parse_empty(self):
        assert parse_style(None) == {}
        assert parse_style("") == {}

    def test_later_duplicates_win(self):
        assert parse_style("color: red; color: blue") == {"color": "blue"}

    def test_format_style(self):
        assert format_style({"color": "red", "margin": "0"}) == "color: red; margin: 0;"
        assert format_style({}) == ""

    def test_merge_override(self):
        element = parse_html('<p style="color: red;">a</p>').p
        merge_style(element, {"color": "blue", "margin": "0"})
        assert element["style"] == "color: blue; margin: 0;"

    def test_merge_without_override(self):
        element = parse_html('<p style="color: red;">a</p>').p
        merge_style(element, {"color": "blue", "margin": "0"}, override=False)
        assert element["style"] == "color: red; margin: 0;"

    def test_merge_nothing_adds_no_attribute(self):
        element = parse_html("<p>a</p>").p
        merge_style(element, {})
        assert not element.has_attr("style")


class TestElementHelpers:
    """Test class and element helpers."""

    def test_classes(self):
        element = parse_html('<p class="a b">x</p>').p
        add_class(element, "c")
        add_class(element, "a")
        assert get_classes(element) == ["a", "b", "c"]

    def test_string_class_attribute(self):
        soup = parse_html("<p>x</p>")
        soup.p["class"] = "one two"
        assert get_classes(soup.p) == ["one", "two"]

    def test_create_element_skips_none(self):
        soup = parse_html("")
        element = create_element_with_attributes(soup, "span", {"class": "x", "title": None}, text="hi")
        assert str(element) == '<span class="x">hi</span>'

    @pytest.mark.parametrize(
        "html,expected",
        [
            ("<p>a</p><p>b</p>", "<p>a</p><p>b</p>"),
            ("<html><body><p>a</p></body></html>", "<p>a</p>"),
        ],
    )
    def test_serialize(self, html, expected):
        assert serialize_html(parse_html(html)) == expected
