"""Tests for the Images plugin."""

import pytest

from zepress.constants import DEFAULT_IMAGE_STYLE, IMAGE_CAPTION_CLASS, IMAGE_WRAPPER_CLASS
from zepress.core.config import Settings
from zepress.plugins.html.images import Images
from zepress.utils.html import parse_html


@pytest.fixture
def plugin(store):
    return Images(store)


def captions(html):
    return parse_html(html).find_all(class_=IMAGE_CAPTION_CLASS)


class TestImageAttributes:
    """Test sizing and wrapper marking."""

    def test_defaults_applied(self, plugin):
        soup = parse_html(plugin.process('<p><img src="a.png"></p>', Settings()))
        img = soup.img
        assert img["data-src"] == "a.png"
        assert img["style"] == DEFAULT_IMAGE_STYLE
        assert IMAGE_WRAPPER_CLASS in soup.p["class"]

    def test_existing_style_and_data_src_kept(self, plugin):
        html = '<p><img src="a.png" data-src="b.png" style="width: 10px;"></p>'
        img = parse_html(plugin.process(html, Settings())).img
        assert img["data-src"] == "b.png"
        assert img["style"] == "width: 10px;"

    def test_top_level_image_has_no_wrapper(self, plugin):
        result = plugin.process('<img src="a.png">', Settings())
        assert IMAGE_WRAPPER_CLASS not in result

    def test_no_images_returns_input(self, plugin):
        assert plugin.process("<p>text</p>", Settings()) == "<p>text</p>"


class TestCaptions:
    """Test alt-text captions."""

    def test_caption_after_paragraph(self, plugin):
        soup = parse_html(plugin.process('<p><img src="a.png" alt="A cat"></p>', Settings()))
        caption = soup.p.find_next_sibling()
        assert caption.name == "p"
        assert IMAGE_CAPTION_CLASS in caption["class"]
        assert caption.span.has_attr("leaf")
        assert caption.get_text() == "A cat"

    def test_inline_image_gets_block_span(self, plugin):
        soup = parse_html(plugin.process('<p>Look <img src="a.png" alt="A cat"> here</p>', Settings()))
        caption = soup.img.find_next_sibling()
        assert caption.name == "span"
        assert caption["style"] == "display: block;"

    def test_no_caption_without_alt(self, plugin):
        assert captions(plugin.process('<p><img src="a.png"></p>', Settings())) == []

    def test_rerun_adds_no_second_caption(self, plugin):
        once = plugin.process('<p><img src="a.png" alt="A cat"></p>', Settings())
        twice = plugin.process(once, Settings())
        assert len(captions(twice)) == 1

    def test_figcaption_respected(self, plugin):
        html = '<figure><img src="a.png" alt="A cat"><figcaption>Cat</figcaption></figure>'
        assert captions(plugin.process(html, Settings())) == []

    def test_disabled_by_config_strips_captions(self, plugin):
        once = plugin.process('<p><img src="a.png" alt="A cat" title="t"></p>', Settings())
        plugin.update_config({"show_image_caption": False})
        soup = parse_html(plugin.process(once, Settings()))
        assert captions(str(soup)) == []
        assert not soup.img.has_attr("alt")
        assert not soup.img.has_attr("title")

    def test_disabled_removes_figcaption(self, plugin):
        html = '<figure><img src="a.png" alt="A cat"><figcaption>Cat</figcaption></figure>'
        result = plugin.process(html, Settings(show_image_caption=False))
        assert "figcaption" not in result

    def test_setting_overrides_config(self, plugin):
        plugin.update_config({"show_image_caption": False})
        result = plugin.process('<p><img src="a.png" alt="A cat"></p>', Settings(show_image_caption=True))
        assert len(captions(result)) == 1
