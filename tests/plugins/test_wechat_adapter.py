"""Tests for the WeChat target adapter."""

import pytest

from zepress.core.config import Settings
from zepress.plugins.html.wechat_adapter import WechatAdapter
from zepress.utils.html import parse_html, parse_style


@pytest.fixture
def adapter(store):
    return WechatAdapter(store)


class TestWechatAdapter:
    """Test stylesheet inlining and cleanup."""

    def test_noop_for_preview(self, adapter, preview_settings):
        html = '<style>.x { color: red; }</style><p class="x" onclick="go()">a</p>'
        assert adapter.process(html, preview_settings) == html

    def test_weixin_code_format_enables_adapter(self, adapter):
        result = adapter.process("<script>x()</script><p>a</p>", Settings(enable_weixin_code_format=True))
        assert "<script" not in result

    def test_stylesheet_inlined_and_removed(self, adapter, wechat_settings):
        html = '<style>.x { color: red; }</style><p class="x">a</p>'
        soup = parse_html(adapter.process(html, wechat_settings))
        assert soup.find("style") is None
        assert parse_style(soup.p["style"])["color"] == "red"

    def test_inline_declarations_win(self, adapter, wechat_settings):
        html = '<style>p { color: red; margin: 0; }</style><p style="color: blue;">a</p>'
        styles = parse_style(parse_html(adapter.process(html, wechat_settings)).p["style"])
        assert styles["color"] == "blue"
        assert styles["margin"] == "0"

    def test_malformed_block_skipped(self, adapter, wechat_settings):
        html = "<style>.x { color: red;</style><style>.y { color: green; }</style><p class=\"y\">a</p>"
        soup = parse_html(adapter.process(html, wechat_settings))
        assert parse_style(soup.p["style"])["color"] == "green"
        assert soup.find("style") is None

    def test_base_rules_applied(self, adapter, wechat_settings):
        html = '<h2><span class="zp-heading-number">1</span></h2>'
        span = parse_html(adapter.process(html, wechat_settings)).span
        assert parse_style(span["style"])["font-weight"] == "inherit"

    def test_scripts_links_and_handlers_removed(self, adapter, wechat_settings):
        html = '<link rel="stylesheet" href="a.css"><script>x()</script><a href="#" onclick="go()" onMouseOver="x()">a</a>'
        soup = parse_html(adapter.process(html, wechat_settings))
        assert soup.find(["script", "link"]) is None
        assert list(soup.a.attrs) == ["href"]

    def test_cards_restored(self, adapter, wechat_settings):
        source = '<mp-common-profile data-id="abc"></mp-common-profile>'
        html = f'<section class="preview" data-card-source=\'{source}\'><p>Preview</p></section>'
        soup = parse_html(adapter.process(html, wechat_settings))
        assert soup.find("section") is None
        assert soup.find("mp-common-profile")["data-id"] == "abc"

    def test_adapter_flag(self):
        assert WechatAdapter.is_target_adapter is True
