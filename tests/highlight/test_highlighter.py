"""Tests for the Pygments-backed highlighter and its cache."""

import asyncio

import pytest
from pygments.lexers.special import TextLexer

from zepress.assets.catalogue import ThemeDescriptor
from zepress.core.exceptions import HighlightError
from zepress.highlight.highlighter import (
    Highlighter,
    HighlighterCache,
    extract_code_markup,
    normalize_line_spans,
    plain_markup,
)
from zepress.utils.html import parse_html


def line_spans(markup):
    return parse_html(markup).find_all("span", class_="line", recursive=False)


class TestHighlighter:
    """Test highlighting and its fallbacks."""

    def test_one_span_per_line(self, highlighter, themes):
        result = highlighter.highlight("a = 1\nb = 2\n", "python", themes.resolve("monokai"))
        assert result.fallback is False
        assert result.theme == "monokai"
        assert result.language_id == "python"
        assert len(line_spans(result.markup)) == 2
        assert 'id="line-' not in result.markup

    def test_lines_have_no_trailing_newline(self, highlighter, themes):
        result = highlighter.highlight("x = 1\ny = 2\n", "python", themes.resolve("default"))
        for span in line_spans(result.markup):
            assert not span.get_text().endswith("\n")

    def test_markup_has_no_block_wrapper(self, highlighter, themes):
        result = highlighter.highlight("print(1)\n", "python", themes.resolve("default"))
        assert "<pre" not in result.markup
        assert "<code" not in result.markup

    def test_unknown_language_uses_plain_lexer(self, highlighter, themes):
        result = highlighter.highlight("just words\n", "nosuchlang", themes.resolve("default"))
        assert result.fallback is False
        assert result.language_id == "nosuchlang"
        assert line_spans(result.markup)[0].get_text() == "just words"

    def test_unknown_style_retries_with_default(self, highlighter):
        theme = ThemeDescriptor(name="broken", css_text="", is_dark=False, style="no-such-style")
        result = highlighter.highlight("x = 1\n", "python", theme)
        assert result.fallback is False
        assert result.theme == "default"

    def test_plain_text_after_second_failure(self, highlighter, themes, monkeypatch):
        calls = []

        def failing_render(code, language, style_name):
            calls.append(style_name)
            raise HighlightError("boom")

        monkeypatch.setattr(highlighter, "render", failing_render)
        result = highlighter.highlight("<b>\n", "html", themes.resolve("monokai"))
        assert result.fallback is True
        assert result.markup == "&lt;b&gt;"
        assert calls == ["monokai", "default"]


class TestMarkupHelpers:
    """Test markup extraction helpers."""

    def test_plain_markup_escapes_and_drops_final_newline(self):
        assert plain_markup("a < b\n") == "a &lt; b"
        assert plain_markup('say "hi"') == 'say "hi"'

    def test_extract_code_markup_from_block(self):
        block = '<div class="highlight"><pre><span></span><code>x = 1</code></pre></div>'
        assert extract_code_markup(block) == "x = 1"

    def test_extract_code_markup_without_code_element(self):
        assert extract_code_markup("<pre>raw</pre>") == "raw"

    def test_normalize_line_spans(self):
        markup = '<span id="line-1">a\n</span><span id="line-2"><span style="color: red">b\n</span></span>'
        normalized = normalize_line_spans(markup)
        spans = line_spans(normalized)
        assert [span.get_text() for span in spans] == ["a", "b"]
        assert normalized.count("\n") == 1

    def test_normalize_without_line_spans_is_identity(self):
        assert normalize_line_spans("<span>a</span>") == "<span>a</span>"


class TestHighlighterCache:
    """Test memoised lexer and style loading."""

    def test_lexer_loaded_once(self):
        cache = HighlighterCache()
        first = cache.get_lexer("python")
        assert cache.get_lexer("Python") is first
        assert cache.load_count == 1

    def test_unknown_language_falls_back_to_text(self):
        assert isinstance(HighlighterCache().get_lexer("nosuchlang"), TextLexer)

    def test_unknown_style_raises(self):
        with pytest.raises(HighlightError):
            HighlighterCache().get_style("no-such-style")

    @pytest.mark.asyncio
    async def test_concurrent_loads_share_one_task(self):
        cache = HighlighterCache()
        lexers = await asyncio.gather(*(cache.load_lexer("python") for _ in range(5)))
        assert cache.load_count == 1
        assert all(lexer is lexers[0] for lexer in lexers)

    @pytest.mark.asyncio
    async def test_finished_load_leaves_no_inflight_task(self):
        cache = HighlighterCache()
        await cache.load_lexer("rust")
        await asyncio.sleep(0)
        assert cache._inflight == {}

    @pytest.mark.asyncio
    async def test_stale_task_does_not_evict_replacement(self):
        cache = HighlighterCache()
        loop = asyncio.get_running_loop()
        stale, current = loop.create_future(), loop.create_future()
        cache._inflight[("lexer", "go")] = current

        cache._forget(("lexer", "go"), stale)
        assert cache._inflight[("lexer", "go")] is current

        cache._forget(("lexer", "go"), current)
        assert ("lexer", "go") not in cache._inflight
        stale.cancel()
        current.cancel()

    @pytest.mark.asyncio
    async def test_style_load_falls_back_to_default(self):
        cache = HighlighterCache()
        style = await cache.load_style("no-such-style")
        assert style is cache.get_style("default")

    @pytest.mark.asyncio
    async def test_preload(self):
        cache = HighlighterCache()
        await cache.preload(languages=["python", "go", "python"], styles=["monokai"])
        assert cache.has_lexer("python")
        assert cache.has_lexer("go")
        assert cache.has_style("monokai")
        assert cache.load_count == 3

    @pytest.mark.asyncio
    async def test_preloaded_highlighter_does_not_reload(self, themes):
        highlighter = Highlighter()
        await highlighter.cache.preload(languages=["python"], styles=["monokai"])
        loads = highlighter.cache.load_count
        highlighter.highlight("x = 1\n", "python", themes.resolve("monokai"))
        assert highlighter.cache.load_count == loads
