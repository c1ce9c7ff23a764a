"""Property-based tests using Hypothesis.

These cover the invariants that must hold for any input: resolution and
rendering passes are idempotent, theme resolution is deterministic, and
colour classification stays within range.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from zepress.assets.catalogue import PygmentsAssetCatalogue
from zepress.core.config import Settings
from zepress.css.colors import is_dark, luminance
from zepress.css.variables import resolve_css_variables
from zepress.highlight.themes import ThemeResolver
from zepress.plugins.html.code_blocks import CodeBlocks
from zepress.plugins.html.headings import NUMBER_STYLES, format_heading_number
from zepress.utils.html import parse_html, parse_style

catalogue = PygmentsAssetCatalogue()

hex_colors = st.tuples(*(st.integers(min_value=0, max_value=255) for _ in range(3))).map(
    lambda rgb: "#{:02x}{:02x}{:02x}".format(*rgb)
)
names = st.sampled_from(["--accent", "--bg", "--fg", "--border"])
safe_text = st.text(alphabet=st.characters(whitelist_categories=("Ll", "Lu", "Nd")), min_size=1, max_size=12)


class TestCssResolutionProperties:
    """Resolving custom properties twice changes nothing the second time."""

    @given(definitions=st.dictionaries(names, hex_colors, max_size=4), used=st.lists(names, min_size=1, max_size=4), fallback=hex_colors)
    @settings(max_examples=50, deadline=None)
    def test_resolution_is_idempotent(self, definitions, used, fallback):
        root = "".join(f"{name}: {value}; " for name, value in definitions.items())
        rules = " ".join(f".c{i} {{ color: var({name}, {fallback}); }}" for i, name in enumerate(used))
        inline = f'<p style="color: var({used[0]}, {fallback});">x</p>'
        html = f"<style>:root {{ {root}}} {rules}</style>{inline}"
        once = resolve_css_variables(html)
        assert resolve_css_variables(once) == once

    @given(value=hex_colors)
    @settings(max_examples=30, deadline=None)
    def test_defined_variables_are_substituted(self, value):
        html = f'<style>:root {{ --accent: {value}; }}</style><p style="color: var(--accent);">x</p>'
        p = parse_html(resolve_css_variables(html)).p
        assert parse_style(p["style"])["color"] == value


class TestThemeProperties:
    """Theme resolution is a pure function of the name."""

    @given(name=st.text(max_size=30))
    @settings(max_examples=100, deadline=None)
    def test_resolution_is_deterministic(self, name):
        first = ThemeResolver(catalogue).resolve(name)
        second = ThemeResolver(catalogue).resolve(name)
        assert first == second

    @given(color=hex_colors)
    def test_luminance_in_range(self, color):
        value = luminance(color)
        assert 0.0 <= value <= 1.0 + 1e-9
        assert is_dark(color) == (value < 0.5)


class TestRenderingProperties:
    """Rendering passes can be repeated safely."""

    @given(lines=st.lists(safe_text, min_size=1, max_size=8))
    @settings(max_examples=25, deadline=None)
    def test_line_numbers_never_duplicate(self, lines):
        plugin = CodeBlocks(themes=ThemeResolver(catalogue), catalogue=catalogue)
        plugin.update_config({"show_line_numbers": True})
        html = '<pre><code class="language-python">{}\n</code></pre>'.format("\n".join(lines))
        once = plugin.process(html, Settings())
        twice = plugin.process(once, Settings())
        numbers = [span.get_text() for span in parse_html(twice).find_all("span", class_="line-number")]
        assert numbers == [str(n) for n in range(1, len(lines) + 1)]

    @given(n=st.integers(min_value=1, max_value=3999), style=st.sampled_from(sorted(NUMBER_STYLES)))
    def test_heading_numbers_are_non_empty(self, n, style):
        label = format_heading_number(n, style, "{}")
        assert label
        assert "{}" not in label
