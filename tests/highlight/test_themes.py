"""Tests for highlight theme resolution."""

from zepress.assets.catalogue import PygmentsAssetCatalogue, ThemeDescriptor, style_css
from zepress.constants import DEFAULT_DARK_THEME, DEFAULT_LIGHT_THEME
from zepress.highlight.themes import ThemeResolver, display_name


class FailingCatalogue:
    """Catalogue whose lookups always raise."""

    def lookup_theme(self, name):
        raise RuntimeError("catalogue offline")

    def lookup_highlight_style(self, name):
        raise RuntimeError("catalogue offline")


class TestThemeResolution:
    """Test the resolution order."""

    def test_exact_catalogue_match(self, themes):
        theme = themes.resolve("monokai")
        assert theme.name == "monokai"
        assert theme.is_dark is True
        assert theme.style == "monokai"

    def test_aliases(self, themes):
        assert themes.resolve("github").name == DEFAULT_LIGHT_THEME
        assert themes.resolve("默认").name == DEFAULT_LIGHT_THEME
        assert themes.resolve("vs2015").name == "native"
        assert themes.resolve("vs2015").is_dark is True

    def test_alias_lookup_is_case_insensitive(self, themes):
        assert themes.resolve("GitHub").name == DEFAULT_LIGHT_THEME

    def test_dark_keyword_inference(self, themes):
        for name in ("my-dark-theme", "midnight-blue", "pitch-black"):
            theme = themes.resolve(name)
            assert theme.name == DEFAULT_DARK_THEME
            assert theme.is_dark is True

    def test_unknown_name_uses_light_default(self, themes):
        theme = themes.resolve("solarized-something")
        assert theme.name == DEFAULT_LIGHT_THEME
        assert theme.is_dark is False

    def test_empty_name_uses_light_default(self, themes):
        assert themes.resolve("").name == DEFAULT_LIGHT_THEME
        assert themes.resolve(None).name == DEFAULT_LIGHT_THEME

    def test_resolution_is_memoised(self, themes):
        assert themes.resolve("monokai") is themes.resolve("monokai")

    def test_failing_catalogue_falls_back_to_builtin_defaults(self):
        resolver = ThemeResolver(FailingCatalogue())
        theme = resolver.resolve("monokai")
        assert isinstance(theme, ThemeDescriptor)
        assert theme.name == DEFAULT_LIGHT_THEME


class TestCustomThemes:
    """Test the custom theme registry."""

    def test_custom_theme_wins_over_catalogue(self, themes):
        themes.register_custom_theme("monokai", ".hljs { background: #ffffff; color: #000000; }")
        theme = themes.resolve("monokai")
        assert theme.is_dark is False
        assert theme.style == DEFAULT_LIGHT_THEME

    def test_darkness_derived_from_css(self, themes):
        descriptor = themes.register_custom_theme("ink", ".hljs { background: #101010; color: #eeeeee; }")
        assert descriptor.is_dark is True
        assert descriptor.style == DEFAULT_DARK_THEME

    def test_registration_invalidates_memo(self, themes):
        assert themes.resolve("ocean").name == DEFAULT_LIGHT_THEME
        themes.register_custom_theme("ocean", ".hljs { background: #002b36; }", style="monokai")
        theme = themes.resolve("ocean")
        assert theme.name == "ocean"
        assert theme.style == "monokai"

    def test_theme_names_lists_custom_first(self, themes):
        themes.register_custom_theme("zz-custom", ".hljs { background: #fff; }")
        names = themes.theme_names()
        assert names[0] == "zz-custom"
        assert "monokai" in names
        assert len(names) == len(set(names))


class TestCatalogue:
    """Test the Pygments-backed catalogue."""

    def test_style_css_declares_block_colours(self):
        css = style_css("monokai")
        assert css.startswith(".hljs { background: #272822;")

    def test_registered_style_shadows_installed(self, catalogue):
        catalogue.register_highlight_style("monokai", ".hljs { background: #ffffff; }")
        assert catalogue.lookup_highlight_style("monokai").css == ".hljs { background: #ffffff; }"
        assert catalogue.lookup_theme("monokai").is_dark is False

    def test_unknown_lookups_return_none(self, catalogue):
        assert catalogue.lookup_theme("no-such-style") is None
        assert catalogue.lookup_highlight_style("no-such-style") is None

    def test_resolve_asset(self):
        catalogue = PygmentsAssetCatalogue(base_url="https://cdn.example.com/")
        catalogue.register_asset("cover.png", "https://img.example.com/cover.png")
        assert catalogue.resolve_asset("cover.png") == "https://img.example.com/cover.png"
        assert catalogue.resolve_asset("/a/b.png") == "https://cdn.example.com/a/b.png"
        assert PygmentsAssetCatalogue().resolve_asset("b.png") is None


def test_display_name():
    assert display_name("github-dark") == "Github Dark"
    assert display_name("solarized_light") == "Solarized Light"
