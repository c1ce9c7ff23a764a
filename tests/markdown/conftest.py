"""Fixtures for rendering Markdown with a chosen set of structural plugins."""

import pytest

from zepress.core.config import Settings
from zepress.core.renderer import MarkdownRenderer


@pytest.fixture
def render(catalogue, highlighter, themes):
    """Render Markdown with only the given plugins installed.

    Returns the full RenderResult so tests can inspect pending jobs.
    """

    def _render(text, *plugins, settings=None):
        renderer = MarkdownRenderer(plugins, catalogue, highlighter, themes=themes)
        return renderer.render(text, settings or Settings())

    return _render
