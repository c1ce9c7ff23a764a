"""Pygments-backed syntax highlighting with memoised lexer and style loading."""

import asyncio
import html
import threading
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Optional

import structlog
from bs4 import NavigableString, Tag
from pygments import highlight as pygments_highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.lexers.special import TextLexer
from pygments.style import Style
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from ..assets.catalogue import ThemeDescriptor
from ..constants import DEFAULT_LIGHT_THEME, PLAIN_LANGUAGE
from ..core.exceptions import HighlightError
from ..utils.html import add_class, parse_html

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class HighlightResult:
    """Highlighted code markup without any block-level wrapper.

    ``markup`` holds one ``<span class="line">`` per source line, joined by
    newlines, except when ``fallback`` is set: the code could not be
    highlighted and ``markup`` is escaped plain text.
    """

    language_id: str
    markup: str
    theme: str = ""
    fallback: bool = False


class HighlighterCache:
    """Memoised lexer and style loading.

    Synchronous getters fill the cache directly. The async loaders run the
    load in a worker thread and share a single in-flight task per key, so
    concurrent requests for the same language or theme load it once. Values
    are a pure function of their key, so concurrent writes are harmless and
    the last one wins.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._lexers: dict[str, Lexer] = {}
        self._styles: dict[str, type[Style]] = {}
        self._inflight: dict[tuple[str, str], asyncio.Task] = {}
        self.load_count = 0

    def get_lexer(self, language: str) -> Lexer:
        """Return the lexer for a language, the plain-text lexer if unknown."""
        key = (language or PLAIN_LANGUAGE).lower()
        with self._lock:
            lexer = self._lexers.get(key)
        if lexer is not None:
            return lexer
        try:
            lexer = get_lexer_by_name(key, stripnl=False, ensurenl=True)
        except ClassNotFound:
            logger.debug("Unknown language, using plain text", language=key)
            lexer = TextLexer(stripnl=False, ensurenl=True)
        with self._lock:
            self._lexers[key] = lexer
            self.load_count += 1
        return lexer

    def get_style(self, name: str) -> type[Style]:
        """Return a Pygments style class.

        Raises:
            HighlightError: If the style is not installed
        """
        with self._lock:
            style = self._styles.get(name)
        if style is not None:
            return style
        try:
            style = get_style_by_name(name)
        except ClassNotFound as e:
            raise HighlightError(f"Unknown highlight style: {name}", cause=e)
        with self._lock:
            self._styles[name] = style
            self.load_count += 1
        return style

    def has_lexer(self, language: str) -> bool:
        with self._lock:
            return (language or PLAIN_LANGUAGE).lower() in self._lexers

    def has_style(self, name: str) -> bool:
        with self._lock:
            return name in self._styles

    async def _load_once(self, kind: str, key: str, loader: Callable[[str], Any]) -> Any:
        loop = asyncio.get_running_loop()
        task_key = (kind, key)
        task = self._inflight.get(task_key)
        if task is None or task.get_loop() is not loop:
            task = loop.create_task(asyncio.to_thread(loader, key))
            self._inflight[task_key] = task
            task.add_done_callback(lambda done: self._forget(task_key, done))
        return await task

    def _forget(self, task_key: tuple[str, str], task: asyncio.Task) -> None:
        # A task from an older loop must not evict its replacement
        if self._inflight.get(task_key) is task:
            del self._inflight[task_key]

    async def load_lexer(self, language: str) -> Lexer:
        key = (language or PLAIN_LANGUAGE).lower()
        if self.has_lexer(key):
            return self.get_lexer(key)
        return await self._load_once("lexer", key, self.get_lexer)

    async def load_style(self, name: str) -> type[Style]:
        if self.has_style(name):
            return self.get_style(name)
        try:
            return await self._load_once("style", name, self.get_style)
        except HighlightError:
            logger.warning("Style preload failed, falling back", style=name, fallback=DEFAULT_LIGHT_THEME)
            return await self._load_once("style", DEFAULT_LIGHT_THEME, self.get_style)

    async def preload(self, languages: Iterable[str] = (), styles: Iterable[str] = ()) -> None:
        """Load languages and styles concurrently ahead of a render."""
        jobs: list[Awaitable[Any]] = [self.load_lexer(language) for language in set(languages)]
        jobs.extend(self.load_style(style) for style in set(styles))
        if jobs:
            await asyncio.gather(*jobs)


def normalize_line_spans(markup: str) -> str:
    """Rewrite Pygments ``<span id="line-N">`` wrappers as ``<span class="line">``.

    Each line span loses its trailing newline, which is placed between the
    spans instead, so every line is exactly one span.
    """
    soup = parse_html(markup)
    spans = [
        span
        for span in soup.find_all("span", id=True, recursive=False)
        if str(span["id"]).startswith("line-")
    ]
    if not spans:
        return markup
    for index, span in enumerate(spans):
        del span["id"]
        add_class(span, "line")
        last = span.contents[-1] if span.contents else None
        if isinstance(last, NavigableString) and last.endswith("\n"):
            last.replace_with(NavigableString(last[:-1]))
        elif isinstance(last, Tag) and last.string is not None and last.string.endswith("\n"):
            last.string.replace_with(NavigableString(last.string[:-1]))
        if index < len(spans) - 1:
            span.insert_after(NavigableString("\n"))
    # Trailing whitespace after the last line
    for node in list(soup.contents):
        if isinstance(node, NavigableString) and node.strip() == "" and node.next_sibling is None:
            node.extract()
    return soup.decode()


def extract_code_markup(block_html: str) -> str:
    """Return only the innermost code markup of a highlighter's block output."""
    soup = parse_html(block_html)
    code = soup.select_one("pre code")
    if code is not None:
        inner = code.decode_contents()
    else:
        pre = soup.find("pre")
        inner = pre.decode_contents() if pre is not None else block_html
    return normalize_line_spans(inner)


class Highlighter:
    """Highlight code with a theme's Pygments style."""

    def __init__(self, cache: Optional[HighlighterCache] = None):
        self.cache = cache or HighlighterCache()

    def highlight(self, code: str, language: Optional[str], theme: ThemeDescriptor) -> HighlightResult:
        """Highlight code, retrying once with the default theme.

        Args:
            code: Raw source text
            language: Language identifier (empty for plain text)
            theme: Resolved theme

        Returns:
            HighlightResult; escaped plain text when both attempts fail
        """
        language_id = (language or PLAIN_LANGUAGE).lower()
        style_name = theme.style or theme.name
        try:
            return HighlightResult(language_id, self.render(code, language_id, style_name), theme.name)
        except Exception as e:
            logger.warning("Highlight failed, retrying with default theme", language=language_id, theme=style_name, error=str(e))

        try:
            markup = self.render(code, language_id, DEFAULT_LIGHT_THEME)
            return HighlightResult(language_id, markup, DEFAULT_LIGHT_THEME)
        except Exception as e:
            logger.warning("Highlight fallback failed, using plain text", language=language_id, error=str(e))
        return HighlightResult(language_id, plain_markup(code), theme.name, fallback=True)

    def render(self, code: str, language: str, style_name: str) -> str:
        """Render code with Pygments and strip the block wrapper.

        Raises:
            HighlightError: If the style is unknown
        """
        lexer = self.cache.get_lexer(language)
        style = self.cache.get_style(style_name)
        formatter = HtmlFormatter(style=style, noclasses=True, wrapcode=True, linespans="line")
        return extract_code_markup(pygments_highlight(code, lexer, formatter))


def plain_markup(code: str) -> str:
    """Escape code for use as plain newline-separated markup."""
    return html.escape(code[:-1] if code.endswith("\n") else code, quote=False)
