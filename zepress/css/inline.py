"""Stylesheet inlining for targets that strip ``<style>`` elements."""

import re

import soupsieve
import structlog
import tinycss2
from bs4 import BeautifulSoup, Tag
from tinycss2 import ast

from ..core.exceptions import CssResolutionError
from ..utils.html import format_style, parse_style
from .variables import check_balanced

logger = structlog.get_logger(__name__)

# Selectors that only apply to interactive states or generated content
_DYNAMIC_PSEUDO_RE = re.compile(r"::|:(hover|active|focus|focus-within|focus-visible|visited|target)\b")
_ID_RE = re.compile(r"#[\w-]+")
_CLASS_LIKE_RE = re.compile(r"\.[\w-]+|\[[^\]]*\]|:(?!not\b)[\w-]+")
_TYPE_RE = re.compile(r"(?:^|[\s>+~(])([a-zA-Z][\w-]*)")

# Rules every target export needs once the document's stylesheets are gone
BASE_INLINE_CSS = """
section[data-component="admonition"] { margin: 1em 0; border-radius: 6px; overflow: hidden; }
.admonition-header { display: flex; align-items: center; padding: 8px 12px; font-weight: bold; }
.admonition-icon { display: inline-block; width: 16px; height: 16px; margin-right: 8px; }
.admonition-content { padding: 8px 12px; }
.block-math-svg { display: block; max-width: 100%; margin: 1em auto; overflow-x: auto; }
.note-highlight { background-color: rgba(255, 208, 0, 0.4); }
.zp-image-wrapper { text-align: center; }
.zp-image-caption { margin-top: 0.5em; font-size: 0.8em; color: #888; text-align: center; }
.zp-heading-number { font-weight: inherit; }
.zp-table-scroll { overflow-x: auto; }
"""


def split_selectors(prelude: str) -> list[str]:
    """Split a selector list on commas that are not nested in brackets."""
    selectors: list[str] = []
    depth = 0
    current: list[str] = []
    for char in prelude:
        if char in "([":
            depth += 1
        elif char in ")]":
            depth -= 1
        elif char == "," and depth == 0:
            selectors.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    selectors.append("".join(current).strip())
    return [selector for selector in selectors if selector]


def specificity(selector: str) -> tuple[int, int, int]:
    """Approximate (id, class, type) specificity of a compound selector."""
    ids = len(_ID_RE.findall(selector))
    stripped = _ID_RE.sub("", selector)
    classes = len(_CLASS_LIKE_RE.findall(stripped))
    types = len([name for name in _TYPE_RE.findall(_CLASS_LIKE_RE.sub("", stripped)) if name != "not"])
    return ids, classes, types


def parse_rules(css: str) -> list[tuple[str, dict[str, str]]]:
    """Parse top-level style rules into (selector list, declarations) pairs.

    Custom-property declarations and at-rules are dropped.

    Raises:
        CssResolutionError: If the stylesheet is malformed
    """
    check_balanced(css)
    rules: list[tuple[str, dict[str, str]]] = []
    for rule in tinycss2.parse_stylesheet(css, skip_comments=True, skip_whitespace=True):
        if isinstance(rule, ast.ParseError):
            raise CssResolutionError(f"CSS parse error: {rule.message}")
        if not isinstance(rule, ast.QualifiedRule):
            continue
        declarations: dict[str, str] = {}
        for node in tinycss2.parse_blocks_contents(rule.content, skip_comments=True, skip_whitespace=True):
            if isinstance(node, ast.Declaration) and not node.name.startswith("--"):
                value = tinycss2.serialize(node.value).strip()
                declarations[node.lower_name] = f"{value} !important" if node.important else value
        if declarations:
            rules.append((tinycss2.serialize(rule.prelude).strip(), declarations))
    return rules


def inline_stylesheet(soup: BeautifulSoup, css: str) -> int:
    """Copy matching stylesheet declarations onto elements' ``style`` attributes.

    Rules apply in specificity order, then source order. Declarations already
    present on an element win over stylesheet declarations.

    Args:
        soup: Parsed document, modified in place
        css: Stylesheet text

    Returns:
        Number of elements whose style changed

    Raises:
        CssResolutionError: If the stylesheet is malformed
    """
    entries = []
    for order, (prelude, declarations) in enumerate(parse_rules(css)):
        for selector in split_selectors(prelude):
            if _DYNAMIC_PSEUDO_RE.search(selector):
                continue
            entries.append((specificity(selector), order, selector, declarations))
    entries.sort(key=lambda entry: (entry[0], entry[1]))

    computed: dict[int, tuple[Tag, dict[str, str]]] = {}
    for _, _, selector, declarations in entries:
        try:
            matches = soup.select(selector)
        except (soupsieve.SelectorSyntaxError, NotImplementedError) as e:
            logger.debug("Skipping unsupported selector", selector=selector, error=str(e))
            continue
        for element in matches:
            _, collected = computed.setdefault(id(element), (element, {}))
            collected.update(declarations)

    changed = 0
    for element, declarations in computed.values():
        existing = parse_style(element.get("style"))
        merged = {**declarations, **existing}
        if merged != existing:
            element["style"] = format_style(merged)
            changed += 1
    return changed
