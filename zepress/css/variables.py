"""CSS custom-property resolution for targets that cannot evaluate ``var()``.

Two passes share one resolver:

* the block pass rewrites the text of every ``<style>`` element;
* the inline pass rewrites ``style`` attributes that still contain ``var(``.

A ``var(--x[, fallback])`` call is replaced by the statically known value of
``--x``. Definitions are looked up in this order: the declaring rule itself,
inherited definitions supplied by the caller (ancestor inline styles),
``:root``/``html``/``body`` rules, any other rule (last definition wins),
document-wide defaults supplied by the caller, and finally the fallback.
Calls that cannot be resolved are left untouched, which makes both passes
idempotent.
"""

from typing import Callable, Iterable, Mapping, Optional

import structlog
import tinycss2
from bs4 import BeautifulSoup, Tag
from bs4.element import Stylesheet
from tinycss2 import ast

from ..constants import INLINE_WRAPPER_SELECTOR, MAX_VAR_DEPTH, ROOT_SELECTORS
from ..core.exceptions import CssResolutionError
from ..utils.html import format_style, parse_html, parse_style, serialize_html

logger = structlog.get_logger(__name__)

# At-rules whose block holds nested rules rather than declarations
_NESTED_RULE_AT_KEYWORDS = frozenset(
    {"media", "supports", "document", "layer", "container", "keyframes", "-webkit-keyframes"}
)

Lookup = Callable[[str], Optional[str]]


def check_balanced(css: str) -> None:
    """Raise if braces or parentheses are unbalanced outside strings and comments.

    tinycss2 silently closes open blocks at end of input, so this check is
    what turns a truncated block into a per-node failure.

    Raises:
        CssResolutionError: If the text is unbalanced
    """
    stack: list[str] = []
    pairs = {")": "(", "}": "{", "]": "["}
    i = 0
    quote = ""
    while i < len(css):
        char = css[i]
        if quote:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = ""
        elif css.startswith("/*", i):
            end = css.find("*/", i + 2)
            if end == -1:
                raise CssResolutionError("Unterminated comment")
            i = end + 2
            continue
        elif char in "\"'":
            quote = char
        elif char in "({[":
            stack.append(char)
        elif char in ")}]":
            if not stack or stack.pop() != pairs[char]:
                raise CssResolutionError(f"Unbalanced '{char}' at offset {i}")
        i += 1
    if quote:
        raise CssResolutionError("Unterminated string")
    if stack:
        raise CssResolutionError(f"Unclosed '{stack[-1]}'")


def _contains_var(tokens: Iterable[ast.Node]) -> bool:
    for token in tokens:
        if isinstance(token, ast.FunctionBlock):
            if token.lower_name == "var" or _contains_var(token.arguments):
                return True
        elif isinstance(token, (ast.ParenthesesBlock, ast.SquareBracketsBlock, ast.CurlyBracketsBlock)):
            if _contains_var(token.content):
                return True
    return False


def _is_root_prelude(prelude: list[ast.Node]) -> bool:
    selectors = [part.strip() for part in tinycss2.serialize(prelude).split(",")]
    return any(selector in ROOT_SELECTORS for selector in selectors)


def _declarations(content: list[ast.Node]) -> list[ast.Node]:
    return tinycss2.parse_blocks_contents(content, skip_comments=False, skip_whitespace=False)


def _local_definitions(nodes: list[ast.Node]) -> dict[str, str]:
    definitions: dict[str, str] = {}
    for node in nodes:
        if isinstance(node, ast.Declaration) and node.name.startswith("--"):
            definitions[node.name] = tinycss2.serialize(node.value).strip()
    return definitions


class CssVariableResolver:
    """Resolve ``var()`` references against statically known definitions."""

    def __init__(self, max_depth: int = MAX_VAR_DEPTH):
        self.max_depth = max_depth

    # Definition collection

    def collect_definitions(self, css: str) -> tuple[dict[str, str], dict[str, str]]:
        """Collect custom-property definitions from a stylesheet.

        Args:
            css: Stylesheet text

        Returns:
            Tuple of (root definitions, other-rule definitions)

        Raises:
            CssResolutionError: If the stylesheet is malformed
        """
        check_balanced(css)
        root: dict[str, str] = {}
        others: dict[str, str] = {}
        self._collect(self._parse_rules(css), root, others)
        return root, others

    def _collect(self, rules: list[ast.Node], root: dict[str, str], others: dict[str, str]) -> None:
        for rule in rules:
            if isinstance(rule, ast.QualifiedRule):
                target = root if _is_root_prelude(rule.prelude) else others
                target.update(_local_definitions(_declarations(rule.content)))
            elif isinstance(rule, ast.AtRule) and rule.content is not None:
                if rule.lower_at_keyword in _NESTED_RULE_AT_KEYWORDS:
                    nested = tinycss2.parse_rule_list(rule.content, skip_comments=True, skip_whitespace=True)
                    self._collect(nested, root, others)

    def _parse_rules(self, css: str) -> list[ast.Node]:
        rules = tinycss2.parse_stylesheet(css, skip_comments=False, skip_whitespace=False)
        for rule in rules:
            if isinstance(rule, ast.ParseError):
                raise CssResolutionError(f"CSS parse error: {rule.message}")
        return rules

    # Resolution

    def resolve_stylesheet(
        self,
        css: str,
        inherited: Optional[Mapping[str, str]] = None,
        defaults: Optional[Mapping[str, str]] = None,
    ) -> str:
        """Resolve every ``var()`` call in a stylesheet.

        Args:
            css: Stylesheet text
            inherited: Definitions inherited from enclosing elements
            defaults: Document-wide definitions from other stylesheets

        Returns:
            Stylesheet text with resolvable references substituted

        Raises:
            CssResolutionError: If the stylesheet is malformed
        """
        if "var(" not in css:
            return css
        check_balanced(css)
        rules = self._parse_rules(css)
        root: dict[str, str] = {}
        others: dict[str, str] = {}
        self._collect(rules, root, others)
        context = (dict(inherited or {}), root, others, dict(defaults or {}))
        return self._rewrite_rules(rules, context)

    def _rewrite_rules(self, rules: list[ast.Node], context: tuple) -> str:
        parts: list[str] = []
        for rule in rules:
            if isinstance(rule, ast.QualifiedRule) and _contains_var(rule.content):
                body = self._rewrite_declarations(_declarations(rule.content), context)
                parts.append(f"{tinycss2.serialize(rule.prelude)}{{{body}}}")
            elif (
                isinstance(rule, ast.AtRule)
                and rule.content is not None
                and _contains_var(rule.content)
            ):
                if rule.lower_at_keyword in _NESTED_RULE_AT_KEYWORDS:
                    nested = tinycss2.parse_rule_list(rule.content, skip_comments=False, skip_whitespace=False)
                    body = self._rewrite_rules(nested, context)
                else:
                    body = self._rewrite_declarations(_declarations(rule.content), context)
                parts.append(f"@{rule.at_keyword}{tinycss2.serialize(rule.prelude)}{{{body}}}")
            else:
                parts.append(rule.serialize())
        return "".join(parts)

    def _rewrite_declarations(self, nodes: list[ast.Node], context: tuple) -> str:
        local = _local_definitions(nodes)
        inherited, root, others, defaults = context
        scopes = (local, inherited, root, others, defaults)

        def lookup(name: str) -> Optional[str]:
            for scope in scopes:
                value = scope.get(name)
                if value:
                    return value
            return None

        parts: list[str] = []
        for node in nodes:
            if isinstance(node, ast.ParseError):
                raise CssResolutionError(f"Invalid declaration: {node.message}")
            if isinstance(node, ast.Declaration):
                value = self._resolve_tokens(node.value, lookup, frozenset(), 0)
                important = "!important" if node.important else ""
                parts.append(f"{node.name}:{value}{important};")
            else:
                parts.append(node.serialize())
        return "".join(parts)

    def resolve_value(self, value: str, lookup: Lookup) -> str:
        """Resolve ``var()`` calls in a single property value."""
        tokens = tinycss2.parse_component_value_list(value)
        return self._resolve_tokens(tokens, lookup, frozenset(), 0)

    def _resolve_tokens(self, tokens: Iterable[ast.Node], lookup: Lookup, seen: frozenset, depth: int) -> str:
        parts: list[str] = []
        for token in tokens:
            if isinstance(token, ast.FunctionBlock):
                if token.lower_name == "var":
                    parts.append(self._resolve_var(token, lookup, seen, depth))
                else:
                    inner = self._resolve_tokens(token.arguments, lookup, seen, depth)
                    parts.append(f"{token.name}({inner})")
            elif isinstance(token, ast.ParenthesesBlock):
                parts.append(f"({self._resolve_tokens(token.content, lookup, seen, depth)})")
            elif isinstance(token, ast.SquareBracketsBlock):
                parts.append(f"[{self._resolve_tokens(token.content, lookup, seen, depth)}]")
            else:
                parts.append(token.serialize())
        return "".join(parts)

    def _resolve_var(self, token: ast.FunctionBlock, lookup: Lookup, seen: frozenset, depth: int) -> str:
        original = token.serialize()
        if depth >= self.max_depth:
            return original

        arguments = list(token.arguments)
        name = None
        fallback: Optional[list[ast.Node]] = None
        for index, argument in enumerate(arguments):
            if isinstance(argument, ast.WhitespaceToken) or isinstance(argument, ast.Comment):
                continue
            if name is None:
                if not isinstance(argument, ast.IdentToken) or not argument.value.startswith("--"):
                    return original
                name = argument.value
                continue
            if isinstance(argument, ast.LiteralToken) and argument.value == ",":
                fallback = arguments[index + 1:]
            break
        if name is None:
            return original

        if name not in seen:
            value = lookup(name)
            if value is not None:
                tokens = tinycss2.parse_component_value_list(value)
                return self._resolve_tokens(tokens, lookup, seen | {name}, depth + 1).strip()

        if fallback is not None:
            resolved = self._resolve_tokens(fallback, lookup, seen, depth + 1).strip()
            if resolved:
                return resolved
        return original


def collect_document_definitions(soup: BeautifulSoup, resolver: CssVariableResolver) -> dict[str, str]:
    """Merge custom-property definitions from every ``<style>`` element.

    Root-selector definitions take precedence over definitions made on other
    rules; a block that fails to parse contributes nothing.
    """
    root: dict[str, str] = {}
    others: dict[str, str] = {}
    for style in soup.find_all("style"):
        try:
            block_root, block_others = resolver.collect_definitions(_style_text(style))
        except CssResolutionError:
            continue
        root.update(block_root)
        others.update(block_others)
    return {**others, **root}


def _style_text(style: Tag) -> str:
    return "".join(str(child) for child in style.contents)


def _ancestor_definitions(element: Tag) -> dict[str, str]:
    chain = [parent for parent in element.parents if isinstance(parent, Tag) and parent.get("style")]
    definitions: dict[str, str] = {}
    # Farthest first so the nearest ancestor wins
    for parent in reversed(chain):
        for name, value in parse_style(parent.get("style")).items():
            if name.startswith("--"):
                definitions[name] = value
    return definitions


def resolve_style_blocks(html: str, resolver: Optional[CssVariableResolver] = None) -> str:
    """Resolve ``var()`` calls inside every ``<style>`` element of a document.

    A block that cannot be parsed keeps its original text and is logged;
    the remaining blocks are still processed.

    Args:
        html: Document or fragment
        resolver: Resolver to use

    Returns:
        The body's inner markup, or the fragment when there is no body
    """
    resolver = resolver or CssVariableResolver()
    soup = parse_html(html)
    styles = soup.find_all("style")
    if not styles:
        return serialize_html(soup)

    definitions = collect_document_definitions(soup, resolver)
    resolved_count = 0
    for index, style in enumerate(styles):
        css = _style_text(style)
        try:
            resolved = resolver.resolve_stylesheet(css, defaults=definitions)
        except CssResolutionError as e:
            logger.warning("Keeping unresolvable style block", index=index, error=str(e))
            continue
        if resolved != css:
            style.string = Stylesheet(resolved)
            resolved_count += 1

    logger.debug("Resolved style blocks", blocks=len(styles), changed=resolved_count)
    return serialize_html(soup)


def document_definitions(html: str, resolver: Optional[CssVariableResolver] = None) -> dict[str, str]:
    """Custom-property definitions declared by a document's ``<style>`` elements."""
    return collect_document_definitions(parse_html(html), resolver or CssVariableResolver())


def resolve_inline_styles(
    html: str,
    resolver: Optional[CssVariableResolver] = None,
    defaults: Optional[Mapping[str, str]] = None,
) -> str:
    """Resolve ``var()`` calls in ``style`` attributes.

    Each attribute is wrapped in a synthetic single-selector rule, resolved
    and unwrapped. Inherited definitions come from ancestor inline styles,
    defaults from ``defaults`` overlaid with the document's remaining
    ``<style>`` elements.

    Args:
        html: Document or fragment
        resolver: Resolver to use
        defaults: Definitions collected before ``<style>`` elements were
            removed from the document

    Returns:
        The body's inner markup, or the fragment when there is no body
    """
    resolver = resolver or CssVariableResolver()
    soup = parse_html(html)
    elements = [
        element
        for element in soup.find_all(style=True)
        if "var(" in (element.get("style") or "")
    ]
    if not elements:
        return serialize_html(soup)

    known = dict(defaults or {})
    known.update(collect_document_definitions(soup, resolver))
    for element in elements:
        style = element["style"]
        try:
            cleaned = _resolve_inline(style, element, resolver, known)
        except CssResolutionError as e:
            logger.warning("Keeping unresolvable inline style", tag=element.name, error=str(e))
            continue
        element["style"] = cleaned

    logger.debug("Resolved inline styles", elements=len(elements))
    return serialize_html(soup)


def _resolve_inline(
    style: str, element: Tag, resolver: CssVariableResolver, defaults: Mapping[str, str]
) -> str:
    check_balanced(style)
    prefix = f"{INLINE_WRAPPER_SELECTOR} {{"
    wrapped = f"{prefix}{style}}}"
    resolved = resolver.resolve_stylesheet(
        wrapped, inherited=_ancestor_definitions(element), defaults=defaults
    )
    if not (resolved.startswith(prefix) and resolved.endswith("}")):
        raise CssResolutionError("Synthetic wrapper was not preserved")
    return format_style(parse_style(resolved[len(prefix):-1]))


def resolve_css_variables(html: str, resolver: Optional[CssVariableResolver] = None) -> str:
    """Run the block pass followed by the inline pass."""
    resolver = resolver or CssVariableResolver()
    return resolve_inline_styles(resolve_style_blocks(html, resolver), resolver)
