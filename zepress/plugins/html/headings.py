"""Second-level heading numbering and delimiter line breaks."""

from typing import Any, Callable, Dict, Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from ...config.schema import select, text, toggle
from ...constants import DEFAULT_HEADING_DELIMITERS, HEADING_NUMBER_CLASS
from ...core.config import Settings
from ...utils.html import create_element_with_attributes, merge_style, parse_html, serialize_html
from ..base import PluginCategory, PluginDescriptor, PostProcessingPlugin

_CHINESE_DIGITS = "零一二三四五六七八九"
_CHINESE_UNITS = ("", "十", "百", "千")
_TRADITIONAL_DIGITS = "零壹貳參肆伍陸柒捌玖"
_TRADITIONAL_UNITS = ("", "拾", "佰", "仟")
_ROMAN = (
    (1000, "M"), (900, "CM"), (500, "D"), (400, "CD"), (100, "C"), (90, "XC"),
    (50, "L"), (40, "XL"), (10, "X"), (9, "IX"), (5, "V"), (4, "IV"), (1, "I"),
)


def _chinese(n: int, digits: str, units: tuple[str, ...]) -> str:
    if n <= 0 or n >= 10000:
        return str(n)
    parts: list[str] = []
    zero_pending = False
    for position in range(3, -1, -1):
        digit = n // 10 ** position % 10
        if digit == 0:
            if parts:
                zero_pending = True
            continue
        if zero_pending:
            parts.append(digits[0])
            zero_pending = False
        parts.append(digits[digit] + units[position])
    result = "".join(parts)
    # 十一 rather than 一十一
    if 10 <= n < 20:
        result = result[1:]
    return result


def _roman(n: int) -> str:
    if n <= 0 or n >= 4000:
        return str(n)
    result = []
    for value, numeral in _ROMAN:
        while n >= value:
            result.append(numeral)
            n -= value
    return "".join(result)


def _letters(n: int) -> str:
    result = ""
    while n > 0:
        n, remainder = divmod(n - 1, 26)
        result = chr(ord("A") + remainder) + result
    return result


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def _enclosed(n: int, start: int) -> str:
    return chr(start + n - 1) if 1 <= n <= 20 else f"({n})"


NUMBER_STYLES: Dict[str, Callable[[int], str]] = {
    "index": str,
    "number": lambda n: f"{n:02d}",
    "chinese": lambda n: _chinese(n, _CHINESE_DIGITS, _CHINESE_UNITS),
    "chinese-traditional": lambda n: _chinese(n, _TRADITIONAL_DIGITS, _TRADITIONAL_UNITS),
    "circle": lambda n: _enclosed(n, 0x2460),
    "parenthesis": lambda n: _enclosed(n, 0x2474),
    "fullwidth": lambda n: "".join(chr(0xFF10 + int(d)) for d in str(n)),
    "ordinal": _ordinal,
    "roman": _roman,
    "roman-lower": lambda n: _roman(n).lower(),
    "letter": _letters,
    "letter-lower": lambda n: _letters(n).lower(),
}

_STYLE_LABELS = {
    "index": "1, 2, 3",
    "number": "01, 02, 03",
    "chinese": "一, 二, 三",
    "chinese-traditional": "壹, 貳, 參",
    "circle": "①, ②, ③",
    "parenthesis": "⑴, ⑵, ⑶",
    "fullwidth": "１, ２, ３",
    "ordinal": "1st, 2nd, 3rd",
    "roman": "I, II, III",
    "roman-lower": "i, ii, iii",
    "letter": "A, B, C",
    "letter-lower": "a, b, c",
}

# Placeholders of the old single-template setting
_LEGACY_PLACEHOLDERS = {
    "{chinese}": "chinese",
    "{roman}": "roman",
    "{letter}": "letter",
    "{number}": "number",
    "{index}": "index",
}


def format_heading_number(n: int, style: str, template: str) -> str:
    """Format a heading number, e.g. ``(3, "roman", "Part {}") -> "Part III"``.

    Unknown styles fall back to plain indexes; a template without ``{}`` is
    used as a prefix.
    """
    rendered = NUMBER_STYLES.get(style, str)(n)
    if "{}" in template:
        return template.replace("{}", rendered)
    return f"{template}{rendered}"


class Headings(PostProcessingPlugin):
    """Number ``h2`` headings and break long titles after delimiters."""

    descriptor = PluginDescriptor(
        name="Headings",
        category=PluginCategory.POST_PROCESSING,
        description="Heading numbering and delimiter line breaks",
    )
    default_config = {
        "enable_heading_number": False,
        "heading_number_style": "index",
        "heading_number_format": "{}",
        "enable_heading_delimiter_break": True,
        "heading_delimiters": DEFAULT_HEADING_DELIMITERS,
        "keep_delimiter_in_output": True,
    }
    config_fields = {
        "enable_heading_number": toggle("Heading numbers", "Number second-level headings in document order"),
        "heading_number_style": select(
            "Number style", [(style, label) for style, label in _STYLE_LABELS.items()]
        ),
        "heading_number_format": text(
            "Number format", "Template for the number; {} is replaced by the number", placeholder="{}"
        ),
        "enable_heading_delimiter_break": toggle(
            "Break after delimiters", "Insert a line break after punctuation in headings"
        ),
        "heading_delimiters": text("Delimiters", placeholder=DEFAULT_HEADING_DELIMITERS),
        "keep_delimiter_in_output": toggle("Keep delimiters", "Keep the punctuation before the break"),
    }

    def migrate_config(self, blob: Dict[str, Any]) -> Dict[str, Any]:
        template = blob.pop("heading_number_template", None)
        if not template or "heading_number_format" in blob:
            return blob
        for placeholder, style in _LEGACY_PLACEHOLDERS.items():
            if placeholder in template:
                blob.setdefault("heading_number_style", style)
                blob["heading_number_format"] = template.replace(placeholder, "{}")
                self.logger.info("Migrated legacy heading template", template=template, style=style)
                break
        return blob

    def process(self, html: str, settings: Settings) -> str:
        config = self.get_config()
        numbering = _override(settings.enable_heading_number, config["enable_heading_number"])
        breaking = _override(settings.enable_heading_delimiter_break, config["enable_heading_delimiter_break"])
        if not numbering and not breaking:
            return html

        soup = parse_html(html)
        headings = soup.find_all("h2")
        if not headings:
            return html

        for index, heading in enumerate(headings, start=1):
            target = heading.find(class_="content") or heading
            if breaking:
                self._break_delimiters(
                    soup, target, config["heading_delimiters"], config["keep_delimiter_in_output"]
                )
            if numbering:
                label = format_heading_number(
                    index, config["heading_number_style"], config["heading_number_format"]
                )
                self._insert_number(soup, target, label)
                merge_style(heading, {"text-align": "center"})

        self.logger.debug("Processed headings", count=len(headings), numbering=numbering)
        return serialize_html(soup)

    def _insert_number(self, soup: BeautifulSoup, target: Tag, label: str) -> None:
        existing = target.find(class_=HEADING_NUMBER_CLASS)
        if existing is not None:
            wrapper = existing.parent if existing.parent is not target else existing
            following = wrapper.find_next_sibling()
            if following is not None and following.name == "br":
                following.decompose()
            wrapper.decompose()

        number = create_element_with_attributes(
            soup, "span", {"leaf": "", "class": HEADING_NUMBER_CLASS}, text=label
        )
        wrapper = create_element_with_attributes(soup, "span", {"textstyle": ""})
        wrapper.append(number)
        target.insert(0, wrapper)
        wrapper.insert_after(soup.new_tag("br"))

    def _break_delimiters(self, soup: BeautifulSoup, target: Tag, delimiters: str, keep: bool) -> None:
        if not delimiters:
            return
        for node in list(target.find_all(string=True)):
            if node.find_parent(class_=HEADING_NUMBER_CLASS) or node.find_parent("code"):
                continue
            replacement = self._split_text(soup, str(node), delimiters, keep)
            if replacement is not None:
                node.replace_with(*replacement)

    @staticmethod
    def _split_text(soup: BeautifulSoup, value: str, delimiters: str, keep: bool) -> Optional[list]:
        pieces: list = []
        current = ""
        changed = False
        for position, char in enumerate(value):
            if char in delimiters and value[position + 1:].strip():
                if keep:
                    current += char
                pieces.append(NavigableString(current))
                pieces.append(soup.new_tag("br"))
                current = ""
                changed = True
            else:
                current += char
        if not changed:
            return None
        if current:
            pieces.append(NavigableString(current))
        return [piece for piece in pieces if not isinstance(piece, NavigableString) or piece]


def _override(setting: Optional[bool], configured: bool) -> bool:
    return configured if setting is None else setting
