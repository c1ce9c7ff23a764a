"""HTML and inline-style helpers shared by the post-processing plugins."""

from typing import Any

from bs4 import BeautifulSoup, Tag


def parse_html(html: str) -> BeautifulSoup:
    """Parse a document or fragment with the stdlib-backed parser."""
    return BeautifulSoup(html, "html.parser")


def serialize_html(soup: BeautifulSoup) -> str:
    """Serialize a parsed document without adding wrapper elements.

    When the input was a full document, only the body's inner markup is
    returned; fragments are serialized as they are.

    Args:
        soup: Parsed document

    Returns:
        HTML string
    """
    body = soup.body
    if body is not None:
        return body.decode_contents()
    return soup.decode()


def split_declarations(style: str) -> list[str]:
    """Split a declaration list on ``;`` outside quotes and parentheses."""
    parts: list[str] = []
    depth = 0
    quote = ""
    current: list[str] = []
    for char in style:
        if quote:
            if char == quote:
                quote = ""
        elif char in "\"'":
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth = max(depth - 1, 0)
        elif char == ";" and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return [part.strip() for part in parts if part.strip()]


def parse_style(style: str | None) -> dict[str, str]:
    """Parse an inline ``style`` attribute into an ordered property map.

    Args:
        style: Attribute value (may be None)

    Returns:
        Dict of lower-cased property name to value; later duplicates win
    """
    declarations: dict[str, str] = {}
    if not style:
        return declarations
    for declaration in split_declarations(style):
        name, sep, value = declaration.partition(":")
        if not sep or not name.strip():
            continue
        prop = name.strip()
        if not prop.startswith("--"):
            prop = prop.lower()
        declarations[prop] = value.strip()
    return declarations


def format_style(declarations: dict[str, str]) -> str:
    return "; ".join(f"{name}: {value}" for name, value in declarations.items()) + (
        ";" if declarations else ""
    )


def merge_style(element: Tag, declarations: dict[str, str], override: bool = True) -> None:
    """Merge declarations into an element's inline style.

    Args:
        element: Element to update
        declarations: Properties to add
        override: Replace properties the element already declares
    """
    current = parse_style(element.get("style"))
    for name, value in declarations.items():
        if override or name not in current:
            current[name] = value
    if current:
        element["style"] = format_style(current)


def get_classes(element: Tag) -> list[str]:
    """Return an element's class list regardless of how bs4 stored it."""
    class_attr = element.get("class", [])
    if isinstance(class_attr, str):
        return class_attr.split()
    return [str(cls) for cls in class_attr]


def add_class(element: Tag, class_name: str) -> None:
    classes = get_classes(element)
    if class_name not in classes:
        classes.append(class_name)
    element["class"] = classes


def create_element_with_attributes(
    soup: BeautifulSoup, tag_name: str, attributes: dict[str, Any], text: str | None = None
) -> Tag:
    """Create new HTML element with specified attributes.

    Args:
        soup: BeautifulSoup object (for creating new tags)
        tag_name: HTML tag name (section, span, p, etc.)
        attributes: Dictionary of attributes to set, None values are skipped
        text: Optional text content

    Returns:
        New HTML element
    """
    element = soup.new_tag(tag_name)
    for attr_name, attr_value in attributes.items():
        if attr_value is not None:
            element[attr_name] = attr_value
    if text is not None:
        element.string = text
    return element
