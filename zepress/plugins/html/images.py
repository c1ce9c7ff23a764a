"""Image sizing, wrapper marking and captions."""

from bs4 import Tag

from ...config.schema import toggle
from ...constants import DEFAULT_IMAGE_STYLE, IMAGE_CAPTION_CLASS, IMAGE_WRAPPER_CLASS
from ...core.config import Settings
from ...utils.html import add_class, create_element_with_attributes, get_classes, parse_html, serialize_html
from ..base import PluginCategory, PluginDescriptor, PostProcessingPlugin


def _is_caption(element) -> bool:
    return isinstance(element, Tag) and IMAGE_CAPTION_CLASS in get_classes(element)


class Images(PostProcessingPlugin):
    """Give images a responsive default style and optional alt-text captions."""

    descriptor = PluginDescriptor(
        name="Images",
        category=PluginCategory.POST_PROCESSING,
        description="Image sizing and captions",
    )
    default_config = {"show_image_caption": True}
    config_fields = {
        "show_image_caption": toggle("Image captions", "Show the alt text below each image"),
    }

    def process(self, html: str, settings: Settings) -> str:
        soup = parse_html(html)
        images = soup.find_all("img")
        if not images:
            return html

        show_caption = settings.show_image_caption
        if show_caption is None:
            show_caption = self.get_setting("show_image_caption", True)

        for img in images:
            src = img.get("src")
            if src and not img.get("data-src"):
                img["data-src"] = src
            if not img.get("style"):
                img["style"] = DEFAULT_IMAGE_STYLE

            parent = img.parent
            if isinstance(parent, Tag) and parent.name not in ("[document]", "body"):
                add_class(parent, IMAGE_WRAPPER_CLASS)

            anchor = self._caption_anchor(img)
            if show_caption:
                self._add_caption(soup, img, anchor)
            else:
                self._remove_caption(img, anchor)

        self.logger.debug("Processed images", count=len(images), captions=show_caption)
        return serialize_html(soup)

    @staticmethod
    def _caption_anchor(img: Tag) -> Tag:
        """Element the caption follows: the enclosing paragraph when the image is alone in it."""
        parent = img.parent
        if isinstance(parent, Tag) and parent.name == "p":
            siblings = [
                child for child in parent.contents
                if not (isinstance(child, str) and not child.strip())
            ]
            if siblings == [img]:
                return parent
        return img

    @staticmethod
    def _figure(img: Tag):
        return img.find_parent("figure")

    def _add_caption(self, soup, img: Tag, anchor: Tag) -> None:
        alt = (img.get("alt") or "").strip()
        if not alt:
            return
        figure = self._figure(img)
        if figure is not None and figure.find("figcaption") is not None:
            return
        if _is_caption(anchor.find_next_sibling()):
            return
        if anchor is img:
            # Inline image: a paragraph cannot nest here
            caption = create_element_with_attributes(
                soup, "span", {"class": IMAGE_CAPTION_CLASS, "style": "display: block;"}
            )
        else:
            caption = create_element_with_attributes(soup, "p", {"class": IMAGE_CAPTION_CLASS})
        caption.append(create_element_with_attributes(soup, "span", {"leaf": ""}, text=alt))
        anchor.insert_after(caption)

    def _remove_caption(self, img: Tag, anchor: Tag) -> None:
        for attr in ("alt", "title"):
            if img.has_attr(attr):
                del img[attr]
        figure = self._figure(img)
        if figure is not None:
            for figcaption in figure.find_all("figcaption"):
                figcaption.decompose()
        following = anchor.find_next_sibling()
        if _is_caption(following):
            following.decompose()
