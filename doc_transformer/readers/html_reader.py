"""
Reader for HTML documents.

Walks the parsed tree with BeautifulSoup and maps block-level tags onto
document elements. The markdown reader renders to HTML and reuses this walker.
"""

import base64
import binascii
import logging
from typing import List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from doc_transformer.core.document import (
    BODY_TEXT_SIZE,
    LIST_TEXT_SIZE,
    Document,
    Element,
    Header,
    Hyperlink,
    Image,
    ImageDimension,
    ImageHandle,
    ListElement,
    ListItem,
    Table,
    TableCell,
    TableRow,
    Text,
)
from doc_transformer.core.errors import STAGE_CONTAINER_READ, STAGE_IMAGE_LOAD, FormatError
from doc_transformer.core.images import ImageLoader, pixels_to_emu
from doc_transformer.core.processing import collapse_whitespace
from doc_transformer.readers.base import InputReader, ReaderRegistry

logger = logging.getLogger(__name__)

HEADING_TAGS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}
LIST_TAGS = ("ul", "ol")
CONTAINER_TAGS = (
    "html", "body", "main", "article", "section", "div", "header", "footer",
    "nav", "aside", "figure", "thead", "tbody",
)
SKIPPED_TAGS = ("head", "script", "style", "br", "hr", "meta", "link", "title")


def _decode_data_uri(src: str) -> bytes:
    header, _, payload = src.partition(",")
    try:
        if header.endswith(";base64"):
            return base64.b64decode(payload, validate=True)
        return payload.encode("utf-8")
    except (binascii.Error, ValueError) as e:
        raise FormatError(f"Invalid image data URI: {e}", STAGE_IMAGE_LOAD) from e


def _pixel_attribute(tag: Tag, name: str) -> Optional[str]:
    value = tag.get(name)
    if not value:
        return None
    value = value.strip().lower()
    if value.endswith("px"):
        value = value[:-2]
    try:
        pixels = int(float(value))
    except (ValueError, OverflowError):
        return None
    return str(pixels_to_emu(pixels)) if pixels > 0 else None


class _HtmlConverter:
    """Converts one parsed tree; holds the image loader for the call."""

    def __init__(self, image_loader: Optional[ImageLoader]):
        self.image_loader = image_loader

    def convert(self, soup) -> Document:
        doc = Document()
        for element in self.convert_children(soup):
            doc.add(element)
        return doc

    def convert_children(self, container) -> List[Element]:
        elements: List[Element] = []
        for node in container.children:
            if isinstance(node, NavigableString):
                if type(node) is not NavigableString:
                    # Comments, doctype, CDATA
                    continue
                text = collapse_whitespace(str(node))
                if text:
                    elements.append(Text(text=text, size=BODY_TEXT_SIZE))
            elif isinstance(node, Tag):
                elements.extend(self.convert_tag(node))
        return elements

    def convert_tag(self, tag: Tag) -> List[Element]:
        name = tag.name.lower()
        if name in SKIPPED_TAGS:
            return []
        if name in HEADING_TAGS:
            return [Header(level=HEADING_TAGS[name], text=collapse_whitespace(tag.get_text()))]
        if name in LIST_TAGS:
            return [self.convert_list(tag)]
        if name == "table":
            return [self.convert_table(tag)]
        if name == "img":
            image = self.convert_image(tag)
            return [image] if image else []
        if name == "a":
            return [self.convert_link(tag, BODY_TEXT_SIZE)]
        if name == "p":
            return self.convert_paragraph(tag)
        if name in CONTAINER_TAGS:
            return self.convert_children(tag)

        text = collapse_whitespace(tag.get_text())
        return [Text(text=text, size=BODY_TEXT_SIZE)] if text else []

    def convert_paragraph(self, tag: Tag) -> List[Element]:
        images = tag.find_all("img")
        if images:
            return [image for image in map(self.convert_image, images) if image]

        text = collapse_whitespace(tag.get_text())
        link = self._sole_link(tag, text)
        if link is not None:
            return [self.convert_link(link, BODY_TEXT_SIZE)]
        return [Text(text=text, size=BODY_TEXT_SIZE)]

    def _sole_link(self, tag: Tag, text: str) -> Optional[Tag]:
        """The <a> of a block whose whole text is that one link."""
        links = tag.find_all("a", href=True)
        if len(links) == 1 and collapse_whitespace(links[0].get_text()) == text:
            return links[0]
        return None

    def convert_link(self, tag: Tag, size: int) -> Hyperlink:
        return Hyperlink(
            title=collapse_whitespace(tag.get_text()),
            url=tag.get("href", ""),
            alt=tag.get("title"),
            size=size,
        )

    def convert_image(self, tag: Tag) -> Optional[Image]:
        src = tag.get("src")
        if not src:
            return None

        width = _pixel_attribute(tag, "width")
        height = _pixel_attribute(tag, "height")

        if src.startswith("data:"):
            data = _decode_data_uri(src)
            source = None
        elif self.image_loader is None:
            logger.warning("No image loader configured, skipping image %s", src)
            return None
        else:
            try:
                loaded = self.image_loader(src)
            except OSError as e:
                raise FormatError(f"Could not load image {src}: {e}", STAGE_IMAGE_LOAD) from e
            data = loaded.data
            width = width or loaded.width
            height = height or loaded.height
            source = src

        return Image(ImageHandle(
            data=data,
            dimension=ImageDimension(width=width, height=height),
            source=source,
        ))

    def convert_list(self, tag: Tag) -> ListElement:
        """
        Convert <ul>/<ol>; a nested list inside an <li> becomes its own
        ListItem right after the item's text.
        """
        items: List[ListItem] = []
        for li in tag.find_all("li", recursive=False):
            nested = []
            content = []
            for child in li.children:
                if isinstance(child, Tag) and child.name in LIST_TAGS:
                    nested.append(child)
                else:
                    content.append(child)

            leaf = self._list_leaf(content)
            if leaf is not None:
                items.append(ListItem(leaf))
            for child_list in nested:
                items.append(ListItem(self.convert_list(child_list)))
        return ListElement(elements=items, numbered=tag.name == "ol")

    def _list_leaf(self, nodes) -> Optional[Element]:
        text = collapse_whitespace(" ".join(
            node.get_text() if isinstance(node, Tag) else str(node) for node in nodes
        ))
        if not text:
            return None
        for node in nodes:
            if isinstance(node, Tag):
                link = node if node.name == "a" else self._sole_link(node, text)
                if link is not None and collapse_whitespace(link.get_text()) == text:
                    return self.convert_link(link, LIST_TEXT_SIZE)
        return Text(text=text, size=LIST_TEXT_SIZE)

    def convert_table(self, tag: Tag) -> Table:
        headers: List[TableCell] = []
        rows: List[TableRow] = []
        for tr in tag.find_all("tr"):
            if tr.find_parent("table") is not tag:
                continue
            cells = tr.find_all(["td", "th"], recursive=False)
            converted = [
                TableCell(Text(text=collapse_whitespace(cell.get_text()), size=BODY_TEXT_SIZE))
                for cell in cells
            ]
            if not rows and not headers and cells and all(cell.name == "th" for cell in cells):
                # Blank header rows only exist to satisfy markdown table syntax
                if any(c.element.text for c in converted):
                    headers = converted
                continue
            rows.append(TableRow(cells=converted))
        return Table(headers=headers, rows=rows)


@ReaderRegistry.register
class HtmlReader(InputReader):
    """Reader for HTML documents."""

    @classmethod
    def get_format_name(cls) -> str:
        return "html"

    @classmethod
    def get_extensions(cls) -> List[str]:
        return [".html", ".htm"]

    def read(self, data: bytes) -> Document:
        return self.read_with_loader(data, None)

    def read_with_loader(self, data: bytes, image_loader: Optional[ImageLoader]) -> Document:
        return _HtmlConverter(image_loader).convert(self._parse_html(self._decode(data)))

    def _decode(self, data: bytes) -> str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FormatError(f"Input is not UTF-8 text: {e}", STAGE_CONTAINER_READ) from e

    def _parse_html(self, html: str):
        return BeautifulSoup(html, "html.parser")
