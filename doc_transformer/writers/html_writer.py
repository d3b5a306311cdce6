"""
Writer for HTML output format.
"""

import logging
from html import escape
from typing import Any, Dict, List

from doc_transformer.core.document import (
    Document,
    Header,
    Hyperlink,
    Image,
    ListElement,
    Paragraph,
    Table,
    TableCell,
    Text,
)
from doc_transformer.core.errors import UnsupportedElement
from doc_transformer.core.images import emu_to_pixels
from doc_transformer.writers.base import OutputWriter, WriterRegistry, image_data_uri

logger = logging.getLogger(__name__)

MAX_HEADING_TAG = 6

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body>
{body}
</body>
</html>
"""


@WriterRegistry.register
class HtmlWriter(OutputWriter):
    """Writer for standalone HTML5 documents."""

    ELEMENT_HANDLERS = {
        Text: "_text",
        Header: "_header",
        Hyperlink: "_hyperlink",
        Image: "_image",
        ListElement: "_list",
        Table: "_table",
        Paragraph: "_paragraph",
    }

    @classmethod
    def get_format_name(cls) -> str:
        return "html"

    @classmethod
    def get_extension(cls) -> str:
        return ".html"

    @classmethod
    def get_default_options(cls) -> Dict[str, Any]:
        return {"title": ""}

    def write(self, doc: Document, **options) -> bytes:
        """
        Render document as an HTML page.

        Options:
            title: Page title; defaults to the first heading
        """
        opts = self._options(options)
        title = opts["title"]
        if not title:
            headers = doc.get_headers()
            title = headers[0].text if headers else ""

        lines: List[str] = []
        self._render_elements(doc.elements, lines)
        return PAGE_TEMPLATE.format(title=escape(title), body="\n".join(lines)).encode("utf-8")

    def _link(self, element: Hyperlink) -> str:
        title_attr = f' title="{escape(element.alt)}"' if element.alt else ""
        return f'<a href="{escape(element.url)}"{title_attr}>{escape(element.title)}</a>'

    def _text(self, element: Text, lines: List[str]) -> None:
        lines.append(f"<p>{escape(element.text)}</p>")

    def _header(self, element: Header, lines: List[str]) -> None:
        tag = f"h{min(max(element.level, 1), MAX_HEADING_TAG)}"
        lines.append(f"<{tag}>{escape(element.text)}</{tag}>")

    def _hyperlink(self, element: Hyperlink, lines: List[str]) -> None:
        lines.append(f"<p>{self._link(element)}</p>")

    def _image(self, element: Image, lines: List[str]) -> None:
        handle = element.image
        attrs = f'src="{image_data_uri(handle.bytes())}"'

        size = handle.size().as_emu()
        if size is not None:
            width, height = (emu_to_pixels(v) for v in size)
            attrs += f' width="{width}" height="{height}"'
        lines.append(f"<p><img {attrs}></p>")

    def _list(self, element: ListElement, lines: List[str]) -> None:
        lines.append(self._list_html(element))

    def _list_html(self, element: ListElement) -> str:
        tag = "ol" if element.numbered else "ul"
        parts = [f"<{tag}>"]
        for item in element.elements:
            child = item.element
            if isinstance(child, ListElement):
                # Nested lists belong inside the preceding item
                nested = self._list_html(child)
                if len(parts) > 1 and parts[-1].endswith("</li>"):
                    parts[-1] = parts[-1][: -len("</li>")] + nested + "</li>"
                else:
                    parts.append(f"<li>{nested}</li>")
            elif isinstance(child, Text):
                parts.append(f"<li>{escape(child.text)}</li>")
            elif isinstance(child, Hyperlink):
                parts.append(f"<li>{self._link(child)}</li>")
            elif isinstance(child, Header):
                parts.append(f"<li><strong>{escape(child.text)}</strong></li>")
            else:
                logger.warning("Unsupported element inside list: %s", type(child).__name__)
        parts.append(f"</{tag}>")
        return "".join(parts)

    def _cell_html(self, cell: TableCell, tag: str) -> str:
        if isinstance(cell.element, Text):
            content = escape(cell.element.text)
        elif isinstance(cell.element, Hyperlink):
            content = self._link(cell.element)
        else:
            logger.warning("Table cells hold text only, skipping %s", type(cell.element).__name__)
            content = ""
        return f"<{tag}>{content}</{tag}>"

    def _table(self, element: Table, lines: List[str]) -> None:
        if element.column_count == 0:
            raise UnsupportedElement(element, "Table has no cells")

        parts = ["<table>"]
        if element.headers:
            parts.append("<tr>" + "".join(self._cell_html(c, "th") for c in element.headers) + "</tr>")
        for row in element.rows:
            parts.append("<tr>" + "".join(self._cell_html(c, "td") for c in row.cells) + "</tr>")
        parts.append("</table>")
        lines.append("\n".join(parts))

    def _paragraph(self, element: Paragraph, lines: List[str]) -> None:
        for child in element.elements:
            if isinstance(child, Text):
                self._text(child, lines)
            else:
                logger.error("Unknown paragraph element: %s", type(child).__name__)
