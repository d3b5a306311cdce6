"""
Writer for JSON output format.
"""

import base64
import json
from typing import Any, Dict

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
from doc_transformer.writers.base import OutputWriter, WriterRegistry

FORMAT_VERSION = 1


@WriterRegistry.register
class JsonWriter(OutputWriter):
    """
    Writer for JSON output format.

    Produces a lossless serialization of the document model: every element is
    an object tagged by "type", image bytes are base64 encoded.
    """

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
        return "json"

    @classmethod
    def get_extension(cls) -> str:
        return ".json"

    @classmethod
    def get_default_options(cls) -> Dict[str, Any]:
        return {
            "indent": 2,
            "ensure_ascii": False,
        }

    def write(self, doc: Document, **options) -> bytes:
        """
        Render document as JSON.

        Options:
            indent: JSON indentation level
            ensure_ascii: Whether to escape non-ASCII characters
        """
        opts = self._options(options)
        json_data = {
            "version": FORMAT_VERSION,
            "elements": [self._render_element(element) for element in doc.elements],
        }
        return json.dumps(
            json_data,
            ensure_ascii=opts["ensure_ascii"],
            indent=opts["indent"],
        ).encode("utf-8")

    def _text(self, element: Text) -> Dict:
        return {"type": "text", "text": element.text, "size": element.size}

    def _header(self, element: Header) -> Dict:
        return {"type": "header", "level": element.level, "text": element.text}

    def _hyperlink(self, element: Hyperlink) -> Dict:
        return {
            "type": "hyperlink",
            "title": element.title,
            "url": element.url,
            "alt": element.alt,
            "size": element.size,
        }

    def _image(self, element: Image) -> Dict:
        handle = element.image
        return {
            "type": "image",
            "data": base64.b64encode(handle.bytes()).decode("ascii"),
            "width": handle.dimension.width,
            "height": handle.dimension.height,
            "source": handle.source,
        }

    def _list(self, element: ListElement) -> Dict:
        return {
            "type": "list",
            "numbered": element.numbered,
            "items": [self._render_element(item.element) for item in element.elements],
        }

    def _cell(self, cell: TableCell) -> Dict:
        return self._render_element(cell.element)

    def _table(self, element: Table) -> Dict:
        return {
            "type": "table",
            "headers": [self._cell(cell) for cell in element.headers],
            "rows": [[self._cell(cell) for cell in row.cells] for row in element.rows],
        }

    def _paragraph(self, element: Paragraph) -> Dict:
        return {
            "type": "paragraph",
            "elements": [self._render_element(child) for child in element.elements],
        }
