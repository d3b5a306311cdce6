"""
Writer for plain text output.
"""

import logging
from typing import List

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
from doc_transformer.core.processing import BULLET_INDENT, bullet_text
from doc_transformer.writers.base import OutputWriter, WriterRegistry

logger = logging.getLogger(__name__)


@WriterRegistry.register
class TextWriter(OutputWriter):
    """Writer for plain text; images have no text representation."""

    ELEMENT_HANDLERS = {
        Text: "_text",
        Header: "_header",
        Hyperlink: "_hyperlink",
        Image: "_unsupported",
        ListElement: "_list",
        Table: "_table",
        Paragraph: "_paragraph",
    }

    @classmethod
    def get_format_name(cls) -> str:
        return "txt"

    @classmethod
    def get_extension(cls) -> str:
        return ".txt"

    def write(self, doc: Document, **options) -> bytes:
        blocks: List[str] = []
        self._render_elements(doc.elements, blocks)
        return ("\n\n".join(blocks) + "\n").encode("utf-8") if blocks else b""

    def _link_text(self, element: Hyperlink) -> str:
        return f"{element.title} ({element.url})"

    def _text(self, element: Text, blocks: List[str]) -> None:
        blocks.append(element.text)

    def _header(self, element: Header, blocks: List[str]) -> None:
        blocks.append(element.text)

    def _hyperlink(self, element: Hyperlink, blocks: List[str]) -> None:
        blocks.append(self._link_text(element))

    def _list(self, element: ListElement, blocks: List[str]) -> None:
        lines: List[str] = []
        self._list_lines(element, 0, lines)
        if lines:
            blocks.append("\n".join(lines))

    def _list_lines(self, element: ListElement, depth: int, lines: List[str]) -> None:
        ordinal = 0
        for item in element.elements:
            child = item.element
            if isinstance(child, ListElement):
                self._list_lines(child, depth + 1, lines)
                continue

            if isinstance(child, (Text, Header)):
                text = child.text
            elif isinstance(child, Hyperlink):
                text = self._link_text(child)
            else:
                logger.warning("Unsupported element inside list: %s", type(child).__name__)
                continue

            ordinal += 1
            if element.numbered:
                lines.append(f"{' ' * (depth * BULLET_INDENT)}{ordinal}. {text}")
            else:
                lines.append(bullet_text(text, depth))

    def _cell_text(self, cell: TableCell) -> str:
        if isinstance(cell.element, Text):
            return cell.element.text
        if isinstance(cell.element, Hyperlink):
            return self._link_text(cell.element)
        logger.warning("Table cells hold text only, skipping %s", type(cell.element).__name__)
        return ""

    def _table(self, element: Table, blocks: List[str]) -> None:
        rows = [element.headers] if element.headers else []
        rows.extend(row.cells for row in element.rows)
        lines = ["\t".join(self._cell_text(cell) for cell in cells) for cells in rows]
        if lines:
            blocks.append("\n".join(lines))

    def _paragraph(self, element: Paragraph, blocks: List[str]) -> None:
        for child in element.elements:
            if isinstance(child, Text):
                self._text(child, blocks)
            else:
                logger.error("Unknown paragraph element: %s", type(child).__name__)
