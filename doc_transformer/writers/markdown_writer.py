"""
Writer for Markdown output format.
"""

import logging
import re
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
from doc_transformer.core.errors import UnsupportedElement
from doc_transformer.core.images import emu_to_pixels
from doc_transformer.writers.base import OutputWriter, WriterRegistry, image_data_uri

logger = logging.getLogger(__name__)

LIST_INDENT = "    "
MAX_ATX_LEVEL = 6

# Adjacent lists merge into one unless something sits between them
LIST_SEPARATOR = "<!-- -->"
_LIST_BLOCK_RE = re.compile(r"^(-|\d+\.) ")
_BLOCK_MARKER_RE = re.compile(r"^[#>+*-]")
_ORDINAL_MARKER_RE = re.compile(r"^(\d+)\.(?=\s|$)")


def escape_table_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def escape_block_start(text: str) -> str:
    """Backslash-escape a leading heading, quote or list marker so text stays text."""
    if _BLOCK_MARKER_RE.match(text):
        return "\\" + text
    return _ORDINAL_MARKER_RE.sub(r"\1\\.", text, count=1)


@WriterRegistry.register
class MarkdownWriter(OutputWriter):
    """Writer for Markdown; blocks are separated by blank lines."""

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
        return "md"

    @classmethod
    def get_extension(cls) -> str:
        return ".md"

    def write(self, doc: Document, **options) -> bytes:
        blocks: List[str] = []
        self._render_elements(doc.elements, blocks)
        return ("\n\n".join(blocks) + "\n").encode("utf-8") if blocks else b""

    def _text(self, element: Text, blocks: List[str]) -> None:
        blocks.append(escape_block_start(element.text))

    def _header(self, element: Header, blocks: List[str]) -> None:
        level = min(max(element.level, 1), MAX_ATX_LEVEL)
        blocks.append(f"{'#' * level} {element.text}")

    def _link(self, element: Hyperlink) -> str:
        if element.alt:
            alt = element.alt.replace('"', '\\"')
            return f'[{element.title}]({element.url} "{alt}")'
        return f"[{element.title}]({element.url})"

    def _hyperlink(self, element: Hyperlink, blocks: List[str]) -> None:
        blocks.append(self._link(element))

    def _image(self, element: Image, blocks: List[str]) -> None:
        handle = element.image
        src = image_data_uri(handle.bytes())

        size = handle.size().as_emu()
        if size is None:
            blocks.append(f"![]({src})")
        else:
            # Markdown has no size syntax; fall back to inline HTML
            width, height = (emu_to_pixels(v) for v in size)
            blocks.append(f'<img src="{src}" width="{width}" height="{height}">')

    def _list(self, element: ListElement, blocks: List[str]) -> None:
        lines: List[str] = []
        self._list_lines(element, 0, lines)
        if not lines:
            return
        if blocks and _LIST_BLOCK_RE.match(blocks[-1]):
            blocks.append(LIST_SEPARATOR)
        blocks.append("\n".join(lines))

    def _list_lines(self, element: ListElement, depth: int, lines: List[str]) -> None:
        ordinal = 0
        after_leaf = False
        for item in element.elements:
            child = item.element
            if isinstance(child, ListElement):
                # A nested list hangs off a parent item; open an empty one if
                # there is none to hang from at this depth
                if not after_leaf:
                    ordinal += 1
                    lines.append(f"{LIST_INDENT * depth}{self._marker(element, ordinal)} ")
                self._list_lines(child, depth + 1, lines)
                after_leaf = False
                continue

            if isinstance(child, Text):
                text = escape_block_start(child.text)
            elif isinstance(child, Hyperlink):
                text = self._link(child)
            elif isinstance(child, Header):
                text = f"**{child.text}**"
            else:
                logger.warning("Unsupported element inside list: %s", type(child).__name__)
                continue

            ordinal += 1
            lines.append(f"{LIST_INDENT * depth}{self._marker(element, ordinal)} {text}")
            after_leaf = True

    @staticmethod
    def _marker(element: ListElement, ordinal: int) -> str:
        return f"{ordinal}." if element.numbered else "-"

    def _cell_text(self, cell: TableCell) -> str:
        if isinstance(cell.element, Text):
            return escape_table_cell(cell.element.text)
        if isinstance(cell.element, Hyperlink):
            return escape_table_cell(self._link(cell.element))
        logger.warning("Table cells hold text only, skipping %s", type(cell.element).__name__)
        return ""

    def _table(self, element: Table, blocks: List[str]) -> None:
        columns = element.column_count
        if columns == 0:
            raise UnsupportedElement(element, "Table has no cells")

        def row_line(cells: List[TableCell]) -> str:
            texts = [self._cell_text(cell) for cell in cells]
            texts += [""] * (columns - len(texts))
            return "| " + " | ".join(texts) + " |"

        # Pipe tables need a header row; an empty one stands in when there is none
        lines = [
            row_line(element.headers),
            "|" + "|".join([" --- "] * columns) + "|",
        ]
        lines.extend(row_line(row.cells) for row in element.rows)
        blocks.append("\n".join(lines))

    def _paragraph(self, element: Paragraph, blocks: List[str]) -> None:
        for child in element.elements:
            if isinstance(child, Text):
                self._text(child, blocks)
            else:
                logger.error("Unknown paragraph element: %s", type(child).__name__)
