"""
Writer for Microsoft Word .docx files.
"""

import io
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from docx import Document as DocxDocument
from docx.image.exceptions import UnrecognizedImageError
from docx.image.image import Image as DocxImage
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Emu, Pt
from lxml import etree

from doc_transformer.core.document import (
    Document,
    Element,
    Header,
    Hyperlink,
    Image,
    ImageHandle,
    ListElement,
    Paragraph,
    Table,
    TableCell,
    TableRow,
    Text,
)
from doc_transformer.core.errors import (
    STAGE_CONTAINER_WRITE,
    STAGE_IMAGE_ENCODE,
    EncodingError,
    UnsupportedElement,
)
from doc_transformer.core.images import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, constrain_image_size
from doc_transformer.core.processing import bullet_text, sanitize_xml_text
from doc_transformer.writers.base import OutputWriter, WriterRegistry
from doc_transformer.writers.docx_numbering import (
    MAX_LIST_LEVEL,
    ListNumbering,
    register_list_numbering,
    set_paragraph_numbering,
)

logger = logging.getLogger(__name__)

NORMAL_STYLE = "Normal"
LIST_BULLET_STYLE = "ListBullet"
MAX_HEADING_STYLE = 9


def heading_style_id(level: int) -> str:
    """Style id for a heading rank; invalid ranks fall back to body text."""
    if level < 1:
        return NORMAL_STYLE
    return f"Heading{min(level, MAX_HEADING_STYLE)}"


@dataclass
class DocxBuilder:
    """State of one output document while elements are rendered into it."""
    document: Any  # python-docx Document
    numbering: ListNumbering
    options: Dict[str, Any]


@WriterRegistry.register
class DocxWriter(OutputWriter):
    """Writer for Microsoft Word .docx files (Open XML format)."""

    ELEMENT_HANDLERS = {
        Text: "_add_text",
        Header: "_add_header",
        Hyperlink: "_add_hyperlink",
        Image: "_add_image",
        ListElement: "_add_list",
        Table: "_add_table",
        Paragraph: "_add_paragraph_group",
    }

    @classmethod
    def get_format_name(cls) -> str:
        return "docx"

    @classmethod
    def get_extension(cls) -> str:
        return ".docx"

    @classmethod
    def get_default_options(cls) -> Dict[str, Any]:
        return {
            "max_image_width": MAX_IMAGE_WIDTH,
            "max_image_height": MAX_IMAGE_HEIGHT,
        }

    def write(self, doc: Document, **options) -> bytes:
        """
        Render document to .docx bytes.

        Options:
            max_image_width: Widest image allowed, in EMU
            max_image_height: Tallest image allowed, in EMU
        """
        opts = self._options(options)

        new_doc = DocxDocument()
        builder = DocxBuilder(
            document=new_doc,
            numbering=register_list_numbering(new_doc),
            options=opts,
        )

        self._render_elements(doc.elements, builder)

        buffer = io.BytesIO()
        try:
            new_doc.save(buffer)
        except (OSError, ValueError, etree.LxmlError) as e:
            raise EncodingError(f"Could not write .docx package: {e}", STAGE_CONTAINER_WRITE) from e
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # Paragraph helpers
    # ------------------------------------------------------------------

    def _new_paragraph(self, builder: DocxBuilder, style_id: Optional[str] = None):
        paragraph = builder.document.add_paragraph()
        if style_id:
            paragraph._p.style = style_id
        return paragraph

    def _add_run(self, paragraph, text: str, size: int):
        run = paragraph.add_run(sanitize_xml_text(text))
        if size > 0:
            run.font.size = Pt(size)
        return run

    def _append_hyperlink(self, paragraph, link: Hyperlink) -> None:
        """Append a w:hyperlink showing the url after the paragraph's runs."""
        r_id = paragraph.part.relate_to(link.url, RT.HYPERLINK, is_external=True)
        hyperlink = OxmlElement("w:hyperlink")
        hyperlink.set(qn("r:id"), r_id)
        if link.alt:
            hyperlink.set(qn("w:tooltip"), sanitize_xml_text(link.alt))

        run = self._add_run(paragraph, link.url, link.size)
        run.font.underline = True
        hyperlink.append(run._r)
        paragraph._p.append(hyperlink)

    # ------------------------------------------------------------------
    # Top-level elements
    # ------------------------------------------------------------------

    def _add_text(self, element: Text, builder: DocxBuilder) -> None:
        paragraph = self._new_paragraph(builder, NORMAL_STYLE)
        self._add_run(paragraph, element.text, element.size)

    def _add_header(self, element: Header, builder: DocxBuilder) -> None:
        paragraph = self._new_paragraph(builder, heading_style_id(element.level))
        self._add_run(paragraph, element.text, element.font_size)

    def _add_hyperlink(self, element: Hyperlink, builder: DocxBuilder) -> None:
        paragraph = self._new_paragraph(builder, NORMAL_STYLE)
        self._add_run(paragraph, element.title, element.size)
        self._append_hyperlink(paragraph, element)

    def _add_paragraph_group(self, element: Paragraph, builder: DocxBuilder) -> None:
        for child in element.elements:
            if isinstance(child, Text):
                self._add_text(child, builder)
            else:
                logger.error("Unknown paragraph element: %s", type(child).__name__)

    def _add_image(self, element: Image, builder: DocxBuilder) -> None:
        width, height = self._image_size(element.image, builder.options)
        paragraph = builder.document.add_paragraph()
        run = paragraph.add_run()
        try:
            run.add_picture(io.BytesIO(element.image.bytes()), width=Emu(width), height=Emu(height))
        except UnrecognizedImageError as e:
            raise EncodingError(f"Unrecognized image data: {e}", STAGE_IMAGE_ENCODE) from e

    def _image_size(self, handle: ImageHandle, opts: Dict[str, Any]) -> Tuple[int, int]:
        """Declared size (or natural size when none is usable), clamped to the page."""
        size = handle.size().as_emu()
        if size is None:
            try:
                natural = DocxImage.from_blob(handle.bytes())
            except UnrecognizedImageError as e:
                raise EncodingError(f"Unrecognized image data: {e}", STAGE_IMAGE_ENCODE) from e
            size = (int(natural.width), int(natural.height))
        return constrain_image_size(
            size[0], size[1], opts["max_image_width"], opts["max_image_height"]
        )

    def _add_table(self, element: Table, builder: DocxBuilder) -> None:
        columns = element.column_count
        if columns == 0:
            raise UnsupportedElement(element, "Table has no cells")

        rows = list(element.rows)
        if element.headers:
            rows.insert(0, TableRow(cells=element.headers))

        table = builder.document.add_table(rows=0, cols=columns)
        for row in rows:
            docx_row = table.add_row()
            for cell, docx_cell in zip(row.cells, docx_row.cells):
                self._fill_cell(cell, docx_cell)

    def _fill_cell(self, cell: TableCell, docx_cell) -> None:
        if not isinstance(cell.element, Text):
            logger.warning("Table cells hold text only, skipping %s", type(cell.element).__name__)
            return
        self._add_run(docx_cell.paragraphs[0], cell.element.text, cell.element.size)

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    def _add_list(self, element: ListElement, builder: DocxBuilder, depth: int = 0) -> None:
        for item in element.elements:
            self._add_list_item(item.element, element.numbered, depth, builder)

    def _add_list_item(self, element: Element, numbered: bool, depth: int, builder: DocxBuilder) -> None:
        if isinstance(element, ListElement):
            self._add_list(element, builder, depth + 1)
        elif isinstance(element, (Text, Hyperlink)):
            self._add_list_leaf(element, numbered, depth, builder)
        elif isinstance(element, Header):
            self._add_list_header(element, numbered, builder)
        else:
            logger.warning("Unsupported element inside list: %s", type(element).__name__)

    def _add_list_leaf(
        self,
        element: Union[Text, Hyperlink],
        numbered: bool,
        depth: int,
        builder: DocxBuilder,
    ) -> None:
        text = element.text if isinstance(element, Text) else element.title

        if numbered:
            paragraph = builder.document.add_paragraph()
            self._add_run(paragraph, text, element.size)
            set_paragraph_numbering(
                paragraph, builder.numbering.list_num_id, self._numbering_level(depth)
            )
        else:
            # Bulleted lists are written as literal dashes, not native bullets
            paragraph = self._new_paragraph(builder, NORMAL_STYLE)
            self._add_run(paragraph, bullet_text(text, depth), element.size)

        if isinstance(element, Hyperlink):
            self._append_hyperlink(paragraph, element)

    def _add_list_header(self, element: Header, numbered: bool, builder: DocxBuilder) -> None:
        if numbered:
            paragraph = builder.document.add_paragraph()
            self._add_run(paragraph, element.text, element.font_size)
            set_paragraph_numbering(paragraph, builder.numbering.heading_num_id, 0)
        else:
            paragraph = self._new_paragraph(builder, LIST_BULLET_STYLE)
            self._add_run(paragraph, element.text, element.font_size)

    def _numbering_level(self, depth: int) -> int:
        if depth > MAX_LIST_LEVEL:
            logger.warning(
                "List nested %d levels deep, numbering capped at level %d", depth, MAX_LIST_LEVEL
            )
            return MAX_LIST_LEVEL
        return depth
