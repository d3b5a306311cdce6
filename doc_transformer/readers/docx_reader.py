"""
Reader for Microsoft Word .docx files.
"""

import io
import logging
import re
import zipfile
from typing import Dict, List, Optional, Tuple

from docx import Document as DocxDocument
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.opc.exceptions import PackageNotFoundError
from docx.oxml.ns import nsmap, qn
from docx.table import Table as DocxTable
from lxml import etree

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
    Table,
    TableCell,
    TableRow,
    Text,
)
from doc_transformer.core.errors import STAGE_CONTAINER_READ, STAGE_NUMBERING, FormatError
from doc_transformer.core.lists import ListBuilder
from doc_transformer.core.processing import parse_bullet_text
from doc_transformer.readers.base import InputReader, ReaderRegistry

logger = logging.getLogger(__name__)

NORMAL_STYLE = "Normal"
BODY_TEXT_STYLE = "BodyText"
LIST_BULLET_STYLE = "ListBullet"
TEXT_STYLES = (NORMAL_STYLE, BODY_TEXT_STYLE)

HEADING_STYLE_RE = re.compile(r"^Heading([1-9])$")

BULLET_FORMAT = "bullet"

_DRAWING_XPATH = etree.XPath(".//wp:inline | .//wp:anchor", namespaces=nsmap)
_BLIP_XPATH = etree.XPath(".//a:blip", namespaces=nsmap)
_EXTENT_XPATH = etree.XPath("./wp:extent", namespaces=nsmap)


def _int_attribute(element, attribute: str, what: str) -> int:
    value = element.get(qn(attribute))
    if value is None:
        raise FormatError(f"{what} is missing its {attribute} attribute", STAGE_NUMBERING)
    try:
        return int(value)
    except ValueError:
        raise FormatError(f"{what} has a non-integer {attribute}: {value!r}", STAGE_NUMBERING) from None


class NumberingCatalog:
    """
    Number formats of a document's numbering instances.

    Maps each w:num id to the w:numFmt of every level of its abstract
    definition, which decides whether a list paragraph is bulleted or numbered.
    """

    def __init__(self, formats: Optional[Dict[int, Dict[int, str]]] = None):
        self._formats = formats or {}

    @classmethod
    def from_document(cls, source) -> "NumberingCatalog":
        try:
            part = source.part.part_related_by(RT.NUMBERING)
        except KeyError:
            return cls()
        return cls.from_element(part.element)

    @classmethod
    def from_element(cls, numbering) -> "NumberingCatalog":
        abstracts: Dict[int, Dict[int, str]] = {}
        for abstract in numbering.findall(qn("w:abstractNum")):
            abstract_id = _int_attribute(abstract, "w:abstractNumId", "w:abstractNum")
            levels = {}
            for lvl in abstract.findall(qn("w:lvl")):
                num_fmt = lvl.find(qn("w:numFmt"))
                fmt = num_fmt.get(qn("w:val")) if num_fmt is not None else "decimal"
                levels[_int_attribute(lvl, "w:ilvl", "w:lvl")] = fmt
            abstracts[abstract_id] = levels

        formats: Dict[int, Dict[int, str]] = {}
        for num in numbering.findall(qn("w:num")):
            num_id = _int_attribute(num, "w:numId", "w:num")
            abstract_ref = num.find(qn("w:abstractNumId"))
            if abstract_ref is None:
                raise FormatError(f"Numbering {num_id} has no abstract definition", STAGE_NUMBERING)
            abstract_id = _int_attribute(abstract_ref, "w:val", "w:abstractNumId")
            formats[num_id] = abstracts.get(abstract_id, {})
        return cls(formats)

    def __contains__(self, num_id: int) -> bool:
        return num_id in self._formats

    def is_numbered(self, num_id: int, level: int) -> bool:
        """True for ordinal numbering, False for bullets."""
        if num_id not in self._formats:
            raise FormatError(f"Numbering id {num_id} has no definition", STAGE_NUMBERING)
        levels = self._formats[num_id]
        fmt = levels.get(level, levels.get(0, "decimal"))
        return fmt != BULLET_FORMAT


@ReaderRegistry.register
class DocxReader(InputReader):
    """Reader for Microsoft Word .docx files (Open XML format)."""

    @classmethod
    def get_format_name(cls) -> str:
        return "docx"

    @classmethod
    def get_extensions(cls) -> List[str]:
        return [".docx"]

    @classmethod
    def get_priority(cls) -> int:
        return 100

    def read(self, data: bytes) -> Document:
        """Read .docx bytes and return a Document object."""
        source = self._open(data)
        catalog = NumberingCatalog.from_document(source)

        doc = Document()
        lists = ListBuilder()

        for block in source.iter_inner_content():
            if isinstance(block, DocxTable):
                self._close_list(lists, doc)
                doc.add(self._convert_table(block))
                continue

            item = self._list_item(block, catalog)
            if item is not None:
                element, level, numbered = item
                for finished in lists.push(element, level, numbered):
                    doc.add(finished)
                continue

            self._close_list(lists, doc)
            for element in self._convert_paragraph(block):
                doc.add(element)

        self._close_list(lists, doc)
        return doc

    def _open(self, data: bytes):
        try:
            return DocxDocument(io.BytesIO(data))
        except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError, etree.XMLSyntaxError) as e:
            raise FormatError(f"Not a valid .docx package: {e}", STAGE_CONTAINER_READ) from e

    def _close_list(self, lists: ListBuilder, doc: Document) -> None:
        finished = lists.finish()
        if finished is not None:
            doc.add(finished)

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    def _numbering_reference(self, paragraph) -> Optional[Tuple[int, int]]:
        """Return (numId, ilvl) of a numbered paragraph, or None."""
        pPr = paragraph._p.pPr
        if pPr is None:
            return None
        numPr = pPr.find(qn("w:numPr"))
        if numPr is None:
            return None

        num_id_el = numPr.find(qn("w:numId"))
        if num_id_el is None:
            raise FormatError("List paragraph has no numbering id", STAGE_NUMBERING)
        num_id = _int_attribute(num_id_el, "w:val", "w:numId")
        if num_id == 0:
            # numId 0 removes numbering inherited from the style
            return None

        ilvl_el = numPr.find(qn("w:ilvl"))
        if ilvl_el is None:
            raise FormatError(f"List paragraph with numbering {num_id} has no level", STAGE_NUMBERING)
        level = _int_attribute(ilvl_el, "w:val", "w:ilvl")
        if level < 0:
            raise FormatError(f"Negative list level {level}", STAGE_NUMBERING)
        return num_id, level

    def _list_item(self, paragraph, catalog: NumberingCatalog) -> Optional[Tuple[Element, int, bool]]:
        """Return (element, level, numbered) when the paragraph is a list item."""
        reference = self._numbering_reference(paragraph)
        if reference is not None:
            num_id, level = reference
            numbered = catalog.is_numbered(num_id, level)
            return self._list_leaf(paragraph, self._paragraph_text(paragraph)), level, numbered

        style_id = paragraph._p.style
        if style_id == LIST_BULLET_STYLE:
            return self._list_leaf(paragraph, self._paragraph_text(paragraph)), 0, False

        if style_id is None or style_id in TEXT_STYLES:
            bullet = parse_bullet_text(self._paragraph_text(paragraph))
            if bullet is not None:
                depth, body = bullet
                return self._list_leaf(paragraph, body), depth, False

        return None

    def _list_leaf(self, paragraph, text: str) -> Element:
        link = self._hyperlink(paragraph, text, LIST_TEXT_SIZE)
        if link is not None:
            return link
        return Text(text=text, size=LIST_TEXT_SIZE)

    # ------------------------------------------------------------------
    # Paragraph classification
    # ------------------------------------------------------------------

    def _convert_paragraph(self, paragraph) -> List[Element]:
        images = self._images(paragraph)
        if images:
            return images

        text = self._paragraph_text(paragraph)
        link = self._hyperlink(paragraph, text, BODY_TEXT_SIZE)
        if link is not None:
            return [link]

        style_id = paragraph._p.style
        if style_id is None:
            logger.debug("Dropping paragraph without style: %r", text[:40])
            return []

        heading = HEADING_STYLE_RE.match(style_id)
        if heading:
            return [Header(level=int(heading.group(1)), text=text)]

        if style_id in TEXT_STYLES:
            return [Text(text=text, size=BODY_TEXT_SIZE)]

        logger.debug("Dropping paragraph with unsupported style %s", style_id)
        return []

    def _paragraph_text(self, paragraph) -> str:
        """Text of the paragraph's own runs (hyperlink runs excluded)."""
        return "".join(run.text for run in paragraph.runs)

    def _run_size(self, paragraph, default: int) -> int:
        for run in paragraph.runs:
            if run.font.size is not None:
                return int(run.font.size.pt)
        return default

    def _hyperlink(self, paragraph, title: str, default_size: int) -> Optional[Hyperlink]:
        """Build a Hyperlink from the first external w:hyperlink of a paragraph."""
        for hyperlink in paragraph._p.findall(qn("w:hyperlink")):
            r_id = hyperlink.get(qn("r:id"))
            if r_id is None:
                # Internal bookmark link
                continue
            try:
                rel = paragraph.part.rels[r_id]
            except KeyError as e:
                raise FormatError(f"Hyperlink relationship {r_id} is missing", STAGE_CONTAINER_READ) from e
            if not rel.is_external:
                continue
            return Hyperlink(
                title=title,
                url=rel.target_ref,
                alt=hyperlink.get(qn("w:tooltip")),
                size=self._run_size(paragraph, default_size),
            )
        return None

    def _images(self, paragraph) -> List[Element]:
        """Inline or anchored pictures of a paragraph, with their declared extent."""
        images: List[Element] = []
        for drawing in _DRAWING_XPATH(paragraph._p):
            blips = _BLIP_XPATH(drawing)
            if not blips:
                continue
            r_id = blips[0].get(qn("r:embed"))
            if r_id is None:
                logger.debug("Skipping linked (not embedded) picture")
                continue
            try:
                part = paragraph.part.related_parts[r_id]
            except KeyError as e:
                raise FormatError(f"Image relationship {r_id} is missing", STAGE_CONTAINER_READ) from e

            dimension = ImageDimension()
            extents = _EXTENT_XPATH(drawing)
            if extents:
                dimension = ImageDimension(width=extents[0].get("cx"), height=extents[0].get("cy"))
            images.append(Image(ImageHandle(data=part.blob, dimension=dimension)))
        return images

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def _convert_table(self, table) -> Table:
        """One TableRow per row, one Text cell per cell paragraph; no header row."""
        rows = []
        for row in table.rows:
            cells = []
            for cell in row.cells:
                for paragraph in cell.paragraphs:
                    cells.append(TableCell(Text(text=self._paragraph_text(paragraph), size=BODY_TEXT_SIZE)))
            rows.append(TableRow(cells=cells))
        return Table(headers=[], rows=rows)
