"""
Numbering definitions for list paragraphs in .docx output.

Word renders list ordinals from two pieces of numbering.xml: an abstract
definition (per-level format, text pattern and indentation) and a numbering
instance (w:num) that paragraphs reference through w:numPr.
"""

from dataclasses import dataclass

from docx.opc.constants import CONTENT_TYPE as CT
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.opc.packuri import PackURI
from docx.oxml import OxmlElement, parse_xml
from docx.oxml.ns import nsdecls, qn
from docx.parts.numbering import NumberingPart

LIST_LEVEL_COUNT = 8  # levels 0..7
MAX_LIST_LEVEL = LIST_LEVEL_COUNT - 1

LEVEL_INDENT = 300  # twips per level
HANGING_INDENT = 320

EMPTY_NUMBERING_XML = f"<w:numbering {nsdecls('w')}/>"


@dataclass
class ListNumbering:
    """Numbering instance ids registered for one output document."""
    list_num_id: int
    heading_num_id: int


def level_text(level: int) -> str:
    """Display pattern for a level: '%1', '%1.%2', ... one placeholder per ancestor."""
    return ".".join(f"%{n}" for n in range(1, level + 2))


def get_or_add_numbering_part(docx_doc) -> NumberingPart:
    """Return the numbering part of a document, creating an empty one if needed."""
    try:
        return docx_doc.part.part_related_by(RT.NUMBERING)
    except KeyError:
        part = NumberingPart(
            PackURI("/word/numbering.xml"),
            CT.WML_NUMBERING,
            parse_xml(EMPTY_NUMBERING_XML),
            docx_doc.part.package,
        )
        docx_doc.part.relate_to(part, RT.NUMBERING)
        return part


def build_level(level: int):
    """Build one decimal w:lvl indented proportionally to its depth."""
    lvl = OxmlElement("w:lvl")
    lvl.set(qn("w:ilvl"), str(level))
    for tag, value in (
        ("w:start", "1"),
        ("w:numFmt", "decimal"),
        ("w:lvlText", level_text(level)),
        ("w:lvlJc", "left"),
    ):
        child = OxmlElement(tag)
        child.set(qn("w:val"), value)
        lvl.append(child)

    pPr = OxmlElement("w:pPr")
    ind = OxmlElement("w:ind")
    ind.set(qn("w:left"), str(LEVEL_INDENT * (level + 1)))
    ind.set(qn("w:hanging"), str(HANGING_INDENT))
    pPr.append(ind)
    lvl.append(pPr)
    return lvl


def build_abstract_numbering(abstract_id: int, level_count: int):
    abstract = OxmlElement("w:abstractNum")
    abstract.set(qn("w:abstractNumId"), str(abstract_id))
    multi_level = OxmlElement("w:multiLevelType")
    multi_level.set(qn("w:val"), "multilevel" if level_count > 1 else "singleLevel")
    abstract.append(multi_level)
    for level in range(level_count):
        abstract.append(build_level(level))
    return abstract


def _insert_abstract(numbering, abstract) -> None:
    # Schema order: every w:abstractNum precedes the first w:num
    first_num = numbering.find(qn("w:num"))
    if first_num is None:
        numbering.append(abstract)
    else:
        first_num.addprevious(abstract)


def _add_num(numbering, abstract_id: int) -> int:
    num_ids = [int(num.get(qn("w:numId"))) for num in numbering.findall(qn("w:num"))]
    num_id = max(num_ids, default=0) + 1

    num = OxmlElement("w:num")
    num.set(qn("w:numId"), str(num_id))
    abstract_ref = OxmlElement("w:abstractNumId")
    abstract_ref.set(qn("w:val"), str(abstract_id))
    num.append(abstract_ref)

    cleanup = numbering.find(qn("w:numIdMacAtCleanup"))
    if cleanup is None:
        numbering.append(num)
    else:
        cleanup.addprevious(num)
    return num_id


def register_list_numbering(docx_doc) -> ListNumbering:
    """
    Add the list and heading numbering definitions to a document.

    Ids are allocated past those already present in the template so existing
    definitions keep working.
    """
    numbering = get_or_add_numbering_part(docx_doc).element

    abstract_ids = [
        int(abstract.get(qn("w:abstractNumId")))
        for abstract in numbering.findall(qn("w:abstractNum"))
    ]
    list_abstract_id = max(abstract_ids, default=-1) + 1
    heading_abstract_id = list_abstract_id + 1

    _insert_abstract(numbering, build_abstract_numbering(list_abstract_id, LIST_LEVEL_COUNT))
    _insert_abstract(numbering, build_abstract_numbering(heading_abstract_id, 1))

    return ListNumbering(
        list_num_id=_add_num(numbering, list_abstract_id),
        heading_num_id=_add_num(numbering, heading_abstract_id),
    )


def set_paragraph_numbering(paragraph, num_id: int, level: int) -> None:
    """Attach a numbering reference (w:numPr) to a python-docx paragraph."""
    pPr = paragraph._p.get_or_add_pPr()
    numPr = OxmlElement("w:numPr")
    ilvl = OxmlElement("w:ilvl")
    ilvl.set(qn("w:val"), str(level))
    num_id_el = OxmlElement("w:numId")
    num_id_el.set(qn("w:val"), str(num_id))
    numPr.append(ilvl)
    numPr.append(num_id_el)
    pPr.append(numPr)
