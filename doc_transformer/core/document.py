"""
Unified document model for representing converted documents.

This module provides a format-agnostic representation of documents that can be
created from any input format and written to any output format. Elements form
a closed set of variants; ``ELEMENT_TYPES`` lists all of them so writers can
declare a handler for every kind.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Type


# Font sizes (points) used for heading ranks; everything past rank 2 and any
# invalid rank falls into the last bucket.
HEADING_SIZES = {1: 18, 2: 16}
DEFAULT_HEADING_SIZE = 14

BODY_TEXT_SIZE = 16
LIST_TEXT_SIZE = 12


def heading_font_size(level: int) -> int:
    """Return the point size a heading of the given rank renders at."""
    return HEADING_SIZES.get(level, DEFAULT_HEADING_SIZE)


class Element:
    """Base class of every document element."""


@dataclass
class Text(Element):
    """A run of plain text."""
    text: str
    size: int = BODY_TEXT_SIZE  # in points


@dataclass
class Header(Element):
    """A heading of the given rank (1 = top level)."""
    level: int
    text: str

    @property
    def font_size(self) -> int:
        return heading_font_size(self.level)


@dataclass
class Hyperlink(Element):
    """A link with a visible title."""
    title: str
    url: str
    alt: Optional[str] = None
    size: int = BODY_TEXT_SIZE


@dataclass
class ImageDimension:
    """Declared image size in EMU, kept as strings as formats declare them."""
    width: Optional[str] = None
    height: Optional[str] = None

    def as_emu(self) -> Optional[Tuple[int, int]]:
        """
        Return the declared size as integers, or None when it must be inferred.

        Absent, unparsable and non-positive values all mean "infer".
        """
        try:
            width = int(self.width) if self.width else 0
            height = int(self.height) if self.height else 0
        except ValueError:
            return None
        if width > 0 and height > 0:
            return width, height
        return None


@dataclass
class ImageHandle:
    """Raw image bytes plus the size the producer declared for them."""
    data: bytes
    dimension: ImageDimension = field(default_factory=ImageDimension)
    source: Optional[str] = None  # original reference, if any

    def bytes(self) -> bytes:
        return self.data

    def size(self) -> ImageDimension:
        return self.dimension


@dataclass
class Image(Element):
    """An embedded image."""
    image: ImageHandle


@dataclass
class ListItem:
    """
    One entry of a list.

    Wraps a leaf element or a nested ListElement; nesting is expressed by
    putting a ListElement inside a ListItem.
    """
    element: Element

    def __post_init__(self):
        if isinstance(self.element, Table):
            raise TypeError("A list item cannot contain a table")
        if not isinstance(self.element, Element):
            raise TypeError(
                f"A list item must wrap an Element, got {type(self.element).__name__}"
            )

    @property
    def is_nested_list(self) -> bool:
        return isinstance(self.element, ListElement)


@dataclass
class ListElement(Element):
    """An ordered (numbered) or bulleted list."""
    elements: List[ListItem] = field(default_factory=list)
    numbered: bool = False

    def leaves(self) -> List[Element]:
        """Return the non-list elements of this list, depth first."""
        result = []
        for item in self.elements:
            if isinstance(item.element, ListElement):
                result.extend(item.element.leaves())
            else:
                result.append(item.element)
        return result


@dataclass
class TableCell:
    element: Element


@dataclass
class TableRow:
    cells: List[TableCell] = field(default_factory=list)


@dataclass
class Table(Element):
    """A table; ``headers`` may be empty when the source has no header row."""
    headers: List[TableCell] = field(default_factory=list)
    rows: List[TableRow] = field(default_factory=list)

    @property
    def column_count(self) -> int:
        counts = [len(self.headers)] + [len(row.cells) for row in self.rows]
        return max(counts)


@dataclass
class Paragraph(Element):
    """A flat group of Text elements rendered one after another."""
    elements: List[Element] = field(default_factory=list)


ELEMENT_TYPES: Tuple[Type[Element], ...] = (
    Text,
    Header,
    Hyperlink,
    Image,
    ListElement,
    Table,
    Paragraph,
)


@dataclass
class Document:
    """
    A format-agnostic document representation.

    This class serves as the intermediary between input readers and output
    writers. Readers convert their specific format to this representation, and
    writers convert from this representation to their target format.
    """
    elements: List[Element] = field(default_factory=list)

    def add(self, element: Element) -> Element:
        """Append a top-level element and return it."""
        if not isinstance(element, ELEMENT_TYPES):
            raise TypeError(f"Not a document element: {type(element).__name__}")
        self.elements.append(element)
        return element

    def get_all_elements(self) -> List[Element]:
        return list(self.elements)

    def get_headers(self) -> List[Header]:
        return [e for e in self.elements if isinstance(e, Header)]

    def is_empty(self) -> bool:
        return not self.elements

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self):
        return iter(self.elements)
