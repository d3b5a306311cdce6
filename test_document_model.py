"""
Tests for the document model.
"""

import pytest

from doc_transformer.core.document import (
    ELEMENT_TYPES,
    Document,
    Header,
    Hyperlink,
    Image,
    ImageDimension,
    ListElement,
    ListItem,
    Paragraph,
    Table,
    TableCell,
    TableRow,
    Text,
    heading_font_size,
)


def test_heading_font_sizes():
    """Heading ranks map to 18/16 and everything else to 14."""
    assert heading_font_size(1) == 18
    assert heading_font_size(2) == 16
    assert heading_font_size(3) == 14
    assert heading_font_size(9) == 14
    assert heading_font_size(0) == 14
    assert Header(level=-3, text="x").font_size == 14


def test_text_defaults_to_body_size():
    assert Text("body").size == 16
    assert Hyperlink("t", "https://example.com").size == 16


def test_list_item_rejects_tables():
    """A table can never be placed inside a list."""
    with pytest.raises(TypeError):
        ListItem(Table(rows=[TableRow([TableCell(Text("a"))])]))


def test_list_item_rejects_non_elements():
    with pytest.raises(TypeError):
        ListItem("plain string")


def test_list_leaves_depth_first():
    nested = ListElement(
        elements=[
            ListItem(Text("a", 12)),
            ListItem(ListElement(elements=[ListItem(Text("b", 12)), ListItem(Text("c", 12))])),
            ListItem(Text("d", 12)),
        ],
        numbered=True,
    )
    assert [leaf.text for leaf in nested.leaves()] == ["a", "b", "c", "d"]
    assert nested.elements[1].is_nested_list


def test_image_dimension_as_emu():
    assert ImageDimension("100", "200").as_emu() == (100, 200)
    assert ImageDimension().as_emu() is None
    assert ImageDimension("abc", "200").as_emu() is None
    assert ImageDimension("0", "200").as_emu() is None
    assert ImageDimension("-5", "-5").as_emu() is None


def test_table_column_count_is_widest_row():
    table = Table(
        headers=[TableCell(Text("h"))],
        rows=[
            TableRow([TableCell(Text("a")), TableCell(Text("b"))]),
            TableRow([TableCell(Text("c")), TableCell(Text("d")), TableCell(Text("e"))]),
        ],
    )
    assert table.column_count == 3
    assert Table().column_count == 0


def test_document_add_and_query():
    doc = Document()
    doc.add(Header(1, "Title"))
    doc.add(Text("body"))
    doc.add(Header(2, "Section"))

    assert len(doc) == 3
    assert [h.text for h in doc.get_headers()] == ["Title", "Section"]
    assert list(doc) == doc.get_all_elements()
    assert not doc.is_empty()
    assert Document().is_empty()


def test_document_rejects_non_elements():
    doc = Document()
    with pytest.raises(TypeError):
        doc.add(ListItem(Text("a")))
    with pytest.raises(TypeError):
        doc.add("text")


def test_element_types_cover_every_variant():
    assert set(ELEMENT_TYPES) == {Text, Header, Hyperlink, Image, ListElement, Table, Paragraph}
