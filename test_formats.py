"""
Tests for the markdown, HTML, text and JSON readers and writers.
"""

import base64
import json
import logging

import pytest

from doc_transformer.core.document import (
    Document,
    Header,
    Hyperlink,
    Image,
    ImageDimension,
    ImageHandle,
    ListElement,
    ListItem,
    Paragraph,
    Table,
    TableCell,
    TableRow,
    Text,
)
from doc_transformer.core.errors import STAGE_IMAGE_LOAD, FormatError
from doc_transformer.core.images import LoadedImage
from doc_transformer.readers.html_reader import HtmlReader
from doc_transformer.readers.json_reader import JsonReader
from doc_transformer.readers.markdown_reader import MarkdownReader
from doc_transformer.readers.text_reader import TextReader
from doc_transformer.writers.base import image_data_uri
from doc_transformer.writers.html_writer import HtmlWriter
from doc_transformer.writers.json_writer import JsonWriter
from doc_transformer.writers.markdown_writer import MarkdownWriter
from doc_transformer.writers.text_writer import TextWriter
from image_fixtures import make_png


def list_of(numbered, *children):
    return ListElement(elements=[ListItem(child) for child in children], numbered=numbered)


def cells(*texts):
    return [TableCell(Text(t, 16)) for t in texts]


def sample_document():
    return Document([
        Header(1, "Title"),
        Text("Intro paragraph.", 16),
        Hyperlink("Docs", "https://example.com/docs", "Read the docs", 16),
        list_of(False, Text("apple", 12), list_of(False, Text("seed", 12)), Text("pear", 12)),
        list_of(True, Text("first", 12), Text("second", 12)),
        Table(headers=cells("Name", "Qty"), rows=[TableRow(cells("apple", "3"))]),
    ])


# ----------------------------------------------------------------------
# Markdown
# ----------------------------------------------------------------------

def read_md(text, loader=None):
    return MarkdownReader().read_with_loader(text.encode("utf-8"), loader).elements


def test_markdown_reader_blocks():
    elements = read_md("# Title\n\nSome body text\nwrapped.\n\n## Part\n")
    assert elements == [
        Header(1, "Title"),
        Text("Some body text wrapped.", 16),
        Header(2, "Part"),
    ]


def test_markdown_reader_lists():
    elements = read_md("- a\n- b\n    - c\n\n<!-- -->\n\n1. x\n2. y\n")
    assert elements == [
        list_of(False, Text("a", 12), Text("b", 12), list_of(False, Text("c", 12))),
        list_of(True, Text("x", 12), Text("y", 12)),
    ]


def test_markdown_reader_link_paragraph():
    elements = read_md('[Docs](https://example.com "Alt text")\n')
    assert elements == [Hyperlink("Docs", "https://example.com", "Alt text", 16)]


def test_markdown_reader_table():
    elements = read_md("| A | B |\n| --- | --- |\n| 1 | 2 |\n| 3 | 4 |\n")
    assert elements == [
        Table(headers=cells("A", "B"), rows=[TableRow(cells("1", "2")), TableRow(cells("3", "4"))])
    ]


def test_markdown_writer_output():
    output = MarkdownWriter().write(sample_document()).decode("utf-8")
    assert output.startswith("# Title\n\nIntro paragraph.\n\n")
    assert '[Docs](https://example.com/docs "Read the docs")' in output
    assert "- apple\n    - seed\n- pear" in output
    assert "1. first\n2. second" in output
    assert "| Name | Qty |\n| --- | --- |\n| apple | 3 |" in output


def test_markdown_writer_separates_adjacent_lists():
    doc = Document([list_of(False, Text("a", 12)), list_of(True, Text("b", 12))])
    assert MarkdownWriter().write(doc).decode("utf-8") == "- a\n\n<!-- -->\n\n1. b\n"


def test_markdown_writer_blank_header_row():
    table = Table(rows=[TableRow(cells("a", "b"))])
    output = MarkdownWriter().write(Document([table])).decode("utf-8")
    assert output.splitlines()[0] == "|  |  |"


def test_markdown_roundtrip():
    doc = sample_document()
    data = MarkdownWriter().write(doc)
    assert MarkdownReader().read(data).elements == doc.elements


def test_markdown_image_roundtrip():
    data = make_png(3, 3)
    doc = Document([Image(ImageHandle(data=data, dimension=ImageDimension("95250", "95250")))])
    [parsed] = MarkdownReader().read(MarkdownWriter().write(doc)).elements
    assert parsed.image.bytes() == data
    assert parsed.image.size() == ImageDimension("95250", "95250")


def test_markdown_list_opening_with_nested_list():
    """A nested list with no item before it hangs off an empty marker."""
    numbered = ListElement(
        elements=[ListItem(list_of(True, Text("a", 12))), ListItem(Text("b", 12))],
        numbered=True,
    )
    data = MarkdownWriter().write(Document([numbered]))
    assert data.decode("utf-8") == "1. \n    1. a\n2. b\n"
    assert MarkdownReader().read(data).elements == [numbered]


def test_markdown_consecutive_nested_lists_stay_apart():
    bulleted = list_of(False, Text("a", 12), list_of(False, Text("x", 12)), list_of(True, Text("y", 12)))
    data = MarkdownWriter().write(Document([bulleted]))
    assert data.decode("utf-8") == "- a\n    - x\n- \n    1. y\n"
    assert MarkdownReader().read(data).elements == [bulleted]


def test_markdown_text_with_block_markers_stays_text():
    doc = Document([
        Text("# not a heading", 16),
        Text("1. not a list", 16),
        Text("- not a bullet", 16),
        Text("> not a quote", 16),
        list_of(False, Text("# item", 12)),
    ])
    data = MarkdownWriter().write(doc)
    output = data.decode("utf-8")
    assert output.startswith("\\# not a heading\n\n1\\. not a list\n\n\\- not a bullet\n\n")
    assert "- \\# item" in output
    assert MarkdownReader().read(data).elements == doc.elements


def test_image_data_uri_typed_from_image_header():
    assert image_data_uri(make_png(1, 1)).startswith("data:image/png;base64,")
    assert image_data_uri(b"????") == "data:application/octet-stream;base64,Pz8/Pw=="

    doc = Document([Image(ImageHandle(data=make_png(1, 1)))])
    assert MarkdownWriter().write(doc).startswith(b"![](data:image/png;base64,")
    assert b'<img src="data:image/png;base64,' in HtmlWriter().write(doc)


def test_markdown_paragraph_group_logs_unknown_children(caplog):
    doc = Document([Paragraph([Text("kept", 16), Header(2, "dropped")])])
    with caplog.at_level(logging.ERROR):
        output = MarkdownWriter().write(doc).decode("utf-8")
    assert output == "kept\n"
    assert "Unknown paragraph element" in caplog.text


# ----------------------------------------------------------------------
# HTML
# ----------------------------------------------------------------------

def read_html(html, loader=None):
    return HtmlReader().read_with_loader(html.encode("utf-8"), loader).elements


def test_html_reader_structure():
    html = """
    <html><head><title>ignored</title></head>
    <body>
      <h3>Section</h3>
      <div><p>Inside a div</p></div>
      <ul><li><a href="https://example.com">Link item</a></li><li>plain</li></ul>
      <table><tr><td>a</td><td>b</td></tr></table>
    </body></html>
    """
    assert read_html(html) == [
        Header(3, "Section"),
        Text("Inside a div", 16),
        list_of(False, Hyperlink("Link item", "https://example.com", None, 12), Text("plain", 12)),
        Table(headers=[], rows=[TableRow(cells("a", "b"))]),
    ]


def test_html_data_uri_image_with_pixel_size():
    data = make_png(2, 1)
    src = "data:image/png;base64," + base64.b64encode(data).decode("ascii")
    [image] = read_html(f'<img src="{src}" width="100" height="50px">')
    assert image.image.bytes() == data
    assert image.image.size() == ImageDimension("952500", "476250")


@pytest.mark.parametrize("value", ["1e400", "inf", "-inf", "nan", "wide"])
def test_html_unusable_pixel_size_is_ignored(value):
    data = make_png(2, 1)
    src = "data:image/png;base64," + base64.b64encode(data).decode("ascii")
    [image] = read_html(f'<img src="{src}" width="{value}" height="10">')
    assert image.image.bytes() == data
    assert image.image.dimension == ImageDimension(None, "95250")


def test_html_image_resolved_with_loader():
    data = make_png(1, 1)
    requested = []

    def loader(reference):
        requested.append(reference)
        return LoadedImage(data=data, width="9525", height="9525")

    [image] = read_html('<p><img src="pics/dot.png"></p>', loader)
    assert requested == ["pics/dot.png"]
    assert image.image.bytes() == data
    assert image.image.source == "pics/dot.png"
    assert image.image.size() == ImageDimension("9525", "9525")


def test_html_image_without_loader_is_skipped(caplog):
    with caplog.at_level(logging.WARNING):
        assert read_html('<img src="pics/dot.png"><p>after</p>') == [Text("after", 16)]
    assert "No image loader" in caplog.text


def test_html_image_loader_failure_raises():
    def loader(reference):
        raise FileNotFoundError(reference)

    with pytest.raises(FormatError) as excinfo:
        read_html('<img src="missing.png">', loader)
    assert excinfo.value.stage == STAGE_IMAGE_LOAD


def test_html_writer_document():
    output = HtmlWriter().write(sample_document()).decode("utf-8")
    assert output.startswith("<!DOCTYPE html>")
    assert "<title>Title</title>" in output
    assert '<a href="https://example.com/docs" title="Read the docs">Docs</a>' in output
    assert "<ul><li>apple<ul><li>seed</li></ul></li><li>pear</li></ul>" in output
    assert "<tr><th>Name</th><th>Qty</th></tr>" in output


def test_html_writer_title_option_and_escaping():
    doc = Document([Text("a < b & c", 16)])
    output = HtmlWriter().write(doc, title="My <page>").decode("utf-8")
    assert "<title>My &lt;page&gt;</title>" in output
    assert "<p>a &lt; b &amp; c</p>" in output


def test_html_roundtrip():
    doc = sample_document()
    assert HtmlReader().read(HtmlWriter().write(doc)).elements == doc.elements


def test_html_rejects_non_utf8():
    with pytest.raises(FormatError):
        HtmlReader().read(b"\xff\xfe\x00<p>")


# ----------------------------------------------------------------------
# Plain text
# ----------------------------------------------------------------------

def test_text_reader_blocks():
    data = "first block\n\nsecond\nblock\n\n\n\nthird\n".encode("utf-8")
    assert TextReader().read(data).elements == [
        Text("first block", 16),
        Text("second\nblock", 16),
        Text("third", 16),
    ]


def test_text_reader_empty_input():
    assert TextReader().read(b"").is_empty()


def test_text_writer_output():
    output = TextWriter().write(sample_document()).decode("utf-8")
    assert output.startswith("Title\n\nIntro paragraph.\n\nDocs (https://example.com/docs)\n\n")
    assert "- apple\n    - seed\n- pear" in output
    assert "1. first\n2. second" in output
    assert "Name\tQty\napple\t3" in output


def test_text_writer_skips_images(caplog):
    doc = Document([Image(ImageHandle(data=make_png(1, 1))), Text("after", 16)])
    with caplog.at_level(logging.WARNING):
        assert TextWriter().write(doc) == b"after\n"
    assert "Image is not supported" in caplog.text


# ----------------------------------------------------------------------
# JSON
# ----------------------------------------------------------------------

def test_json_roundtrip_is_lossless():
    doc = sample_document()
    doc.add(Image(ImageHandle(
        data=make_png(2, 2),
        dimension=ImageDimension("19050", None),
        source="pics/a.png",
    )))
    doc.add(Paragraph([Text("one", 16), Text("two", 20)]))
    doc.add(Header(0, "odd"))

    assert JsonReader().read(JsonWriter().write(doc)).elements == doc.elements


def test_json_writer_options():
    doc = Document([Text("héllo", 16)])
    compact = JsonWriter().write(doc, indent=None, ensure_ascii=True)
    assert b"\n" not in compact
    assert b"\\u00e9" in compact
    assert json.loads(JsonWriter().write(doc))["elements"][0] == {
        "type": "text", "text": "héllo", "size": 16,
    }


@pytest.mark.parametrize("data", [
    b"not json",
    b"[]",
    b'{"elements": [{"type": "mystery"}]}',
    b'{"elements": [{"type": "header", "text": "no level"}]}',
    b'{"elements": [{"type": "list", "items": [{"type": "table", "rows": []}]}]}',
    b'{"elements": [{"type": "image", "data": "***"}]}',
    b'{"elements": [{"type": "text", "text": 5}]}',
    b'{"elements": [{"type": "header", "level": 1, "text": ["x"]}]}',
    b'{"elements": [{"type": "hyperlink", "title": "Docs", "url": null}]}',
    b'{"elements": [{"type": "hyperlink", "title": 3, "url": "https://example.com"}]}',
    b'{"elements": [{"type": "image", "data": "", "width": 10}]}',
])
def test_json_reader_rejects_malformed_input(data):
    with pytest.raises(FormatError):
        JsonReader().read(data)
