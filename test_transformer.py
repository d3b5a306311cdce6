"""
Tests for the transformer facade, the registries and the command line.
"""

import importlib
import io
import logging

import pytest
from docx import Document as DocxDocument

from doc_transformer import Transformer, cli, get_transformer
from doc_transformer.cli import main
from doc_transformer.core.document import ELEMENT_TYPES, Document, Header, Image, Text
from doc_transformer.core.errors import ConversionError, EncodingError, FormatError, UnsupportedElement
from doc_transformer.readers import ReaderRegistry
from doc_transformer.utils import can_process_file, get_file_stem, get_output_path
from doc_transformer.writers import OutputWriter, WriterRegistry
from image_fixtures import make_png


def test_every_writer_handles_every_element_type():
    """No writer may leave an element kind without a handler."""
    writers = WriterRegistry.get_all_writers()
    assert set(writers) == {"docx", "html", "json", "md", "txt"}
    for name, writer_cls in writers.items():
        assert set(writer_cls.ELEMENT_HANDLERS) == set(ELEMENT_TYPES), name
        for handler in writer_cls.ELEMENT_HANDLERS.values():
            assert callable(getattr(writer_cls, handler)), f"{name}.{handler}"


def test_registered_readers():
    assert ReaderRegistry.get_supported_formats() == ["docx", "html", "json", "md", "txt"]
    assert ".markdown" in ReaderRegistry.get_supported_extensions()


def test_for_format_pairs_reader_and_writer():
    transformer = Transformer.for_format("docx")
    assert transformer.format_name == "docx"
    assert transformer.reader.get_format_name() == "docx"
    assert transformer.writer.get_format_name() == "docx"


def test_for_format_accepts_extensions():
    assert Transformer.for_format(".markdown").format_name == "md"
    transformer = get_transformer("HTM")
    assert transformer.format_name == "html"
    assert transformer.writer.get_extension() == ".html"


def test_unknown_format_lists_available():
    with pytest.raises(ValueError) as excinfo:
        Transformer.for_format("pdf")
    assert "Available formats: docx, html, json, md, txt" in str(excinfo.value)


def test_parse_and_generate_through_facade():
    doc = Document([Header(1, "Title"), Text("body", 16)])
    transformer = Transformer.for_format("docx")
    assert transformer.parse(transformer.generate(doc)).elements == doc.elements


def test_parse_with_loader_ignored_by_embedding_formats():
    doc = Document([Text("body", 16)])
    data = Transformer.for_format("json").generate(doc)

    def loader(reference):
        raise AssertionError("JSON embeds its images")

    assert Transformer.for_format("json").parse_with_loader(data, loader).elements == doc.elements


def test_unsupported_element_is_skipped_not_fatal():
    class TextOnlyWriter(OutputWriter):
        ELEMENT_HANDLERS = {Text: "_text", Image: "_unsupported"}

        @classmethod
        def get_format_name(cls):
            return "text-only"

        @classmethod
        def get_extension(cls):
            return ".to"

        def write(self, doc, **options):
            out = []
            self._render_elements(doc.elements, out)
            return "".join(out).encode("utf-8")

        def _text(self, element, out):
            out.append(element.text)

    doc = Document([Text("a"), Header(1, "no handler"), Text("b")])
    assert TextOnlyWriter().write(doc) == b"ab"


def test_error_types():
    error = FormatError("bad numbering", "numbering resolution")
    assert isinstance(error, ConversionError)
    assert isinstance(error, ValueError)
    assert str(error) == "numbering resolution: bad numbering"
    assert str(EncodingError("no room")) == "no room"
    unsupported = UnsupportedElement(Text("x"))
    assert unsupported.element == Text("x")
    assert "Text" in str(unsupported)


# ----------------------------------------------------------------------
# Utilities
# ----------------------------------------------------------------------

def test_file_helpers(tmp_path):
    assert get_file_stem(tmp_path / "report.docx") == "report"
    assert get_file_stem(tmp_path / "README") == "README"
    assert can_process_file(tmp_path / "notes.md")
    assert not can_process_file(tmp_path / "scan.pdf")


def test_output_path(tmp_path):
    source = tmp_path / "notes.md"
    assert get_output_path(source, "docx") == tmp_path / "notes.docx"
    assert get_output_path(source, "docx", tmp_path / "out") == tmp_path / "out" / "notes.docx"
    assert get_output_path(source, "docx", tmp_path / "x.docx") == tmp_path / "x.docx"
    assert get_output_path(source, "md") == tmp_path / "notes.converted.md"


# ----------------------------------------------------------------------
# Command line
# ----------------------------------------------------------------------

def test_cli_converts_markdown_to_docx(tmp_path, capsys):
    source = tmp_path / "notes.md"
    source.write_text("# Notes\n\nHello.\n\n![](dot.png)\n", encoding="utf-8")
    (tmp_path / "dot.png").write_bytes(make_png(2, 2))

    assert main([str(source), "--to", "docx", "--out", str(tmp_path / "out")]) == 0

    output = tmp_path / "out" / "notes.docx"
    assert output.is_file()
    assert "Wrote" in capsys.readouterr().out

    docx_doc = DocxDocument(io.BytesIO(output.read_bytes()))
    assert [p.text for p in docx_doc.paragraphs][:2] == ["Notes", "Hello."]
    assert len(docx_doc.inline_shapes) == 1


def test_cli_explicit_input_format(tmp_path):
    source = tmp_path / "notes.data"
    source.write_text("plain words", encoding="utf-8")
    assert main([str(source), "--from", "txt", "--to", "json"]) == 0
    assert (tmp_path / "notes.json").is_file()


def test_cli_reports_parse_errors(tmp_path, capsys):
    source = tmp_path / "broken.docx"
    source.write_bytes(b"not a docx")
    assert main([str(source), "--to", "md"]) == 1
    assert "container read" in capsys.readouterr().out


def test_cli_missing_input(tmp_path, capsys):
    assert main([str(tmp_path / "nope.md"), "--to", "docx"]) == 1
    assert "does not exist" in capsys.readouterr().out


def test_cli_unknown_output_format(tmp_path, capsys):
    source = tmp_path / "notes.md"
    source.write_text("text", encoding="utf-8")
    assert main([str(source), "--to", "pdf"]) == 1
    assert "Unknown format" in capsys.readouterr().out


def test_cli_list_formats(capsys):
    assert main(["--list-formats"]) == 0
    out = capsys.readouterr().out
    assert "Supported input formats:" in out
    assert "docx: .docx" in out


def test_cli_requires_input_and_target():
    with pytest.raises(SystemExit):
        main([])


def test_importing_cli_leaves_logging_alone(monkeypatch):
    calls = []
    monkeypatch.setattr(logging.getLogger(), "handlers", [])
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    importlib.reload(cli)
    assert calls == []

    assert cli.main(["--list-formats"]) == 0
    assert len(calls) == 1
