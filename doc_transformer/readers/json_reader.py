"""
Reader for the JSON serialization produced by the JSON writer.
"""

import base64
import binascii
import json
from typing import Any, Callable, Dict, List, Optional

from doc_transformer.core.document import (
    BODY_TEXT_SIZE,
    Document,
    Element,
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
from doc_transformer.core.errors import STAGE_CLASSIFICATION, STAGE_CONTAINER_READ, FormatError
from doc_transformer.readers.base import InputReader, ReaderRegistry


def _string(data: Dict, key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


def _optional_string(data: Dict, key: str) -> Optional[str]:
    return _string(data, key) if data.get(key) is not None else None


@ReaderRegistry.register
class JsonReader(InputReader):
    """Reader for documents serialized as JSON."""

    @classmethod
    def get_format_name(cls) -> str:
        return "json"

    @classmethod
    def get_extensions(cls) -> List[str]:
        return [".json"]

    def read(self, data: bytes) -> Document:
        try:
            json_data = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise FormatError(f"Invalid JSON: {e}", STAGE_CONTAINER_READ) from e

        if not isinstance(json_data, dict) or not isinstance(json_data.get("elements"), list):
            raise FormatError("Expected an object with an 'elements' array", STAGE_CONTAINER_READ)

        doc = Document()
        for item in json_data["elements"]:
            doc.add(self._element(item))
        return doc

    def _element(self, data: Any) -> Element:
        if not isinstance(data, dict):
            raise FormatError(f"Expected an element object, got {type(data).__name__}", STAGE_CLASSIFICATION)
        builder = self._builders().get(data.get("type"))
        if builder is None:
            raise FormatError(f"Unknown element type: {data.get('type')!r}", STAGE_CLASSIFICATION)
        try:
            return builder(data)
        except FormatError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise FormatError(
                f"Malformed {data['type']} element: {e}", STAGE_CLASSIFICATION
            ) from e

    def _builders(self) -> Dict[str, Callable[[Dict], Element]]:
        return {
            "text": self._text,
            "header": self._header,
            "hyperlink": self._hyperlink,
            "image": self._image,
            "list": self._list,
            "table": self._table,
            "paragraph": self._paragraph,
        }

    def _text(self, data: Dict) -> Text:
        return Text(text=_string(data, "text"), size=int(data.get("size", BODY_TEXT_SIZE)))

    def _header(self, data: Dict) -> Header:
        return Header(level=int(data["level"]), text=_string(data, "text"))

    def _hyperlink(self, data: Dict) -> Hyperlink:
        return Hyperlink(
            title=_string(data, "title"),
            url=_string(data, "url"),
            alt=_optional_string(data, "alt"),
            size=int(data.get("size", BODY_TEXT_SIZE)),
        )

    def _image(self, data: Dict) -> Image:
        try:
            payload = base64.b64decode(data["data"], validate=True)
        except (binascii.Error, ValueError) as e:
            raise FormatError(f"Invalid image data: {e}", STAGE_CONTAINER_READ) from e
        return Image(ImageHandle(
            data=payload,
            dimension=ImageDimension(
                width=_optional_string(data, "width"),
                height=_optional_string(data, "height"),
            ),
            source=_optional_string(data, "source"),
        ))

    def _list(self, data: Dict) -> ListElement:
        return ListElement(
            elements=[ListItem(self._element(item)) for item in data["items"]],
            numbered=bool(data.get("numbered", False)),
        )

    def _table(self, data: Dict) -> Table:
        return Table(
            headers=[TableCell(self._element(cell)) for cell in data.get("headers", [])],
            rows=[
                TableRow(cells=[TableCell(self._element(cell)) for cell in row])
                for row in data["rows"]
            ],
        )

    def _paragraph(self, data: Dict) -> Paragraph:
        return Paragraph(elements=[self._element(child) for child in data["elements"]])
