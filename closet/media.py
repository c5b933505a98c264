"""Helpers for inline media references of the form ``data:<mime>;base64,<payload>``."""

import base64
import binascii
import re
from dataclasses import dataclass

DATA_URI_PATTERN = r"^data:[\w.+-]+/[\w.+-]+;base64,[A-Za-z0-9+/]+={0,2}$"

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<payload>[A-Za-z0-9+/]+={0,2})$")


@dataclass(frozen=True)
class DataUri:
    mime_type: str
    data: bytes

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    def to_uri(self) -> str:
        return to_data_uri(self.mime_type, self.data)


def to_data_uri(mime_type: str, data: bytes) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def parse_data_uri(value: str | None) -> DataUri | None:
    """Decode a data URI. Anything malformed is treated as absent."""
    if not value:
        return None
    match = _DATA_URI_RE.match(value.strip())
    if match is None:
        return None
    try:
        data = base64.b64decode(match.group("payload"), validate=True)
    except (ValueError, binascii.Error):
        return None
    return DataUri(mime_type=match.group("mime"), data=data)


def is_data_uri(value: str | None) -> bool:
    return parse_data_uri(value) is not None


def is_image_data_uri(value: str | None) -> bool:
    parsed = parse_data_uri(value)
    return parsed is not None and parsed.is_image
