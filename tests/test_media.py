"""Data URI helpers."""

import pytest

from closet.media import is_data_uri, is_image_data_uri, parse_data_uri, to_data_uri


def test_parse_round_trip() -> None:
    uri = to_data_uri("image/webp", b"\x00\x01binary")

    parsed = parse_data_uri(uri)

    assert parsed.mime_type == "image/webp"
    assert parsed.data == b"\x00\x01binary"
    assert parsed.to_uri() == uri


@pytest.mark.parametrize(
    "value",
    [
        None,
        "",
        "https://example.com/a.png",
        "data:image/png;base64",
        "data:;base64,aGVsbG8=",
        "data:image/png;base64,not base64!",
        "data:image/png;base64,abc",
        " data:image/png;utf8,hello",
    ],
)
def test_malformed_references_are_absent(value) -> None:
    assert parse_data_uri(value) is None
    assert not is_data_uri(value)


def test_image_check_looks_at_mime_type() -> None:
    assert is_image_data_uri("data:image/jpeg;base64,aGVsbG8=")
    assert not is_image_data_uri("data:application/pdf;base64,aGVsbG8=")
