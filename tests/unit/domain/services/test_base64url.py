from __future__ import annotations

import pytest

from urlsafe_token.domain.exceptions import EncodingError
from urlsafe_token.domain.services.base64url import (
    b64decode,
    b64encode,
    bytes_to_int,
    int_to_bytes,
)


def test_encode_uses_url_safe_alphabet_without_padding() -> None:
    encoded = b64encode(b"\xfb\xff\xbf")

    assert encoded == "-_-_"
    assert b64encode(b"a") == "YQ"


@pytest.mark.parametrize("data", [b"", b"a", b"ab", b"abc", b"\x00\xff" * 7])
def test_decode_reverses_encode(data: bytes) -> None:
    assert b64decode(b64encode(data)) == data


@pytest.mark.parametrize("text", ["YQ==", "+/+/", "YQ\n", "Y", "YWJjZ"])
def test_decode_rejects_padding_foreign_characters_and_bad_length(text: str) -> None:
    with pytest.raises(EncodingError) as info:
        b64decode(text)

    assert info.value.details["length"] == len(text)


@pytest.mark.parametrize("num", [0, 1, 255, 256, 1_700_000_000, 2**64])
def test_int_bytes_round_trip(num: int) -> None:
    assert bytes_to_int(int_to_bytes(num)) == num


def test_int_to_bytes_is_big_endian_and_minimal() -> None:
    assert int_to_bytes(0) == b"\x00"
    assert int_to_bytes(256) == b"\x01\x00"
