import base64

import pytest

from udifkit.abstractfile import MemoryFile
from udifkit.b64 import decode_base64, encode_base64, write_base64


@pytest.mark.parametrize("length", [0, 1, 2, 3, 4, 5, 20, 43, 100, 257])
def test_round_trip(length):
    data = bytes((i * 37 + 11) & 0xFF for i in range(length))
    assert decode_base64(encode_base64(data, 3, 43)) == data


@pytest.mark.parametrize("length", [1, 2, 3, 50, 131])
def test_content_matches_standard_alphabet(length):
    data = bytes(range(length))
    text = encode_base64(data, 2, 10)
    assert "".join(text.split()) == base64.b64encode(data).decode()


def test_empty_data_is_indent_and_newline():
    assert encode_base64(b"", 1, 42) == "\t\n"


def test_lines_are_indented_and_wrapped():
    data = bytes(range(200))
    text = encode_base64(data, 1, 42)
    assert text.endswith("\n")
    lines = text.split("\n")[:-1]
    assert all(line.startswith("\t") for line in lines)
    body = [line[1:] for line in lines]
    assert all(len(line) == 43 for line in body[:-1])
    assert 0 < len(body[-1]) <= 43


def test_trailing_padding_does_not_break_line():
    data = b"ab"
    text = encode_base64(data, 0, 2)
    assert text.endswith("=\n")


def test_decode_ignores_whitespace_and_noise():
    assert decode_base64("\taGVs\n bG8= ") == b"hello"


def test_decode_accepts_bytes():
    assert decode_base64(base64.b64encode(b"xyz!")) == b"xyz!"


def test_write_base64_writes_encoding():
    f = MemoryFile()
    write_base64(f, b"\x00\x01\x02\x03", 1, 43)
    assert f.getvalue().decode() == encode_base64(b"\x00\x01\x02\x03", 1, 43)