"""Base64 in the layout used by property-list data elements."""

from __future__ import annotations

import base64
from typing import Any

_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_VALUES = {ch: i for i, ch in enumerate(_ALPHABET)}


def _group(values: list[int]) -> bytes:
    a, b, c, d = values
    return bytes((
        ((a << 2) & 0xFC) | ((b >> 4) & 0x3F),
        ((b << 4) & 0xF0) | ((c >> 2) & 0x0F),
        ((c << 6) & 0xC0) | (d & 0x3F),
    ))


def decode_base64(text: str | bytes) -> bytes:
    """Decode base64, skipping characters outside the alphabet and counting '='."""
    if isinstance(text, bytes):
        text = text.decode("latin-1")
    out = bytearray()
    pending: list[int] = []
    to_drop = 0
    for ch in text:
        value = _VALUES.get(ch)
        if value is not None:
            pending.append(value)
        elif ch == "=":
            to_drop += 1
        if len(pending) == 4:
            out += _group(pending)
            pending = []
    if to_drop:
        tail = _group(pending + [0] * (4 - len(pending)))
        total = max(0, len(out) + 3 - to_drop)
        return bytes((out + tail)[:total])
    return bytes(out)


def encode_base64(data: bytes, tab_length: int, width: int) -> str:
    """Encode ``data`` indented by ``tab_length`` tabs, wrapped after ``width + 1`` characters."""
    indent = "\t" * tab_length
    parts = [indent]
    encoded = base64.b64encode(data).decode("ascii")
    line_length = 0
    for index, ch in enumerate(encoded):
        parts.append(ch)
        if ch == "=" and index == len(encoded) - 1:
            break
        if line_length == width:
            parts.append("\n" + indent)
            line_length = 0
        else:
            line_length += 1
    parts.append("\n")
    return "".join(parts)


def write_base64(file: Any, data: bytes, tab_length: int, width: int) -> None:
    """Write the encoded form of ``data`` to ``file``."""
    file.write(encode_base64(data, tab_length, width).encode("ascii"))