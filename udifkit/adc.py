"""Decompression of Apple Data Compression (ADC) streams."""

from __future__ import annotations

from enum import IntEnum


class ChunkType(IntEnum):
    PLAIN = 1
    TWO_BYTE = 2
    THREE_BYTE = 3


def chunk_type(byte: int) -> ChunkType:
    """Classify a chunk by its leading byte."""
    if byte & 0x80:
        return ChunkType.PLAIN
    if byte & 0x40:
        return ChunkType.THREE_BYTE
    return ChunkType.TWO_BYTE


def chunk_size(byte: int) -> int:
    """Number of output bytes the chunk starting with ``byte`` produces."""
    kind = chunk_type(byte)
    if kind is ChunkType.PLAIN:
        return (byte & 0x7F) + 1
    if kind is ChunkType.TWO_BYTE:
        return ((byte & 0x3F) >> 2) + 3
    return (byte & 0x3F) + 4


def chunk_offset(chunk: bytes) -> int:
    """Back-reference offset encoded in the chunk header (0 for plain chunks)."""
    kind = chunk_type(chunk[0])
    if kind is ChunkType.PLAIN:
        return 0
    if kind is ChunkType.TWO_BYTE:
        return ((chunk[0] & 0x03) << 8) + chunk[1]
    return (chunk[1] << 8) + chunk[2]


_HEADER_LENGTH = {ChunkType.PLAIN: 1, ChunkType.TWO_BYTE: 2, ChunkType.THREE_BYTE: 3}


def adc_decompress(data: bytes, avail_size: int) -> tuple[int, bytes]:
    """Decompress ``data`` into at most ``avail_size`` bytes.

    Returns the number of input bytes consumed and the output produced.
    Decoding stops early when the next chunk would not fit.
    """
    out = bytearray()
    pos = 0
    while pos < len(data):
        head = data[pos]
        kind = chunk_type(head)
        size = chunk_size(head)
        header = _HEADER_LENGTH[kind]
        if len(out) + size > avail_size:
            break
        if pos + header > len(data):
            raise ValueError("truncated ADC chunk header")
        if kind is ChunkType.PLAIN:
            literal = data[pos + 1:pos + 1 + size]
            if len(literal) != size:
                raise ValueError("truncated ADC literal chunk")
            out += literal
        else:
            distance = chunk_offset(data[pos:pos + header]) + 1
            if distance > len(out):
                raise ValueError("ADC back-reference before start of output")
            for _ in range(size):
                out.append(out[-distance])
            size = 0
        pos += header + size
    return pos, bytes(out)