"""Checksums used in UDIF images: the MediaKit block checksum, CRC-32 and SHA-1."""

from __future__ import annotations

import hashlib
import struct
import zlib
from dataclasses import dataclass, field
from typing import Any

CHECKSUM_CRC32 = 0x00000002
CHECKSUM_MKBLOCK = 0x0002

_MASK32 = 0xFFFFFFFF


def mk_block_checksum(checksum: int, data: bytes | None) -> int:
    """Continue the MediaKit block checksum over the whole big-endian words of ``data``.

    Trailing bytes that do not fill a 32-bit word are ignored.
    """
    value = checksum & _MASK32
    if not data:
        return value
    usable = len(data) & ~3
    for (word,) in struct.iter_unpack(">I", data[:usable]):
        rotated = ((value >> 31) | (value << 1)) & _MASK32
        value = (word + rotated) & _MASK32
    return value


def crc32_checksum(checksum: int, data: bytes | None) -> int:
    """Continue a zlib-compatible CRC-32 from ``checksum`` over ``data``."""
    if data is None:
        return checksum & _MASK32
    return zlib.crc32(data, checksum & _MASK32) & _MASK32


@dataclass
class ChecksumToken:
    """Running checksums collected while data streams through an image writer."""

    block: int = 0
    crc: int = 0
    sha1: Any = field(default_factory=hashlib.sha1)

    def block_sha1_crc(self, data: bytes) -> None:
        """Feed ``data`` to the block checksum, the CRC-32 and the SHA-1."""
        self.block = mk_block_checksum(self.block, data)
        self.crc = crc32_checksum(self.crc, data)
        self.sha1.update(data)

    def block_crc(self, data: bytes) -> None:
        """Feed ``data`` to the block checksum and the CRC-32."""
        self.block = mk_block_checksum(self.block, data)
        self.crc = crc32_checksum(self.crc, data)

    def crc_only(self, data: bytes) -> None:
        """Feed ``data`` to the CRC-32 only."""
        self.crc = crc32_checksum(self.crc, data)

    def sha1_digest(self) -> bytes:
        """The 20-byte SHA-1 digest of everything fed through ``block_sha1_crc``."""
        return self.sha1.digest()