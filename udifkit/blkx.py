"""Binary resource records of a UDIF image: block tables, cSum and size."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum

from udifkit.udif import CHECKSUM_SIZE, UDIFChecksum

UDIF_BLOCK_SIGNATURE = 0x6D697368

_TABLE_HEAD = struct.Struct(">IIQQQII6I")
_RUN = struct.Struct(">IIQQQQ")
_RUN_COUNT = struct.Struct(">I")

BLKX_TABLE_SIZE = _TABLE_HEAD.size + CHECKSUM_SIZE + _RUN_COUNT.size
BLKX_RUN_SIZE = _RUN.size


class BlockType(IntEnum):
    ADC = 0x80000004
    ZLIB = 0x80000005
    RAW = 0x00000001
    IGNORE = 0x00000002
    COMMENT = 0x7FFFFFFE
    TERMINATOR = 0xFFFFFFFF


@dataclass
class BLKXRun:
    type: int = BlockType.ZLIB
    reserved: int = 0
    sector_start: int = 0
    sector_count: int = 0
    comp_offset: int = 0
    comp_length: int = 0


@dataclass
class BLKXTable:
    signature: int = UDIF_BLOCK_SIGNATURE
    info_version: int = 1
    first_sector_number: int = 0
    sector_count: int = 0
    data_start: int = 0
    decompress_buffer_requested: int = 0
    blocks_descriptor: int = 0
    reserved: tuple[int, ...] = (0, 0, 0, 0, 0, 0)
    checksum: UDIFChecksum = field(default_factory=UDIFChecksum)
    runs: list[BLKXRun] = field(default_factory=list)

    @property
    def blocks_run_count(self) -> int:
        return len(self.runs)

    @classmethod
    def from_bytes(cls, data: bytes) -> BLKXTable:
        """Parse a big-endian block table; raise ValueError if it is truncated."""
        if len(data) < BLKX_TABLE_SIZE:
            raise ValueError("block table too short")
        (signature, info_version, first_sector, sector_count, data_start,
         decompress, descriptor, *reserved) = _TABLE_HEAD.unpack_from(data, 0)
        checksum = UDIFChecksum.from_bytes(data[_TABLE_HEAD.size:_TABLE_HEAD.size + CHECKSUM_SIZE])
        (count,) = _RUN_COUNT.unpack_from(data, _TABLE_HEAD.size + CHECKSUM_SIZE)
        if len(data) < BLKX_TABLE_SIZE + count * BLKX_RUN_SIZE:
            raise ValueError(f"block table declares {count} runs but data is too short")
        runs = [
            BLKXRun(*_RUN.unpack_from(data, BLKX_TABLE_SIZE + index * BLKX_RUN_SIZE))
            for index in range(count)
        ]
        return cls(
            signature, info_version, first_sector, sector_count, data_start,
            decompress, descriptor, tuple(reserved), checksum, runs,
        )

    def to_bytes(self) -> bytes:
        if len(self.reserved) != 6:
            raise ValueError("block table needs six reserved words")
        parts = [
            _TABLE_HEAD.pack(
                self.signature, self.info_version, self.first_sector_number,
                self.sector_count, self.data_start, self.decompress_buffer_requested,
                self.blocks_descriptor, *self.reserved,
            ),
            self.checksum.to_bytes(),
            _RUN_COUNT.pack(len(self.runs)),
        ]
        parts.extend(
            _RUN.pack(run.type, run.reserved, run.sector_start, run.sector_count,
                      run.comp_offset, run.comp_length)
            for run in self.runs
        )
        return b"".join(parts)


_CSUM = struct.Struct(">HII")


@dataclass
class CSumResource:
    version: int = 1
    type: int = 0
    checksum: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> CSumResource:
        if len(data) < _CSUM.size:
            raise ValueError("cSum resource too short")
        return cls(*_CSUM.unpack_from(data))

    def to_bytes(self) -> bytes:
        return _CSUM.pack(self.version, self.type, self.checksum)


# unknown1 and data are stored as-is, without byte-order conversion.
_SIZE_HEAD = struct.Struct(">HI")
_SIZE_TAIL = struct.Struct(">IIIIHH")
_SIZE_RAW_LENGTH = 4 + 1 + 255
SIZE_RESOURCE_SIZE = _SIZE_HEAD.size + _SIZE_RAW_LENGTH + _SIZE_TAIL.size


@dataclass
class SizeResource:
    version: int = 5
    is_hfs: int = 0
    unknown1: bytes = bytes(4)
    data_len: int = 0
    data: bytes = bytes(255)
    unknown2: int = 0
    unknown3: int = 0
    volume_modified: int = 0
    unknown4: int = 0
    volume_signature: int = 0
    size_present: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> SizeResource:
        if len(data) < SIZE_RESOURCE_SIZE:
            raise ValueError("size resource too short")
        version, is_hfs = _SIZE_HEAD.unpack_from(data, 0)
        pos = _SIZE_HEAD.size
        unknown1 = bytes(data[pos:pos + 4])
        data_len = data[pos + 4]
        payload = bytes(data[pos + 5:pos + 5 + 255])
        tail = _SIZE_TAIL.unpack_from(data, pos + _SIZE_RAW_LENGTH)
        return cls(version, is_hfs, unknown1, data_len, payload, *tail)

    def to_bytes(self) -> bytes:
        if len(self.unknown1) != 4:
            raise ValueError("unknown1 must be 4 bytes")
        if len(self.data) > 255:
            raise ValueError("data must be at most 255 bytes")
        return b"".join((
            _SIZE_HEAD.pack(self.version, self.is_hfs),
            self.unknown1,
            bytes((self.data_len,)),
            self.data.ljust(255, b"\x00"),
            _SIZE_TAIL.pack(
                self.unknown2, self.unknown3, self.volume_modified,
                self.unknown4, self.volume_signature, self.size_present,
            ),
        ))