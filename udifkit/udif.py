"""The UDIF trailer ("koly" block) and its checksum and segment id parts."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Any

KOLY_SIGNATURE = 0x6B6F6C79
CHECKSUM_WORDS = 0x20
CHECKSUM_SIZE = 8 + 4 * CHECKSUM_WORDS
RESERVED1_SIZE = 0x78
SIZE = 512


def _read_exact(file: Any, size: int) -> bytes:
    data = file.read(size)
    if len(data) != size:
        raise EOFError(f"wanted {size} bytes, got {len(data)}")
    return data


def _read_u32(file: Any) -> int:
    return struct.unpack(">I", _read_exact(file, 4))[0]


def _read_u64(file: Any) -> int:
    return struct.unpack(">Q", _read_exact(file, 8))[0]


def _write_u32(file: Any, value: int) -> None:
    file.write(struct.pack(">I", value))


def _write_u64(file: Any, value: int) -> None:
    file.write(struct.pack(">Q", value))


@dataclass
class UDIFChecksum:
    type: int = 0
    size: int = CHECKSUM_WORDS
    data: list[int] = field(default_factory=lambda: [0] * CHECKSUM_WORDS)

    def __post_init__(self) -> None:
        if len(self.data) != CHECKSUM_WORDS:
            raise ValueError(f"checksum data must hold {CHECKSUM_WORDS} words")

    @classmethod
    def read(cls, file: Any) -> UDIFChecksum:
        kind = _read_u32(file)
        size = _read_u32(file)
        words = list(struct.unpack(f">{CHECKSUM_WORDS}I", _read_exact(file, 4 * CHECKSUM_WORDS)))
        return cls(kind, size, words)

    def write(self, file: Any) -> None:
        """Write type, size and the first ``size`` data words."""
        if self.size > CHECKSUM_WORDS:
            raise ValueError(f"checksum size {self.size} exceeds {CHECKSUM_WORDS} words")
        file.write(struct.pack(f">II{self.size}I", self.type, self.size, *self.data[:self.size]))

    def to_bytes(self) -> bytes:
        return struct.pack(f">II{CHECKSUM_WORDS}I", self.type, self.size, *self.data)

    @classmethod
    def from_bytes(cls, data: bytes) -> UDIFChecksum:
        if len(data) < CHECKSUM_SIZE:
            raise ValueError("checksum record too short")
        kind, size, *words = struct.unpack_from(f">II{CHECKSUM_WORDS}I", data)
        return cls(kind, size, list(words))


@dataclass
class UDIFID:
    """Segment id: four words stored little-endian, last word first."""

    data1: int = 0
    data2: int = 0
    data3: int = 0
    data4: int = 0

    @classmethod
    def read(cls, file: Any) -> UDIFID:
        d4, d3, d2, d1 = struct.unpack("<4I", _read_exact(file, 16))
        return cls(d1, d2, d3, d4)

    def write(self, file: Any) -> None:
        file.write(struct.pack("<4I", self.data4, self.data3, self.data2, self.data1))


@dataclass
class UDIFResourceFile:
    signature: int = KOLY_SIGNATURE
    version: int = 4
    header_size: int = SIZE
    flags: int = 0
    running_data_fork_offset: int = 0
    data_fork_offset: int = 0
    data_fork_length: int = 0
    rsrc_fork_offset: int = 0
    rsrc_fork_length: int = 0
    segment_number: int = 0
    segment_count: int = 0
    segment_id: UDIFID = field(default_factory=UDIFID)
    data_fork_checksum: UDIFChecksum = field(default_factory=UDIFChecksum)
    xml_offset: int = 0
    xml_length: int = 0
    reserved1: bytes = bytes(RESERVED1_SIZE)
    master_checksum: UDIFChecksum = field(default_factory=UDIFChecksum)
    image_variant: int = 0
    sector_count: int = 0
    reserved2: int = 0
    reserved3: int = 0
    reserved4: int = 0

    @classmethod
    def read(cls, file: Any) -> UDIFResourceFile:
        """Read a trailer; raise ValueError on a wrong signature."""
        signature = _read_u32(file)
        if signature != KOLY_SIGNATURE:
            raise ValueError("readUDIFResourceFile - signature incorrect")
        version = _read_u32(file)
        header_size = _read_u32(file)
        flags = _read_u32(file)
        running, df_offset, df_length, rf_offset, rf_length = (_read_u64(file) for _ in range(5))
        segment_number = _read_u32(file)
        segment_count = _read_u32(file)
        segment_id = UDIFID.read(file)
        data_fork_checksum = UDIFChecksum.read(file)
        xml_offset = _read_u64(file)
        xml_length = _read_u64(file)
        reserved1 = _read_exact(file, RESERVED1_SIZE)
        master_checksum = UDIFChecksum.read(file)
        image_variant = _read_u32(file)
        sector_count = _read_u64(file)
        reserved2, reserved3, reserved4 = (_read_u32(file) for _ in range(3))
        return cls(
            signature, version, header_size, flags,
            running, df_offset, df_length, rf_offset, rf_length,
            segment_number, segment_count, segment_id, data_fork_checksum,
            xml_offset, xml_length, reserved1, master_checksum,
            image_variant, sector_count, reserved2, reserved3, reserved4,
        )

    def write(self, file: Any) -> None:
        if len(self.reserved1) != RESERVED1_SIZE:
            raise ValueError(f"reserved1 must be {RESERVED1_SIZE} bytes")
        for value in (self.signature, self.version, self.header_size, self.flags):
            _write_u32(file, value)
        for value in (
            self.running_data_fork_offset, self.data_fork_offset, self.data_fork_length,
            self.rsrc_fork_offset, self.rsrc_fork_length,
        ):
            _write_u64(file, value)
        _write_u32(file, self.segment_number)
        _write_u32(file, self.segment_count)
        self.segment_id.write(file)
        self.data_fork_checksum.write(file)
        _write_u64(file, self.xml_offset)
        _write_u64(file, self.xml_length)
        file.write(self.reserved1)
        self.master_checksum.write(file)
        _write_u32(file, self.image_variant)
        _write_u64(file, self.sector_count)
        for value in (self.reserved2, self.reserved3, self.reserved4):
            _write_u32(file, value)