"""Driver descriptor map and Apple partition map records."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from udifkit.blkxio import SECTOR_SIZE

DRIVER_DESCRIPTOR_SIGNATURE = 0x4552
APPLE_PARTITION_MAP_SIGNATURE = 0x504D

DDM_SIZE = 0x1
PARTITION_SIZE = 0x3F
ATAPI_SIZE = 0x8
FREE_SIZE = 0xA
EXTRA_SIZE = DDM_SIZE + PARTITION_SIZE + ATAPI_SIZE + FREE_SIZE

DDM_OFFSET = 0x0
PARTITION_OFFSET = DDM_SIZE
ATAPI_OFFSET = DDM_SIZE + PARTITION_SIZE
USER_OFFSET = DDM_SIZE + PARTITION_SIZE + ATAPI_SIZE

BOOTCODE_DMMY = 0x646D6D79
BOOTCODE_GOON = 0x676F6F6E

HFSX_VOLUME_TYPE = "Apple_HFSX"

_DDM_HEAD = struct.Struct(">HHIHHIHIHH")
_DRIVER = struct.Struct(">IHH")
MAX_EXTRA_DRIVERS = (SECTOR_SIZE - _DDM_HEAD.size) // _DRIVER.size

_PARTITION = struct.Struct(">HHIII32s32s10I16sI")


def _cstring(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("latin-1")


def _field(text: str, size: int, name: str) -> bytes:
    raw = text.encode("latin-1")
    if len(raw) > size:
        raise ValueError(f"{name} longer than {size} bytes")
    return raw


@dataclass
class DriverDescriptor:
    block: int = 0
    size: int = 0
    type: int = 0


@dataclass
class DriverDescriptorRecord:
    """Block zero of a partitioned disk; ``drivers`` holds entries after the first."""

    sig: int = DRIVER_DESCRIPTOR_SIGNATURE
    blk_size: int = SECTOR_SIZE
    blk_count: int = 0
    dev_type: int = 0
    dev_id: int = 0
    data: int = 0
    drvr_count: int = 0
    dd_block: int = 0
    dd_size: int = 0
    dd_type: int = 0
    drivers: list[DriverDescriptor] = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data: bytes) -> DriverDescriptorRecord:
        """Parse a record; extra drivers are read only when the signature matches."""
        if len(data) < _DDM_HEAD.size:
            raise ValueError("driver descriptor record too short")
        record = cls(*_DDM_HEAD.unpack_from(data, 0))
        if record.sig == DRIVER_DESCRIPTOR_SIGNATURE:
            extra = max(0, min(record.drvr_count - 1, MAX_EXTRA_DRIVERS))
            for index in range(extra):
                offset = _DDM_HEAD.size + index * _DRIVER.size
                if offset + _DRIVER.size > len(data):
                    break
                record.drivers.append(DriverDescriptor(*_DRIVER.unpack_from(data, offset)))
        return record

    def to_bytes(self) -> bytes:
        """The record as one big-endian sector."""
        if len(self.drivers) > MAX_EXTRA_DRIVERS:
            raise ValueError(f"at most {MAX_EXTRA_DRIVERS} extra drivers fit in a sector")
        parts = [_DDM_HEAD.pack(
            self.sig, self.blk_size, self.blk_count, self.dev_type, self.dev_id,
            self.data, self.drvr_count, self.dd_block, self.dd_size, self.dd_type,
        )]
        parts.extend(_DRIVER.pack(d.block, d.size, d.type) for d in self.drivers)
        return b"".join(parts).ljust(SECTOR_SIZE, b"\x00")


@dataclass
class Partition:
    """One entry of an Apple partition map."""

    sig: int = APPLE_PARTITION_MAP_SIGNATURE
    sig_pad: int = 0
    map_blk_cnt: int = 0
    py_part_start: int = 0
    part_blk_cnt: int = 0
    part_name: str = ""
    par_type: str = ""
    lg_data_start: int = 0
    data_cnt: int = 0
    part_status: int = 0
    lg_boot_start: int = 0
    boot_size: int = 0
    boot_addr: int = 0
    boot_addr2: int = 0
    boot_entry: int = 0
    boot_entry2: int = 0
    boot_cksum: int = 0
    processor: str = ""
    boot_code: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> Partition:
        if len(data) < _PARTITION.size:
            raise ValueError("partition entry too short")
        (sig, sig_pad, map_blk_cnt, start, count, name, par_type,
         *numbers, processor, boot_code) = _PARTITION.unpack_from(data, 0)
        return cls(
            sig, sig_pad, map_blk_cnt, start, count, _cstring(name), _cstring(par_type),
            *numbers, _cstring(processor), boot_code,
        )

    def to_bytes(self) -> bytes:
        """The entry as one big-endian 512-byte sector."""
        return _PARTITION.pack(
            self.sig, self.sig_pad, self.map_blk_cnt, self.py_part_start, self.part_blk_cnt,
            _field(self.part_name, 32, "partition name"),
            _field(self.par_type, 32, "partition type"),
            self.lg_data_start, self.data_cnt, self.part_status, self.lg_boot_start,
            self.boot_size, self.boot_addr, self.boot_addr2, self.boot_entry,
            self.boot_entry2, self.boot_cksum,
            _field(self.processor, 16, "processor"),
            self.boot_code,
        ).ljust(SECTOR_SIZE, b"\x00")


def parse_partition_map(data: bytes, block_size: int) -> list[Partition]:
    """Parse the entries of a partition map laid out one per ``block_size`` bytes.

    Parsing stops at the count the first entry declares, at the first entry
    without the map signature, or at the end of ``data``.
    """
    if block_size <= 0:
        raise ValueError("block size must be positive")
    if len(data) < _PARTITION.size:
        return []
    count = Partition.from_bytes(data).map_blk_cnt
    partitions: list[Partition] = []
    for index in range(count):
        offset = index * block_size
        if offset + _PARTITION.size > len(data):
            break
        entry = Partition.from_bytes(data[offset:offset + block_size])
        if entry.sig != APPLE_PARTITION_MAP_SIGNATURE:
            break
        partitions.append(entry)
    return partitions


def partition_map_to_bytes(partitions: list[Partition], block_size: int) -> bytes:
    """Serialise ``partitions`` one per block of ``block_size`` bytes."""
    if block_size < SECTOR_SIZE:
        raise ValueError(f"block size must be at least {SECTOR_SIZE}")
    return b"".join(p.to_bytes().ljust(block_size, b"\x00") for p in partitions)


def create_driver_descriptor_map(num_sectors: int) -> DriverDescriptorRecord:
    """The driver descriptor map written in front of a new image."""
    return DriverDescriptorRecord(
        sig=DRIVER_DESCRIPTOR_SIGNATURE,
        blk_size=SECTOR_SIZE,
        blk_count=num_sectors + EXTRA_SIZE,
        dev_type=0,
        dev_id=0,
        data=0,
        drvr_count=1,
        dd_block=ATAPI_OFFSET,
        dd_size=0x4,
        dd_type=0x701,
    )


def create_apple_partition_map(num_sectors: int, volume_type: str) -> list[Partition]:
    """The four-entry partition map of a new image holding one volume."""
    return [
        Partition(
            map_blk_cnt=0x4, part_name="Apple", par_type="Apple_partition_map",
            py_part_start=PARTITION_OFFSET, part_blk_cnt=PARTITION_SIZE,
            data_cnt=PARTITION_SIZE, part_status=0x3,
        ),
        Partition(
            map_blk_cnt=0x4, part_name="Macintosh", par_type="Apple_Driver_ATAPI",
            py_part_start=ATAPI_OFFSET, part_blk_cnt=ATAPI_SIZE,
            data_cnt=0x04, part_status=0x303, boot_size=0x800, boot_cksum=0xFFFF,
            boot_code=BOOTCODE_DMMY,
        ),
        Partition(
            map_blk_cnt=0x4, part_name="Mac_OS_X", par_type=volume_type,
            py_part_start=USER_OFFSET, part_blk_cnt=num_sectors,
            data_cnt=num_sectors, part_status=0x40000033, boot_code=BOOTCODE_GOON,
        ),
        Partition(
            map_blk_cnt=0x4, part_name="", par_type="Apple_Free",
            py_part_start=USER_OFFSET + num_sectors, part_blk_cnt=FREE_SIZE,
        ),
    ]