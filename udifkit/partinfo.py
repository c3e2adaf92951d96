"""Reading back and describing the driver descriptor map and partition map of an image."""

from __future__ import annotations

from typing import Any

from udifkit.abstractfile import MemoryFile
from udifkit.blkx import BLKXTable
from udifkit.blkxio import SECTOR_SIZE, extract_blkx
from udifkit.partition import (
    APPLE_PARTITION_MAP_SIGNATURE,
    DriverDescriptorRecord,
    Partition,
    parse_partition_map,
)
from udifkit.resources import ResourceKey, get_data_by_id, get_resource_by_key

DDM_ID = -1
PARTITION_MAP_ID = 0


def _extract_entry(file: Any, resources: list[ResourceKey], entry_id: int) -> bytes:
    blkx = get_resource_by_key(resources, "blkx")
    if blkx is None:
        raise KeyError("blkx")
    entry = get_data_by_id(blkx, entry_id)
    if entry is None:
        raise LookupError(f"no blkx entry with id {entry_id}")
    buffer = MemoryFile()
    extract_blkx(file, buffer, BLKXTable.from_bytes(entry.data))
    return buffer.getvalue()


def read_driver_descriptor_map(file: Any, resources: list[ResourceKey]) -> DriverDescriptorRecord:
    """Decode the driver descriptor map stored in the image ``file``."""
    data = _extract_entry(file, resources, DDM_ID)
    return DriverDescriptorRecord.from_bytes(data[:SECTOR_SIZE])


def read_apple_partition_map(
    file: Any, resources: list[ResourceKey], block_size: int
) -> list[Partition]:
    """Decode the Apple partition map stored in the image ``file``."""
    data = _extract_entry(file, resources, PARTITION_MAP_ID)
    return parse_partition_map(data, block_size)


def describe_driver_descriptor_map(record: DriverDescriptorRecord) -> str:
    """A field-by-field listing of a driver descriptor map."""
    lines = [
        f"sbSig:\t\t0x{record.sig:x}",
        f"sbBlkSize:\t0x{record.blk_size:x}",
        f"sbBlkCount:\t0x{record.blk_count:x}",
        f"sbDevType:\t0x{record.dev_type:x}",
        f"sbDevId:\t0x{record.dev_id:x}",
        f"sbData:\t\t0x{record.data:x}",
        f"sbDrvrCount:\t0x{record.drvr_count:x}",
        f"ddBlock:\t0x{record.dd_block:x}",
        f"ddSize:\t\t0x{record.dd_size:x}",
        f"ddType:\t\t0x{record.dd_type:x}",
    ]
    for driver in record.drivers[:max(0, record.drvr_count - 1)]:
        lines.append(f"\tddBlock:\t0x{driver.block:x}")
        lines.append(f"\tddSize:\t\t0x{driver.size:x}")
        lines.append(f"\tddType:\t\t0x{driver.type:x}")
    return "\n".join(lines) + "\n"


def describe_partitions(partitions: list[Partition]) -> str:
    """A field-by-field listing of partition map entries, up to the first invalid one."""
    parts = []
    for p in partitions:
        if p.sig != APPLE_PARTITION_MAP_SIGNATURE:
            break
        parts.append(
            f"pmSig:\t\t\t0x{p.sig:x}\n"
            f"pmSigPad:\t\t0x{p.sig_pad:x}\n"
            f"pmMapBlkCnt:\t\t0x{p.map_blk_cnt:x}\n"
            f"pmPartName:\t\t{p.part_name}\n"
            f"pmParType:\t\t{p.par_type}\n"
            f"pmPyPartStart:\t\t0x{p.py_part_start:x}\n"
            f"pmPartBlkCnt:\t\t0x{p.part_blk_cnt:x}\n"
            f"pmLgDataStart:\t\t0x{p.lg_data_start:x}\n"
            f"pmDataCnt:\t\t0x{p.data_cnt:x}\n"
            f"pmPartStatus:\t\t0x{p.part_status:x}\n"
            f"pmLgBootStart:\t\t0x{p.lg_boot_start:x}\n"
            f"pmBootSize:\t\t0x{p.boot_size:x}\n"
            f"pmBootAddr:\t\t0x{p.boot_addr:x}\n"
            f"pmBootAddr2:\t\t0x{p.boot_addr2:x}\n"
            f"pmBootEntry:\t\t0x{p.boot_entry:x}\n"
            f"pmBootEntry2:\t\t0x{p.boot_entry2:x}\n"
            f"pmBootCksum:\t\t0x{p.boot_cksum:x}\n"
            f"pmProcessor:\t\t\t{p.processor}\n\n"
        )
    return "".join(parts)