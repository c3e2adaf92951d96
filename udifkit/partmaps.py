"""Writing the driver descriptor map and the Apple partition map as image partitions."""

from __future__ import annotations

from typing import Any

from udifkit.abstractfile import MemoryFile
from udifkit.blkxio import SECTOR_SIZE, ChecksumFunc, insert_blkx
from udifkit.blkx import CSumResource
from udifkit.checksum import CHECKSUM_CRC32, CHECKSUM_MKBLOCK, ChecksumToken
from udifkit.nsiz import NSizResource
from udifkit.partition import (
    DDM_OFFSET,
    DDM_SIZE,
    PARTITION_OFFSET,
    PARTITION_SIZE,
    DriverDescriptorRecord,
    Partition,
    partition_map_to_bytes,
)
from udifkit.resources import ATTRIBUTE_HDIUTIL, ResourceKey, insert_data

DDM_DESCRIPTOR = 0xFFFFFFFF
NSIZ_VERSION = 6


def _insert_nsiz(nsiz_list: list[NSizResource], record: NSizResource) -> None:
    """Place ``record`` right after the first entry, or first if the list is empty."""
    if nsiz_list:
        nsiz_list.insert(1, record)
    else:
        nsiz_list.append(record)


def _partition_record(token: ChecksumToken, partition_number: int) -> NSizResource:
    return NSizResource(
        is_volume=False,
        block_checksum2=token.block,
        partition_number=partition_number,
        version=NSIZ_VERSION,
    )


def write_driver_descriptor_map(
    file: Any,
    ddm: DriverDescriptorRecord,
    data_fork_checksum: ChecksumFunc,
    resources: list[ResourceKey] | None,
) -> list[ResourceKey]:
    """Write ``ddm`` to ``file`` as a block run and record its block table under "blkx"."""
    buffer = ddm.to_bytes()[:DDM_SIZE * SECTOR_SIZE]
    token = ChecksumToken()
    blkx = insert_blkx(
        file, MemoryFile(buffer), DDM_OFFSET, DDM_SIZE, DDM_DESCRIPTOR, CHECKSUM_CRC32,
        token.crc_only, data_fork_checksum,
    )
    blkx.checksum.data[0] = token.crc
    return insert_data(
        resources, "blkx", -1, "Driver Descriptor Map (DDM : 0)",
        blkx.to_bytes(), ATTRIBUTE_HDIUTIL,
    )


def write_apple_partition_map(
    file: Any,
    partitions: list[Partition],
    data_fork_checksum: ChecksumFunc,
    resources: list[ResourceKey] | None,
    nsiz_list: list[NSizResource],
) -> list[ResourceKey]:
    """Write the partition map to ``file`` and record its blkx, cSum and nsiz entries.

    ``nsiz_list`` receives the new nsiz record in place.
    """
    if len(partitions) > PARTITION_SIZE:
        raise ValueError(f"at most {PARTITION_SIZE} partition entries fit in the map")
    buffer = partition_map_to_bytes(partitions, SECTOR_SIZE).ljust(
        PARTITION_SIZE * SECTOR_SIZE, b"\x00"
    )
    token = ChecksumToken()
    blkx = insert_blkx(
        file, MemoryFile(buffer), PARTITION_OFFSET, PARTITION_SIZE, 0, CHECKSUM_CRC32,
        token.block_crc, data_fork_checksum,
    )
    blkx.checksum.data[0] = token.crc
    csum = CSumResource(version=1, type=CHECKSUM_MKBLOCK, checksum=token.block)

    resources = insert_data(
        resources, "blkx", 0, "Apple (Apple_partition_map : 1)",
        blkx.to_bytes(), ATTRIBUTE_HDIUTIL,
    )
    resources = insert_data(resources, "cSum", 0, "", csum.to_bytes(), 0)
    _insert_nsiz(nsiz_list, _partition_record(token, 0))
    return resources