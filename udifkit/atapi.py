"""Writing the ATAPI driver partition and the trailing free partition."""

from __future__ import annotations

from typing import Any

from udifkit.abstractfile import MemoryFile
from udifkit.blkx import BLKXRun, BLKXTable, BlockType, CSumResource
from udifkit.blkxio import SECTOR_SIZE, ChecksumFunc, insert_blkx
from udifkit.checksum import CHECKSUM_CRC32, CHECKSUM_MKBLOCK, ChecksumToken
from udifkit.nsiz import NSizResource
from udifkit.partition import ATAPI_OFFSET, ATAPI_SIZE, FREE_SIZE, USER_OFFSET
from udifkit.partmaps import _insert_nsiz, _partition_record
from udifkit.resources import ATTRIBUTE_HDIUTIL, ResourceKey, insert_data
from udifkit.udif import CHECKSUM_WORDS, UDIFChecksum

ATAPI_DATA = bytes(ATAPI_SIZE * SECTOR_SIZE)


def write_atapi(
    file: Any,
    data_fork_checksum: ChecksumFunc,
    resources: list[ResourceKey] | None,
    nsiz_list: list[NSizResource],
) -> list[ResourceKey]:
    """Write the ATAPI driver partition and record its blkx, cSum and nsiz entries.

    ``nsiz_list`` receives the new nsiz record in place.
    """
    token = ChecksumToken()
    blkx = insert_blkx(
        file, MemoryFile(ATAPI_DATA), ATAPI_OFFSET, ATAPI_SIZE, 1, CHECKSUM_CRC32,
        token.block_crc, data_fork_checksum,
    )
    blkx.checksum.data[0] = token.crc
    csum = CSumResource(version=1, type=CHECKSUM_MKBLOCK, checksum=token.block)

    resources = insert_data(
        resources, "blkx", 1, "Macintosh (Apple_Driver_ATAPI : 2)",
        blkx.to_bytes(), ATTRIBUTE_HDIUTIL,
    )
    resources = insert_data(resources, "cSum", 1, "", csum.to_bytes(), 0)
    _insert_nsiz(nsiz_list, _partition_record(token, 1))
    return resources


def write_free_partition(
    out: Any, num_sectors: int, resources: list[ResourceKey] | None
) -> list[ResourceKey]:
    """Record the free partition after a volume of ``num_sectors``; no data is written."""
    offset = out.tell()
    blkx = BLKXTable(
        first_sector_number=USER_OFFSET + num_sectors,
        sector_count=FREE_SIZE,
        data_start=0,
        decompress_buffer_requested=0,
        blocks_descriptor=3,
        checksum=UDIFChecksum(type=CHECKSUM_CRC32, size=CHECKSUM_WORDS),
        runs=[
            BLKXRun(type=BlockType.IGNORE, sector_start=0, sector_count=FREE_SIZE,
                    comp_offset=offset, comp_length=0),
            BLKXRun(type=BlockType.TERMINATOR, sector_start=FREE_SIZE, sector_count=0,
                    comp_offset=offset, comp_length=0),
        ],
    )
    return insert_data(
        resources, "blkx", 3, " (Apple_Free : 4)", blkx.to_bytes(), ATTRIBUTE_HDIUTIL
    )