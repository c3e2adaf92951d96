"""Converting a raw disk image into a UDIF image."""

from __future__ import annotations

import logging
from typing import Any

from udifkit.abstractfile import get_length
from udifkit.blkx import CSumResource
from udifkit.blkxio import SECTOR_SIZE, insert_blkx
from udifkit.checksum import CHECKSUM_CRC32, CHECKSUM_MKBLOCK, ChecksumToken
from udifkit.koly import DEVICE_IMAGE_TYPE, PARTITION_IMAGE_TYPE, finish_image
from udifkit.nsiz import NSizResource
from udifkit.partition import (
    DRIVER_DESCRIPTOR_SIGNATURE,
    DriverDescriptorRecord,
    Partition,
    parse_partition_map,
)
from udifkit.partmaps import NSIZ_VERSION, write_driver_descriptor_map
from udifkit.resources import ATTRIBUTE_HDIUTIL, ResourceKey, insert_data
from udifkit.udif import UDIFResourceFile

logger = logging.getLogger(__name__)

ENTIRE_DEVICE_DESCRIPTOR = 0xFFFFFFFE


def _read_exact(inp: Any, size: int) -> bytes:
    data = inp.read(size)
    if len(data) != size:
        raise EOFError(f"wanted {size} bytes, got {len(data)}")
    return data


def _add_partition(
    out: Any,
    inp: Any,
    resources: list[ResourceKey],
    nsiz_list: list[NSizResource],
    data_fork: ChecksumToken,
    first_sector: int,
    num_sectors: int,
    descriptor: int,
    entry_id: int,
    name: str,
) -> list[ResourceKey]:
    token = ChecksumToken()
    blkx = insert_blkx(
        out, inp, first_sector, num_sectors, descriptor, CHECKSUM_CRC32,
        token.block_crc, data_fork.crc_only,
    )
    blkx.checksum.data[0] = token.crc
    resources = insert_data(resources, "blkx", entry_id, name, blkx.to_bytes(), ATTRIBUTE_HDIUTIL)
    csum = CSumResource(version=1, type=CHECKSUM_MKBLOCK, checksum=token.block)
    resources = insert_data(resources, "cSum", entry_id, "", csum.to_bytes(), 0)
    nsiz_list.append(NSizResource(
        is_volume=False, block_checksum2=token.block,
        partition_number=entry_id, version=NSIZ_VERSION,
    ))
    return resources


def convert_to_dmg(inp: Any, out: Any) -> UDIFResourceFile:
    """Compress the raw image ``inp`` into a UDIF image in ``out``; return its trailer.

    A disk with a driver descriptor map gets one block table per partition;
    anything else becomes one table for the whole file. Both files are closed.
    """
    try:
        data_fork = ChecksumToken()
        resources: list[ResourceKey] = []
        nsiz_list: list[NSizResource] = []

        logger.info("Processing DDM...")
        inp.seek(0)
        ddm = DriverDescriptorRecord.from_bytes(_read_exact(inp, SECTOR_SIZE))

        if ddm.sig == DRIVER_DESCRIPTOR_SIGNATURE:
            block_size = ddm.blk_size
            if block_size <= 0:
                raise ValueError("driver descriptor map has a zero block size")
            resources = write_driver_descriptor_map(out, ddm, data_fork.crc_only, resources)

            logger.info("Processing partition map...")
            inp.seek(block_size)
            count = Partition.from_bytes(_read_exact(inp, block_size)).map_blk_cnt
            inp.seek(block_size)
            partitions = parse_partition_map(_read_exact(inp, block_size * count), block_size)

            num_sectors = 0
            for index, partition in enumerate(partitions):
                logger.info("Processing blkx %d, total %d...", index, count)
                name = f"{partition.part_name} ({partition.par_type} : {index + 1})"
                inp.seek(partition.py_part_start * block_size)
                resources = _add_partition(
                    out, inp, resources, nsiz_list, data_fork,
                    partition.py_part_start, partition.part_blk_cnt, index, index, name,
                )
                num_sectors = max(num_sectors, partition.py_part_start + partition.part_blk_cnt)
            variant = DEVICE_IMAGE_TYPE
        else:
            logger.info("No DDM! Just doing one huge blkx then...")
            length = get_length(inp)
            inp.seek(0)
            resources = _add_partition(
                out, inp, resources, nsiz_list, data_fork,
                0, length // SECTOR_SIZE, ENTIRE_DEVICE_DESCRIPTOR, 0,
                "whole disk (unknown partition : 0)",
            )
            num_sectors = 0
            variant = PARTITION_IMAGE_TYPE

        trailer = finish_image(out, resources, nsiz_list, data_fork.crc, variant, num_sectors)
        logger.info("Done")
        return trailer
    finally:
        inp.close()
        out.close()