"""Finishing an image: the property list and the UDIF trailer."""

from __future__ import annotations

import logging
import random
from typing import Any

from udifkit.checksum import CHECKSUM_CRC32
from udifkit.defaults import make_plst
from udifkit.dmglib import calculate_master_checksum
from udifkit.nsiz import NSizResource, write_nsiz
from udifkit.resources import ResourceKey, write_resources
from udifkit.udif import (
    CHECKSUM_WORDS,
    KOLY_SIGNATURE,
    RESERVED1_SIZE,
    UDIFID,
    UDIFChecksum,
    UDIFResourceFile,
)
from udifkit.udif import SIZE as TRAILER_SIZE

logger = logging.getLogger(__name__)

UDIF_FLAGS_FLATTENED = 0x00000001
DEVICE_IMAGE_TYPE = 0x00000001
PARTITION_IMAGE_TYPE = 0x00000002
UDIF_VERSION = 4


def _crc_checksum(value: int) -> UDIFChecksum:
    checksum = UDIFChecksum(type=CHECKSUM_CRC32, size=CHECKSUM_WORDS)
    checksum.data[0] = value
    return checksum


def build_trailer(
    data_fork_checksum: int,
    plist_offset: int,
    plist_size: int,
    master_checksum: int,
    image_variant: int,
    sector_count: int,
) -> UDIFResourceFile:
    """A flattened single-segment trailer with a random segment id."""
    return UDIFResourceFile(
        signature=KOLY_SIGNATURE,
        version=UDIF_VERSION,
        header_size=TRAILER_SIZE,
        flags=UDIF_FLAGS_FLATTENED,
        running_data_fork_offset=0,
        data_fork_offset=0,
        data_fork_length=plist_offset,
        rsrc_fork_offset=0,
        rsrc_fork_length=0,
        segment_number=1,
        segment_count=1,
        segment_id=UDIFID(*(random.randrange(2**31) for _ in range(4))),
        data_fork_checksum=_crc_checksum(data_fork_checksum),
        xml_offset=plist_offset,
        xml_length=plist_size,
        reserved1=bytes(RESERVED1_SIZE),
        master_checksum=_crc_checksum(master_checksum),
        image_variant=image_variant,
        sector_count=sector_count,
    )


def finish_image(
    out: Any,
    resources: list[ResourceKey],
    nsiz_list: list[NSizResource],
    data_fork_checksum: int,
    image_variant: int,
    sector_count: int,
) -> UDIFResourceFile:
    """Append nsiz and plst to ``resources``, write the plist and trailer, return the trailer."""
    logger.info("Writing XML data...")
    resources.append(write_nsiz(nsiz_list))
    resources.extend(make_plst())

    plist_offset = out.tell()
    write_resources(out, resources)
    plist_size = out.tell() - plist_offset

    logger.info("Generating UDIF metadata...")
    master = calculate_master_checksum(resources)
    logger.info("Master checksum: %x", master)
    trailer = build_trailer(
        data_fork_checksum, plist_offset, plist_size, master, image_variant, sector_count
    )
    logger.info("Writing out UDIF resource file...")
    trailer.write(out)
    return trailer