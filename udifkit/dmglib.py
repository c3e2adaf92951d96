"""Reading whole UDIF images: extraction, conversion to a raw image and master checksum."""

from __future__ import annotations

import logging
import struct
from typing import Any

from udifkit.abstractfile import get_length
from udifkit.blkx import BLKXTable
from udifkit.blkxio import SECTOR_SIZE, extract_blkx
from udifkit.checksum import CHECKSUM_CRC32, crc32_checksum
from udifkit.resources import (
    ResourceKey,
    get_data_by_id,
    get_resource_by_key,
    read_resources,
)
from udifkit.udif import SIZE as TRAILER_SIZE
from udifkit.udif import UDIFResourceFile

logger = logging.getLogger(__name__)


def _read_image_resources(inp: Any) -> list[ResourceKey]:
    length = get_length(inp)
    if length < TRAILER_SIZE:
        raise ValueError("image too short to hold a UDIF trailer")
    inp.seek(length - TRAILER_SIZE)
    trailer = UDIFResourceFile.read(inp)
    return read_resources(inp, trailer)


def _blkx_resource(resources: list[ResourceKey]) -> ResourceKey:
    resource = get_resource_by_key(resources, "blkx")
    if resource is None:
        raise KeyError("blkx")
    return resource


def extract_dmg(inp: Any, out: Any, part_num: int = -1) -> None:
    """Write the data of one partition of the image ``inp`` to ``out``.

    A negative ``part_num`` picks the first partition whose name mentions
    Apple_HFS. Both files are closed afterwards. Raises LookupError if no
    matching partition exists.
    """
    try:
        blkx = _blkx_resource(_read_image_resources(inp))
        logger.info("Writing out data..")
        if part_num < 0:
            entry = next((e for e in blkx.data if "Apple_HFS" in e.name), None)
        else:
            entry = get_data_by_id(blkx, part_num)
        if entry is None:
            raise LookupError("BLKX not found!")
        extract_blkx(inp, out, BLKXTable.from_bytes(entry.data))
    finally:
        out.close()
        inp.close()


def convert_to_iso(inp: Any, out: Any) -> None:
    """Write every partition of the image ``inp`` to ``out`` at its sector position."""
    try:
        blkx = _blkx_resource(_read_image_resources(inp))
        logger.info("Writing out data..")
        for entry in blkx.data:
            table = BLKXTable.from_bytes(entry.data)
            out.seek(table.first_sector_number * SECTOR_SIZE)
            extract_blkx(inp, out, table)
    finally:
        out.close()
        inp.close()


def calculate_master_checksum(resources: list[ResourceKey]) -> int:
    """CRC-32 over the big-endian CRC-32 checksums of all block tables."""
    blkx = _blkx_resource(resources)
    words = b"".join(
        struct.pack(">I", table.checksum.data[0])
        for table in (BLKXTable.from_bytes(entry.data) for entry in blkx.data)
        if table.checksum.type == CHECKSUM_CRC32
    )
    return crc32_checksum(0, words)