"""Writing data as compressed block runs and reading it back."""

from __future__ import annotations

import logging
import zlib
from typing import Any, Callable, Optional

from udifkit.adc import adc_decompress
from udifkit.blkx import BLKXRun, BLKXTable, BlockType
from udifkit.udif import CHECKSUM_WORDS, UDIFChecksum

logger = logging.getLogger(__name__)

SECTOR_SIZE = 512
SECTORS_AT_A_TIME = 0x200
DECOMPRESS_BUFFER_REQUESTED = 0x208
DEFAULT_BUFFER_SIZE = 1024 * 1024

ChecksumFunc = Optional[Callable[[bytes], None]]


def _write_all(out: Any, data: bytes) -> None:
    written = out.write(data)
    if written is not None and written != len(data):
        raise OSError("short write")


def _read_exact(inp: Any, size: int) -> bytes:
    data = inp.read(size)
    if len(data) != size:
        raise EOFError(f"wanted {size} bytes, got {len(data)}")
    return data


def insert_blkx(
    out: Any,
    inp: Any,
    first_sector: int,
    num_sectors: int,
    blocks_descriptor: int,
    checksum_type: int,
    uncompressed_chk: ChecksumFunc = None,
    compressed_chk: ChecksumFunc = None,
) -> BLKXTable:
    """Read ``num_sectors`` sectors from ``inp``, write them to ``out`` as runs, return the table.

    Each run holds at most 0x200 sectors and is zlib-compressed unless that
    would not save space, in which case it is stored raw.
    """
    blkx = BLKXTable(
        first_sector_number=first_sector,
        sector_count=num_sectors,
        data_start=0,
        decompress_buffer_requested=DECOMPRESS_BUFFER_REQUESTED,
        blocks_descriptor=blocks_descriptor,
        checksum=UDIFChecksum(type=checksum_type, size=CHECKSUM_WORDS),
    )
    buffer_size = SECTOR_SIZE * DECOMPRESS_BUFFER_REQUESTED
    current = 0
    left = num_sectors
    while left > 0:
        count = min(left, SECTORS_AT_A_TIME)
        length = count * SECTOR_SIZE
        logger.debug("run %d: sectors=%d, left=%d", len(blkx.runs), count, left)
        data = _read_exact(inp, length)
        if uncompressed_chk:
            uncompressed_chk(data)

        run = BLKXRun(type=BlockType.ZLIB, sector_start=current, sector_count=count,
                      comp_offset=out.tell() - blkx.data_start)
        compressed = zlib.compress(data, zlib.Z_DEFAULT_COMPRESSION)
        if len(compressed) > buffer_size:
            raise ValueError("deflate")
        payload = compressed
        if len(compressed) // SECTOR_SIZE > count:
            run.type = BlockType.RAW
            payload = data
        _write_all(out, payload)
        if compressed_chk:
            compressed_chk(payload)
        run.comp_length = len(payload)
        blkx.runs.append(run)

        current += count
        left -= count

    blkx.runs.append(BLKXRun(
        type=BlockType.TERMINATOR,
        sector_start=current,
        sector_count=0,
        comp_offset=out.tell() - blkx.data_start,
        comp_length=0,
    ))
    return blkx


def extract_blkx(inp: Any, out: Any, blkx: BLKXTable) -> None:
    """Decode every run of ``blkx`` from ``inp`` into ``out`` at its current position."""
    buffer_size = SECTOR_SIZE * blkx.decompress_buffer_requested
    initial_offset = out.tell()

    for index, run in enumerate(blkx.runs):
        inp.seek(blkx.data_start + run.comp_offset)
        start = initial_offset + run.sector_start * SECTOR_SIZE
        out.seek(start)
        if run.sector_count > 0:
            out.seek(start + run.sector_count * SECTOR_SIZE - 1)
            _write_all(out, b"\x00")
            out.seek(start)

        if run.type == BlockType.TERMINATOR:
            break
        if run.comp_length == 0:
            continue

        logger.debug(
            "run %d: start=%d sectors=%d, length=%d, fileOffset=0x%x",
            index, start, run.sector_count, run.comp_length, run.comp_offset,
        )

        if run.type == BlockType.ADC:
            data = _read_exact(inp, run.comp_length)
            _, output = adc_decompress(data, buffer_size)
            _write_all(out, output)
        elif run.type == BlockType.ZLIB:
            data = _read_exact(inp, run.comp_length)
            decompressor = zlib.decompressobj()
            _write_all(out, decompressor.decompress(data) + decompressor.flush())
        elif run.type == BlockType.RAW:
            left = run.comp_length
            while left > 0:
                chunk = _read_exact(inp, min(left, DEFAULT_BUFFER_SIZE))
                _write_all(out, chunk)
                left -= len(chunk)