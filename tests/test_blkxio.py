import random
import zlib

import pytest

from udifkit.abstractfile import MemoryFile
from udifkit.blkx import BLKXRun, BLKXTable, BlockType
from udifkit.blkxio import extract_blkx, insert_blkx
from udifkit.checksum import CHECKSUM_CRC32, ChecksumToken


def _noise(size):
    return random.Random(1).randbytes(size)


def test_round_trip_mixed_data():
    data = bytes(512 * 0x200) + _noise(512 * 3)
    out = MemoryFile()
    blkx = insert_blkx(out, MemoryFile(data), 0, len(data) // 512, 2, CHECKSUM_CRC32)
    restored = MemoryFile()
    extract_blkx(MemoryFile(out.getvalue()), restored, blkx)
    assert restored.getvalue() == data


def test_runs_split_and_terminate():
    data = bytes(512 * 0x201)
    blkx = insert_blkx(MemoryFile(), MemoryFile(data), 5, 0x201, 0, CHECKSUM_CRC32)
    assert [r.sector_count for r in blkx.runs] == [0x200, 1, 0]
    assert blkx.runs[-1].type == BlockType.TERMINATOR
    assert blkx.runs[-1].sector_start == 0x201
    assert blkx.first_sector_number == 5
    assert blkx.checksum.type == CHECKSUM_CRC32


def test_checksum_callbacks_see_streams():
    data = bytes(512) + _noise(512)
    out = MemoryFile()
    plain = ChecksumToken()
    packed = ChecksumToken()
    insert_blkx(out, MemoryFile(data), 0, 2, 0, CHECKSUM_CRC32, plain.crc_only, packed.crc_only)
    assert plain.crc == zlib.crc32(data)
    assert packed.crc == zlib.crc32(out.getvalue())


def test_comp_offsets_follow_output_position():
    out = MemoryFile(b"x" * 100)
    out.seek(100)
    blkx = insert_blkx(out, MemoryFile(bytes(512)), 0, 1, 0, CHECKSUM_CRC32)
    assert blkx.runs[0].comp_offset == 100
    assert blkx.runs[1].comp_offset == out.length()


def test_short_input_raises():
    with pytest.raises(EOFError):
        insert_blkx(MemoryFile(), MemoryFile(bytes(100)), 0, 1, 0, CHECKSUM_CRC32)


def test_extract_adc_run_at_output_offset():
    blkx = BLKXTable(
        decompress_buffer_requested=0x208,
        runs=[
            BLKXRun(type=BlockType.ADC, sector_start=0, sector_count=1, comp_offset=0, comp_length=4),
            BLKXRun(type=BlockType.TERMINATOR, sector_start=1),
        ],
    )
    out = MemoryFile()
    out.seek(1024)
    extract_blkx(MemoryFile(b"\x82abc"), out, blkx)
    value = out.getvalue()
    assert len(value) == 1024 + 512
    assert value[1024:1027] == b"abc"
    assert value[1027:] == bytes(509)


def test_extract_ignore_run_fills_zeros():
    blkx = BLKXTable(
        decompress_buffer_requested=0x208,
        runs=[
            BLKXRun(type=BlockType.IGNORE, sector_start=0, sector_count=2),
            BLKXRun(type=BlockType.TERMINATOR, sector_start=2),
        ],
    )
    out = MemoryFile()
    extract_blkx(MemoryFile(), out, blkx)
    assert out.getvalue() == bytes(1024)


def test_extract_truncated_raw_run():
    blkx = BLKXTable(
        decompress_buffer_requested=0x208,
        runs=[BLKXRun(type=BlockType.RAW, sector_start=0, sector_count=1, comp_length=512)],
    )
    with pytest.raises(EOFError):
        extract_blkx(MemoryFile(bytes(10)), MemoryFile(), blkx)