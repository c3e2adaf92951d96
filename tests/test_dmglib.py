import struct
import zlib

import pytest

from udifkit.abstractfile import MemoryFile
from udifkit.blkx import BLKXTable
from udifkit.blkxio import insert_blkx
from udifkit.checksum import CHECKSUM_CRC32
from udifkit.dmglib import calculate_master_checksum, convert_to_iso, extract_dmg
from udifkit.resources import ATTRIBUTE_HDIUTIL, insert_data, write_resources
from udifkit.udif import UDIFChecksum, UDIFResourceFile


def _pattern(sectors, seed):
    return bytes((i * seed + seed) % 251 for i in range(sectors * 512))


def _build_image(parts):
    out = MemoryFile()
    resources = []
    for pid, name, first, data in parts:
        blkx = insert_blkx(out, MemoryFile(data), first, len(data) // 512, 0, CHECKSUM_CRC32)
        resources = insert_data(resources, "blkx", pid, name, blkx.to_bytes(), ATTRIBUTE_HDIUTIL)
    offset = out.tell()
    write_resources(out, resources)
    UDIFResourceFile(xml_offset=offset, xml_length=out.tell() - offset).write(out)
    return out.getvalue()


def test_extract_default_picks_hfs_partition():
    hfs = _pattern(3, 7)
    image = _build_image([
        (0, "Apple (Apple_partition_map : 1)", 0, _pattern(1, 3)),
        (2, "Mac_OS_X (Apple_HFS : 3)", 1, hfs),
    ])
    inp, out = MemoryFile(image), MemoryFile()
    extract_dmg(inp, out, -1)
    assert out.getvalue() == hfs
    assert inp.closed and out.closed


def test_extract_by_partition_number():
    first = _pattern(1, 3)
    image = _build_image([
        (0, "Apple (Apple_partition_map : 1)", 0, first),
        (2, "Mac_OS_X (Apple_HFS : 3)", 1, _pattern(2, 5)),
    ])
    out = MemoryFile()
    extract_dmg(MemoryFile(image), out, 0)
    assert out.getvalue() == first


def test_extract_missing_partition_raises():
    image = _build_image([(0, "plain", 0, _pattern(1, 3))])
    out = MemoryFile()
    with pytest.raises(LookupError):
        extract_dmg(MemoryFile(image), out, -1)
    assert out.closed


def test_extract_rejects_non_udif():
    with pytest.raises(ValueError):
        extract_dmg(MemoryFile(bytes(1024)), MemoryFile(), -1)


def test_convert_to_iso_places_partitions_by_sector():
    a = _pattern(2, 3)
    b = _pattern(1, 11)
    image = _build_image([(0, "a", 0, a), (1, "b", 4, b)])
    out = MemoryFile()
    convert_to_iso(MemoryFile(image), out)
    raw = out.getvalue()
    assert len(raw) == 5 * 512
    assert raw[:1024] == a
    assert raw[1024:2048] == bytes(1024)
    assert raw[2048:] == b


def _table(kind, value):
    table = BLKXTable(checksum=UDIFChecksum(type=kind, data=[value] + [0] * 31))
    return table.to_bytes()


def test_master_checksum_over_crc_words():
    resources = insert_data(None, "blkx", 0, "", _table(CHECKSUM_CRC32, 0x11223344), 0)
    resources = insert_data(resources, "blkx", 1, "", _table(CHECKSUM_CRC32, 0xDEADBEEF), 0)
    expected = zlib.crc32(struct.pack(">II", 0x11223344, 0xDEADBEEF))
    assert calculate_master_checksum(resources) == expected


def test_master_checksum_ignores_other_types():
    base = insert_data(None, "blkx", 0, "", _table(CHECKSUM_CRC32, 0x01020304), 0)
    with_other = insert_data(None, "blkx", 0, "", _table(CHECKSUM_CRC32, 0x01020304), 0)
    with_other = insert_data(with_other, "blkx", 1, "", _table(0, 0xFFFFFFFF), 0)
    assert calculate_master_checksum(with_other) == calculate_master_checksum(base)


def test_master_checksum_of_no_crc_tables_is_zero():
    resources = insert_data(None, "blkx", 0, "", _table(0, 5), 0)
    assert calculate_master_checksum(resources) == 0


def test_master_checksum_without_blkx_raises():
    with pytest.raises(KeyError):
        calculate_master_checksum(insert_data(None, "plst", 0, "", b"", 0))