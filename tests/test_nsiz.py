import pytest

from udifkit.nsiz import NSizResource, nsiz_to_xml, parse_nsiz, read_nsiz, write_nsiz
from udifkit.resources import insert_data


def _volume():
    return NSizResource(
        is_volume=True,
        sha1_digest=bytes(range(20)),
        block_checksum2=0x12345678,
        byte_count=4096,
        modify_date=0x7FFF0000,
        partition_number=2,
        version=6,
        volume_signature=0x4858,
    )


def test_volume_round_trip():
    record = _volume()
    assert parse_nsiz(nsiz_to_xml(record)) == record


def test_plain_partition_round_trip():
    record = NSizResource(block_checksum2=99, partition_number=1, version=6)
    xml = nsiz_to_xml(record)
    assert "<key>bytes</key>" not in xml
    assert parse_nsiz(xml) == record


def test_negative_int32_rendering():
    record = NSizResource(block_checksum2=0xFFFFFFFF, version=6)
    xml = nsiz_to_xml(record)
    assert "<integer>-1</integer>" in xml
    assert parse_nsiz(xml).block_checksum2 == 0xFFFFFFFF


def test_write_and_read_resource():
    records = [NSizResource(partition_number=0, version=6), _volume()]
    key = write_nsiz(records)
    assert key.key == "nsiz"
    assert [d.id for d in key.data] == [0, 2]
    assert read_nsiz([key]) == records


def test_read_missing_nsiz():
    resources = insert_data(None, "blkx", 0, "", b"", 0)
    with pytest.raises(KeyError):
        read_nsiz(resources)


def test_parse_without_dict():
    with pytest.raises(ValueError):
        parse_nsiz("<plist></plist>")