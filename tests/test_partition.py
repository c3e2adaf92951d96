import pytest

from udifkit.partition import (
    APPLE_PARTITION_MAP_SIGNATURE,
    ATAPI_OFFSET,
    BOOTCODE_DMMY,
    BOOTCODE_GOON,
    DRIVER_DESCRIPTOR_SIGNATURE,
    EXTRA_SIZE,
    FREE_SIZE,
    USER_OFFSET,
    DriverDescriptor,
    DriverDescriptorRecord,
    Partition,
    create_apple_partition_map,
    create_driver_descriptor_map,
    parse_partition_map,
    partition_map_to_bytes,
)


def test_ddm_wire_start_and_length():
    raw = create_driver_descriptor_map(100).to_bytes()
    assert len(raw) == 512
    assert raw[:4] == b"ER\x02\x00"


def test_create_driver_descriptor_map_fields():
    ddm = create_driver_descriptor_map(100)
    assert ddm.sig == DRIVER_DESCRIPTOR_SIGNATURE
    assert ddm.blk_count == 100 + EXTRA_SIZE
    assert ddm.drvr_count == 1
    assert ddm.dd_block == ATAPI_OFFSET
    assert ddm.dd_size == 0x4
    assert ddm.dd_type == 0x701


def test_ddm_round_trip_with_extra_drivers():
    ddm = create_driver_descriptor_map(50)
    ddm.drvr_count = 3
    ddm.drivers = [DriverDescriptor(10, 2, 7), DriverDescriptor(20, 4, 9)]
    assert DriverDescriptorRecord.from_bytes(ddm.to_bytes()) == ddm


def test_ddm_without_signature_skips_drivers():
    ddm = DriverDescriptorRecord(sig=0, drvr_count=3,
                                 drivers=[DriverDescriptor(1, 1, 1), DriverDescriptor(2, 2, 2)])
    parsed = DriverDescriptorRecord.from_bytes(ddm.to_bytes())
    assert parsed.drivers == []
    assert parsed.sig == 0


def test_ddm_too_short_raises():
    with pytest.raises(ValueError):
        DriverDescriptorRecord.from_bytes(b"ER")


def test_partition_round_trip():
    part = Partition(map_blk_cnt=4, py_part_start=9, part_blk_cnt=17, part_name="Name",
                     par_type="Apple_HFS", part_status=0x33, processor="cpu", boot_code=5)
    raw = part.to_bytes()
    assert len(raw) == 512
    assert raw[:2] == b"PM"
    assert Partition.from_bytes(raw) == part


def test_partition_name_too_long_raises():
    with pytest.raises(ValueError):
        Partition(part_name="x" * 33).to_bytes()


def test_create_apple_partition_map():
    parts = create_apple_partition_map(1000, "Apple_HFSX")
    assert [p.par_type for p in parts] == [
        "Apple_partition_map", "Apple_Driver_ATAPI", "Apple_HFSX", "Apple_Free",
    ]
    assert [p.part_name for p in parts] == ["Apple", "Macintosh", "Mac_OS_X", ""]
    assert all(p.sig == APPLE_PARTITION_MAP_SIGNATURE and p.map_blk_cnt == 4 for p in parts)
    assert parts[1].boot_code == BOOTCODE_DMMY
    assert parts[2].boot_code == BOOTCODE_GOON
    assert parts[2].py_part_start == USER_OFFSET
    assert parts[2].part_blk_cnt == 1000
    assert parts[3].py_part_start == USER_OFFSET + 1000
    assert parts[3].part_blk_cnt == FREE_SIZE


@pytest.mark.parametrize("block_size", [512, 2048])
def test_partition_map_round_trip(block_size):
    parts = create_apple_partition_map(64, "Apple_HFS")
    raw = partition_map_to_bytes(parts, block_size)
    assert len(raw) == len(parts) * block_size
    assert parse_partition_map(raw, block_size) == parts


def test_parse_stops_at_bad_signature():
    parts = create_apple_partition_map(64, "Apple_HFS")
    parts[2].sig = 0
    parsed = parse_partition_map(partition_map_to_bytes(parts, 512), 512)
    assert parsed == parts[:2]


def test_parse_stops_at_end_of_data():
    parts = create_apple_partition_map(64, "Apple_HFS")
    raw = partition_map_to_bytes(parts[:2], 512)
    assert parse_partition_map(raw, 512) == parts[:2]


def test_parse_empty_data():
    assert parse_partition_map(b"", 512) == []