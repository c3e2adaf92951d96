"""Fixed resources that every written image carries: "plst" and "size"."""

from __future__ import annotations

from udifkit.blkx import SizeResource
from udifkit.resources import ATTRIBUTE_HDIUTIL, ResourceKey, insert_data

PLST_SIZE = 1032
_PLST_FLAGS_OFFSET = 0x210


def _plst_data() -> bytes:
    data = bytearray(PLST_SIZE)
    data[_PLST_FLAGS_OFFSET:_PLST_FLAGS_OFFSET + 4] = b"\x00\x01\x00\x01"
    return bytes(data)


PLST_DATA = _plst_data()


def make_plst() -> list[ResourceKey]:
    """A resource list holding the single standard "plst" entry."""
    return insert_data(None, "plst", 0, "", PLST_DATA, ATTRIBUTE_HDIUTIL)


def make_size(modify_date: int, signature: int) -> list[ResourceKey]:
    """A resource list holding a "size" entry for a volume with these properties."""
    size = SizeResource(
        version=5,
        is_hfs=1,
        unknown2=0,
        unknown3=0,
        volume_modified=modify_date,
        unknown4=0,
        volume_signature=signature,
        size_present=1,
    )
    return insert_data(None, "size", 0, "", size.to_bytes(), 0)