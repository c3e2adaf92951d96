"""The "nsiz" resources: small property lists describing each partition."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from udifkit.b64 import encode_base64, decode_base64
from udifkit.resources import (
    PLIST_FOOTER,
    PLIST_HEADER,
    ResourceData,
    ResourceKey,
    _element,
    _scan_int,
    get_resource_by_key,
)

logger = logging.getLogger(__name__)


@dataclass
class NSizResource:
    is_volume: bool = False
    sha1_digest: bytes | None = None
    block_checksum2: int = 0
    byte_count: int = 0
    modify_date: int = 0
    partition_number: int = 0
    version: int = 0
    volume_signature: int = 0


def _int32(value: int) -> int:
    return ((value & 0xFFFFFFFF) ^ 0x80000000) - 0x80000000


def _integer_item(key: str, value: int) -> str:
    return f"\t<key>{key}</key>\n\t<integer>{_int32(value)}</integer>\n"


def nsiz_to_xml(nsiz: NSizResource) -> str:
    """Render one nsiz record as a property list."""
    parts = [PLIST_HEADER]
    if nsiz.sha1_digest is not None:
        encoded = encode_base64(nsiz.sha1_digest[:20], 1, 42)
        parts.append(f"\t<key>SHA-1-digest</key>\n\t<data>\n{encoded}\t</data>\n")
    parts.append(_integer_item("block-checksum-2", nsiz.block_checksum2))
    if nsiz.is_volume:
        parts.append(_integer_item("bytes", nsiz.byte_count))
        parts.append(_integer_item("date", nsiz.modify_date))
    parts.append(_integer_item("part-num", nsiz.partition_number))
    parts.append(_integer_item("version", nsiz.version))
    if nsiz.is_volume:
        parts.append(_integer_item("volume-signature", nsiz.volume_signature))
    parts.append(PLIST_FOOTER)
    return "".join(parts)


def _integer(xml: str, pos: int) -> tuple[int, int]:
    text, pos = _element(xml, pos, "integer")
    if text is None:
        return 0, pos
    return _scan_int(text) & 0xFFFFFFFF, pos


def parse_nsiz(xml: str | bytes) -> NSizResource:
    """Parse one nsiz property list."""
    if isinstance(xml, bytes):
        xml = xml.decode("utf-8", errors="replace")
    result = NSizResource()
    pos = xml.find("<dict>")
    if pos < 0:
        raise ValueError("nsiz property list has no dictionary")
    dict_end = xml.find("</dict>", pos)
    if dict_end < 0:
        raise ValueError("unterminated <dict> in nsiz property list")
    while True:
        key_start = xml.find("<key>", pos)
        if key_start < 0 or key_start >= dict_end:
            break
        key_start += len("<key>")
        key_end = xml.find("</key>", key_start)
        if key_end < 0:
            raise ValueError("unterminated <key> element")
        name = xml[key_start:key_end]
        pos = key_end + len("</key>")
        if name == "SHA-1-digest":
            text, pos = _element(xml, pos, "data")
            result.sha1_digest = decode_base64(text) if text is not None else None
        elif name == "block-checksum-2":
            result.block_checksum2, pos = _integer(xml, pos)
        elif name == "bytes":
            result.byte_count, pos = _integer(xml, pos)
        elif name == "date":
            result.modify_date, pos = _integer(xml, pos)
        elif name == "part-num":
            result.partition_number, pos = _integer(xml, pos)
        elif name == "version":
            result.version, pos = _integer(xml, pos)
        elif name == "volume-signature":
            result.volume_signature, pos = _integer(xml, pos)
            result.is_volume = True
    return result


def read_nsiz(resources: list[ResourceKey]) -> list[NSizResource]:
    """Parse every entry of the "nsiz" resource; raise KeyError if there is none."""
    resource = get_resource_by_key(resources, "nsiz")
    if resource is None:
        raise KeyError("nsiz")
    records = []
    for entry in resource.data:
        record = parse_nsiz(entry.data)
        logger.debug(
            "nsiz part-num=0x%x version=0x%x block-checksum-2=0x%x volume=%s",
            record.partition_number, record.version, record.block_checksum2, record.is_volume,
        )
        records.append(record)
    return records


def write_nsiz(nsiz_list: list[NSizResource]) -> ResourceKey:
    """Build the "nsiz" resource array for the given records."""
    return ResourceKey(
        "nsiz",
        [
            ResourceData(name="", attributes=0, id=record.partition_number,
                         data=nsiz_to_xml(record).encode("utf-8"))
            for record in nsiz_list
        ],
    )