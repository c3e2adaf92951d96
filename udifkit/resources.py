"""The resource-fork property list of a UDIF image."""

from __future__ import annotations

import plistlib
import re
from dataclasses import dataclass, field
from typing import Any

from udifkit.abstractfile import file_print
from udifkit.b64 import decode_base64, write_base64
from udifkit.udif import UDIFResourceFile

PLIST_HEADER = plistlib.PLISTHEADER.decode("ascii") + '<plist version="1.0">\n<dict>\n'
PLIST_FOOTER = "</dict>\n</plist>\n"

ATTRIBUTE_HDIUTIL = 0x0050

_INT_RE = re.compile(r"\s*([+-]?\d+)")
_HEX_RE = re.compile(r"\s*0x([0-9a-fA-F]+)")


@dataclass
class ResourceData:
    """One entry of a resource array; ``data`` holds the big-endian record bytes."""

    name: str = ""
    attributes: int = 0
    id: int = 0
    data: bytes = b""


@dataclass
class ResourceKey:
    """A named resource array."""

    key: str
    data: list[ResourceData] = field(default_factory=list)


def _scan_int(text: str) -> int:
    match = _INT_RE.match(text)
    return int(match.group(1)) if match else 0


def _scan_hex(text: str) -> int:
    match = _HEX_RE.match(text)
    return int(match.group(1), 16) if match else 0


def _element(xml: str, pos: int, tag: str) -> tuple[str | None, int]:
    """Find the next ``<tag>...</tag>`` from ``pos``; return its text and the position after it."""
    opening = f"<{tag}>"
    closing = f"</{tag}>"
    start = xml.find(opening, pos)
    if start < 0:
        return None, pos
    start += len(opening)
    end = xml.find(closing, start)
    if end < 0:
        raise ValueError(f"unterminated <{tag}> element")
    return xml[start:end], end + len(closing)


def _read_resource_data(xml: str, pos: int) -> tuple[ResourceData, int]:
    dict_end = xml.find("</dict>", pos)
    if dict_end < 0:
        raise ValueError("unterminated <dict> in resource array")
    entry = ResourceData()
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
        if name == "Attributes":
            text, pos = _element(xml, pos, "string")
            entry.attributes = _scan_hex(text or "")
        elif name == "Data":
            text, pos = _element(xml, pos, "data")
            entry.data = decode_base64(text) if text is not None else b""
        elif name == "ID":
            text, pos = _element(xml, pos, "string")
            entry.id = _scan_int(text or "")
        elif name == "Name":
            text, pos = _element(xml, pos, "string")
            entry.name = text or ""
    return entry, dict_end + len("</dict>")


def parse_resources(xml: str | bytes) -> list[ResourceKey]:
    """Parse the resource-fork dictionary of a property list."""
    if isinstance(xml, bytes):
        xml = xml.decode("utf-8", errors="replace")
    marker = "<key>resource-fork</key>"
    pos = xml.find(marker)
    if pos < 0:
        raise ValueError("property list has no resource-fork")
    pos = xml.find("<dict>", pos + len(marker))
    if pos < 0:
        raise ValueError("resource-fork is not a dictionary")
    pos += len("<dict>")

    resources: list[ResourceKey] = []
    while True:
        key_start = xml.find("<key>", pos)
        if key_start < 0:
            break
        key_start += len("<key>")
        key_end = xml.find("</key>", key_start)
        if key_end < 0:
            break
        resource = ResourceKey(xml[key_start:key_end])
        resources.append(resource)

        pos = xml.find("<array>", key_end + len("</key>"))
        if pos < 0:
            raise ValueError(f"resource {resource.key!r} has no array")
        pos += len("<array>")
        array_end = xml.find("</array>", pos)
        if array_end < 0:
            break

        pos = xml.find("<dict>", pos)
        while 0 <= pos < array_end:
            entry, pos = _read_resource_data(xml, pos)
            resource.data.append(entry)
            pos = xml.find("<dict>", pos)
        pos = array_end + len("</array>")
    return resources


def read_resources(file: Any, resource_file: UDIFResourceFile) -> list[ResourceKey]:
    """Read and parse the property list the trailer points at."""
    file.seek(resource_file.xml_offset)
    xml = file.read(resource_file.xml_length)
    if len(xml) != resource_file.xml_length:
        raise EOFError("fread")
    return parse_resources(xml)


def _write_resource_data(file: Any, entry: ResourceData, tab_length: int) -> None:
    tabs = "\t" * tab_length
    file_print(file, f"{tabs}<dict>\n")
    file_print(file, f"{tabs}\t<key>Attributes</key>\n{tabs}\t<string>0x{entry.attributes:04x}</string>\n")
    file_print(file, f"{tabs}\t<key>Data</key>\n{tabs}\t<data>\n")
    write_base64(file, entry.data, tab_length + 1, 43)
    file_print(file, f"{tabs}\t</data>\n")
    file_print(file, f"{tabs}\t<key>ID</key>\n{tabs}\t<string>{entry.id}</string>\n")
    file_print(file, f"{tabs}\t<key>Name</key>\n{tabs}\t<string>{entry.name}</string>\n")
    file_print(file, f"{tabs}</dict>\n")


def write_resources(file: Any, resources: list[ResourceKey]) -> None:
    """Write ``resources`` as a property list with a resource-fork dictionary."""
    file_print(file, PLIST_HEADER)
    file_print(file, "\t<key>resource-fork</key>\n\t<dict>\n")
    for resource in resources:
        file_print(file, f"\t\t<key>{resource.key}</key>\n\t\t<array>\n")
        for entry in resource.data:
            _write_resource_data(file, entry, 3)
        file_print(file, "\t\t</array>\n")
    file_print(file, "\t</dict>\n")
    file_print(file, PLIST_FOOTER)


def get_resource_by_key(resources: list[ResourceKey] | None, key: str) -> ResourceKey | None:
    """The resource array named ``key``, or None."""
    return next((resource for resource in resources or () if resource.key == key), None)


def get_data_by_id(resource: ResourceKey, id: int) -> ResourceData | None:
    """The entry of ``resource`` with the given id, or None."""
    return next((entry for entry in resource.data if entry.id == id), None)


def insert_data(
    resources: list[ResourceKey] | None,
    key: str,
    id: int,
    name: str,
    data: bytes,
    attributes: int,
) -> list[ResourceKey]:
    """Add an entry under ``key``, replacing one with the same id; return the list."""
    if resources is None:
        resources = []
    resource = get_resource_by_key(resources, key)
    if resource is None:
        resource = ResourceKey(key)
        resources.append(resource)
    entry = ResourceData(name=name, attributes=attributes, id=id, data=bytes(data))
    for index, existing in enumerate(resource.data):
        if existing.id == id:
            resource.data[index] = entry
            break
    else:
        resource.data.append(entry)
    return resources