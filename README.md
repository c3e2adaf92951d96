# udifkit

Tools for working with UDIF disk images, the compressed `.dmg` format.
udifkit can extract one partition from an image, flatten a whole image into
a raw disk file, and compress a raw disk image (with or without an Apple
partition map) into a zlib-compressed UDIF image. It has no dependencies
beyond the Python standard library.

## Installation

```
pip install .
```

## Command line

```
udifkit extract <in.dmg> <out.img> [partition]
udifkit iso <in.dmg> <out.iso>
udifkit dmg <in.img> <out.dmg>
```

- `extract` writes the data of a single block table. The optional partition
  argument is the table's ID; without it, the first block table whose name
  contains `Apple_HFS` is chosen.
- `iso` writes every block table at its sector position, giving a flat image
  of the whole disk.
- `dmg` compresses a raw image. If the input starts with a driver descriptor
  map, its map is written first and each partition of its Apple partition map
  becomes its own block table; otherwise the whole input becomes one block
  table. Runs of up to 0x200 sectors are zlib-compressed, or stored raw when
  compression would not save space.

Run without enough arguments, the tool prints a usage line. Progress messages
go to standard error through the `logging` module. The exit status is 0 on
success and 1 on an error (a file that cannot be opened, a missing block
table, a truncated or malformed image).

### What it does not do

- The `build` command, which would create an image from a filesystem volume,
  is not available; it is rejected with an error.
- Encrypted images (the `-k <key>` option) are not supported and are
  rejected with an error.
- It does not read or change the files inside a volume; it works on block
  tables and partitions only.
- Images are always written with zlib runs; ADC runs can be read but not
  written.

## Library use

The same operations are available from Python. Each of them closes both
files when it finishes.

```python
from udifkit.dmglib import extract_dmg, convert_to_iso
from udifkit.convert import convert_to_dmg

with open("disk.dmg", "rb") as inp, open("disk.iso", "wb") as out:
    convert_to_iso(inp, out)

with open("disk.img", "rb") as inp, open("disk.dmg", "wb") as out:
    trailer = convert_to_dmg(inp, out)   # returns the UDIFResourceFile written
```

`extract_dmg(inp, out, part_num=-1)` raises `LookupError` when no matching
block table exists.

Lower-level pieces live in their own modules:

- `udifkit.udif` – the `koly` trailer (`UDIFResourceFile`, `UDIFChecksum`, `UDIFID`)
- `udifkit.resources` – the XML resource fork (`parse_resources`, `read_resources`,
  `write_resources`, `insert_data`, `get_resource_by_key`, `get_data_by_id`)
- `udifkit.nsiz` – the per-partition `nsiz` property lists (`NSizResource`,
  `read_nsiz`, `write_nsiz`, `parse_nsiz`, `nsiz_to_xml`)
- `udifkit.blkx` – block tables and small records (`BLKXTable`, `BLKXRun`,
  `BlockType`, `CSumResource`, `SizeResource`)
- `udifkit.blkxio` – writing and reading block runs (`insert_blkx`, `extract_blkx`)
- `udifkit.adc` – the ADC decompressor (`adc_decompress`)
- `udifkit.b64` – base64 as laid out in property-list data elements
- `udifkit.checksum` – CRC-32, the block checksum and SHA-1 (`ChecksumToken`,
  `crc32_checksum`, `mk_block_checksum`)
- `udifkit.partition` – driver descriptor records and Apple partition maps
  (`DriverDescriptorRecord`, `Partition`, `parse_partition_map`,
  `create_driver_descriptor_map`, `create_apple_partition_map`)
- `udifkit.partmaps`, `udifkit.atapi` – writing the driver descriptor map,
  partition map, ATAPI driver and free partitions into an image
- `udifkit.partinfo` – reading those maps back and listing their fields
- `udifkit.defaults` – the standard `plst` and `size` resources
- `udifkit.koly` – writing the property list and trailer (`finish_image`, `build_trailer`)
- `udifkit.dmglib` – `extract_dmg`, `convert_to_iso`, `calculate_master_checksum`
- `udifkit.abstractfile` – in-memory and null files (`MemoryFile`, `NullFile`,
  `PositionalIO`)

## Running the tests

```
pip install .[test]
pytest
```