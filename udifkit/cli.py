"""Command line: extract, convert to a raw image, or convert to a UDIF image."""

from __future__ import annotations

import logging
import re
import sys

from udifkit.convert import convert_to_dmg
from udifkit.dmglib import convert_to_iso, extract_dmg

USAGE = "usage: {prog} [extract|build|iso|dmg] <in> <out> (-k <key>) (partition)"
_COMMANDS = ("extract", "iso", "dmg")
_INT_RE = re.compile(r"\s*([+-]?\d+)")


def _partition_number(text: str) -> int:
    match = _INT_RE.match(text)
    return int(match.group(1)) if match else -1


def main(argv: list[str] | None = None) -> int:
    """Run the command line tool; return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 3:
        print(USAGE.format(prog="udifkit"))
        return 0

    command, source, dest, *rest = args
    if len(rest) >= 2 and rest[0] == "-k":
        print("error: encrypted images are not supported", file=sys.stderr)
        return 1
    if command not in _COMMANDS:
        if command == "build":
            print("error: building from a volume is not supported", file=sys.stderr)
        else:
            print(f"error: unknown command: {command}", file=sys.stderr)
        return 1

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    try:
        inp = open(source, "rb")
    except OSError:
        print(f"cannot open source: {source}")
        return 1
    try:
        out = open(dest, "wb")
    except OSError:
        inp.close()
        print(f"cannot open destination: {dest}")
        return 1

    try:
        if command == "extract":
            part_num = _partition_number(rest[0]) if rest else -1
            extract_dmg(inp, out, part_num)
        elif command == "iso":
            convert_to_iso(inp, out)
        else:
            convert_to_dmg(inp, out)
    except (LookupError, ValueError, EOFError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        inp.close()
        out.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())