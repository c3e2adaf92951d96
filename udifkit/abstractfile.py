"""Seekable byte stores used as sources and sinks for disk-image data."""

from __future__ import annotations

import os
from typing import Any


class MemoryFile:
    """A growable in-memory file with a single read/write position."""

    def __init__(self, data: bytes = b"") -> None:
        self._buffer = bytearray(data)
        self._offset = 0
        self.closed = False

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes, fewer if the end of the buffer is reached."""
        if size < 0:
            raise ValueError("size must not be negative")
        chunk = bytes(self._buffer[self._offset:self._offset + size])
        self._offset += len(chunk)
        return chunk

    def write(self, data: bytes) -> int:
        """Write ``data`` at the current position, growing the buffer as needed."""
        end = self._offset + len(data)
        if self._offset > len(self._buffer):
            self._buffer.extend(bytes(self._offset - len(self._buffer)))
        self._buffer[self._offset:end] = data
        self._offset = end
        return len(data)

    def seek(self, offset: int) -> int:
        if offset < 0:
            raise ValueError("offset must not be negative")
        self._offset = offset
        return offset

    def tell(self) -> int:
        return self._offset

    def length(self) -> int:
        return len(self._buffer)

    def getvalue(self) -> bytes:
        return bytes(self._buffer)

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> MemoryFile:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class NullFile:
    """A sink that discards what is written and only tracks the position."""

    def __init__(self) -> None:
        self._offset = 0
        self.closed = False

    def read(self, size: int) -> bytes:
        return b""

    def write(self, data: bytes) -> int:
        self._offset += len(data)
        return len(data)

    def seek(self, offset: int) -> int:
        self._offset = offset
        return offset

    def tell(self) -> int:
        return self._offset

    def close(self) -> None:
        self.closed = True


class PositionalIO:
    """Reads and writes at absolute locations of an underlying file."""

    def __init__(self, file: Any) -> None:
        self.file = file

    def read_at(self, location: int, size: int) -> bytes:
        """Read exactly ``size`` bytes at ``location``; raise EOFError if short."""
        self.file.seek(location)
        data = self.file.read(size)
        if len(data) != size:
            raise EOFError(f"short read at {location}: wanted {size}, got {len(data)}")
        return data

    def write_at(self, location: int, data: bytes) -> None:
        """Write all of ``data`` at ``location``; raise OSError if short."""
        self.file.seek(location)
        written = self.file.write(data)
        if written is not None and written != len(data):
            raise OSError(f"short write at {location}: wanted {len(data)}, wrote {written}")

    def close(self) -> None:
        self.file.close()

    def __enter__(self) -> PositionalIO:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def get_length(file: Any) -> int:
    """Return the total length of ``file`` without moving its position."""
    if hasattr(file, "length"):
        return file.length()
    position = file.tell()
    file.seek(0, os.SEEK_END)
    end = file.tell()
    file.seek(position)
    return end


def file_print(file: Any, text: str) -> None:
    """Write ``text`` to ``file`` as UTF-8; raise OSError on a short write."""
    data = text.encode("utf-8")
    written = file.write(data)
    if written is not None and written != len(data):
        raise OSError("fwrite")