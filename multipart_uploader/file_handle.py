"""Byte sources that can be planned into chunks and sliced lazily.

A file handle only exposes its total size and a non-mutating ``slice``
operation, so any number of chunk data accessors may share one handle.
"""

import os
from pathlib import Path
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class FileHandle(Protocol):
    """Read-only byte source borrowed by an upload session."""

    @property
    def size(self) -> int:
        """Total size of the source in bytes."""
        ...

    def slice(self, start: int, end: int) -> Any:
        """Return an accessor for the half-open byte range [start, end)."""
        ...


class BytesFileHandle:
    """File handle over an in-memory buffer."""

    def __init__(self, data: bytes, name: str | None = None) -> None:
        """Initialize the handle.

        Args:
            data: The buffer to upload.
            name: Optional display name passed through to transports.
        """
        self._data = data
        self.name = name

    @property
    def size(self) -> int:
        """Total size of the buffer in bytes."""
        return len(self._data)

    def slice(self, start: int, end: int) -> memoryview:
        """Return a zero-copy view over [start, end)."""
        return memoryview(self._data)[start:end]

    def __repr__(self) -> str:
        return f"BytesFileHandle(name={self.name!r}, size={self.size})"


class FileSlice:
    """Lazy byte range of a file on disk.

    Nothing is read until ``read`` is called, so holding many slices costs
    no more than holding their offsets.
    """

    def __init__(self, path: Path, start: int, end: int) -> None:
        self.path = path
        self.start = start
        self.end = end

    def __len__(self) -> int:
        return self.end - self.start

    def read(self) -> bytes:
        """Read the range from disk.

        Raises:
            OSError: If the file cannot be read.
        """
        with open(self.path, "rb") as f:
            f.seek(self.start)
            return f.read(self.end - self.start)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileSlice):
            return NotImplemented
        return (self.path, self.start, self.end) == (other.path, other.start, other.end)

    def __repr__(self) -> str:
        return f"FileSlice({str(self.path)!r}, {self.start}, {self.end})"


class LocalFileHandle:
    """File handle over a file on the local filesystem.

    The size is read once at construction; the file must not change while a
    session uses it.
    """

    def __init__(self, path: str | os.PathLike) -> None:
        """Initialize the handle.

        Args:
            path: Local filesystem path to the file.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        self.path = Path(path)
        if not self.path.is_file():
            raise FileNotFoundError(f"File not found: {self.path}")
        self._size = self.path.stat().st_size

    @property
    def name(self) -> str:
        """Base name of the file."""
        return self.path.name

    @property
    def size(self) -> int:
        """Total size of the file in bytes."""
        return self._size

    def slice(self, start: int, end: int) -> FileSlice:
        """Return a lazy accessor for [start, end), clipped to the file size."""
        return FileSlice(self.path, max(0, start), min(end, self._size))

    def __repr__(self) -> str:
        return f"LocalFileHandle({str(self.path)!r}, size={self._size})"
