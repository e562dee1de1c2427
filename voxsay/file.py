"""A file handle with access modes, byte counters and concatenation."""

from __future__ import annotations

import enum
import errno
import io
import os
import sys
import tempfile
from typing import BinaryIO, Optional, Union

MAX_CHAR = 10240
TEMP_PREFIX = "voxin-say."

PathLike = Union[str, "os.PathLike[str]"]


class FileMode(enum.IntFlag):
    READABLE = 1
    WRITABLE = 2
    APPEND = 4


class DataFile:
    """A named file, a temporary file, or the standard input/output.

    With no filename and ``fifo`` false a temporary file is created and
    removed again by :meth:`delete`.
    """

    def __init__(
        self,
        filename: Optional[PathLike] = None,
        mode: int = FileMode.READABLE,
        fifo: bool = False,
    ) -> None:
        self.filename: Optional[str] = None if filename is None else os.fspath(filename)
        self.mode = FileMode(mode)
        self.fifo = False
        self.unlink = False
        self.bytes_read = 0
        self.bytes_written = 0
        self._stream: Optional[BinaryIO] = None
        if filename is None:
            if fifo:
                self.fifo = True
            else:
                self._make_temporary()
        if self._stream is None:
            self.open(self.mode)

    @classmethod
    def temporary(cls, mode: int) -> "DataFile":
        """Create a temporary file that is removed on delete."""
        return cls(None, mode, False)

    def _make_temporary(self) -> None:
        fd, name = tempfile.mkstemp(prefix=TEMP_PREFIX)
        self.filename = name
        self.unlink = True
        self._stream = os.fdopen(fd, "r+b")

    def __enter__(self) -> "DataFile":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.delete()

    @property
    def stream(self) -> Optional[BinaryIO]:
        return self._stream

    @property
    def closed(self) -> bool:
        return self._stream is None

    def open(self, mode: int) -> None:
        """Open the file with ``mode``; raises OSError if it is already open."""
        if self.fifo:
            std = sys.stdin if self.mode & FileMode.READABLE else sys.stdout
            self._stream = getattr(std, "buffer", std)
            return
        if self._stream is not None:
            raise OSError(errno.EIO, "file is already open", self.filename)
        if self.filename is None:
            raise ValueError("file has no name")
        mode = FileMode(mode)
        if mode & FileMode.READABLE:
            how = "r+b" if mode & FileMode.WRITABLE else "rb"
        elif mode & FileMode.APPEND:
            how = "ab"
        else:
            how = "wb"
        self._stream = io.open(self.filename, how)
        self.mode = mode
        self.bytes_read = self.bytes_written = 0

    def close(self) -> None:
        if self._stream is None:
            return
        if self.fifo:
            self._stream.flush()
        else:
            self._stream.close()
        self._stream = None

    def delete(self) -> None:
        """Close the file and remove it if it is temporary."""
        self.close()
        if self.filename is not None and self.unlink:
            try:
                os.unlink(self.filename)
            except FileNotFoundError:
                pass
        self.filename = None

    def _require(self, flag: FileMode) -> BinaryIO:
        if self._stream is None or not self.mode & flag:
            raise ValueError(f"file is not open for {flag.name.lower()}")
        return self._stream

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes; fewer only at end of file."""
        stream = self._require(FileMode.READABLE)
        chunks = []
        remaining = size
        while remaining > 0:
            chunk = stream.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        data = b"".join(chunks)
        self.bytes_read += len(data)
        return data

    def write(self, data: bytes) -> None:
        stream = self._require(FileMode.WRITABLE)
        stream.write(data)
        self.bytes_written += len(data)

    def flush(self) -> None:
        self._require(FileMode.WRITABLE).flush()

    def cat(self, src: "DataFile") -> None:
        """Append the whole content of ``src`` to this file; ``src`` is closed after."""
        if src._stream is not None:
            src.close()
        src.open(FileMode.READABLE)
        try:
            assert src._stream is not None
            size = os.fstat(src._stream.fileno()).st_size
            append = FileMode.WRITABLE | FileMode.APPEND
            if self._stream is not None and not self.fifo and (self.mode & append) != append:
                self.close()
            if self._stream is None:
                self.open(append)
            while size:
                length = min(size, MAX_CHAR)
                size -= length
                self.write(src.read(length))
        finally:
            src.close()

    def size(self) -> int:
        """Return the size of the named file on disk."""
        if self.filename is None:
            raise ValueError("file has no name")
        return os.stat(self.filename).st_size