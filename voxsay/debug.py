"""Optional diagnostic log, switched on by a marker file in the home directory."""

from __future__ import annotations

import enum
import os
import threading
import time
from typing import BinaryIO, Optional, Union

ENABLE_LOG = "libvoxin.ok"
LOG_PATTERN = "/tmp/voxin-say1.log.{tid}"
MAX_POS = 1024 * 1024
MIN_POS = 10 * 1024
MAX_DUMP_SIZE = 1024
_ROW = 16


class DebugLevel(enum.IntEnum):
    ERROR = 0
    INFO = 1
    DEBUG = 2
    DEFAULT = 0


def get_tid() -> int:
    """Return the operating-system identifier of the calling thread."""
    return threading.get_native_id()


def hexdump_lines(data: bytes) -> list[str]:
    """Format ``data`` as rows of offset, hex bytes and printable characters."""
    data = bytes(data)
    lines = []
    for offset in range(0, len(data), _ROW):
        row = data[offset:offset + _ROW]
        hex_part = "".join(f"{byte:02x} " for byte in row)
        padding = "   " * (_ROW - len(row))
        text = "".join(chr(byte) if 0x20 <= byte < 0x7F else "." for byte in row)
        lines.append(f"{offset:08x}  {hex_part}{padding} {text}")
    return lines


def _create_private_file(path: str) -> Optional[BinaryIO]:
    """Create ``path`` readable by its owner only; None if that fails."""
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError:
        return None
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    except OSError:
        return None
    if os.fstat(fd).st_mode & 0o077:
        os.close(fd)
        return None
    return os.fdopen(fd, "wb", buffering=0)


class DebugLog:
    """A log file and a text capture file, opened on first use when enabled.

    Logging is enabled when the file ``libvoxin.ok`` exists in ``home``; its
    first character, a digit, selects the level (debug when absent).
    """

    def __init__(self, home: Optional[str] = None, log_path: Optional[str] = None) -> None:
        self._home = None if home is None else os.fspath(home)
        self._log_path = None if log_path is None else os.fspath(log_path)
        self._file: Optional[BinaryIO] = None
        self._text: Optional[BinaryIO] = None
        self._level = DebugLevel.ERROR
        self._checked = False
        self._text_count = 0

    @property
    def level(self) -> DebugLevel:
        return self._level

    def _init(self) -> None:
        if self._checked:
            return
        self._checked = True
        home = self._home if self._home is not None else os.environ.get("HOME")
        if not home:
            return
        try:
            with open(os.path.join(home, ENABLE_LOG), "rb") as marker:
                first = marker.read(1)
        except OSError:
            return
        level = DebugLevel.DEBUG
        if first:
            value = int(first) if first.isdigit() else 0
            if value <= DebugLevel.DEBUG:
                level = DebugLevel(value)
        self._level = level
        path = self._log_path or LOG_PATTERN.format(tid=get_tid())
        self._file = _create_private_file(path)
        if self._file is None:
            return
        self._text_count = 0
        self._text = _create_private_file(path + ".txt")

    def _ensure_file(self) -> Optional[BinaryIO]:
        if self._file is None:
            self._init()
        return self._file

    def enabled(self, level: int) -> bool:
        """Tell whether messages of ``level`` are written."""
        return self._ensure_file() is not None and level <= self._level

    def _stamp(self, stream: BinaryIO) -> None:
        if stream.tell() >= MAX_POS:
            stream.seek(MIN_POS)
            stream.write(b"\nBEGIN\n")
        now = time.time()
        seconds = int(now)
        micros = int((now - seconds) * 1_000_000)
        stream.write(f"{seconds % 1000:03d}.{micros:06d} ".encode())

    def log(self, level: int, message: str) -> None:
        if not self.enabled(level):
            return
        assert self._file is not None
        self._stamp(self._file)
        self._file.write(f"{message}\n".encode("utf-8", "replace"))

    def error(self, message: str) -> None:
        self.log(DebugLevel.ERROR, message)

    def info(self, message: str) -> None:
        self.log(DebugLevel.INFO, message)

    def debug(self, message: str) -> None:
        self.log(DebugLevel.DEBUG, message)

    def dump(self, label: str, data: bytes) -> None:
        """Write a hex dump of at most 1024 bytes of ``data`` under ``label``."""
        stream = self._ensure_file()
        if stream is None:
            return
        lines = hexdump_lines(bytes(data)[:MAX_DUMP_SIZE])
        stream.write(f"{label}\n".encode("utf-8", "replace"))
        stream.write(("\n".join(lines) + "\n").encode())

    def text_write(self, text: Union[str, bytes]) -> Optional[int]:
        """Append ``text`` to the text capture file.

        Returns the number of bytes captured so far, or None when no capture
        file is open.
        """
        if isinstance(text, str):
            text = text.encode("utf-8")
        if self._text is None:
            return None
        try:
            written = self._text.write(text) or 0
        except OSError as exc:
            if self._file is not None:
                self._file.write(f"text_write: {exc.strerror}\n".encode())
            return self._text_count
        if self._file is not None:
            self._file.write(
                f"text_write: text pos={self._text_count}, len={written}\n".encode()
            )
            self._text_count += written
        return self._text_count

    def finish(self) -> None:
        """Close both files; the next use checks the marker file again."""
        for stream in (self._file, self._text):
            if stream is not None:
                stream.close()
        self._file = None
        self._text = None
        self._text_count = 0
        self._checked = False


default_log = DebugLog()