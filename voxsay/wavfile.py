"""A mono 16-bit PCM wave file assembled from several independently written parts."""

from __future__ import annotations

import os
import stat
import struct
import sys
from dataclasses import dataclass
from typing import Optional

from .file import DataFile, FileMode, PathLike

DEFAULT_RATE = 11025
HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")
HEADER_SIZE = HEADER.size
_PCM = 1
_FMT_SIZE = 16
_MAX_DATA = 0xFFFFFFFF - (HEADER_SIZE - 8)


@dataclass
class WavHeader:
    """The RIFF/WAVE header of a PCM file."""

    sample_rate: int = DEFAULT_RATE
    num_channels: int = 1
    bits_per_sample: int = 16

    @property
    def block_align(self) -> int:
        return self.num_channels * (self.bits_per_sample // 8)

    @property
    def byte_rate(self) -> int:
        return self.sample_rate * self.block_align

    def pack(self, data_size: int) -> bytes:
        """Return the 44-byte header for ``data_size`` bytes of samples."""
        if not 0 <= data_size <= _MAX_DATA:
            raise ValueError(f"data size {data_size} out of range")
        return HEADER.pack(
            b"RIFF", data_size + HEADER_SIZE - 8, b"WAVE",
            b"fmt ", _FMT_SIZE, _PCM, self.num_channels, self.sample_rate,
            self.byte_rate, self.block_align, self.bits_per_sample,
            b"data", data_size,
        )

    @classmethod
    def unpack(cls, raw: bytes) -> tuple["WavHeader", int]:
        """Parse a header; return it with the size of the data chunk."""
        if len(raw) < HEADER_SIZE:
            raise ValueError("wave header too short")
        (riff, _, wave, fmt, fmt_size, audio_format, channels, rate,
         _, _, bits, data, data_size) = HEADER.unpack_from(raw)
        if (riff, wave, fmt, data) != (b"RIFF", b"WAVE", b"fmt ", b"data"):
            raise ValueError("not a wave header")
        if fmt_size != _FMT_SIZE or audio_format != _PCM:
            raise ValueError("not a PCM wave header")
        return cls(rate, channels, bits), data_size


def _stdout_output() -> DataFile:
    try:
        fileno = sys.stdout.fileno()
        mode = os.fstat(fileno).st_mode
    except (OSError, ValueError, AttributeError):
        raise ValueError("no usable standard output") from None
    if stat.S_ISREG(mode):
        return DataFile(os.path.realpath(f"/proc/self/fd/{fileno}"), FileMode.WRITABLE)
    if stat.S_ISFIFO(mode):
        return DataFile(None, FileMode.WRITABLE, True)
    raise ValueError("standard output is neither a file nor a pipe")


class WavFile:
    """Samples are written to temporary parts, then joined by :meth:`flush`.

    Without ``output`` the standard output is used, which must be redirected
    to a regular file or a pipe.
    """

    def __init__(self, output: Optional[PathLike] = None, number_of_parts: int = 1) -> None:
        if number_of_parts < 1:
            raise ValueError("at least one part is required")
        self.header = WavHeader()
        self.parts: list[DataFile] = []
        self.output: Optional[DataFile] = (
            DataFile(output, FileMode.WRITABLE) if output is not None else _stdout_output()
        )
        try:
            for _ in range(number_of_parts):
                self.parts.append(DataFile.temporary(FileMode.WRITABLE))
        except BaseException:
            self.close()
            raise

    def __enter__(self) -> "WavFile":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def number_of_parts(self) -> int:
        return len(self.parts)

    def write_data(self, part: int, data: bytes) -> None:
        """Append samples to one part."""
        if not 0 <= part < len(self.parts):
            raise IndexError(f"part {part} out of range")
        self.parts[part].write(data)

    def set_rate(self, rate: int) -> None:
        self.header.sample_rate = rate

    def flush(self) -> None:
        """Write the header and every part, in order, to the output."""
        if self.output is None:
            raise ValueError("wave file is closed")
        total = 0
        for part in self.parts:
            part.close()
            total += part.size()
        self.output.write(self.header.pack(total))
        for part in self.parts:
            self.output.cat(part)
        self.output.close()

    def close(self) -> None:
        """Release the output and remove the temporary parts."""
        if self.output is not None:
            self.output.delete()
            self.output = None
        for part in self.parts:
            part.delete()
        self.parts = []