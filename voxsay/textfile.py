"""Text input split into parts, read back a few whole sentences at a time."""

from __future__ import annotations

import os
import re
import stat
import sys
from dataclasses import dataclass, field
from typing import Iterator, Optional

from .debug import default_log as _log
from .file import DataFile, FileMode, PathLike

MAX_CHAR = 10240
MIN_PART_SIZE = 256
DEFAULT_SENTENCE = "Hello World!"

_SENTENCE_END = re.compile(rb"\.\s")
_WORD_END = re.compile(rb"\S\s")


def _last_cut(pattern: "re.Pattern[bytes]", buffer: bytes) -> Optional[int]:
    """Offset just after the first byte of the last match starting at 1 or later."""
    cut = None
    for match in pattern.finditer(buffer, 1):
        cut = match.start() + 1
    return cut


def search_last_sentence(buffer: bytes) -> int:
    """Return how many leading bytes of ``buffer`` hold whole sentences.

    The cut falls after the last period followed by white space; failing
    that, after the last word followed by white space; failing that, the
    whole buffer is kept.
    """
    buffer = bytes(buffer)
    if len(buffer) <= 2:
        return len(buffer)
    cut = _last_cut(_SENTENCE_END, buffer)
    if cut is None:
        cut = _last_cut(_WORD_END, buffer)
    return len(buffer) if cut is None else cut


@dataclass
class Region:
    """A byte range [begin, end) of the input still to be read."""

    begin: int = 0
    end: int = 0


@dataclass
class _Input:
    file: DataFile
    region: Region = field(default_factory=Region)


def _read_sentences(item: _Input, region: Region) -> bytes:
    if region.end <= region.begin:
        return b""
    size = min(region.end - region.begin, MAX_CHAR)
    stream = item.file.stream
    if stream is None:
        raise ValueError("input is closed")
    stream.seek(region.begin)
    data = item.file.read(size)
    return data[:search_last_sentence(data)]


class TextFile:
    """Text from a file, a sentence or the standard input, split into parts.

    Each part ends on a whole sentence, so the parts can be spoken
    independently. Inputs shorter than 256 bytes are never split.
    """

    def __init__(
        self,
        inputfile: Optional[PathLike] = None,
        number_of_parts: int = 1,
        sentence: Optional[str] = None,
    ) -> None:
        if number_of_parts < 1:
            raise ValueError("at least one part is required")
        self._inputs: list[_Input] = []
        first = self._open_first(inputfile, sentence)
        self._inputs.append(_Input(first))
        try:
            region = self._inputs[0].region
            if not first.fifo:
                assert first.stream is not None
                region.end = os.fstat(first.stream.fileno()).st_size
            if region.end >= MIN_PART_SIZE and number_of_parts > 1:
                self._split(number_of_parts)
        except BaseException:
            self.close()
            raise

    def __enter__(self) -> "TextFile":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def number_of_parts(self) -> int:
        return len(self._inputs)

    @property
    def filename(self) -> Optional[str]:
        """Name of the file holding the whole input, if any."""
        return self._inputs[0].file.filename if self._inputs else None

    @staticmethod
    def _from_sentence(sentence: str) -> DataFile:
        if not sentence:
            raise ValueError("empty sentence")
        data = DataFile.temporary(FileMode.READABLE | FileMode.WRITABLE)
        try:
            data.write(sentence.encode("utf-8"))
            data.flush()
        except BaseException:
            data.delete()
            raise
        return data

    def _open_first(self, inputfile: Optional[PathLike], sentence: Optional[str]) -> DataFile:
        if inputfile is not None:
            return DataFile(inputfile, FileMode.READABLE)
        if sentence is not None:
            return self._from_sentence(sentence)
        try:
            fileno = sys.stdin.fileno()
            mode = os.fstat(fileno).st_mode
        except (OSError, ValueError, AttributeError):
            raise ValueError("no usable standard input") from None
        if stat.S_ISREG(mode):
            return DataFile(os.path.realpath(f"/proc/self/fd/{fileno}"), FileMode.READABLE)
        if stat.S_ISFIFO(mode):
            return DataFile(None, FileMode.READABLE, True)
        return self._from_sentence(DEFAULT_SENTENCE)

    def _split(self, number_of_parts: int) -> None:
        first = self._inputs[0]
        for _ in range(1, number_of_parts):
            self._inputs.append(_Input(DataFile(first.file.filename, FileMode.READABLE)))
        total = first.region.end
        part_len = total // number_of_parts
        end = 0
        last = number_of_parts - 1
        for index, item in enumerate(self._inputs):
            begin = end
            if index == last:
                item.region = Region(begin, total)
            else:
                item.region = Region(begin, begin + part_len)
                self._adjust(item)
                end = item.region.end + 1
            _log.info(f"part {index}: from={item.region.begin} to={item.region.end}")

    @staticmethod
    def _adjust(item: _Input) -> None:
        """Shrink the region so that its last sentence is not cut."""
        region = item.region
        span = region.end - region.begin
        if span < 0:
            raise ValueError("negative region")
        window = min(span, MAX_CHAR)
        start = region.end - window
        chunk = _read_sentences(item, Region(start, region.end))
        item.region = Region(region.begin, start + len(chunk))

    def _input(self, part: int) -> _Input:
        if not 0 <= part < len(self._inputs):
            raise IndexError(f"part {part} out of range")
        return self._inputs[part]

    def next_sentences(self, part: int) -> Optional[str]:
        """Return the next whole sentences of ``part``, or None when it is exhausted."""
        item = self._input(part)
        chunk = _read_sentences(item, item.region)
        if not chunk:
            return None
        item.region.begin += len(chunk) + 1
        _log.info(f"new region, part {part}: from={item.region.begin} to={item.region.end}")
        return chunk.decode("utf-8", "replace")

    def iter_sentences(self, part: int) -> Iterator[str]:
        """Yield the sentences of ``part`` until it is exhausted."""
        while (text := self.next_sentences(part)) is not None:
            yield text

    def close(self) -> None:
        """Close every part and remove a temporary input file."""
        for item in self._inputs:
            item.file.delete()
        self._inputs = []