"""Command line front end: read text, speak it and write a wave file."""

from __future__ import annotations

import errno
import os
import re
import sys
import threading
from dataclasses import dataclass
from getopt import GetoptError, gnu_getopt
from typing import Optional, Sequence

from .debug import default_log as _log
from .textfile import TextFile
from .tts import SPEED_UNDEFINED, Backend, Tts
from .wavfile import WavFile

VERSION = "0.0.1"
MAX_JOBS = 32
MAX_SPEED_UNITS = 250
_SHORT_OPTIONS = "df:hj:l:Ls:S:w:"
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

# A debugger can set this event to leave the wait requested by -d.
debug_release = threading.Event()

_USAGE = """\
Usage: voxin-say [OPTION]... [text]

voxin-say (version {version})
Converts text to speech written to the standard output or the
supplied file.

EXAMPLES :

# Say 'hello world' and redirect output to an external audio player:
voxin-say "hello world" | aplay
# Read file.txt and save speech to an audio file:
voxin-say -f file.txt -w file.wav
voxin-say -f file.txt > file.wav
# The following command is incorrect because no output is supplied:
voxin-say "Hello all"
# Correct command to read a file in French at 500 words per minute,
  use 4 jobs to speed
  up conversion
voxin-say -f file.txt -l fr -s 500 -j 4 -w audio.wav


OPTIONS :
  -f FILE   supply the UTF-8 text file to read.
  -j NUM    number of jobs, help to share the workload on several
            processes to speedup conversion.
  -l NAME   select voice/language.
  -L        list installed voices/languages.
  -s NUM    speed in words per minute (from 0 to 1297).
  -S NUM    speed in units (from 0 to 250).
  -w FILE   supply the output wavfile.
  -d        for debug, wait in an infinite loop.
"""


class UsageError(ValueError):
    """Raised for an unknown option or a missing option argument."""


@dataclass
class Options:
    """Settings taken from the command line."""

    debug: bool = False
    help: bool = False
    inputfile: Optional[str] = None
    outputfile: Optional[str] = None
    jobs: int = 1
    voice_name: Optional[str] = None
    speed: int = SPEED_UNDEFINED
    list: bool = False
    sentence: Optional[str] = None


def _atoi(text: str) -> int:
    """Leading integer of ``text``, 0 when there is none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def speed_units(value: int) -> int:
    """Clamp a speed to the engine range 0..250."""
    return max(0, min(MAX_SPEED_UNITS, value))


def words_per_minute_to_units(wpm: int) -> int:
    """Convert words per minute to engine speed units."""
    scaled = wpm * 2 - 140
    # Truncate toward zero; negative values are clamped to 0 anyway.
    units = abs(scaled) // 10
    return speed_units(units if scaled >= 0 else -units)


def parse_args(argv: Sequence[str]) -> Options:
    """Parse command line arguments (without the program name)."""
    try:
        pairs, rest = gnu_getopt(list(argv), _SHORT_OPTIONS)
    except GetoptError as exc:
        raise UsageError(str(exc)) from None
    options = Options()
    for flag, value in pairs:
        if flag == "-w":
            options.outputfile = value
        elif flag == "-f":
            options.inputfile = value
        elif flag == "-j":
            options.jobs = _atoi(value)
        elif flag == "-h":
            options.help = True
        elif flag == "-l":
            options.voice_name = value
        elif flag == "-L":
            options.list = True
        elif flag == "-S":
            options.speed = speed_units(_atoi(value))
        elif flag == "-s":
            options.speed = words_per_minute_to_units(_atoi(value))
        elif flag == "-d":
            options.debug = True
    options.sentence = rest[0] if len(rest) == 1 else None
    return options


def usage() -> str:
    """Write the help text to the standard error and return it."""
    text = _USAGE.format(version=VERSION)
    sys.stderr.write(text)
    return text


class Speaker:
    """Reads the text in parts and speaks each part into its wave file part."""

    def __init__(
        self,
        backend: Backend,
        inputfile: Optional[str] = None,
        outputfile: Optional[str] = None,
        jobs: int = 1,
        voice_name: Optional[str] = None,
        speed: int = SPEED_UNDEFINED,
        sentence: Optional[str] = None,
    ) -> None:
        self.backend = backend
        self.voice_name = voice_name
        self.speed = speed
        self.tts: Optional[Tts] = None
        self.text = TextFile(inputfile, jobs, sentence)
        self.jobs = self.text.number_of_parts
        try:
            self.wav: Optional[WavFile] = WavFile(outputfile, self.jobs)
        except (OSError, ValueError) as exc:
            # Not fatal: listing voices needs no output.
            _log.info(f"no wave output: {exc}")
            self.wav = None

    def __enter__(self) -> "Speaker":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _new_tts(self) -> Tts:
        return Tts(self.backend, self.voice_name, self.speed)

    def say_part(self, job: int) -> None:
        """Speak every sentence of part ``job`` into the matching wave part."""
        if self.wav is None:
            raise ValueError("no wave output")
        if not 0 <= job < self.jobs:
            raise IndexError(f"job {job} out of range")
        owned = job != 0
        if owned:
            tts = self._new_tts()
        else:
            if self.tts is None:
                self.tts = self._new_tts()
            tts = self.tts
        try:
            tts.set_output(self.wav, job)
            for sentence in self.text.iter_sentences(job):
                tts.say(sentence)
        finally:
            if owned:
                tts.close()

    def say(self) -> None:
        """Speak the whole text and write the wave file."""
        if not 1 <= self.jobs <= MAX_JOBS or self.wav is None:
            raise ValueError("nothing to speak to")
        for job in range(self.jobs):
            _log.info(f"job={job}")
            self.say_part(job)
        assert self.tts is not None
        self.wav.set_rate(self.tts.rate())
        self.wav.flush()

    def close(self) -> None:
        self.text.close()
        if self.tts is not None:
            self.tts.close()
            self.tts = None
        if self.wav is not None:
            self.wav.close()
            self.wav = None


def _report(message: str) -> int:
    _log.error(message)
    sys.stderr.write(f"Error: {message}\n")
    return 1


def _debug_wait() -> None:
    while not debug_release.wait(5):
        sys.stderr.write("infinite loop for debug...\n")


def main(argv: Optional[Sequence[str]] = None, backend: Optional[Backend] = None) -> int:
    """Run the command; returns 0 on success and 1 on error."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        options = parse_args(args)
    except UsageError as exc:
        _log.error(str(exc))
        return _report(os.strerror(errno.EINVAL))

    if options.debug:
        _debug_wait()

    if options.help:
        usage()
        return 0

    if not 1 <= options.jobs <= MAX_JOBS:
        _log.error(f"jobs={options.jobs} (limit=1..{MAX_JOBS})")
        return _report(os.strerror(errno.EINVAL))

    if backend is None:
        backend = Backend()

    try:
        speaker = Speaker(
            backend,
            options.inputfile,
            options.outputfile,
            options.jobs,
            options.voice_name,
            options.speed,
            options.sentence,
        )
    except (OSError, ValueError) as exc:
        _log.error(str(exc))
        usage()
        return 1

    with speaker:
        if options.list:
            if speaker.tts is None:
                speaker.tts = Tts(backend, options.voice_name, options.speed)
            speaker.tts.print_list(sys.stdout)
            return 0
        try:
            speaker.say()
        except (OSError, ValueError, RuntimeError, IndexError) as exc:
            return _report(str(exc))
    return 0