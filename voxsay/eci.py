"""Speech engine interface: parameters, messages, errors and an engine model."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional, Sequence

PRESET_VOICES = 8
USER_DEFINED_VOICES = 8
VOICE_NAME_LENGTH = 30
PHONEME_LENGTH = 4
NUM_PARAMS = 17
NUM_VOICE_PARAMS = 8

# Voice 0 is the active voice, followed by the preset and user-defined slots.
_VOICE_SLOTS = range(PRESET_VOICES + USER_DEFINED_VOICES + 1)


class ECIError(enum.IntFlag):
    """Error and status bits reported by the engine."""

    NOERROR = 0x00000000
    SYSTEMERROR = 0x00000001
    MEMORYERROR = 0x00000002
    MODULELOADERROR = 0x00000004
    DELTAERROR = 0x00000008
    SYNTHERROR = 0x00000010
    DEVICEERROR = 0x00000020
    DICTERROR = 0x00000040
    PARAMETERERROR = 0x00000080
    SYNTHESIZINGERROR = 0x00000100
    DEVICEBUSY = 0x00000200
    SYNTHESISPAUSED = 0x00000400
    REENTRANTCALL = 0x00000800
    ROMANIZERERROR = 0x00001000
    SYNTHESIZING = 0x00002000


class ECIParam(enum.IntEnum):
    """Engine-wide parameters."""

    SYNTH_MODE = 0
    INPUT_TYPE = 1
    TEXT_MODE = 2
    DICTIONARY = 3
    SAMPLE_RATE = 5
    WANT_PHONEME_INDICES = 7
    REAL_WORLD_UNITS = 8
    LANGUAGE_DIALECT = 9
    NUMBER_MODE = 10
    WANT_WORD_INDEX = 12
    NUM_DEVICE_BLOCKS = 13
    SIZE_DEVICE_BLOCKS = 14
    NUM_PREROLL_DEVICE_BLOCKS = 15
    SIZE_PREROLL_DEVICE_BLOCKS = 16


class ECIVoiceParam(enum.IntEnum):
    """Per-voice parameters."""

    GENDER = 0
    HEAD_SIZE = 1
    PITCH_BASELINE = 2
    PITCH_FLUCTUATION = 3
    ROUGHNESS = 4
    BREATHINESS = 5
    SPEED = 6
    VOLUME = 7


class ECIDictError(enum.IntEnum):
    NO_ERROR = 0
    FILE_NOT_FOUND = 1
    OUT_OF_MEMORY = 2
    INTERNAL_ERROR = 3
    NO_ENTRY = 4
    ERR_LOOKUP_KEY = 5
    ACCESS_ERROR = 6
    INVALID_VOLUME = 7


class ECIVoiceError(enum.IntEnum):
    NO_ERROR = 0
    SYSTEM_ERROR = 1
    NOT_REGISTERED_ERROR = 2
    INVALID_FILE_FORMAT_ERROR = 3


class ECIDictVolume(enum.IntEnum):
    MAIN_DICT = 0
    ROOT_DICT = 1
    ABBV_DICT = 2
    MAIN_DICT_EXT = 3


class LanguageDialect(enum.IntEnum):
    """Language identifiers known to the engine."""

    NO_DEFINED_CODESET = 0x00000000
    GENERAL_AMERICAN_ENGLISH = 0x00010000
    BRITISH_ENGLISH = 0x00010001
    CASTILIAN_SPANISH = 0x00020000
    MEXICAN_SPANISH = 0x00020001
    STANDARD_FRENCH = 0x00030000
    CANADIAN_FRENCH = 0x00030001
    STANDARD_GERMAN = 0x00040000
    STANDARD_ITALIAN = 0x00050000
    MANDARIN_CHINESE = 0x00060000
    MANDARIN_CHINESE_GB = 0x00060000
    MANDARIN_CHINESE_PINYIN = 0x00060100
    MANDARIN_CHINESE_UCS = 0x00060800
    TAIWANESE_MANDARIN = 0x00060001
    TAIWANESE_MANDARIN_BIG5 = 0x00060001
    TAIWANESE_MANDARIN_ZHUYIN = 0x00060101
    TAIWANESE_MANDARIN_PINYIN = 0x00060201
    TAIWANESE_MANDARIN_UCS = 0x00060801
    BRAZILIAN_PORTUGUESE = 0x00070000
    STANDARD_JAPANESE = 0x00080000
    STANDARD_JAPANESE_SJIS = 0x00080000
    STANDARD_JAPANESE_UCS = 0x00080800
    STANDARD_FINNISH = 0x00090000
    STANDARD_KOREAN = 0x000A0000
    STANDARD_KOREAN_UHC = 0x000A0000
    STANDARD_KOREAN_UCS = 0x000A0800
    STANDARD_CANTONESE = 0x000B0000
    STANDARD_CANTONESE_GB = 0x000B0000
    STANDARD_CANTONESE_UCS = 0x000B0800
    HONG_KONG_CANTONESE = 0x000B0001
    HONG_KONG_CANTONESE_BIG5 = 0x000B0001
    HONG_KONG_CANTONESE_UCS = 0x000B0801
    STANDARD_DUTCH = 0x000C0000
    STANDARD_NORWEGIAN = 0x000D0000
    STANDARD_SWEDISH = 0x000E0000
    STANDARD_DANISH = 0x000F0000
    STANDARD_RESERVED = 0x00100000
    STANDARD_THAI = 0x00110000
    STANDARD_THAI_TIS = 0x00110000


class PartOfSpeech(enum.IntEnum):
    UNDEFINED = 0
    FUTSUU_MEISHI = 1
    KOYUU_MEISHI = 2
    SAHEN_MEISHI = 3
    MING_CI = 4


class ECIMessage(enum.IntEnum):
    """Kinds of message delivered to a registered callback."""

    WAVEFORM_BUFFER = 0
    PHONEME_BUFFER = 1
    INDEX_REPLY = 2
    PHONEME_INDEX_REPLY = 3
    WORD_INDEX_REPLY = 4
    STRING_INDEX_REPLY = 5
    AUDIO_INDEX_REPLY = 6
    SYNTHESIS_BREAK = 7


class CallbackReturn(enum.IntEnum):
    DATA_NOT_PROCESSED = 0
    DATA_PROCESSED = 1
    DATA_ABORT = 2


class FilterError(enum.IntEnum):
    NO_ERROR = 0
    FILE_NOT_FOUND = 1
    OUT_OF_MEMORY = 2
    INTERNAL_ERROR = 3
    ACCESS_ERROR = 4


@dataclass
class VoiceAttrib:
    """Attributes of a registered voice."""

    sample_rate: int
    language: int


Callback = Callable[[ECIMessage, int, Optional[bytes]], CallbackReturn]
Synthesizer = Callable[[str, "Engine"], Iterable[int]]


def error_names(flags: int) -> tuple[str, ...]:
    """Return the names of the error bits set in ``flags``, lowest bit first."""
    known = 0
    for member in ECIError:
        known |= member
    if flags < 0 or flags & ~known:
        raise ValueError(f"unknown error bits in 0x{flags:08x}")
    return tuple(member.name for member in ECIError if member and flags & member)


def _chunks(samples: Sequence[int], size: int) -> Iterator[Sequence[int]]:
    for start in range(0, len(samples), size):
        yield samples[start:start + size]


class Engine:
    """An engine instance holding parameters, queued input and an output callback.

    Audio is produced by ``synthesizer``, a callable turning a piece of text
    into 16-bit samples; without one, only index replies are delivered.
    """

    def __init__(
        self,
        language: int = LanguageDialect.GENERAL_AMERICAN_ENGLISH,
        synthesizer: Optional[Synthesizer] = None,
    ) -> None:
        self._params = {param: 0 for param in ECIParam}
        self._params[ECIParam.LANGUAGE_DIALECT] = int(language)
        self._voices = {
            voice: {param: 0 for param in ECIVoiceParam} for voice in _VOICE_SLOTS
        }
        self._input: list[tuple[str, object]] = []
        self._pending: list[tuple[str, object]] = []
        self._callback: Optional[Callback] = None
        self._buffer_size = 0
        self._synthesizer = synthesizer
        self._deleted = False

    def __enter__(self) -> "Engine":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.delete()

    def _check_alive(self) -> None:
        if self._deleted:
            raise RuntimeError("engine has been deleted")

    @staticmethod
    def _param(param: int) -> ECIParam:
        try:
            return ECIParam(param)
        except ValueError:
            raise ValueError(f"unknown engine parameter {param}") from None

    @staticmethod
    def _voice_param(param: int) -> ECIVoiceParam:
        try:
            return ECIVoiceParam(param)
        except ValueError:
            raise ValueError(f"unknown voice parameter {param}") from None

    def _voice(self, voice: int) -> dict[ECIVoiceParam, int]:
        if voice not in self._voices:
            raise ValueError(f"voice {voice} out of range")
        return self._voices[voice]

    @property
    def speaking(self) -> bool:
        """True while synthesized input has not been delivered yet."""
        return bool(self._pending)

    def add_text(self, text: str) -> None:
        self._check_alive()
        if not isinstance(text, str):
            raise TypeError("text must be a string")
        self._input.append(("text", text))

    def insert_index(self, index: int) -> None:
        self._check_alive()
        if not isinstance(index, int):
            raise TypeError("index must be an integer")
        self._input.append(("index", index))

    def set_param(self, param: int, value: int) -> int:
        """Set an engine parameter and return its previous value."""
        self._check_alive()
        key = self._param(param)
        previous = self._params[key]
        self._params[key] = int(value)
        return previous

    def get_param(self, param: int) -> int:
        self._check_alive()
        return self._params[self._param(param)]

    def set_voice_param(self, voice: int, param: int, value: int) -> int:
        """Set a parameter of a voice and return its previous value."""
        self._check_alive()
        slot = self._voice(voice)
        key = self._voice_param(param)
        previous = slot[key]
        slot[key] = int(value)
        return previous

    def get_voice_param(self, voice: int, param: int) -> int:
        self._check_alive()
        return self._voice(voice)[self._voice_param(param)]

    def register_callback(self, callback: Optional[Callback]) -> None:
        self._check_alive()
        self._callback = callback

    def set_output_buffer(self, size: int) -> None:
        """Set how many samples each waveform message carries at most."""
        self._check_alive()
        if not isinstance(size, int) or size <= 0:
            raise ValueError("output buffer size must be a positive integer")
        self._buffer_size = size

    def synthesize(self) -> None:
        """Start synthesis of the queued input."""
        self._check_alive()
        self._pending.extend(self._input)
        self._input.clear()

    def synchronize(self) -> None:
        """Deliver everything synthesized so far to the callback."""
        self._check_alive()
        items, self._pending = self._pending, []
        for kind, payload in items:
            if kind == "index":
                reply = self._deliver(ECIMessage.INDEX_REPLY, int(payload), None)
                if reply is CallbackReturn.DATA_ABORT:
                    return
            elif self._synthesizer is not None:
                if not self._render(str(payload)):
                    return

    def _render(self, text: str) -> bool:
        samples = list(self._synthesizer(text, self))
        if not samples or self._callback is None:
            return True
        if not self._buffer_size:
            raise RuntimeError("no output buffer set")
        for chunk in _chunks(samples, self._buffer_size):
            try:
                data = struct.pack(f"<{len(chunk)}h", *chunk)
            except struct.error as exc:
                raise ValueError("samples must be 16-bit signed integers") from exc
            reply = self._deliver(ECIMessage.WAVEFORM_BUFFER, len(chunk), data)
            if reply is CallbackReturn.DATA_ABORT:
                return False
        return True

    def _deliver(self, message: ECIMessage, param: int, data: Optional[bytes]) -> CallbackReturn:
        if self._callback is None:
            return CallbackReturn.DATA_PROCESSED
        return CallbackReturn(self._callback(message, param, data))

    def delete(self) -> None:
        """Release the engine; any later use raises RuntimeError."""
        self._input.clear()
        self._pending.clear()
        self._callback = None
        self._deleted = True