"""Extensions to the engine interface: extra parameters and voice descriptions."""

from __future__ import annotations

import enum
from dataclasses import dataclass, fields

from .eci import LanguageDialect

VERSION = (1, 6, 4)
STR_MAX = 128
OK = 0
PARAM_OUT_OF_RANGE = -1
ECI_VOICES = 22
RESERVED_VOICES = 30
MAX_NB_OF_LANGUAGES = ECI_VOICES + RESERVED_VOICES
LAST_ECI_VOICE = LanguageDialect.STANDARD_FINNISH

_UINT32_MAX = 0xFFFFFFFF


class VoxParam(enum.IntEnum):
    """Engine parameters, extended with the capitalization style."""

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
    CAPITALS = 17
    NUM_PARAMS = 18


class Gender(enum.IntEnum):
    FEMALE = 0
    MALE = 1


class Age(enum.IntEnum):
    ADULT = 0
    CHILD = 1
    SENIOR = 2


class CapitalMode(enum.IntEnum):
    NONE = 0
    SOUND_ICON = 1
    SPELL = 2
    PITCH = 3


@dataclass
class Voice:
    """Description of an installed voice."""

    id: int = 0
    name: str = ""
    lang: str = ""
    variant: str = ""
    rate: int = 0
    size: int = 0
    charset: str = ""
    gender: Gender = Gender.FEMALE
    age: Age = Age.ADULT
    multilang: str = ""
    quality: str = ""
    tts_id: int = 0

    @classmethod
    def from_fields(cls, **kwargs: object) -> "Voice":
        """Build a voice, truncating strings and checking numeric ranges."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise TypeError(f"unknown voice fields: {', '.join(unknown)}")
        values: dict[str, object] = {}
        for key, value in kwargs.items():
            if key in _STRING_FIELDS:
                values[key] = str(value)[:STR_MAX - 1]
            elif key in _UINT_FIELDS:
                number = int(value)  # type: ignore[arg-type]
                if not 0 <= number <= _UINT32_MAX:
                    raise ValueError(f"{key}={number} does not fit in 32 bits")
                values[key] = number
            elif key == "gender":
                values[key] = Gender(value)
            else:
                values[key] = Age(value)
        return cls(**values)  # type: ignore[arg-type]


_STRING_FIELDS = frozenset({"name", "lang", "variant", "charset", "multilang", "quality"})
_UINT_FIELDS = frozenset({"id", "rate", "size", "tts_id"})


def get_version() -> tuple[int, int, int]:
    """Return the (major, minor, patch) version of this interface."""
    return VERSION


def is_eci_voice(voice_id: int) -> bool:
    """Tell whether a voice identifier belongs to the original engine range."""
    return 0 < voice_id <= LAST_ECI_VOICE