"""Speech synthesis into wave file parts, with voice selection by name or language."""

from __future__ import annotations

import dataclasses
import errno
import sys
from typing import Iterable, Iterator, Optional, TextIO, Union

from .debug import default_log as _log
from .eci import (
    CallbackReturn,
    ECIMessage,
    ECIParam,
    ECIVoiceParam,
    Engine,
    Synthesizer,
)
from .voxin import RESERVED_VOICES, STR_MAX, Voice
from .wavfile import WavFile

SPEED_UNDEFINED = -1
MAX_CHAR = 10240
MAX_SAMPLES = 10240
DEFAULT_RATE = 11025
VOICE_ID_UNDEFINED = -1


class Backend:
    """Supplies the installed voices and creates engines producing audio."""

    def __init__(
        self,
        voices: Iterable[Voice] = (),
        synthesizer: Optional[Synthesizer] = None,
    ) -> None:
        self._voices = list(voices)
        self._synthesizer = synthesizer

    def get_voices(self) -> list[Voice]:
        """Return copies of the installed voices, at most 30."""
        return [dataclasses.replace(voice) for voice in self._voices[:RESERVED_VOICES]]

    def new_engine(self) -> Engine:
        return Engine(synthesizer=self._synthesizer)


def _normalize(voice: Voice) -> Voice:
    name = voice.name[:STR_MAX - 1].lower()
    if voice.quality:
        name = f"{name}-{voice.quality}"[:STR_MAX - 1]
    return dataclasses.replace(voice, name=name, variant=voice.variant or "none")


class VoiceList:
    """Installed voices with lower-case names that include their quality."""

    def __init__(self, voices: Iterable[Voice]) -> None:
        self._voices = [_normalize(voice) for voice in voices]

    def __len__(self) -> int:
        return len(self._voices)

    def __iter__(self) -> Iterator[Voice]:
        return iter(self._voices)

    def __getitem__(self, index: int) -> Voice:
        return self._voices[index]

    def find(self, name: Optional[str]) -> int:
        """Index of the voice matching ``name`` by name or language.

        Falls back to the first voice; -1 when there is none.
        """
        if not self._voices:
            return VOICE_ID_UNDEFINED
        if not name:
            return 0
        wanted = name.lower()
        return next(
            (
                index
                for index, voice in enumerate(self._voices)
                if wanted in (voice.name.lower(), voice.lang.lower())
            ),
            0,
        )

    def _get(self, index: int) -> Optional[Voice]:
        return self._voices[index] if 0 <= index < len(self._voices) else None

    def rate(self, index: int) -> int:
        """Sample rate of a voice, 11025 when there is no such voice."""
        voice = self._get(index)
        return voice.rate if voice else DEFAULT_RATE

    def lang_id(self, index: int) -> int:
        """Language identifier of a voice, 0 when there is no such voice."""
        voice = self._get(index)
        return voice.id if voice else 0


class Tts:
    """Speaks text with a chosen voice into one part of a wave file."""

    def __init__(
        self,
        backend: Backend,
        voice_name: Optional[str] = None,
        speed: int = SPEED_UNDEFINED,
    ) -> None:
        self._backend = backend
        self.voices = VoiceList(backend.get_voices())
        self.voice_id = self.voices.find(voice_name)
        self.speed = speed
        self._engine: Optional[Engine] = None
        self._wav: Optional[WavFile] = None
        self._part = 0

    def __enter__(self) -> "Tts":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def engine(self) -> Optional[Engine]:
        return self._engine

    def set_voice(self, index: int) -> None:
        """Switch the engine to the voice at ``index``."""
        if self._engine is None:
            raise RuntimeError("no engine: call set_output first")
        self.voice_id = index
        lang_id = self.voices.lang_id(index)
        if not lang_id:
            _log.error(f"error: set param {int(ECIParam.LANGUAGE_DIALECT)} to {lang_id}")
            raise ValueError(f"no voice at index {index}")
        self._engine.set_param(ECIParam.LANGUAGE_DIALECT, lang_id)

    def set_output(self, wav: WavFile, part: int) -> None:
        """Create the engine and direct its audio to ``part`` of ``wav``."""
        if wav is None:
            raise ValueError("no wave file")
        if self._engine is not None:
            return
        engine = self._backend.new_engine()
        if engine is None:
            raise OSError(errno.EIO, "no engine")
        self._engine = engine
        self._wav = wav
        self._part = part
        try:
            engine.set_param(ECIParam.DICTIONARY, 0)
            # enable the ssml and punctuation filters
            engine.set_param(ECIParam.INPUT_TYPE, 1)
            engine.add_text(" `gfa1 ")
            engine.add_text(" `gfa2 ")
            self.set_voice(self.voice_id)
            if self.speed != SPEED_UNDEFINED:
                engine.set_voice_param(0, ECIVoiceParam.SPEED, self.speed)
            engine.register_callback(self._on_message)
            engine.set_output_buffer(MAX_SAMPLES)
        except BaseException:
            engine.delete()
            self._engine = None
            self._wav = None
            raise

    def _on_message(self, message: ECIMessage, param: int, data: Optional[bytes]) -> CallbackReturn:
        if message == ECIMessage.WAVEFORM_BUFFER and data and self._wav is not None:
            self._wav.write_data(self._part, data[:2 * param])
        return CallbackReturn.DATA_PROCESSED

    def rate(self) -> int:
        """Sample rate of the selected voice."""
        return self.voices.rate(self.voice_id)

    def say(self, text: Union[str, bytes]) -> None:
        """Synthesize ``text`` and wait until its audio has been written."""
        if self._engine is None:
            raise RuntimeError("no engine: call set_output first")
        if isinstance(text, bytes):
            text = text.decode("utf-8", "replace")
        self._engine.add_text(text)
        self._engine.synthesize()
        self._engine.synchronize()

    def print_list(self, stream: Optional[TextIO] = None) -> None:
        """Write the installed voices as comma-separated lines."""
        out = stream if stream is not None else sys.stdout
        out.write("Name,Language,Variant\n")
        for voice in self.voices:
            out.write(f"{voice.name},{voice.lang},{voice.variant}\n")

    def close(self) -> None:
        if self._engine is not None:
            self._engine.delete()
            self._engine = None
        self._wav = None