import io
import struct

import pytest

from voxsay.eci import ECIParam, ECIVoiceParam, LanguageDialect
from voxsay.tts import (
    DEFAULT_RATE,
    VOICE_ID_UNDEFINED,
    Backend,
    Tts,
    VoiceList,
)
from voxsay.voxin import RESERVED_VOICES, STR_MAX, Voice
from voxsay.wavfile import HEADER_SIZE, WavFile, WavHeader

EN = Voice.from_fields(
    id=int(LanguageDialect.GENERAL_AMERICAN_ENGLISH), name="American_English",
    lang="en", variant="US", rate=11025, size=16, charset="ISO-8859-1",
)
FR = Voice.from_fields(
    id=int(LanguageDialect.STANDARD_FRENCH), name="French",
    lang="fr", variant="FR", rate=11025, size=16, charset="ISO-8859-1",
)
NVE = Voice.from_fields(
    id=0x2d3000, name="Tom", lang="en", variant="", rate=22050, size=16,
    charset="UTF-8", quality="embedded-compact",
)

SAMPLES = [100, -100, 7]


def synth(text, engine):
    return SAMPLES if "hello" in text else []


def make_backend():
    return Backend([EN, FR, NVE], synth)


def test_voice_list_normalizes_names():
    voices = VoiceList([EN, NVE])
    assert voices[0].name == "american_english"
    assert voices[1].name == "tom-embedded-compact"
    assert voices[1].variant == "none"
    assert voices[0].variant == "US"


def test_long_name_is_truncated():
    voice = Voice.from_fields(id=1, name="x" * (STR_MAX - 1), quality="q")
    assert len(VoiceList([voice])[0].name) == STR_MAX - 1


def test_find_by_name_or_language():
    voices = VoiceList([EN, FR, NVE])
    assert voices.find("FRENCH") == 1
    assert voices.find("fr") == 1
    assert voices.find("en") == 0
    assert voices.find("tom-embedded-compact") == 2
    assert voices.find("klingon") == 0
    assert voices.find(None) == 0
    assert voices.find("") == 0
    assert VoiceList([]).find("en") == VOICE_ID_UNDEFINED


def test_rate_and_lang_id_out_of_range():
    voices = VoiceList([EN, FR, NVE])
    assert voices.rate(2) == NVE.rate
    assert voices.rate(99) == DEFAULT_RATE
    assert voices.rate(-1) == DEFAULT_RATE
    assert voices.lang_id(1) == FR.id
    assert voices.lang_id(-1) == 0


def test_backend_limits_voices():
    backend = Backend([EN] * (RESERVED_VOICES + 5))
    assert len(backend.get_voices()) == RESERVED_VOICES


def test_say_writes_wave(tmp_path):
    out = tmp_path / "out.wav"
    wav = WavFile(out, 1)
    try:
        with Tts(make_backend(), "fr") as tts:
            tts.set_output(wav, 0)
            engine = tts.engine
            assert engine.get_param(ECIParam.LANGUAGE_DIALECT) == LanguageDialect.STANDARD_FRENCH
            assert engine.get_param(ECIParam.INPUT_TYPE) == 1
            tts.say("hello")
            wav.set_rate(tts.rate())
            wav.flush()
        raw = out.read_bytes()
    finally:
        wav.close()
    header, size = WavHeader.unpack(raw)
    assert size == 2 * len(SAMPLES)
    assert header.sample_rate == FR.rate
    assert raw[HEADER_SIZE:] == struct.pack(f"<{len(SAMPLES)}h", *SAMPLES)


def test_speed_is_applied(tmp_path):
    with WavFile(tmp_path / "out.wav", 1) as wav, Tts(make_backend(), speed=50) as tts:
        tts.set_output(wav, 0)
        assert tts.engine.get_voice_param(0, ECIVoiceParam.SPEED) == 50


def test_set_output_without_voices_fails(tmp_path):
    with WavFile(tmp_path / "out.wav", 1) as wav:
        tts = Tts(Backend([], synth))
        with pytest.raises(ValueError):
            tts.set_output(wav, 0)
        assert tts.engine is None


def test_set_output_requires_wav():
    with pytest.raises(ValueError):
        Tts(make_backend()).set_output(None, 0)


def test_set_output_twice_keeps_engine(tmp_path):
    with WavFile(tmp_path / "out.wav", 1) as wav, Tts(make_backend()) as tts:
        tts.set_output(wav, 0)
        first = tts.engine
        tts.set_output(wav, 0)
        assert tts.engine is first


def test_calls_before_output_fail():
    tts = Tts(make_backend())
    with pytest.raises(RuntimeError):
        tts.say("hello")
    with pytest.raises(RuntimeError):
        tts.set_voice(0)


def test_set_voice_switches_language(tmp_path):
    with WavFile(tmp_path / "out.wav", 1) as wav, Tts(make_backend()) as tts:
        tts.set_output(wav, 0)
        tts.set_voice(2)
        assert tts.engine.get_param(ECIParam.LANGUAGE_DIALECT) == NVE.id
        assert tts.rate() == NVE.rate
        with pytest.raises(ValueError):
            tts.set_voice(9)


def test_print_list():
    tts = Tts(make_backend())
    stream = io.StringIO()
    tts.print_list(stream)
    lines = stream.getvalue().splitlines()
    assert lines[0] == "Name,Language,Variant"
    assert len(lines) == 4
    assert lines[1].split(",") == [tts.voices[0].name, "en", "US"]


def test_close_deletes_engine(tmp_path):
    with WavFile(tmp_path / "out.wav", 1) as wav:
        tts = Tts(make_backend())
        tts.set_output(wav, 0)
        engine = tts.engine
        tts.close()
        assert tts.engine is None
        with pytest.raises(RuntimeError):
            engine.add_text("hello")