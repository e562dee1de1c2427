import os
import struct

import pytest

from voxsay.wavfile import HEADER_SIZE, WavFile, WavHeader


def test_pack_fixed_fields():
    raw = WavHeader().pack(0)
    assert len(raw) == HEADER_SIZE == 44
    assert raw[:4] == b"RIFF"
    assert raw[8:16] == b"WAVEfmt "
    assert raw[16:40] == bytes.fromhex("1000000001000100112b0000225600000200100064617461")


def test_round_trip():
    header = WavHeader(sample_rate=22050)
    parsed, size = WavHeader.unpack(header.pack(1234))
    assert parsed == header
    assert size == 1234


def test_unpack_short():
    with pytest.raises(ValueError):
        WavHeader.unpack(b"RIFF")


def test_unpack_bad_magic():
    raw = bytearray(WavHeader().pack(10))
    raw[0:4] = b"RIFX"
    with pytest.raises(ValueError):
        WavHeader.unpack(bytes(raw))


def test_pack_negative():
    with pytest.raises(ValueError):
        WavHeader().pack(-1)


def test_flush_joins_parts(tmp_path):
    out = tmp_path / "out.wav"
    with WavFile(out, 2) as wav:
        wav.write_data(1, b"\x03\x00")
        wav.write_data(0, b"\x01\x00\x02\x00")
        wav.set_rate(22050)
        wav.flush()
    content = out.read_bytes()
    assert content[HEADER_SIZE:] == b"\x01\x00\x02\x00\x03\x00"
    header, size = WavHeader.unpack(content)
    assert header.sample_rate == 22050
    assert size == len(content) - HEADER_SIZE
    assert struct.unpack_from("<I", content, 4)[0] == len(content) - 8


def test_empty_flush(tmp_path):
    out = tmp_path / "out.wav"
    with WavFile(out) as wav:
        wav.flush()
    content = out.read_bytes()
    header, size = WavHeader.unpack(content)
    assert len(content) == HEADER_SIZE
    assert size == 0
    assert header.sample_rate == 11025


def test_zero_parts(tmp_path):
    with pytest.raises(ValueError):
        WavFile(tmp_path / "out.wav", 0)


def test_part_out_of_range(tmp_path):
    with WavFile(tmp_path / "out.wav", 2) as wav:
        assert wav.number_of_parts == 2
        with pytest.raises(IndexError):
            wav.write_data(2, b"\x00\x00")


def test_close_removes_parts(tmp_path):
    out = tmp_path / "out.wav"
    wav = WavFile(out, 3)
    names = [part.filename for part in wav.parts]
    assert all(os.path.exists(name) for name in names)
    wav.close()
    assert not any(os.path.exists(name) for name in names)
    assert out.exists()


def test_flush_after_close(tmp_path):
    wav = WavFile(tmp_path / "out.wav")
    wav.close()
    with pytest.raises(ValueError):
        wav.flush()