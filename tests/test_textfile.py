import io
import os
import sys

import pytest

from voxsay.textfile import MAX_CHAR, TextFile, search_last_sentence


def test_short_buffers_are_kept_whole():
    assert search_last_sentence(b"ab") == 2
    assert search_last_sentence(b"") == 0


def test_cut_after_last_sentence():
    buffer = b"One two. Three four. Five"
    n = search_last_sentence(buffer)
    assert buffer[n - 1:n] == b"."
    assert buffer[n:n + 1].isspace()
    assert b"." not in buffer[n:]


def test_cut_after_last_word_without_period():
    buffer = b"alpha beta gamma"
    n = search_last_sentence(buffer)
    assert buffer[n:n + 1].isspace()
    assert not buffer[n - 1:n].isspace()
    assert b" " not in buffer[n + 1:]


def test_no_whitespace_keeps_everything():
    assert search_last_sentence(b"abcdef") == len(b"abcdef")
    assert search_last_sentence(b"Done.") == len(b"Done.")


def test_sentence_input_round_trip():
    text = "Hello there. Bye now"
    with TextFile(sentence=text) as tf:
        sentences = list(tf.iter_sentences(0))
        assert tf.number_of_parts == 1
    assert " ".join(sentences) == text
    assert sentences[0].endswith(".")


def test_file_split_in_parts_round_trip(tmp_path):
    text = " ".join(f"Sentence number {i} is here." for i in range(60))
    path = tmp_path / "input.txt"
    path.write_text(text)
    with TextFile(path, 4) as tf:
        assert tf.number_of_parts == 4
        parts = [list(tf.iter_sentences(p)) for p in range(4)]
    assert all(parts)
    assert parts[0][0].startswith("Sentence number 0")
    assert " ".join(s for part in parts for s in part) == text


def test_parts_end_on_whole_sentences(tmp_path):
    text = " ".join(f"Sentence number {i} is here." for i in range(60))
    path = tmp_path / "input.txt"
    path.write_text(text)
    with TextFile(path, 3) as tf:
        for part in range(2):
            assert "".join(tf.iter_sentences(part)).endswith(".")


def test_small_input_is_not_split(tmp_path):
    path = tmp_path / "small.txt"
    path.write_text("Short. Text.")
    with TextFile(path, 4) as tf:
        assert tf.number_of_parts == 1
        with pytest.raises(IndexError):
            tf.next_sentences(1)


def test_exhausted_part_returns_none():
    with TextFile(sentence="Only") as tf:
        assert tf.next_sentences(0) == "Only"
        assert tf.next_sentences(0) is None


def test_long_word_is_cut_at_buffer_size():
    text = "a" * (MAX_CHAR + 100)
    with TextFile(sentence=text) as tf:
        first = tf.next_sentences(0)
        second = tf.next_sentences(0)
        assert tf.next_sentences(0) is None
    assert len(first) == MAX_CHAR
    assert len(first) + len(second) + 1 == len(text)


def test_invalid_arguments():
    with pytest.raises(ValueError):
        TextFile(sentence="")
    with pytest.raises(ValueError):
        TextFile(sentence="text", number_of_parts=0)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        TextFile(tmp_path / "missing.txt")


def test_close_removes_temporary_file():
    tf = TextFile(sentence="Some text.")
    name = tf.filename
    assert os.path.exists(name)
    tf.close()
    assert not os.path.exists(name)
    assert tf.number_of_parts == 0


def test_unusable_stdin(monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO("text"))
    with pytest.raises(ValueError):
        TextFile()