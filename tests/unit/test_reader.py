"""Tests for the reader module."""

import io

import pytest

from cc_audit.reader import ChunkedLineReader, iter_file_lines, read_first_last_line


def make_reader(data: bytes, chunk_size: int) -> ChunkedLineReader:
    return ChunkedLineReader(io.BytesIO(data), len(data), chunk_size=chunk_size)


def test_lines_reassembled_across_chunks():
    """Lines longer than a block are stitched back together."""
    data = b'{"a": 1}\n{"b": "long value here"}\n{"c": 3}\n'
    lines = list(make_reader(data, chunk_size=4))

    assert lines == ['{"a": 1}', '{"b": "long value here"}', '{"c": 3}']


def test_final_line_without_newline_is_yielded():
    lines = list(make_reader(b"one\ntwo", chunk_size=3))
    assert lines == ["one", "two"]


def test_multibyte_character_split_across_chunks():
    """A UTF-8 sequence cut by a block boundary decodes intact."""
    text = "héllo → wörld\nnext ✓\n"
    data = text.encode("utf-8")
    for chunk_size in range(1, 8):
        lines = list(make_reader(data, chunk_size=chunk_size))
        assert lines == ["héllo → wörld", "next ✓"]


def test_crlf_line_endings():
    lines = list(make_reader(b"a\r\nb\r\n", chunk_size=2))
    assert lines == ["a", "b"]


def test_reader_is_restartable():
    reader = make_reader(b"x\ny\n", chunk_size=1)
    assert list(reader) == ["x", "y"]
    assert list(reader) == ["x", "y"]


def test_reader_stops_at_declared_size():
    data = b"keep\ndrop\n"
    reader = ChunkedLineReader(io.BytesIO(data), 5, chunk_size=2)
    assert list(reader) == ["keep"]


def test_invalid_chunk_size():
    with pytest.raises(ValueError):
        ChunkedLineReader(io.BytesIO(b""), 0, chunk_size=0)


def test_iter_file_lines(temp_dir):
    path = temp_dir / "s.jsonl"
    path.write_bytes(b'{"x": 1}\n\n{"y": 2}')

    assert list(iter_file_lines(path, chunk_size=5)) == ['{"x": 1}', "", '{"y": 2}']


def test_iter_file_lines_missing_file(temp_dir):
    with pytest.raises(OSError):
        list(iter_file_lines(temp_dir / "gone.jsonl"))


def test_read_first_last_line(temp_dir):
    path = temp_dir / "s.jsonl"
    path.write_text('{"n": 1}\n{"n": 2}\n{"n": 3}\n\n\n')

    first, last, size = read_first_last_line(path)

    assert first == '{"n": 1}'
    assert last == '{"n": 3}'
    assert size == path.stat().st_size


def test_read_first_last_line_large_file(temp_dir):
    """Only the head and tail are sampled from a file bigger than both buffers."""
    path = temp_dir / "big.jsonl"
    filler = '{"pad": "' + "x" * 1000 + '"}\n'
    path.write_text('{"n": "first"}\n' + filler * 200 + '{"n": "last"}\n')

    first, last, _ = read_first_last_line(path)

    assert first == '{"n": "first"}'
    assert last == '{"n": "last"}'


def test_read_first_last_line_empty_file(temp_dir):
    path = temp_dir / "empty.jsonl"
    path.write_text("")

    assert read_first_last_line(path) == ("", "", 0)
