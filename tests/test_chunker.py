"""Tests for sliding-window chunking."""

import pytest

from aria.ingestion.chunker import chunk_text


def test_chunk_text_windows_overlap():
    text = "0123456789" * 10  # 100 chars
    chunks = chunk_text(text, chunk_size=30, overlap=10)

    # Starts at 0, 20, 40, 60, 80; the window starting at 80 reaches the end
    assert [len(c) for c in chunks] == [30, 30, 30, 30, 20]
    assert chunks[0][-10:] == chunks[1][:10]
    assert "".join(c[:20] for c in chunks[:-1]) + chunks[-1] == text


def test_chunk_text_stops_at_end_of_text():
    chunks = chunk_text("A" * 50, chunk_size=50, overlap=10)
    assert chunks == ["A" * 50]


def test_chunk_text_short_text():
    assert chunk_text("Short text", chunk_size=100, overlap=10) == ["Short text"]


def test_chunk_text_empty():
    assert chunk_text("") == []


def test_chunk_text_default_sizes():
    chunks = chunk_text("x" * 2500)
    assert [len(c) for c in chunks] == [1000, 1000, 900]


@pytest.mark.parametrize("size,overlap", [(10, 10), (10, 20), (0, 0), (10, -1)])
def test_chunk_text_invalid_params(size, overlap):
    with pytest.raises(ValueError):
        chunk_text("some text", chunk_size=size, overlap=overlap)
