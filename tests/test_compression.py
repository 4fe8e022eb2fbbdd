"""Tests for compression detection and decompressing sources."""

import bz2
import gzip
import io

import pytest

from warc_helpers import TrickleIO
from warcstream.warc import CompressionType, OpenError, guess_compression, open_source
from warcstream.warc.compression import Bzip2Source, GzipSource, PassThroughSource, peekable

DATA = b"WARC/1.0\r\nContent-Length: 0\r\n\r\n\r\n\r\n"


class CountingBytesIO(io.BytesIO):
    """BytesIO that counts calls to close()."""

    def __init__(self, data=b""):
        super().__init__(data)
        self.close_calls = 0

    def close(self):
        self.close_calls += 1
        super().close()


@pytest.mark.parametrize(
    "data, expected",
    [
        (gzip.compress(DATA), CompressionType.GZIP),
        (bz2.compress(DATA), CompressionType.BZIP2),
        (DATA, CompressionType.NONE),
        (b"", CompressionType.NONE),
        (b"\x1f", CompressionType.NONE),
        (b"B", CompressionType.NONE),
        (b"\x8b\x1f", CompressionType.NONE),
    ],
)
def test_guess_compression(data, expected):
    fh = io.BufferedReader(io.BytesIO(data))
    assert guess_compression(fh) is expected
    # peeking must not consume anything
    assert fh.read() == data


@pytest.mark.parametrize(
    "data, compression, source_class",
    [
        (DATA, CompressionType.NONE, PassThroughSource),
        (gzip.compress(DATA), CompressionType.GZIP, GzipSource),
        (bz2.compress(DATA), CompressionType.BZIP2, Bzip2Source),
    ],
)
def test_open_source_decompresses(data, compression, source_class):
    detected, source = open_source(io.BytesIO(data))
    assert detected is compression
    assert isinstance(source, source_class)
    assert source.readline() == b"WARC/1.0\r\n"
    assert source.read() == DATA[len(b"WARC/1.0\r\n") :]
    source.close()


def test_open_source_concatenated_gzip_members():
    data = gzip.compress(b"first\n") + gzip.compress(b"second\n")
    compression, source = open_source(io.BytesIO(data))
    assert compression is CompressionType.GZIP
    assert source.read() == b"first\nsecond\n"


def test_open_source_empty_compressed_streams():
    for data in (b"", gzip.compress(b""), bz2.compress(b"")):
        _, source = open_source(io.BytesIO(data))
        assert source.read() == b""
        assert source.readline() == b""


@pytest.mark.parametrize(
    "data",
    [
        b"\x1f\x8b\x63garbage that is not deflate",
        b"\x1f\x8b\x08",
        b"BZh9 this is not a bzip2 stream at all",
    ],
)
def test_open_source_rejects_corrupt_header(data):
    raw = CountingBytesIO(data)
    with pytest.raises(OpenError):
        open_source(raw)
    assert raw.closed


@pytest.mark.parametrize(
    "data",
    [DATA, gzip.compress(DATA), bz2.compress(DATA)],
)
def test_close_is_idempotent_and_closes_raw_once(data):
    raw = CountingBytesIO(data)
    _, source = open_source(raw)
    source.close()
    source.close()
    assert source.closed
    assert raw.closed
    assert raw.close_calls == 1


def test_open_source_keeps_peekable_handle():
    raw = io.BufferedReader(io.BytesIO(DATA))
    _, source = open_source(raw)
    assert source.raw_fh is raw


@pytest.mark.parametrize(
    "data, compression",
    [
        (gzip.compress(DATA), CompressionType.GZIP),
        (bz2.compress(DATA), CompressionType.BZIP2),
        (DATA, CompressionType.NONE),
    ],
)
def test_open_source_on_short_reads(data, compression):
    raw = TrickleIO(data)
    detected, source = open_source(raw)
    assert detected is compression
    assert source.read() == DATA
    source.close()
    assert raw.closed


@pytest.mark.parametrize("data", [b"", b"\x1f", b"B"])
def test_open_source_on_short_reads_of_tiny_streams(data):
    compression, source = open_source(TrickleIO(data))
    assert compression is CompressionType.NONE
    assert source.read() == data


def test_peekable_fills_magic_from_short_reads():
    fh = peekable(io.BufferedReader(TrickleIO(b"\x1f\x8brest")))
    assert fh.peek(2)[:2] == b"\x1f\x8b"
    assert guess_compression(fh) is CompressionType.GZIP
    assert fh.read() == b"\x1f\x8brest"
