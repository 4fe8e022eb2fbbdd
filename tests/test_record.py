"""Tests for Header and Record."""

import io

import pytest

from warcstream.warc import Header, Record
from warcstream.warc.record import add_headers


def test_header_is_case_insensitive():
    header = Header()
    header["WARC-Type"] = "response"
    assert header["warc-type"] == "response"
    assert header["WARC-TYPE"] == "response"
    assert "Warc-Type" in header
    assert list(header) == ["warc-type"]


def test_header_last_write_wins():
    header = Header({"Content-Type": "text/plain"})
    header["content-type"] = "text/html"
    header["CONTENT-TYPE"] = "application/json"
    assert len(header) == 1
    assert header["content-type"] == "application/json"


def test_header_delete_and_get():
    header = Header(foo="bar")
    del header["FOO"]
    assert "foo" not in header
    assert header.get("foo") is None
    with pytest.raises(KeyError):
        header["foo"]
    with pytest.raises(KeyError):
        del header["foo"]


def test_header_update_normalizes_keys():
    header = Header()
    header.update({"Key-One": "1", "KEY-TWO": "2"})
    assert dict(header.items()) == {"key-one": "1", "key-two": "2"}


def test_header_equality():
    header = Header({"WARC-Type": "resource"})
    assert header == {"warc-type": "resource"}
    assert header == {"WARC-TYPE": "resource"}
    assert header == Header(**{"warc-type": "resource"})
    assert header != {"warc-type": "response"}


def test_header_copy_is_independent():
    header = Header({"a": "1"})
    copy = header.copy()
    copy["a"] = "2"
    assert header["a"] == "1"


def test_header_contains_non_string():
    assert 1 not in Header({"1": "one"})


def test_empty_record():
    record = Record()
    assert isinstance(record.header, Header)
    assert len(record.header) == 0
    assert record.content is None
    assert record.length is None
    assert record.read_content() == b""


def test_record_wraps_plain_mapping():
    record = Record({"WARC-Type": "request", "WARC-Target-URI": "http://example.com/"})
    assert isinstance(record.header, Header)
    assert record.type == Record.REQUEST
    assert record.url == "http://example.com/"
    assert record.date is None


def test_record_properties():
    record = Record(
        Header(
            {
                "WARC-Record-ID": "<urn:uuid:1>",
                "WARC-Date": "2024-01-01T00:00:00Z",
                "Content-Type": "text/plain",
                "WARC-Block-Digest": "sha1:abc",
            }
        )
    )
    assert record.id == "<urn:uuid:1>"
    assert record.date == "2024-01-01T00:00:00Z"
    assert record.content_type == "text/plain"
    assert record.block_digest == "sha1:abc"


def test_read_content_from_bytes_and_files():
    assert Record(content=b"abc").read_content() == b"abc"
    assert Record(content=bytearray(b"abc")).read_content() == b"abc"

    record = Record(content=io.BytesIO(b"streamed"))
    assert record.read_content() == b"streamed"
    assert record.read_content() == b""


def test_add_headers_sets_name_constants():
    @add_headers(TITLE="title", DIGEST="warc-block-digest")
    class Custom:
        pass

    assert Custom.TITLE == "title"
    assert Custom.DIGEST == "warc-block-digest"
    assert Record.URL == "warc-target-uri"
    assert Record.CONTENT_LENGTH == "content-length"
