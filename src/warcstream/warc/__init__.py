"""WARC record reading and writing.

Reads records from plain, gzip- or bzip2-compressed streams and writes
them back in the canonical layout.

WARC Format Specification References:
- WARC 1.1 Annotated (primary): https://iipc.github.io/warc-specifications/specifications/warc-format/warc-1.1-annotated/
"""

from . import compression, errors, record, stream, writer
from .compression import CompressionType, guess_compression, open_source
from .errors import (
    FramingError,
    HeaderError,
    OpenError,
    ReaderClosedError,
    ReaderStateError,
    TruncatedRecordError,
    WarcError,
)
from .record import Header, Record
from .stream import ContentView, Mode, Reader, open_reader
from .writer import Writer, canonical_field_name, warc_datetime_str

__all__ = [
    "CompressionType",
    "ContentView",
    "FramingError",
    "Header",
    "HeaderError",
    "Mode",
    "OpenError",
    "Reader",
    "ReaderClosedError",
    "ReaderStateError",
    "Record",
    "TruncatedRecordError",
    "WarcError",
    "Writer",
    "canonical_field_name",
    "compression",
    "errors",
    "guess_compression",
    "open_reader",
    "open_source",
    "record",
    "stream",
    "warc_datetime_str",
    "writer",
]
