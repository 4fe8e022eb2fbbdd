"""Read records from plain and compressed WARC streams.

A Reader walks a decompressed stream record by record. Each record is laid
out as:

    version CRLF *named-field CRLF block CRLF CRLF

The version line is skipped, named fields are collected into a Header, and
the block is framed by the Content-Length field.

WARC Format Specification References:
- WARC 1.1 Annotated (primary): https://iipc.github.io/warc-specifications/specifications/warc-format/warc-1.1-annotated/
- File and record model: https://iipc.github.io/warc-specifications/specifications/warc-format/warc-1.1-annotated/#file-and-record-model
"""

import enum
import io
import logging
import re

from warcstream.warc.compression import open_source
from warcstream.warc.errors import (
    FramingError,
    HeaderError,
    ReaderClosedError,
    ReaderStateError,
    TruncatedRecordError,
    WarcError,
)
from warcstream.warc.record import Header, Record

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192  # the size to read in, make this bigger things go faster.
LINE_CHUNK_SIZE = 4096  # longer lines are read in several pieces

HEADER_ENCODING = "utf-8"

length_rx = re.compile(r"[0-9]+")


class Mode(enum.Enum):
    """How a Reader hands out record content.

    SEQUENTIAL content wraps the reader's own stream: nothing is copied, but
    the next read_record() call discards whatever was left unread.
    ASYNCHRONOUS content is copied into memory when the record is parsed and
    stays valid no matter what the reader does afterwards.
    """

    SEQUENTIAL = "SequentialMode"
    ASYNCHRONOUS = "AsynchronousMode"

    def __str__(self):
        return self.value


class ContentView:
    """File-like view of the next length bytes of a stream.

    Reading advances the underlying stream, but never past the end of the
    block: once length bytes have been read, read() and readline() return
    b"" and the record's trailing CRLF CRLF stays in the stream.
    """

    def __init__(self, file_handle, length):
        self.fh = file_handle
        # Number of bytes until the end of the record's content.
        self.bytes_to_eoc = length

    @property
    def remaining(self):
        return self.bytes_to_eoc

    def readable(self):
        return True

    def read(self, count=-1):
        if count is None or count < 0:
            read_size = self.bytes_to_eoc
        else:
            read_size = min(count, self.bytes_to_eoc)

        if self.fh is None or read_size == 0:
            return b""

        result = self.fh.read(read_size)
        self.bytes_to_eoc -= len(result)
        return result

    def readinto(self, b):
        tmp = self.read(len(b))
        b[: len(tmp)] = tmp
        return len(tmp)

    def readline(self, maxlen=-1):
        if maxlen is None or maxlen < 0:
            lim = self.bytes_to_eoc
        else:
            lim = min(maxlen, self.bytes_to_eoc)

        if self.fh is None or lim == 0:
            return b""

        result = self.fh.readline(lim)
        self.bytes_to_eoc -= len(result)
        return result

    def __iter__(self):
        while True:
            line = self.readline()
            if not line:
                break
            yield line

    def drain(self):
        """Skip the unread rest of the block."""
        while self.bytes_to_eoc > 0:
            read_size = min(CHUNK_SIZE, self.bytes_to_eoc)
            buf = self.read(read_size)
            if len(buf) < read_size:
                raise TruncatedRecordError(
                    f"expected {read_size} bytes of content but only read {len(buf)}"
                )

    def retire(self):
        """Detach from the stream; the view reads as empty from now on."""
        self.fh = None
        self.bytes_to_eoc = 0


def copy_content(view):
    """Read a whole ContentView into memory and return it as a BytesIO."""
    chunks = []
    while view.remaining > 0:
        buf = view.read(min(CHUNK_SIZE, view.remaining))
        if not buf:
            raise TruncatedRecordError(
                f"content block ended {view.remaining} bytes early"
            )
        chunks.append(buf)
    return io.BytesIO(b"".join(chunks))


def parse_content_length(value):
    """Parse a Content-Length field value, which must be 1*DIGIT.

    See WARC 1.1 Section 5.5: https://iipc.github.io/warc-specifications/specifications/warc-format/warc-1.1-annotated/#content-length
    """
    if value is None:
        raise HeaderError("missing field Content-Length")
    if not length_rx.fullmatch(value):
        raise HeaderError(f"failed to parse field Content-Length: {value!r}")
    return int(value)


def open_reader(filename=None, file_handle=None, mode=Mode.SEQUENTIAL):
    """Open a WARC file, plain or compressed, and return a Reader over it.

    Args:
        filename: Path of the file to open; ignored if file_handle is given
        file_handle: Binary file-like object to read from
        mode: Mode.SEQUENTIAL (default) or Mode.ASYNCHRONOUS

    Returns:
        Reader: owns the file handle and closes it on close()

    Example:
        >>> with closing(open_reader("archive.warc.gz")) as reader:
        ...     for record in reader:
        ...         print(record.type)
    """
    if file_handle is None:
        file_handle = open(filename, "rb")
    return Reader(file_handle, mode=mode)


class Reader:
    """Reads WARC records one at a time from a possibly compressed stream.

    The Reader remembers the record it returned last. In sequential mode,
    that record's content is a ContentView over the reader's stream, and the
    next read_record() skips whatever the caller left unread before looking
    for the next record. In asynchronous mode the content was already read
    into memory, so the stream is positioned at the record trailer.

    A Reader is not safe to share between threads.
    """

    def __init__(self, file_handle, mode=Mode.SEQUENTIAL):
        self.mode = Mode(mode)
        self.compression, self.source = open_source(file_handle)
        self.record = None
        self._view = None
        self._error = None

    def __iter__(self):
        while True:
            record = self.read_record()
            if record is None:
                break
            yield record

    def close(self):
        """Close the reader and its stream. Calling it again does nothing."""
        if self.source is None:
            return
        self._retire_view()
        try:
            self.source.close()
        finally:
            self.source = None
            self.record = None

    def read_record(self):
        """Read the next record.

        Returns:
            Record, or None when the stream ends cleanly at a record boundary

        Raises:
            FramingError: A record trailer is not two empty lines
            HeaderError: Content-Length is missing or malformed
            TruncatedRecordError: The stream ends inside a record
            ReaderClosedError: The reader was closed
            ReaderStateError: A previous call raised; the reader does not
                try to resynchronise
        """
        if self.source is None:
            raise ReaderClosedError("read_record() on a closed Reader")
        if self._error is not None:
            raise ReaderStateError(
                f"reader stopped after a previous error: {self._error}"
            ) from self._error

        try:
            return self._read_record()
        except WarcError as e:
            self._error = e
            raise
        except EOFError as e:
            # decompressors raise EOFError on a truncated stream
            self._error = TruncatedRecordError(str(e))
            raise self._error from e
        except OSError as e:
            self._error = e
            raise

    def _read_record(self):
        self._seek_record()

        # skip the version line
        line = self._read_line()
        if line is None:
            logger.debug("end of stream")
            return None
        if not line.startswith(b"WARC/"):
            logger.warning("expected WARC version line, got %r", line[:64])

        header = Header()
        while True:
            line = self._read_line()
            if line is None:
                raise TruncatedRecordError("end of stream inside record header")
            if not line:
                break
            name, sep, value = line.decode(HEADER_ENCODING, "surrogateescape").partition(":")
            if sep and name:
                header[name] = value.strip()

        length = parse_content_length(header.get(Record.CONTENT_LENGTH))

        view = ContentView(self.source, length)
        if self.mode is Mode.ASYNCHRONOUS:
            content = copy_content(view)
        else:
            content = self._view = view

        self.record = Record(header, content, length)
        logger.debug("read %s record, %d bytes of content", self.record.type, length)
        return self.record

    def _seek_record(self):
        """Move past the previous record's content and trailer."""
        if self.record is None:
            return

        if self._view is not None:
            self._view.drain()
        self._retire_view()
        self.record = None

        for _ in range(2):
            line = self._read_line()
            if line is None:
                raise TruncatedRecordError("end of stream inside record trailer")
            if line:
                raise FramingError(f"expected empty line, got {line[:64]!r}")

    def _retire_view(self):
        if self._view is not None:
            self._view.retire()
            self._view = None

    def _read_line(self):
        """Read one line, without its line ending, or None at end of stream.

        Lines longer than LINE_CHUNK_SIZE arrive in pieces and are joined.
        """
        line = self.source.readline(LINE_CHUNK_SIZE)
        if not line:
            return None

        if not line.endswith(b"\n"):
            buf = [line]
            while True:
                chunk = self.source.readline(LINE_CHUNK_SIZE)
                if not chunk:
                    break
                buf.append(chunk)
                if chunk.endswith(b"\n"):
                    break
            line = b"".join(buf)

        if line.endswith(b"\r\n"):
            return line[:-2]
        if line.endswith(b"\n"):
            return line[:-1]
        return line
