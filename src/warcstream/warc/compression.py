"""Compression detection and decompressing byte sources.

WARC files are commonly stored plain, gzip-compressed (usually one gzip
member per record, see WARC 1.1 Annex D) or bzip2-compressed. The
compression type is guessed once, from the first two bytes of the stream,
and the stream is wrapped in a source that always offers the same
read/readline/close interface.

See:
    WARC 1.1 Annex D: https://iipc.github.io/warc-specifications/specifications/warc-format/warc-1.1-annotated/#annex-d-informative-compression-recommendations
"""

import bz2
import enum
import gzip
import io
import logging

from warcstream.warc.errors import OpenError

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
BZIP2_MAGIC = b"BZ"
MAGIC_SIZE = 2


class CompressionType(enum.Enum):
    NONE = "none"
    GZIP = "gzip"
    BZIP2 = "bzip2"


def guess_compression(file_handle):
    """Guess the compression of a stream from its magic number.

    Peeks at the first two bytes without consuming them, so later reads
    still see the whole stream. A stream shorter than two bytes is
    uncompressed.

    Args:
        file_handle: Buffered binary stream supporting peek()

    Returns:
        CompressionType: GZIP, BZIP2 or NONE
    """
    magic = file_handle.peek(MAGIC_SIZE)[:MAGIC_SIZE]
    if magic == GZIP_MAGIC:
        return CompressionType.GZIP
    if magic == BZIP2_MAGIC:
        return CompressionType.BZIP2
    return CompressionType.NONE


class PrefixedStream(io.RawIOBase):
    """Raw stream that yields some already-read bytes, then the rest of file_handle.

    Closing it closes file_handle.
    """

    def __init__(self, prefix, file_handle):
        super().__init__()
        self.prefix = prefix
        self.fh = file_handle

    def readable(self):
        return True

    def readinto(self, b):
        if self.prefix:
            n = min(len(b), len(self.prefix))
            b[:n] = self.prefix[:n]
            self.prefix = self.prefix[n:]
            return n
        if hasattr(self.fh, "read1"):
            data = self.fh.read1(len(b))
        else:
            data = self.fh.read(len(b))
        b[: len(data)] = data
        return len(data)

    def close(self):
        if self.closed:
            return
        try:
            self.fh.close()
        finally:
            super().close()


def peekable(file_handle, size=MAGIC_SIZE):
    """Return a buffered stream whose peek(size) sees size bytes, unless the stream is shorter.

    io.BufferedReader.peek() reads from the raw stream at most once, so a
    pipe or socket returning short reads can show fewer bytes than are
    coming. The leading bytes are then read in full and put back in front
    of the stream.
    """
    if not hasattr(file_handle, "peek"):
        file_handle = io.BufferedReader(file_handle)
    if len(file_handle.peek(size)) >= size:
        return file_handle

    head = file_handle.read(size)
    if not head:
        return file_handle
    return io.BufferedReader(PrefixedStream(head, file_handle))


class DecompressingSource:
    """Closable, readable view of a possibly compressed stream.

    Subclasses set self.fh to the object that yields decompressed bytes.
    close() releases that object and then the raw stream, once.
    """

    compression = None

    def __init__(self, raw_fh):
        self.raw_fh = raw_fh
        self.fh = raw_fh
        self.closed = False

    def read(self, size=-1):
        return self.fh.read(size)

    def readline(self, size=-1):
        return self.fh.readline(size)

    def close(self):
        if self.closed:
            return
        self.closed = True
        try:
            if self.fh is not self.raw_fh:
                self.fh.close()
        finally:
            self.raw_fh.close()


class PassThroughSource(DecompressingSource):
    compression = CompressionType.NONE


class GzipSource(DecompressingSource):
    """Reads a gzip stream, including files made of one member per record."""

    compression = CompressionType.GZIP

    def __init__(self, raw_fh):
        DecompressingSource.__init__(self, raw_fh)
        self.fh = gzip.GzipFile(fileobj=raw_fh, mode="rb")


class Bzip2Source(DecompressingSource):
    compression = CompressionType.BZIP2

    def __init__(self, raw_fh):
        DecompressingSource.__init__(self, raw_fh)
        self.fh = bz2.BZ2File(raw_fh, mode="rb")


SOURCES = {
    CompressionType.NONE: PassThroughSource,
    CompressionType.GZIP: GzipSource,
    CompressionType.BZIP2: Bzip2Source,
}


def open_source(file_handle):
    """Wrap a raw binary stream in the matching decompressing source.

    Args:
        file_handle: Binary file-like object; wrapped by peekable() when it
            cannot peek or shows fewer than two bytes

    Returns:
        tuple: (CompressionType, DecompressingSource)

    Raises:
        OpenError: If the compressed stream's header is corrupt
    """
    file_handle = peekable(file_handle)

    compression = guess_compression(file_handle)
    source = SOURCES[compression](file_handle)

    if compression is not CompressionType.NONE:
        # decompress the header now so a corrupt stream fails here
        try:
            source.fh.peek(1)
        except (OSError, EOFError) as e:
            source.close()
            raise OpenError(f"cannot open {compression.value} stream: {e}") from e

    logger.debug("opened %s stream", compression.value)
    return compression, source
