"""Exceptions raised while reading and writing WARC records.

Clean end of stream is not an error: Reader.read_record() returns None.
"""


class WarcError(Exception):
    """Base class for all errors raised by warcstream."""


class OpenError(WarcError):
    """The stream could not be classified or decompressed."""


class FramingError(WarcError):
    """A record separator was not where the framing requires one."""


class HeaderError(WarcError):
    """A header field needed for framing is missing or malformed."""


class TruncatedRecordError(WarcError, EOFError):
    """End of stream inside a header block, content block or trailer."""


class ReaderClosedError(WarcError, ValueError):
    """read_record() was called on a closed Reader."""


class ReaderStateError(WarcError):
    """read_record() was called after a previous call failed."""
