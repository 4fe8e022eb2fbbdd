"""Header and record types shared by the reader and the writer.

WARC Format Specification References:
- WARC 1.1 Annotated (primary): https://iipc.github.io/warc-specifications/specifications/warc-format/warc-1.1-annotated/
- File and record model: https://iipc.github.io/warc-specifications/specifications/warc-format/warc-1.1-annotated/#file-and-record-model
"""

from collections.abc import Mapping, MutableMapping


def add_headers(**kwargs):
    """Decorator helper for defining header name constants on a record class.

    Sets one class attribute per keyword, e.g. Record.TYPE == "warc-type".

    Example:
        @add_headers(
            TYPE="warc-type",
            DATE="warc-date",
        )
        class Record:
            pass
    """

    def _add_headers(cls):
        for k, v in kwargs.items():
            setattr(cls, k, v)
        return cls

    return _add_headers


class Header(MutableMapping):
    """Record metadata: field name to value, case-insensitive on the name.

    Field names are case-insensitive per WARC 1.1 Section 4. Every key is
    lower-cased on the way in, so the case it was supplied in is not kept.
    A field holds one value; setting it again replaces the old one.

    See:
        WARC 1.1 Section 4: https://iipc.github.io/warc-specifications/specifications/warc-format/warc-1.1-annotated/#file-and-record-model
    """

    def __init__(self, fields=None, **kwargs):
        self._fields = {}
        if fields is not None:
            self.update(fields)
        self.update(kwargs)

    @staticmethod
    def normalize(name):
        return name.lower()

    def __getitem__(self, name):
        return self._fields[self.normalize(name)]

    def __setitem__(self, name, value):
        self._fields[self.normalize(name)] = value

    def __delitem__(self, name):
        del self._fields[self.normalize(name)]

    def __contains__(self, name):
        return isinstance(name, str) and self.normalize(name) in self._fields

    def __iter__(self):
        return iter(self._fields)

    def __len__(self):
        return len(self._fields)

    def __eq__(self, other):
        if isinstance(other, Header):
            return self._fields == other._fields
        if isinstance(other, Mapping):
            return self._fields == {self.normalize(k): v for k, v in other.items()}
        return NotImplemented

    def __repr__(self):
        return f"Header({self._fields!r})"

    def copy(self):
        return Header(self._fields)


# WARC Named Fields - See WARC 1.1 Section 5 "Named fields"
# https://iipc.github.io/warc-specifications/specifications/warc-format/warc-1.1-annotated/#named-fields
@add_headers(
    DATE="warc-date",
    TYPE="warc-type",
    ID="warc-record-id",
    CONTENT_LENGTH="content-length",
    CONTENT_TYPE="content-type",
    URL="warc-target-uri",
    BLOCK_DIGEST="warc-block-digest",
    PAYLOAD_DIGEST="warc-payload-digest",
)
class Record:
    """A WARC record: a Header and a content block.

    content is a file-like object. For records returned by a Reader it
    yields exactly length bytes and then b"". In sequential mode it shares
    the reader's cursor and is retired by the next read_record() call; in
    asynchronous mode it owns a copy of the block.

    When building a record for writing, content may be a file-like object,
    bytes, or None for an empty block. length stays None until a Reader
    sets it.
    """

    VERSION = "WARC/1.0"

    # WARC Record Types - See WARC 1.1 Section 6
    WARCINFO = "warcinfo"
    RESPONSE = "response"
    RESOURCE = "resource"
    REQUEST = "request"
    METADATA = "metadata"
    REVISIT = "revisit"
    CONVERSION = "conversion"
    CONTINUATION = "continuation"

    def __init__(self, header=None, content=None, length=None):
        self.header = header if isinstance(header, Header) else Header(header)
        self.content = content
        self.length = length

    @property
    def type(self):
        return self.header.get(self.TYPE)

    @property
    def date(self):
        return self.header.get(self.DATE)

    @property
    def id(self):
        return self.header.get(self.ID)

    @property
    def url(self):
        return self.header.get(self.URL)

    @property
    def content_type(self):
        return self.header.get(self.CONTENT_TYPE)

    @property
    def block_digest(self):
        return self.header.get(self.BLOCK_DIGEST)

    def read_content(self):
        """Read whatever is left of the content block and return it as bytes."""
        content = self.content
        if content is None:
            return b""
        if isinstance(content, (bytes, bytearray, memoryview)):
            return bytes(content)
        return content.read()

    def __repr__(self):
        return f"Record(type={self.type!r}, length={self.length!r})"
