"""Write records in the canonical WARC layout.

Record format per WARC 1.1 Section 4:

    version CRLF *named-field CRLF block CRLF CRLF

WARC Format Specification References:
- WARC 1.1 Annotated (primary): https://iipc.github.io/warc-specifications/specifications/warc-format/warc-1.1-annotated/
- WARC-Date: https://iipc.github.io/warc-specifications/specifications/warc-format/warc-1.1-annotated/#warc-date
"""

import logging
import re
from datetime import datetime, timezone

from warcstream.warc.errors import HeaderError
from warcstream.warc.record import Record
from warcstream.warc.stream import HEADER_ENCODING

logger = logging.getLogger(__name__)

NEWLINE = b"\r\n"

# words written upper case in field names, e.g. WARC-Record-ID
ACRONYMS = {"warc": "WARC", "id": "ID", "ip": "IP", "uri": "URI"}

word_rx = re.compile(r"[^-\s]+")


def canonical_field_name(name):
    """Render a lower-cased field name for writing, e.g. warc-target-uri -> WARC-Target-URI.

    Field names are case-insensitive, so this only affects readability.
    """
    return word_rx.sub(
        lambda m: ACRONYMS.get(m.group().lower(), m.group().capitalize()), name
    )


def warc_datetime_str(d=None):
    """Format a datetime as a WARC-Date string, defaulting to now.

    WARC-Date format follows W3CDTF (W3C profile of ISO8601), in UTC.
    See WARC 1.1 Section 5.3: https://iipc.github.io/warc-specifications/specifications/warc-format/warc-1.1-annotated/#warc-date
    Reference: https://www.w3.org/TR/NOTE-datetime
    """
    if d is None:
        d = datetime.now(timezone.utc)
    if d.tzinfo is not None:
        d = d.astimezone(timezone.utc).replace(tzinfo=None)
    s = d.isoformat()
    if "." in s:
        s = s[: s.find(".")]
    return s + "Z"


class Writer:
    """Appends WARC records to a binary file-like object.

    The writer keeps no state between records beyond the output handle.
    """

    def __init__(self, file_handle):
        self.fh = file_handle

    def write_record(self, record):
        """Write one record and return the number of bytes written.

        The whole content block is read into memory first, because
        Content-Length has to be written before it. Content-Length is set
        from the block that was read, replacing any value the caller set.
        WARC-Date defaults to now and WARC-Type to "resource". These
        updates are made to record.header itself.

        Args:
            record: Record whose content is a file-like object, bytes or None

        Returns:
            int: bytes written, version line and separators included

        Raises:
            HeaderError: If a field value contains CR or LF, or a field
                name is empty or contains CR, LF or ":"
        """
        header = record.header
        for name, value in header.items():
            if not name or any(c in name for c in "\r\n:"):
                raise HeaderError(f"invalid field name: {name!r}")
            if "\r" in value or "\n" in value:
                raise HeaderError(f"line break in value of field {name}: {value!r}")

        content = record.read_content()

        header[Record.CONTENT_LENGTH] = str(len(content))
        if Record.DATE not in header:
            header[Record.DATE] = warc_datetime_str()
        if Record.TYPE not in header:
            header[Record.TYPE] = Record.RESOURCE

        out = self.fh
        written = 0

        head = [Record.VERSION.encode("ascii")]
        for name, value in header.items():
            field = f"{canonical_field_name(name)}: {value}"
            head.append(field.encode(HEADER_ENCODING, "surrogateescape"))
        head.append(b"")  # end of header blank nl
        head = NEWLINE.join(head) + NEWLINE

        out.write(head)
        written += len(head)
        if content:
            out.write(content)
            written += len(content)

        # end of record nl nl
        out.write(NEWLINE + NEWLINE)
        written += 2 * len(NEWLINE)
        out.flush()

        logger.debug("wrote %s record, %d bytes", header[Record.TYPE], written)
        return written
