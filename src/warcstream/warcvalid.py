#!/usr/bin/env python
"""warcvalid - check a warc is ok

Reads every record through to the end of its content and compares
sha1 block digests (base16 or base32) with the content that was read.
"""

import base64
import hashlib
import logging
import sys
from contextlib import closing

import click

from .warc import Mode, WarcError, open_reader
from .warc.stream import CHUNK_SIZE

MODES = {"sequential": Mode.SEQUENTIAL, "asynchronous": Mode.ASYNCHRONOUS}
LOG_LEVELS = ["debug", "info", "warning", "error"]

logger = logging.getLogger(__name__)


def block_digest_error(record):
    """Hash the record's content and check it against WARC-Block-Digest.

    Returns:
        str or None: A description of the mismatch, None if the digest
        matches or is absent or not sha1

    See WARC 1.1 Section 5.9: https://iipc.github.io/warc-specifications/specifications/warc-format/warc-1.1-annotated/#warc-block-digest
    """
    block_hash = hashlib.sha1()
    while True:
        buf = record.content.read(CHUNK_SIZE)
        if not buf:
            break
        block_hash.update(buf)

    declared = record.block_digest
    if not declared:
        return None
    algorithm, _, value = declared.partition(":")
    if algorithm.strip().lower() != "sha1":
        logger.info("not checking %s digest of record %s", algorithm, record.id)
        return None

    digest = block_hash.digest()
    value = value.strip()
    if value.lower() == digest.hex() or value.upper() == base64.b32encode(digest).decode("ascii"):
        return None
    return f"block digest mismatch: declared {declared}, computed sha1:{digest.hex()}"


def validate_archive(reader, name: str) -> bool:
    """Read every record in the archive; False on any error or digest mismatch."""
    correct = True
    n = 0
    try:
        for record in reader:
            error = block_digest_error(record)
            if error:
                print(f"warc errors at {name}#{n}: {error}", file=sys.stderr)
                correct = False
            n += 1
    except WarcError as e:
        print(f"warc errors at {name}#{n}: {e}", file=sys.stderr)
        return False

    logger.info("%s: %d records", name, n)
    return correct


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "-m",
    "--mode",
    "mode",
    type=click.Choice(sorted(MODES)),
    help="How record content is read",
    default="sequential",
)
@click.option(
    "-L",
    "--log-level",
    "log_level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Log level",
    default="warning",
)
@click.argument("warc_files", nargs=-1, required=True, type=click.Path(exists=True))
def main(mode: str, log_level: str, warc_files: tuple[str, ...]) -> None:
    """Validate WARC files."""
    logging.basicConfig(level=log_level.upper(), stream=sys.stderr)

    correct = True
    for name in warc_files:
        try:
            with closing(open_reader(name, mode=MODES[mode])) as reader:
                correct = validate_archive(reader, name) and correct
        except WarcError as e:
            print(f"cannot read {name}: {e}", file=sys.stderr)
            correct = False

    sys.exit(0 if correct else 1)


def run() -> None:
    """Entry point for the command-line interface."""
    main()


if __name__ == "__main__":
    run()
