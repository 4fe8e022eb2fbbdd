#!/usr/bin/env python
"""warcdump - dump warc record headers in a slightly more humane format"""

import logging
import sys
from contextlib import closing

import click

from .warc import Mode, WarcError, open_reader
from .warc.stream import HEADER_ENCODING

MODES = {"sequential": Mode.SEQUENTIAL, "asynchronous": Mode.ASYNCHRONOUS}
LOG_LEVELS = ["debug", "info", "warning", "error"]


def printable(text: str) -> str:
    """Show undecodable header bytes as backslash escapes, e.g. caf\\xe9."""
    return text.encode(HEADER_ENCODING, "surrogateescape").decode(
        HEADER_ENCODING, "backslashreplace"
    )


def dump_archive(reader, name: str) -> bool:
    """Print the header fields of every record; False if reading failed."""
    n = 0
    try:
        for record in reader:
            print(f"archive record at {name}#{n}")
            for key, value in record.header.items():
                print(f"\t{printable(key)} = {printable(value)}")
            print()
            n += 1
    except WarcError as e:
        print(f"warc errors at {name}#{n}: {e}", file=sys.stderr)
        return False
    return True


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
@click.argument("warc_files", nargs=-1, type=click.Path(exists=True))
def main(mode: str, log_level: str, warc_files: tuple[str, ...]) -> None:
    """Dump WARC files in a human-readable format."""
    logging.basicConfig(level=log_level.upper(), stream=sys.stderr)

    correct = True
    try:
        if len(warc_files) < 1:
            with closing(open_reader(file_handle=sys.stdin.buffer, mode=MODES[mode])) as reader:
                correct = dump_archive(reader, name="-")
        else:
            for name in warc_files:
                with closing(open_reader(name, mode=MODES[mode])) as reader:
                    correct = dump_archive(reader, name) and correct
    except WarcError as e:
        print(f"cannot read archive: {e}", file=sys.stderr)
        correct = False

    sys.exit(0 if correct else 1)


def run() -> None:
    """Entry point for the command-line interface."""
    main()


if __name__ == "__main__":
    run()
