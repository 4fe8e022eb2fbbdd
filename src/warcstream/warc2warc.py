#!/usr/bin/env python
"""warc2warc - convert one warc to another, can be used to re-compress things"""

import bz2
import logging
import sys
from contextlib import closing
from gzip import GzipFile

import click

from .warc import WarcError, Writer, open_reader

LOG_LEVELS = ["debug", "info", "warning", "error"]


def process(reader, out, gzip: bool) -> int:
    """Copy every record from reader to out; returns the number of records."""
    writer = Writer(out)
    n = 0
    for record in reader:
        if gzip:
            # one gzip member per record, see WARC 1.1 Annex D.2
            member = GzipFile(fileobj=out, mode="wb")
            Writer(member).write_record(record)
            member.close()
        else:
            writer.write_record(record)
        n += 1
    return n


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "-o",
    "--output",
    "output",
    help="output warc file",
    type=click.Path(),
    default=None,
)
@click.option(
    "-Z",
    "--gzip",
    "gzip",
    is_flag=True,
    help="compress output, record by record",
    default=False,
)
@click.option(
    "-j",
    "--bzip2",
    "bzip2",
    is_flag=True,
    help="compress output with bzip2",
    default=False,
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
def main(
    output: str | None,
    gzip: bool,
    bzip2: bool,
    log_level: str,
    warc_files: tuple[str, ...],
) -> None:
    """Convert one WARC to another, can be used to re-compress things."""
    if gzip and bzip2:
        raise click.UsageError("--gzip and --bzip2 are mutually exclusive")
    logging.basicConfig(level=log_level.upper(), stream=sys.stderr)

    out = sys.stdout.buffer
    if output:
        out = open(output, "wb")
    sink = bz2.BZ2File(out, mode="wb") if bzip2 else out

    correct = True
    try:
        if len(warc_files) < 1:
            with closing(open_reader(file_handle=sys.stdin.buffer)) as reader:
                process(reader, sink, gzip)
        else:
            for name in warc_files:
                with closing(open_reader(name)) as reader:
                    n = process(reader, sink, gzip)
                logging.info("copied %d records from %s", n, name)
    except WarcError as e:
        print(f"warc errors: {e}", file=sys.stderr)
        correct = False
    finally:
        if sink is not out:
            sink.close()
        if output:
            out.close()

    sys.exit(0 if correct else 1)


def run() -> None:
    """Entry point for the command-line interface."""
    main()


if __name__ == "__main__":
    run()
