"""Shared fixtures for the warcstream tests."""

import tempfile
from pathlib import Path

import pytest

from warc_helpers import COMPRESSIONS, compress, make_records


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fixture_records():
    return make_records()


@pytest.fixture(params=COMPRESSIONS)
def fixture_warc_file(request, temp_dir, fixture_records):
    """The 50-record fixture stored plain, gzipped, gzipped per record and bzip2ed."""
    suffix = {"plain": ".warc", "bzip2": ".warc.bz2"}.get(request.param, ".warc.gz")
    path = temp_dir / f"test-{request.param}{suffix}"
    path.write_bytes(compress(fixture_records, request.param))
    return path
