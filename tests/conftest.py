"""Shared pytest fixtures for quickdict tests."""

import io
import struct
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from quickdict.models import AbbreviationType, Dictionary, Metadata


@pytest.fixture
def created() -> datetime:
    """A fixed creation timestamp so dates in headers are predictable."""
    return datetime(2021, 3, 7, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def metadata(created: datetime) -> Metadata:
    """Fully populated metadata."""
    return Metadata(
        short_title="EN-ES",
        long_title="English-Spanish Dictionary",
        description="A small test dictionary",
        source_lang="ENG",
        target_lang="SPA",
        authors=["Ana", "Ben"],
        source_url="http://example.com/dict",
        file_version="1.0",
        created=created,
    )


@pytest.fixture
def empty_dictionary(created: datetime) -> Dictionary:
    """A dictionary with no entries and bare metadata."""
    return Dictionary(Metadata(created=created))


@pytest.fixture
def sample_dictionary(metadata: Metadata) -> Dictionary:
    """Dictionary with a few articles (out of order) and one abbreviation."""
    dictionary = Dictionary(metadata)
    dictionary.add_abbreviation("e.g.", "for example", AbbreviationType.AUXILIARY)
    dictionary.add_article("dog", "perro")
    dictionary.add_article("Cat", "gato, e.g. a pet")
    dictionary.add_article("apple", "manzana")
    return dictionary


@pytest.fixture
def sinks() -> dict[str, io.BytesIO]:
    """In-memory binary sinks keyed by StarDict file suffix."""
    return {name: io.BytesIO() for name in ("ifo", "dict", "idx", "syn")}


@pytest.fixture
def temp_output_dir():
    """Create a temporary directory for file output tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def read_idx(data: bytes) -> list[tuple[str, int, int]]:
    """Decode .idx records into (key, offset, length) tuples."""
    records = []
    pos = 0
    while pos < len(data):
        end = data.index(b"\x00", pos)
        key = data[pos:end].decode("utf-8")
        offset, length = struct.unpack(">II", data[end + 1 : end + 9])
        records.append((key, offset, length))
        pos = end + 9
    return records


def read_syn(data: bytes) -> list[tuple[str, int]]:
    """Decode .syn records into (synonym, article index) tuples."""
    records = []
    pos = 0
    while pos < len(data):
        end = data.index(b"\x00", pos)
        name = data[pos:end].decode("utf-8")
        (index,) = struct.unpack(">I", data[end + 1 : end + 5])
        records.append((name, index))
        pos = end + 5
    return records
