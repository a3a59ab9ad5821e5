from __future__ import annotations

import os
from pathlib import Path

import pytest

from stream_copier.application.engine import StreamCopyEngine
from stream_copier.application.service import StreamService
from stream_copier.infrastructure.decompression import StreamDecompressor
from stream_copier.infrastructure.hashing import HashlibDigestResolver, StreamHasher
from stream_copier.infrastructure.validation import (
    CodecsEncodingResolver,
    FileSystemPathValidator,
)

SAMPLE_TEXT = (
    "The quick brown fox jumps over the lazy dog.\n"
    "Съешь же ещё этих мягких французских булок.\n"
    "\n"
    "Last line without a terminator"
)


@pytest.fixture
def engine() -> StreamCopyEngine:
    return StreamCopyEngine()


@pytest.fixture
def service(engine: StreamCopyEngine) -> StreamService:
    return StreamService(
        engine=engine,
        path_validator=FileSystemPathValidator(),
        encoding_resolver=CodecsEncodingResolver(),
        decompressor=StreamDecompressor(chunk_size=64),
        hasher=StreamHasher(HashlibDigestResolver(), chunk_size=1024),
    )


@pytest.fixture
def text_file(tmp_path: Path) -> Path:
    path = tmp_path / "source.txt"
    path.write_bytes(SAMPLE_TEXT.encode("utf-8"))
    return path


@pytest.fixture
def binary_file(tmp_path: Path) -> Path:
    # Not a multiple of the 4096 byte default buffer.
    path = tmp_path / "source.bin"
    path.write_bytes(os.urandom(3 * 4096 + 123))
    return path
