from __future__ import annotations

import io

import pytest

from stream_copier.application.domain import CopyMode
from stream_copier.application.engine import StreamCopyEngine
from stream_copier.application.exceptions import InvalidArgumentError


class _CountingReader(io.BytesIO):
    def __init__(self, data: bytes):
        super().__init__(data)
        self.reads: list[int] = []

    def readinto(self, buffer):
        count = super().readinto(buffer)
        self.reads.append(count)
        return count


@pytest.mark.parametrize("mode", [CopyMode.BYTE, CopyMode.BLOCK, "byte", "BLOCK"])
def test_copy_returns_bytes_written(engine: StreamCopyEngine, mode):
    data = bytes(range(256)) * 40
    destination = io.BytesIO()

    count = engine.copy(io.BytesIO(data), destination, mode)

    assert count == len(data)
    assert destination.getvalue() == data


@pytest.mark.parametrize("staged", [False, True])
@pytest.mark.parametrize("mode", [CopyMode.BYTE, CopyMode.BLOCK])
def test_staged_and_direct_copies_match(engine: StreamCopyEngine, mode, staged):
    data = b"0123456789" * 1000 + b"tail"
    destination = io.BytesIO()

    count = engine.copy(io.BytesIO(data), destination, mode, 7, staged=staged)

    assert count == len(data)
    assert destination.getvalue() == data


def test_byte_mode_writes_only_bytes_read():
    engine = StreamCopyEngine(buffer_size=8)
    source = _CountingReader(b"abcdefghij")
    destination = io.BytesIO()

    engine.copy(source, destination, CopyMode.BYTE)

    assert source.reads == [8, 2, 0]
    assert destination.getvalue() == b"abcdefghij"


def test_empty_source_copies_nothing(engine: StreamCopyEngine):
    destination = io.BytesIO()
    assert engine.copy(io.BytesIO(b""), destination, CopyMode.BLOCK) == 0
    assert destination.getvalue() == b""


def test_progress_receives_every_chunk(engine: StreamCopyEngine):
    seen: list[int] = []
    engine.copy(io.BytesIO(b"x" * 10), io.BytesIO(), CopyMode.BLOCK, 4, progress=seen.append)
    assert seen == [4, 4, 2]


def test_staged_progress_reports_total(engine: StreamCopyEngine):
    seen: list[int] = []
    engine.copy(io.BytesIO(b"x" * 10), io.BytesIO(), CopyMode.BYTE, 4, staged=True, progress=seen.append)
    assert seen == [10]


def test_missing_streams_are_rejected(engine: StreamCopyEngine):
    with pytest.raises(InvalidArgumentError):
        engine.copy(None, io.BytesIO())
    with pytest.raises(InvalidArgumentError):
        engine.copy(io.BytesIO(b"a"), None)


@pytest.mark.parametrize("size", [0, -1, True, 1.5])
def test_invalid_buffer_size(engine: StreamCopyEngine, size):
    with pytest.raises(InvalidArgumentError):
        engine.copy(io.BytesIO(b"a"), io.BytesIO(), CopyMode.BLOCK, size)


def test_invalid_default_buffer_size():
    with pytest.raises(InvalidArgumentError):
        StreamCopyEngine(buffer_size=0)


def test_unknown_mode(engine: StreamCopyEngine):
    with pytest.raises(InvalidArgumentError):
        engine.copy(io.BytesIO(b"a"), io.BytesIO(), "chunk")


# --- Line mode ---

def test_line_mode_omits_trailing_separator(engine: StreamCopyEngine):
    destination = io.BytesIO()

    lines = engine.copy(io.BytesIO(b"one\ntwo\nthree\n"), destination, CopyMode.LINE)

    assert lines == 3
    assert destination.getvalue() == b"one\ntwo\nthree"


def test_line_mode_unterminated_last_line(engine: StreamCopyEngine):
    destination = io.BytesIO()

    lines = engine.copy(io.BytesIO(b"a\nb\nc"), destination, CopyMode.LINE)

    assert lines == 3
    assert destination.getvalue().count(b"\n") == lines - 1


def test_line_mode_normalizes_line_breaks(engine: StreamCopyEngine):
    destination = io.BytesIO()

    lines = engine.copy(io.BytesIO(b"a\r\nb\rc\nd"), destination, CopyMode.LINE)

    assert lines == 4
    assert destination.getvalue() == b"a\nb\nc\nd"


def test_line_mode_keeps_blank_lines(engine: StreamCopyEngine):
    destination = io.BytesIO()

    lines = engine.copy(io.BytesIO(b"a\n\n\nb"), destination, CopyMode.LINE)

    assert lines == 4
    assert destination.getvalue() == b"a\n\n\nb"


def test_line_mode_empty_source(engine: StreamCopyEngine):
    destination = io.BytesIO()
    assert engine.copy(io.BytesIO(b""), destination, CopyMode.LINE) == 0
    assert destination.getvalue() == b""


def test_line_mode_reencodes_and_uses_separator():
    engine = StreamCopyEngine(line_separator="\r\n")
    destination = io.BytesIO()

    lines = engine.copy(
        io.BytesIO("café\nnaïve".encode("utf-8")),
        destination,
        CopyMode.LINE,
        encoding="latin-1",
    )

    assert lines == 2
    assert destination.getvalue() == "café\r\nnaïve".encode("latin-1")


def test_line_mode_strips_utf8_bom(engine: StreamCopyEngine):
    destination = io.BytesIO()
    engine.copy(io.BytesIO(b"\xef\xbb\xbfhello"), destination, CopyMode.LINE)
    assert destination.getvalue() == b"hello"


def test_line_mode_leaves_streams_open(engine: StreamCopyEngine):
    source = io.BytesIO(b"a\nb")
    destination = io.BytesIO()

    engine.copy(source, destination, CopyMode.LINE)

    assert not source.closed
    assert not destination.closed
