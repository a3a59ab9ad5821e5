"""
The stream copy engine.

Moves a finite byte sequence from an open source stream to an open
destination stream, either as raw bytes (read into one reusable buffer),
as successive blocks, or as re-encoded text lines. The engine never opens
or closes the streams it is handed; ownership stays with the caller.
"""

import functools
import io
import logging
from typing import BinaryIO, Callable, Iterator, Optional, Union

from .domain import CopyMode
from .exceptions import InvalidArgumentError

DEFAULT_BUFFER_SIZE = 4096

ProgressCallback = Callable[[int], None]


class StreamCopyEngine:
    """Copies streams in byte, block or line granularity."""

    def __init__(
        self,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        line_encoding: str = "utf-8",
        line_separator: str = "\n",
    ):
        """Initializes the engine with its default transfer settings."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.buffer_size = self._check_buffer_size(buffer_size)
        self.line_encoding = line_encoding
        self.line_separator = line_separator

    @staticmethod
    def _check_buffer_size(buffer_size) -> int:
        if isinstance(buffer_size, bool) or not isinstance(buffer_size, int):
            raise InvalidArgumentError(
                f"Buffer size must be an integer, got {buffer_size!r}."
            )
        if buffer_size <= 0:
            raise InvalidArgumentError(
                f"Buffer size must be positive, got {buffer_size}."
            )
        return buffer_size

    def _read_into(self, source: BinaryIO, size: int) -> Iterator[memoryview]:
        """Yields views of a single reusable buffer, one per read."""
        buffer = bytearray(size)
        view = memoryview(buffer)
        while count := source.readinto(buffer):
            yield view[:count]

    def _read_blocks(self, source: BinaryIO, size: int) -> Iterator[bytes]:
        """Yields freshly read blocks of at most ``size`` bytes."""
        yield from iter(functools.partial(source.read, size), b"")

    def _chunks(self, source: BinaryIO, mode: CopyMode, size: int):
        if mode is CopyMode.BYTE:
            return self._read_into(source, size)
        return self._read_blocks(source, size)

    def _drain(
        self,
        chunks,
        destination: BinaryIO,
        progress: Optional[ProgressCallback],
    ) -> int:
        """Writes every chunk in order and returns the number of bytes written."""
        total = 0
        for chunk in chunks:
            destination.write(chunk)
            total += len(chunk)
            if progress is not None:
                progress(len(chunk))
        return total

    def _copy_staged(
        self,
        source: BinaryIO,
        destination: BinaryIO,
        mode: CopyMode,
        size: int,
        progress: Optional[ProgressCallback],
    ) -> int:
        """Reads the whole source into memory, then writes it in one go."""
        with io.BytesIO() as staging:
            self._drain(self._chunks(source, mode, size), staging, None)
            data = staging.getvalue()

        self.logger.debug(f"Staged {len(data)} bytes in memory.")
        destination.write(data)
        if progress is not None:
            progress(len(data))
        return len(data)

    def _copy_lines(
        self, source: BinaryIO, destination: BinaryIO, encoding: str
    ) -> int:
        """
        Re-encodes the UTF-8 source line by line.

        A separator is written after a line only when another line follows,
        so N lines produce N - 1 separators.
        """
        writer = io.TextIOWrapper(
            destination, encoding=encoding, errors="replace", newline=""
        )
        recorded_lines = 0
        try:
            reader = io.TextIOWrapper(
                source, encoding="utf-8-sig", errors="replace", newline=None
            )
            try:
                lines = iter(reader)
                line = next(lines, None)
                while line is not None:
                    following = next(lines, None)
                    writer.write(line[:-1] if line.endswith("\n") else line)
                    if following is not None:
                        writer.write(self.line_separator)
                    recorded_lines += 1
                    line = following
            finally:
                # Hand the binary streams back to the caller without closing them.
                reader.detach()
        finally:
            writer.detach()

        self.logger.debug(f"Re-encoded {recorded_lines} lines as {encoding}.")
        return recorded_lines

    def copy(
        self,
        source: Optional[BinaryIO],
        destination: Optional[BinaryIO],
        mode: Union[CopyMode, str] = CopyMode.BLOCK,
        buffer_size: Optional[int] = None,
        *,
        staged: bool = False,
        encoding: Optional[str] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> int:
        """
        Copies ``source`` into ``destination``.

        Args:
            source: An open, readable binary stream.
            destination: An open, writable binary stream.
            mode: Transfer granularity, one of byte, block or line.
            buffer_size: Bytes per read; defaults to the engine setting.
            staged: Buffer the whole source in memory before writing
                (byte and block modes only).
            encoding: Target text encoding for line mode.
            progress: Called with the size of every written chunk.

        Returns:
            The number of bytes written, or of lines in line mode.

        Raises:
            InvalidArgumentError: If a stream is missing, the mode is unknown
                                  or the buffer size is not positive.
        """

        if source is None:
            raise InvalidArgumentError("Source stream cannot be None.")
        if destination is None:
            raise InvalidArgumentError("Destination stream cannot be None.")

        mode = CopyMode.parse(mode)
        size = (
            self.buffer_size
            if buffer_size is None
            else self._check_buffer_size(buffer_size)
        )

        if mode is CopyMode.LINE:
            return self._copy_lines(
                source, destination, encoding or self.line_encoding
            )

        if staged:
            return self._copy_staged(source, destination, mode, size, progress)

        return self._drain(self._chunks(source, mode, size), destination, progress)
