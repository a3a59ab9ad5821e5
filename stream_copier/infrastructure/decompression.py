"""
Infrastructure adapters for decompressing streams.

Each supported method maps to a factory that wraps an open binary stream in
a lazily decoding reader. The wrapper owns the stream it wraps: closing the
returned reader closes the source as well.
"""

import io
import logging
import zlib
from typing import BinaryIO, Callable, Dict, Tuple, Type

import brotli

from ..application.domain import DecompressionMethod
from ..application.exceptions import DecompressionError

DEFAULT_CHUNK_SIZE = 65536

_RAW_DEFLATE_WBITS = -zlib.MAX_WBITS
_GZIP_WBITS = 16 + zlib.MAX_WBITS


class _BrotliDecompressor:
    """
    Gives ``brotli.Decompressor`` the subset of the zlib interface we use.

    Output of one ``process`` call is handed out at most ``max_length`` bytes
    at a time; new input is held back as ``unconsumed_tail`` until it drains.
    """

    unused_data = b""

    def __init__(self):
        self._decompressor = brotli.Decompressor()
        self._pending = memoryview(b"")
        self.unconsumed_tail = b""

    @property
    def eof(self) -> bool:
        return self._decompressor.is_finished() and not self._pending

    def decompress(self, data: bytes, max_length: int) -> bytes:
        if not self._pending:
            self._pending = memoryview(self._decompressor.process(data))
            data = b""
        output = self._pending[:max_length].tobytes()
        self._pending = self._pending[max_length:]
        self.unconsumed_tail = data
        return output


class DecompressingReader(io.RawIOBase):
    """
    A raw reader that decodes compressed input pulled from ``source``.

    Every ``readinto`` decodes at most ``len(buffer)`` bytes, so memory use
    does not grow with the expansion ratio of the input.

    Args:
        source: The compressed binary stream. Closed together with the reader.
        new_decompressor: Builds a decompressor exposing
            ``decompress(data, max_length)``, ``eof``, ``unused_data`` and
            ``unconsumed_tail``.
        errors: Exception types the decompressor raises on corrupt input.
        chunk_size: Compressed bytes pulled from the source per read.
        multi_member: Continue with the next member after a finished one,
            as gzip allows concatenated members and NUL padding.
    """

    def __init__(
        self,
        source: BinaryIO,
        new_decompressor: Callable,
        errors: Tuple[Type[BaseException], ...],
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        multi_member: bool = False,
    ):
        super().__init__()
        self._source = source
        self._new_decompressor = new_decompressor
        self._decompressor = new_decompressor()
        self._errors = errors
        self._chunk_size = chunk_size
        self._multi_member = multi_member
        self._input = b""
        self._started = False

    def readable(self) -> bool:
        return True

    def _next_member(self) -> bool:
        """Starts a new decompressor if more members follow the finished one."""
        if not self._multi_member:
            return False

        # Gzip files may be padded with NUL bytes after the last member.
        while not self._input.lstrip(b"\x00"):
            self._input = self._source.read(self._chunk_size)
            if not self._input:
                return False
        self._input = self._input.lstrip(b"\x00")

        self._decompressor = self._new_decompressor()
        return True

    def readinto(self, buffer) -> int:
        size = len(buffer)
        if size == 0:
            return 0

        while True:
            if self._decompressor.eof and not self._next_member():
                return 0

            at_end = False
            if not self._input:
                self._input = self._source.read(self._chunk_size)
                at_end = not self._input
                if at_end and not self._started:
                    # Empty input decodes to an empty stream.
                    return 0

            self._started = True
            try:
                output = self._decompressor.decompress(self._input, size)
            except self._errors as e:
                raise DecompressionError(f"Failed to decompress stream: {e}") from e

            if self._decompressor.eof:
                self._input = self._decompressor.unused_data
            else:
                self._input = self._decompressor.unconsumed_tail

            if output:
                count = len(output)
                buffer[:count] = output
                return count

            if at_end and not self._decompressor.eof:
                raise DecompressionError(
                    "Compressed stream ended before the end-of-stream marker "
                    "was reached."
                )

    def close(self):
        if not self.closed:
            try:
                self._source.close()
            finally:
                super().close()


def _wrap(reader: DecompressingReader) -> BinaryIO:
    return io.BufferedReader(reader)


class StreamDecompressor:
    """Selects and applies the decompression filter for a method."""

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """Initializes the dispatch table."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.chunk_size = chunk_size
        self._factories: Dict[DecompressionMethod, Callable[[BinaryIO], BinaryIO]] = {
            DecompressionMethod.NONE: lambda source: source,
            DecompressionMethod.DEFLATE: self._deflate,
            DecompressionMethod.GZIP: self._gzip,
            DecompressionMethod.BROTLI: self._brotli,
        }

    def _deflate(self, source: BinaryIO) -> BinaryIO:
        return _wrap(DecompressingReader(
            source,
            lambda: zlib.decompressobj(_RAW_DEFLATE_WBITS),
            (zlib.error,),
            self.chunk_size,
        ))

    def _gzip(self, source: BinaryIO) -> BinaryIO:
        return _wrap(DecompressingReader(
            source,
            lambda: zlib.decompressobj(_GZIP_WBITS),
            (zlib.error,),
            self.chunk_size,
            multi_member=True,
        ))

    def _brotli(self, source: BinaryIO) -> BinaryIO:
        return _wrap(DecompressingReader(
            source,
            _BrotliDecompressor,
            (brotli.error,),
            self.chunk_size,
        ))

    def wrap(self, source: BinaryIO, method: DecompressionMethod) -> BinaryIO:
        """
        Wraps ``source`` in the filter for ``method``.

        The returned stream is still open and nothing has been read yet.
        Closing it closes ``source``.

        Raises:
            UnsupportedAlgorithmError: If ``method`` is not a known method.
        """

        method = DecompressionMethod.parse(method)
        self.logger.debug(f"Wrapping stream with {method.value} decompression.")
        return self._factories[method](source)
