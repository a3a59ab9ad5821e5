"""
The application service exposing path-level stream operations.

StreamService validates every argument before opening a stream, opens the
source and destination files in scoped blocks, and delegates the transfer
to the StreamCopyEngine, the decompressor or the hasher.
"""

import contextlib
import io
import logging
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .domain import (
    CopyMode,
    CopyResult,
    DecompressionMethod,
    EncodingResolver,
    PathLike,
    PathValidator,
)
from .engine import ProgressCallback, StreamCopyEngine

logger = logging.getLogger(__name__)


class StreamService:
    """Orchestrates copy, decode, decompression and hashing operations."""

    def __init__(
        self,
        engine: StreamCopyEngine,
        path_validator: PathValidator,
        encoding_resolver: EncodingResolver,
        decompressor,
        hasher,
    ):
        """Initializes the service with its collaborators (ports)."""
        self.engine = engine
        self.path_validator = path_validator
        self.encoding_resolver = encoding_resolver
        self.decompressor = decompressor
        self.hasher = hasher

    def _validate_pair(self, source_path, destination_path):
        source = self.path_validator.validate(source_path, "sourcePath")
        destination = Path(
            self.path_validator.require(destination_path, "destinationPath")
        )
        return source, destination

    # --- Byte and block copies ---

    def copy_file(
        self,
        source_path: Optional[PathLike],
        destination_path: Optional[PathLike],
        mode: Union[CopyMode, str] = CopyMode.BLOCK,
        buffer_size: Optional[int] = None,
        staged: bool = False,
        progress: Optional[ProgressCallback] = None,
    ) -> CopyResult:
        """
        Copies a file in byte or block mode.

        Both paths are validated before the destination is created, so a
        missing source never truncates an existing destination.

        Returns:
            A CopyResult holding the number of bytes written.

        Raises:
            InvalidArgumentError: If a path is blank or the mode is invalid.
            NotFoundError: If the source file does not exist.
        """

        source, destination = self._validate_pair(source_path, destination_path)
        mode = CopyMode.parse(mode)
        if mode is CopyMode.LINE:
            lines = self.line_copy(source, destination)
            return CopyResult(mode=mode, count=lines, destination=destination)

        logger.info(f"Copying {source.name} to {destination.name} ({mode.value})...")
        with open(source, "rb") as source_stream, \
                open(destination, "wb") as destination_stream:
            count = self.engine.copy(
                source_stream,
                destination_stream,
                mode,
                buffer_size,
                staged=staged,
                progress=progress,
            )

        logger.info(f"Copied {count} bytes to {destination.name}.")
        return CopyResult(mode=mode, count=count, destination=destination)

    def byte_copy(self, source_path, destination_path) -> int:
        """Copies a file through one reusable byte buffer."""
        return self.copy_file(source_path, destination_path, CopyMode.BYTE).count

    def byte_copy_in_memory(self, source_path, destination_path) -> int:
        """Copies a file byte-wise, staging the whole content in memory."""
        return self.copy_file(
            source_path, destination_path, CopyMode.BYTE, staged=True
        ).count

    def block_copy(self, source_path, destination_path) -> int:
        return self.copy_file(source_path, destination_path, CopyMode.BLOCK).count

    def block_copy_in_memory(self, source_path, destination_path) -> int:
        return self.copy_file(
            source_path, destination_path, CopyMode.BLOCK, staged=True
        ).count

    def block_copy_buffered(self, source_path, destination_path) -> int:
        """Copies blocks read through a BufferedReader over the raw file."""
        source, destination = self._validate_pair(source_path, destination_path)
        size = self.engine.buffer_size

        with contextlib.ExitStack() as stack:
            buffered = stack.enter_context(
                io.BufferedReader(open(source, "rb", buffering=0), size)
            )
            destination_stream = stack.enter_context(open(destination, "wb"))
            count = self.engine.copy(buffered, destination_stream, CopyMode.BLOCK)

        logger.info(f"Copied {count} bytes to {destination.name} (buffered).")
        return count

    def block_copy_buffered_in_memory(self, source_path, destination_path) -> int:
        """Stages blocks through a BufferedWriter over an in-memory buffer."""
        source, destination = self._validate_pair(source_path, destination_path)
        size = self.engine.buffer_size

        with contextlib.ExitStack() as stack:
            source_stream = stack.enter_context(open(source, "rb"))
            memory = io.BytesIO()
            staging = stack.enter_context(io.BufferedWriter(memory, size))
            self.engine.copy(source_stream, staging, CopyMode.BLOCK)
            staging.flush()

            memory.seek(0)
            destination_stream = stack.enter_context(open(destination, "wb"))
            count = self.engine.copy(memory, destination_stream, CopyMode.BLOCK)

        logger.info(f"Copied {count} bytes to {destination.name} (buffered, staged).")
        return count

    # --- Text ---

    def line_copy(
        self,
        source_path: Optional[PathLike],
        destination_path: Optional[PathLike],
        encoding: Optional[str] = None,
    ) -> int:
        """
        Copies a UTF-8 text file line by line, re-encoding every line.

        No separator follows the last line.

        Returns:
            The number of lines written.
        """

        source, destination = self._validate_pair(source_path, destination_path)
        target_encoding = self.encoding_resolver.resolve(
            encoding or self.engine.line_encoding
        )

        logger.info(f"Copying lines of {source.name} as {target_encoding}...")
        with open(source, "rb") as source_stream, \
                open(destination, "wb") as destination_stream:
            lines = self.engine.copy(
                source_stream,
                destination_stream,
                CopyMode.LINE,
                encoding=target_encoding,
            )

        logger.info(f"Copied {lines} lines to {destination.name}.")
        return lines

    def read_encoded_text(
        self, source_path: Optional[PathLike], encoding: Optional[str]
    ) -> str:
        """
        Reads a whole file decoded with the named encoding.

        Raises:
            InvalidArgumentError: If the path or encoding is blank, or the
                                  encoding is unknown.
            NotFoundError: If the source file does not exist.
        """

        source = self.path_validator.validate(source_path, "sourcePath")
        codec = self.encoding_resolver.resolve(encoding)

        with open(source, "r", encoding=codec, errors="replace", newline="") as reader:
            return reader.read()

    # --- Decompression ---

    def decompress(
        self,
        source_path: Optional[PathLike],
        method: Union[DecompressionMethod, str, None],
    ) -> BinaryIO:
        """
        Opens a file and wraps it in the filter for ``method``.

        The method is resolved before the file is opened. The returned stream
        is open and unread; the caller owns it and closing it closes the file.

        Raises:
            InvalidArgumentError: If the path is blank.
            NotFoundError: If the source file does not exist.
            UnsupportedAlgorithmError: If the method is unknown.
        """

        source = self.path_validator.validate(source_path, "sourcePath")
        method = DecompressionMethod.parse(method)

        stream = open(source, "rb")
        try:
            return self.decompressor.wrap(stream, method)
        except BaseException:
            stream.close()
            raise

    def decompress_to_file(
        self,
        source_path: Optional[PathLike],
        destination_path: Optional[PathLike],
        method: Union[DecompressionMethod, str, None],
        progress: Optional[ProgressCallback] = None,
    ) -> int:
        """Decompresses a file into ``destination_path``; returns bytes written."""
        destination = Path(
            self.path_validator.require(destination_path, "destinationPath")
        )

        with self.decompress(source_path, method) as decoded, \
                open(destination, "wb") as destination_stream:
            count = self.engine.copy(
                decoded, destination_stream, CopyMode.BLOCK, progress=progress
            )

        logger.info(f"Decompressed {count} bytes to {destination.name}.")
        return count

    # --- Hashing ---

    def calculate_hash(
        self, stream: Optional[BinaryIO], algorithm: Optional[str]
    ) -> str:
        """
        Hashes the remainder of an open stream.

        Returns:
            The digest as uppercase hex, two characters per byte.
        """
        return self.hasher.calculate(stream, algorithm)

    def hash_file(
        self, source_path: Optional[PathLike], algorithm: Optional[str]
    ) -> str:
        """Hashes a file. The algorithm is resolved before the file is opened."""
        source = self.path_validator.validate(source_path, "sourcePath")
        self.hasher.resolver.resolve(algorithm)

        with open(source, "rb") as stream:
            digest = self.hasher.calculate(stream, algorithm)

        logger.info(f"{algorithm} of {source.name}: {digest}")
        return digest
