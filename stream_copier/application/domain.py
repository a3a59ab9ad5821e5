"""
This module defines the core domain models for the application.

These classes represent the technology-agnostic values the copy engine and
the service operate on, together with the ports the service depends on.
"""

import dataclasses
import enum
from pathlib import Path

from abc import ABC, abstractmethod
from typing import Optional, Union

from .exceptions import InvalidArgumentError, UnsupportedAlgorithmError

PathLike = Union[str, Path]


# --- Domain Models ---

class CopyMode(enum.Enum):
    """Transfer granularity of a copy operation."""

    BYTE = "byte"
    BLOCK = "block"
    LINE = "line"

    @classmethod
    def parse(cls, value: Union["CopyMode", str, None]) -> "CopyMode":
        """Resolves a mode from an enum member or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidArgumentError(f"Unknown copy mode: {value!r}")


class DecompressionMethod(enum.Enum):
    """The closed set of supported decompression filters."""

    NONE = "none"
    DEFLATE = "deflate"
    GZIP = "gzip"
    BROTLI = "brotli"

    @classmethod
    def parse(
        cls, value: Union["DecompressionMethod", str, None]
    ) -> "DecompressionMethod":
        """Resolves a method from an enum member or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise UnsupportedAlgorithmError(
            f"Unsupported decompression method: {value!r}"
        )


@dataclasses.dataclass(frozen=True)
class CopyResult:
    """Outcome of a path-level copy.

    ``count`` holds bytes for the byte and block modes, lines for line mode.
    """

    mode: CopyMode
    count: int
    destination: Path


# --- Ports (Interfaces) ---

class PathValidator(ABC):
    """A port for validating file paths before any stream is opened."""

    @abstractmethod
    def validate(self, path: Optional[PathLike], name: str) -> Path:
        """
        Checks that ``path`` references an existing file.
        Raises InvalidArgumentError or NotFoundError.
        """
        pass

    @abstractmethod
    def require(self, value: Optional[PathLike], name: str) -> str:
        """Checks that ``value`` is not None or blank."""
        pass


class EncodingResolver(ABC):
    """A port for turning an encoding identifier into a codec name."""

    @abstractmethod
    def resolve(self, name: Optional[str]) -> str:
        """Returns the canonical codec name. Raises InvalidArgumentError."""
        pass


class DigestResolver(ABC):
    """A port for looking up streaming digest algorithms by name."""

    @abstractmethod
    def resolve(self, name: Optional[str]):
        """
        Returns a fresh digest object exposing ``update`` and ``digest``.
        Raises UnsupportedAlgorithmError for unknown names.
        """
        pass
