"""
Infrastructure adapters for hashing streams.

Digest algorithms are looked up by name in a table of ``hashlib``
constructors. Names compare case-insensitively and ignore dashes and
underscores, so 'sha-256', 'sha_256' and 'SHA256' are the same algorithm.
"""

import functools
import hashlib
import logging
from typing import BinaryIO, Callable, Dict, Iterable, Optional

from ..application.domain import DigestResolver
from ..application.exceptions import (
    ConfigurationError,
    InvalidArgumentError,
    UnsupportedAlgorithmError,
)

DEFAULT_ALGORITHMS = ("MD5", "SHA1", "SHA256", "SHA384", "SHA512")

DigestFactory = Callable[[], "hashlib._Hash"]


def _normalize(name: str) -> str:
    return name.strip().replace("-", "").replace("_", "").upper()


class HashlibDigestResolver(DigestResolver):
    """An adapter that implements the DigestResolver port with hashlib."""

    def __init__(self, algorithms: Iterable[str] = DEFAULT_ALGORITHMS):
        """
        Builds the lookup table for the enabled algorithms.

        Raises:
            ConfigurationError: If an algorithm is not provided by hashlib.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self._factories: Dict[str, DigestFactory] = {}
        for name in algorithms:
            self.register(name)

    def register(self, name: str, factory: Optional[DigestFactory] = None):
        """
        Adds ``name`` to the table, defaulting to ``hashlib.new(name)``.

        Raises:
            ConfigurationError: If the algorithm is not available or has no
                                fixed digest length.
        """
        key = _normalize(name)
        if factory is None:
            available = {
                _normalize(candidate): candidate
                for candidate in hashlib.algorithms_available
            }
            if key not in available:
                raise ConfigurationError(
                    f"Digest algorithm '{name}' is not available in hashlib."
                )
            factory = functools.partial(hashlib.new, available[key])

        # Extendable-output functions (SHAKE) have no fixed digest length.
        if factory().digest_size == 0:
            raise ConfigurationError(
                f"Digest algorithm '{name}' has no fixed digest length."
            )
        self._factories[key] = factory
        self.logger.debug(f"Registered digest algorithm {key}.")

    @property
    def algorithms(self):
        return sorted(self._factories)

    def resolve(self, name: Optional[str]):
        """
        Returns a fresh digest object for ``name``.

        Raises:
            InvalidArgumentError: If the name is None or blank.
            UnsupportedAlgorithmError: If the name is not in the table.
        """

        if name is None or not name.strip():
            raise InvalidArgumentError(
                "Hash algorithm name cannot be null or empty."
            )

        factory = self._factories.get(_normalize(name))
        if factory is None:
            raise UnsupportedAlgorithmError(
                f"Unsupported hash algorithm: '{name}'."
            )
        return factory()


class StreamHasher:
    """Feeds a stream into a digest and renders it as uppercase hex."""

    def __init__(self, resolver: DigestResolver, chunk_size: int = 65536):
        """Initializes the hasher."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.resolver = resolver
        self.chunk_size = chunk_size

    def calculate(self, stream: Optional[BinaryIO], algorithm: Optional[str]) -> str:
        """
        Hashes the remainder of ``stream``.

        The algorithm is resolved before the stream is touched, so an
        unsupported name leaves the stream unread.

        Raises:
            InvalidArgumentError: If the stream is None or the name is blank.
            UnsupportedAlgorithmError: If the algorithm is unknown.
        """

        if stream is None:
            raise InvalidArgumentError("Source stream cannot be null.")

        digest = self.resolver.resolve(algorithm)

        total = 0
        while chunk := stream.read(self.chunk_size):
            digest.update(chunk)
            total += len(chunk)

        self.logger.debug(f"Hashed {total} bytes with {algorithm}.")
        return digest.hexdigest().upper()
