"""Filesystem and codec implementations of the validation ports."""

import codecs
import logging
from pathlib import Path
from typing import Optional

from ..application.domain import EncodingResolver, PathLike, PathValidator
from ..application.exceptions import InvalidArgumentError, NotFoundError


class FileSystemPathValidator(PathValidator):
    """Validates paths against the local filesystem."""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    def require(self, value: Optional[PathLike], name: str) -> str:
        """
        Rejects a missing or blank value.

        Args:
            value: The path or name to check.
            name: The argument name used in the error message.

        Returns:
            The value as a string.

        Raises:
            InvalidArgumentError: If the value is None, empty or whitespace.
        """

        text = "" if value is None else str(value)
        if not text.strip():
            raise InvalidArgumentError(
                f"{name} cannot be null or empty or whitespace."
            )
        return text

    def validate(self, path: Optional[PathLike], name: str) -> Path:
        """
        Guarantee that ``path`` names an existing regular file.

        Raises:
            InvalidArgumentError: If the path is None or blank.
            NotFoundError: If no file exists at the path.
        """

        candidate = Path(self.require(path, name))
        if not candidate.is_file():
            raise NotFoundError(
                f"File '{candidate}' not found. Parameter name: {name}."
            )

        self.logger.debug(f"Validated {name}: {candidate}")
        return candidate


class CodecsEncodingResolver(EncodingResolver):
    """Resolves encoding identifiers through the ``codecs`` registry."""

    def resolve(self, name: Optional[str]) -> str:
        """
        Returns the canonical codec name for ``name``.

        Raises:
            InvalidArgumentError: If the name is blank or not a text encoding.
        """

        if name is None or not name.strip():
            raise InvalidArgumentError(
                "encoding cannot be null or empty or whitespace."
            )

        try:
            info = codecs.lookup(name.strip())
        except LookupError:
            raise InvalidArgumentError(f"Unknown encoding: '{name}'.") from None

        # Bytes-to-bytes codecs such as 'base64' or 'zlib' cannot decode text.
        if not getattr(info, "_is_text_encoding", True):
            raise InvalidArgumentError(f"'{name}' is not a text encoding.")

        return info.name
