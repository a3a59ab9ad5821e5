"""
Pydantic models for validating the Dynaconf settings.

These models serve as a strict contract for the configuration, so that a
bad value in settings.toml or the environment is caught when the container
is built rather than in the middle of a copy.
"""

from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, PositiveInt, ValidationError, field_validator

from ..application.exceptions import ConfigurationError

_SECTIONS = ("stream", "digest", "decompression", "logging")


class StreamSettings(BaseModel):
    """Defaults for the copy engine."""

    buffer_size: PositiveInt = 4096
    line_encoding: str = "utf-8"
    line_separator: str = "\n"


class DigestSettings(BaseModel):
    """The enabled digest algorithms and how streams are fed to them."""

    algorithms: List[str] = ["MD5", "SHA1", "SHA256", "SHA384", "SHA512"]
    default_algorithm: str = "SHA256"
    chunk_size: PositiveInt = 65536


class DecompressionSettings(BaseModel):
    """Compressed bytes pulled from the source per read."""

    chunk_size: PositiveInt = 65536


class LoggingSettings(BaseModel):
    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()


class CopierSettings(BaseModel):
    """Represents the complete, validated configuration."""

    stream: StreamSettings = StreamSettings()
    digest: DigestSettings = DigestSettings()
    decompression: DecompressionSettings = DecompressionSettings()
    logging: LoggingSettings = LoggingSettings()


def _lower_keys(section: Any) -> Any:
    if isinstance(section, Mapping):
        return {str(key).lower(): value for key, value in section.items()}
    return section


def load_settings(source: Optional[Any] = None) -> CopierSettings:
    """
    Validates a Dynaconf object (or any mapping) into CopierSettings.

    Args:
        source: The settings to validate; defaults to the project settings.

    Raises:
        ConfigurationError: If any value fails validation.
    """

    if source is None:
        from ..settings import settings as source

    raw = {
        name: _lower_keys(source.get(name))
        for name in _SECTIONS
        if source.get(name) is not None
    }

    try:
        return CopierSettings.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
