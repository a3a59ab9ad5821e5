"""
Core exceptions for the stream copier.

This module defines a hierarchy of custom exceptions to allow for granular
error handling and clear separation of failure domains.
"""


class CopierError(Exception):
    """Base exception for all component-specific errors."""
    pass


# --- Configuration Errors ---

class ConfigurationError(CopierError):
    """Raised for errors related to application configuration."""
    pass


# --- Domain Errors ---

class DomainError(CopierError):
    """Base class for errors related to invalid requests or stream failures."""
    pass


class InvalidArgumentError(DomainError):
    """Raised when a path, name, stream or size argument is missing or invalid."""
    pass


class NotFoundError(DomainError):
    """Raised when a source file does not exist."""
    pass


class UnsupportedAlgorithmError(DomainError):
    """Raised for unknown decompression methods or digest algorithms."""
    pass


class ProcessingError(DomainError):
    """Raised when a stream cannot be transformed."""
    pass


class DecompressionError(ProcessingError):
    """Raised when compressed input is corrupt or truncated."""
    pass
