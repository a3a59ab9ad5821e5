"""
Dependency Injection container for the stream_copier component.

This container uses the `dependency-injector` library to wire together the
copy engine, the service and the infrastructure adapters, based on the
validated application settings.
"""

from dependency_injector import containers, providers

from ..application.domain import DigestResolver, EncodingResolver, PathValidator
from ..application.engine import StreamCopyEngine
from ..application.service import StreamService

from .config import load_settings
from .decompression import StreamDecompressor
from .hashing import HashlibDigestResolver, StreamHasher
from .validation import CodecsEncodingResolver, FileSystemPathValidator


class Container(containers.DeclarativeContainer):
    """DI container for wiring the application components."""

    settings_source = providers.Object(None)

    config = providers.Singleton(load_settings, source=settings_source)

    path_validator: providers.Factory[PathValidator] = providers.Factory(
        FileSystemPathValidator,
    )

    encoding_resolver: providers.Factory[EncodingResolver] = providers.Factory(
        CodecsEncodingResolver,
    )

    digest_resolver: providers.Singleton[DigestResolver] = providers.Singleton(
        HashlibDigestResolver,
        algorithms=config.provided.digest.algorithms,
    )

    hasher = providers.Factory(
        StreamHasher,
        resolver=digest_resolver,
        chunk_size=config.provided.digest.chunk_size,
    )

    decompressor = providers.Factory(
        StreamDecompressor,
        chunk_size=config.provided.decompression.chunk_size,
    )

    engine = providers.Factory(
        StreamCopyEngine,
        buffer_size=config.provided.stream.buffer_size,
        line_encoding=config.provided.stream.line_encoding,
        line_separator=config.provided.stream.line_separator,
    )

    stream_service = providers.Factory(
        StreamService,
        engine=engine,
        path_validator=path_validator,
        encoding_resolver=encoding_resolver,
        decompressor=decompressor,
        hasher=hasher,
    )
