from __future__ import annotations

import hashlib
import io

import pytest

from stream_copier.application.exceptions import (
    ConfigurationError,
    InvalidArgumentError,
    UnsupportedAlgorithmError,
)
from stream_copier.infrastructure.hashing import HashlibDigestResolver, StreamHasher

EMPTY_SHA256 = "E3B0C44298FC1C149AFBF4C8996FB92427AE41E4649B934CA495991B7852B855"


@pytest.fixture
def hasher() -> StreamHasher:
    return StreamHasher(HashlibDigestResolver(), chunk_size=3)


def test_sha256_of_empty_stream(hasher: StreamHasher):
    assert hasher.calculate(io.BytesIO(b""), "SHA256") == EMPTY_SHA256


@pytest.mark.parametrize("name", ["MD5", "SHA1", "SHA256", "SHA384", "SHA512"])
def test_default_algorithms_match_hashlib(hasher: StreamHasher, name):
    data = b"The quick brown fox jumps over the lazy dog"
    expected = hashlib.new(name.lower(), data).hexdigest().upper()

    assert hasher.calculate(io.BytesIO(data), name) == expected


@pytest.mark.parametrize("name", ["sha256", "SHA-256", "sha_256", " Sha256 "])
def test_names_are_normalized(hasher: StreamHasher, name):
    assert hasher.calculate(io.BytesIO(b""), name) == EMPTY_SHA256


def test_digest_is_uppercase_hex_without_separators(hasher: StreamHasher):
    digest = hasher.calculate(io.BytesIO(b"abc"), "MD5")

    assert digest == "900150983CD24FB0D6963F7D28E17F72"
    assert len(digest) == 2 * hashlib.md5().digest_size


def test_hash_covers_only_remaining_bytes(hasher: StreamHasher):
    stream = io.BytesIO(b"skip-abc")
    stream.seek(5)

    assert hasher.calculate(stream, "MD5") == "900150983CD24FB0D6963F7D28E17F72"


def test_unknown_algorithm_leaves_stream_unread(hasher: StreamHasher):
    stream = io.BytesIO(b"payload")

    with pytest.raises(UnsupportedAlgorithmError):
        hasher.calculate(stream, "NOPE")

    assert stream.tell() == 0


@pytest.mark.parametrize("name", [None, "", "   "])
def test_blank_algorithm_name(hasher: StreamHasher, name):
    with pytest.raises(InvalidArgumentError):
        hasher.calculate(io.BytesIO(b""), name)


def test_null_stream(hasher: StreamHasher):
    with pytest.raises(InvalidArgumentError):
        hasher.calculate(None, "SHA256")


def test_disabled_algorithm_is_unsupported():
    resolver = HashlibDigestResolver(algorithms=["SHA256"])

    assert resolver.algorithms == ["SHA256"]
    with pytest.raises(UnsupportedAlgorithmError):
        resolver.resolve("MD5")


def test_unavailable_algorithm_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        HashlibDigestResolver(algorithms=["SHA256", "NOT-A-HASH"])


def test_register_custom_factory():
    resolver = HashlibDigestResolver(algorithms=[])
    resolver.register("blake2s-128", lambda: hashlib.blake2s(digest_size=16))

    hasher = StreamHasher(resolver)
    expected = hashlib.blake2s(b"abc", digest_size=16).hexdigest().upper()

    assert hasher.calculate(io.BytesIO(b"abc"), "BLAKE2S128") == expected


@pytest.mark.parametrize("name", ["SHAKE_128", "shake-256"])
def test_variable_length_algorithms_are_a_configuration_error(name):
    with pytest.raises(ConfigurationError):
        HashlibDigestResolver(algorithms=["SHA256", name])


def test_variable_length_custom_factory_is_rejected():
    resolver = HashlibDigestResolver(algorithms=[])

    with pytest.raises(ConfigurationError):
        resolver.register("xof", hashlib.shake_128)
