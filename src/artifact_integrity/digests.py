"""Digest engine registry and the single-pass digest computer."""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable, Iterable
from contextlib import AbstractContextManager
from typing import Any, BinaryIO, Protocol, TypeAlias, runtime_checkable

from .errors import ChecksumArgumentError, UnknownAlgorithmError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 16_384

DigestEngine: TypeAlias = Any
EngineFactory: TypeAlias = Callable[[], DigestEngine]


@runtime_checkable
class FileSource(Protocol):
    """Something that can hand out a readable byte stream and rewind it."""

    def open_stream(self) -> AbstractContextManager[BinaryIO]: ...

    def rewind(self, stream: BinaryIO) -> None: ...


# Keyed by uppercase algorithm name; each factory returns a fresh engine.
DIGEST_ENGINES: dict[str, EngineFactory] = {
    "MD5": hashlib.md5,
    "SHA1": hashlib.sha1,
    "SHA224": hashlib.sha224,
    "SHA256": hashlib.sha256,
    "SHA384": hashlib.sha384,
    "SHA512": hashlib.sha512,
}


def get_digest_engine(name: str) -> DigestEngine:
    """Return a fresh engine for ``name`` (e.g. ``SHA256``), or raise UnknownAlgorithmError."""
    factory = DIGEST_ENGINES.get(name)
    if factory is None:
        known = ", ".join(sorted(DIGEST_ENGINES.keys()))
        raise UnknownAlgorithmError(f"Unknown digest algorithm '{name}'. Known algorithms: {known}")
    return factory()


def get_known_algorithms() -> list[str]:
    """Return the registered algorithms as lowercase identifiers."""
    return sorted(name.lower() for name in DIGEST_ENGINES)


def compute_digests(source: FileSource, algorithms: Iterable[str]) -> dict[str, DigestEngine]:
    """Feed the whole of ``source`` to one engine per algorithm in a single pass.

    Returns a mapping of lowercase algorithm -> engine; call ``hexdigest()`` on
    the engines to finalize. The source is rewound before returning so later
    readers see it from the start.
    """
    if not isinstance(source, FileSource):
        raise ChecksumArgumentError(f"not a valid file source: {source!r}")

    digests = {str(algo).lower(): get_digest_engine(str(algo).upper()) for algo in algorithms}
    if not digests:
        raise ChecksumArgumentError("at least one digest algorithm is required")

    total = 0
    with source.open_stream() as stream:
        while True:
            block = stream.read(CHUNK_SIZE)
            if not block:
                break
            total += len(block)
            for engine in digests.values():
                engine.update(block)

        source.rewind(stream)

    logger.debug("Digested %d bytes from %s with %s", total, source, ", ".join(digests))
    return digests
