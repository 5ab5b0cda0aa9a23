"""Checksum value object and helpers over collections of checksums."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from .digests import FileSource, compute_digests
from .errors import ChecksumArgumentError, SecurityViolationError

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHMS: tuple[str, ...] = ("sha256",)


class Checksum:
    """A digest for one algorithm plus every source it was observed from.

    ``digest`` and ``algorithm`` are fixed at construction; only the sources
    grow, through :meth:`merge`. Sources keep insertion order, so the display
    form always starts with the source seen earliest.
    """

    __slots__ = ("_algorithm", "_digest", "_sources")

    def __init__(self, algorithm: str, digest: str, source: str) -> None:
        self._algorithm = str(algorithm).lower()
        self._digest = str(digest)
        self._sources: dict[str, None] = {source: None}

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def digest(self) -> str:
        return self._digest

    @property
    def sources(self) -> tuple[str, ...]:
        return tuple(self._sources)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Checksum):
            return NotImplemented
        return (
            other.digest == self.digest
            and other.algorithm == self.algorithm
            and set(other._sources) == set(self._sources)
        )

    def __hash__(self) -> int:
        return hash(self._digest)

    def __repr__(self) -> str:
        return f"Checksum({self._algorithm!r}, {self._digest!r}, sources={list(self._sources)!r})"

    def __str__(self) -> str:
        return self.to_display()

    def to_lock(self) -> str:
        return f"{self._algorithm}-{self._digest}"

    def to_display(self) -> str:
        return f"{self.to_lock()} (from {', '.join(self._sources)})"

    def copy(self) -> Checksum:
        clone = Checksum.__new__(Checksum)
        clone._algorithm = self._algorithm
        clone._digest = self._digest
        clone._sources = dict(self._sources)
        return clone

    def merge(self, other: Checksum) -> Checksum:
        """Absorb the sources of ``other`` when it agrees on the digest.

        Raises SecurityViolationError, leaving both checksums untouched, when the
        digests differ.
        """
        if self._algorithm != other.algorithm:
            raise ChecksumArgumentError("cannot merge checksums of different algorithms")

        if self._digest != other.digest:
            bullets = "\n* ".join(self._sources)
            logger.warning("Checksum mismatch: %s vs %s", other.to_display(), self.to_display())
            raise SecurityViolationError(f"{other.to_display()}\n{self.to_display()} from:\n* {bullets}\n")

        for source in other.sources:
            self._sources.setdefault(source, None)
        return self


def digests_from_source(
    source: FileSource,
    algorithms: Iterable[str] = DEFAULT_ALGORITHMS,
    *,
    origin: str | None = None,
) -> dict[str, Checksum]:
    """Digest ``source`` once and wrap every result as a Checksum.

    ``origin`` is the provenance recorded on each checksum; it defaults to
    ``str(source)``.
    """
    label = origin if origin is not None else str(source)
    engines = compute_digests(source, algorithms)
    return {algo: Checksum(algo, engine.hexdigest(), label) for algo, engine in engines.items()}


def _digest_of(value: Checksum | str) -> str:
    return value.digest if isinstance(value, Checksum) else str(value)


def match_digests(
    stored: Mapping[str, Checksum | str],
    fresh: Mapping[str, Checksum | str],
) -> bool:
    """Return False only when a shared algorithm has differing digests.

    Nothing to compare, or no algorithm in common, counts as a match.
    """
    if not stored and not fresh:
        return True

    common = set(stored) & set(fresh)
    if not common:
        return True

    return all(_digest_of(stored[algo]) == _digest_of(fresh[algo]) for algo in common)

