"""Per-artifact checksum store with conflict detection."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from .checksum import Checksum
from .errors import SecurityViolationError

logger = logging.getLogger(__name__)

_EMPTY: Mapping[str, Checksum] = MappingProxyType({})


def _remediation_message(artifact_id: str, detail: str) -> str:
    return (
        f"Multiple different checksums were found for {artifact_id}.\n"
        f"This means that there are multiple different `{artifact_id}` artifact files.\n"
        "This is a potential security issue, since the installer could be attempting "
        "to install a different artifact than what you expect.\n"
        "\n"
        f"{detail}"
        "To resolve this issue:\n"
        "1. delete any downloaded artifacts referenced above\n"
        "2. reinstall\n"
        "\n"
        "If you are sure that the new checksum is correct, you can "
        f"remove the `{artifact_id}` entry under the lockfile `CHECKSUMS` "
        "section and reinstall.\n"
        "\n"
        "If you wish to continue installing the downloaded artifact, and are certain it does not pose a "
        "security issue despite the mismatching checksum, do the following:\n"
        "1. set `disable_checksum_validation` to true in the settings to turn off checksum verification\n"
        "2. reinstall\n"
    )


class ChecksumStore:
    """Maps artifact id -> algorithm -> the one Checksum known for it.

    Not synchronized: callers running registrations from several threads must
    serialize them, or work on a :meth:`clone` and :meth:`merge` it back.
    """

    def __init__(self) -> None:
        self._store: dict[str, dict[str, Checksum]] = {}

    def __contains__(self, artifact_id: object) -> bool:
        return artifact_id in self._store

    def __len__(self) -> int:
        return len(self._store)

    def __iter__(self) -> Iterator[str]:
        return iter(self._store)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChecksumStore):
            return NotImplemented
        return self._store == other._store

    def __repr__(self) -> str:
        return f"ChecksumStore({self._store!r})"

    def artifact_ids(self) -> list[str]:
        return sorted(self._store)

    def items(self) -> Iterator[tuple[str, Mapping[str, Checksum]]]:
        for artifact_id, checksums in self._store.items():
            yield artifact_id, MappingProxyType(checksums)

    def get(self, artifact_id: str) -> Mapping[str, Checksum]:
        """Return the checksums recorded for ``artifact_id``; never creates an entry."""
        checksums = self._store.get(artifact_id)
        if checksums is None:
            return _EMPTY
        return MappingProxyType(checksums)

    def _slot(self, artifact_id: str) -> dict[str, Checksum]:
        return self._store.setdefault(artifact_id, {})

    def delete(self, artifact_id: str) -> None:
        self._store.pop(artifact_id, None)

    def replace(self, artifact_id: str, checksums: Checksum | Iterable[Checksum]) -> None:
        self.delete(artifact_id)
        self.register(artifact_id, checksums)

    def register(self, artifact_id: str, checksums: Checksum | Iterable[Checksum]) -> None:
        """Record ``checksums`` for ``artifact_id``, merging with what is already known.

        Raises SecurityViolationError naming the artifact when an incoming digest
        disagrees with a recorded one. The recorded digest is kept.
        """
        if isinstance(checksums, Checksum):
            checksums = [checksums]

        try:
            for checksum in checksums:
                slot = self._slot(artifact_id)
                existing = slot.get(checksum.algorithm)
                if existing is None:
                    slot[checksum.algorithm] = checksum
                else:
                    existing.merge(checksum)
                    logger.debug("Merged %s into %s", checksum.to_display(), artifact_id)
        except SecurityViolationError as exc:
            raise SecurityViolationError(
                _remediation_message(artifact_id, str(exc)),
                artifact_id=artifact_id,
            ) from exc

    def merge(self, other: ChecksumStore) -> None:
        for artifact_id, checksums in other._store.items():
            self.register(artifact_id, [checksum.copy() for checksum in checksums.values()])

    def clone(self) -> ChecksumStore:
        copy = ChecksumStore()
        for artifact_id, checksums in self._store.items():
            copy._store[artifact_id] = {algo: checksum.copy() for algo, checksum in checksums.items()}
        return copy
