"""artifact-integrity core package.

Computes digests of package artifacts, keeps them together with where they were
observed, and fails loudly when two sources disagree about an artifact.
"""

from .checksum import Checksum, digests_from_source, match_digests
from .errors import ChecksumArgumentError, SecurityViolationError
from .lock import parse_lock_entries, serialize_lock_entries
from .store import ChecksumStore

__all__ = [
    "Checksum",
    "ChecksumArgumentError",
    "ChecksumStore",
    "SecurityViolationError",
    "digests_from_source",
    "match_digests",
    "parse_lock_entries",
    "serialize_lock_entries",
]
