"""Error types shared across the checksum engine."""

from __future__ import annotations


class ChecksumArgumentError(ValueError):
    """Raised when the engine is called with arguments it cannot work with."""


class UnknownAlgorithmError(ChecksumArgumentError):
    """Raised when a digest algorithm is not registered."""


class LockParseError(ChecksumArgumentError):
    """Raised when a lock entry cannot be parsed."""


class SecurityViolationError(RuntimeError):
    """Raised when two sources disagree about an artifact's digest.

    This is never retried or downgraded by the engine; the only way around it is
    the operator opting out of checksum validation in the settings.
    """

    def __init__(self, message: str, *, artifact_id: str | None = None) -> None:
        super().__init__(message)
        self.artifact_id = artifact_id


class SourceFetchError(RuntimeError):
    """Raised when a remote artifact source cannot be downloaded."""


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be loaded or is invalid."""
