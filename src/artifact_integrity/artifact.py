"""Artifact full names: ``name-version[-platform]``."""

from __future__ import annotations

from dataclasses import dataclass

from packaging.version import InvalidVersion, Version


class ArtifactNameError(ValueError):
    """Raised when a string is not a valid artifact full name."""


def _is_version(candidate: str) -> bool:
    if not candidate or not candidate[0].isdigit():
        return False
    try:
        Version(candidate)
    except InvalidVersion:
        return False
    return True


@dataclass(frozen=True, slots=True)
class ArtifactName:
    """Name, version and optional platform of one package artifact."""

    name: str
    version: str
    platform: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ArtifactNameError("Artifact name must be non-empty")
        if not self.version:
            raise ArtifactNameError(f"Artifact '{self.name}' is missing a version")

    @property
    def full_name(self) -> str:
        return lock_name(self.name, self.version, self.platform)

    @classmethod
    def parse(cls, full_name: str) -> ArtifactName:
        """Split ``full_name`` at the first segment that reads as a version.

        Names may themselves contain dashes (``net-http-0.4.1``); everything after
        the version is the platform (``nokogiri-1.16.0-x86_64-linux``).
        """
        parts = full_name.split("-")
        for index in range(1, len(parts)):
            if _is_version(parts[index]):
                name = "-".join(parts[:index])
                platform = "-".join(parts[index + 1 :]) or None
                return cls(name=name, version=parts[index], platform=platform)
        raise ArtifactNameError(f"No version found in artifact name '{full_name}'")


def lock_name(name: str, version: str, platform: str | None = None) -> str:
    """Return the lockfile key for an artifact."""
    # the generic "ruby" platform is implied by a bare name-version
    if platform and platform != "ruby":
        return f"{name}-{version}-{platform}"
    return f"{name}-{version}"
