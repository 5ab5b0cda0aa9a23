"""Artifact file discovery."""

from __future__ import annotations

import logging
from pathlib import Path

from .artifact import ArtifactName, ArtifactNameError

logger = logging.getLogger(__name__)

EXCLUDES = {".git", ".venv"}


def discover_artifacts(root: Path, suffix: str = ".gem") -> dict[str, list[Path]]:
    """Find artifact files recursively under root, keyed by artifact full name.

    Every file is kept: several copies of one artifact map to a list of paths so
    callers can check they agree. Files whose stem does not parse as
    ``name-version[-platform]`` are skipped.
    """
    root = root.resolve()
    found: dict[str, list[Path]] = {}

    def should_skip(p: Path) -> bool:
        parts = set(p.parts)
        return any(ex in parts for ex in EXCLUDES)

    for path in root.rglob(f"*{suffix}"):
        if not path.is_file():
            continue
        if should_skip(path.relative_to(root)):
            continue
        artifact_id = path.name[: -len(suffix)] if suffix else path.name
        try:
            ArtifactName.parse(artifact_id)
        except ArtifactNameError as exc:
            logger.debug("Skipping %s: %s", path, exc)
            continue
        found.setdefault(artifact_id, []).append(path)

    return {artifact_id: sorted(paths) for artifact_id, paths in sorted(found.items())}
