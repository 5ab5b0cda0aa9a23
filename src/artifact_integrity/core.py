"""Verification entrypoints.

This module ties the engine together for callers such as the CLI: it reads the
lockfile's CHECKSUMS section, digests artifact files (and any remote copies) on
a thread pool and compares them. All store mutation happens on the calling
thread.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from .checksum import Checksum, digests_from_source, match_digests
from .config import Settings
from .digests import FileSource
from .discovery import discover_artifacts
from .errors import SecurityViolationError
from .lock import parse_checksums_section, render_checksums_section, replace_checksums_section
from .report import aggregate
from .sources import HttpSource, PathSource
from .store import ChecksumStore

logger = logging.getLogger(__name__)


def collect_sources(
    artifact_root: Path,
    settings: Settings,
    remote: Mapping[str, str] | None = None,
) -> dict[str, list[FileSource]]:
    """Return every source known for each artifact: local copies first, then remote URLs."""
    sources: dict[str, list[FileSource]] = {
        artifact_id: [PathSource(path) for path in paths]
        for artifact_id, paths in discover_artifacts(artifact_root, settings.artifact_suffix).items()
    }
    for artifact_id, url in (remote or {}).items():
        sources.setdefault(artifact_id, []).append(HttpSource(url, timeout=settings.http_timeout))
    return dict(sorted(sources.items()))


def compute_checksums(
    sources: Mapping[str, list[FileSource]],
    settings: Settings,
) -> dict[str, list[dict[str, Checksum]]]:
    """Digest every source concurrently.

    Returns artifact id -> one algorithm -> Checksum mapping per source, in the
    order the sources were given.
    """
    if not sources:
        return {}

    with ThreadPoolExecutor(max_workers=settings.max_workers) as executor:
        futures = {
            artifact_id: [
                executor.submit(digests_from_source, source, settings.algorithms) for source in artifact_sources
            ]
            for artifact_id, artifact_sources in sources.items()
        }
        return {artifact_id: [future.result() for future in pending] for artifact_id, pending in futures.items()}


def lock_artifacts(
    artifact_root: Path,
    settings: Settings | None = None,
    remote: Mapping[str, str] | None = None,
) -> ChecksumStore:
    """Return a fresh store holding the checksums of every artifact under artifact_root.

    Raises SecurityViolationError when two copies of one artifact differ.
    """
    settings = settings or Settings()
    sources = collect_sources(artifact_root, settings, remote)
    store = ChecksumStore()
    for artifact_id, computed in compute_checksums(sources, settings).items():
        for checksums in computed:
            store.register(artifact_id, list(checksums.values()))
    logger.info("Computed checksums for %d artifact(s) under %s", len(store), artifact_root)
    return store


def relock(
    document: str,
    source: str,
    fresh: ChecksumStore,
    settings: Settings | None = None,
) -> str:
    """Merge ``fresh`` into the CHECKSUMS section of ``document`` and return the new document.

    Locked entries without a fresh counterpart are kept. A fresh digest that
    disagrees with a locked one raises SecurityViolationError, unless checksum
    validation is disabled, in which case the fresh checksums replace the
    locked ones.
    """
    settings = settings or Settings()
    section = parse_checksums_section(document, source)
    store = section.store

    if settings.disable_checksum_validation:
        logger.warning("Checksum validation is disabled; overwriting locked checksums")
        for artifact_id, checksums in fresh.items():
            store.replace(artifact_id, [checksum.copy() for checksum in checksums.values()])
    else:
        store.merge(fresh)

    artifact_ids = dict.fromkeys([*section.artifact_ids, *fresh.artifact_ids()])
    return replace_checksums_section(document, render_checksums_section(store, artifact_ids))


def _describe(source: FileSource, root: Path) -> str:
    if isinstance(source, PathSource):
        try:
            return str(source.path.relative_to(root))
        except ValueError:
            pass
    return str(source)


def verify_artifacts(
    lockfile: Path,
    artifact_root: Path,
    settings: Settings | None = None,
    remote: Mapping[str, str] | None = None,
) -> tuple[dict[str, Any], ChecksumStore]:
    """Compare artifact files (and remote copies) against the lockfile's recorded checksums.

    Every copy of an artifact is registered, so copies that disagree with the
    lockfile or with each other are reported as mismatches. Returns the
    aggregated report and a store holding the locked checksums merged with the
    computed ones (sources accumulated). The lockfile's own store is left
    untouched; mismatches are reported, not raised.
    """
    settings = settings or Settings()
    lockfile = Path(lockfile)
    artifact_root = Path(artifact_root).resolve()

    section = parse_checksums_section(lockfile.read_text(encoding="utf-8"), str(lockfile))
    sources = collect_sources(artifact_root, settings, remote)
    artifact_ids = sorted(set(section.artifact_ids) | set(sources))

    if settings.disable_checksum_validation:
        logger.warning("Checksum validation is disabled; %d artifact(s) not verified", len(artifact_ids))
        results = [{"artifact": artifact_id, "status": "skipped"} for artifact_id in artifact_ids]
        return aggregate(results), section.store.clone()

    fresh = compute_checksums(sources, settings)
    store = section.store.clone()
    results: list[dict[str, Any]] = []

    for artifact_id in artifact_ids:
        locked = section.store.get(artifact_id)
        computed = fresh.get(artifact_id)
        result: dict[str, Any] = {
            "artifact": artifact_id,
            "locked": sorted(checksum.to_lock() for checksum in locked.values()),
        }

        if not computed:
            result["status"] = "missing"
            results.append(result)
            continue

        result["sources"] = [_describe(source, artifact_root) for source in sources[artifact_id]]
        result["computed"] = sorted({c.to_lock() for checksums in computed for c in checksums.values()})
        if not locked:
            result["status"] = "new"
        elif all(match_digests(locked, checksums) for checksums in computed):
            result["status"] = "ok"
        else:
            result["status"] = "mismatch"

        try:
            for checksums in computed:
                store.register(artifact_id, list(checksums.values()))
        except SecurityViolationError as exc:
            result["status"] = "mismatch"
            result["message"] = str(exc)

        results.append(result)

    report = aggregate(results)
    logger.info(
        "Verified %d artifact(s): %d mismatch(es), %d new",
        report["totals"]["artifacts"],
        report["totals"]["mismatches"],
        report["totals"]["new"],
    )
    return report, store
