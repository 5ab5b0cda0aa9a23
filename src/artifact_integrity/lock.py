"""Lockfile encoding of checksums.

A lockfile carries one ``CHECKSUMS`` section with a line per artifact::

    CHECKSUMS
      foo-1.0 sha256-abc...,sha512-def...
      bar-2.1-x86_64-linux

The artifact names are opaque keys here; their ordering and format belong to the
surrounding lockfile.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .checksum import Checksum
from .errors import LockParseError
from .store import ChecksumStore

SECTION_HEADER = "CHECKSUMS"
INDENT = "  "


def parse_lock_entries(text: str, source: str) -> list[Checksum]:
    """Return one Checksum per ``algo-digest`` token of ``text``, all attributed to ``source``."""
    checksums: list[Checksum] = []
    if not text.strip():
        return checksums

    for token in text.split(","):
        algo, sep, digest = token.strip().partition("-")
        if not sep or not algo or not digest:
            raise LockParseError(f"invalid checksum entry '{token.strip()}' in {source}")
        checksums.append(Checksum(algo, digest, source))
    return checksums


def serialize_lock_entries(checksums: Iterable[Checksum]) -> str:
    """Join the lock forms of ``checksums`` in lexicographic order."""
    return ",".join(sorted(checksum.to_lock() for checksum in checksums))


@dataclass(slots=True)
class LockSection:
    """Parsed ``CHECKSUMS`` section."""

    artifact_ids: list[str] = field(default_factory=list)
    store: ChecksumStore = field(default_factory=ChecksumStore)


def _section_lines(lines: list[str]) -> tuple[int, int] | None:
    """Return the [start, end) line range of the section including its header."""
    try:
        start = lines.index(SECTION_HEADER)
    except ValueError:
        return None

    end = start + 1
    while end < len(lines) and lines[end].startswith(" ") and lines[end].strip():
        end += 1
    return start, end


def parse_checksums_section(text: str, source: str) -> LockSection:
    """Parse the ``CHECKSUMS`` section of a whole lockfile document.

    A document without the section yields an empty LockSection. Conflicting
    duplicate lines raise the store's SecurityViolationError.
    """
    section = LockSection()
    lines = text.splitlines()
    bounds = _section_lines(lines)
    if bounds is None:
        return section

    start, end = bounds
    for line in lines[start + 1 : end]:
        name, _, entries = line.strip().partition(" ")
        if name not in section.artifact_ids:
            section.artifact_ids.append(name)
        section.store.register(name, parse_lock_entries(entries, source))
    return section


def render_checksums_section(store: ChecksumStore, artifact_ids: Iterable[str] | None = None) -> str:
    """Render ``store`` as a ``CHECKSUMS`` section with sorted lines.

    ``artifact_ids`` lists the names to render; names without checksums get a
    bare line. Defaults to every artifact in the store.
    """
    names = store.artifact_ids() if artifact_ids is None else list(artifact_ids)
    rendered: list[str] = []
    for name in dict.fromkeys(names):
        entries = serialize_lock_entries(store.get(name).values())
        rendered.append(f"{INDENT}{name} {entries}" if entries else f"{INDENT}{name}")

    return "\n".join([SECTION_HEADER, *sorted(rendered)]) + "\n"


def replace_checksums_section(document: str, section_text: str) -> str:
    """Swap the ``CHECKSUMS`` section of ``document`` for ``section_text``.

    The section is appended after a blank line when the document has none.
    """
    lines = document.splitlines()
    replacement = section_text.rstrip("\n").splitlines()
    bounds = _section_lines(lines)

    if bounds is None:
        while lines and not lines[-1].strip():
            lines.pop()
        if lines:
            lines.append("")
        lines.extend(replacement)
    else:
        start, end = bounds
        lines[start:end] = replacement

    return "\n".join(lines) + "\n"
