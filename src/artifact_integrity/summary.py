"""Human-readable Markdown summary of a verification report."""

from __future__ import annotations

from typing import Any

_STATUS_LABELS = {
    "ok": "OK",
    "new": "NEW",
    "mismatch": "MISMATCH",
    "missing": "MISSING",
    "skipped": "SKIPPED",
}


def render_summary(report: dict[str, Any]) -> str:
    """Return a Markdown string with totals and a table of verified artifacts."""
    totals = report.get("totals", {})
    artifacts = report.get("artifacts", [])

    lines = []
    lines.append("# artifact-integrity Summary")
    lines.append("")
    lines.append(
        f"Total artifacts: {totals.get('artifacts', 0)} | "
        f"Mismatches: {totals.get('mismatches', 0)} | New: {totals.get('new', 0)}"
    )
    lines.append("")
    lines.append("| Artifact | Status | Locked | Computed |")
    lines.append("| --- | --- | --- | --- |")

    for entry in artifacts:
        name = entry.get("artifact") or "(unknown artifact)"
        status = _STATUS_LABELS.get(entry.get("status", ""), str(entry.get("status", "")))
        locked = ",".join(entry.get("locked", []) or []) or "n/a"
        computed = ",".join(entry.get("computed", []) or []) or "n/a"
        lines.append(f"| {name} | {status} | {locked} | {computed} |")

    if not artifacts:
        lines.append("| (no artifacts found) | n/a | n/a | n/a |")

    return "\n".join(lines) + "\n"
