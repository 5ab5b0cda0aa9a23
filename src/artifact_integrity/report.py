"""Report aggregation and schema-friendly output."""

from __future__ import annotations

from typing import Any


def aggregate(artifacts: list[dict[str, Any]]) -> dict[str, Any]:
    """Aggregate per-artifact results into a single report.

    Each entry of ``artifacts`` is expected to carry at least ``artifact`` and
    ``status`` (one of ``ok``, ``new``, ``mismatch``, ``missing`` or
    ``skipped``). Entries are passed through unchanged.
    """

    mismatches = sum(1 for a in artifacts if a.get("status") == "mismatch")
    new = sum(1 for a in artifacts if a.get("status") == "new")

    report: dict[str, Any] = {
        "version": "1",
        "hasMismatches": mismatches > 0,
        "artifacts": artifacts,
        "totals": {
            "artifacts": len(artifacts),
            "mismatches": mismatches,
            "new": new,
        },
    }

    return report
