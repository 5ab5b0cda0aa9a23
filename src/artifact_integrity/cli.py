"""Command line entrypoint for verifying and locking artifact checksums.

Usage:
  artifact-integrity verify --lockfile Gemfile.lock --artifacts vendor/cache [--url NAME=URL ...]
  artifact-integrity lock --artifacts vendor/cache [--lockfile Gemfile.lock] [--url NAME=URL ...]
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import load_settings
from .core import lock_artifacts, relock, verify_artifacts
from .errors import ConfigError, LockParseError, SecurityViolationError, SourceFetchError
from .lock import render_checksums_section
from .summary import render_summary

EXIT_MISMATCH = 10


def _remote_artifact(value: str) -> tuple[str, str]:
    artifact_id, sep, url = value.partition("=")
    if not sep or not artifact_id or not url:
        raise argparse.ArgumentTypeError(f"expected NAME=URL, got '{value}'")
    return artifact_id, url


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="artifact-integrity", description=__doc__.splitlines()[0])
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", type=Path, default=None, help="Path to the JSON settings file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    verify = subparsers.add_parser("verify", help="Check artifact files against the lockfile")
    verify.add_argument("--lockfile", type=Path, required=True)
    verify.add_argument("--artifacts", type=Path, required=True)
    verify.add_argument("--summary", type=Path, default=None, help="Write a Markdown summary here")

    lock = subparsers.add_parser("lock", help="Print or update the CHECKSUMS section")
    lock.add_argument("--artifacts", type=Path, required=True)
    lock.add_argument(
        "--lockfile",
        type=Path,
        default=None,
        help="Merge into the CHECKSUMS section of this lockfile in place",
    )

    for sub in (verify, lock):
        sub.add_argument(
            "--url",
            dest="remote",
            type=_remote_artifact,
            action="append",
            default=[],
            metavar="NAME=URL",
            help="Also digest a remote copy of artifact NAME (repeatable)",
        )

    return parser.parse_args(argv)


def _run_verify(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    report, _ = verify_artifacts(args.lockfile, args.artifacts, settings, dict(args.remote))
    print(json.dumps(report, indent=2))

    if args.summary is not None:
        args.summary.write_text(render_summary(report), encoding="utf-8")

    return EXIT_MISMATCH if report.get("hasMismatches") else 0


def _run_lock(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    store = lock_artifacts(args.artifacts, settings, dict(args.remote))

    if args.lockfile is None:
        print(render_checksums_section(store), end="")
        return 0

    document = args.lockfile.read_text(encoding="utf-8") if args.lockfile.exists() else ""
    updated = relock(document, str(args.lockfile), store, settings)
    args.lockfile.write_text(updated, encoding="utf-8")
    print(f"Updated CHECKSUMS section of {args.lockfile} ({len(store)} artifact(s))")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "verify":
            return _run_verify(args)
        return _run_lock(args)
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except SourceFetchError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except LockParseError as exc:
        print(f"ERROR: Failed to read lockfile: {exc}", file=sys.stderr)
        return 1
    except SecurityViolationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_MISMATCH


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
