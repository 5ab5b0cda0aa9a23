"""Tests for the Checksum value object and its collection helpers."""

from hashlib import sha256, sha512

import pytest

from artifact_integrity.checksum import Checksum, digests_from_source, match_digests
from artifact_integrity.errors import ChecksumArgumentError, SecurityViolationError
from artifact_integrity.sources import BytesSource


def test_construct_normalizes_algorithm_and_records_source() -> None:
    checksum = Checksum("SHA256", "deadbeef", "cache")

    assert checksum.algorithm == "sha256"
    assert checksum.digest == "deadbeef"
    assert checksum.sources == ("cache",)


def test_digest_cannot_be_reassigned() -> None:
    checksum = Checksum("sha256", "deadbeef", "cache")

    with pytest.raises(AttributeError):
        checksum.digest = "00000000"  # type: ignore[misc]


def test_to_lock_and_display() -> None:
    checksum = Checksum("sha256", "deadbeef", "cache")

    assert checksum.to_lock() == "sha256-deadbeef"
    assert checksum.to_display() == "sha256-deadbeef (from cache)"
    assert str(checksum) == checksum.to_display()


def test_display_lists_sources_in_insertion_order() -> None:
    checksum = Checksum("sha256", "deadbeef", "remote")
    checksum.merge(Checksum("sha256", "deadbeef", "cache"))

    assert checksum.to_display() == "sha256-deadbeef (from remote, cache)"


def test_merge_unions_sources_and_returns_self() -> None:
    first = Checksum("sha256", "deadbeef", "a")
    merged = first.merge(Checksum("sha256", "deadbeef", "b"))

    assert merged is first
    assert set(first.sources) == {"a", "b"}
    assert first.digest == "deadbeef"


def test_merge_ignores_repeated_sources() -> None:
    first = Checksum("sha256", "deadbeef", "a")
    first.merge(Checksum("sha256", "deadbeef", "a"))

    assert first.sources == ("a",)


def test_merge_rejects_different_algorithms() -> None:
    with pytest.raises(ChecksumArgumentError, match="different algorithms"):
        Checksum("sha256", "deadbeef", "a").merge(Checksum("sha512", "deadbeef", "b"))


def test_merge_mismatch_raises_and_leaves_both_untouched() -> None:
    stored = Checksum("sha256", "deadbeef", "cache")
    incoming = Checksum("sha256", "00000000", "remote")

    with pytest.raises(SecurityViolationError) as excinfo:
        stored.merge(incoming)

    message = str(excinfo.value)
    assert message.startswith("sha256-00000000 (from remote)\n")
    assert "sha256-deadbeef (from cache) from:\n* cache" in message
    assert stored.digest == "deadbeef"
    assert stored.sources == ("cache",)
    assert incoming.sources == ("remote",)


def test_equality_compares_source_sets() -> None:
    left = Checksum("sha256", "deadbeef", "a")
    left.merge(Checksum("sha256", "deadbeef", "b"))
    right = Checksum("sha256", "deadbeef", "b")
    right.merge(Checksum("sha256", "deadbeef", "a"))

    assert left == right
    assert hash(left) == hash(right)
    assert left != Checksum("sha256", "deadbeef", "a")
    assert Checksum("sha256", "aa", "a") != Checksum("sha512", "aa", "a")
    assert left != "sha256-deadbeef"


def test_copy_shares_no_sources() -> None:
    original = Checksum("sha256", "deadbeef", "a")
    copy = original.copy()
    copy.merge(Checksum("sha256", "deadbeef", "b"))

    assert original.sources == ("a",)
    assert copy.sources == ("a", "b")


def test_digests_from_source_wraps_every_algorithm() -> None:
    content = b"artifact contents"
    source = BytesSource(content, label="upload")

    checksums = digests_from_source(source, ["sha256", "SHA512"])

    assert set(checksums) == {"sha256", "sha512"}
    assert checksums["sha256"] == Checksum("sha256", sha256(content).hexdigest(), "upload")
    assert checksums["sha512"].digest == sha512(content).hexdigest()


def test_digests_from_source_is_deterministic_and_honours_origin() -> None:
    source = BytesSource(b"same bytes")

    first = digests_from_source(source, origin="first")
    second = digests_from_source(source, origin="second")

    assert first["sha256"].digest == second["sha256"].digest
    assert first["sha256"].sources == ("first",)


def test_match_digests_policy() -> None:
    x = Checksum("sha256", "x" * 8, "lock")

    assert match_digests({}, {}) is True
    assert match_digests({"sha256": x}, {"sha1": "y" * 8}) is True
    assert match_digests({"sha256": x}, {}) is True
    assert match_digests({"sha256": x}, {"sha256": "x" * 8}) is True
    assert match_digests({"sha256": x}, {"sha256": Checksum("sha256", "x" * 8, "disk")}) is True
    assert match_digests({"sha256": x}, {"sha256": "y" * 8}) is False


def test_match_digests_requires_every_common_algorithm() -> None:
    stored = {"sha256": "aa", "sha512": "bb"}

    assert match_digests(stored, {"sha256": "aa", "sha512": "bb", "md5": "cc"}) is True
    assert match_digests(stored, {"sha256": "aa", "sha512": "zz"}) is False
