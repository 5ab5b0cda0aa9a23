"""Tests for the concrete byte sources."""

from __future__ import annotations

from hashlib import sha256
from pathlib import Path
from types import SimpleNamespace

import pytest
import requests
from tenacity import wait_none

from artifact_integrity import sources as sources_mod
from artifact_integrity.checksum import digests_from_source
from artifact_integrity.digests import FileSource
from artifact_integrity.errors import SourceFetchError
from artifact_integrity.sources import BytesSource, HttpSource, PathSource


def test_sources_satisfy_file_source_protocol(tmp_path: Path) -> None:
    assert isinstance(PathSource(tmp_path / "a.gem"), FileSource)
    assert isinstance(BytesSource(b""), FileSource)
    assert isinstance(HttpSource("https://example.invalid/a.gem"), FileSource)


def test_path_source_digest_uses_path_as_provenance(tmp_path: Path) -> None:
    path = tmp_path / "foo-1.0.gem"
    path.write_bytes(b"gem bytes")

    checksums = digests_from_source(PathSource(path))

    assert checksums["sha256"].digest == sha256(b"gem bytes").hexdigest()
    assert checksums["sha256"].sources == (str(path),)


def test_bytes_source_can_be_read_repeatedly() -> None:
    source = BytesSource(b"abc", label="upload")

    assert digests_from_source(source) == digests_from_source(source)
    assert str(source) == "upload"


def test_http_source_downloads_once(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, float]] = []

    def fake_get(url: str, timeout: float) -> SimpleNamespace:
        calls.append((url, timeout))
        return SimpleNamespace(status_code=200, content=b"remote gem")

    monkeypatch.setattr(sources_mod, "_http_get", fake_get)
    source = HttpSource("https://example.invalid/foo-1.0.gem", timeout=5)

    first = digests_from_source(source)
    second = digests_from_source(source)

    assert first == second
    assert first["sha256"].digest == sha256(b"remote gem").hexdigest()
    assert first["sha256"].sources == ("https://example.invalid/foo-1.0.gem",)
    assert calls == [("https://example.invalid/foo-1.0.gem", 5)]


def test_http_source_rejects_unexpected_status(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        sources_mod,
        "_http_get",
        lambda url, timeout: SimpleNamespace(status_code=404, content=b""),
    )

    with pytest.raises(SourceFetchError, match="404"):
        HttpSource("https://example.invalid/missing-1.0.gem").fetch()


def test_http_source_retries_then_wraps_request_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    attempts: list[str] = []

    def failing_get(url: str, **kwargs: object) -> None:
        attempts.append(url)
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(sources_mod, "_http_get", sources_mod._http_get.retry_with(wait=wait_none()))
    monkeypatch.setattr(sources_mod.requests, "get", failing_get)

    with pytest.raises(SourceFetchError, match="Failed to fetch"):
        HttpSource("https://example.invalid/foo-1.0.gem").fetch()

    assert attempts == ["https://example.invalid/foo-1.0.gem"] * 3
