"""Concrete byte sources the digest computer can read from."""

from __future__ import annotations

import io
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

import requests
from requests import Response
from tenacity import retry, stop_after_attempt, wait_fixed

from .errors import SourceFetchError

USER_AGENT = "artifact-integrity/0.1 (+https://pypi.org/project/artifact-integrity/)"


class PathSource:
    """An artifact file on disk."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"PathSource({str(self.path)!r})"

    def __str__(self) -> str:
        return str(self.path)

    @contextmanager
    def open_stream(self) -> Iterator[BinaryIO]:
        with self.path.open("rb") as fh:
            yield fh

    def rewind(self, stream: BinaryIO) -> None:
        stream.seek(0)


class BytesSource:
    """In-memory content, e.g. an artifact already held by the caller."""

    def __init__(self, data: bytes, label: str = "<memory>") -> None:
        self._data = bytes(data)
        self.label = label

    def __repr__(self) -> str:
        return f"BytesSource({self.label!r}, {len(self._data)} bytes)"

    def __str__(self) -> str:
        return self.label

    @contextmanager
    def open_stream(self) -> Iterator[BinaryIO]:
        yield io.BytesIO(self._data)

    def rewind(self, stream: BinaryIO) -> None:
        stream.seek(0)


@retry(reraise=True, stop=stop_after_attempt(3), wait=wait_fixed(2))
def _http_get(url: str, timeout: float) -> Response:
    return requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)


class HttpSource:
    """A remote artifact, downloaded once on first use and served from memory."""

    def __init__(self, url: str, timeout: float = 30) -> None:
        self.url = url
        self.timeout = timeout
        self._content: bytes | None = None

    def __repr__(self) -> str:
        return f"HttpSource({self.url!r})"

    def __str__(self) -> str:
        return self.url

    def fetch(self) -> bytes:
        if self._content is not None:
            return self._content

        try:
            response = _http_get(self.url, self.timeout)
        except requests.RequestException as exc:
            raise SourceFetchError(f"Failed to fetch {self.url}: {exc}") from exc

        if response.status_code != 200:
            raise SourceFetchError(f"Unexpected status code {response.status_code} fetching {self.url}")

        self._content = response.content
        return self._content

    @contextmanager
    def open_stream(self) -> Iterator[BinaryIO]:
        yield io.BytesIO(self.fetch())

    def rewind(self, stream: BinaryIO) -> None:
        stream.seek(0)
