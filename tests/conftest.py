from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from artifact_integrity.config import CONFIG_PATH_ENV_VAR, DISABLE_VALIDATION_ENV_VAR


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv(CONFIG_PATH_ENV_VAR, raising=False)
    monkeypatch.delenv(DISABLE_VALIDATION_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def write_artifact(tmp_path: Path) -> Callable[[str, bytes], Path]:
    cache = tmp_path / "cache"

    def _write(name: str, content: bytes) -> Path:
        cache.mkdir(exist_ok=True)
        path = cache / name
        path.write_bytes(content)
        return path

    return _write
