"""Settings loader.

Reads settings from a JSON file (default: settings.json in the working
directory) and validates it against ``SETTINGS_SCHEMA``. Every key is optional::

    {
      "algorithms": ["sha256", "sha512"],
      "disable_checksum_validation": false,
      "artifact_suffix": ".gem",
      "max_workers": 4,
      "http_timeout": 30
    }
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from .digests import get_known_algorithms
from .errors import ConfigError

DEFAULT_CONFIG_PATH = Path("settings.json")
CONFIG_PATH_ENV_VAR = "ARTIFACT_INTEGRITY_CONFIG"
DISABLE_VALIDATION_ENV_VAR = "ARTIFACT_INTEGRITY_DISABLE_CHECKSUM_VALIDATION"

_TRUTHY = {"1", "true", "yes", "y"}

SETTINGS_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "algorithms": {
            "type": "array",
            "items": {"type": "string", "minLength": 1},
            "minItems": 1,
            "uniqueItems": True,
        },
        "disable_checksum_validation": {"type": "boolean"},
        "artifact_suffix": {"type": "string"},
        "max_workers": {"type": "integer", "minimum": 1},
        "http_timeout": {"type": "number", "exclusiveMinimum": 0},
    },
}


@dataclass(slots=True, frozen=True)
class Settings:
    """Top-level settings container."""

    algorithms: tuple[str, ...] = ("sha256",)
    disable_checksum_validation: bool = False
    artifact_suffix: str = ".gem"
    max_workers: int = 4
    http_timeout: float = 30

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create Settings from an already schema-validated dictionary."""
        defaults = cls()
        algorithms = tuple(algo.lower() for algo in data.get("algorithms", defaults.algorithms))
        known = get_known_algorithms()
        unknown = [algo for algo in algorithms if algo not in known]
        if unknown:
            raise ConfigError(
                f"Unknown digest algorithm(s): {', '.join(unknown)}. "
                f"Known algorithms: {', '.join(known)}"
            )

        return cls(
            algorithms=algorithms,
            disable_checksum_validation=data.get(
                "disable_checksum_validation", defaults.disable_checksum_validation
            ),
            artifact_suffix=data.get("artifact_suffix", defaults.artifact_suffix),
            max_workers=data.get("max_workers", defaults.max_workers),
            http_timeout=float(data.get("http_timeout", defaults.http_timeout)),
        )


def _format_errors(errors: list[Any]) -> str:
    messages = []
    for error in errors:
        pointer = "/".join(str(p) for p in error.path)
        messages.append(f"- {pointer or '<root>'}: {error.message}")
    return "\n".join(messages)


def _resolve_config_path(path: Path | str | None = None) -> tuple[Path, bool]:
    """Resolve the configuration file path and whether it was asked for explicitly.

    Priority:
    1. Explicit path argument
    2. ARTIFACT_INTEGRITY_CONFIG environment variable
    3. Default path (settings.json in the working directory)
    """
    if path is not None:
        return Path(path), True

    env_path = os.environ.get(CONFIG_PATH_ENV_VAR)
    if env_path:
        return Path(env_path), True

    return DEFAULT_CONFIG_PATH, False


def _validation_disabled_by_env() -> bool:
    return os.getenv(DISABLE_VALIDATION_ENV_VAR, "").strip().lower() in _TRUTHY


def load_settings(path: Path | str | None = None) -> Settings:
    """Load and validate settings from a JSON file.

    Args:
        path: Optional path to the config file. If not provided, uses the
            ARTIFACT_INTEGRITY_CONFIG env var or falls back to settings.json.

    Returns:
        A Settings object. Defaults are used when no file was requested and the
        default file does not exist.

    Raises:
        ConfigError: If the file cannot be read or contains invalid data.
    """
    config_path, explicit = _resolve_config_path(path)

    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Configuration file not found: {config_path}")
        data: dict[str, Any] = {}
    else:
        try:
            content = config_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to read configuration file: {exc}") from exc

        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in configuration file: {exc}") from exc

        validator = Draft202012Validator(SETTINGS_SCHEMA)
        errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
        if errors:
            raise ConfigError(f"Invalid configuration in {config_path}:\n{_format_errors(errors)}")

    if _validation_disabled_by_env():
        data = {**data, "disable_checksum_validation": True}

    return Settings.from_dict(data)
