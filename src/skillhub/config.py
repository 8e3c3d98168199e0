"""
Configuration for skillhub.

Settings are read from a YAML file and can be overridden through
environment variables. Everything has a default, so a missing config file
is not an error.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from skillhub.errors import ParseError

DEFAULT_REGISTRY = "https://clawhub.ai"
DEFAULT_DATA_DIR = "./skillhub.data"

CONFIG_ENV_VAR = "SKILLHUB_CONFIG"
CONFIG_SEARCH_PATHS = ("skillhub.config.yaml", "skillhub.config.yml")


@dataclass
class HubConfig:
    """
    Settings for the registry client and the local install layout.

    Example YAML:
        data_dir: ./skillhub.data
        registry: https://clawhub.ai
        token: "ch_..."
        skip_security_warnings: false
        timeout: 30
        download_timeout: 120
        disabled_skills:
          - noisy-skill
    """

    data_dir: Path = field(default_factory=lambda: Path(DEFAULT_DATA_DIR))
    registry: str = DEFAULT_REGISTRY
    token: str | None = None  # Bearer token, optional for read endpoints
    skip_security_warnings: bool = False  # Maps to InstallOptions.skip_security
    timeout: float = 30.0  # Seconds, metadata/search requests
    download_timeout: float = 120.0  # Seconds, archive downloads
    disabled_skills: list[str] = field(default_factory=list)  # Hidden from `available`

    @property
    def skills_dir(self) -> Path:
        """Directory installed skills live in."""
        return self.data_dir / "skills"

    @property
    def lockfile_path(self) -> Path:
        """Lock file recording installed registry skills."""
        return self.data_dir / "skills-lock.json"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HubConfig:
        """Create config from a dictionary."""
        if not isinstance(data, dict):
            raise ParseError("Config must be a mapping")

        registry = data.get("registry") or DEFAULT_REGISTRY
        if not isinstance(registry, str):
            raise ParseError(f"registry must be a URL string, got {registry!r}")
        token = data.get("token")
        disabled = data.get("disabled_skills") or []
        if isinstance(disabled, str):
            disabled = [disabled]
        try:
            return cls(
                data_dir=Path(data.get("data_dir") or DEFAULT_DATA_DIR),
                registry=registry.rstrip("/"),
                token=str(token) if token else None,
                skip_security_warnings=bool(data.get("skip_security_warnings", False)),
                timeout=_seconds(data, "timeout", 30.0),
                download_timeout=_seconds(data, "download_timeout", 120.0),
                disabled_skills=[str(name) for name in disabled],
            )
        except (TypeError, ValueError) as e:
            raise ParseError(f"Invalid config value: {e}") from e

    @classmethod
    def from_yaml(cls, path: Path) -> HubConfig:
        """Load config from a YAML file."""
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid YAML in {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise ParseError(f"{path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise ParseError(f"Failed to read {path}: {e}") from e
        return cls.from_dict(data or {})

    @classmethod
    def from_yaml_string(cls, content: str) -> HubConfig:
        """Load config from a YAML string."""
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid YAML: {e}") from e
        return cls.from_dict(data or {})

    @classmethod
    def load(cls, path: Path | None = None) -> HubConfig:
        """
        Resolve and load the active configuration.

        Lookup order: explicit ``path``, ``$SKILLHUB_CONFIG``, then
        ``./skillhub.config.yaml`` / ``./skillhub.config.yml``. Environment
        overrides (``SKILLHUB_REGISTRY``, ``SKILLHUB_TOKEN``) are applied last.
        """
        config_path = path or find_config_path()
        config = cls.from_yaml(config_path) if config_path else cls()
        config.apply_env()
        return config

    def apply_env(self) -> None:
        """Apply environment variable overrides in place."""
        registry = os.environ.get("SKILLHUB_REGISTRY")
        if registry:
            self.registry = registry.rstrip("/")
        token = os.environ.get("SKILLHUB_TOKEN")
        if token:
            self.token = token

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary."""
        return {
            "data_dir": str(self.data_dir),
            "registry": self.registry,
            "token": self.token,
            "skip_security_warnings": self.skip_security_warnings,
            "timeout": self.timeout,
            "download_timeout": self.download_timeout,
            "disabled_skills": self.disabled_skills,
        }


def _seconds(data: dict[str, Any], key: str, default: float) -> float:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"{key} must be a number of seconds, got {value!r}")
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be a number of seconds, got {value!r}") from None
    if seconds <= 0:
        raise ValueError(f"{key} must be positive, got {value!r}")
    return seconds


def find_config_path() -> Path | None:
    """Locate the config file, or ``None`` to use defaults."""
    custom = os.environ.get(CONFIG_ENV_VAR)
    if custom:
        custom_path = Path(custom)
        if not custom_path.exists():
            raise ParseError(f"{CONFIG_ENV_VAR} points to non-existent file: {custom}")
        return custom_path

    for name in CONFIG_SEARCH_PATHS:
        candidate = Path.cwd() / name
        if candidate.exists():
            return candidate
    return None
