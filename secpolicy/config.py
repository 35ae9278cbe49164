"""Configuration loading for secpolicy (.secpolicy.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".secpolicy.yml"

DEFAULT_FALLBACK_REPOSITORY = ".github"
DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_REQUEST_TIMEOUT = 30.0

_PROVIDERS = ("local", "github")
_TOKEN_ENV_KEYS = ("SECPOLICY_GITHUB_TOKEN", "GITHUB_TOKEN", "GITHUB_AUTH_TOKEN")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class FallbackConfig:
    """Organization-level fallback lookup settings."""

    enabled: bool = True
    repository: str = DEFAULT_FALLBACK_REPOSITORY


@dataclass
class GitHubConfig:
    """GitHub REST API settings."""

    api_url: str = DEFAULT_GITHUB_API_URL
    token: Optional[str] = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


@dataclass
class SecPolicyConfig:
    """Represents the settings defined in .secpolicy.yml."""

    root: Path
    provider: str = "local"
    fallback: FallbackConfig = field(default_factory=FallbackConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    exclude_paths: List[str] = field(default_factory=list)


def load_config(config_path: Path) -> SecPolicyConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        config = SecPolicyConfig(root=root)
        config.github.token = _token_from_env()
        return config

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    provider = _as_str(data.get("provider")) or "local"
    if provider not in _PROVIDERS:
        raise ConfigError(
            f"Unknown provider '{provider}' (expected one of: {', '.join(_PROVIDERS)})"
        )

    fallback = FallbackConfig()
    fallback_data = _as_dict(data.get("fallback"))
    if fallback_data:
        enabled = _as_bool(fallback_data.get("enabled"))
        if enabled is not None:
            fallback.enabled = enabled
        repository = _as_str(fallback_data.get("repository"))
        if repository:
            fallback.repository = repository

    github = GitHubConfig()
    github_data = _as_dict(data.get("github"))
    if github_data:
        github.api_url = (_as_str(github_data.get("api_url")) or github.api_url).rstrip("/")
        github.token = _as_str(github_data.get("token"))
        timeout = _as_float(github_data.get("request_timeout"))
        if timeout is not None and timeout > 0:
            github.request_timeout = timeout
    if not github.token:
        github.token = _token_from_env()

    return SecPolicyConfig(
        root=root,
        provider=provider,
        fallback=fallback,
        github=github,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _token_from_env() -> Optional[str]:
    for key in _TOKEN_ENV_KEYS:
        value = os.environ.get(key)
        if value:
            return value
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _is_scalar(value: Any) -> bool:
    # YAML booleans are ints in Python; they never stand in for names or numbers here.
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def _as_str(value: Any) -> Optional[str]:
    return str(value) if _is_scalar(value) else None


def _as_float(value: Any) -> Optional[float]:
    if not _is_scalar(value):
        return None
    try:
        return float(value)
    except ValueError:
        return None


_TRUTHY = frozenset({"true", "yes", "on", "1"})
_FALSY = frozenset({"false", "no", "off", "0"})


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool) or value is None:
        return value
    lowered = str(value).strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ConfigError(f"Expected a boolean, got {value!r}")


def _as_str_list(value: Any) -> List[str]:
    """Accept a single path pattern or a list of them."""
    if value is None:
        return []
    if _is_scalar(value):
        return [str(value)]
    if isinstance(value, Sequence):
        return [str(item) for item in value if _is_scalar(item)]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "FallbackConfig",
    "GitHubConfig",
    "SecPolicyConfig",
    "load_config",
]
