"""Configuration loading for action-allowlist (.allowlist.yml + environment)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from .discovery import DEFAULT_ORGANIZATIONS, DEFAULT_TOPIC
from .errors import ConfigError
from .github.client import DEFAULT_API_URL
from .models import RepositoryIdentity
from .walker import DEFAULT_PATH_PREFIXES

CONFIG_FILENAME = ".allowlist.yml"

ENV_STRICT_PATH = "ALLOWLIST_STRICT_PATH"
ENV_SIMPLE_PATH = "ALLOWLIST_SIMPLE_PATH"
ENV_TOKEN_KEYS = ("GITHUB_TOKEN", "GH_TOKEN")
ENV_API_URL = "GITHUB_API_URL"


@dataclass
class DiscoveryConfig:
    """Which repositories to search and which to skip."""

    organizations: List[str] = field(default_factory=lambda: list(DEFAULT_ORGANIZATIONS))
    topic: str = DEFAULT_TOPIC
    exclude_archived: bool = True
    exclude_repositories: List[RepositoryIdentity] = field(default_factory=list)


@dataclass
class ScanConfig:
    """Directories searched for workflow and step definitions."""

    path_prefixes: List[str] = field(default_factory=lambda: list(DEFAULT_PATH_PREFIXES))


@dataclass
class OutputConfig:
    """Destinations of the strict and simple allowlists."""

    strict_path: Optional[Path] = None
    simple_path: Optional[Path] = None

    def require_destinations(self) -> Tuple[Path, Path]:
        missing = []
        if self.strict_path is None:
            missing.append(f"output.strict (or {ENV_STRICT_PATH})")
        if self.simple_path is None:
            missing.append(f"output.simple (or {ENV_SIMPLE_PATH})")
        if missing:
            raise ConfigError("Missing required output destination: " + ", ".join(missing))
        return self.strict_path, self.simple_path  # type: ignore[return-value]


@dataclass
class GitHubConfig:
    """GitHub API access settings."""

    api_url: str = DEFAULT_API_URL
    token: Optional[str] = field(default=None, repr=False)
    request_timeout: float = 30.0


@dataclass
class AllowlistConfig:
    """Represents the settings defined in .allowlist.yml plus environment overrides."""

    root: Path
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)


def load_config(
    config_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> AllowlistConfig:
    """Load configuration from disk and apply environment overrides.

    A missing file yields defaults; output destinations have no default and are
    validated later by `OutputConfig.require_destinations`.
    """
    env = os.environ if environ is None else environ
    config_file = _resolve_config_path(config_path or Path.cwd())
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    config = AllowlistConfig(root=root)

    discovery_data = _as_dict(data.get("discovery"))
    if discovery_data:
        organizations = _as_str_list(discovery_data.get("organizations"))
        if organizations:
            config.discovery.organizations = organizations
        topic = _as_str(discovery_data.get("topic"))
        if topic:
            config.discovery.topic = topic
        exclude_archived = _as_bool(discovery_data.get("exclude_archived"))
        if exclude_archived is not None:
            config.discovery.exclude_archived = exclude_archived
        config.discovery.exclude_repositories = parse_repositories(
            _as_str_list(discovery_data.get("exclude_repositories"))
        )

    scan_data = _as_dict(data.get("scan"))
    if scan_data:
        prefixes = _as_str_list(scan_data.get("path_prefixes"))
        if prefixes:
            config.scan.path_prefixes = prefixes

    output_data = _as_dict(data.get("output"))
    config.output.strict_path = _resolve_output(root, _as_str(output_data.get("strict")))
    config.output.simple_path = _resolve_output(root, _as_str(output_data.get("simple")))

    github_data = _as_dict(data.get("github"))
    api_url = _as_str(github_data.get("api_url"))
    if api_url:
        config.github.api_url = api_url
    timeout = _as_float(github_data.get("request_timeout"))
    if timeout is not None and timeout > 0:
        config.github.request_timeout = timeout

    _apply_environment(config, env)
    return config


def parse_repositories(values: Sequence[str]) -> List[RepositoryIdentity]:
    """Parse `owner/name` strings, raising ConfigError on malformed entries."""
    repositories: List[RepositoryIdentity] = []
    for value in values:
        try:
            repositories.append(RepositoryIdentity.parse(value))
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
    return repositories


def _apply_environment(config: AllowlistConfig, env: Mapping[str, str]) -> None:
    strict = env.get(ENV_STRICT_PATH)
    if strict:
        config.output.strict_path = _resolve_output(Path.cwd(), strict)
    simple = env.get(ENV_SIMPLE_PATH)
    if simple:
        config.output.simple_path = _resolve_output(Path.cwd(), simple)
    for key in ENV_TOKEN_KEYS:
        token = env.get(key)
        if token:
            config.github.token = token
            break
    api_url = env.get(ENV_API_URL)
    if api_url:
        config.github.api_url = api_url


def _resolve_output(base: Path, value: Optional[str]) -> Optional[Path]:
    if not value or not value.strip():
        return None
    path = Path(value.strip()).expanduser()
    if not path.is_absolute():
        path = base / path
    return path


def _resolve_config_path(config_path: Path) -> Path:
    config_path = Path(config_path).expanduser()
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
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []
