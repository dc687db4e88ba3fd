from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

import yaml

from .errors import IssueScopeError
from .github_graphql import DEFAULT_GRAPHQL_URL, DEFAULT_TIMEOUT

CONFIG_DEFAULT = "issuescope.config.yaml"
DEFAULT_PATH = "the-road-to-learn-react/the-road-to-learn-react"
DEFAULT_ISSUES_PAGE_SIZE = 5
DEFAULT_REACTIONS_LAST = 3


class ConfigError(IssueScopeError):
    pass


@dataclass
class BrowserConfig:
    # GitHub endpoint & query shape
    endpoint: str = DEFAULT_GRAPHQL_URL
    path: str = DEFAULT_PATH
    issues_page_size: int = DEFAULT_ISSUES_PAGE_SIZE
    reactions_last: int = DEFAULT_REACTIONS_LAST
    timeout: float = DEFAULT_TIMEOUT
    # Retry configuration
    retry_attempts: int = 1
    retry_base_sleep: float = 0.5
    retry_max_sleep: float | None = None
    # Logging configuration
    logging_json_enabled: bool = False
    logging_level: str = "INFO"
    # Environment authentication configuration
    env_auth_enabled: bool = True
    env_auth_load_dotenv: bool = True
    env_auth_dotenv_path: str | None = None
    source_file: Path | None = field(default=None, repr=False)


def _resolve_env_var(value: Any) -> Any:
    """Resolve environment variable if value starts with $."""
    if isinstance(value, str) and value.startswith('$'):
        return os.getenv(value[1:], value)
    return value


def _positive_int(value: Any, name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f'{name} must be an integer, got {value!r}') from exc
    if number <= 0:
        raise ConfigError(f'{name} must be positive, got {number}')
    return number


def load_config(path: str | Path) -> BrowserConfig:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f'Configuration file not found: {p}')
    try:
        raw = cast(dict[str, Any], yaml.safe_load(p.read_text()) or {})
    except yaml.YAMLError as exc:
        raise ConfigError(f'Invalid YAML in {p}: {exc}') from exc
    if not isinstance(raw, dict):
        raise ConfigError(f'Configuration root must be a mapping: {p}')
    gh = cast(dict[str, Any], raw.get('github', {}) or {})
    retry_config = cast(dict[str, Any], raw.get('retry', {}) or {})
    logging_config = cast(dict[str, Any], raw.get('logging', {}) or {})
    env_auth = cast(dict[str, Any], raw.get('environment', {}) or {})

    max_sleep = _resolve_env_var(retry_config.get('max_sleep'))

    return BrowserConfig(
        endpoint=str(_resolve_env_var(gh.get('endpoint', DEFAULT_GRAPHQL_URL))),
        path=str(_resolve_env_var(gh.get('path', DEFAULT_PATH))),
        issues_page_size=_positive_int(
            gh.get('issues_page_size', DEFAULT_ISSUES_PAGE_SIZE), 'github.issues_page_size'
        ),
        reactions_last=_positive_int(
            gh.get('reactions_last', DEFAULT_REACTIONS_LAST), 'github.reactions_last'
        ),
        timeout=float(gh.get('timeout', DEFAULT_TIMEOUT)),
        retry_attempts=_positive_int(retry_config.get('attempts', 1), 'retry.attempts'),
        retry_base_sleep=float(retry_config.get('base_sleep', 0.5)),
        retry_max_sleep=float(max_sleep) if max_sleep is not None else None,
        logging_json_enabled=bool(logging_config.get('json_enabled', False)),
        logging_level=str(logging_config.get('level', 'INFO')),
        env_auth_enabled=bool(env_auth.get('enabled', True)),
        env_auth_load_dotenv=bool(env_auth.get('load_dotenv', True)),
        env_auth_dotenv_path=env_auth.get('dotenv_path'),
        source_file=p,
    )


__all__ = ["BrowserConfig", "CONFIG_DEFAULT", "ConfigError", "load_config"]
