from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml

CONFIG_DEFAULT = 'issuegraph.config.yaml'
DEFAULT_API_URL = 'https://api.linear.app/graphql'
DEFAULT_API_KEY_VAR = 'LINEAR_API_KEY'
DEFAULT_CONCURRENCY = 10
DEFAULT_PAGE_SIZE = 50
DEFAULT_PAGE_DELAY = 0.1
VALID_DIRECTIONS = ('LR', 'RL', 'TB', 'BT', 'TD')


class ConfigError(RuntimeError):
    pass


@dataclass
class GraphConfig:
    # Linear API
    api_url: str = DEFAULT_API_URL
    api_key_var: str = DEFAULT_API_KEY_VAR
    page_size: int = DEFAULT_PAGE_SIZE
    page_delay: float = DEFAULT_PAGE_DELAY
    request_timeout: float = 30.0
    # Concurrency configuration
    max_workers: int = DEFAULT_CONCURRENCY
    # Graph rendering
    show_actionable: bool = False
    sort_issues: bool = False
    direction: str = 'LR'
    # Shareable link
    link_enabled: bool = True
    link_theme: str = 'dark'
    # Logging configuration
    logging_json_enabled: bool = False
    logging_level: str = 'INFO'
    # Environment authentication configuration
    env_load_dotenv: bool = True
    env_dotenv_path: str | None = None
    source_file: Path | None = None


def _resolve_env_var(value: Any) -> Any:
    """Resolve environment variable if value starts with $."""
    if isinstance(value, str) and value.startswith('$'):
        return os.getenv(value[1:], value)
    return value


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name, {}) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Configuration section '{name}' must be a mapping")
    return {k: _resolve_env_var(v) for k, v in value.items()}


def default_config() -> GraphConfig:
    return GraphConfig()


def load_config(path: str | Path, *, required: bool = True) -> GraphConfig:
    """Load a YAML config file.

    A missing file is an error only when ``required`` is set; otherwise the
    defaults are returned so the tool works without any config at all.
    """
    p = Path(path)
    if not p.exists():
        if required:
            raise ConfigError(f'Configuration file not found: {p}')
        return default_config()
    try:
        loaded = yaml.safe_load(p.read_text(encoding='utf-8'))
    except yaml.YAMLError as exc:
        raise ConfigError(f'Invalid YAML in {p}: {exc}') from exc
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ConfigError(f'Configuration root in {p} must be a mapping')
    raw = cast(dict[str, Any], loaded)
    linear = _section(raw, 'linear')
    concurrency = _section(raw, 'concurrency')
    graph = _section(raw, 'graph')
    link = _section(raw, 'link')
    logging_config = _section(raw, 'logging')
    env_auth = _section(raw, 'environment')

    try:
        cfg = GraphConfig(
            api_url=str(linear.get('api_url', DEFAULT_API_URL)),
            api_key_var=str(linear.get('api_key_var', DEFAULT_API_KEY_VAR)),
            page_size=int(linear.get('page_size', DEFAULT_PAGE_SIZE)),
            page_delay=float(linear.get('page_delay', DEFAULT_PAGE_DELAY)),
            request_timeout=float(linear.get('timeout', 30)),
            max_workers=int(concurrency.get('max_workers', DEFAULT_CONCURRENCY)),
            show_actionable=bool(graph.get('show_actionable', False)),
            sort_issues=bool(graph.get('sort', False)),
            direction=str(graph.get('direction', 'LR')).upper(),
            link_enabled=bool(link.get('enabled', True)),
            link_theme=str(link.get('theme', 'dark')),
            logging_json_enabled=bool(logging_config.get('json_enabled', False)),
            logging_level=str(logging_config.get('level', 'INFO')),
            env_load_dotenv=bool(env_auth.get('load_dotenv', True)),
            env_dotenv_path=env_auth.get('dotenv_path'),
            source_file=p,
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f'Invalid value in {p}: {exc}') from exc
    validate_config(cfg)
    return cfg


def validate_config(cfg: GraphConfig) -> None:
    if cfg.max_workers < 1:
        raise ConfigError('concurrency.max_workers must be at least 1')
    if cfg.page_size < 1:
        raise ConfigError('linear.page_size must be at least 1')
    if cfg.page_delay < 0:
        raise ConfigError('linear.page_delay must not be negative')
    if cfg.direction not in VALID_DIRECTIONS:
        raise ConfigError(
            f"graph.direction must be one of {', '.join(VALID_DIRECTIONS)} (got {cfg.direction})"
        )


__all__ = [
    'CONFIG_DEFAULT',
    'ConfigError',
    'GraphConfig',
    'default_config',
    'load_config',
    'validate_config',
]
