from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from issuegraph.config import ConfigError, GraphConfig, default_config, load_config

FULL_CONFIG = textwrap.dedent(
    """\
    linear:
      api_url: https://linear.example/graphql
      api_key_var: MY_LINEAR_KEY
      page_size: 25
      page_delay: 0.5
      timeout: 10
    concurrency:
      max_workers: 4
    graph:
      show_actionable: true
      sort: true
      direction: tb
    link:
      enabled: false
      theme: forest
    logging:
      json_enabled: true
      level: DEBUG
    environment:
      load_dotenv: false
      dotenv_path: $CUSTOM_DOTENV
    """
)


def test_defaults():
    cfg = default_config()
    assert isinstance(cfg, GraphConfig)
    assert cfg.max_workers == 10
    assert cfg.page_delay == 0.1
    assert cfg.show_actionable is False
    assert cfg.link_enabled is True
    assert cfg.source_file is None


def test_load_full_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("CUSTOM_DOTENV", "secrets/.env")
    path = tmp_path / "issuegraph.config.yaml"
    path.write_text(FULL_CONFIG)

    cfg = load_config(path)

    assert cfg.api_url == "https://linear.example/graphql"
    assert cfg.api_key_var == "MY_LINEAR_KEY"
    assert cfg.page_size == 25
    assert cfg.page_delay == 0.5
    assert cfg.request_timeout == 10
    assert cfg.max_workers == 4
    assert cfg.show_actionable is True
    assert cfg.sort_issues is True
    assert cfg.direction == "TB"
    assert cfg.link_enabled is False
    assert cfg.link_theme == "forest"
    assert cfg.logging_json_enabled is True
    assert cfg.logging_level == "DEBUG"
    assert cfg.env_load_dotenv is False
    assert cfg.env_dotenv_path == "secrets/.env"
    assert cfg.source_file == path


def test_empty_file_uses_defaults(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    cfg = load_config(path)
    assert cfg.max_workers == 10
    assert cfg.source_file == path


def test_missing_file(tmp_path: Path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "nope.yaml")
    assert load_config(tmp_path / "nope.yaml", required=False).source_file is None


@pytest.mark.parametrize(
    "body, message",
    [
        ("concurrency:\n  max_workers: 0\n", "max_workers"),
        ("graph:\n  direction: sideways\n", "direction"),
        ("linear:\n  page_size: lots\n", "Invalid value"),
        ("- just\n- a list\n", "mapping"),
        ("linear: [1, 2]\n", "linear"),
        ("linear: {page_size: [\n", "Invalid YAML"),
    ],
)
def test_invalid_config(tmp_path: Path, body: str, message: str):
    path = tmp_path / "bad.yaml"
    path.write_text(body)
    with pytest.raises(ConfigError, match=message):
        load_config(path)
