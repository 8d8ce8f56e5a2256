from __future__ import annotations

from typing import TYPE_CHECKING

from config import ConfigurationSet

from archi_cache.config import create_config

if TYPE_CHECKING:
    from pathlib import Path

    import pytest


def test_create_config_returns_defaults() -> None:
    cfg = create_config(yaml_path="/nonexistent/archi-cache.yaml")
    assert isinstance(cfg, ConfigurationSet)
    assert cfg["cache.db_path"] == "~/.config/archi/cache.db"
    assert cfg["cache.prefix"] == "archi_routes_"
    assert cfg["cache.memory_max_size"] == 50
    assert cfg["cache.durable_max_bytes"] == 5 * 1024 * 1024
    assert cfg["cache.enforce_durable_max_bytes"] is False
    assert cfg["cache.sweep_interval_seconds"] == 300
    assert cfg["cache.ttl.news"] == 900_000


def test_yaml_overrides_defaults(tmp_path: Path) -> None:
    yaml_file = tmp_path / "archi-cache.yaml"
    yaml_file.write_text("cache:\n  memory_max_size: 10\n  ttl:\n    news: 60000\n")
    cfg = create_config(yaml_path=str(yaml_file))
    assert cfg["cache.memory_max_size"] == 10
    assert cfg["cache.ttl.news"] == 60000
    # Defaults still apply for unset keys
    assert cfg["cache.ttl.routes"] == 1_800_000
    assert cfg["cache.prefix"] == "archi_routes_"


def test_env_overrides_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    yaml_file = tmp_path / "archi-cache.yaml"
    yaml_file.write_text("cache:\n  prefix: yaml_\n")

    monkeypatch.setenv("ARCHI__CACHE__PREFIX", "env_")
    monkeypatch.setenv("ARCHI__CACHE__MEMORY_MAX_SIZE", "7")

    cfg = create_config(yaml_path=str(yaml_file))
    assert cfg["cache.prefix"] == "env_"
    assert cfg["cache.memory_max_size"] == "7"  # env vars are strings


def test_db_path_override_beats_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ARCHI__CACHE__DB_PATH", "/env/cache.db")
    cfg = create_config(yaml_path="/nonexistent/archi-cache.yaml", db_path="/explicit/cache.db")
    assert cfg["cache.db_path"] == "/explicit/cache.db"


def test_custom_defaults() -> None:
    cfg = create_config(yaml_path="/nonexistent/archi-cache.yaml", defaults={"cache": {"prefix": "x_"}})
    assert cfg["cache.prefix"] == "x_"
