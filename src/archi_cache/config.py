from __future__ import annotations

from typing import Protocol

from config import ConfigurationSet, config_from_dict, config_from_env, config_from_yaml

from archi_cache.cache.router import DEFAULT_TTL_CLASSES


class AppConfig(Protocol):
    def __getitem__(self, key: str) -> object: ...


_DEFAULTS: dict[str, object] = {
    "cache": {
        "db_path": "~/.config/archi/cache.db",
        "prefix": "archi_routes_",
        "memory_max_size": 50,
        "durable_max_bytes": 5 * 1024 * 1024,
        "enforce_durable_max_bytes": False,
        "sweep_interval_seconds": 300,
        "ttl": dict(DEFAULT_TTL_CLASSES),
    },
}


def create_config(
    yaml_path: str = "archi-cache.yaml",
    env_prefix: str = "ARCHI",
    defaults: dict[str, object] | None = None,
    *,
    db_path: str | None = None,
) -> ConfigurationSet:
    """Create a layered configuration.

    Priority (highest to lowest): explicit overrides > env vars > YAML file > defaults dict.

    Args:
        yaml_path: Path to the YAML config file. A missing file is ignored.
        env_prefix: Prefix for environment variables, e.g. ``ARCHI__CACHE__PREFIX``.
        defaults: Default configuration values.
        db_path: Override the durable cache database path.
    """
    if defaults is None:
        defaults = _DEFAULTS

    layers = [
        config_from_env(env_prefix, separator="__", lowercase_keys=True),
        config_from_yaml(yaml_path, read_from_file=True, ignore_missing_paths=True),
        config_from_dict(defaults),
    ]
    if db_path is not None:
        layers.insert(0, config_from_dict({"cache": {"db_path": db_path}}))

    return ConfigurationSet(*layers)
