"""Configuration loading."""
import copy
import os
from pathlib import Path

import yaml

DEFAULTS = {
    "database": {"path": "data/feeds.db"},
    "fetch": {
        "timeout": 10,
        "max_workers": 8,
        "user_agent": "feed-timeline/0.1",
        "max_bytes": 5 * 1024 * 1024,
    },
    "logging": {"dir": "logs", "retention_days": 30},
}


def get_project_dir() -> Path:
    """Repository root (parent of the package directory)."""
    return Path(__file__).parent.parent


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if value is None:
            # empty yaml key keeps the default
            continue
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(path: Path | None = None) -> dict:
    """Load config.yaml over the built-in defaults.

    Lookup order: explicit path, $FEED_TIMELINE_CONFIG, config/config.yaml.
    A missing file yields the defaults.
    """
    if path is None:
        env_path = os.environ.get("FEED_TIMELINE_CONFIG")
        path = Path(env_path) if env_path else get_project_dir() / "config" / "config.yaml"

    config = copy.deepcopy(DEFAULTS)
    if path.exists():
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        _merge(config, data)
    _validate(config, path)
    return config


def _validate(config: dict, path: Path) -> None:
    fetch = config["fetch"]
    for key, minimum in (("timeout", 0), ("max_workers", 1), ("max_bytes", 1)):
        value = fetch[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < minimum:
            raise ValueError(f"{path}: fetch.{key} must be a number >= {minimum}, got {value!r}")
    if not isinstance(fetch["max_workers"], int):
        raise ValueError(f"{path}: fetch.max_workers must be an integer, got {fetch['max_workers']!r}")


def get_db_path(config: dict) -> Path:
    db_path = Path(config["database"]["path"]).expanduser()
    if not db_path.is_absolute():
        db_path = get_project_dir() / db_path
    return db_path
