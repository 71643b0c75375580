"""
Configuration loader.

Loads YAML config files and provides unified access.
Supports:
- sources.example.yaml defaults overridden by a local sources.yaml
- Environment variable substitution (${VAR} and ${VAR:-default})
- PULSECHECK_CONFIG_DIR to point at another config directory
"""

import logging
import os
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).parent.parent.parent.parent / "config"

CONFIG_FILES = ["sources.example.yaml", "sources.yaml"]


def _substitute_env_vars(obj: Any) -> Any:
    """Recursively substitute environment variables in config."""
    if isinstance(obj, str):
        if obj.startswith("${") and "}" in obj:
            var_part = obj[2:obj.index("}")]

            if ":-" in var_part:
                var_name, default = var_part.split(":-", 1)
            else:
                var_name, default = var_part, ""

            value = os.environ.get(var_name, default)

            if obj == f"${{{var_part}}}":
                return value

            return obj.replace(f"${{{var_part}}}", value)

        return obj

    elif isinstance(obj, dict):
        return {k: _substitute_env_vars(v) for k, v in obj.items()}

    elif isinstance(obj, list):
        return [_substitute_env_vars(item) for item in obj]

    return obj


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a single YAML file."""
    if not path.exists():
        logger.warning(f"Config file not found: {path}")
        return {}

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return _substitute_env_vars(data)


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries. Override takes precedence."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


@lru_cache(maxsize=1)
def get_config(config_dir: str | None = None) -> dict[str, Any]:
    """Load and merge all config files."""
    if config_dir:
        base_dir = Path(config_dir)
    elif os.environ.get("PULSECHECK_CONFIG_DIR"):
        base_dir = Path(os.environ["PULSECHECK_CONFIG_DIR"])
    else:
        base_dir = CONFIG_DIR

    config: dict[str, Any] = {}

    for filename in CONFIG_FILES:
        file_path = base_dir / filename
        if file_path.exists():
            file_config = load_yaml(file_path)
            config = deep_merge(config, file_config)
            logger.debug(f"Loaded config: {filename}")

    return config


def reload_config() -> dict[str, Any]:
    """Force reload config (clears cache)."""
    get_config.cache_clear()
    return get_config()


def get_sources_config(source_name: str) -> dict[str, Any]:
    """Get config for specific source client (e.g. "hackernews", "reddit")."""
    config = get_config()
    return config.get("sources", {}).get(source_name, {}) or {}


def resolve_setting(
    section: dict[str, Any],
    key: str,
    env_var: str,
    default: Any,
    cast: Callable[[Any], Any] = str,
) -> Any:
    """
    Resolve one setting. Environment variables take precedence over config files.

    Args:
        section: Config section (e.g. from get_sources_config).
        key: Key inside the section.
        env_var: Environment variable that overrides the key.
        default: Value used when neither is set (or the value is blank).
        cast: Conversion applied to the raw value.

    Returns:
        The converted value; None if the config explicitly holds null.
    """
    raw = os.environ.get(env_var, section.get(key, default))
    if raw is None:
        return None
    if isinstance(raw, str) and not raw.strip():
        return default
    return cast(raw)
