"""Config module: loading and managing configuration."""

from pulsecheck.core.config.loader import (
    get_config,
    get_sources_config,
    reload_config,
    resolve_setting,
)

__all__ = [
    "get_config",
    "get_sources_config",
    "reload_config",
    "resolve_setting",
]
