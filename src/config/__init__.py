"""
Configuration Module for Saltbox.

This module provides configuration loading and management for the Saltbox API.
Configuration is loaded from config.yml and can be overridden through
environment variables.

Usage:
    >>> from config import load_config
    >>> config = load_config()
    >>> config["storage"]["backend"]
    'sqlite'
"""
import copy
import os
import yaml
import logging
from pathlib import Path
from typing import Dict, Any, Optional


logger = logging.getLogger(__name__)

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "SALTBOX_STORAGE_BACKEND": ("storage", "backend"),
    "SALTBOX_STORAGE_PATH": ("storage", "path"),
}

_DEFAULT_CONFIG: Dict[str, Any] = {
    "cors": {
        "origins": "*"
    },
    "storage": {
        "backend": "sqlite",
        "path": "./data/kv"
    },
    "server": {
        "bind": "0.0.0.0:8787",
        "workers": 1
    },
    "logging": {
        "level": "INFO",
        "file": "saltbox.log"
    }
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from config.yml file.

    Values present in the file replace the defaults section by section;
    sections absent from the file keep their default values. Environment
    overrides are applied last.

    Args:
        config_path: Path to config.yml file. If None, looks in current directory
                    and parent directories.

    Returns:
        Dictionary containing configuration settings

    Example:
        >>> config = load_config()
        >>> storage_path = config.get("storage", {}).get("path")
    """
    if config_path is None:
        # Try to find config.yml in current directory or parent directories
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            candidate = parent / "config.yml"
            if candidate.exists():
                config_path = str(candidate)
                break

        # If still not found, check the project root (where this file is located)
        if config_path is None:
            project_root = Path(__file__).parent.parent.parent
            candidate = project_root / "config.yml"
            if candidate.exists():
                config_path = str(candidate)

    if config_path is None:
        logger.warning("config.yml not found, using default configuration")
        return apply_env_overrides(get_default_config())

    try:
        with open(config_path, "r") as f:
            loaded = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning(f"Configuration file not found: {config_path}")
        return apply_env_overrides(get_default_config())
    except yaml.YAMLError as e:
        logger.error(f"Error parsing configuration file: {e}")
        return apply_env_overrides(get_default_config())

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        logger.warning("Configuration root must be a mapping, using default configuration")
        return apply_env_overrides(get_default_config())

    logger.info(f"Loaded configuration from {config_path}")
    return apply_env_overrides(merge_config(get_default_config(), loaded))


def get_default_config() -> Dict[str, Any]:
    """Return default configuration when config.yml is not available.

    Returns:
        Dictionary with default configuration values (a fresh copy)
    """
    return copy.deepcopy(_DEFAULT_CONFIG)


def merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Merge overrides into base, one level of nesting deep."""
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            section = dict(merged[key])
            section.update(value)
            merged[key] = section
        else:
            merged[key] = value
    return merged


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Apply SALTBOX_* environment variables on top of a loaded configuration."""
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            config.setdefault(section, {})[key] = value
            logger.debug(f"Configuration {section}.{key} overridden by {env_name}")
    return config


def is_debug_enabled() -> bool:
    """Return True when SALTBOX_DEBUG is set to a truthy value."""
    return os.environ.get("SALTBOX_DEBUG", "").lower() in ("true", "1", "yes")
