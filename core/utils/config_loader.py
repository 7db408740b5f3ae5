# Configuration Management Utilities
# YAML loading, environment overrides and merging for skeleton tracking options
import logging
import os
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "SKELETON_TRACKING_"
CONFIG_SECTION = "skeleton_tracking"


def find_config_file(config_path: str) -> Optional[str]:
    """Return the first existing location of config_path, or None."""
    script_dir = os.path.dirname(os.path.abspath(__file__))
    possible_paths = [
        config_path,  # Absolute path or relative to current working directory
        os.path.join(script_dir, "..", "..", config_path),  # Relative to project root
        os.path.join(os.getcwd(), "apps", config_path),  # If running from project root
    ]
    for path in possible_paths:
        abs_path = os.path.abspath(path)
        if os.path.isfile(abs_path):
            return abs_path
    return None


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        config_path: Path to the YAML file; searched relative to the cwd and project root.

    Returns:
        Parsed configuration dictionary (empty if the file is empty).
    """
    config_file = find_config_file(config_path)
    if not config_file:
        logger.error(f"Configuration file '{config_path}' not found!")
        raise FileNotFoundError(f"Configuration file '{config_path}' not found.")

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Successfully loaded configuration from: {config_file}")
        return config
    except Exception as e:
        logger.error(f"Failed to load config from {config_file}: {e}")
        raise


def get_environment_config(prefix: str = ENV_PREFIX, environ=None) -> Dict[str, str]:
    """Collect ``<prefix><OPTION>`` environment variables as lower-case option names."""
    environ = os.environ if environ is None else environ
    return {
        key[len(prefix):].lower(): value
        for key, value in environ.items()
        if key.startswith(prefix) and len(key) > len(prefix)
    }


def merge_configs(base_config: Dict[str, Any], override_config: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override_config into a copy of base_config."""
    merged = dict(base_config)
    for key, value in override_config.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value
    return merged
