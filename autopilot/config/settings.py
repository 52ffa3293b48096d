"""
Configuration settings for the Autopilot framework.
"""

import copy
import os
import yaml
from typing import Dict, Any

from ..core.exceptions import ConfigurationError

# Default settings
default_settings = {
    "store": {
        "type": "memory",  # Only in-memory storage is supported
        "seed": "fixtures",  # Options: fixtures, empty
    },
    "tools": {
        "simulated_latency": 0.0,  # Seconds to sleep before each tool body
        "validate_output": True,
    },
    "data": {
        "use_mock_data": True,
    },
    "integrations": {
        # Names of real external tools the orchestrator reports as available,
        # e.g. "linear__list_issues". Fallback tools for these are disabled.
        "available_tools": [],
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    }
}

def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from a YAML file and merge with defaults.

    Args:
        config_path: Path to the configuration file

    Returns:
        Dict containing the merged configuration
    """
    if not os.path.exists(config_path):
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        user_config = yaml.safe_load(f)

    # An empty file is allowed and means "all defaults"
    if user_config is None:
        user_config = {}
    if not isinstance(user_config, dict):
        raise ConfigurationError(f"Configuration file must contain a mapping: {config_path}")

    return deep_merge(default_settings, user_config)

def deep_merge(default: Dict, override: Dict) -> Dict:
    """
    Recursively merge two dictionaries, with override values taking precedence.

    Args:
        default: Default dictionary
        override: Override dictionary with values to merge

    Returns:
        Merged dictionary
    """
    result = copy.deepcopy(default)

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result

def get_setting(settings: Dict[str, Any], path: str, default=None) -> Any:
    """
    Get a setting using dot notation path.

    Args:
        settings: Settings dictionary
        path: Dot notation path (e.g., "tools.simulated_latency")
        default: Default value if path not found

    Returns:
        Setting value or default
    """
    parts = path.split('.')
    current = settings

    try:
        for part in parts:
            current = current[part]
        return current
    except (KeyError, TypeError):
        return default
