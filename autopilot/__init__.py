"""
Framework initialization and setup utilities.
"""

import logging
from typing import Dict, Any, Optional, Union

from .config.settings import load_config, default_settings, deep_merge, get_setting
from .context.store import create_store
from .data.service import DataService
from .tools.registry import ToolRegistry
from .tools.project_tools import register_project_tools
from .tools.analysis_tools import register_analysis_tools

logger = logging.getLogger(__name__)

def initialize_framework(config: Optional[Union[str, Dict[str, Any]]] = None) -> Dict[str, Any]:
    """
    Initialize the autopilot with the given configuration.

    Args:
        config: Path to configuration file, configuration dictionary, or None for defaults

    Returns:
        Dictionary of initialized framework components
    """
    if isinstance(config, str):
        settings = load_config(config)
    elif isinstance(config, dict):
        # Partial dictionaries are filled in from the defaults
        settings = deep_merge(default_settings, config)
    else:
        settings = deep_merge(default_settings, {})

    logger.info("Initializing Autopilot with settings")

    store = create_store(settings)
    logger.info(f"Issue store initialized with {len(store.list())} issue(s)")

    tool_registry = ToolRegistry(
        simulated_latency=get_setting(settings, "tools.simulated_latency", 0.0),
        validate_output=get_setting(settings, "tools.validate_output", True),
    )
    register_project_tools(tool_registry, store)
    register_analysis_tools(tool_registry, store)
    tool_registry.set_external_tools(get_setting(settings, "integrations.available_tools", []) or [])
    logger.info(f"Tool Registry initialized with {len(tool_registry.get_all_tools())} tool(s)")

    data_service = DataService(store, settings)

    return {
        "store": store,
        "tool_registry": tool_registry,
        "data_service": data_service,
        "settings": settings
    }

def setup_logging(config: Dict[str, Any] = None):
    """
    Set up logging based on configuration.

    Args:
        config: Configuration dictionary with logging settings
    """
    if not config:
        config = {}

    log_config = config.get('logging', {})
    log_level_name = log_config.get('level', 'INFO')
    log_format = log_config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    log_file = log_config.get('file')

    log_level = getattr(logging, log_level_name.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {log_level_name}")

    logging.basicConfig(
        level=log_level,
        format=log_format
    )

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(log_format))
        logging.getLogger().addHandler(file_handler)

    logger.info(f"Logging initialized at level: {log_level_name}")
