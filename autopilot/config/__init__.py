"""
Configuration loading for the Autopilot framework.
"""

from .settings import default_settings, load_config, deep_merge, get_setting
