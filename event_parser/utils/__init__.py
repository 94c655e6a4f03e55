"""
Shared utilities: configuration, logging and date/time recognition
"""

from .config import Config, ConfigDefaults, get_config, load_config
from .logger import setup_logger

__all__ = [
    'Config',
    'ConfigDefaults',
    'get_config',
    'load_config',
    'setup_logger',
]
