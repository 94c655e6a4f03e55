"""
Configuration management
"""
import os
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel


# ============================================
# CONFIGURATION DEFAULTS
# ============================================

class ConfigDefaults:
    """Default configuration values as constants"""

    # Event assembly defaults
    DEFAULT_DURATION_MINUTES = 60
    BARE_HOUR_PM_CUTOFF = 9  # bare hours below this read as afternoon ("at 7" -> 19:00)

    # Calendar output defaults
    PRODUCT_ID = "-//event-parser//Natural Language Events//EN"
    ICAL_VERSION = "2.0"
    CALENDAR_SCALE = "GREGORIAN"

    # Logging defaults
    LOGGING_LEVEL_WARNING = "WARNING"

    # Config file defaults
    CONFIG_PATH_DEFAULT = "config/config.yaml"

    # Timezone mapping
    TIMEZONE_AUTO = "auto"
    TIMEZONE_DEFAULT = "UTC"
    TIMEZONE_PST = "America/Los_Angeles"
    TIMEZONE_PDT = "America/Los_Angeles"
    TIMEZONE_EST = "America/New_York"
    TIMEZONE_EDT = "America/New_York"
    TIMEZONE_CST = "America/Chicago"
    TIMEZONE_CDT = "America/Chicago"
    TIMEZONE_MST = "America/Denver"
    TIMEZONE_MDT = "America/Denver"


# ============================================
# CONFIGURATION MODELS
# ============================================

class ParserConfig(BaseModel):
    """Natural language parsing configuration"""
    default_duration_minutes: int = ConfigDefaults.DEFAULT_DURATION_MINUTES
    bare_hour_pm_cutoff: int = ConfigDefaults.BARE_HOUR_PM_CUTOFF
    timezone: str = ConfigDefaults.TIMEZONE_AUTO  # "auto" to detect from system, or e.g. "America/New_York", "UTC"


class CalendarConfig(BaseModel):
    """iCalendar output configuration"""
    product_id: str = ConfigDefaults.PRODUCT_ID
    version: str = ConfigDefaults.ICAL_VERSION
    scale: str = ConfigDefaults.CALENDAR_SCALE
    name: Optional[str] = None


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = ConfigDefaults.LOGGING_LEVEL_WARNING
    file: Optional[str] = None


class Config(BaseModel):
    """Main configuration"""
    parser: ParserConfig = ParserConfig()
    calendar: CalendarConfig = CalendarConfig()
    logging: LoggingConfig = LoggingConfig()


def load_config(config_path: str = ConfigDefaults.CONFIG_PATH_DEFAULT) -> Config:
    """
    Load configuration from YAML file and environment variables.
    """
    load_dotenv()

    with open(config_path, 'r') as f:
        config_dict = yaml.safe_load(f) or {}

    config_dict = _replace_env_vars(config_dict)

    return Config(**config_dict)


def get_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from ``config_path`` or fall back to defaults."""
    if config_path:
        return load_config(config_path)
    return Config()


def _replace_env_vars(obj: Any) -> Any:
    """
    Recursively replace ${VAR} placeholders with environment variables.
    """
    if isinstance(obj, dict):
        return {k: _replace_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_replace_env_vars(item) for item in obj]
    elif isinstance(obj, str) and obj.startswith("${") and obj.endswith("}"):
        var_name = obj[2:-1]
        env_value = os.getenv(var_name)
        if env_value:
            return env_value
        return obj
    return obj


def get_timezone(config: Optional[Config] = None) -> str:
    """
    Get timezone from config or environment variable.

    Args:
        config: Optional Config object

    Returns:
        Timezone string (e.g., "America/Los_Angeles", "UTC")
        Defaults to "UTC" if not configured
    """
    env_tz = os.getenv("TIMEZONE")
    if env_tz and env_tz != ConfigDefaults.TIMEZONE_AUTO:
        return env_tz

    tz = config.parser.timezone if config else ConfigDefaults.TIMEZONE_AUTO
    if tz != ConfigDefaults.TIMEZONE_AUTO:
        return tz

    # Auto-detect from system
    import time
    tz_name = time.tzname[0] if time.daylight == 0 else time.tzname[1]
    tz_map = {
        'PST': ConfigDefaults.TIMEZONE_PST,
        'PDT': ConfigDefaults.TIMEZONE_PDT,
        'EST': ConfigDefaults.TIMEZONE_EST,
        'EDT': ConfigDefaults.TIMEZONE_EDT,
        'CST': ConfigDefaults.TIMEZONE_CST,
        'CDT': ConfigDefaults.TIMEZONE_CDT,
        'MST': ConfigDefaults.TIMEZONE_MST,
        'MDT': ConfigDefaults.TIMEZONE_MDT,
    }
    if tz_name in tz_map:
        return tz_map[tz_name]

    import datetime
    local_tz = datetime.datetime.now().astimezone().tzinfo
    if hasattr(local_tz, 'key'):
        return local_tz.key

    return ConfigDefaults.TIMEZONE_DEFAULT
