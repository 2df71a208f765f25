# userdesk/config.py
# Description: Configuration management for the userdesk client.
#
# Imports
import copy
import os
import tomllib
from pathlib import Path
from typing import Dict, Any, Optional
#
# Third-Party Imports
import toml
from loguru import logger
#
# Local Imports
from .Constants import DEFAULT_API_BASE_URL, DEFAULT_API_TIMEOUT_SECONDS
#
#######################################################################################################################
#
# Functions:

# --- Path to the configuration file ---
CONFIG_ENV_VAR = "USERDESK_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "userdesk" / "config.toml"
BASE_DATA_DIR = Path.home() / ".local" / "share" / "userdesk"

CONFIG_TOML_CONTENT = f"""
# Configuration for userdesk
# This file is created with these defaults the first time the client starts.

[api]
base_url = "{DEFAULT_API_BASE_URL}"
# Seconds before a request is abandoned and reported as a network failure.
timeout = {DEFAULT_API_TIMEOUT_SECONDS}
# Sent as the x-api-key header when set (hosted demo APIs require one).
api_key = ""

[auth]
# Bearer token for PUT/DELETE. The USERDESK_API_TOKEN environment variable takes precedence.
token = ""

[logging]
log_level = "INFO"
log_filename = "userdesk.log"
# Set to false to log to the console only.
log_to_file = true
"""

try:
    DEFAULT_CONFIG_FROM_TOML: Dict[str, Any] = tomllib.loads(CONFIG_TOML_CONTENT)
except tomllib.TOMLDecodeError as e:
    logger.critical(f"FATAL: Could not parse internal CONFIG_TOML_CONTENT: {e}.")
    DEFAULT_CONFIG_FROM_TOML = {}


def deep_merge_dicts(base: Dict, update: Dict) -> Dict:
    """Recursively merges update_dict into base_dict."""
    merged = copy.deepcopy(base)
    for key, value in update.items():
        if isinstance(value, dict) and key in merged and isinstance(merged[key], dict):
            merged[key] = deep_merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def get_config_path() -> Path:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def save_settings(settings: Dict[str, Any], config_path: Optional[Path] = None) -> Path:
    path = Path(config_path) if config_path else get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        toml.dump(settings, f)
    logger.info(f"Wrote configuration to {path}")
    return path


# --- Primary Configuration Loading Logic ---
_CONFIG_CACHE: Optional[Dict[str, Any]] = None


def load_settings(force_reload: bool = False, config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Loads settings from the user's config.toml on top of the built-in defaults.
    If the file doesn't exist, it's created with the default content.
    """
    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None and not force_reload and config_path is None:
        return _CONFIG_CACHE

    path = Path(config_path) if config_path else get_config_path()
    loaded_config = copy.deepcopy(DEFAULT_CONFIG_FROM_TOML)

    if not path.exists():
        logger.info(f"Config file not found at {path}. Creating with default values.")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(CONFIG_TOML_CONTENT)
        except OSError as e:
            logger.error(f"Could not create default config file {path}: {e}. Using internal defaults.")
    else:
        try:
            with open(path, "rb") as f:
                user_config_from_file = tomllib.load(f)
            loaded_config = deep_merge_dicts(loaded_config, user_config_from_file)
            logger.info(f"Loaded and merged config from {path}")
        except tomllib.TOMLDecodeError as e:
            logger.error(f"Error decoding TOML config file {path}: {e}. Using internal defaults.")
        except OSError as e:
            logger.error(f"Could not read config file {path}: {e}. Using internal defaults.")

    _CONFIG_CACHE = loaded_config
    logger.debug(f"load_settings returning config with top-level keys: {list(loaded_config.keys())}")
    return _CONFIG_CACHE


def get_setting(section: str, key: str, default: Any = None, settings: Optional[Dict[str, Any]] = None) -> Any:
    config = settings if settings is not None else load_settings()
    section_data = config.get(section)
    if isinstance(section_data, dict):
        return section_data.get(key, default)
    return default


def get_api_base_url(settings: Optional[Dict[str, Any]] = None) -> str:
    base_url = get_setting("api", "base_url", DEFAULT_API_BASE_URL, settings)
    if not isinstance(base_url, str) or not base_url.strip():
        logger.warning(f"Invalid [api] base_url {base_url!r}; falling back to {DEFAULT_API_BASE_URL}")
        return DEFAULT_API_BASE_URL
    return base_url.strip()


def get_api_timeout(settings: Optional[Dict[str, Any]] = None) -> float:
    value = get_setting("api", "timeout", DEFAULT_API_TIMEOUT_SECONDS, settings)
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Config key 'timeout' has value {value!r} which is not a number. Using default.")
        return DEFAULT_API_TIMEOUT_SECONDS
    if timeout <= 0:
        logger.warning(f"Config key 'timeout' must be positive, got {timeout}. Using default.")
        return DEFAULT_API_TIMEOUT_SECONDS
    return timeout


def get_api_key(settings: Optional[Dict[str, Any]] = None) -> Optional[str]:
    return get_setting("api", "api_key", "", settings) or None


def get_log_file_path(settings: Optional[Dict[str, Any]] = None) -> Optional[Path]:
    if not get_setting("logging", "log_to_file", True, settings):
        return None
    log_filename = get_setting("logging", "log_filename", "userdesk.log", settings)
    return BASE_DATA_DIR / log_filename

#
# End of userdesk/config.py
#######################################################################################################################
