from constants import CONFIG_FILE, DEFAULT_SETTINGS
import copy
import yaml
import os

import logging

# Retrieve main logger
logger = logging.getLogger("main")


# Cache variable
_cached_settings = None


def load_settings(force=False):
    global _cached_settings

    if _cached_settings and not force:
        return _cached_settings

    merged_settings = copy.deepcopy(DEFAULT_SETTINGS)
    if os.path.exists(CONFIG_FILE):
        logger.debug(f"Reading configuration file: {CONFIG_FILE}")
        with open(CONFIG_FILE, "r") as yaml_file:
            settings = yaml.safe_load(yaml_file) or {}

        # Deep merge with defaults to ensure new keys are present
        for section, values in settings.items():
            if isinstance(values, dict) and section in merged_settings and isinstance(merged_settings[section], dict):
                merged_settings[section].update(values)
            else:
                merged_settings[section] = values
    else:
        try:
            os.makedirs(os.path.dirname(CONFIG_FILE), exist_ok=True)
            with open(CONFIG_FILE, "w") as yaml_file:
                yaml.dump(merged_settings, yaml_file)
        except OSError as e:
            logger.warning(f"Could not write default settings to {CONFIG_FILE}: {e}")

    _cached_settings = merged_settings
    return merged_settings


def get_setting(section, key, default=None):
    """Shortcut for a single value, e.g. get_setting("listing", "page_size")."""
    return load_settings().get(section, {}).get(key, default)


def reload_conf():
    """Reload application settings cache"""
    global _cached_settings
    _cached_settings = None
    return load_settings(force=True)
