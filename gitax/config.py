#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys
import tempfile

import yaml

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("gitax")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. GITAX_CONFIG environment variable
    2. ~/.gitax/ directory
    """
    if 'GITAX_CONFIG' in os.environ:
        path = Path(os.environ['GITAX_CONFIG'])
        if path.exists():
            return path

    gitax_dir = Path.home() / '.gitax'
    for filename in CONFIG_FILENAMES:
        path = gitax_dir / filename
        if path.exists() and path.stat().st_size > 0:
            return path

    # If no file exists, return default path for saving
    return gitax_dir / 'config.json'


def load_config():
    """Load configuration from file, then apply environment overrides."""
    config_path = get_config_path()

    config = get_default_config()

    if config_path.exists():
        try:
            suffix = config_path.suffix.lower()
            if suffix == '.toml':
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif suffix in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            else:
                with open(config_path, 'r') as f:
                    file_config = json.load(f)

            config = merge_configs(config, file_config)
        except (OSError, ValueError, yaml.YAMLError) as e:
            # tomllib.TOMLDecodeError and json.JSONDecodeError are ValueErrors
            logger.error(f"Error loading config from {config_path}: {e}")

    config = apply_env_overrides(config)
    apply_logging_config(config)

    return config


def save_config(config):
    """Save configuration to file."""
    config_path = get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        if config_path.suffix.lower() in ['.yaml', '.yml']:
            with open(config_path, 'w') as f:
                yaml.safe_dump(config, f, default_flow_style=False)
        else:
            if config_path.suffix.lower() == '.toml':
                # tomllib is read-only
                logger.warning("TOML configuration cannot be written. Saving as JSON instead.")
                config_path = config_path.with_suffix('.json')
            with open(config_path, 'w') as f:
                json.dump(config, f, indent=2)

        logger.info(f"Configuration saved to {config_path}")
    except OSError as e:
        logger.error(f"Error saving config to {config_path}: {e}")

    return config_path


def get_default_config():
    """Get default configuration."""
    return {
        "materialize": {
            # Empty means the system temporary directory
            "temp_dir": "",
        },
        "sync": {
            "patterns": ["*.xpo"],
            "source": "tree",
        },
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(message)s"
        },
    }


def generate_default_config():
    """Write the default configuration to ~/.gitax/config.json unless one exists."""
    config_path = Path.home() / '.gitax' / 'config.json'
    if config_path.exists():
        logger.info(f"Configuration already exists at {config_path}")
        return config_path
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, 'w') as f:
        json.dump(get_default_config(), f, indent=2)
    logger.info(f"Default configuration file has been saved to {config_path}")
    return config_path


def get_temp_dir(config=None) -> str:
    """Directory where materialized artifacts are written."""
    if config is None:
        config = load_config()
    temp_dir = config.get('materialize', {}).get('temp_dir') or ''
    if temp_dir:
        temp_dir = os.path.expanduser(temp_dir)
        os.makedirs(temp_dir, exist_ok=True)
        return temp_dir
    return tempfile.gettempdir()


def apply_logging_config(config):
    """Apply the logging section to the package logger."""
    level_name = str(config.get('logging', {}).get('level', 'INFO')).upper()
    level = logging.getLevelName(level_name)
    if isinstance(level, int):
        logger.setLevel(level)
    else:
        logger.warning(f"Unknown logging level in config: {level_name}")


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: GITAX_SECTION_KEY
    For example: GITAX_MATERIALIZE_TEMP_DIR=/var/tmp/gitax
    """
    env_prefix = "GITAX_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i : i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if matched_key:
                if i + best_match_len == len(key_parts):
                    current_level[matched_key] = typed_value
                    break

                if isinstance(current_level[matched_key], dict):
                    current_level = current_level[matched_key]
                    i += best_match_len
                else:
                    # Path conflict, e.g., env var is longer but we found a non-dict value
                    break
            else:
                break

    return config
