"""
Configuration module for convertx.

Loads configuration from YAML file with sensible defaults.
"""

import os
import sys
from pathlib import Path
from typing import Dict, Any

import yaml

CYCLE_POLICIES = ('reference', 'error', 'ignore')


def get_default_config() -> Dict[str, Any]:
    """
    Return default configuration values.

    Returns:
        Dictionary with default configuration
    """
    return {
        'normalizer': {
            'cycle_policy': 'reference'
        },
        'logging': {
            'log_level': 'INFO',
            'logs_dir': 'logs'
        }
    }


def get_config_path() -> Path:
    """Location of the user configuration file (~/.convertx/config/config.yaml)."""
    return Path(os.path.expanduser('~/.convertx/config/config.yaml'))


def load_config() -> Dict[str, Any]:
    """
    Load configuration from YAML file or return defaults.

    Looks for config file at ~/.convertx/config/config.yaml.
    If file doesn't exist, returns default configuration.

    Returns:
        Dictionary with configuration values
    """
    config = get_default_config()
    config_path = get_config_path()

    if not config_path.exists():
        return config

    try:
        with open(config_path, 'r') as f:
            yaml_config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        print(f"Warning: Error loading config file: {e}. Using default configuration.", file=sys.stderr)
        return config

    if not yaml_config:
        return config

    if not isinstance(yaml_config, dict):
        print(
            f"Warning: Config file {config_path} must contain a mapping. Using default configuration.",
            file=sys.stderr
        )
        return config

    # YAML values override defaults, section by section
    for section in ('normalizer', 'logging'):
        if isinstance(yaml_config.get(section), dict):
            config[section].update(yaml_config[section])

    cycle_policy = config['normalizer'].get('cycle_policy')
    if cycle_policy not in CYCLE_POLICIES:
        print(
            f"Warning: Invalid cycle_policy {cycle_policy!r} in {config_path}. Using 'reference'.",
            file=sys.stderr
        )
        config['normalizer']['cycle_policy'] = 'reference'

    return config
