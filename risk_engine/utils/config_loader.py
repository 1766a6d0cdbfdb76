"""Configuration file loader with validation"""

import yaml
import os
from pathlib import Path
from typing import Dict, Any, Optional
from .errors import ConfigurationError

DEFAULT_CONFIG_PATH = "config/rules.yaml"
REQUIRED_KEYS = ['version', 'risk_levels', 'anomaly_rules', 'views']


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load YAML configuration file with validation.
    RISK_CONFIG_PATH overrides the default location.

    Args:
        config_path: Path to configuration file

    Returns:
        Dictionary with configuration

    Raises:
        ConfigurationError: If file doesn't exist or invalid YAML
    """
    if config_path is None:
        config_path = os.getenv("RISK_CONFIG_PATH", DEFAULT_CONFIG_PATH)

    config_file = Path(config_path)

    if not config_file.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")
    except OSError as e:
        raise ConfigurationError(f"Error loading configuration: {e}")

    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration must be a mapping: {config_path}")

    # Validate required keys
    missing_keys = [key for key in REQUIRED_KEYS if key not in config]

    if missing_keys:
        raise ConfigurationError(f"Missing required configuration keys: {missing_keys}")

    return config


def save_config(config_path: str, config: Dict[str, Any]) -> None:
    """
    Save configuration to YAML file

    Args:
        config_path: Path to configuration file
        config: Configuration dictionary

    Raises:
        ConfigurationError: If unable to write file
    """
    try:
        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w') as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)

    except OSError as e:
        raise ConfigurationError(f"Error saving configuration: {e}")


def get_section(config: Dict[str, Any], section: str) -> Dict[str, Any]:
    """Return a top-level config section, or an empty dict when absent"""
    return config.get(section) or {}
