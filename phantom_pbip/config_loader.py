"""Utility functions for loading configuration files."""
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


def get_config_path(config_file: str) -> Path:
    """
    Get the path to a configuration file.

    This function looks for the config file in the following order:
    1. As given (absolute, or relative to the current working directory)
    2. In a 'config' subdirectory of the current working directory
    3. In the package's config directory

    Args:
        config_file: The name of the config file to find

    Returns:
        Path to the config file

    Raises:
        FileNotFoundError: If the config file cannot be found
    """
    config_path = Path(config_file)
    if config_path.exists():
        return config_path

    config_path = Path.cwd() / 'config' / config_file
    if config_path.exists():
        return config_path

    packaged = resources.files('phantom_pbip.config').joinpath(config_file)
    if packaged.is_file():
        return Path(str(packaged))

    raise FileNotFoundError(
        f"Could not find config file: {config_file}. "
        "Please make sure it exists in the current directory, 'config' subdirectory, "
        "or in the package's config directory."
    )


def load_config_file(config_file: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        config_file: The name of the config file to load

    Returns:
        The loaded configuration as a dictionary (empty for an empty file)

    Raises:
        FileNotFoundError: If the config file cannot be found
        yaml.YAMLError: If there's an error parsing the YAML file
    """
    config_path = get_config_path(config_file)
    with open(config_path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def load_packaged_config(config_file: str, package: Optional[str] = None) -> Dict[str, Any]:
    """Load a YAML file shipped inside the package, ignoring local overrides"""
    text = resources.files(package or 'phantom_pbip.config').joinpath(config_file).read_text(encoding='utf-8')
    return yaml.safe_load(text) or {}
