"""
Configuration management for the Phantom PBIP exporter
"""

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from ..config_loader import load_config_file

__all__ = ['ExportConfig', 'ConfigManager', 'DEFAULT_THEME_COLORS']

logger = logging.getLogger(__name__)

DEFAULT_THEME_COLORS = [
    '#118DFF',
    '#12239E',
    '#E66C37',
    '#6B007B',
    '#E044A7',
    '#744EC2',
    '#D9B300',
    '#D64550',
    '#197278',
    '#6F9FB0',
]


@dataclass
class ExportConfig:
    """Configuration for the export pipeline"""
    canvas_width: int = 1280
    canvas_height: int = 720
    grid_columns: int = 24
    grid_rows: int = 18
    min_visual_width: int = 50
    min_visual_height: int = 30
    compatibility_level: int = 1600
    culture: str = "en-US"
    project_prefix: str = "Phantom"
    theme_name: str = "CY25SU12"
    compression_level: int = 6
    template_directory: str = str(Path(__file__).resolve().parent.parent / 'templates')
    default_theme_colors: List[str] = field(default_factory=lambda: list(DEFAULT_THEME_COLORS))


# Environment variable -> (field name, converter)
_ENV_FIELDS = {
    'PHANTOM_PBIP_CANVAS_WIDTH': ('canvas_width', int),
    'PHANTOM_PBIP_CANVAS_HEIGHT': ('canvas_height', int),
    'PHANTOM_PBIP_GRID_COLUMNS': ('grid_columns', int),
    'PHANTOM_PBIP_GRID_ROWS': ('grid_rows', int),
    'PHANTOM_PBIP_COMPATIBILITY_LEVEL': ('compatibility_level', int),
    'PHANTOM_PBIP_CULTURE': ('culture', str),
    'PHANTOM_PBIP_PROJECT_PREFIX': ('project_prefix', str),
    'PHANTOM_PBIP_THEME_NAME': ('theme_name', str),
    'PHANTOM_PBIP_COMPRESSION_LEVEL': ('compression_level', int),
    'PHANTOM_PBIP_TEMPLATE_DIR': ('template_directory', str),
}


class ConfigManager:
    """Manages configuration loading from .env, environment and YAML overrides"""

    def __init__(self, env_file: Optional[str] = None, config_file: Optional[str] = None):
        self.env_file = env_file or ".env"
        self.config_file = config_file
        self._load_environment()

    def _load_environment(self):
        """Load environment variables from .env file"""
        if os.path.exists(self.env_file):
            load_dotenv(self.env_file, override=False)

    def _environment_overrides(self) -> Dict[str, Any]:
        overrides = {}
        for env_name, (field_name, convert) in _ENV_FIELDS.items():
            value = os.getenv(env_name)
            if value is None or value == '':
                continue
            try:
                overrides[field_name] = convert(value)
            except ValueError:
                logger.warning(f"Ignoring invalid value for {env_name}: {value!r}")
        return overrides

    def _file_overrides(self) -> Dict[str, Any]:
        if not self.config_file:
            return {}
        data = load_config_file(self.config_file)
        section = data.get('export', data)
        known = {f.name for f in fields(ExportConfig)}
        unknown = sorted(set(section) - known)
        if unknown:
            logger.warning(f"Unknown export settings ignored: {', '.join(unknown)}")
        return {key: value for key, value in section.items() if key in known}

    def get_export_config(self) -> ExportConfig:
        """Get export configuration

        Precedence: YAML config file, then environment, then defaults.
        """
        config = ExportConfig()
        config = replace(config, **self._environment_overrides())
        config = replace(config, **self._file_overrides())
        return config

    def validate_config(self, config: Optional[ExportConfig] = None) -> bool:
        """Validate configuration settings"""
        config = config or self.get_export_config()
        if config.canvas_width <= 0 or config.canvas_height <= 0:
            raise ValueError("Canvas dimensions must be positive")
        if config.grid_columns <= 0 or config.grid_rows <= 0:
            raise ValueError("Grid dimensions must be positive")
        if not 0 <= config.compression_level <= 9:
            raise ValueError("Compression level must be between 0 and 9")
        template_path = Path(config.template_directory)
        if not template_path.exists():
            raise ValueError(f"Template directory not found: {template_path}")
        return True
