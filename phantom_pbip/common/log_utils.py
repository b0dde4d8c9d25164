"""
Logging utilities for the Phantom PBIP exporter.

This module provides a small function-based logging interface that:
1. Centralizes logging configuration and formatting
2. Keeps per-file output logging quiet unless explicitly enabled
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any

# Environment variables for logging control
ENV_LOG_LEVEL = 'PHANTOM_PBIP_LOG_LEVEL'
ENV_LOG_OUTPUT_FILES = 'PHANTOM_PBIP_LOG_OUTPUT_FILES'

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
    'critical': logging.CRITICAL
}

logger = logging.getLogger('phantom_pbip')


def should_log_output_files() -> bool:
    """Check if per-file output logging is enabled.

    Returns:
        True if output file logging is enabled, False otherwise
    """
    return os.environ.get(ENV_LOG_OUTPUT_FILES, 'false').lower() == 'true'


def get_log_level(level_name: Optional[str] = None) -> int:
    """Resolve a level name (or the environment setting) to a logging level"""
    name = (level_name or os.environ.get(ENV_LOG_LEVEL, 'info')).lower()
    return _LEVELS.get(name, logging.INFO)


def configure_logging(run_name: Optional[str] = None, level: Optional[str] = None) -> None:
    """Configure the logging system.

    Args:
        run_name: Optional name of the export run; when given, a log file is
            also written under ``logs/``
        level: Optional level name overriding PHANTOM_PBIP_LOG_LEVEL
    """
    log_level = get_log_level(level)

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if run_name:
        logs_dir = Path('logs')
        logs_dir.mkdir(exist_ok=True)

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        clean_name = ''.join(c if c.isalnum() else '_' for c in run_name)
        log_file = logs_dir / f'phantom_pbip_{clean_name}_{timestamp}.log'

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        logger.info(f"Logging configured with level: {logging.getLevelName(log_level)}")
        logger.info(f"Log file: {log_file}")


def log_info(message: str, context: Optional[Dict[str, Any]] = None) -> None:
    """Log an informational message.

    Args:
        message: Message to log
        context: Optional context dictionary
    """
    logger.info(message)


def log_debug(message: str, context: Optional[Dict[str, Any]] = None) -> None:
    """Log a debug message.

    Args:
        message: Message to log
        context: Optional context dictionary
    """
    logger.debug(message)


def log_warning(message: str, context: Optional[Dict[str, Any]] = None) -> None:
    """Log a warning message.

    Args:
        message: Message to log
        context: Optional context dictionary
    """
    logger.warning(message)


def log_error(message: str, exception: Optional[Exception] = None,
              context: Optional[Dict[str, Any]] = None) -> None:
    """Log an error message.

    Args:
        message: Message to log
        exception: Optional exception that caused the error
        context: Optional context dictionary
    """
    if exception:
        logger.error(f"{message}: {str(exception)}", exc_info=exception)
    else:
        logger.error(message)


def log_file_generated(file_path: str, details: Optional[str] = None) -> None:
    """Log a generated package entry.

    Archive entries are numerous, so they are only logged when
    PHANTOM_PBIP_LOG_OUTPUT_FILES is set to ``true``.

    Args:
        file_path: Path of the entry inside the package
        details: Optional additional details (size, kind)
    """
    if not should_log_output_files():
        return
    message = f"Generated {file_path}"
    if details:
        message += f" - {details}"
    logger.info(message)
