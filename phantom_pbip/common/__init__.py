"""Common utilities shared across the exporter."""

from .log_utils import (
    configure_logging,
    log_debug,
    log_error,
    log_file_generated,
    log_info,
    log_warning,
)

__all__ = [
    'configure_logging',
    'log_debug',
    'log_error',
    'log_file_generated',
    'log_info',
    'log_warning',
]
