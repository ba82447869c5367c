"""Logging helpers for whale-swaps."""

from .logger import (
    get_logger,
    log_classification_event,
    log_critical_error,
    setup_console_logging,
    setup_json_logging,
)

__all__ = [
    'get_logger',
    'log_classification_event',
    'log_critical_error',
    'setup_console_logging',
    'setup_json_logging',
]
