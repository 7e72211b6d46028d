"""Shared utilities: configuration, logging, errors and paths."""

from .config import ConfigLoader
from .logging import setup_logging, LogContext
from .logging_config import LoggingConfig
from .errors import SidecarFixerError, FileProcessingError, PermissionDeniedError

__all__ = [
    'ConfigLoader',
    'LoggingConfig',
    'setup_logging',
    'LogContext',
    'SidecarFixerError',
    'FileProcessingError',
    'PermissionDeniedError',
]
