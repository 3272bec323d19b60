# trackgrab/utils/__init__.py
"""
Utilities package
Logging, file naming helpers and the local library scanner
"""

from .logger import (
    get_logger,
    configure_from_settings,
    setup_logging,
    OperationLogger,
    get_current_log_file
)
from .helpers import (
    sanitize_title,
    build_file_name,
    format_file_size,
    format_speed,
    ensure_directory
)
from .library import LibraryScanner

__all__ = [
    # Logger exports
    'get_logger',
    'configure_from_settings',
    'setup_logging',
    'OperationLogger',
    'get_current_log_file',

    # Helper exports
    'sanitize_title',
    'build_file_name',
    'format_file_size',
    'format_speed',
    'ensure_directory',

    # Library
    'LibraryScanner',
]
