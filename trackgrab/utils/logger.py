"""
Logging configuration and utilities for trackgrab
User-facing status lines go to the console in color; technical detail goes to an optional rotating file
"""

import logging
import logging.handlers
import re
import sys
import time
from pathlib import Path
from typing import Optional
import colorama
from colorama import Fore, Style
from tqdm import tqdm


# ANSI colors on Windows consoles
colorama.init()


# Console styles for user-facing lines; keys are set as record.console_style
STYLE_COLORS = {
    'info': Fore.YELLOW + Style.BRIGHT,
    'success': Fore.GREEN + Style.BRIGHT,
    'notice': Fore.CYAN + Style.BRIGHT,
    'error': Fore.RED + Style.BRIGHT,
}

LEVEL_COLORS = {
    'DEBUG': Fore.CYAN,
    'INFO': '',
    'WARNING': Fore.YELLOW,
    'ERROR': Fore.RED + Style.BRIGHT,
    'CRITICAL': Fore.RED + Style.BRIGHT,
}

EXTERNAL_LIBS = [
    'spotipy', 'urllib3', 'requests', 'yt_dlp', 'ytmusicapi',
    'urllib3.connectionpool',
]

FILE_FORMAT = '%(asctime)s | %(name)-30s | %(levelname)-8s | %(funcName)-20s | %(message)s'


class ConsoleMessageFilter(logging.Filter):
    """Pass WARNING+ records and records flagged for the console"""

    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True
        return bool(getattr(record, 'console_output', False))


class ColoredFormatter(logging.Formatter):
    """Colors the whole console line by its console style, falling back to the level"""

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True):
        super().__init__(fmt or '%(message)s')
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if not self.use_colors:
            return message

        style = getattr(record, 'console_style', None)
        color = STYLE_COLORS.get(style) if style else LEVEL_COLORS.get(record.levelname, '')
        if not color:
            return message
        return f"{color}{message}{Style.RESET_ALL}"


class ProgressHandler(logging.Handler):
    """Handler that writes through tqdm so active progress bars are not broken"""

    def __init__(self, stream=None):
        super().__init__()
        self.stream = stream or sys.stdout

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    console_output: bool = True,
    colored_output: bool = True,
    max_size: str = "10MB",
    backup_count: int = 3,
    stream=None
) -> None:
    """
    Install the console and file handlers on the root logger

    Args:
        level: Logging level for the file handler (DEBUG, INFO, WARNING, ...)
        log_file: Path to log file (None to disable file logging)
        console_output: Enable console logging
        colored_output: Enable colored console output
        max_size: Maximum log file size before rotation
        backup_count: Number of backup log files to keep
        stream: Console stream, stdout by default
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture everything, filter at handler level

    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    # Console: status lines and warnings only
    if console_output:
        console_handler = ProgressHandler(stream or sys.stdout)
        console_handler.setLevel(logging.DEBUG if numeric_level <= logging.DEBUG else logging.INFO)
        console_handler.addFilter(ConsoleMessageFilter())
        console_handler.setFormatter(ColoredFormatter(fmt='%(message)s', use_colors=colored_output))
        root_logger.addHandler(console_handler)

    # File: everything at the configured level
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=parse_size(max_size),
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        root_logger.addHandler(file_handler)

    # Third-party libraries report through our own messages
    for lib in EXTERNAL_LIBS:
        lib_logger = logging.getLogger(lib)
        lib_logger.setLevel(logging.CRITICAL)
        lib_logger.propagate = False

    logging.getLogger('trackgrab').info(
        f"Logging initialized - Level: {level}, Console: {console_output}, File: {log_file}"
    )


def parse_size(size_str: str) -> int:
    """
    Parse size string to bytes

    Args:
        size_str: Size string like "10MB", "1GB", "500KB"

    Returns:
        Size in bytes

    Raises:
        ValueError: If the string is not a number followed by a unit
    """
    size_str = size_str.upper().strip()

    multipliers = {
        'B': 1,
        'KB': 1024,
        'MB': 1024 ** 2,
        'GB': 1024 ** 3,
        'TB': 1024 ** 4,
    }

    match = re.match(r'^(\d+(?:\.\d+)?)\s*([KMGT]?B)$', size_str)
    if not match:
        raise ValueError(f"Invalid size format: {size_str}")

    number, unit = match.groups()
    return int(float(number) * multipliers[unit])


def get_current_log_file() -> Optional[Path]:
    """Path of the active rotating log file, None when file logging is off"""
    for handler in logging.getLogger().handlers:
        if isinstance(handler, logging.handlers.RotatingFileHandler):
            return Path(handler.baseFilename)
    return None


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance for a module

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance with console_* methods attached
    """
    logger = logging.getLogger(name)

    def _console(level: int, message: str, style: str) -> None:
        if not logger.isEnabledFor(level):
            return
        record = logger.makeRecord(logger.name, level, '', 0, message, (), None)
        record.console_output = True
        record.console_style = style
        logger.handle(record)

    def console_info(message: str):
        """Informational status line for the user"""
        _console(logging.INFO, message, 'info')

    def console_success(message: str):
        """Completed operation"""
        _console(logging.INFO, message, 'success')

    def console_notice(message: str):
        """Neutral notice, e.g. a skipped download"""
        _console(logging.INFO, message, 'notice')

    def console_error(message: str):
        """Error line for the user"""
        _console(logging.ERROR, message, 'error')

    logger.console_info = console_info
    logger.console_success = console_success
    logger.console_notice = console_notice
    logger.console_error = console_error

    return logger


def configure_from_settings(settings=None, verbose: bool = False) -> None:
    """Configure logging from the logging section of the settings; verbose forces DEBUG"""
    if settings is None:
        from ..config.settings import get_settings
        settings = get_settings()

    log_file_path = None
    if settings.logging.file:
        log_path = Path(settings.logging.file).expanduser()
        if not log_path.is_absolute():
            log_path = settings.get_config_directory() / log_path
        log_file_path = str(log_path)

    setup_logging(
        level="DEBUG" if verbose else settings.logging.level,
        log_file=log_file_path,
        console_output=settings.logging.console_output,
        colored_output=settings.logging.colored_output,
        max_size=settings.logging.max_size,
        backup_count=settings.logging.backup_count
    )


class OperationLogger:
    """Logger for tracking long-running operations such as a whole playlist"""

    def __init__(self, logger: logging.Logger, operation_name: str):
        """
        Initialize operation logger

        Args:
            logger: Logger returned by get_logger()
            operation_name: Name of the operation
        """
        self.logger = logger
        self.operation_name = operation_name
        self.start_time = None

    def start(self, message: Optional[str] = None) -> None:
        self.start_time = time.time()
        self.logger.console_info(message or f"Starting {self.operation_name}")
        self.logger.info(f"Operation started: {self.operation_name}")

    def progress(self, message: str, current: Optional[int] = None, total: Optional[int] = None) -> None:
        """Log a progress step; numbered steps also go to the log file with a percentage"""
        if current is not None and total:
            self.logger.info(f"{self.operation_name}: {message} ({current}/{total}, {(current / total) * 100:.1f}%)")
        else:
            self.logger.info(f"{self.operation_name}: {message}")
        self.logger.console_info(message)

    def complete(self, message: Optional[str] = None) -> None:
        self.logger.console_success(message or f"{self.operation_name} completed")
        if self.start_time:
            duration = time.time() - self.start_time
            self.logger.info(f"Operation completed: {self.operation_name} in {duration:.2f}s")
        else:
            self.logger.info(f"Operation completed: {self.operation_name}")

    def error(self, message: str, exception: Optional[Exception] = None) -> None:
        self.logger.console_error(f"{self.operation_name} failed: {message}")
        self.logger.debug(f"Operation failed: {self.operation_name} - {message}", exc_info=exception)
