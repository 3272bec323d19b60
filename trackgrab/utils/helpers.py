"""
Utility functions and helpers for trackgrab
File naming, size formatting and directory handling
"""

import re
from pathlib import Path
from typing import Optional, Union


# Characters that are illegal in file names on at least one supported platform
ILLEGAL_FILENAME_CHARS = re.compile(r'[\\/:"*?<>|]')


def sanitize_title(title: str) -> str:
    """
    Remove characters that are illegal in file names from a track title

    Only the characters \\ / : " * ? < > | are removed; everything else,
    including spacing and case, is kept as is. The local library pre-check
    and the downloader both name files through this function.

    Args:
        title: Display title of the track

    Returns:
        Title safe to use as a file name stem
    """
    return ILLEGAL_FILENAME_CHARS.sub('', title or '')


def build_file_name(title: str, extension: str) -> str:
    """
    File name for a track: sanitized title plus audio extension

    Examples:
        build_file_name('AC/DC: Thunderstruck', 'mp3') -> 'ACDC Thunderstruck.mp3'
    """
    return f"{sanitize_title(title)}.{extension.lstrip('.')}"


def format_file_size(size_bytes: Optional[int]) -> str:
    """
    Format file size in bytes to human-readable string

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string, "Unknown" for None
    """
    if size_bytes is None:
        return "Unknown"
    if size_bytes < 0:
        return "0 B"

    units = ['B', 'KB', 'MB', 'GB', 'TB']
    size = float(size_bytes)
    unit_index = 0

    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {units[unit_index]}"
    else:
        return f"{size:.1f} {units[unit_index]}"


def format_speed(bytes_per_second: Optional[float]) -> str:
    """Throughput in MB/s with two decimals, as shown next to progress bars"""
    if not bytes_per_second or bytes_per_second < 0:
        return "0.00 MB/s"
    return f"{bytes_per_second / (1024 * 1024):.2f} MB/s"


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure directory exists, create if necessary

    Args:
        path: Directory path

    Returns:
        Path object
    """
    path_obj = Path(path)
    path_obj.mkdir(parents=True, exist_ok=True)
    return path_obj
