"""
Local library scanner

Decides whether a track is already present in the output directory by
listing it (flat, non-recursive) and comparing file names case-insensitively.
"""

import os
from pathlib import Path
from typing import Iterator, Optional, Union

from ..exceptions import LibraryError
from .logger import get_logger


class LibraryScanner:
    """
    Read-only existence check over a single directory

    Two match modes are supported:
    - "substring": the candidate name is contained in an entry name. Similar
      titles can match each other, e.g. "Song.mp3" matches "Old Song.mp3".
    - "exact": the candidate name equals an entry name.
    Both ignore case.
    """

    def __init__(self, directory: Union[str, Path], match_mode: str = "substring"):
        if match_mode not in ("substring", "exact"):
            raise ValueError(f"Unknown match mode: {match_mode}")
        self.directory = Path(directory)
        self.match_mode = match_mode
        self.logger = get_logger(__name__)

    def _entries(self) -> Iterator[str]:
        """
        Names of the directory entries

        Raises:
            LibraryError: If the directory exists but cannot be listed
        """
        try:
            with os.scandir(self.directory) as entries:
                for entry in entries:
                    yield entry.name
        except FileNotFoundError:
            # Nothing downloaded yet
            return
        except OSError as e:
            self.logger.debug(f"Cannot read library directory {self.directory}: {e}")
            raise LibraryError(
                f"Cannot read directory {self.directory}: {e.strerror or e}",
                details={'directory': str(self.directory), 'original_error': e}
            )

    def find(self, candidate_name: str) -> Optional[str]:
        """
        First entry name matching the candidate, None when nothing matches

        Args:
            candidate_name: File name to look for, including its extension
        """
        needle = candidate_name.lower()
        for name in self._entries():
            haystack = name.lower()
            if self.match_mode == "exact":
                if haystack == needle:
                    return name
            elif needle in haystack:
                return name
        return None

    def exists(self, candidate_name: str) -> bool:
        """True when a matching file is already in the directory"""
        match = self.find(candidate_name)
        if match:
            self.logger.debug(f"Library match for '{candidate_name}': {match}")
        return match is not None
