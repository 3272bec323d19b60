"""
Exception classes for trackgrab.

Exception Hierarchy:
    TrackgrabError (base)
        ConfigError - Configuration file or value issues
        ResolutionError - Reference not found, invalid URL, search failure
            SpotifyError - Spotify catalog paging failures
        AuthenticationError - Spotify credential grant failures
        TransferError - Stream/network failure during an audio download
        LibraryError - Output directory cannot be read

Components raise these; the command session catches them, logs a message
and returns control to the prompt.
"""

from typing import Any, Dict, Optional


class TrackgrabError(Exception):
    """
    Base exception for all trackgrab errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (URLs, queries,
                 the wrapped exception).
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(TrackgrabError):
    """Raised when a configuration file cannot be loaded or holds invalid values."""


class ResolutionError(TrackgrabError):
    """
    Raised when a reference cannot be resolved.

    Common causes:
        - Video unavailable, private or removed
        - Search service failure
        - Malformed playlist URL
    """


class SpotifyError(ResolutionError):
    """Raised when the Spotify catalog API fails while listing a playlist."""


class AuthenticationError(TrackgrabError):
    """
    Raised when the Spotify client-credentials grant fails.

    Missing SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET values surface here,
    at first use, not at startup.
    """


class TransferError(TrackgrabError):
    """Raised when the audio stream fails after the transfer has started."""


class LibraryError(TrackgrabError):
    """Raised when the output directory exists but cannot be listed."""
