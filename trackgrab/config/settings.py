"""
Configuration management for trackgrab

This module loads and validates application settings from YAML files and
environment variables. Settings are grouped into dataclass sections:
- Spotify API credentials and paging
- Download preferences (output directory, audio extension, de-duplication)
- YouTube search options
- Logging output
- Network behaviour

Credentials are read from the environment, which python-dotenv fills from a
local ``keys.env`` or ``.env`` file. Missing credentials are not an error at
startup; the Spotify credential grant fails at first use instead.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, asdict
from dotenv import load_dotenv

from ..exceptions import ConfigError


# Environment files searched for Spotify credentials, first one wins per key
ENV_FILES = ("keys.env", ".env")

MATCH_MODES = ("substring", "exact")
AUDIO_FORMATS = ("mp3", "m4a", "webm", "opus", "flac")


@dataclass
class SpotifyConfig:
    """
    Spotify Web API settings

    Only the client-credentials grant is used, so no redirect URL or scope
    is needed. page_size is the number of playlist items requested per call
    (the API caps it at 100).
    """
    client_id: str = ""
    client_secret: str = ""
    page_size: int = 100


@dataclass
class DownloadConfig:
    """
    Download preferences

    output_directory: flat folder every track is written to
    format: extension appended to the sanitized title
    convert_audio: re-encode with FFmpeg to ``format`` instead of writing
                   the audio stream unchanged
    bitrate: target bitrate in kbps when converting
    match_mode: how the local library pre-check compares file names
                ("substring" or "exact", both case-insensitive)
    """
    output_directory: str = "./downloaded"
    format: str = "mp3"
    convert_audio: bool = False
    bitrate: int = 192
    match_mode: str = "substring"


@dataclass
class YouTubeConfig:
    """YouTube Music search options"""
    search_filter: str = "songs"
    search_limit: int = 1


@dataclass
class LoggingConfig:
    """
    Logging configuration and output settings

    The console only shows user-facing messages; the optional log file
    receives full technical detail.
    """
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


@dataclass
class NetworkConfig:
    """
    Network settings handed to yt-dlp and spotipy

    socket_timeout of None keeps each library's default timeout.
    max_retries stays at 0: a failed call is reported, not retried.
    """
    socket_timeout: Optional[int] = None
    max_retries: int = 0


class Settings:
    """
    Main settings class that manages all configuration

    Loads values in order of precedence: dataclass defaults, then the first
    YAML file found, then environment variables.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings from config file and environment variables

        Args:
            config_path: Path to a custom config file; when None the default
                         locations are searched
        """
        self.config_path = config_path
        self.config_dir = Path.home() / ".trackgrab"

        self.spotify = SpotifyConfig()
        self.download = DownloadConfig()
        self.youtube = YouTubeConfig()
        self.logging = LoggingConfig()
        self.network = NetworkConfig()

        self._load_config()
        self._load_environment_variables()

    def _sections(self) -> Dict[str, Any]:
        return {
            'spotify': self.spotify,
            'download': self.download,
            'youtube': self.youtube,
            'logging': self.logging,
            'network': self.network,
        }

    def _load_config(self) -> None:
        """
        Load configuration from the first YAML file found

        An explicit config_path must exist and parse; the default locations
        are optional.

        Raises:
            ConfigError: If the explicit file is missing or is not valid YAML
        """
        if self.config_path:
            path = Path(self.config_path).expanduser()
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}", details={'file_path': str(path)})
            self._apply_config(self._read_yaml(path))
            return

        for path in (self.config_dir / "config.yaml", Path("config.yaml")):
            if path.exists():
                self._apply_config(self._read_yaml(path))
                break

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config from {path}: {e}", details={'file_path': str(path)})

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping", details={'file_path': str(path)})
        return data

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Only keys that exist on the matching dataclass are applied; unknown
        sections and keys are ignored.
        """
        sections = self._sections()
        for section_name, section_data in config_data.items():
            if section_name in sections and isinstance(section_data, dict):
                config_obj = sections[section_name]
                for key, value in section_data.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def _load_environment_variables(self) -> None:
        """
        Load credentials and overrides from environment variables

        Environment files are loaded first without overriding variables
        that are already set. SPOTIFY_CLIENT / SPOTIFY_SECRET are accepted
        as older names for the credential pair.
        """
        for env_file in ENV_FILES:
            if Path(env_file).exists():
                load_dotenv(env_file, override=False)

        env_mappings = {
            'SPOTIFY_CLIENT': lambda v: setattr(self.spotify, 'client_id', v),
            'SPOTIFY_SECRET': lambda v: setattr(self.spotify, 'client_secret', v),
            'SPOTIFY_CLIENT_ID': lambda v: setattr(self.spotify, 'client_id', v),
            'SPOTIFY_CLIENT_SECRET': lambda v: setattr(self.spotify, 'client_secret', v),
            'TRACKGRAB_OUTPUT_DIR': lambda v: setattr(self.download, 'output_directory', v),
            'TRACKGRAB_LOG_LEVEL': lambda v: setattr(self.logging, 'level', v),
        }

        # Later names win, so the *_ID/*_SECRET pair overrides the legacy pair
        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                setter(value)

    def get_output_directory(self) -> Path:
        """Output directory with the user home expanded"""
        return Path(self.download.output_directory).expanduser()

    def get_config_directory(self) -> Path:
        return self.config_dir

    def has_spotify_credentials(self) -> bool:
        return bool(self.spotify.client_id and self.spotify.client_secret)

    def validate(self) -> List[str]:
        """
        Validate current configuration

        Credentials are not checked here; their absence is
        reported by the credential grant on first use.

        Returns:
            List of problems, empty when the configuration is usable
        """
        errors = []

        if self.download.match_mode not in MATCH_MODES:
            errors.append(f"Invalid match mode: {self.download.match_mode}")

        if self.download.format not in AUDIO_FORMATS:
            errors.append(f"Invalid download format: {self.download.format}")

        if not 1 <= int(self.spotify.page_size) <= 100:
            errors.append(f"Spotify page size must be between 1 and 100: {self.spotify.page_size}")

        if int(self.youtube.search_limit) < 1:
            errors.append(f"Search limit must be positive: {self.youtube.search_limit}")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Configuration as plain dictionaries, secrets blanked"""
        data = {name: asdict(section) for name, section in self._sections().items()}
        data['spotify']['client_id'] = ""
        data['spotify']['client_secret'] = ""
        return data

    def __str__(self) -> str:
        sections = [
            f"Output: {self.download.output_directory}",
            f"Format: {self.download.format}",
            f"Match: {self.download.match_mode}",
        ]
        return f"Settings({', '.join(sections)})"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the process-wide settings instance

    The instance is created on first access so that importing this module
    has no side effects.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings from configuration files

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance, also installed as the process-wide one
    """
    global _settings
    _settings = Settings(config_path)
    return _settings
