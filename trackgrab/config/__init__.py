"""
Configuration package for trackgrab

- settings.py: dataclass settings loaded from YAML and the environment
- auth.py: Spotify client-credentials grant producing a CredentialToken

Usage:

    from trackgrab.config import get_settings, SpotifyAuth

    settings = get_settings()
    token = SpotifyAuth(settings).request_token()
"""

from .settings import Settings, get_settings, reload_settings
from .auth import SpotifyAuth, CredentialToken

__all__ = [
    'Settings',
    'get_settings',
    'reload_settings',
    'SpotifyAuth',
    'CredentialToken',
]
