"""
Spotify client-credentials authentication

Obtains a bearer token through the OAuth2 client-credentials grant. The
token is handed back to the caller (the command session) and kept there;
nothing is cached on disk and nothing is refreshed in the background. A
fresh grant is requested once per ``spotify`` command.
"""

from dataclasses import dataclass
from typing import Optional

import requests
import spotipy
from spotipy.cache_handler import MemoryCacheHandler
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyClientCredentials, SpotifyOauthError

from .settings import Settings, get_settings
from ..exceptions import AuthenticationError
from ..utils.logger import get_logger


@dataclass(frozen=True)
class CredentialToken:
    """
    Short-lived bearer token for the Spotify catalog API

    Attributes:
        access_token: Bearer token value
        token_type: Token type reported by Spotify (normally "Bearer")
        expires_in: Lifetime in seconds at the moment it was granted
    """
    access_token: str
    token_type: str = "Bearer"
    expires_in: int = 3600

    def __repr__(self) -> str:
        # Never print the secret value in logs or tracebacks
        return f"CredentialToken(token_type={self.token_type!r}, expires_in={self.expires_in})"


class SpotifyAuth:
    """
    Client-credentials grant against the Spotify accounts service

    Each call to request_token() performs a new grant. Credentials come from
    settings, which read them from the environment.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.logger = get_logger(__name__)

    def request_token(self) -> CredentialToken:
        """
        Request a new access token

        Returns:
            CredentialToken for the current session

        Raises:
            AuthenticationError: If credentials are missing or rejected, or
                                 the accounts service cannot be reached
        """
        self.logger.console_info("Requesting Spotify API client credentials grant...")

        if not self.settings.has_spotify_credentials():
            # spotipy still falls back to SPOTIPY_CLIENT_ID / SPOTIPY_CLIENT_SECRET
            self.logger.debug("No Spotify credentials in settings")

        cache_handler = MemoryCacheHandler()
        try:
            manager = SpotifyClientCredentials(
                client_id=self.settings.spotify.client_id or None,
                client_secret=self.settings.spotify.client_secret or None,
                cache_handler=cache_handler,
                requests_timeout=self.settings.network.socket_timeout,
            )
            access_token = manager.get_access_token(as_dict=False, check_cache=False)
        except (SpotifyOauthError, SpotifyException, requests.RequestException) as e:
            self.logger.debug(f"Client credentials grant failed: {e}")
            raise AuthenticationError(f"Error authenticating with Spotify: {e}", details={'original_error': e})

        if not access_token:
            raise AuthenticationError("Error authenticating with Spotify: empty token response")

        # The in-memory handler holds the full token response of this grant only
        token_info = cache_handler.get_cached_token() or {}

        self.logger.info("Spotify access token granted")
        return CredentialToken(
            access_token=access_token,
            token_type=token_info.get('token_type', 'Bearer'),
            expires_in=int(token_info.get('expires_in', 3600)),
        )

    def client_for(self, token: CredentialToken) -> spotipy.Spotify:
        """
        Build a Spotify API client bound to a granted token

        Retries are disabled so that a failing call surfaces immediately.
        """
        return spotipy.Spotify(
            auth=token.access_token,
            requests_timeout=self.settings.network.socket_timeout,
            retries=self.settings.network.max_retries,
            status_retries=self.settings.network.max_retries,
        )
