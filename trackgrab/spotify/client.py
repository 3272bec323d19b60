"""
Spotify API client for playlist track listing

Validates Spotify playlist URLs, extracts the playlist ID and pages through
the playlist-items endpoint. Track objects are yielded one at a time so the
caller can resolve and download each track before the next page is fetched.

Paging state machine:

    UNAUTHENTICATED -> AUTHENTICATED -> PAGING(offset) -> DONE
                                   \\-> FAILED (any network or API error)

PAGING repeats while the cumulative offset is below the total reported by
the API. Nothing is retried and nothing is resumed after a failure.
"""

import re
from enum import Enum
from typing import Generator, Optional

import requests
from spotipy.exceptions import SpotifyException

from ..config.auth import CredentialToken, SpotifyAuth
from ..config.settings import Settings, get_settings
from ..exceptions import SpotifyError
from ..utils.logger import get_logger
from .models import SpotifyTrack


PLAYLIST_URL_PATTERN = re.compile(r'^https://open\.spotify\.com/playlist/[a-zA-Z0-9?=_-]+$')
PLAYLIST_ID_PATTERN = re.compile(r'playlist/(\w+)')

# Only the fields needed to build a search query
PLAYLIST_ITEM_FIELDS = 'items(track(id,name,duration_ms,artists(id,name))),total'


class FetchState(Enum):
    """Progress of a single playlist listing"""
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    PAGING = "paging"
    DONE = "done"
    FAILED = "failed"


class SpotifyClient:
    """
    Playlist listing on top of spotipy

    The client holds no token of its own: each listing receives the
    CredentialToken owned by the command session and builds a spotipy client
    bound to it.
    """

    def __init__(self, settings: Optional[Settings] = None, auth: Optional[SpotifyAuth] = None):
        self.settings = settings or get_settings()
        self.auth = auth or SpotifyAuth(self.settings)
        self.logger = get_logger(__name__)
        self.page_size = int(self.settings.spotify.page_size)
        self.state = FetchState.UNAUTHENTICATED
        self.offset = 0

    @staticmethod
    def validate_playlist_url(url: str) -> bool:
        """
        Check that a URL has the shape https://open.spotify.com/playlist/<id>

        Query strings such as ?si=... are accepted.
        """
        return bool(url) and PLAYLIST_URL_PATTERN.match(url) is not None

    @staticmethod
    def extract_playlist_id(url: str) -> Optional[str]:
        """
        Extract the playlist ID from a playlist URL

        Examples:
            extract_playlist_id("https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M?si=abc")
            -> "37i9dQZF1DXcBWIGoYBM5M"
        """
        match = PLAYLIST_ID_PATTERN.search(url or '')
        return match.group(1) if match else None

    def iter_playlist_tracks(
        self,
        playlist_id: str,
        token: CredentialToken
    ) -> Generator[SpotifyTrack, None, None]:
        """
        Yield every track of a playlist in playlist order

        Pages of page_size items are requested at offsets 0, page_size,
        2 * page_size, ... until the offset reaches the reported total.
        A page is fetched only after the caller has consumed the previous one.

        Args:
            playlist_id: Spotify playlist identifier
            token: Access token granted for this command

        Yields:
            SpotifyTrack with its 1-based playlist position

        Raises:
            SpotifyError: If a page request fails; state becomes FAILED
        """
        client = self.auth.client_for(token)
        self.state = FetchState.AUTHENTICATED
        self.offset = 0
        position = 1
        total = None

        while total is None or self.offset < total:
            self.state = FetchState.PAGING
            self.logger.debug(f"Fetching playlist {playlist_id} page at offset {self.offset}")

            try:
                page = client.playlist_items(
                    playlist_id,
                    fields=PLAYLIST_ITEM_FIELDS,
                    limit=self.page_size,
                    offset=self.offset,
                    additional_types=('track',),
                )
            except (SpotifyException, requests.RequestException) as e:
                self.state = FetchState.FAILED
                self.logger.debug(f"Playlist page request failed at offset {self.offset}: {e}")
                raise SpotifyError(
                    f"Failed to fetch playlist tracks: {e}",
                    details={'playlist_id': playlist_id, 'offset': self.offset, 'original_error': e}
                )

            page = page or {}
            items = page.get('items') or []
            total = int(page.get('total') or 0)

            for item in items:
                if not item or not item.get('track'):
                    # Removed or unavailable entries come back with a null track
                    self.logger.warning(f"Skipping unavailable track at position {position}")
                    position += 1
                    continue

                yield SpotifyTrack.from_spotify_data(item, position=position)
                position += 1

            self.offset += self.page_size

        self.state = FetchState.DONE
        self.logger.info(f"Finished listing playlist {playlist_id}, total: {total}")
