"""
Spotify integration package

Playlist URL validation and paginated track listing through spotipy, plus
the small models the rest of the application consumes.
"""

from .client import SpotifyClient, FetchState
from .models import SpotifyArtist, SpotifyTrack

__all__ = [
    'SpotifyClient',
    'FetchState',
    'SpotifyArtist',
    'SpotifyTrack',
]
