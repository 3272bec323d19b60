"""
Spotify data models for playlist items

Only what is needed to turn a playlist entry into a YouTube search query is
kept: track identity, name, artists and duration.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional


@dataclass
class SpotifyArtist:
    """
    Artist reference embedded in a track object

    Attributes:
        id: Spotify artist identifier (None for local files)
        name: Artist display name
    """
    id: Optional[str]
    name: str

    @classmethod
    def from_spotify_data(cls, data: Dict[str, Any]) -> 'SpotifyArtist':
        """Construct from a simplified artist object of the Web API"""
        return cls(
            id=data.get('id'),
            name=data.get('name') or '',
        )


@dataclass
class SpotifyTrack:
    """
    Track listed in a Spotify playlist

    Attributes:
        id: Spotify track identifier (None for local files)
        name: Track title
        artists: Credited artists in API order
        duration_ms: Track length in milliseconds
        position: 1-based position in the playlist
    """
    id: Optional[str]
    name: str
    artists: List[SpotifyArtist] = field(default_factory=list)
    duration_ms: int = 0
    position: Optional[int] = None

    @classmethod
    def from_spotify_data(cls, data: Dict[str, Any], position: Optional[int] = None) -> 'SpotifyTrack':
        """
        Construct from a playlist item or a bare track object

        Playlist items wrap the track under a 'track' key; both shapes are
        accepted.

        Raises:
            ValueError: If the item carries no track object
        """
        track_data = data['track'] if 'track' in data else data
        if not track_data:
            raise ValueError("Playlist item has no track")

        return cls(
            id=track_data.get('id'),
            name=track_data.get('name') or '',
            artists=[SpotifyArtist.from_spotify_data(a) for a in track_data.get('artists') or []],
            duration_ms=track_data.get('duration_ms') or 0,
            position=position,
        )

    @property
    def artist_names(self) -> List[str]:
        return [artist.name for artist in self.artists if artist.name]

    @property
    def all_artists(self) -> str:
        return ", ".join(self.artist_names)

    @property
    def search_query(self) -> str:
        """Track name followed by every artist name, joined by single spaces"""
        return " ".join([self.name] + self.artist_names).strip()

    @property
    def duration_str(self) -> str:
        total_seconds = self.duration_ms // 1000
        return f"{total_seconds // 60}:{total_seconds % 60:02d}"

    def __str__(self) -> str:
        return f"{self.all_artists} - {self.name}" if self.artists else self.name
