"""
YouTube playlist resolution

Lists every entry of a YouTube playlist with yt-dlp flat extraction, which
follows the playlist continuation pages until the end, and returns them as
an immutable Playlist.
"""

from typing import Optional

import yt_dlp
from yt_dlp.utils import DownloadError

from ..config.settings import Settings, get_settings
from ..exceptions import ResolutionError
from ..models import Playlist, TrackReference
from ..utils.logger import get_logger
from .searcher import WATCH_URL


class YouTubePlaylistResolver:
    """Resolve a YouTube playlist URL to its ordered list of videos"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.logger = get_logger(__name__)

    def _ydl_options(self):
        options = {
            'quiet': True,
            'no_warnings': True,
            'skip_download': True,
            'extract_flat': 'in_playlist',
            'noprogress': True,
        }
        if self.settings.network.socket_timeout:
            options['socket_timeout'] = self.settings.network.socket_timeout
        return options

    def resolve(self, playlist_url: str) -> Playlist:
        """
        Fetch the full video list of a playlist

        Entries without a video ID (deleted or private videos) are dropped.

        Raises:
            ResolutionError: If the playlist cannot be extracted
        """
        try:
            with yt_dlp.YoutubeDL(self._ydl_options()) as ydl:
                info = ydl.extract_info(playlist_url, download=False)
        except DownloadError as e:
            raise ResolutionError(f"Error fetching playlist: {e}", details={'url': playlist_url, 'original_error': e})

        if not info:
            raise ResolutionError(f"Error fetching playlist: no data for {playlist_url}", details={'url': playlist_url})

        tracks = []
        for entry in info.get('entries') or []:
            if not entry or not entry.get('id'):
                continue
            tracks.append(TrackReference(
                locator=WATCH_URL.format(video_id=entry['id']),
                title=entry.get('title'),
            ))

        playlist = Playlist(title=info.get('title') or playlist_url, tracks=tuple(tracks))
        self.logger.debug(f"Resolved playlist '{playlist.title}' with {len(playlist)} videos")
        return playlist
