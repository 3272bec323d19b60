"""
YouTube integration package

- searcher.py: keyword search through YouTube Music (ytmusicapi)
- playlist.py: playlist listing through yt-dlp flat extraction
- downloader.py: audio-only download through yt-dlp with progress tracking
"""

from .searcher import YouTubeSearcher
from .playlist import YouTubePlaylistResolver
from .downloader import AudioDownloader, DownloadProgressHook

__all__ = [
    'YouTubeSearcher',
    'YouTubePlaylistResolver',
    'AudioDownloader',
    'DownloadProgressHook',
]
