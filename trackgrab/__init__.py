"""
trackgrab: download music from YouTube and Spotify playlists as local audio files

An interactive prompt accepts three commands:

    yt <keywords|url>     search YouTube Music, or download a video or playlist
    spotify <playlist>    download every track of a public Spotify playlist
    exit                  leave the prompt

Spotify tracks are located on YouTube by searching for "<name> <artists>"
and downloaded from there. Files already present in the output directory
are skipped.

Package layout:

- config/: YAML/.env settings and the Spotify client credentials grant
- spotify/: playlist paging and track models
- youtube/: search, playlist listing and audio download through yt-dlp
- dispatch/: command classification and the Session that runs commands
- utils/: logging, file naming helpers and the local library scanner
"""

# Version information for the trackgrab package
__version__ = "0.9.0"

__author__ = "trackgrab contributors"

__description__ = "Download YouTube videos and Spotify playlists as local audio files"

__all__ = [
    "__version__",
    "__author__",
    "__description__"
]
