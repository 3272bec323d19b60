"""
Command dispatch package

- commands.py: pure classification of prompt lines into command values
- session.py: Session object routing commands to resolvers and the downloader
"""

from .commands import (
    USAGE,
    Command,
    DirectVideo,
    PlaylistVideo,
    Keyword,
    PlaylistStreaming,
    Exit,
    Unknown,
    classify,
    classify_parts,
)
from .session import Session

__all__ = [
    'USAGE',
    'Command',
    'DirectVideo',
    'PlaylistVideo',
    'Keyword',
    'PlaylistStreaming',
    'Exit',
    'Unknown',
    'classify',
    'classify_parts',
    'Session',
]
