"""
Command classification for the interactive prompt

Each input line is turned into exactly one command value:

    yt <watch url with list=>     -> PlaylistVideo
    yt <youtube playlist url>     -> PlaylistVideo
    yt <watch url> / youtu.be/ID  -> DirectVideo
    yt <anything else>            -> Keyword (the whole argument string)
    spotify <playlist url>        -> PlaylistStreaming
    exit                          -> Exit
    anything else                 -> Unknown

Classification is pure; URL validation for Spotify happens when the command
runs so the error can be reported there.
"""

import re
from dataclasses import dataclass
from typing import Sequence, Union
from urllib.parse import parse_qs, urlparse


USAGE = 'Enter "yt <keywords/link>" or "spotify <playlist>" to search/download from YouTube/Spotify or "exit" to quit.'

YOUTUBE_HOSTS = ('youtube.com', 'www.youtube.com', 'm.youtube.com', 'music.youtube.com')
SHORT_HOSTS = ('youtu.be', 'www.youtu.be')
URL_PATTERN = re.compile(r'^https?://\S+$')


@dataclass(frozen=True)
class DirectVideo:
    url: str


@dataclass(frozen=True)
class PlaylistVideo:
    url: str


@dataclass(frozen=True)
class Keyword:
    query: str


@dataclass(frozen=True)
class PlaylistStreaming:
    url: str


@dataclass(frozen=True)
class Exit:
    pass


@dataclass(frozen=True)
class Unknown:
    verb: str


Command = Union[DirectVideo, PlaylistVideo, Keyword, PlaylistStreaming, Exit, Unknown]


def classify_youtube(argument: str) -> Command:
    """
    Classify the argument string of a yt command

    A URL counts as a watch URL when its path ends in /watch and it carries
    a v= parameter. A list= parameter on a watch URL, or a /playlist?list=
    URL, selects playlist handling.
    """
    if not argument:
        return Unknown('yt')

    if URL_PATTERN.match(argument):
        parsed = urlparse(argument)
        host = (parsed.hostname or '').lower()
        params = parse_qs(parsed.query)

        if host in YOUTUBE_HOSTS:
            if parsed.path.rstrip('/').endswith('/watch') and params.get('v'):
                if params.get('list'):
                    return PlaylistVideo(argument)
                return DirectVideo(argument)
            if parsed.path.rstrip('/') == '/playlist' and params.get('list'):
                return PlaylistVideo(argument)
        elif host in SHORT_HOSTS and parsed.path.strip('/'):
            if params.get('list'):
                return PlaylistVideo(argument)
            return DirectVideo(argument)

    return Keyword(argument)


def classify_parts(verb: str, args: Sequence[str]) -> Command:
    """Classify a command verb and its whitespace-split arguments"""
    if verb == 'yt':
        return classify_youtube(' '.join(args))
    if verb == 'spotify':
        return PlaylistStreaming(args[0] if args else '')
    if verb == 'exit':
        return Exit()
    return Unknown(verb)


def classify(line: str) -> Command:
    """
    Classify one line of prompt input

    Examples:
        classify('yt never gonna give you up') -> Keyword('never gonna give you up')
        classify('exit') -> Exit()
    """
    parts = line.strip().split()
    if not parts:
        return Unknown('')
    return classify_parts(parts[0], parts[1:])
