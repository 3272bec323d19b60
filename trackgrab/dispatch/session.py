"""
Command session: routes classified commands to resolvers and the downloader

A Session is built once at startup and owns everything a command needs:
settings, the YouTube searcher, playlist resolvers, the audio downloader and
the Spotify credential token of the current session. Handlers are plain
methods selected by command type.

Every handler catches the errors of its own operation, reports them and
returns the per-track outcomes it produced, so a failed track or playlist
never ends the prompt. Inside a playlist, tracks are processed strictly one
after another in playlist order, and a failed track does not stop the rest.
"""

from pathlib import Path
from typing import Callable, Dict, List, Optional, Type

from ..config.auth import CredentialToken, SpotifyAuth
from ..config.settings import Settings, get_settings
from ..exceptions import AuthenticationError, ResolutionError, TrackgrabError
from ..models import TrackOutcome, TrackReference, TrackStatus, summarize_outcomes
from ..spotify.client import SpotifyClient
from ..utils.helpers import ensure_directory
from ..utils.logger import OperationLogger, get_logger
from ..youtube.downloader import AudioDownloader
from ..youtube.playlist import YouTubePlaylistResolver
from ..youtube.searcher import YouTubeSearcher
from .commands import (
    USAGE,
    Command,
    DirectVideo,
    Exit,
    Keyword,
    PlaylistStreaming,
    PlaylistVideo,
    Unknown,
    classify,
)


class Session:
    """
    State and handlers for one run of the prompt

    Collaborators can be injected, which is how tests replace network
    clients with mocks.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        downloader: Optional[AudioDownloader] = None,
        searcher: Optional[YouTubeSearcher] = None,
        youtube_playlists: Optional[YouTubePlaylistResolver] = None,
        spotify: Optional[SpotifyClient] = None,
        auth: Optional[SpotifyAuth] = None
    ):
        self.settings = settings or get_settings()
        self.logger = get_logger(__name__)

        self.auth = auth or SpotifyAuth(self.settings)
        self.downloader = downloader or AudioDownloader(self.settings)
        self.searcher = searcher or YouTubeSearcher(self.settings)
        self.youtube_playlists = youtube_playlists or YouTubePlaylistResolver(self.settings)
        self.spotify = spotify or SpotifyClient(self.settings, auth=self.auth)

        self.token: Optional[CredentialToken] = None
        self.running = True

        self._handlers: Dict[Type, Callable[..., List[TrackOutcome]]] = {
            DirectVideo: self.download_video,
            PlaylistVideo: self.download_video_playlist,
            Keyword: self.download_by_keyword,
            PlaylistStreaming: self.download_spotify_playlist,
            Exit: self.exit,
            Unknown: self.unknown,
        }

    def prepare_output_directory(self) -> Path:
        """Create the output directory on first run"""
        directory = self.settings.get_output_directory()
        if not directory.exists():
            ensure_directory(directory)
            self.logger.console_success(f"Created {directory} folder.")
        return directory

    def handle_line(self, line: str) -> List[TrackOutcome]:
        """Classify and run one line of prompt input"""
        return self.dispatch(classify(line))

    def dispatch(self, command: Command) -> List[TrackOutcome]:
        self.logger.debug(f"Dispatching {command!r}")
        handler = self._handlers[type(command)]
        return handler(command)

    # Single tracks

    def search_and_fetch(self, query: str) -> TrackOutcome:
        """
        Resolve keywords to the top YouTube match and download it

        An empty search is reported and returned as NOT_FOUND; the
        downloader is not called.
        """
        try:
            reference = self.searcher.search_top_match(query)
        except ResolutionError as e:
            self.logger.console_error(f"Error searching YouTube: {e}")
            return TrackOutcome.failed(query, str(e))

        if reference is None:
            return TrackOutcome.not_found(query)

        return self._fetch_track(reference)

    def download_video(self, command: DirectVideo) -> List[TrackOutcome]:
        return [self._fetch_track(TrackReference(command.url))]

    def download_by_keyword(self, command: Keyword) -> List[TrackOutcome]:
        return [self.search_and_fetch(command.query)]

    def _fetch_track(self, reference: TrackReference) -> TrackOutcome:
        """Run the downloader for one reference; any error becomes a FAILED outcome"""
        try:
            return self.downloader.fetch(reference)
        except TrackgrabError as e:
            self.logger.console_error(f"Error downloading video from URL: {e}")
            return TrackOutcome.failed(reference.locator, str(e))
        except Exception as e:
            self.logger.console_error(f"Error downloading video from URL: {e}")
            self.logger.debug(f"Unexpected failure for {reference.locator}", exc_info=True)
            return TrackOutcome.failed(reference.locator, f"{type(e).__name__}: {e}")

    # Playlists

    def _summary(self, outcomes: List[TrackOutcome]) -> str:
        counts = summarize_outcomes(outcomes)
        return (
            f"Total tracks: {len(outcomes)} "
            f"(downloaded {counts[TrackStatus.DOWNLOADED]}, skipped {counts[TrackStatus.SKIPPED]}, "
            f"not found {counts[TrackStatus.NOT_FOUND]}, failed {counts[TrackStatus.FAILED]})"
        )

    def download_video_playlist(self, command: PlaylistVideo) -> List[TrackOutcome]:
        """Download every video of a YouTube playlist in order"""
        operation = OperationLogger(self.logger, "YouTube playlist")
        operation.start(f"Fetching playlist: {command.url}")

        try:
            playlist = self.youtube_playlists.resolve(command.url)
        except ResolutionError as e:
            operation.error(f"could not fetch playlist: {e}", e)
            return []

        self.logger.console_info(f"Playlist fetched successfully: {playlist.title}")
        self.logger.console_info(f"Number of videos in the playlist: {len(playlist)}")

        if not playlist.tracks:
            self.logger.console_error("No videos found in the playlist.")
            return []

        outcomes = []
        for index, reference in enumerate(playlist, 1):
            operation.progress(f"Downloading video: {reference.locator}", index, len(playlist))
            outcomes.append(self._fetch_track(reference))

        operation.complete(f"Playlist tracks processed successfully. {self._summary(outcomes)}")
        return outcomes

    def download_spotify_playlist(self, command: PlaylistStreaming) -> List[TrackOutcome]:
        """
        Download every track of a Spotify playlist through YouTube search

        An invalid URL stops here, before the credential grant or any other
        network call. A new token is requested for every playlist command
        and kept on the session.
        """
        if not self.spotify.validate_playlist_url(command.url):
            self.logger.console_error("Invalid Spotify playlist URL.")
            return []

        playlist_id = self.spotify.extract_playlist_id(command.url)
        operation = OperationLogger(self.logger, "Spotify playlist")
        operation.start(f"Handling Spotify playlist: {playlist_id}")

        outcomes: List[TrackOutcome] = []
        try:
            self.token = self.auth.request_token()
            for track in self.spotify.iter_playlist_tracks(playlist_id, self.token):
                query = track.search_query
                self.logger.debug(f"Track {track.position}: {track} ({track.duration_str})")
                operation.progress(f"Processing track: {query}", track.position)
                outcomes.append(self.search_and_fetch(query))
        except (AuthenticationError, ResolutionError) as e:
            operation.error(str(e), e)
            return outcomes

        operation.complete(f"Playlist tracks processed successfully. {self._summary(outcomes)}")
        return outcomes

    # Control

    def exit(self, command: Exit) -> List[TrackOutcome]:
        self.running = False
        return []

    def unknown(self, command: Unknown) -> List[TrackOutcome]:
        self.logger.console_error(f"Invalid command. {USAGE}")
        return []
