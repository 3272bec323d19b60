"""
YouTube audio downloader using yt-dlp

Fetches the audio-only rendition of a single video into the output
directory. The flow for one reference is:

1. Extract metadata and take the video title
2. Build the file name from the sanitized title and the audio extension
3. Ask the local library scanner whether the file is already there; if so,
   stop without touching the network again
4. Start the transfer, selecting the best audio-only format
5. Track bytes received per chunk and draw a progress bar with ETA and
   throughput computed from the wall-clock delta between chunks
6. Write the stream to the computed path

Every failure is logged and returned as a FAILED outcome; nothing is retried
and partial files are left where yt-dlp wrote them.
"""

import time
from pathlib import Path
from typing import Dict, Any, Optional

import yt_dlp
from yt_dlp.utils import DownloadError
from tqdm import tqdm

from ..config.settings import Settings, get_settings
from ..exceptions import LibraryError, ResolutionError, TransferError
from ..models import DownloadJob, TrackOutcome, TrackReference
from ..utils.helpers import build_file_name, format_file_size, format_speed, sanitize_title
from ..utils.library import LibraryScanner
from ..utils.logger import get_logger


AUDIO_ONLY_FORMAT = 'bestaudio/best'


class DownloadProgressHook:
    """
    Progress tracking hook for yt-dlp transfers

    Updates the DownloadJob as chunks arrive and mirrors it on a tqdm bar.
    Reporting is purely observational and never raises into yt-dlp.
    """

    def __init__(
        self,
        job: DownloadJob,
        label: str,
        disable: bool = False
    ):
        """
        Args:
            job: Transfer state to update
            label: Text shown in front of the bar
            disable: Suppress the progress bar
        """
        self.job = job
        self.label = label
        self.disable = disable
        self.logger = get_logger(__name__)

        self.status = "starting"
        self.speed: Optional[float] = None
        self.last_update = time.monotonic()
        self.bar: Optional[tqdm] = None

    def _ensure_bar(self) -> tqdm:
        if self.bar is None:
            self.bar = tqdm(
                total=self.job.expected_size,
                desc=self.label,
                unit='B',
                unit_scale=True,
                unit_divisor=1024,
                bar_format='{percentage:3.0f}% |{bar}| ETA: {remaining}{postfix}',
                colour='magenta',
                leave=False,
                disable=self.disable,
            )
        return self.bar

    def __call__(self, d: Dict[str, Any]) -> None:
        self.status = d.get('status', self.status)

        if self.status == 'downloading':
            # Content length when the server sends it, yt-dlp's estimate otherwise
            total = d.get('total_bytes') or d.get('total_bytes_estimate')
            if total:
                self.job.expected_size = int(total)

            downloaded = int(d.get('downloaded_bytes') or 0)
            delta = downloaded - self.job.bytes_received
            self.job.bytes_received = downloaded

            now = time.monotonic()
            elapsed = now - self.last_update
            if elapsed > 0 and delta > 0:
                self.speed = delta / elapsed
            self.last_update = now

            bar = self._ensure_bar()
            if self.job.expected_size and bar.total != self.job.expected_size:
                bar.total = self.job.expected_size
            if delta > 0:
                bar.update(delta)
            bar.set_postfix_str(f"Speed: {format_speed(self.speed)}", refresh=False)

        elif self.status == 'finished':
            if self.bar is not None and self.job.expected_size:
                self.bar.update(max(0, self.job.expected_size - self.bar.n))
            self.close()
            self.logger.debug(f"Transfer finished: {self.job.destination} ({format_file_size(self.job.bytes_received)})")

        elif self.status == 'error':
            self.close()
            self.logger.debug(f"Transfer error reported by yt-dlp: {self.job.locator} at {self.job.progress_percent:.0f}%")

    def close(self) -> None:
        if self.bar is not None:
            self.bar.close()
            self.bar = None


class AudioDownloader:
    """
    Downloads the audio of one YouTube video per call

    The output directory, audio extension and match mode come from
    settings. The scanner shares the file naming rule with the downloader,
    so the pre-check always looks for the exact name that would be written.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        scanner: Optional[LibraryScanner] = None,
        show_progress: bool = True
    ):
        self.settings = settings or get_settings()
        self.logger = get_logger(__name__)

        self.output_directory = self.settings.get_output_directory()
        self.audio_format = self.settings.download.format
        self.convert_audio = self.settings.download.convert_audio
        self.bitrate = self.settings.download.bitrate
        self.show_progress = show_progress
        self.scanner = scanner or LibraryScanner(self.output_directory, self.settings.download.match_mode)

    def _base_options(self) -> Dict[str, Any]:
        options = {
            'quiet': True,
            'no_warnings': True,
            'noprogress': True,          # Progress is drawn by our own hook
            'noplaylist': True,          # A watch URL with list= still means one video here
            'retries': self.settings.network.max_retries,
            'fragment_retries': self.settings.network.max_retries,
            'extractor_retries': self.settings.network.max_retries,
        }
        if self.settings.network.socket_timeout:
            options['socket_timeout'] = self.settings.network.socket_timeout
        return options

    def _output_template(self, destination: Path) -> str:
        # yt-dlp treats '%' as template syntax
        if self.convert_audio:
            stem = str(destination.with_suffix(''))
            return stem.replace('%', '%%') + '.%(ext)s'
        return str(destination).replace('%', '%%')

    def _get_ydl_options(self, destination: Path, progress_hook: DownloadProgressHook) -> Dict[str, Any]:
        """
        yt-dlp options for an audio-only transfer to a fixed path

        Without conversion the selected audio stream is written unchanged to
        the destination. With conversion FFmpeg re-encodes it to the
        configured format, producing the same destination name.
        """
        options = self._base_options()
        options.update({
            'format': AUDIO_ONLY_FORMAT,
            'outtmpl': self._output_template(destination),
            'progress_hooks': [progress_hook],
        })

        if self.convert_audio:
            options['postprocessors'] = [{
                'key': 'FFmpegExtractAudio',
                'preferredcodec': self.audio_format,
                'preferredquality': str(self.bitrate),
            }]

        return options

    def get_video_info(self, locator: str) -> Dict[str, Any]:
        """
        Extract video metadata without downloading

        Raises:
            ResolutionError: If the video is invalid or unavailable
        """
        options = self._base_options()
        options['skip_download'] = True

        try:
            with yt_dlp.YoutubeDL(options) as ydl:
                info = ydl.extract_info(locator, download=False)
        except DownloadError as e:
            raise ResolutionError(str(e), details={'url': locator, 'original_error': e})
        except Exception as e:
            # Extractor bugs surface as plain exceptions, not DownloadError
            self.logger.debug(f"Unexpected extractor failure for {locator}", exc_info=True)
            raise ResolutionError(f"{type(e).__name__}: {e}", details={'url': locator, 'original_error': e})

        if not info or not info.get('title'):
            raise ResolutionError(f"No video information for {locator}", details={'url': locator})
        return info

    def _transfer(self, job: DownloadJob, title: str) -> None:
        """
        Stream the audio of job.locator to job.destination

        Raises:
            TransferError: If the stream or the file write fails
        """
        hook = DownloadProgressHook(job, title, disable=not self.show_progress)
        try:
            with yt_dlp.YoutubeDL(self._get_ydl_options(job.destination, hook)) as ydl:
                retcode = ydl.download([job.locator])
        except (DownloadError, OSError) as e:
            raise TransferError(str(e), details={'url': job.locator, 'original_error': e})
        except Exception as e:
            self.logger.debug(f"Unexpected transfer failure for {job.locator}", exc_info=True)
            raise TransferError(f"{type(e).__name__}: {e}", details={'url': job.locator, 'original_error': e})
        finally:
            hook.close()

        if retcode:
            raise TransferError(f"yt-dlp exited with code {retcode}", details={'url': job.locator})

    def fetch(self, reference: TrackReference) -> TrackOutcome:
        """
        Download the audio of a single video reference

        Args:
            reference: TrackReference whose locator is a watch URL or video ID

        Returns:
            TrackOutcome with status DOWNLOADED, SKIPPED or FAILED
        """
        source = reference.locator
        start_time = time.time()

        try:
            info = self.get_video_info(reference.locator)
        except ResolutionError as e:
            self.logger.console_error(f"Error getting video info from YouTube: {e}")
            return TrackOutcome.failed(source, str(e))

        title = info.get('title') or reference.title or reference.locator
        file_name = build_file_name(title, self.audio_format)
        display_name = sanitize_title(title)
        destination = self.output_directory / file_name

        try:
            if self.scanner.exists(file_name):
                self.logger.console_notice(f'The file "{display_name}" is already downloaded.')
                return TrackOutcome.skipped(source, destination)
        except LibraryError as e:
            self.logger.console_error(f"Error reading the download folder: {e}")
            return TrackOutcome.failed(source, str(e))

        self.logger.console_info(f"Downloading: {title}")
        job = DownloadJob(locator=reference.locator, destination=destination)

        try:
            self._transfer(job, display_name)
        except TransferError as e:
            self.logger.console_error(f"Error downloading from YouTube: {e}")
            return TrackOutcome.failed(source, str(e))

        self.logger.console_success(f"Downloaded: {display_name}")
        self.logger.debug(
            f"Download completed: {source} -> {destination.name} "
            f"({format_file_size(job.bytes_received)}, {time.time() - start_time:.1f}s)"
        )
        return TrackOutcome.downloaded(source, destination)
