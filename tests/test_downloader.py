"""Test the YouTube audio downloader and its progress hook"""

import io
import pytest
from pathlib import Path
from unittest.mock import MagicMock, Mock, patch
from yt_dlp.utils import DownloadError

from trackgrab.exceptions import LibraryError
from trackgrab.models import DownloadJob, TrackReference, TrackStatus
from trackgrab.utils.library import LibraryScanner
from trackgrab.utils.logger import setup_logging
from trackgrab.youtube.downloader import AUDIO_ONLY_FORMAT, AudioDownloader, DownloadProgressHook


VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


@pytest.fixture
def ydl():
    """The object yielded by `with yt_dlp.YoutubeDL(...) as ydl`"""
    with patch('trackgrab.youtube.downloader.yt_dlp.YoutubeDL') as mock_class:
        instance = MagicMock()
        instance.extract_info.return_value = {'id': 'dQw4w9WgXcQ', 'title': 'Rick Astley: Never Gonna Give You Up?'}
        instance.download.return_value = 0
        mock_class.return_value.__enter__.return_value = instance
        instance.options_class = mock_class
        yield instance


@pytest.fixture
def downloader(settings):
    return AudioDownloader(settings, show_progress=False)


class TestAudioDownloader:
    """Test the fetch pipeline for one reference"""

    def test_downloads_to_sanitized_name(self, downloader, ydl, settings):
        outcome = downloader.fetch(TrackReference(VIDEO_URL))

        expected = settings.get_output_directory() / "Rick Astley Never Gonna Give You Up.mp3"
        assert outcome.status is TrackStatus.DOWNLOADED
        assert outcome.file_path == expected
        ydl.download.assert_called_once_with([VIDEO_URL])

    def test_transfer_options(self, downloader, ydl, settings):
        downloader.fetch(TrackReference(VIDEO_URL))

        options = ydl.options_class.call_args_list[-1].args[0]
        assert options['format'] == AUDIO_ONLY_FORMAT
        assert options['outtmpl'].endswith("Rick Astley Never Gonna Give You Up.mp3")
        assert options['retries'] == 0
        assert options['noplaylist'] is True
        assert len(options['progress_hooks']) == 1
        assert 'postprocessors' not in options

    def test_conversion_adds_ffmpeg_postprocessor(self, settings, ydl):
        settings.download.convert_audio = True
        AudioDownloader(settings, show_progress=False).fetch(TrackReference(VIDEO_URL))

        options = ydl.options_class.call_args_list[-1].args[0]
        assert options['postprocessors'][0]['key'] == 'FFmpegExtractAudio'
        assert options['postprocessors'][0]['preferredcodec'] == 'mp3'
        assert options['outtmpl'].endswith("Never Gonna Give You Up.%(ext)s")

    def test_percent_in_title_is_escaped(self, downloader, ydl):
        ydl.extract_info.return_value = {'title': '100% Pure Love'}
        downloader.fetch(TrackReference(VIDEO_URL))

        options = ydl.options_class.call_args_list[-1].args[0]
        assert options['outtmpl'].endswith("100%% Pure Love.mp3")

    def test_existing_file_is_skipped(self, downloader, ydl, settings):
        """A library hit stops the pipeline before the transfer"""
        output = settings.get_output_directory()
        output.mkdir(parents=True)
        (output / "rick astley never gonna give you up.mp3").touch()

        outcome = downloader.fetch(TrackReference(VIDEO_URL))

        assert outcome.status is TrackStatus.SKIPPED
        ydl.download.assert_not_called()

    def test_metadata_failure(self, downloader, ydl):
        ydl.extract_info.side_effect = DownloadError("Video unavailable")

        outcome = downloader.fetch(TrackReference(VIDEO_URL))

        assert outcome.status is TrackStatus.FAILED
        assert "Video unavailable" in outcome.reason
        ydl.download.assert_not_called()

    def test_missing_title(self, downloader, ydl):
        ydl.extract_info.return_value = {'id': 'x'}
        assert downloader.fetch(TrackReference(VIDEO_URL)).status is TrackStatus.FAILED

    def test_transfer_failure(self, downloader, ydl):
        ydl.download.side_effect = DownloadError("HTTP Error 403")

        outcome = downloader.fetch(TrackReference(VIDEO_URL))

        assert outcome.status is TrackStatus.FAILED
        assert ydl.download.call_count == 1

    def test_nonzero_return_code(self, downloader, ydl):
        ydl.download.return_value = 1
        assert downloader.fetch(TrackReference(VIDEO_URL)).status is TrackStatus.FAILED

    def test_unreadable_library(self, settings, ydl):
        scanner = Mock(spec=LibraryScanner)
        scanner.exists.side_effect = LibraryError("Cannot read directory")

        outcome = AudioDownloader(settings, scanner=scanner, show_progress=False).fetch(TrackReference(VIDEO_URL))

        assert outcome.status is TrackStatus.FAILED
        ydl.download.assert_not_called()


class TestDownloadProgressHook:
    """Test progress tracking from yt-dlp hook dictionaries"""

    def test_updates_job(self):
        job = DownloadJob(locator=VIDEO_URL, destination=Path("Song.mp3"))
        hook = DownloadProgressHook(job, "Song", disable=True)

        hook({'status': 'downloading', 'downloaded_bytes': 250, 'total_bytes': 1000})

        assert job.expected_size == 1000
        assert job.bytes_received == 250
        assert job.progress_percent == 25.0

    def test_estimate_used_without_content_length(self):
        job = DownloadJob(locator=VIDEO_URL, destination=Path("Song.mp3"))
        hook = DownloadProgressHook(job, "Song", disable=True)

        hook({'status': 'downloading', 'downloaded_bytes': 10, 'total_bytes_estimate': 4000.0})

        assert job.expected_size == 4000

    def test_speed_uses_wall_clock_delta(self):
        job = DownloadJob(locator=VIDEO_URL, destination=Path("Song.mp3"))
        hook = DownloadProgressHook(job, "Song", disable=True)
        hook.last_update = 10.0

        with patch('trackgrab.youtube.downloader.time.monotonic', return_value=12.0):
            hook({'status': 'downloading', 'downloaded_bytes': 100, 'total_bytes': 1000})

        assert hook.speed == 50.0
        assert hook.last_update == 12.0

    def test_finished_closes_bar(self):
        job = DownloadJob(locator=VIDEO_URL, destination=Path("Song.mp3"))
        hook = DownloadProgressHook(job, "Song", disable=True)

        hook({'status': 'downloading', 'downloaded_bytes': 1000, 'total_bytes': 1000})
        assert hook.bar is not None

        hook({'status': 'finished'})
        assert hook.bar is None
        assert hook.status == 'finished'


class TestUnexpectedErrors:
    """Errors yt-dlp lets through unwrapped still end as FAILED outcomes"""

    def test_extractor_key_error(self, downloader, ydl):
        ydl.extract_info.side_effect = KeyError('videoDetails')

        outcome = downloader.fetch(TrackReference(VIDEO_URL))

        assert outcome.status is TrackStatus.FAILED
        assert "KeyError" in outcome.reason
        ydl.download.assert_not_called()

    def test_transfer_type_error(self, downloader, ydl):
        ydl.download.side_effect = TypeError("'NoneType' object is not subscriptable")

        outcome = downloader.fetch(TrackReference(VIDEO_URL))

        assert outcome.status is TrackStatus.FAILED
        assert "TypeError" in outcome.reason

    def test_unreadable_library_reported_once(self, settings, ydl, restore_logging):
        stream = io.StringIO()
        setup_logging(level="INFO", colored_output=False, stream=stream)
        downloader = AudioDownloader(settings, show_progress=False)

        with patch('trackgrab.utils.library.os.scandir', side_effect=PermissionError(13, "Permission denied")):
            outcome = downloader.fetch(TrackReference(VIDEO_URL))

        assert outcome.status is TrackStatus.FAILED
        error_lines = [line for line in stream.getvalue().splitlines() if "Permission denied" in line]
        assert len(error_lines) == 1
        assert error_lines[0].startswith("Error reading the download folder")
