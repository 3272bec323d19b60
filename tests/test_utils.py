# tests/test_utils.py
"""Test utilities, helpers and the local library scanner"""

import pytest
from unittest.mock import patch

from trackgrab.exceptions import LibraryError
from trackgrab.utils.helpers import (
    sanitize_title,
    build_file_name,
    format_file_size,
    format_speed,
    ensure_directory,
)
from trackgrab.utils.library import LibraryScanner
from trackgrab.utils.logger import parse_size


class TestHelpers:
    """Test helper functions"""

    def test_sanitize_title_removes_illegal_characters(self):
        """Each of \\ / : " * ? < > | is removed"""
        assert sanitize_title('a\\b/c:d"e*f?g<h>i|j') == "abcdefghij"

    def test_sanitize_title_keeps_everything_else(self):
        """Spacing, case and punctuation outside the illegal set are kept"""
        assert sanitize_title("AC/DC - Back In Black (Official Video)") == "ACDC - Back In Black (Official Video)"
        assert sanitize_title("  Spaced  Out  ") == "  Spaced  Out  "
        assert sanitize_title("Ünïcödé & 'quotes'") == "Ünïcödé & 'quotes'"

    def test_sanitize_title_empty(self):
        assert sanitize_title("") == ""
        assert sanitize_title(None) == ""

    def test_build_file_name(self):
        assert build_file_name("AC/DC: Thunderstruck", "mp3") == "ACDC Thunderstruck.mp3"
        assert build_file_name("Song", ".m4a") == "Song.m4a"

    def test_format_file_size(self):
        """Test file size formatting"""
        assert format_file_size(1024) == "1.0 KB"
        assert format_file_size(1048576) == "1.0 MB"
        assert format_file_size(512) == "512 B"
        assert format_file_size(None) == "Unknown"

    def test_format_speed(self):
        assert format_speed(None) == "0.00 MB/s"
        assert format_speed(2 * 1024 * 1024) == "2.00 MB/s"
        assert format_speed(512 * 1024) == "0.50 MB/s"

    def test_ensure_directory(self, temp_dir):
        target = ensure_directory(temp_dir / "a" / "b")
        assert target.is_dir()

    def test_parse_size(self):
        assert parse_size("10MB") == 10 * 1024 * 1024
        assert parse_size("512B") == 512
        with pytest.raises(ValueError):
            parse_size("lots")


class TestLibraryScanner:
    """Test the existence check over the output directory"""

    def test_missing_directory_has_no_matches(self, temp_dir):
        scanner = LibraryScanner(temp_dir / "missing")
        assert scanner.exists("Song.mp3") is False

    def test_substring_match_is_case_insensitive(self, temp_dir):
        (temp_dir / "Rick Astley - Never Gonna Give You Up.mp3").touch()
        scanner = LibraryScanner(temp_dir)

        assert scanner.exists("never gonna give you up.mp3")
        assert scanner.exists("RICK ASTLEY - NEVER GONNA GIVE YOU UP.MP3")
        assert not scanner.exists("Together Forever.mp3")

    def test_substring_match_can_hit_similar_titles(self, temp_dir):
        """A shorter title contained in an existing name counts as present"""
        (temp_dir / "Old Song.mp3").touch()
        scanner = LibraryScanner(temp_dir)

        assert scanner.find("Song.mp3") == "Old Song.mp3"

    def test_exact_mode_requires_whole_name(self, temp_dir):
        (temp_dir / "Old Song.mp3").touch()
        scanner = LibraryScanner(temp_dir, match_mode="exact")

        assert not scanner.exists("Song.mp3")
        assert scanner.exists("old song.MP3")

    def test_extension_is_part_of_the_name(self, temp_dir):
        (temp_dir / "Song.webm").touch()
        assert not LibraryScanner(temp_dir).exists("Song.mp3")

    def test_unknown_match_mode(self, temp_dir):
        with pytest.raises(ValueError):
            LibraryScanner(temp_dir, match_mode="fuzzy")

    def test_unreadable_directory_raises_library_error(self, temp_dir):
        scanner = LibraryScanner(temp_dir)
        error = PermissionError(13, "Permission denied")

        with patch('trackgrab.utils.library.os.scandir', side_effect=error):
            with pytest.raises(LibraryError) as exc_info:
                scanner.exists("Song.mp3")

        assert "Permission denied" in str(exc_info.value)

    def test_scanner_reads_directory_each_time(self, temp_dir):
        """Files written after construction are seen by the next check"""
        scanner = LibraryScanner(temp_dir)
        assert not scanner.exists("Later.mp3")

        (temp_dir / "Later.mp3").touch()
        assert scanner.exists("Later.mp3")
