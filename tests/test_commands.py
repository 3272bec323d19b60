"""Test command classification"""

import pytest

from trackgrab.dispatch.commands import (
    DirectVideo,
    Exit,
    Keyword,
    PlaylistStreaming,
    PlaylistVideo,
    Unknown,
    classify,
    classify_parts,
)


class TestClassify:
    """Every input line maps to exactly one command"""

    @pytest.mark.parametrize("line, expected", [
        ("yt https://www.youtube.com/watch?v=dQw4w9WgXcQ",
         DirectVideo("https://www.youtube.com/watch?v=dQw4w9WgXcQ")),
        ("yt https://music.youtube.com/watch?v=dQw4w9WgXcQ&feature=share",
         DirectVideo("https://music.youtube.com/watch?v=dQw4w9WgXcQ&feature=share")),
        ("yt https://youtu.be/dQw4w9WgXcQ",
         DirectVideo("https://youtu.be/dQw4w9WgXcQ")),
    ])
    def test_direct_video(self, line, expected):
        assert classify(line) == expected

    @pytest.mark.parametrize("url", [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ&list=PL1234567890",
        "https://www.youtube.com/playlist?list=PL1234567890",
        "https://youtu.be/dQw4w9WgXcQ?list=PL1234567890",
    ])
    def test_playlist_video(self, url):
        assert classify(f"yt {url}") == PlaylistVideo(url)

    def test_keywords_keep_every_word(self):
        assert classify("yt never gonna give you up") == Keyword("never gonna give you up")

    def test_extra_whitespace_between_words(self):
        assert classify("  yt   daft   punk  ") == Keyword("daft punk")

    @pytest.mark.parametrize("argument", [
        "https://vimeo.com/12345",
        "https://www.youtube.com/channel/UC123",
        "https://www.youtube.com/watch",
        "youtube.com/watch?v=dQw4w9WgXcQ",
    ])
    def test_non_video_urls_are_keywords(self, argument):
        assert classify(f"yt {argument}") == Keyword(argument)

    def test_spotify(self):
        url = "https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M"
        assert classify(f"spotify {url}") == PlaylistStreaming(url)

    def test_spotify_without_url(self):
        """URL validation happens when the command runs"""
        assert classify("spotify") == PlaylistStreaming("")

    def test_exit(self):
        assert classify("exit") == Exit()

    @pytest.mark.parametrize("line, verb", [
        ("", ""),
        ("   ", ""),
        ("yt", "yt"),
        ("download something", "download"),
        ("YT song", "YT"),
    ])
    def test_unknown(self, line, verb):
        assert classify(line) == Unknown(verb)

    def test_classify_parts(self):
        assert classify_parts("yt", ("daft", "punk")) == Keyword("daft punk")
        assert classify_parts("spotify", []) == PlaylistStreaming("")
