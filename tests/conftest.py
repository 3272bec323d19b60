"""Test configuration and fixtures"""

import logging
import pytest
import tempfile
from pathlib import Path

import yaml

from trackgrab.config.settings import Settings


ENV_VARS = (
    'SPOTIFY_CLIENT', 'SPOTIFY_SECRET', 'SPOTIFY_CLIENT_ID', 'SPOTIFY_CLIENT_SECRET',
    'TRACKGRAB_OUTPUT_DIR', 'TRACKGRAB_LOG_LEVEL',
)


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove trackgrab and Spotify variables from the environment for one test"""
    for name in ENV_VARS:
        # setenv first so the variable is restored (or removed) afterwards
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture
def restore_logging():
    """Put the root logger back the way it was after a test configures logging"""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def write_config(temp_dir):
    """Write a YAML config file and return its path"""
    def _write(data, name="config.yaml"):
        path = temp_dir / name
        path.write_text(yaml.safe_dump(data), encoding='utf-8')
        return path
    return _write


@pytest.fixture
def settings(clean_env, temp_dir, write_config):
    """Real settings with the output directory inside the temp dir"""
    path = write_config({
        'download': {'output_directory': str(temp_dir / 'downloaded')},
        'spotify': {'client_id': 'test-client', 'client_secret': 'test-secret'},
    })
    return Settings(str(path))


@pytest.fixture
def sample_track_data():
    """Sample playlist item as returned by the playlist-items endpoint"""
    return {
        'track': {
            'id': 'test_track_123',
            'name': 'Test Song',
            'artists': [
                {'id': 'artist_123', 'name': 'Test Artist'},
                {'id': 'artist_456', 'name': 'Guest'},
            ],
            'duration_ms': 210000,  # 3:30
        }
    }


@pytest.fixture
def playlist_page():
    """Build playlist-items pages with tracks named 'Song <n>' by 'Artist <n>'"""
    def _page(start, count, total):
        return {
            'items': [
                {'track': {'id': f'id{n}', 'name': f'Song {n}', 'artists': [{'id': f'a{n}', 'name': f'Artist {n}'}]}}
                for n in range(start, start + count)
            ],
            'total': total,
        }
    return _page
