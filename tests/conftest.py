"""Test configuration and fixtures"""

import json
import pytest
import yaml
from pathlib import Path

from playlist_archiver.config import auth as auth_module
from playlist_archiver.config import settings as settings_module
from playlist_archiver.config.settings import Settings
from playlist_archiver.spotify import client as client_module

ENV_VARS = [
    'SPOTIFY_CLIENT_ID',
    'SPOTIFY_CLIENT_SECRET',
    'SPOTIFY_REDIRECT_URL',
    'PLAYLIST_ARCHIVER_DOWNLOADS',
    'PLAYLIST_ARCHIVER_CLEANED',
]


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Run every test in its own directory without global state or env overrides"""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings_module, '_settings', None)
    monkeypatch.setattr(auth_module, '_auth_instance', None)
    monkeypatch.setattr(client_module, '_client_instance', None)


@pytest.fixture
def write_config(tmp_path):
    """Write a config.yaml whose storage paths all live under tmp_path"""

    def _write(credentials=True, **spotify_overrides) -> Path:
        spotify = {
            'redirect_url': 'http://127.0.0.1:8080/callback',
            'auth_timeout': 5,
            'request_interval': 0,
        }
        spotify.update(spotify_overrides)
        config = {
            'spotify': spotify,
            'storage': {
                'credentials_file': str(tmp_path / 'config.json'),
                'token_file': str(tmp_path / 'token.json'),
                'downloads_directory': str(tmp_path / 'downloads'),
                'cleaned_directory': str(tmp_path / 'cleaned'),
            },
        }
        if credentials:
            (tmp_path / 'config.json').write_text(
                json.dumps({'client_id': 'test-id', 'client_secret': 'test-secret'}),
                encoding='utf-8'
            )
        config_path = tmp_path / 'config.yaml'
        config_path.write_text(yaml.safe_dump(config), encoding='utf-8')
        return config_path

    return _write


@pytest.fixture
def make_settings(write_config):
    """Build Settings from a temporary config.yaml"""

    def _make(credentials=True, **spotify_overrides) -> Settings:
        return Settings(str(write_config(credentials=credentials, **spotify_overrides)))

    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def sample_track_data():
    """Sample playlist-track object as returned by the playlist items endpoint"""
    return {
        'added_at': '2023-05-01T10:00:00Z',
        'track': {
            'id': 'test_track_123',
            'name': 'Test Song',
            'artists': [
                {'id': 'artist_123', 'name': 'Test Artist'},
                {'id': 'artist_456', 'name': 'Guest Artist'},
            ],
            'album': {
                'id': 'album_123',
                'name': 'Test Album',
                'album_type': 'album',
                'total_tracks': 12,
                'release_date': '2023-01-01',
                'release_date_precision': 'day',
                'artists': [{'id': 'artist_123', 'name': 'Test Artist'}]
            },
            'duration_ms': 210000,  # 3:30
            'explicit': False,
            'popularity': 75,
            'track_number': 3
        }
    }


def make_playlist_data(playlist_id, name, total=0, owner='user1'):
    """Simplified playlist object as returned by the user playlists endpoint"""
    return {
        'id': playlist_id,
        'name': name,
        'owner': {'id': owner, 'display_name': owner.title()},
        'tracks': {'total': total},
        'public': True,
        'collaborative': False,
        'snapshot_id': f'snap-{playlist_id}',
        'external_urls': {'spotify': f'https://open.spotify.com/playlist/{playlist_id}'},
    }


def make_track_item(index):
    """Minimal playlist-track object whose name encodes its position"""
    return {
        'track': {
            'name': f'Track {index}',
            'track_number': index + 1,
            'duration_ms': 1000,
            'artists': [{'name': 'Artist'}],
            'album': {'name': 'Album', 'artists': [{'name': 'Artist'}], 'release_date': '2020'},
        }
    }
