"""Test utilities and helpers"""

import json
import os
import pytest

import playlist_archiver
from playlist_archiver.utils.exceptions import (
    PlaylistArchiverError,
    ApiError,
    PlaylistNotFoundError,
    StorageError,
)
from playlist_archiver.utils.helpers import (
    read_json,
    write_json,
    sanitize_filename,
    playlist_filename,
    normalize_playlist_name,
    format_duration,
)
from playlist_archiver.utils.logger import parse_size


class TestHelpers:
    """Test helper functions"""

    def test_sanitize_filename(self):
        """Test filename sanitization"""
        assert sanitize_filename("Test/File\\Name") == "TestFileName"
        assert sanitize_filename("CON") == "_CON"  # Reserved Windows name
        assert sanitize_filename("Song: Title?") == "Song Title"
        assert sanitize_filename("") == "unknown"
        assert sanitize_filename("...") == "unknown"

    def test_playlist_filename(self):
        assert playlist_filename("Gym") == "Gym.json"
        assert playlist_filename("Rock/Metal") == "RockMetal.json"

    def test_normalize_playlist_name(self):
        assert normalize_playlist_name("  Road  Trip ") == "road trip"
        assert normalize_playlist_name("GYM") == normalize_playlist_name("gym")
        assert normalize_playlist_name("") == ""

    def test_format_duration(self):
        """Test duration formatting"""
        assert format_duration(90) == "1:30"
        assert format_duration(3661) == "1:01:01"
        assert format_duration(0) == "0:00"
        assert format_duration(-10) == "0:00"

    def test_parse_size(self):
        assert parse_size("10MB") == 10 * 1024 ** 2
        assert parse_size("512 kb") == 512 * 1024
        with pytest.raises(ValueError):
            parse_size("ten megabytes")


class TestJsonFiles:
    """Test JSON persistence helpers"""

    def test_read_missing_file_returns_default(self, tmp_path):
        assert read_json(tmp_path / "missing.json") is None
        assert read_json(tmp_path / "missing.json", default={}) == {}

    def test_write_then_read(self, tmp_path):
        data = [{'name': 'Café', 'n': 1}]
        path = write_json(tmp_path / "nested" / "dir" / "data.json", data)

        assert path.exists()
        assert read_json(path) == data
        # Non-ASCII is written as-is and the file ends with a newline
        text = path.read_text(encoding='utf-8')
        assert 'Café' in text
        assert text.endswith('\n')

    def test_write_empty_list(self, tmp_path):
        path = write_json(tmp_path / "empty.json", [])
        assert json.loads(path.read_text(encoding='utf-8')) == []

    @pytest.mark.skipif(os.name != 'posix', reason="POSIX permissions")
    def test_write_with_mode(self, tmp_path):
        path = write_json(tmp_path / "secret.json", {'a': 1}, mode=0o600)
        assert path.stat().st_mode & 0o777 == 0o600

    def test_read_invalid_json_raises(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding='utf-8')

        with pytest.raises(StorageError) as exc_info:
            read_json(path)
        assert exc_info.value.details['file_path'] == str(path)

    def test_write_unserializable_raises(self, tmp_path):
        with pytest.raises(StorageError):
            write_json(tmp_path / "bad.json", {'when': object()})

    def test_credentials_and_token_survive_storage(self, tmp_path):
        credentials = {'client_id': 'abc', 'client_secret': 'xyz'}
        token = {
            'access_token': 'token',
            'token_type': 'Bearer',
            'refresh_token': 'refresh',
            'expiry': '2030-01-01T00:00:00+00:00',
        }

        assert read_json(write_json(tmp_path / "config.json", credentials)) == credentials
        assert read_json(write_json(tmp_path / "token.json", token, mode=0o600)) == token


class TestExceptions:
    """Test exception hierarchy"""

    def test_all_errors_share_base(self):
        assert issubclass(ApiError, PlaylistArchiverError)
        assert issubclass(StorageError, PlaylistArchiverError)
        assert issubclass(PlaylistNotFoundError, PlaylistArchiverError)

    def test_playlist_not_found_message(self):
        error = PlaylistNotFoundError("Gym")
        assert str(error) == "Playlist not found: Gym"
        assert error.name == "Gym"
        assert error.details == {'playlist_name': 'Gym'}

    def test_api_error_status(self):
        error = ApiError("boom", status=503)
        assert error.status == 503
        assert error.details == {}
        assert ApiError("offline").status is None


class TestPackageMetadata:
    """Test package level metadata"""

    def test_metadata_is_project_neutral(self):
        assert playlist_archiver.__author__ == "Playlist-Archiver Team"
        assert playlist_archiver.__version__ == "0.1.0"
