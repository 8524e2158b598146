"""Test the command-line interface"""

import json
import pytest
from pathlib import Path
from unittest.mock import Mock, patch
from click.testing import CliRunner

from conftest import make_playlist_data, make_track_item
from playlist_archiver import __version__
from playlist_archiver.main import cli
from playlist_archiver.spotify.models import DownloadSummary, PlaylistInfo, SpotifyPlaylist
from playlist_archiver.utils.exceptions import AuthError, PlaylistNotFoundError


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch('playlist_archiver.main.configure_from_settings'):
        yield


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def archiver():
    with patch('playlist_archiver.main.PlaylistArchiver') as archiver_class:
        yield archiver_class.return_value


class TestCli:
    """Test global options and error handling"""

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])

        assert result.exit_code == 0
        assert f"Playlist-Archiver v{__version__}" in result.output

    def test_version_stops_before_subcommand(self, runner):
        with patch('playlist_archiver.main.PlaylistArchiver') as archiver_class:
            result = runner.invoke(cli, ['--version', 'playlists', 'list'])

        assert result.exit_code == 0
        assert result.output == f"Playlist-Archiver v{__version__}\n"
        archiver_class.assert_not_called()

    def test_no_command_shows_help(self, runner):
        result = runner.invoke(cli, [])

        assert result.exit_code == 0
        assert 'playlists' in result.output
        assert 'auth' in result.output

    def test_unknown_command_is_usage_error(self, runner):
        result = runner.invoke(cli, ['playlists', 'explode'])
        assert result.exit_code == 2

    def test_missing_config_file_fails(self, runner, tmp_path):
        result = runner.invoke(cli, ['--config', str(tmp_path / 'missing.yaml'), 'config', 'show'])

        assert result.exit_code == 1
        assert 'Config file not found' in result.output


class TestPlaylistCommands:
    """Test the playlists command group"""

    def test_list(self, runner, archiver):
        archiver.list_playlists.return_value = [
            SpotifyPlaylist.from_spotify_data(make_playlist_data('1', 'Gym')),
            SpotifyPlaylist.from_spotify_data(make_playlist_data('2', 'Chill')),
        ]

        result = runner.invoke(cli, ['playlists', 'list'])

        assert result.exit_code == 0
        assert result.output == "Playlists:\n- Gym (ID: 1)\n- Chill (ID: 2)\n"

    def test_download(self, runner, archiver):
        archiver.download_playlist.return_value = Path('downloads/Gym.json')

        result = runner.invoke(cli, ['playlists', 'download', 'Gym'])

        assert result.exit_code == 0
        archiver.download_playlist.assert_called_once_with('Gym')
        assert 'Gym.json' in result.output

    def test_download_unknown_playlist_exits_1(self, runner, archiver):
        archiver.download_playlist.side_effect = PlaylistNotFoundError('Nope')

        result = runner.invoke(cli, ['playlists', 'download', 'Nope'])

        assert result.exit_code == 1
        assert 'Error: Playlist not found: Nope' in result.output

    def test_authorization_failure_exits_1(self, runner, archiver):
        archiver.list_playlists.side_effect = AuthError("State mismatch: forged != expected")

        result = runner.invoke(cli, ['playlists', 'list'])

        assert result.exit_code == 1
        assert 'State mismatch' in result.output

    def test_download_all_reports_failures(self, runner, archiver):
        summary = DownloadSummary()
        summary.names.update({'p1': 'Gym', 'p2': 'Chill'})
        summary.downloaded['p1'] = Path('downloads/Gym.json')
        summary.failed['p2'] = 'Spotify API error (500)'
        archiver.download_all.return_value = summary

        result = runner.invoke(cli, ['playlists', 'download-all'])

        assert result.exit_code == 1
        assert 'Downloaded: 1/2' in result.output
        assert 'Chill: Spotify API error (500)' in result.output

    def test_download_all_success(self, runner, archiver):
        summary = DownloadSummary()
        summary.names['p1'] = 'Gym'
        summary.downloaded['p1'] = Path('downloads/Gym.json')
        archiver.download_all.return_value = summary

        result = runner.invoke(cli, ['playlists', 'download-all'])

        assert result.exit_code == 0
        assert 'Downloaded: 1/1' in result.output

    def test_show_info(self, runner, archiver):
        playlist = SpotifyPlaylist.from_spotify_data(make_playlist_data('p1', 'Gym', total=3))
        archiver.show_info.return_value = PlaylistInfo(
            playlist=playlist,
            raw_path=Path('downloads/Gym.json'),
            cleaned_path=Path('cleaned/Gym.json'),
            raw_items=3,
            duration_ms=630000,
        )

        result = runner.invoke(cli, ['playlists', 'show-info', 'Gym'])

        assert result.exit_code == 0
        assert 'Playlist: Gym' in result.output
        assert 'Downloaded: 3 tracks (up to date)' in result.output
        assert 'Total duration: 10:30' in result.output
        assert 'Cleaned: No' in result.output

    def test_create_clean_all_works_offline(self, runner, write_config, tmp_path):
        config_path = write_config()
        downloads = tmp_path / 'downloads'
        downloads.mkdir()
        (downloads / 'Gym.json').write_text(json.dumps([make_track_item(0)]), encoding='utf-8')

        with patch('playlist_archiver.main.PlaylistArchiver') as archiver_class, \
                patch('playlist_archiver.config.auth.requests.post') as mock_post:
            result = runner.invoke(cli, ['--config', str(config_path), 'playlists', 'create-clean-all'])

        assert result.exit_code == 0, result.output
        assert 'Cleaned 1 playlists' in result.output
        cleaned = json.loads((tmp_path / 'cleaned' / 'Gym.json').read_text(encoding='utf-8'))
        assert cleaned[0]['track'] == 'Track 0'
        archiver_class.assert_not_called()
        mock_post.assert_not_called()


class TestAuthCommands:
    """Test the auth command group"""

    @pytest.fixture
    def auth_manager(self):
        with patch('playlist_archiver.main.get_auth') as get_auth:
            yield get_auth.return_value

    @pytest.fixture
    def spotify_client(self):
        with patch('playlist_archiver.main.get_spotify_client') as get_client:
            get_client.return_value.get_current_user.return_value = {
                'id': 'user1', 'display_name': 'User One', 'country': 'IT'
            }
            yield get_client.return_value

    def test_login_runs_authorization(self, runner, auth_manager, spotify_client):
        auth_manager.is_authenticated.return_value = False

        result = runner.invoke(cli, ['auth', 'login'])

        assert result.exit_code == 0
        auth_manager.get_valid_token.assert_called_once()
        assert 'Successfully authenticated as: User One' in result.output

    def test_login_when_already_authenticated(self, runner, auth_manager, spotify_client):
        auth_manager.is_authenticated.return_value = True

        result = runner.invoke(cli, ['auth', 'login'])

        assert result.exit_code == 0
        auth_manager.get_valid_token.assert_not_called()
        assert 'Already authenticated as: User One' in result.output

    def test_login_failure_exits_1(self, runner, auth_manager):
        auth_manager.is_authenticated.return_value = False
        auth_manager.get_valid_token.side_effect = AuthError("No authorization callback received within 300 seconds")

        result = runner.invoke(cli, ['auth', 'login'])

        assert result.exit_code == 1
        assert 'No authorization callback' in result.output

    def test_logout(self, runner, auth_manager):
        auth_manager.revoke_token.return_value = True

        result = runner.invoke(cli, ['auth', 'logout'])

        assert result.exit_code == 0
        assert 'Successfully logged out' in result.output

    def test_status_not_authenticated(self, runner, auth_manager, settings):
        auth_manager.is_authenticated.return_value = False

        with patch('playlist_archiver.main.get_settings', return_value=settings):
            result = runner.invoke(cli, ['auth', 'status'])

        assert result.exit_code == 0
        assert 'Not authenticated' in result.output
        assert 'auth login' in result.output

    def test_status_authenticated(self, runner, auth_manager, spotify_client, settings):
        auth_manager.is_authenticated.return_value = True
        auth_manager.stored_token.return_value = Mock(expiry=None, scope='playlist-read-private')

        with patch('playlist_archiver.main.get_settings', return_value=settings):
            result = runner.invoke(cli, ['auth', 'status'])

        assert result.exit_code == 0
        assert 'Authentication Status: Authenticated' in result.output
        assert 'User: User One' in result.output


class TestConfigCommands:
    """Test the config command group"""

    def test_show_hides_secrets(self, runner, write_config):
        result = runner.invoke(cli, ['--config', str(write_config()), 'config', 'show'])

        assert result.exit_code == 0
        assert 'Client credentials: set' in result.output
        assert 'test-secret' not in result.output
        assert 'Authorization timeout: 5s' in result.output
