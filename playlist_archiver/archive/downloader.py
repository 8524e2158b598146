"""
Download playlists from Spotify into the local archive

A downloaded playlist is the complete array of raw playlist-track objects,
in playlist order, written to ``<downloads>/<playlist name>.json``.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Optional, Set

from ..config.settings import Settings, get_settings
from ..spotify.client import SpotifyClient, get_spotify_client
from ..spotify.fetcher import PlaylistFetcher
from ..spotify.models import DownloadSummary, PlaylistInfo, SpotifyPlaylist
from ..utils.exceptions import PlaylistArchiverError
from ..utils.helpers import playlist_filename, read_json, write_json
from ..utils.logger import create_operation_logger, get_logger


class PlaylistArchiver:
    """
    Lists, inspects, and downloads the current user's playlists

    Attributes:
        client: Spotify API client
        fetcher: Pagination engine built on the same client
        downloads_dir: Directory receiving raw playlist files
        cleaned_dir: Directory holding cleaned playlist files
    """

    def __init__(
        self,
        client: Optional[SpotifyClient] = None,
        fetcher: Optional[PlaylistFetcher] = None,
        settings: Optional[Settings] = None
    ):
        self.settings = settings or get_settings()
        self.client = client or get_spotify_client()
        self.fetcher = fetcher or PlaylistFetcher(self.client, self.settings)
        self.downloads_dir = self.settings.get_downloads_directory()
        self.cleaned_dir = self.settings.get_cleaned_directory()
        self.logger = get_logger(__name__)
        self._user_id: Optional[str] = None

    @property
    def user_id(self) -> str:
        """ID of the authenticated user, fetched once"""
        if self._user_id is None:
            self._user_id = self.client.get_current_user()['id']
        return self._user_id

    def raw_path(self, playlist_name: str) -> Path:
        return self.downloads_dir / playlist_filename(playlist_name)

    def cleaned_path(self, playlist_name: str) -> Path:
        return self.cleaned_dir / playlist_filename(playlist_name)

    def list_playlists(self) -> List[SpotifyPlaylist]:
        return self.fetcher.fetch_all_playlists(self.user_id)

    def find_playlist(self, name: str) -> SpotifyPlaylist:
        return self.fetcher.find_playlist(self.user_id, name)

    def save_playlist(self, playlist: SpotifyPlaylist, path: Optional[Path] = None) -> Path:
        """
        Fetch every item of a playlist and write the raw array to disk

        Args:
            playlist: Playlist to download
            path: Destination file, defaults to the file named after the playlist

        Returns:
            Path of the written file

        Raises:
            ApiError: If fetching fails (nothing is written)
            StorageError: If the file cannot be written
        """
        tracks = self.fetcher.fetch_all_tracks(playlist.id)
        path = write_json(path or self.raw_path(playlist.name), tracks)
        self.logger.info(f"Saved '{playlist.name}' ({len(tracks)} tracks) to {path}")
        return path

    def download_playlist(self, name: str) -> Path:
        """
        Download one playlist by name (case-insensitive)

        Raises:
            PlaylistNotFoundError: If the user has no playlist with that name
        """
        return self.save_playlist(self.find_playlist(name))

    def download_all(self) -> DownloadSummary:
        """
        Download every playlist of the user

        A failing playlist is recorded in the summary and the remaining
        playlists are still downloaded. Failing to list the playlists
        aborts the whole run.

        Playlists whose file names collide (same name, or names that only
        differ in characters stripped from file names) get the playlist ID
        appended, so no playlist overwrites another one in the same run.

        Returns:
            Summary of written files and failures, keyed by playlist ID
        """
        summary = DownloadSummary(start_time=datetime.now())
        playlists = self.list_playlists()
        used_filenames: Set[str] = set()

        operation = create_operation_logger(__name__, "Downloading playlists")
        operation.start(f"Downloading {len(playlists)} playlists")

        for index, playlist in enumerate(playlists, start=1):
            summary.names[playlist.id] = playlist.name

            filename = playlist_filename(playlist.name)
            if filename.casefold() in used_filenames:
                filename = playlist_filename(f"{playlist.name} ({playlist.id})")
                self.logger.warning(
                    f"Playlist '{playlist.name}' ({playlist.id}) clashes with another playlist, saving as {filename}"
                )
            used_filenames.add(filename.casefold())

            try:
                summary.downloaded[playlist.id] = self.save_playlist(playlist, self.downloads_dir / filename)
            except PlaylistArchiverError as e:
                summary.failed[playlist.id] = str(e)
                self.logger.error(f"Error downloading playlist {playlist.name}: {e}")
            operation.progress(playlist.name, index, len(playlists))

        summary.end_time = datetime.now()
        operation.complete(f"Downloaded {len(summary.downloaded)}/{summary.total} playlists")
        return summary

    def show_info(self, name: str) -> PlaylistInfo:
        """
        Describe a playlist and the state of its local copies

        Metadata is fetched fresh from the playlist endpoint rather than
        taken from the playlist listing.

        Raises:
            PlaylistNotFoundError: If the user has no playlist with that name
            StorageError: If a local copy exists but cannot be parsed
        """
        found = self.find_playlist(name)
        playlist = SpotifyPlaylist.from_spotify_data(self.client.get_playlist(found.id))
        info = PlaylistInfo(
            playlist=playlist,
            raw_path=self.raw_path(playlist.name),
            cleaned_path=self.cleaned_path(playlist.name)
        )

        raw_items = read_json(info.raw_path)
        if isinstance(raw_items, list):
            info.raw_items = len(raw_items)
            info.duration_ms = sum(
                (item.get('track') or {}).get('duration_ms') or 0
                for item in raw_items if isinstance(item, dict)
            )

        cleaned_items = read_json(info.cleaned_path)
        if isinstance(cleaned_items, list):
            info.cleaned_items = len(cleaned_items)

        return info
