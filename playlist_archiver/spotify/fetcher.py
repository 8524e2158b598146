"""
Paginated retrieval of playlists and playlist items

Spotify returns collections in pages addressed by offset and limit. This
module walks those pages and assembles the complete, ordered collection.

Paging contract:
- offset starts at 0 and advances by the page size
- items are appended in the order the API returns them
- the total reported by the first page is the target length
- any page failure aborts the whole collection (ApiError propagates)

The loop cannot spin forever: it stops on the first empty page even if
the reported total was never reached, and it never returns more items
than that total.
"""

from typing import Any, Callable, Dict, List, Optional

from .client import SpotifyClient, get_spotify_client
from .models import SpotifyPlaylist
from ..config.settings import Settings, get_settings
from ..utils.exceptions import PlaylistNotFoundError
from ..utils.helpers import normalize_playlist_name
from ..utils.logger import get_logger


PageFetcher = Callable[[int, int], Dict[str, Any]]


class PlaylistFetcher:
    """
    Assembles complete collections from paginated Spotify endpoints

    Attributes:
        client: API client used for every page request
        page_size: Items requested per playlist-items page (max 100)
        playlists_page_size: Playlists requested per user-playlists page (max 50)
    """

    def __init__(self, client: Optional[SpotifyClient] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.client = client or get_spotify_client()
        self.page_size = int(self.settings.spotify.page_size)
        self.playlists_page_size = int(self.settings.spotify.playlists_page_size)
        self.logger = get_logger(__name__)

    def _collect_pages(self, fetch_page: PageFetcher, page_size: int, label: str) -> List[Dict[str, Any]]:
        """
        Request pages until the first page's total is reached

        Args:
            fetch_page: Callable taking (limit, offset) and returning a paging object
            page_size: Limit sent with every request
            label: Description used in log messages

        Returns:
            All items in server order

        Raises:
            ApiError: If any page request fails
        """
        items: List[Dict[str, Any]] = []
        offset = 0
        total: Optional[int] = None

        while True:
            page = fetch_page(page_size, offset)
            page_items = page.get('items') or []
            page_total = page.get('total') or 0

            if total is None:
                total = page_total
            elif page_total != total:
                self.logger.warning(
                    f"{label}: total changed from {total} to {page_total} while paging, "
                    f"keeping {total}"
                )

            items.extend(page_items)
            self.logger.debug(f"{label}: offset {offset}, got {len(page_items)}, {len(items)}/{total}")

            if len(items) >= total:
                break

            if not page_items:
                self.logger.warning(f"{label}: empty page at offset {offset}, stopping at {len(items)}/{total}")
                break

            offset += page_size

        if len(items) > total:
            self.logger.warning(f"{label}: received {len(items)} items for a total of {total}, truncating")
            del items[total:]

        return items

    def fetch_all_tracks(self, playlist_id: str) -> List[Dict[str, Any]]:
        """
        Fetch every item of a playlist

        Args:
            playlist_id: Spotify playlist ID

        Returns:
            Raw playlist-track objects in playlist order

        Raises:
            ApiError: If any page request fails
        """
        tracks = self._collect_pages(
            lambda limit, offset: self.client.get_playlist_tracks_page(playlist_id, limit=limit, offset=offset),
            self.page_size,
            f"playlist {playlist_id}"
        )
        self.logger.info(f"Fetched {len(tracks)} tracks for playlist {playlist_id}")
        return tracks

    def fetch_all_playlists(self, user_id: str) -> List[SpotifyPlaylist]:
        """
        Fetch every playlist of a user

        Args:
            user_id: Spotify user ID

        Returns:
            Playlists in the order Spotify lists them
        """
        items = self._collect_pages(
            lambda limit, offset: self.client.get_user_playlists_page(user_id, limit=limit, offset=offset),
            self.playlists_page_size,
            f"playlists of {user_id}"
        )
        # Deleted playlists can come back as null entries
        return [SpotifyPlaylist.from_spotify_data(item) for item in items if item]

    def find_playlist(self, user_id: str, name: str) -> SpotifyPlaylist:
        """
        Find a user's playlist by name, ignoring case

        Args:
            user_id: Spotify user ID
            name: Playlist name as typed by the user

        Returns:
            The first playlist whose name matches

        Raises:
            PlaylistNotFoundError: If no playlist matches
        """
        wanted = normalize_playlist_name(name)
        for playlist in self.fetch_all_playlists(user_id):
            if normalize_playlist_name(playlist.name) == wanted:
                return playlist
        raise PlaylistNotFoundError(name)
