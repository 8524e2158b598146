"""
Spotify API client for playlist and track retrieval

Thin, rate-limited wrapper around spotipy exposing exactly the endpoints
Playlist-Archiver needs:

- current user profile
- playlists of a user (one page per call)
- items of a playlist (one page per call)
- a single playlist's metadata

Pagination is *not* done here; PlaylistFetcher drives the offsets. Every
failure surfaces as ApiError and nothing is retried.

Usage Examples:

    client = get_spotify_client()
    user = client.get_current_user()
    page = client.get_playlist_tracks_page(playlist_id, limit=100, offset=0)
"""

import time
from typing import Any, Callable, Dict, Optional
import requests
import spotipy
from spotipy.exceptions import SpotifyException

from ..config.auth import SpotifyAuth, get_auth
from ..config.settings import Settings, get_settings
from ..utils.exceptions import ApiError
from ..utils.logger import get_logger


class SpotifyClient:
    """
    Spotify Web API client with request throttling and error translation

    The authenticated spotipy connection is obtained on each request,
    so commands that never call the API never trigger the
    authorization flow.

    Attributes:
        auth: Authentication manager providing access tokens
        settings: Application settings
        min_request_interval: Minimum seconds between two requests
    """

    def __init__(self, auth: Optional[SpotifyAuth] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.auth = auth or get_auth()
        self.logger = get_logger(__name__)

        self.last_request_time = 0.0
        self.min_request_interval = self.settings.spotify.request_interval

    @property
    def client(self) -> spotipy.Spotify:
        """
        Authenticated spotipy connection with a currently valid token

        Asked from the authentication manager on every access, so an
        access token that expires during a long run is refreshed before
        the next request instead of failing with 401.

        Raises:
            AuthError: If no token can be obtained
        """
        return self.auth.get_spotify_client()

    def _rate_limit(self) -> None:
        """Sleep so that requests are at least min_request_interval apart"""
        time_since_last = time.time() - self.last_request_time
        if time_since_last < self.min_request_interval:
            time.sleep(self.min_request_interval - time_since_last)
        self.last_request_time = time.time()

    def _make_request(self, func: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Rate-limited API request wrapper

        Args:
            func: Bound spotipy method to call
            *args: Positional arguments for the API method
            **kwargs: Keyword arguments for the API method

        Returns:
            Decoded JSON response

        Raises:
            ApiError: For HTTP errors (with status) and network failures
        """
        self._rate_limit()
        endpoint = getattr(func, '__name__', str(func))

        try:
            return func(*args, **kwargs)
        except SpotifyException as e:
            self.logger.debug(f"{endpoint} failed with HTTP {e.http_status}: {e.msg}")
            raise ApiError(
                f"Spotify API error ({e.http_status}) in {endpoint}: {e.msg}",
                details={'endpoint': endpoint, 'reason': getattr(e, 'reason', None)},
                status=e.http_status
            )
        except requests.RequestException as e:
            self.logger.debug(f"{endpoint} failed: {e}")
            raise ApiError(f"Network error in {endpoint}: {e}", details={'endpoint': endpoint})

    def get_current_user(self) -> Dict[str, Any]:
        """
        Retrieve the authenticated user's profile

        Returns:
            User object (id, display_name, country, followers, ...)
        """
        return self._make_request(self.client.current_user)

    def get_user_playlists_page(self, user_id: str, limit: int = 50, offset: int = 0) -> Dict[str, Any]:
        """
        Retrieve one page of a user's playlists

        Args:
            user_id: Spotify user ID
            limit: Page size (1-50)
            offset: Index of the first playlist to return

        Returns:
            Paging object with 'items' (simplified playlists) and 'total'
        """
        return self._make_request(self.client.user_playlists, user_id, limit=limit, offset=offset)

    def get_playlist_tracks_page(self, playlist_id: str, limit: int = 100, offset: int = 0) -> Dict[str, Any]:
        """
        Retrieve one page of a playlist's items

        Args:
            playlist_id: Spotify playlist ID
            limit: Page size (1-100)
            offset: Index of the first item to return

        Returns:
            Paging object with 'items' (playlist-track objects) and 'total'
        """
        return self._make_request(self.client.playlist_items, playlist_id, limit=limit, offset=offset)

    def get_playlist(self, playlist_id: str) -> Dict[str, Any]:
        """Retrieve a playlist's metadata without its items"""
        return self._make_request(
            self.client.playlist,
            playlist_id,
            fields="id,name,description,owner,public,collaborative,snapshot_id,external_urls,tracks.total"
        )


_client_instance: Optional[SpotifyClient] = None


def get_spotify_client() -> SpotifyClient:
    """
    Get the global Spotify client instance

    Returns:
        Shared SpotifyClient bound to the global authentication manager
    """
    global _client_instance
    if _client_instance is None:
        _client_instance = SpotifyClient()
    return _client_instance


def reset_spotify_client() -> None:
    """Drop the global client, e.g. after logout or a settings reload"""
    global _client_instance
    _client_instance = None
