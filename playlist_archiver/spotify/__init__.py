"""
Spotify integration package for Playlist-Archiver

- client: rate-limited wrapper around spotipy, one page per call
- fetcher: pagination engine assembling complete collections
- models: playlist metadata and the cleaned track projection
"""

from .models import (
    SpotifyPlaylist,
    CleanedTrack,
    PlaylistInfo,
    DownloadSummary,
)
from .client import SpotifyClient, get_spotify_client, reset_spotify_client
from .fetcher import PlaylistFetcher

__all__ = [
    # Client components
    'get_spotify_client',
    'reset_spotify_client',
    'SpotifyClient',
    'PlaylistFetcher',

    # Data models
    'SpotifyPlaylist',
    'CleanedTrack',
    'PlaylistInfo',
    'DownloadSummary',
]
