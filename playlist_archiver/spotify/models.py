"""
Data models for Spotify playlist information

This module defines the data structures that flow through Playlist-Archiver:

1. **SpotifyPlaylist**: Playlist metadata as returned by the playlists endpoints
2. **CleanedTrack**: Flattened projection of a raw playlist-track object
3. **PlaylistInfo / DownloadSummary**: Results reported back to the CLI

Raw playlist-track objects are intentionally *not* modelled: they are written
to disk exactly as the API returned them, so they stay plain dictionaries.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Dict, Any


@dataclass
class SpotifyPlaylist:
    """
    Playlist metadata from the Spotify Web API

    Built from the simplified playlist objects of the user-playlists endpoint
    or the full object of the playlist endpoint; track content is fetched
    separately.

    Attributes:
        id: Spotify's unique playlist identifier for API operations
        name: Playlist title as set by owner
        owner_id: Spotify user ID of playlist owner
        owner_name: Display name of playlist owner
        total_tracks: Number of items in the playlist (from API)
        description: Playlist description text (may contain HTML)
        public: Visibility flag, None when Spotify does not report it
        collaborative: Flag indicating multiple users can edit
        snapshot_id: Version identifier for change detection
        external_urls: Links to the playlist on external platforms
    """
    id: str
    name: str
    owner_id: str
    owner_name: str
    total_tracks: int
    description: str = ""
    public: Optional[bool] = None
    collaborative: bool = False
    snapshot_id: Optional[str] = None
    external_urls: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_spotify_data(cls, data: Dict[str, Any]) -> 'SpotifyPlaylist':
        """
        Factory method for constructing SpotifyPlaylist from Spotify API response

        Args:
            data: Raw playlist data from Spotify API response

        Returns:
            SpotifyPlaylist instance with normalized metadata
        """
        owner = data.get('owner') or {}
        tracks = data.get('tracks') or {}
        return cls(
            id=data['id'],
            name=data.get('name') or '',
            owner_id=owner.get('id', ''),
            # Handle missing display names gracefully, fallback to user ID
            owner_name=owner.get('display_name') or owner.get('id', ''),
            total_tracks=tracks.get('total', 0),
            description=data.get('description') or '',
            public=data.get('public'),
            collaborative=data.get('collaborative', False),
            snapshot_id=data.get('snapshot_id'),
            external_urls=data.get('external_urls') or {},
        )

    @property
    def url(self) -> Optional[str]:
        return self.external_urls.get('spotify')


def join_artist_names(artists: Optional[List[Dict[str, Any]]]) -> str:
    """Join artist names with ", " in the order Spotify lists them"""
    return ", ".join(artist.get('name', '') for artist in artists or [])


@dataclass
class CleanedTrack:
    """
    Flattened view of one playlist item

    Field names match the keys written to the cleaned JSON files.
    """
    track: str
    track_number: int
    track_artists: str
    album: str
    album_artists: str
    release_date: str

    @classmethod
    def from_raw(cls, item: Dict[str, Any]) -> 'CleanedTrack':
        """
        Project a raw playlist-track object onto its cleaned form

        Items whose track is null (removed or unavailable content) produce
        an empty record, so the cleaned list stays aligned with the raw one.

        Args:
            item: Playlist-track object as stored in the downloads directory
        """
        track = item.get('track') or {}
        album = track.get('album') or {}
        return cls(
            track=track.get('name') or '',
            track_number=track.get('track_number') or 0,
            track_artists=join_artist_names(track.get('artists')),
            album=album.get('name') or '',
            album_artists=join_artist_names(album.get('artists')),
            release_date=album.get('release_date') or '',
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'track': self.track,
            'track_number': self.track_number,
            'track_artists': self.track_artists,
            'album': self.album,
            'album_artists': self.album_artists,
            'release_date': self.release_date,
        }


@dataclass
class PlaylistInfo:
    """
    Remote playlist metadata combined with the state of the local archive

    Attributes:
        playlist: Playlist metadata from Spotify
        raw_path: Location of the downloaded file (may not exist yet)
        cleaned_path: Location of the cleaned file (may not exist yet)
        raw_items: Item count of the downloaded file, None if absent
        cleaned_items: Item count of the cleaned file, None if absent
        duration_ms: Total duration of the downloaded tracks
    """
    playlist: SpotifyPlaylist
    raw_path: Path
    cleaned_path: Path
    raw_items: Optional[int] = None
    cleaned_items: Optional[int] = None
    duration_ms: int = 0

    @property
    def is_downloaded(self) -> bool:
        return self.raw_items is not None

    @property
    def is_cleaned(self) -> bool:
        return self.cleaned_items is not None

    @property
    def is_up_to_date(self) -> bool:
        """True when the local copy holds as many items as Spotify reports"""
        return self.raw_items == self.playlist.total_tracks


@dataclass
class DownloadSummary:
    """
    Outcome of downloading every playlist of the user

    Attributes:
        downloaded: Playlist ID -> written file, in download order
        failed: Playlist ID -> error message
        names: Playlist ID -> playlist name, for display
        start_time: When the batch started
        end_time: When the batch finished
    """
    downloaded: Dict[str, Path] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)
    names: Dict[str, str] = field(default_factory=dict)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def total(self) -> int:
        return len(self.downloaded) + len(self.failed)

    @property
    def success(self) -> bool:
        return not self.failed

    @property
    def duration(self) -> Optional[float]:
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def __str__(self) -> str:
        return f"DownloadSummary({len(self.downloaded)}/{self.total} playlists downloaded)"
