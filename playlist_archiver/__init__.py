"""
Playlist-Archiver: Archive Spotify playlists as local JSON

Playlist-Archiver logs in to Spotify with the OAuth2 authorization code
flow, downloads the complete item list of the user's playlists, and turns
those raw dumps into a compact, flattened form that is easy to read, diff,
or feed into other tools.

## Package Layout

**Configuration (`config/`)**
- Settings from config.yaml, config.json credentials, and environment variables
- OAuth2 authorization with a one-shot local callback listener
- Token persistence, validation, and refresh

**Spotify Integration (`spotify/`)**
- Rate-limited spotipy wrapper returning one page per call
- Pagination engine assembling complete, ordered collections
- Data models for playlists and cleaned tracks

**Archive (`archive/`)**
- Raw playlist downloads into the downloads directory
- Cleaning of every downloaded playlist into the cleaned directory

**Utilities (`utils/`)**
- Exception hierarchy, logging, and JSON file helpers

## Typical Usage

    playlist-archiver auth login
    playlist-archiver playlists list
    playlist-archiver playlists download "Gym"
    playlist-archiver playlists download-all
    playlist-archiver playlists create-clean-all
"""

# Following semantic versioning (major.minor.patch)
__version__ = "0.1.0"

__author__ = "Playlist-Archiver Team"

__description__ = "Archive Spotify playlists as local JSON files"

__all__ = [
    "__version__",
    "__author__",
    "__description__",
]
