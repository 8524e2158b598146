"""
Local playlist archive: raw downloads and their cleaned projection
"""

from .cleaner import PlaylistCleaner
from .downloader import PlaylistArchiver

__all__ = [
    'PlaylistArchiver',   # Lists, inspects, and downloads playlists
    'PlaylistCleaner',    # Turns raw playlist files into cleaned ones
]
